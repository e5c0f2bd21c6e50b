"""Exception hierarchy for the jobsync scoring engine."""


class JobSyncError(Exception):
    """Base class for all jobsync errors."""


class ScoringError(JobSyncError, ValueError):
    """Raised when a computed score violates an engine invariant."""


class EmbeddingError(JobSyncError):
    """Raised by embedding clients; never escapes the provider boundary."""


__all__ = ["EmbeddingError", "JobSyncError", "ScoringError"]
