"""Runtime settings for the jobsync engine."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

DEFAULT_EMBEDDINGS_URL = (
    "https://router.huggingface.co/hf-inference/models/"
    "sentence-transformers/all-MiniLM-L6-v2/pipeline/feature-extraction"
)


class Settings(BaseModel):
    """Settings read from the environment.

    Scoring weights and thresholds are fixed by the algorithms and are not
    configurable here; these settings only cover the external embedding
    service, concurrency and logging.
    """

    hf_api_key: Optional[str] = Field(
        default=None, description="Access token for the embedding endpoint"
    )
    embeddings_url: str = Field(
        default=DEFAULT_EMBEDDINGS_URL,
        description="Feature-extraction endpoint returning sentence embeddings",
    )
    embedding_timeout: float = Field(
        10.0, gt=0, description="Seconds to wait for a single embedding call"
    )
    max_concurrency: int = Field(
        5, ge=1, description="Applicants scored concurrently within a ranking batch"
    )
    log_level: str = Field("INFO", description="Root log level for the jobsync logger")

    @model_validator(mode="after")
    def _normalize_log_level(self) -> "Settings":
        level = self.log_level.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {self.log_level}")
        self.log_level = level
        return self

    @property
    def embeddings_enabled(self) -> bool:
        return bool(self.hf_api_key)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``).

    A ``.env`` file in the working directory is loaded first when reading the
    real process environment.
    """

    if environ is None:
        load_dotenv()
        environ = os.environ

    values = {
        "hf_api_key": environ.get("HF_API_KEY") or None,
        "embeddings_url": environ.get("HF_EMBEDDINGS_API_URL") or DEFAULT_EMBEDDINGS_URL,
    }
    if environ.get("JOBSYNC_EMBEDDING_TIMEOUT"):
        values["embedding_timeout"] = environ["JOBSYNC_EMBEDDING_TIMEOUT"]
    if environ.get("JOBSYNC_MAX_CONCURRENCY"):
        values["max_concurrency"] = environ["JOBSYNC_MAX_CONCURRENCY"]
    if environ.get("JOBSYNC_LOG_LEVEL"):
        values["log_level"] = environ["JOBSYNC_LOG_LEVEL"]
    return Settings(**values)


__all__ = ["DEFAULT_EMBEDDINGS_URL", "Settings", "load_settings"]
