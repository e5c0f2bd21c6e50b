"""jobsync applicant-to-job matching engine package."""

from .algorithms import (
    Algorithm,
    algorithm1_weighted_sum,
    algorithm2_skill_experience_composite,
    algorithm3_eligibility_education_tiebreaker,
    ensemble_score,
    ensemble_with_details,
    run_algorithm,
)
from .config import Settings, load_settings
from .embeddings import EmbeddingCache, HuggingFaceEmbeddingProvider, NullEmbeddingProvider
from .engine import RankingEngine
from .models import (
    AlgorithmDetails,
    ApplicantComparison,
    ApplicantProfile,
    EligibilityRecord,
    JobRequirement,
    RankedApplicant,
    ScoreBreakdown,
)
from .statistics import (
    calculate_percentile,
    calculate_statistics,
    distribution,
    gap_from_top,
    is_top_tier,
    ordinal,
    performance_label,
)

__all__ = [
    "Algorithm",
    "AlgorithmDetails",
    "ApplicantComparison",
    "ApplicantProfile",
    "EligibilityRecord",
    "EmbeddingCache",
    "HuggingFaceEmbeddingProvider",
    "JobRequirement",
    "NullEmbeddingProvider",
    "RankedApplicant",
    "RankingEngine",
    "ScoreBreakdown",
    "Settings",
    "algorithm1_weighted_sum",
    "algorithm2_skill_experience_composite",
    "algorithm3_eligibility_education_tiebreaker",
    "calculate_percentile",
    "calculate_statistics",
    "distribution",
    "ensemble_score",
    "ensemble_with_details",
    "gap_from_top",
    "is_top_tier",
    "load_settings",
    "ordinal",
    "performance_label",
    "run_algorithm",
]
