"""Experience dimension: continuous years-ratio curve."""

from __future__ import annotations

from typing import Optional


def required_years(value: Optional[float]) -> float:
    """Required years, treating 0 or missing as one year."""

    return value if value and value > 0 else 1.0


def experience_ratio(required: Optional[float], applicant: Optional[float]) -> float:
    return max(0.0, applicant or 0.0) / required_years(required)


def compute_years_score(required: Optional[float], applicant: Optional[float]) -> float:
    """Map applicant years onto 0-100.

    No experience scores 0, under the requirement rises from 40 to 80, and
    meeting it rises from 80 up to 100 at three times the requirement.
    """

    applicant_years = max(0.0, applicant or 0.0)
    if applicant_years == 0:
        return 0.0

    ratio = applicant_years / required_years(required)
    if ratio < 1:
        return max(0.0, min(80.0, 40 + 40 * ratio))

    extra = min(ratio - 1, 2)
    return max(80.0, min(100.0, 80 + extra / 2 * 20))


def relevance_score(applicant: Optional[float]) -> float:
    # Stand-in for work-history relevance: any experience counts as relevant.
    return 100.0 if (applicant or 0) > 0 else 0.0


def compute_experience_score(required: Optional[float], applicant: Optional[float]) -> float:
    return compute_years_score(required, applicant) * 0.7 + relevance_score(applicant) * 0.3


__all__ = [
    "compute_experience_score",
    "compute_years_score",
    "experience_ratio",
    "relevance_score",
    "required_years",
]
