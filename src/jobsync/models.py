"""Data models for the jobsync matching engine."""

from __future__ import annotations

import math
from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _clean_strings(values: Any) -> Any:
    if values is None:
        return []
    if not isinstance(values, list):
        return values
    return [item.strip() for item in values if isinstance(item, str) and item.strip()]


def _clamp_years(value: Any) -> float:
    # Invalid, NaN and negative years all clamp to 0.
    try:
        years = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(years) or years < 0:
        return 0.0
    return years


class EligibilityRecord(BaseModel):
    """A civil-service eligibility, license or certification held by an applicant."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(
        ...,
        validation_alias=AliasChoices("title", "eligibility_title", "eligibilityTitle"),
        description="Eligibility title as entered or canonicalised upstream",
    )


class JobRequirement(BaseModel):
    """Requirements of a single job posting, as supplied by the normaliser."""

    model_config = ConfigDict(frozen=True)

    title: str = Field("", description="Job title")
    description: Optional[str] = Field(default=None, description="Free-text job description")
    degree_requirement: str = Field(
        "",
        description="Degree requirement text, possibly an AND/OR list expression",
    )
    eligibilities: List[str] = Field(
        default_factory=list,
        description="Ordered eligibility requirement lines; each line may be an AND/OR group",
    )
    skills: List[str] = Field(default_factory=list, description="Required skills")
    years_of_experience: float = Field(
        0.0, ge=0, description="Minimum years of experience; 0 means unspecified"
    )
    degree_level: Optional[str] = Field(
        default=None, description="Canonical degree level tag (e.g. 'bachelor')"
    )
    degree_field_group: Optional[str] = Field(
        default=None, description="Canonical degree field group tag"
    )

    @field_validator("degree_requirement", mode="before")
    def _default_degree(value: Any) -> Any:
        return "" if value is None else value

    @field_validator("eligibilities", "skills", mode="before")
    def _strip_values(values: Any) -> Any:
        return _clean_strings(values)

    @field_validator("years_of_experience", mode="before")
    def _clamp_negative(value: Any) -> Any:
        return _clamp_years(value)


class ApplicantProfile(BaseModel):
    """Qualifications of a single applicant."""

    model_config = ConfigDict(frozen=True)

    applicant_id: Optional[str] = Field(default=None, description="Identifier used in rankings")
    name: Optional[str] = Field(default=None, description="Display name")
    highest_educational_attainment: str = Field(
        "", description="Highest degree or educational attainment, free text"
    )
    eligibilities: List[EligibilityRecord] = Field(
        default_factory=list, description="Eligibilities held by the applicant"
    )
    skills: List[str] = Field(default_factory=list, description="Skills listed by the applicant")
    total_years_experience: float = Field(
        0.0, ge=0, description="Total years of work experience"
    )
    work_experience_titles: List[str] = Field(
        default_factory=list, description="Job titles from the work history"
    )
    degree_level: Optional[str] = Field(default=None, description="Canonical degree level tag")
    degree_field_group: Optional[str] = Field(
        default=None, description="Canonical degree field group tag"
    )

    @field_validator("highest_educational_attainment", mode="before")
    def _default_degree(value: Any) -> Any:
        return "" if value is None else value

    @field_validator("eligibilities", mode="before")
    def _coerce_eligibilities(values: Any) -> Any:
        if values is None:
            return []
        if not isinstance(values, list):
            return values
        coerced = []
        for item in values:
            if isinstance(item, str):
                if item.strip():
                    coerced.append({"title": item.strip()})
            elif item:
                coerced.append(item)
        return coerced

    @field_validator("skills", "work_experience_titles", mode="before")
    def _strip_values(values: Any) -> Any:
        return _clean_strings(values)

    @field_validator("total_years_experience", mode="before")
    def _clamp_negative(value: Any) -> Any:
        return _clamp_years(value)

    @property
    def eligibility_titles(self) -> List[str]:
        return [record.title for record in self.eligibilities if record.title and record.title.strip()]


class ScoreBreakdown(BaseModel):
    """Score decomposition produced by every algorithm and the ensemble."""

    model_config = ConfigDict(frozen=True)

    education_score: float
    experience_score: float
    skills_score: float
    eligibility_score: float
    total_score: float
    algorithm_used: str
    reasoning: str
    matched_skills_count: int = Field(0, ge=0)
    matched_eligibilities_count: int = Field(0, ge=0)

    @field_validator(
        "education_score",
        "experience_score",
        "skills_score",
        "eligibility_score",
        "total_score",
    )
    def _clamp_score(value: float) -> float:
        if math.isnan(value):
            raise ValueError("score must be a number")
        return max(0.0, min(100.0, value))


class AlgorithmDetails(BaseModel):
    """Audit record describing how the ensemble produced its result."""

    algorithm1_score: float
    algorithm2_score: float
    algorithm3_score: Optional[float] = None
    ensemble_method: Literal["weighted_average", "tie_breaker"]
    algorithm1_weight: Optional[float] = None
    algorithm2_weight: Optional[float] = None
    is_tie_breaker: bool
    score_difference: float


class RankedApplicant(BaseModel):
    applicant_id: str
    applicant_name: Optional[str] = None
    rank: int = Field(..., ge=1)
    match_score: float
    education_score: float
    experience_score: float
    skills_score: float
    eligibility_score: float
    algorithm_used: str
    ranking_reasoning: str
    algorithm_details: Optional[AlgorithmDetails] = None
    matched_skills_count: int = 0
    matched_eligibilities_count: int = 0


class TieGroup(BaseModel):
    """Applicants whose match scores are equal to two decimal places."""

    score: float
    applicants: List[RankedApplicant]


class TieBreakResult(BaseModel):
    applicant_id: str
    micro_adjustment: float = Field(..., ge=-0.5, le=0.5)
    reasoning: str


class ApplicantComparison(BaseModel):
    winner: Literal["applicant1", "applicant2", "tie"]
    applicant1_score: ScoreBreakdown
    applicant2_score: ScoreBreakdown
    analysis: str


class RankingStatistics(BaseModel):
    min: float
    max: float
    mean: float
    median: float
    std_dev: float


class DistributionBucket(BaseModel):
    range: str
    count: int


class ScoreDistribution(BaseModel):
    buckets: List[DistributionBucket]
    total: int


__all__ = [
    "AlgorithmDetails",
    "ApplicantComparison",
    "ApplicantProfile",
    "DistributionBucket",
    "EligibilityRecord",
    "JobRequirement",
    "RankedApplicant",
    "RankingStatistics",
    "ScoreBreakdown",
    "ScoreDistribution",
    "TieBreakResult",
    "TieGroup",
]
