"""Scoring algorithms and the ensemble that reconciles them.

Three strategies read the same four dimension scores and weight them
differently:

* Weighted Sum: linear combination of all four dimensions.
* Skill-Experience Composite: skills discounted by an exponential experience
  factor, combined with education and eligibility.
* Eligibility-Education Tie-breaker: an additive 100-point budget dominated by
  eligibility and education.

The ensemble runs the first two and either defers to the tie-breaker when
they agree within five points or blends them 60/40.
"""

from __future__ import annotations

import asyncio
import logging
import math
from enum import Enum
from functools import cached_property
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from .education import EducationResult, score_education
from .eligibility import EligibilityMatch, compute_eligibility_match, has_no_eligibility_requirement
from .embeddings import EmbeddingCache
from .errors import ScoringError
from .experience import compute_experience_score, experience_ratio, required_years
from .logging_config import log_context
from .models import AlgorithmDetails, ApplicantProfile, JobRequirement, ScoreBreakdown
from .skills import SkillMatch, calculate_skill_match

logger = logging.getLogger(__name__)

COMPOSITE_BETA = 0.5
TIE_THRESHOLD = 5.0
ENSEMBLE_WEIGHTS = (0.6, 0.4)

ENSEMBLE_TIE_BREAKER = "Ensemble (Tie-breaker)"
MULTI_FACTOR_ASSESSMENT = "Multi-Factor Assessment"


class Algorithm(str, Enum):
    WEIGHTED_SUM = "Weighted Sum Model"
    SKILL_EXPERIENCE_COMPOSITE = "Skill-Experience Composite"
    ELIGIBILITY_EDUCATION_TIEBREAKER = "Eligibility-Education Tie-breaker"


class ScoringContext:
    """Dimension results for one (job, applicant) pair, computed once.

    Every algorithm run against the same context shares the education,
    eligibility, experience and skill results, so the skill matcher and its
    embedding lookups run at most once per pair.
    """

    def __init__(
        self,
        job: JobRequirement,
        applicant: ApplicantProfile,
        embeddings: Optional[EmbeddingCache] = None,
    ) -> None:
        self.job = job
        self.applicant = applicant
        self.embeddings = embeddings
        self._skills: Optional["asyncio.Future[SkillMatch]"] = None

    @cached_property
    def education(self) -> EducationResult:
        return score_education(self.job, self.applicant)

    @cached_property
    def eligibility(self) -> EligibilityMatch:
        return compute_eligibility_match(self.job.eligibilities, self.applicant.eligibility_titles)

    @cached_property
    def experience_score(self) -> float:
        return compute_experience_score(self.job.years_of_experience, self.applicant.total_years_experience)

    @cached_property
    def experience_ratio(self) -> float:
        return experience_ratio(self.job.years_of_experience, self.applicant.total_years_experience)

    async def skills(self) -> SkillMatch:
        if self._skills is None:
            self._skills = asyncio.ensure_future(
                calculate_skill_match(self.job.skills, self.applicant.skills, self.embeddings)
            )
        return await self._skills


def _breakdown(
    *,
    education: float,
    experience: float,
    skills: float,
    eligibility: float,
    total: float,
    algorithm: str,
    reasoning: str,
    matched_skills: int,
    matched_eligibilities: int,
) -> ScoreBreakdown:
    values = {
        "education": education,
        "experience": experience,
        "skills": skills,
        "eligibility": eligibility,
        "total": total,
    }
    for name, value in values.items():
        if not math.isfinite(value):
            raise ScoringError(f"{algorithm}: {name} score is not finite ({value})")

    return ScoreBreakdown(
        education_score=education,
        experience_score=experience,
        skills_score=skills,
        eligibility_score=eligibility,
        total_score=round(total, 2),
        algorithm_used=algorithm,
        reasoning=reasoning,
        matched_skills_count=matched_skills,
        matched_eligibilities_count=matched_eligibilities,
    )


async def _weighted_sum(ctx: ScoringContext) -> ScoreBreakdown:
    education = ctx.education.score
    experience = ctx.experience_score
    skills = await ctx.skills()
    eligibility = ctx.eligibility

    total = 0.30 * education + 0.20 * experience + 0.20 * skills.score + 0.30 * eligibility.score
    return _breakdown(
        education=education,
        experience=experience,
        skills=skills.score,
        eligibility=eligibility.score,
        total=total,
        algorithm=Algorithm.WEIGHTED_SUM.value,
        reasoning=(
            f"Education (30%): {education:.1f}, Experience (20%): {experience:.1f}, "
            f"Skills (20%): {skills.score:.1f}, Eligibility (30%): {eligibility.score:.1f}"
        ),
        matched_skills=skills.matched_count,
        matched_eligibilities=eligibility.matched_count,
    )


async def _skill_experience_composite(ctx: ScoringContext) -> ScoreBreakdown:
    skills = await ctx.skills()
    education = ctx.education.score
    eligibility = ctx.eligibility

    # Skills only count in full once experience reaches twice the requirement.
    composite = (
        skills.score
        * math.exp(COMPOSITE_BETA * min(ctx.experience_ratio, 2))
        / math.exp(COMPOSITE_BETA * 2)
    )
    total = 0.30 * composite + 0.35 * education + 0.35 * eligibility.score
    return _breakdown(
        education=education,
        experience=ctx.experience_score,
        skills=skills.score,
        eligibility=eligibility.score,
        total=total,
        algorithm=Algorithm.SKILL_EXPERIENCE_COMPOSITE.value,
        reasoning=(
            f"Skill-Experience Composite (30%): {composite:.1f}, "
            f"Education (35%): {education:.1f}, Eligibility (35%): {eligibility.score:.1f}"
        ),
        matched_skills=skills.matched_count,
        matched_eligibilities=eligibility.matched_count,
    )


async def _eligibility_education_tiebreaker(ctx: ScoringContext) -> ScoreBreakdown:
    reasoning: List[str] = []
    eligibility = ctx.eligibility

    if has_no_eligibility_requirement(ctx.job.eligibilities):
        eligibility_points = 20.0
        reasoning.append("No license required (+20)")
    else:
        eligibility_points = eligibility.score / 100 * 40
        reasoning.append(
            f"Professional license match: {eligibility.score:.1f}% (+{eligibility_points:.1f})"
        )

    education = ctx.education.score
    education_points = education / 100 * 30
    reasoning.append(f"Degree match: {education:.1f}% (+{education_points:.1f})")

    experience = ctx.experience_score
    excess_years = max(
        0.0, ctx.applicant.total_years_experience - required_years(ctx.job.years_of_experience)
    )
    experience_points = min(experience / 100 * 20, 20.0)
    reasoning.append(
        f"Experience: {experience:.1f}%, {excess_years:.1f} years over (+{experience_points:.1f})"
    )

    skills = await ctx.skills()
    # Nominal 20-point skill budget, weighted down to at most 2 points.
    skill_points = min(skills.matched_count * 10, 20) * 0.10
    reasoning.append(f"{skills.matched_count} matched skills (+{skill_points:.1f})")

    total = eligibility_points + education_points + experience_points + skill_points
    return _breakdown(
        education=education,
        experience=experience,
        skills=skills.score,
        eligibility=eligibility.score,
        total=total,
        algorithm=Algorithm.ELIGIBILITY_EDUCATION_TIEBREAKER.value,
        reasoning="; ".join(reasoning),
        matched_skills=skills.matched_count,
        matched_eligibilities=eligibility.matched_count,
    )


ALGORITHMS: Dict[Algorithm, Callable[[ScoringContext], Awaitable[ScoreBreakdown]]] = {
    Algorithm.WEIGHTED_SUM: _weighted_sum,
    Algorithm.SKILL_EXPERIENCE_COMPOSITE: _skill_experience_composite,
    Algorithm.ELIGIBILITY_EDUCATION_TIEBREAKER: _eligibility_education_tiebreaker,
}


async def run_algorithm(
    algorithm: Algorithm,
    job: JobRequirement,
    applicant: ApplicantProfile,
    embeddings: Optional[EmbeddingCache] = None,
) -> ScoreBreakdown:
    return await ALGORITHMS[Algorithm(algorithm)](ScoringContext(job, applicant, embeddings))


async def algorithm1_weighted_sum(
    job: JobRequirement, applicant: ApplicantProfile, embeddings: Optional[EmbeddingCache] = None
) -> ScoreBreakdown:
    return await run_algorithm(Algorithm.WEIGHTED_SUM, job, applicant, embeddings)


async def algorithm2_skill_experience_composite(
    job: JobRequirement, applicant: ApplicantProfile, embeddings: Optional[EmbeddingCache] = None
) -> ScoreBreakdown:
    return await run_algorithm(Algorithm.SKILL_EXPERIENCE_COMPOSITE, job, applicant, embeddings)


async def algorithm3_eligibility_education_tiebreaker(
    job: JobRequirement, applicant: ApplicantProfile, embeddings: Optional[EmbeddingCache] = None
) -> ScoreBreakdown:
    return await run_algorithm(Algorithm.ELIGIBILITY_EDUCATION_TIEBREAKER, job, applicant, embeddings)


def _blend(first: float, second: float) -> float:
    w1, w2 = ENSEMBLE_WEIGHTS
    return first * w1 + second * w2


def _assessment_prose(education: float, experience: float, skills: float, eligibility: float) -> str:
    strengths: List[str] = []
    gaps: List[str] = []

    if education >= 80:
        strengths.append("strong educational background")
    elif education < 60:
        gaps.append("education level")

    if experience >= 80:
        strengths.append("excellent relevant experience" if experience == 100 else "solid work experience")
    elif experience < 60:
        gaps.append("years of experience")

    if skills >= 60:
        strengths.append("good technical skills")
    elif skills < 40:
        gaps.append("required skills")

    if eligibility >= 80:
        strengths.append("appropriate certifications")
    elif eligibility < 60:
        gaps.append("certifications")

    reasoning = ""
    if strengths:
        reasoning = f"Candidate demonstrates {', '.join(strengths)}."
    if gaps:
        lead = "Areas for development include" if strengths else "Needs improvement in"
        reasoning += f" {lead} {', '.join(gaps)}."
    return reasoning.strip() or "Candidate evaluated across multiple qualification criteria."


async def ensemble_with_details(
    job: JobRequirement,
    applicant: ApplicantProfile,
    embeddings: Optional[EmbeddingCache] = None,
) -> Tuple[ScoreBreakdown, AlgorithmDetails]:
    """Ensemble score plus the audit record of how it was reached."""

    ctx = ScoringContext(job, applicant, embeddings)
    score1 = await _weighted_sum(ctx)
    score2 = await _skill_experience_composite(ctx)
    difference = abs(score1.total_score - score2.total_score)

    if difference <= TIE_THRESHOLD:
        score3 = await _eligibility_education_tiebreaker(ctx)
        logger.debug(
            log_context(
                "Algorithms agree, deferring to tie-breaker",
                algorithm1=score1.total_score,
                algorithm2=score2.total_score,
                algorithm3=score3.total_score,
            )
        )
        result = score3.model_copy(
            update={
                "algorithm_used": ENSEMBLE_TIE_BREAKER,
                "reasoning": (
                    f"Algorithms 1 & 2 within 5% ({score1.total_score:.1f} vs "
                    f"{score2.total_score:.1f}). Tie-breaker: {score3.reasoning}"
                ),
            }
        )
        details = AlgorithmDetails(
            algorithm1_score=score1.total_score,
            algorithm2_score=score2.total_score,
            algorithm3_score=score3.total_score,
            ensemble_method="tie_breaker",
            is_tie_breaker=True,
            score_difference=difference,
        )
        return result, details

    education = _blend(score1.education_score, score2.education_score)
    experience = _blend(score1.experience_score, score2.experience_score)
    skills = _blend(score1.skills_score, score2.skills_score)
    eligibility = _blend(score1.eligibility_score, score2.eligibility_score)
    total = _blend(score1.total_score, score2.total_score)

    result = _breakdown(
        education=round(education, 2),
        experience=round(experience, 2),
        skills=round(skills, 2),
        eligibility=round(eligibility, 2),
        total=total,
        algorithm=MULTI_FACTOR_ASSESSMENT,
        reasoning=_assessment_prose(education, experience, skills, eligibility),
        matched_skills=score1.matched_skills_count,
        matched_eligibilities=score1.matched_eligibilities_count,
    )
    details = AlgorithmDetails(
        algorithm1_score=score1.total_score,
        algorithm2_score=score2.total_score,
        ensemble_method="weighted_average",
        algorithm1_weight=ENSEMBLE_WEIGHTS[0],
        algorithm2_weight=ENSEMBLE_WEIGHTS[1],
        is_tie_breaker=False,
        score_difference=difference,
    )
    return result, details


async def ensemble_score(
    job: JobRequirement,
    applicant: ApplicantProfile,
    embeddings: Optional[EmbeddingCache] = None,
) -> ScoreBreakdown:
    result, _ = await ensemble_with_details(job, applicant, embeddings)
    return result


__all__ = [
    "ALGORITHMS",
    "Algorithm",
    "ENSEMBLE_TIE_BREAKER",
    "MULTI_FACTOR_ASSESSMENT",
    "ScoringContext",
    "algorithm1_weighted_sum",
    "algorithm2_skill_experience_composite",
    "algorithm3_eligibility_education_tiebreaker",
    "ensemble_score",
    "ensemble_with_details",
    "run_algorithm",
]
