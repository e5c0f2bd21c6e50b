"""Ranking of applicant pools against a single job."""

from __future__ import annotations

import asyncio
import logging
import zlib
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Dict, List, Optional, Sequence

from .algorithms import ensemble_with_details
from .config import Settings, load_settings
from .embeddings import EmbeddingCache, EmbeddingProvider, build_embedding_provider
from .logging_config import LOGGER_NAME, log_context
from .models import (
    AlgorithmDetails,
    ApplicantComparison,
    ApplicantProfile,
    JobRequirement,
    RankedApplicant,
    ScoreBreakdown,
    TieBreakResult,
    TieGroup,
)

logger = logging.getLogger(__name__)

SCORE_TOLERANCE = 0.01
COMPARISON_TIE_MARGIN = 1.0


@dataclass
class ScoredApplicant:
    """Internal representation that couples an applicant with its ensemble result."""

    applicant_id: str
    applicant: ApplicantProfile
    breakdown: ScoreBreakdown
    details: AlgorithmDetails


def _compare_scored(a: ScoredApplicant, b: ScoredApplicant) -> int:
    # Total first, then eligibility, education, experience and skills.
    for attribute in ("total_score", "eligibility_score", "education_score", "experience_score", "skills_score"):
        left = getattr(a.breakdown, attribute)
        right = getattr(b.breakdown, attribute)
        if abs(right - left) >= SCORE_TOLERANCE:
            return -1 if left > right else 1

    # Identical percentages: favour more actual years, then more skills.
    if a.applicant.total_years_experience != b.applicant.total_years_experience:
        return -1 if a.applicant.total_years_experience > b.applicant.total_years_experience else 1
    if len(a.applicant.skills) != len(b.applicant.skills):
        return -1 if len(a.applicant.skills) > len(b.applicant.skills) else 1
    return 0


def find_tie_groups(ranked: Sequence[RankedApplicant]) -> List[TieGroup]:
    """Group applicants whose match scores are equal to two decimal places."""

    groups: Dict[str, TieGroup] = {}
    for applicant in ranked:
        rounded = round(applicant.match_score, 2)
        key = f"{rounded:.2f}"
        if key not in groups:
            groups[key] = TieGroup(score=rounded, applicants=[])
        groups[key].applicants.append(applicant)
    return [group for group in groups.values() if len(group.applicants) > 1]


def deterministic_tie_break(applicants: Sequence[RankedApplicant]) -> List[TieBreakResult]:
    """Micro-adjustments in [-0.5, 0.5] that separate tied applicants.

    Specialised profiles (higher variance across dimensions) and stronger
    skills/experience are nudged up; a stable hash of the applicant id keeps
    otherwise identical profiles apart.
    """

    results = []
    for applicant in applicants:
        scores = [
            applicant.education_score,
            applicant.experience_score,
            applicant.skills_score,
            applicant.eligibility_score,
        ]
        mean = sum(scores) / len(scores)
        variance = sum((score - mean) ** 2 for score in scores) / len(scores)

        priority_bonus = applicant.skills_score * 0.003 + applicant.experience_score * 0.002
        variance_bonus = min(variance / 100, 0.2)
        uniqueness_offset = (zlib.crc32(applicant.applicant_id.encode("utf-8")) % 100) * 0.001

        adjustment = priority_bonus + variance_bonus - 0.25 + uniqueness_offset
        adjustment = max(-0.5, min(0.5, adjustment))
        results.append(
            TieBreakResult(
                applicant_id=applicant.applicant_id,
                micro_adjustment=adjustment,
                reasoning=(
                    f"Deterministic differentiation: variance {variance:.1f}, "
                    f"priority factors, uniqueness offset {uniqueness_offset:.3f}"
                ),
            )
        )
    return results


class RankingEngine:
    """Scores and ranks applicants for a job using the algorithm ensemble."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[EmbeddingProvider] = None,
    ) -> None:
        self.settings = settings or load_settings()
        logging.getLogger(LOGGER_NAME).setLevel(self.settings.log_level)
        self.provider = provider or build_embedding_provider(self.settings)

    def new_embedding_cache(self) -> EmbeddingCache:
        return EmbeddingCache(self.provider, timeout=self.settings.embedding_timeout)

    async def rank_applicants(
        self,
        job: JobRequirement,
        applicants: Sequence[ApplicantProfile],
        *,
        top_n: Optional[int] = None,
        break_ties: bool = True,
    ) -> List[RankedApplicant]:
        """Return applicants ordered from best to worst match.

        Args:
            job: Requirements of the job being filled.
            applicants: Profiles to evaluate; scored concurrently.
            top_n: Optional cap on the number of returned applicants.
            break_ties: Separate applicants with equal scores using
                deterministic micro-adjustments.

        Returns:
            A list of :class:`RankedApplicant` with ranks starting at 1.
        """

        logger.info(log_context("Ranking applicants", job=job.title, applicants=len(applicants)))
        cache = self.new_embedding_cache()
        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async def score_one(index: int, applicant: ApplicantProfile) -> ScoredApplicant:
            async with semaphore:
                breakdown, details = await ensemble_with_details(job, applicant, cache)
            return ScoredApplicant(
                applicant_id=applicant.applicant_id or f"applicant-{index + 1}",
                applicant=applicant,
                breakdown=breakdown,
                details=details,
            )

        scored = list(await asyncio.gather(*(score_one(i, a) for i, a in enumerate(applicants))))
        scored.sort(key=cmp_to_key(_compare_scored))

        ranked = [
            self._to_ranked(entry, rank=index + 1) for index, entry in enumerate(scored)
        ]
        if break_ties:
            ranked = self._apply_tie_breaks(ranked)

        if top_n is not None:
            ranked = ranked[: max(0, top_n)]
        logger.debug(log_context("Embedding cache size", entries=len(cache)))
        return ranked

    def rank_applicants_sync(
        self,
        job: JobRequirement,
        applicants: Sequence[ApplicantProfile],
        **kwargs,
    ) -> List[RankedApplicant]:
        return asyncio.run(self.rank_applicants(job, applicants, **kwargs))

    async def compare_applicants(
        self,
        job: JobRequirement,
        applicant1: ApplicantProfile,
        applicant2: ApplicantProfile,
    ) -> ApplicantComparison:
        cache = self.new_embedding_cache()
        (score1, _), (score2, _) = await asyncio.gather(
            ensemble_with_details(job, applicant1, cache),
            ensemble_with_details(job, applicant2, cache),
        )
        diff = score1.total_score - score2.total_score

        if abs(diff) < COMPARISON_TIE_MARGIN:
            winner = "tie"
        elif diff > 0:
            winner = "applicant1"
        else:
            winner = "applicant2"

        return ApplicantComparison(
            winner=winner,
            applicant1_score=score1,
            applicant2_score=score2,
            analysis=(
                f"Applicant 1: {score1.total_score:.2f} vs Applicant 2: {score2.total_score:.2f}. "
                f"Difference: {abs(diff):.2f} points."
            ),
        )

    def _to_ranked(self, entry: ScoredApplicant, rank: int) -> RankedApplicant:
        breakdown = entry.breakdown
        return RankedApplicant(
            applicant_id=entry.applicant_id,
            applicant_name=entry.applicant.name,
            rank=rank,
            match_score=breakdown.total_score,
            education_score=breakdown.education_score,
            experience_score=breakdown.experience_score,
            skills_score=breakdown.skills_score,
            eligibility_score=breakdown.eligibility_score,
            algorithm_used=breakdown.algorithm_used,
            ranking_reasoning=breakdown.reasoning,
            algorithm_details=entry.details,
            matched_skills_count=breakdown.matched_skills_count,
            matched_eligibilities_count=breakdown.matched_eligibilities_count,
        )

    def _apply_tie_breaks(self, ranked: List[RankedApplicant]) -> List[RankedApplicant]:
        tie_groups = find_tie_groups(ranked)
        if not tie_groups:
            return ranked

        logger.info(
            log_context(
                "Breaking ties",
                groups=len(tie_groups),
                tied=sum(len(group.applicants) for group in tie_groups),
            )
        )
        adjustments = {
            result.applicant_id: result
            for group in tie_groups
            for result in deterministic_tie_break(group.applicants)
        }

        adjusted = []
        for applicant in ranked:
            result = adjustments.get(applicant.applicant_id)
            if result is None:
                adjusted.append(applicant)
                continue
            adjusted.append(
                applicant.model_copy(
                    update={
                        "match_score": round(
                            max(0.0, min(100.0, applicant.match_score + result.micro_adjustment)), 4
                        ),
                        "ranking_reasoning": f"{applicant.ranking_reasoning} [Tie-break: {result.reasoning}]",
                    }
                )
            )

        adjusted.sort(key=lambda applicant: applicant.match_score, reverse=True)
        return [applicant.model_copy(update={"rank": index + 1}) for index, applicant in enumerate(adjusted)]


__all__ = [
    "RankingEngine",
    "ScoredApplicant",
    "deterministic_tie_break",
    "find_tie_groups",
]
