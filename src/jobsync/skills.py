"""Skill dimension: band-scored greedy assignment of applicant skills to job skills."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from .embeddings import Embedding, EmbeddingCache
from .expressions import NO_SKILL_REQUIRED_PHRASES
from .logging_config import log_context
from .similarity import string_similarity

logger = logging.getLogger(__name__)

NO_REQUIREMENT_SCORE = 50.0
TOKEN_CHECK_BELOW = 85.0
TOKEN_OVERLAP_WEIGHT = 30.0
SEMANTIC_THRESHOLD = 65.0
SEMANTIC_DISCOUNT = 0.85
EXACT_TEXT_THRESHOLD = 95.0
BAND_FLOOR = 55.0
MATCHED_BAND = 50.0
MAX_SURPLUS_BONUS = 5

_STOPWORDS = frozenset({"the", "and", "for", "with"})
_PUNCTUATION_RE = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class SkillMatch:
    score: float
    matched_count: int


@dataclass(frozen=True)
class PairScore:
    combined: float
    band: float


def skill_tokens(skill: str) -> List[str]:
    """Lower-cased word tokens longer than two characters, minus stopwords."""

    cleaned = _PUNCTUATION_RE.sub(" ", skill.lower())
    return [token for token in cleaned.split() if len(token) > 2 and token not in _STOPWORDS]


def dedupe_skills(skills: Iterable[str]) -> List[str]:
    """Keep the first spelling of each case-insensitive skill, in input order."""

    seen: Dict[str, str] = {}
    for skill in skills:
        if not isinstance(skill, str):
            continue
        key = skill.lower().strip()
        if key and key not in seen:
            seen[key] = skill.strip()
    return list(seen.values())


def token_overlap_score(job_skill: str, applicant_skill: str) -> float:
    job_tokens = skill_tokens(job_skill)
    applicant_tokens = set(skill_tokens(applicant_skill))
    common = [token for token in job_tokens if token in applicant_tokens]
    if not common or not job_tokens:
        return 0.0
    return len(common) / len(job_tokens) * TOKEN_OVERLAP_WEIGHT


def band_score(combined: float) -> float:
    """Collapse weak similarities to 0 and stretch 55..100 onto 0..100."""

    if combined < BAND_FLOOR:
        return 0.0
    return (combined - BAND_FLOOR) / (100 - BAND_FLOOR) * 100


def score_skill_pair(job_skill: str, applicant_skill: str, semantic_similarity: float = 0.0) -> PairScore:
    text_sim = string_similarity(job_skill, applicant_skill)

    combined = text_sim
    if text_sim < TOKEN_CHECK_BELOW:
        combined = max(combined, token_overlap_score(job_skill, applicant_skill))
    if semantic_similarity >= SEMANTIC_THRESHOLD:
        combined = max(combined, semantic_similarity * SEMANTIC_DISCOUNT)
    if text_sim >= EXACT_TEXT_THRESHOLD:
        combined = 100.0

    clipped = max(0.0, min(100.0, combined))
    return PairScore(combined=clipped, band=band_score(clipped))


async def _lookup_embeddings(
    skills: Sequence[str], embeddings: Optional[EmbeddingCache]
) -> Dict[str, Embedding]:
    if embeddings is None or not skills:
        return {}
    try:
        vectors = await asyncio.gather(*(embeddings.get(skill) for skill in skills))
    except asyncio.TimeoutError:
        logger.warning(
            log_context("Embedding lookup timed out; using text similarity only", skills=list(skills))
        )
        return {}
    return {skill.lower(): vector for skill, vector in zip(skills, vectors)}


async def calculate_skill_match(
    job_skills: Iterable[str],
    applicant_skills: Iterable[str],
    embeddings: Optional[EmbeddingCache] = None,
) -> SkillMatch:
    """Score how well the applicant's skills cover the job's skills.

    Each job skill, in order, claims the best remaining applicant skill; an
    applicant skill can satisfy only one job skill. The assignment is greedy
    and therefore order dependent.
    """

    unique_job_skills = [
        skill for skill in dedupe_skills(job_skills)
        if skill.lower() not in NO_SKILL_REQUIRED_PHRASES
    ]
    unique_applicant_skills = dedupe_skills(applicant_skills)

    if not unique_job_skills:
        return SkillMatch(score=NO_REQUIREMENT_SCORE, matched_count=0)
    if not unique_applicant_skills:
        return SkillMatch(score=0.0, matched_count=0)

    vectors = await _lookup_embeddings(
        dedupe_skills(unique_job_skills + unique_applicant_skills), embeddings
    )

    def semantic(job_skill: str, applicant_skill: str) -> float:
        job_vec = vectors.get(job_skill.lower()) or []
        applicant_vec = vectors.get(applicant_skill.lower()) or []
        if not job_vec or not applicant_vec or embeddings is None:
            return 0.0
        return embeddings.similarity_percent(job_vec, applicant_vec)

    total = 0.0
    matched_count = 0
    used = set()

    for job_skill in unique_job_skills:
        best_index: Optional[int] = None
        best_band = 0.0
        for index, applicant_skill in enumerate(unique_applicant_skills):
            if index in used:
                continue
            pair = score_skill_pair(job_skill, applicant_skill, semantic(job_skill, applicant_skill))
            if pair.band > best_band:
                best_band = pair.band
                best_index = index

        if best_index is not None:
            used.add(best_index)
            total += best_band
            if best_band >= MATCHED_BAND:
                matched_count += 1

    base_score = total / (len(unique_job_skills) * 100) * 100
    surplus = max(0, len(unique_applicant_skills) - len(unique_job_skills))
    score = min(base_score + min(surplus, MAX_SURPLUS_BONUS), 100.0)
    return SkillMatch(score=score, matched_count=matched_count)


__all__ = [
    "PairScore",
    "SkillMatch",
    "band_score",
    "calculate_skill_match",
    "dedupe_skills",
    "score_skill_pair",
    "skill_tokens",
    "token_overlap_score",
]
