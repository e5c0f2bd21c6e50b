"""Eligibility dimension: strict AND/OR evaluation of requirement lines."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .expressions import ListMode, detect_list_mode, is_no_requirement_text, parse_list_expression
from .logging_config import log_context
from .similarity import string_similarity

logger = logging.getLogger(__name__)

NO_REQUIREMENT_SCORE = 50.0
TOKEN_MATCH_THRESHOLD = 92.0


@dataclass(frozen=True)
class EligibilityMatch:
    score: float
    matched_count: int


def _clean(values: Iterable[str]) -> List[str]:
    return [value.strip() for value in values if value and value.strip()]


def has_no_eligibility_requirement(job_lines: Sequence[str]) -> bool:
    """True when the job lists no lines, or any line says nothing is required.

    A single "none" line short-circuits the whole list, even when sibling
    lines carry real requirements.
    """

    lines = _clean(job_lines)
    return not lines or any(is_no_requirement_text(line) for line in lines)


def compute_eligibility_match(
    job_eligibilities: Sequence[str], applicant_eligibilities: Sequence[str]
) -> EligibilityMatch:
    """Score applicant eligibilities against the job's requirement lines.

    Each line is a group: ``"A, B, or C"`` is satisfied by any member,
    ``"A and B"`` only by all members, anything else by the single item.
    Every line must be satisfied for a score of 100; otherwise the score is
    0. ``matched_count`` accumulates token hits for display and can be
    non-zero even when the score is 0.
    """

    job_lines = _clean(job_eligibilities)
    applicant_titles = [title.lower() for title in _clean(applicant_eligibilities)]

    if has_no_eligibility_requirement(job_lines):
        return EligibilityMatch(score=NO_REQUIREMENT_SCORE, matched_count=0)

    def has_token_match(token: str) -> bool:
        token_norm = token.lower().strip()
        if not token_norm:
            return False
        for title in applicant_titles:
            if title == token_norm or string_similarity(token_norm, title) >= TOKEN_MATCH_THRESHOLD:
                return True
        return False

    matched_count = 0
    satisfied: List[bool] = []

    for line in job_lines:
        lower_line = line.lower().strip()
        mode = detect_list_mode(lower_line)

        if mode is ListMode.SINGLE:
            hit = has_token_match(lower_line)
            if hit:
                matched_count += 1
            satisfied.append(hit)
            continue

        tokens = parse_list_expression(lower_line)
        if not tokens:
            continue

        hits = [has_token_match(token) for token in tokens]
        matched_count += sum(hits)
        if mode is ListMode.OR:
            satisfied.append(any(hits))
        else:
            satisfied.append(all(hits))

    if not satisfied:
        return EligibilityMatch(score=NO_REQUIREMENT_SCORE, matched_count=matched_count)

    score = 100.0 if all(satisfied) else 0.0
    logger.debug(
        log_context(
            "Eligibility matching",
            job_eligibilities=job_lines,
            applicant_eligibilities=list(applicant_eligibilities),
            matched=matched_count,
            score=score,
        )
    )
    return EligibilityMatch(score=score, matched_count=matched_count)


__all__ = [
    "EligibilityMatch",
    "compute_eligibility_match",
    "has_no_eligibility_requirement",
]
