"""Education dimension: degree requirement matching and level/field smoothing."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

import yaml

from .expressions import ListMode, detect_list_mode, is_no_requirement_text, parse_list_expression
from .logging_config import log_context
from .models import ApplicantProfile, JobRequirement
from .similarity import string_similarity

logger = logging.getLogger(__name__)

NO_REQUIREMENT_SCORE = 50.0
STRONG_MATCH_THRESHOLD = 85.0
RELATED_FIELD_FLOOR = 85.0

DEGREE_LEVELS: Tuple[str, ...] = (
    "elementary",
    "secondary",
    "vocational",
    "bachelor",
    "master",
    "doctoral",
    "graduate studies",
)

_CONTAMINATION_RE = re.compile(r"\s+(?:Eligibilities|Skills|Experience):", re.IGNORECASE)
_IN_RE = re.compile(r"\bin\s+", re.IGNORECASE)
_OF_RE = re.compile(r"\bof\s+", re.IGNORECASE)

# Ordered keyword heuristics; first matching level wins.
_LEVEL_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("elementary", ("elementary", "primary")),
    ("secondary", ("high school", "secondary", "senior high", "junior high")),
    ("vocational", ("vocational", "tech-voc", "tvet", "tesda")),
    ("bachelor", ("bachelor", "college", "b.s.", "bs ")),
    ("master", ("master",)),
    ("doctoral", ("doctor", "phd", "ph.d")),
    ("graduate studies", ("graduate studies", "postgraduate", "post-graduate")),
)


@dataclass(frozen=True)
class DegreeAndGate:
    """Outcome of checking an AND-style degree requirement."""

    is_and: bool
    all_hit: bool
    hits: int
    required: int

    @property
    def blocks(self) -> bool:
        return self.is_and and not self.all_hit


@dataclass(frozen=True)
class EducationResult:
    score: float
    raw_score: float
    gate: Optional[DegreeAndGate] = None


@lru_cache(maxsize=1)
def load_related_fields() -> Mapping[str, Tuple[str, ...]]:
    """Load the related-field table shipped with the package (read-only)."""

    text = resources.files("jobsync").joinpath("data/related_fields.yaml").read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    table = {
        str(field).lower().strip(): tuple(str(item).lower().strip() for item in (related or []))
        for field, related in data.items()
    }
    return MappingProxyType(table)


def clean_degree_requirement(degree_req: str) -> str:
    """Drop eligibility/skill/experience text accidentally appended to a degree."""

    return _CONTAMINATION_RE.split(degree_req or "", maxsplit=1)[0].strip()


def extract_degree_field(degree: str) -> str:
    """Return the specialisation after the last "in" (else "of") in ``degree``."""

    text = (degree or "").strip()
    for pattern in (_IN_RE, _OF_RE):
        matches = list(pattern.finditer(text))
        if matches:
            field = text[matches[-1].end():].strip()
            if field:
                return field
    return text


def _option_similarity(job_option: str, applicant_option: str) -> float:
    return string_similarity(extract_degree_field(job_option), extract_degree_field(applicant_option))


def degree_option_similarity(job_option: str, applicant_option: str) -> float:
    """Core-field similarity, snapped to 100 for near-identical fields."""

    similarity = _option_similarity(job_option, applicant_option)
    if similarity >= STRONG_MATCH_THRESHOLD:
        return 100.0
    return similarity


def match_degree_requirement(job_degree: str, applicant_degree: str) -> float:
    """Raw education similarity honouring OR / AND / single requirements.

    Both sides may enumerate several degrees. OR takes the best pair, AND
    scores the share of required degrees that have a strong match, and a
    single requirement is compared against each applicant degree as a whole.
    """

    cleaned_job = clean_degree_requirement(job_degree)
    job_mode = detect_list_mode(cleaned_job)
    job_degrees = parse_list_expression(cleaned_job)
    applicant_degrees = parse_list_expression(applicant_degree)

    if not job_degrees or not applicant_degrees:
        return 0.0

    if job_mode is ListMode.OR:
        return max(
            degree_option_similarity(jd, ad) for jd in job_degrees for ad in applicant_degrees
        )

    if job_mode is ListMode.AND:
        hits = 0
        for jd in job_degrees:
            best = max(degree_option_similarity(jd, ad) for ad in applicant_degrees)
            if best >= STRONG_MATCH_THRESHOLD:
                hits += 1
        return hits / len(job_degrees) * 100

    return max(string_similarity(cleaned_job, ad) for ad in applicant_degrees)


def evaluate_degree_and_gate(job_degree_raw: str, applicant_degree_raw: str) -> DegreeAndGate:
    cleaned_job = clean_degree_requirement(job_degree_raw).lower().strip()
    if detect_list_mode(cleaned_job) is not ListMode.AND:
        return DegreeAndGate(is_and=False, all_hit=True, hits=0, required=0)

    job_degrees = parse_list_expression(cleaned_job)
    applicant_degrees = parse_list_expression((applicant_degree_raw or "").lower().strip())
    required = len(job_degrees)

    if not required or not applicant_degrees:
        return DegreeAndGate(is_and=True, all_hit=False, hits=0, required=required)

    hits = 0
    for jd in job_degrees:
        best = max(_option_similarity(jd, ad) for ad in applicant_degrees)
        if best >= STRONG_MATCH_THRESHOLD:
            hits += 1

    return DegreeAndGate(is_and=True, all_hit=hits == required, hits=hits, required=required)


def apply_related_fields(score: float, job_degree: str, applicant_degree: str) -> float:
    """Raise ``score`` to the related-field floor when the table links both degrees."""

    job_lower = (job_degree or "").lower()
    applicant_lower = (applicant_degree or "").lower()
    for field, related in load_related_fields().items():
        if field in job_lower and any(item in applicant_lower for item in related):
            return max(score, RELATED_FIELD_FLOOR)
    return score


def _normalize_meta_level(level: Optional[str]) -> Optional[str]:
    if not level:
        return None
    value = level.lower().strip()
    if value == "college":
        return "bachelor"
    if value in ("graduate studies", "graduate-studies", "graduate_studies"):
        return "graduate studies"
    if value in DEGREE_LEVELS:
        return value
    return None


def resolve_degree_level(level_from_meta: Optional[str], text: str) -> Optional[str]:
    """Level from normaliser metadata, falling back to keywords in ``text``."""

    meta = _normalize_meta_level(level_from_meta)
    if meta:
        return meta

    lower = (text or "").lower()
    for level, keywords in _LEVEL_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return level
    return None


def _field_similarity(job_degree: str, applicant_degree: str) -> float:
    job_list: List[str] = parse_list_expression(job_degree) or [job_degree]
    applicant_list: List[str] = parse_list_expression(applicant_degree) or [applicant_degree]
    return max(
        string_similarity(extract_degree_field(jd).lower(), extract_degree_field(ad).lower())
        for jd in job_list
        for ad in applicant_list
    )


def adjust_education_for_level_and_field(
    base_score: float,
    job_degree: str,
    applicant_degree: str,
    job_level_from_meta: Optional[str] = None,
    applicant_level_from_meta: Optional[str] = None,
    job_field_group: Optional[str] = None,
    applicant_field_group: Optional[str] = None,
) -> float:
    """Smooth the raw education score using degree level and field relatedness."""

    score = base_score
    job_level = resolve_degree_level(job_level_from_meta, job_degree)
    applicant_level = resolve_degree_level(applicant_level_from_meta, applicant_degree)

    if job_level and applicant_level and job_level == applicant_level:
        field_sim = _field_similarity(job_degree, applicant_degree)
        if field_sim > 0:
            score = 0.6 * score + 0.4 * field_sim
            if field_sim < 40:
                # at most -10 when the fields share nothing
                score = max(score - (40 - field_sim) * 0.25, 0.0)

    if job_level and applicant_level:
        job_idx = DEGREE_LEVELS.index(job_level)
        applicant_idx = DEGREE_LEVELS.index(applicant_level)
        if applicant_idx > job_idx:
            score += min(applicant_idx - job_idx, 3) * 4
        elif applicant_idx < job_idx:
            score -= min(job_idx - applicant_idx, 3) * 6

    if job_field_group and applicant_field_group and job_field_group == applicant_field_group:
        score = max(score, 70.0) + 5

    if base_score > 0:
        score = max(score, 20.0)

    return max(0.0, min(100.0, score))


def score_education(job: JobRequirement, applicant: ApplicantProfile) -> EducationResult:
    """Full education pipeline used by every scoring algorithm."""

    job_degree_raw = job.degree_requirement or ""
    applicant_degree_raw = applicant.highest_educational_attainment or ""

    if is_no_requirement_text(job_degree_raw):
        return EducationResult(score=NO_REQUIREMENT_SCORE, raw_score=NO_REQUIREMENT_SCORE)

    job_degree = job_degree_raw.lower().strip()
    applicant_degree = applicant_degree_raw.lower().strip()

    raw_score = match_degree_requirement(job_degree, applicant_degree)
    gate = evaluate_degree_and_gate(job_degree_raw, applicant_degree_raw)

    if gate.blocks:
        logger.info(
            log_context(
                "Degree AND gate not satisfied, forcing education score to 0",
                job_degree=job_degree_raw,
                applicant_degree=applicant_degree_raw,
                hits=gate.hits,
                required=gate.required,
                original_score=round(raw_score, 2),
            )
        )
        return EducationResult(score=0.0, raw_score=raw_score, gate=gate)

    score = apply_related_fields(raw_score, job_degree, applicant_degree)
    score = adjust_education_for_level_and_field(
        score,
        job_degree_raw,
        applicant_degree_raw,
        job.degree_level,
        applicant.degree_level,
        job.degree_field_group,
        applicant.degree_field_group,
    )
    return EducationResult(score=score, raw_score=raw_score, gate=gate)


__all__ = [
    "DEGREE_LEVELS",
    "DegreeAndGate",
    "EducationResult",
    "adjust_education_for_level_and_field",
    "apply_related_fields",
    "clean_degree_requirement",
    "degree_option_similarity",
    "evaluate_degree_and_gate",
    "extract_degree_field",
    "load_related_fields",
    "match_degree_requirement",
    "resolve_degree_level",
    "score_education",
]
