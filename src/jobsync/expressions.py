"""Parsing of free-text requirement lines such as ``"BS IT, BS CS or BS IS"``."""

from __future__ import annotations

import re
from enum import Enum
from typing import List, Optional

NO_REQUIREMENT_PHRASES = frozenset(
    {
        "none",
        "n/a",
        "not required",
        "no degree required",
        "no eligibility required",
        "no eligibilities required",
        "no skills required",
        "no specific skills required",
    }
)

NO_SKILL_REQUIRED_PHRASES = frozenset(
    {
        "none",
        "not required",
        "no skills required",
        "no specific skills required",
    }
)

_AND_RE = re.compile(r"\band\b", re.IGNORECASE)
_OR_RE = re.compile(r"\bor\b", re.IGNORECASE)
_CONNECTOR_RE = re.compile(r"\s+(?:and|or)\s+", re.IGNORECASE)
# "None (eligibility not required)" and similar annotated forms
_ANNOTATED_NONE_RE = re.compile(r"^none\s*\(.*\)$")


class ListMode(str, Enum):
    SINGLE = "SINGLE"
    AND = "AND"
    OR = "OR"


def is_no_requirement_text(raw: Optional[str]) -> bool:
    """True when ``raw`` states that nothing is required."""

    if raw is None:
        return True
    lower = raw.lower().strip()
    if not lower:
        return True
    if lower in NO_REQUIREMENT_PHRASES:
        return True
    return bool(_ANNOTATED_NONE_RE.match(lower))


def detect_list_mode(raw: str) -> ListMode:
    """Classify a requirement line.

    A line containing both connectors is treated as AND.
    """

    if _AND_RE.search(raw or ""):
        return ListMode.AND
    if _OR_RE.search(raw or ""):
        return ListMode.OR
    return ListMode.SINGLE


def parse_list_expression(raw: str) -> List[str]:
    """Split ``"A, B, or C"`` / ``"A and B"`` into its trimmed items."""

    text = (raw or "").strip()
    if not text:
        return []
    replaced = _CONNECTOR_RE.sub(",", text)
    return [part.strip() for part in replaced.split(",") if part.strip()]


__all__ = [
    "ListMode",
    "NO_REQUIREMENT_PHRASES",
    "NO_SKILL_REQUIRED_PHRASES",
    "detect_list_mode",
    "is_no_requirement_text",
    "parse_list_expression",
]
