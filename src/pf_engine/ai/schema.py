"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from pf_engine.models import THRESHOLD_MAX, THRESHOLD_MIN

THRESHOLD_LIST_KEYS = ("threshold_analysis", "job_title_thresholds", "thresholds")
MAPPING_KEYS = ("mappings", "job_course_mappings")
REASONING_KEYS = ("reasoning", "ai_reasoning")
CONFIDENCE_KEYS = ("confidence_scores", "confidence")


def pick_first(payload: Dict[str, Any], keys: Sequence[str]) -> Any:
    """Return the value of the first alias present with a truthy value."""
    for key in keys:
        value = payload.get(key)
        if value:
            return value
    return None


def as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def clamp_threshold(value: float) -> float:
    return max(THRESHOLD_MIN, min(THRESHOLD_MAX, float(value)))


def normalize_confidence(value: Any) -> Optional[float]:
    """
    Coerce a model-reported confidence to [0, 1].

    - Numbers above 1 are read as percentages (85 -> 0.85)
    - Non-numeric values yield None
    """
    number = as_number(value)
    if number is None and isinstance(value, str):
        text = value.strip().rstrip("%")
        try:
            number = float(text)
        except ValueError:
            return None
    if number is None:
        return None
    if number > 1.0:
        number = number / 100.0
    return max(0.0, min(1.0, number))


def threshold_entries(parsed: Any) -> List[Dict[str, Any]]:
    if isinstance(parsed, list):
        items: Iterable[Any] = parsed
    elif isinstance(parsed, dict):
        items = pick_first(parsed, THRESHOLD_LIST_KEYS) or []
        if not isinstance(items, list):
            return []
    else:
        return []
    return [item for item in items if isinstance(item, dict)]


def as_str_dict(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items()}


class NameResolver:
    """Resolves model-echoed names back to input identities: exact match first, then case-insensitive."""

    def __init__(self, names: Iterable[str]) -> None:
        self._exact = {name: name for name in names}
        self._folded: Dict[str, str] = {}
        for name in self._exact:
            self._folded.setdefault(name.strip().casefold(), name)

    def resolve(self, candidate: Any) -> Optional[str]:
        if not isinstance(candidate, str):
            return None
        if candidate in self._exact:
            return candidate
        return self._folded.get(candidate.strip().casefold())
