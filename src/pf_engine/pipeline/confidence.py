"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

from typing import Dict, Mapping, Sequence

from pf_engine.models import ConfidenceEntry, JobRecord

MAPPED_CONFIDENCE = 0.85
UNMAPPED_CONFIDENCE = 0.65
FALLBACK_THRESHOLD = 0.80

UNMAPPED_SKILL_GAPS = ("core competencies",)
UNMAPPED_MISSING_COMPETENCIES = ("formal education requirements",)


def job_confidence(title: str, mappings: Mapping[str, str], confidence_scores: Mapping[str, float]) -> float:
    # An explicit 0.0 from the model is kept.
    provided = confidence_scores.get(title)
    if provided is not None:
        return float(provided)
    return MAPPED_CONFIDENCE if title in mappings else UNMAPPED_CONFIDENCE


def analyze(
    jobs: Sequence[JobRecord],
    mappings: Mapping[str, str],
    confidence_scores: Mapping[str, float],
    thresholds: Mapping[str, float],
) -> Dict[str, ConfidenceEntry]:
    analysis: Dict[str, ConfidenceEntry] = {}
    for job in jobs:
        mapped = job.title in mappings
        confidence = job_confidence(job.title, mappings, confidence_scores)
        threshold = thresholds.get(job.title, FALLBACK_THRESHOLD)
        analysis[job.title] = ConfidenceEntry(
            confidence_score=confidence,
            threshold=threshold,
            threshold_met=confidence >= threshold,
            skill_gaps=[] if mapped else list(UNMAPPED_SKILL_GAPS),
            missing_competencies=[] if mapped else list(UNMAPPED_MISSING_COMPETENCIES),
        )
    return analysis
