"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from pf_engine.models import CourseRecord, JobRecord

if TYPE_CHECKING:
    from pf_engine.pipeline.mapping import MappingOutcome

logger = logging.getLogger(__name__)

# (job title keyword, course label keyword), tested in order.
KEYWORD_RULES: Tuple[Tuple[str, str], ...] = (
    ("data", "data"),
    ("software", "programming"),
    ("engineer", "system"),
    ("security", "security"),
    ("cloud", "cloud"),
    ("product", "product"),
    ("analyst", "analytic"),
    ("manager", "management"),
)

KEYWORD_CONFIDENCE = 0.65
KEYWORD_REASONING = "keyword similarity"
GENERIC_CONFIDENCE = 0.55
GENERIC_REASONING = "generic fallback"


def keyword_match(job_title: str, course_label: str) -> bool:
    job_lower = job_title.lower()
    course_lower = course_label.lower()
    return any(job_kw in job_lower and course_kw in course_lower for job_kw, course_kw in KEYWORD_RULES)


def _next_unused(courses: Sequence[CourseRecord], used: set[str], job_title: Optional[str] = None) -> Optional[str]:
    for course in courses:
        if course.label in used:
            continue
        if job_title is None or keyword_match(job_title, course.label):
            return course.label
    return None


def extend(jobs: Sequence[JobRecord], courses: Sequence[CourseRecord], current: "MappingOutcome") -> "MappingOutcome":
    """
    Assign unmapped jobs to courses no mapped job uses yet.

    Keyword pass first (0.65), then any remaining job takes the next unused course (0.55).
    A course consumed here or by the current mapping is never handed out again.
    """
    mappings: Dict[str, str] = dict(current.mappings)
    reasoning: Dict[str, str] = dict(current.reasoning)
    confidence: Dict[str, float] = dict(current.confidence_scores)
    used = set(mappings.values())
    unmapped = [job.title for job in jobs if job.title not in mappings]
    logger.info(
        "[fallback][start] unmapped=%s available=%s",
        len(unmapped),
        sum(1 for course in courses if course.label not in used),
    )

    added: List[str] = []
    for title in unmapped:
        course = _next_unused(courses, used, title)
        if course is None:
            continue
        mappings[title] = course
        reasoning[title] = KEYWORD_REASONING
        confidence[title] = KEYWORD_CONFIDENCE
        used.add(course)
        added.append(title)
        logger.info("[fallback][keyword] job=%s course=%s", title, course)

    for title in unmapped:
        if title in mappings:
            continue
        course = _next_unused(courses, used)
        if course is None:
            break
        mappings[title] = course
        reasoning[title] = GENERIC_REASONING
        confidence[title] = GENERIC_CONFIDENCE
        used.add(course)
        added.append(title)
        logger.info("[fallback][generic] job=%s course=%s", title, course)

    return replace(
        current,
        mappings={job.title: mappings[job.title] for job in jobs if job.title in mappings},
        reasoning=reasoning,
        confidence_scores=confidence,
        fallback_used=True,
        fallback_jobs=list(current.fallback_jobs) + added,
    )
