"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from pf_engine.ai.client import CompletionClient
from pf_engine.ai.decoder import decode_or_raise
from pf_engine.ai.errors import MalformedResponseError
from pf_engine.ai.prompts import build_mapping_prompt
from pf_engine.ai.schema import (
    CONFIDENCE_KEYS,
    MAPPING_KEYS,
    REASONING_KEYS,
    NameResolver,
    as_str_dict,
    normalize_confidence,
    pick_first,
)
from pf_engine.models import CourseRecord, JobRecord
from pf_engine.pipeline import fallback
from pf_engine.pipeline.context import RunContext, mapping_effort

logger = logging.getLogger(__name__)

FALLBACK_MAPPING_RATE = 0.5


@dataclass
class MappingOutcome:
    mappings: Dict[str, str] = field(default_factory=dict)
    reasoning: Dict[str, str] = field(default_factory=dict)
    confidence_scores: Dict[str, float] = field(default_factory=dict)
    fallback_used: bool = False
    fallback_jobs: List[str] = field(default_factory=list)
    model_mapping_rate: float = 0.0

    @property
    def mapped_count(self) -> int:
        return len(self.mappings)


def mapping_rate(mapped: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return mapped / total


def parse_mapping(parsed: Any, jobs: Sequence[JobRecord], courses: Sequence[CourseRecord]) -> MappingOutcome:
    if not isinstance(parsed, dict):
        return MappingOutcome()
    raw_mappings = as_str_dict(pick_first(parsed, MAPPING_KEYS))
    raw_reasoning = as_str_dict(pick_first(parsed, REASONING_KEYS))
    raw_confidence = as_str_dict(pick_first(parsed, CONFIDENCE_KEYS))

    job_names = NameResolver(job.title for job in jobs)
    course_names = NameResolver(course.label for course in courses)

    mappings: Dict[str, str] = {}
    for raw_job, raw_course in raw_mappings.items():
        title = job_names.resolve(raw_job)
        course = course_names.resolve(raw_course)
        if title is None:
            continue
        if course is None:
            logger.info("[mapping][drop] job=%s course=%r not in course list", title, raw_course)
            continue
        mappings.setdefault(title, course)

    reasoning: Dict[str, str] = {}
    for raw_job, text in raw_reasoning.items():
        title = job_names.resolve(raw_job)
        if title is not None and isinstance(text, str) and text.strip():
            reasoning[title] = text.strip()

    confidence: Dict[str, float] = {}
    for raw_job, value in raw_confidence.items():
        title = job_names.resolve(raw_job)
        score = normalize_confidence(value)
        if title is not None and score is not None:
            confidence[title] = score

    ordered = {job.title: mappings[job.title] for job in jobs if job.title in mappings}
    return MappingOutcome(mappings=ordered, reasoning=reasoning, confidence_scores=confidence)


class MappingStage:
    """Asks the model for a job -> course mapping; widens it with keyword fallback when coverage is low."""

    stage_name = "mapping"

    def __init__(self, client: CompletionClient) -> None:
        self.client = client

    def _model_mapping(
        self,
        jobs: Sequence[JobRecord],
        courses: Sequence[CourseRecord],
        thresholds: Dict[str, float],
        context: RunContext,
    ) -> MappingOutcome:
        described = sum(1 for job in jobs if job.has_description)
        effort = mapping_effort(described)
        try:
            completion = self.client.complete(
                build_mapping_prompt(jobs, courses, thresholds),
                context.auth_token,
                effort,
                timeout_ms=context.mapping_timeout_ms,
                max_retries=context.retries(self.stage_name),
                cancel_token=context.cancel_token,
            )
            parsed = decode_or_raise(completion.content, completion.reasoning_content)
        except MalformedResponseError as exc:
            logger.warning("[mapping][decode] %s; continuing with an empty mapping", exc)
            return MappingOutcome()
        outcome = parse_mapping(parsed, jobs, courses)
        logger.info("[mapping][parsed] mapped=%s/%s effort=%s", outcome.mapped_count, len(jobs), effort.value)
        return outcome

    def run(
        self,
        jobs: Sequence[JobRecord],
        courses: Sequence[CourseRecord],
        thresholds: Dict[str, float],
        context: RunContext,
    ) -> MappingOutcome:
        context.check_cancelled()
        if courses:
            outcome = self._model_mapping(jobs, courses, thresholds, context)
        else:
            logger.info("[mapping][skip] no courses to map against")
            outcome = MappingOutcome()

        rate = mapping_rate(outcome.mapped_count, len(jobs))
        outcome.model_mapping_rate = rate
        if rate < FALLBACK_MAPPING_RATE and courses:
            logger.warning("[mapping][fallback] low mapping rate=%.0f%%, attempting fallback mapping", rate * 100)
            context.check_cancelled()
            outcome = fallback.extend(jobs, courses, outcome)
        return outcome


def map_jobs_to_courses(
    jobs: Sequence[JobRecord],
    courses: Sequence[CourseRecord],
    thresholds: Dict[str, float],
    context: RunContext,
    client: CompletionClient,
) -> MappingOutcome:
    return MappingStage(client).run(jobs, courses, thresholds, context)
