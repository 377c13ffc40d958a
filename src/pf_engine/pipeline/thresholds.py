"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pf_engine.ai.client import CompletionClient
from pf_engine.ai.decoder import decode_or_raise
from pf_engine.ai.errors import MalformedResponseError, NetworkError, RateLimitError, ServerError
from pf_engine.ai.prompts import build_threshold_prompt
from pf_engine.ai.schema import NameResolver, as_number, clamp_threshold, threshold_entries
from pf_engine.models import JobRecord
from pf_engine.pipeline.context import RunContext, threshold_effort

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.80

# First matching row wins.
DEFAULT_THRESHOLD_RULES: Tuple[Tuple[Tuple[str, ...], float], ...] = (
    (("senior", "lead", "principal"), 0.85),
    (("architect", "scientist"), 0.90),
    (("engineer", "developer"), 0.80),
    (("analyst", "designer"), 0.75),
    (("manager", "director"), 0.70),
)

_REASONING_BANDS: Tuple[Tuple[float, str], ...] = (
    (0.90, "Critical role requiring extensive formal training and certification"),
    (0.85, "Senior technical role requiring deep theoretical knowledge"),
    (0.80, "Standard role needing solid educational foundation"),
    (0.75, "Balanced role mixing formal education with practical experience"),
    (0.70, "Creative role where experience and formal education are both valuable"),
)
_REASONING_FLOOR = "Experience-heavy role with moderate formal education requirements"

_RECOVERABLE = (MalformedResponseError, NetworkError, ServerError, RateLimitError)


@dataclass
class ThresholdOutcome:
    thresholds: Dict[str, float]
    reasoning: Dict[str, str]
    fallback_used: bool = False
    error: Optional[str] = None
    defaulted_jobs: List[str] = field(default_factory=list)


def default_threshold(title: str) -> float:
    lowered = title.lower()
    for keywords, value in DEFAULT_THRESHOLD_RULES:
        if any(keyword in lowered for keyword in keywords):
            return value
    return DEFAULT_THRESHOLD


def band_reasoning(threshold: float) -> str:
    for floor, text in _REASONING_BANDS:
        if threshold >= floor:
            return text
    return _REASONING_FLOOR


def default_thresholds(jobs: Sequence[JobRecord], error: Optional[str] = None) -> ThresholdOutcome:
    thresholds = {job.title: default_threshold(job.title) for job in jobs}
    return ThresholdOutcome(
        thresholds=thresholds,
        reasoning={title: band_reasoning(value) for title, value in thresholds.items()},
        fallback_used=True,
        error=error,
        defaulted_jobs=list(thresholds),
    )


def parse_thresholds(parsed: Any, jobs: Sequence[JobRecord]) -> Tuple[Dict[str, float], Dict[str, str]]:
    resolver = NameResolver(job.title for job in jobs)
    thresholds: Dict[str, float] = {}
    reasoning: Dict[str, str] = {}
    for item in threshold_entries(parsed):
        title = resolver.resolve(item.get("job_title"))
        value = as_number(item.get("threshold"))
        if title is None or value is None:
            continue
        thresholds[title] = clamp_threshold(value)
        text = item.get("reasoning")
        if isinstance(text, str) and text.strip():
            reasoning[title] = text.strip()
    return thresholds, reasoning


class ThresholdStage:
    """Asks the model for per-job adequacy thresholds; falls back to keyword defaults."""

    stage_name = "thresholds"

    def __init__(self, client: CompletionClient) -> None:
        self.client = client

    def run(self, jobs: Sequence[JobRecord], context: RunContext) -> ThresholdOutcome:
        context.check_cancelled()
        effort = threshold_effort(len(jobs), context.simplified)
        prompt = build_threshold_prompt([job.title for job in jobs])
        try:
            completion = self.client.complete(
                prompt,
                context.auth_token,
                effort,
                timeout_ms=context.threshold_timeout_ms,
                max_retries=context.retries(self.stage_name),
                cancel_token=context.cancel_token,
            )
            parsed = decode_or_raise(completion.content, completion.reasoning_content)
        except _RECOVERABLE as exc:
            logger.warning("[thresholds][fallback] reason=%s message=%s", exc.reason, exc)
            return default_thresholds(jobs, error=str(exc))

        thresholds, reasoning = parse_thresholds(parsed, jobs)
        if not thresholds:
            logger.warning("[thresholds][fallback] reason=empty_result jobs=%s", len(jobs))
            return default_thresholds(jobs, error="No thresholds found in completion response")

        defaulted: List[str] = []
        for job in jobs:
            if job.title not in thresholds:
                thresholds[job.title] = default_threshold(job.title)
                defaulted.append(job.title)
            if job.title not in reasoning:
                reasoning[job.title] = band_reasoning(thresholds[job.title])
        if defaulted:
            logger.info("[thresholds][partial] defaulted=%s", len(defaulted))
        logger.info("[thresholds][parsed] count=%s effort=%s", len(thresholds) - len(defaulted), effort.value)
        ordered = {job.title: thresholds[job.title] for job in jobs}
        return ThresholdOutcome(
            thresholds=ordered,
            reasoning={title: reasoning[title] for title in ordered},
            defaulted_jobs=defaulted,
        )


def determine_thresholds(jobs: Sequence[JobRecord], context: RunContext, client: CompletionClient) -> ThresholdOutcome:
    return ThresholdStage(client).run(jobs, context)
