"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from pf_engine.ai.client import CompletionClient
from pf_engine.ai.errors import AnalysisCancelled, ConfigurationError, InvalidInputError
from pf_engine.config import get_api_key, looks_like_xai_key
from pf_engine.models import AnalysisResult, CourseRecord, JobRecord, MappingEntry
from pf_engine.pipeline import confidence
from pf_engine.pipeline.context import RunContext
from pf_engine.pipeline.mapping import MappingStage
from pf_engine.pipeline.suggestions import SuggestionStage
from pf_engine.pipeline.thresholds import ThresholdStage
from pf_engine.utils.cancel import CancelToken
from pf_engine.utils.redaction import redact_text

logger = logging.getLogger(__name__)

JobInput = Union[JobRecord, Dict[str, Any], str]
CourseInput = Union[CourseRecord, Dict[str, Any], str]

FALLBACK_THRESHOLDS_DEFAULTED = "thresholds_defaulted"
FALLBACK_MAPPING = "mapping_fallback"


class PipelineState(str, Enum):
    IDLE = "Idle"
    DETERMINING_THRESHOLDS = "DeterminingThresholds"
    THRESHOLDS_READY = "ThresholdsReady"
    THRESHOLDS_DEFAULTED = "ThresholdsDefaulted"
    MAPPING = "Mapping"
    MAPPING_READY = "MappingReady"
    MAPPING_FALLBACK = "MappingFallback"
    EVALUATING_SUGGESTIONS = "EvaluatingSuggestions"
    ANALYZING = "Analyzing"
    COMPLETED_SUCCESS = "Completed(success)"
    COMPLETED_FAILURE = "Completed(failure)"


def coerce_jobs(jobs: Iterable[JobInput]) -> List[JobRecord]:
    """Accept records, dicts, or bare titles; duplicate titles keep the first occurrence."""
    records: List[JobRecord] = []
    seen = set()
    for item in jobs:
        try:
            if isinstance(item, JobRecord):
                record = item
            elif isinstance(item, str):
                record = JobRecord(title=item)
            else:
                record = JobRecord.model_validate(item)
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid job entry {item!r}: {exc.error_count()} error(s)") from exc
        if record.title in seen:
            logger.info("[pipeline][dedupe] job=%s", record.title)
            continue
        seen.add(record.title)
        records.append(record)
    return records


def coerce_courses(courses: Iterable[CourseInput]) -> List[CourseRecord]:
    records: List[CourseRecord] = []
    seen = set()
    for item in courses:
        try:
            if isinstance(item, CourseRecord):
                record = item
            elif isinstance(item, str):
                record = CourseRecord(label=item)
            else:
                record = CourseRecord.model_validate(item)
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid course entry {item!r}: {exc.error_count()} error(s)") from exc
        if record.label in seen:
            continue
        seen.add(record.label)
        records.append(record)
    return records


def resolve_auth_token(auth_token: Optional[str]) -> str:
    token = auth_token if auth_token is not None else get_api_key()
    if not token or not token.strip():
        raise ConfigurationError("API key not configured. Please add your xAI API key in settings.")
    if not looks_like_xai_key(token):
        logger.warning("[pipeline][auth] token does not look like an xAI key; continuing")
    return token.strip()


class AnalysisPipeline:
    """
    Runs Threshold -> Mapping -> Suggestion -> Confidence for one invocation.

    The pipeline holds no per-run state. Everything a run needs travels in a RunContext,
    so one instance may serve concurrent callers.
    """

    def __init__(self, client: Optional[CompletionClient] = None) -> None:
        self.client = client or CompletionClient()

    def run(
        self,
        jobs: Iterable[JobInput],
        courses: Iterable[CourseInput],
        auth_token: Optional[str],
        *,
        simplified: bool = False,
        cancel_token: Optional[CancelToken] = None,
    ) -> AnalysisResult:
        history: List[str] = [PipelineState.IDLE.value]
        try:
            return self._run(jobs, courses, auth_token, history, simplified=simplified, cancel_token=cancel_token)
        except AnalysisCancelled as exc:
            logger.warning("[pipeline][cancelled] states=%s", len(history))
            history.append(PipelineState.COMPLETED_FAILURE.value)
            return AnalysisResult.failure(str(exc), state_history=history)
        except Exception as exc:
            logger.exception("[pipeline][failed] %s", type(exc).__name__)
            history.append(PipelineState.COMPLETED_FAILURE.value)
            message = redact_text(str(exc), secret=auth_token) or type(exc).__name__
            return AnalysisResult.failure(message, state_history=history)

    def _run(
        self,
        jobs: Iterable[JobInput],
        courses: Iterable[CourseInput],
        auth_token: Optional[str],
        history: List[str],
        *,
        simplified: bool,
        cancel_token: Optional[CancelToken],
    ) -> AnalysisResult:
        token = resolve_auth_token(auth_token)
        job_records = coerce_jobs(jobs)
        course_records = coerce_courses(courses)
        if not job_records:
            raise InvalidInputError("At least one job title is required for analysis")

        context = RunContext.build(
            auth_token=token,
            job_count=len(job_records),
            jobs_with_description=sum(1 for job in job_records if job.has_description),
            simplified=simplified,
            cancel_token=cancel_token,
        )
        logger.info(
            "[pipeline][start] jobs=%s courses=%s simplified=%s mapping_timeout_ms=%s",
            len(job_records),
            len(course_records),
            simplified,
            context.mapping_timeout_ms,
        )
        fallbacks: List[str] = []

        history.append(PipelineState.DETERMINING_THRESHOLDS.value)
        thresholds = ThresholdStage(self.client).run(job_records, context)
        if thresholds.fallback_used:
            fallbacks.append(FALLBACK_THRESHOLDS_DEFAULTED)
            history.append(PipelineState.THRESHOLDS_DEFAULTED.value)
        else:
            history.append(PipelineState.THRESHOLDS_READY.value)

        history.append(PipelineState.MAPPING.value)
        mapping = MappingStage(self.client).run(job_records, course_records, thresholds.thresholds, context)
        if mapping.fallback_used:
            fallbacks.append(FALLBACK_MAPPING)
            history.append(PipelineState.MAPPING_FALLBACK.value)
        else:
            history.append(PipelineState.MAPPING_READY.value)

        context.check_cancelled()
        history.append(PipelineState.EVALUATING_SUGGESTIONS.value)
        suggestions = SuggestionStage().run(job_records, course_records, mapping.mappings, thresholds.thresholds)

        history.append(PipelineState.ANALYZING.value)
        analysis = confidence.analyze(job_records, mapping.mappings, mapping.confidence_scores, thresholds.thresholds)
        entries = {
            title: MappingEntry(
                job=title,
                course=course,
                confidence=confidence.job_confidence(title, mapping.mappings, mapping.confidence_scores),
                reasoning=mapping.reasoning.get(title, ""),
            )
            for title, course in mapping.mappings.items()
        }
        overall = len(entries) / len(job_records)

        history.append(PipelineState.COMPLETED_SUCCESS.value)
        logger.info(
            "[pipeline][done] mapped=%s/%s suggestions=%s fallbacks=%s",
            len(entries),
            len(job_records),
            len(suggestions.suggested_courses),
            ",".join(fallbacks) or "none",
        )
        return AnalysisResult(
            success=True,
            mappings=entries,
            suggested_courses=suggestions.suggested_courses,
            job_suggestion_mappings=suggestions.job_suggestion_mappings,
            thresholds=thresholds.thresholds,
            threshold_reasoning=thresholds.reasoning,
            ai_reasoning=dict(mapping.reasoning),
            confidence_analysis=analysis,
            overall_confidence=overall,
            fallbacks=fallbacks,
            state_history=list(history),
            timeout_ms=context.mapping_timeout_ms,
        )


def run_analysis(
    jobs: Iterable[JobInput],
    courses: Iterable[CourseInput],
    auth_token: Optional[str],
    *,
    simplified: bool = False,
    cancel_token: Optional[CancelToken] = None,
    client: Optional[CompletionClient] = None,
) -> AnalysisResult:
    return AnalysisPipeline(client).run(
        jobs,
        courses,
        auth_token,
        simplified=simplified,
        cancel_token=cancel_token,
    )


def check_api_connection(auth_token: Optional[str] = None, *, client: Optional[CompletionClient] = None) -> bool:
    """Check the completion endpoint with a tiny prompt. Never raises."""
    token = auth_token if auth_token is not None else get_api_key()
    return (client or CompletionClient()).test_connection(token)


__all__ = [
    "AnalysisPipeline",
    "PipelineState",
    "check_api_connection",
    "coerce_courses",
    "coerce_jobs",
    "run_analysis",
]
