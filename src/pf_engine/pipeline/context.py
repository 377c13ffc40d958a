"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from pf_engine.models import ReasoningEffort
from pf_engine.utils.cancel import CancelToken

BASE_TIMEOUT_MS = 45_000
PER_JOB_TIMEOUT_MS = 2_000
PER_DESCRIPTION_TIMEOUT_MS = 3_000
MAX_TIMEOUT_MS = 90_000

THRESHOLD_BASE_TIMEOUT_MS = 30_000
THRESHOLD_PER_JOB_TIMEOUT_MS = 1_000
THRESHOLD_MAX_TIMEOUT_MS = 45_000

# (stage, simplified) -> additional attempts after the first
STAGE_RETRIES: Dict[Tuple[str, bool], int] = {
    ("thresholds", False): 2,
    ("thresholds", True): 1,
    ("mapping", False): 1,
    ("mapping", True): 0,
}


def compute_dynamic_timeout_ms(job_count: int, jobs_with_description: int) -> int:
    return min(
        BASE_TIMEOUT_MS + PER_JOB_TIMEOUT_MS * job_count + PER_DESCRIPTION_TIMEOUT_MS * jobs_with_description,
        MAX_TIMEOUT_MS,
    )


def compute_threshold_timeout_ms(job_count: int) -> int:
    return min(THRESHOLD_BASE_TIMEOUT_MS + THRESHOLD_PER_JOB_TIMEOUT_MS * job_count, THRESHOLD_MAX_TIMEOUT_MS)


def threshold_effort(job_count: int, simplified: bool) -> ReasoningEffort:
    if simplified:
        return ReasoningEffort.LOW
    if job_count > 7:
        return ReasoningEffort.MEDIUM
    return ReasoningEffort.HIGH


def mapping_effort(jobs_with_description: int) -> ReasoningEffort:
    if jobs_with_description > 5:
        return ReasoningEffort.MEDIUM
    return ReasoningEffort.HIGH


@dataclass(frozen=True)
class RunContext:
    """Per-invocation values threaded through every stage. Never stored on shared objects."""

    auth_token: str
    simplified: bool
    mapping_timeout_ms: int
    threshold_timeout_ms: int
    cancel_token: Optional[CancelToken] = None

    @classmethod
    def build(
        cls,
        *,
        auth_token: str,
        job_count: int,
        jobs_with_description: int,
        simplified: bool = False,
        cancel_token: Optional[CancelToken] = None,
    ) -> "RunContext":
        return cls(
            auth_token=auth_token,
            simplified=simplified,
            mapping_timeout_ms=compute_dynamic_timeout_ms(job_count, jobs_with_description),
            threshold_timeout_ms=compute_threshold_timeout_ms(job_count),
            cancel_token=cancel_token,
        )

    def retries(self, stage: str) -> int:
        return STAGE_RETRIES.get((stage, self.simplified), 0)

    def check_cancelled(self) -> None:
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled()
