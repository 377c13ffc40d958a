"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

THRESHOLD_MIN = 0.60
THRESHOLD_MAX = 0.95


class ReasoningEffort(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class JobRecord(BaseModel):
    """A job title as handed over by the ingestion layer. Identity is the title."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    description: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    experience_level: Optional[str] = Field(default=None, alias="experienceLevel")

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("job title must not be blank")
        return value

    @property
    def has_description(self) -> bool:
        return bool(self.description and self.description.strip())


class CourseRecord(BaseModel):
    label: str = Field(min_length=1)

    @field_validator("label")
    @classmethod
    def _strip_label(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("course label must not be blank")
        return value


class MappingEntry(BaseModel):
    job: str
    course: str
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""


class SuggestedCourse(BaseModel):
    title: str
    confidence: float = Field(ge=0.0, le=1.0)
    skill_gaps: List[str] = Field(default_factory=list)
    related_jobs: List[str] = Field(default_factory=list)
    reasoning: str = ""
    created_at: str = ""
    improvement_type: Literal["new_course"] = "new_course"


class ConfidenceEntry(BaseModel):
    confidence_score: float
    threshold: float
    threshold_met: bool
    skill_gaps: List[str] = Field(default_factory=list)
    missing_competencies: List[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Aggregate returned to the caller. Always well-formed, including on failure."""

    success: bool
    mappings: Dict[str, MappingEntry] = Field(default_factory=dict)
    suggested_courses: List[SuggestedCourse] = Field(default_factory=list)
    job_suggestion_mappings: Dict[str, str] = Field(default_factory=dict)
    thresholds: Dict[str, float] = Field(default_factory=dict)
    threshold_reasoning: Dict[str, str] = Field(default_factory=dict)
    ai_reasoning: Dict[str, str] = Field(default_factory=dict)
    confidence_analysis: Dict[str, ConfidenceEntry] = Field(default_factory=dict)
    overall_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    fallbacks: List[str] = Field(default_factory=list)
    state_history: List[str] = Field(default_factory=list)
    timeout_ms: Optional[int] = None
    error: Optional[str] = None

    @field_validator("thresholds")
    @classmethod
    def _validate_threshold_range(cls, value: Dict[str, float]) -> Dict[str, float]:
        for job, threshold in value.items():
            if not THRESHOLD_MIN <= threshold <= THRESHOLD_MAX:
                raise ValueError(f"threshold for {job!r} outside [{THRESHOLD_MIN}, {THRESHOLD_MAX}]")
        return value

    @classmethod
    def failure(cls, error: str, *, state_history: Optional[List[str]] = None) -> "AnalysisResult":
        return cls(
            success=False,
            error=error or "Analysis failed",
            overall_confidence=0.0,
            state_history=list(state_history or []),
        )

    def course_map(self) -> Dict[str, str]:
        """Plain job -> course view of the mappings."""
        return {job: entry.course for job, entry in self.mappings.items()}

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class CompletionMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str = "assistant"
    content: Optional[str] = None
    reasoning_content: Optional[str] = None


class CompletionChoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: CompletionMessage
    finish_reason: Optional[str] = None


class CompletionUsage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CompletionEnvelope(BaseModel):
    """Wire shape of a chat completion response."""

    model_config = ConfigDict(extra="ignore")

    choices: List[CompletionChoice] = Field(min_length=1)
    usage: CompletionUsage = Field(default_factory=CompletionUsage)
    model: str = ""
    id: str = ""
    created: int = 0
