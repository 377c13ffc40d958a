from .ai.errors import (
    AnalysisCancelled,
    AuthError,
    CompletionError,
    ConfigurationError,
    InvalidInputError,
    PathfinderError,
)
from .models import AnalysisResult, CourseRecord, JobRecord, MappingEntry, SuggestedCourse
from .pipeline.orchestrator import AnalysisPipeline, check_api_connection, run_analysis
from .utils.cancel import CancelToken

__all__ = [
    "AnalysisCancelled",
    "AnalysisPipeline",
    "AnalysisResult",
    "AuthError",
    "CancelToken",
    "CompletionError",
    "ConfigurationError",
    "CourseRecord",
    "InvalidInputError",
    "JobRecord",
    "MappingEntry",
    "PathfinderError",
    "SuggestedCourse",
    "check_api_connection",
    "run_analysis",
]
