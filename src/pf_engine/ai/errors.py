"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

from typing import Optional


class PathfinderError(RuntimeError):
    """Base class for every error raised inside the analysis core."""


class ConfigurationError(PathfinderError):
    """Missing or unusable auth token; raised before any network call."""


class InvalidInputError(PathfinderError):
    pass


class AnalysisCancelled(PathfinderError):
    def __init__(self, message: str = "analysis cancelled") -> None:
        super().__init__(message)


class CompletionError(PathfinderError):
    reason = "completion_error"
    retryable = True

    def __init__(self, message: str, *, status_code: Optional[int] = None, attempts: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.attempts = attempts

    def __str__(self) -> str:
        return self.message


class AuthError(CompletionError):
    reason = "auth_error"
    retryable = False


class RateLimitError(CompletionError):
    reason = "rate_limited"


class NetworkError(CompletionError):
    reason = "network_error"


class ServerError(CompletionError):
    reason = "server_error"


class MalformedResponseError(CompletionError):
    reason = "malformed_response"


def error_for_status(status: int, detail: Optional[str] = None) -> CompletionError:
    """Map a non-2xx HTTP status to the matching completion error."""
    if status == 401:
        return AuthError("Invalid API key. Please check your API key in settings.", status_code=status)
    if status == 403:
        return AuthError("API access forbidden. Check your API key permissions.", status_code=status)
    if status == 429:
        return RateLimitError("API rate limit exceeded. Please try again later.", status_code=status)
    if status == 0:
        return NetworkError("Network error. Check your internet connection.", status_code=status)
    message = detail or f"API call failed with status {status}"
    return ServerError(message, status_code=status)


__all__ = [
    "AnalysisCancelled",
    "AuthError",
    "CompletionError",
    "ConfigurationError",
    "InvalidInputError",
    "MalformedResponseError",
    "NetworkError",
    "PathfinderError",
    "RateLimitError",
    "ServerError",
    "error_for_status",
]
