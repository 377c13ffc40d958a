"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests
from pydantic import ValidationError

from pf_engine.ai.decoder import select_text
from pf_engine.ai.errors import (
    AnalysisCancelled,
    CompletionError,
    ConfigurationError,
    MalformedResponseError,
    NetworkError,
    error_for_status,
)
from pf_engine.ai.prompts import CONNECTION_TEST_PROMPT
from pf_engine.config import CompletionSettings, load_completion_settings
from pf_engine.models import CompletionEnvelope, ReasoningEffort
from pf_engine.utils.cancel import CancelToken
from pf_engine.utils.redaction import mask_token, redact_text

logger = logging.getLogger(__name__)

# None means the full configured budget.
TOKEN_BUDGETS: Dict[ReasoningEffort, Optional[int]] = {
    ReasoningEffort.LOW: 1500,
    ReasoningEffort.MEDIUM: 2000,
    ReasoningEffort.HIGH: None,
}

CONNECTION_TEST_TIMEOUT_MS = 10_000
MAX_RETRIES = 2


@dataclass(frozen=True)
class CompletionText:
    content: str = ""
    reasoning_content: str = ""
    finish_reason: Optional[str] = None
    model: str = ""
    usage: Dict[str, int] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return select_text(self.content, self.reasoning_content)


def _error_detail(resp: Any) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
    return None


class CompletionClient:
    """Issues chat-completion requests with a per-call timeout and bounded immediate retry."""

    def __init__(
        self,
        settings: Optional[CompletionSettings] = None,
        *,
        session_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.settings = settings or load_completion_settings()
        self._session_factory = session_factory

    def token_budget(self, effort: ReasoningEffort, max_tokens_hint: Optional[int] = None) -> int:
        budget = TOKEN_BUDGETS[effort]
        if budget is None:
            budget = self.settings.max_tokens
        if max_tokens_hint is not None and max_tokens_hint > 0:
            budget = min(budget, max_tokens_hint)
        return budget

    def build_request(
        self,
        prompt: str,
        effort: ReasoningEffort,
        max_tokens_hint: Optional[int] = None,
    ) -> Dict[str, Any]:
        return {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": self.settings.system_preamble},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.settings.temperature,
            "max_tokens": self.token_budget(effort, max_tokens_hint),
            "top_p": self.settings.top_p,
            "reasoning_effort": effort.value,
        }

    def _post(
        self,
        payload: Dict[str, Any],
        headers: Dict[str, str],
        timeout_s: float,
        cancel_token: Optional[CancelToken],
    ) -> Any:
        """
        POST one attempt on a fresh session.

        With a cancel token the request runs on a worker thread and the caller waits for whichever
        comes first, the response or cancel(). A cancelled call returns at once; the abandoned worker
        ends at its own timeout.
        """
        factory = self._session_factory or requests.Session
        session = factory()
        if cancel_token is None:
            try:
                return session.post(self.settings.api_url, headers=headers, json=payload, timeout=timeout_s)
            finally:
                session.close()

        released = threading.Event()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pf-completion")
        future = executor.submit(session.post, self.settings.api_url, headers=headers, json=payload, timeout=timeout_s)
        future.add_done_callback(lambda _future: released.set())
        unregister = cancel_token.register(released.set)
        try:
            released.wait()
            if cancel_token.cancelled:
                logger.info("[completion][cancel] in-flight request abandoned")
                raise AnalysisCancelled()
            return future.result()
        finally:
            unregister()
            session.close()
            executor.shutdown(wait=False)

    def _parse(self, resp: Any) -> CompletionText:
        try:
            body = resp.json()
        except ValueError as exc:
            raise MalformedResponseError("Completion response body is not JSON", status_code=resp.status_code) from exc
        try:
            envelope = CompletionEnvelope.model_validate(body)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Completion response has an unexpected shape: {exc.error_count()} error(s)",
                status_code=resp.status_code,
            ) from exc
        choice = envelope.choices[0]
        return CompletionText(
            content=choice.message.content or "",
            reasoning_content=choice.message.reasoning_content or "",
            finish_reason=choice.finish_reason,
            model=envelope.model,
            usage=envelope.usage.model_dump(),
        )

    def complete(
        self,
        prompt: str,
        auth_token: Optional[str],
        effort: ReasoningEffort,
        *,
        timeout_ms: int,
        max_retries: int = 0,
        max_tokens_hint: Optional[int] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> CompletionText:
        if not auth_token or not auth_token.strip():
            raise ConfigurationError("API key not configured")

        payload = self.build_request(prompt, effort, max_tokens_hint)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {auth_token.strip()}",
        }
        timeout_s = max(timeout_ms, 1) / 1000.0
        attempts = 1 + max(0, min(max_retries, MAX_RETRIES))
        last_error: Optional[CompletionError] = None

        for attempt in range(1, attempts + 1):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            logger.info(
                "[completion][attempt] effort=%s attempt=%s/%s timeout_s=%.1f max_tokens=%s token=%s",
                effort.value,
                attempt,
                attempts,
                timeout_s,
                payload["max_tokens"],
                mask_token(auth_token),
            )
            try:
                resp = self._post(payload, headers, timeout_s, cancel_token)
            except requests.Timeout:
                if cancel_token is not None and cancel_token.cancelled:
                    raise AnalysisCancelled()
                last_error = NetworkError(f"Request timed out after {timeout_s:.1f}s", status_code=0, attempts=attempt)
            except requests.RequestException as exc:
                if cancel_token is not None and cancel_token.cancelled:
                    raise AnalysisCancelled() from exc
                detail = redact_text(str(exc), secret=auth_token)
                last_error = NetworkError(
                    f"Network error. Check your internet connection. ({detail})",
                    status_code=0,
                    attempts=attempt,
                )
            else:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                status = resp.status_code
                if 200 <= status < 300:
                    return self._parse(resp)
                detail = _error_detail(resp)
                last_error = error_for_status(status, redact_text(detail, secret=auth_token) if detail else None)
                last_error.attempts = attempt

            if not last_error.retryable or attempt >= attempts:
                break
            logger.warning(
                "[completion][retry] reason=%s status=%s attempt=%s/%s",
                last_error.reason,
                last_error.status_code,
                attempt,
                attempts,
            )

        assert last_error is not None
        logger.error(
            "[completion][failed] reason=%s status=%s attempts=%s message=%s",
            last_error.reason,
            last_error.status_code,
            last_error.attempts,
            last_error.message,
        )
        raise last_error

    def test_connection(self, auth_token: Optional[str], *, cancel_token: Optional[CancelToken] = None) -> bool:
        """Send a tiny connectivity prompt; True only when the model answers with the expected phrase."""
        try:
            completion = self.complete(
                CONNECTION_TEST_PROMPT,
                auth_token,
                ReasoningEffort.LOW,
                timeout_ms=CONNECTION_TEST_TIMEOUT_MS,
                max_retries=0,
                cancel_token=cancel_token,
            )
        except (CompletionError, ConfigurationError, AnalysisCancelled) as exc:
            logger.warning("[completion][connection_test] failed: %s", exc)
            return False
        return "successful" in completion.text


__all__ = ["CONNECTION_TEST_TIMEOUT_MS", "TOKEN_BUDGETS", "CompletionClient", "CompletionText"]
