"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

# Load .env file into environment
load_dotenv()

DEFAULT_API_URL = "https://api.x.ai/v1/chat/completions"
DEFAULT_MODEL = "grok-3-mini"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_TOP_P = 0.8
DEFAULT_MAX_TOKENS = 4096

SYSTEM_PREAMBLE = (
    "You are an expert career path analyst with expertise in educational planning and job market "
    "analysis. Provide detailed, accurate analysis with valid JSON responses when requested."
)

_XAI_KEY_RE = re.compile(r"^xai-[0-9A-Za-z\-_]{40,}$")


class CompletionSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    api_url: str = Field(default=DEFAULT_API_URL, min_length=1)
    model: str = Field(default=DEFAULT_MODEL, min_length=1)
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    top_p: float = Field(default=DEFAULT_TOP_P, gt=0.0, le=1.0)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    system_preamble: str = Field(default=SYSTEM_PREAMBLE)


def _get_int_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def load_completion_settings() -> CompletionSettings:
    """
    Build completion settings from the environment.

    Unparseable or out-of-range values fall back to the defaults instead of failing the run.
    """
    payload = {
        "api_url": os.environ.get("PATHFINDER_API_URL") or DEFAULT_API_URL,
        "model": os.environ.get("PATHFINDER_MODEL") or DEFAULT_MODEL,
        "temperature": _get_float_env("PATHFINDER_TEMPERATURE", DEFAULT_TEMPERATURE),
        "top_p": _get_float_env("PATHFINDER_TOP_P", DEFAULT_TOP_P),
        "max_tokens": _get_int_env("PATHFINDER_MAX_TOKENS", DEFAULT_MAX_TOKENS),
    }
    try:
        return CompletionSettings.model_validate(payload)
    except ValidationError as exc:
        logger.warning("[config][settings] invalid completion settings, using defaults: %s", exc)
        return CompletionSettings()


def get_api_key() -> Optional[str]:
    value = os.getenv("XAI_API_KEY")
    if value is None or not value.strip():
        return None
    return value.strip()


def looks_like_xai_key(api_key: Optional[str]) -> bool:
    if not api_key or not api_key.strip():
        return False
    return bool(_XAI_KEY_RE.match(api_key.strip()))
