"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from pf_engine.ai.errors import MalformedResponseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_SPAN_RE = re.compile(r"(\{[\s\S]*\}|\[[\s\S]*\])")

# Repairs run in this order. The single-quote pass is not quote-aware.
_LEADING_RE = re.compile(r"^[^{\[]*")
_TRAILING_RE = re.compile(r"[^}\]]*\Z")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_BARE_KEY_RE = re.compile(r"(\w+):", re.ASCII)
_MISSING_COMMA_RE = re.compile(r'"([^"]*)"(\s+)(?=")')

_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E]")
_BLANK_LINES_RE = re.compile(r"\n\s*\n")


def select_text(primary: Optional[str], secondary: Optional[str] = None) -> str:
    """Prefer the primary content field, falling back to the reasoning field when it is blank."""
    if primary and primary.strip():
        return primary
    if secondary and secondary.strip():
        logger.info("[decoder][select] primary text empty, using secondary reasoning text")
        return secondary
    return ""


def extract_candidate(text: str) -> str:
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1)
    match = _SPAN_RE.search(text)
    if match:
        return match.group(1)
    return text


def repair(text: str) -> str:
    text = text.strip()
    text = _LEADING_RE.sub("", text, count=1)
    text = _TRAILING_RE.sub("", text, count=1)
    text = _TRAILING_COMMA_RE.sub(r"\1", text)
    text = text.replace("'", '"')
    text = _BARE_KEY_RE.sub(r'"\1":', text)
    text = _MISSING_COMMA_RE.sub(r'"\1",\2', text)
    return text


def second_pass(text: str) -> str:
    text = _NON_PRINTABLE_RE.sub("", text)
    return _BLANK_LINES_RE.sub("\n", text)


def _try_parse(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except ValueError:
        return False, None


def decode(primary: Optional[str], secondary: Optional[str] = None) -> Optional[Any]:
    """
    Extract and repair a JSON payload from raw completion text.

    Returns the parsed value, or None when nothing parseable survives the repair passes.
    None means "no data" and is never an error for the caller.
    """
    text = select_text(primary, secondary)
    if not text:
        return None

    cleaned = repair(extract_candidate(text))
    ok, parsed = _try_parse(cleaned)
    if ok:
        return parsed

    cleaned = second_pass(cleaned)
    ok, parsed = _try_parse(cleaned)
    if ok:
        return parsed

    logger.warning("[decoder][parse] unparseable completion text preview=%r", text[:200])
    return None


def decode_or_raise(primary: Optional[str], secondary: Optional[str] = None) -> Any:
    parsed = decode(primary, secondary)
    if parsed is None:
        raise MalformedResponseError("No valid JSON found in completion response")
    return parsed


__all__ = ["decode", "decode_or_raise", "extract_candidate", "repair", "second_pass", "select_text"]
