"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import re
from typing import Optional

REDACTED = "[REDACTED]"

# Token shapes masked in error messages and log previews.
_TOKEN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b[Bb]earer\s+[A-Za-z0-9._\-]{20,}"),
    re.compile(r"\bxai-[A-Za-z0-9_\-]{20,}"),
    re.compile(r"\bsk-[A-Za-z0-9]{20,}\b"),
)


def redact_text(text: str, *, secret: Optional[str] = None) -> str:
    """Mask known token shapes, plus the literal secret when one is given."""
    if not text:
        return text
    if secret:
        text = text.replace(secret, REDACTED)
    for pattern in _TOKEN_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


def mask_token(token: Optional[str], keep: int = 6) -> str:
    if not token:
        return "<none>"
    if len(token) <= keep:
        return "***"
    return token[:keep] + "..."
