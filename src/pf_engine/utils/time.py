"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_z() -> str:
    """Second-precision ISO-8601 UTC timestamp with trailing Z, used for suggestion creation times."""
    return utc_now().replace(microsecond=0).isoformat().replace("+00:00", "Z")
