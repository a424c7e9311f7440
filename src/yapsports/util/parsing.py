"""Shared parsing helpers for tolerant numeric/string coercion."""

from __future__ import annotations

from typing import Any


def safe_float(value: Any) -> float | None:
    """Parse number-like input into float, returning None when invalid."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            return float(raw)
        except ValueError:
            return None
    return None


def safe_int(value: Any) -> int | None:
    """Parse number-like input into int, returning None when invalid."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.startswith("+"):
            raw = raw[1:]
        try:
            return int(raw)
        except ValueError:
            parsed = safe_float(raw)
            return int(parsed) if parsed is not None else None
    return None


def count(value: Any) -> int:
    """Counting stat with missing/invalid values read as zero."""
    parsed = safe_int(value)
    return parsed if parsed is not None and parsed > 0 else 0


def ratio(made: int, attempted: int) -> float:
    """Shooting percentage, zero when nothing was attempted."""
    if attempted > 0:
        return made / attempted
    return 0.0
