"""Error types for lineup and pack operations."""

from __future__ import annotations


class GameRulesError(ValueError):
    """Base error for fantasy game rule violations."""


class LineupError(GameRulesError):
    """Raised for invalid lineup mutations."""


class PackError(GameRulesError):
    """Raised when a pack cannot be generated."""
