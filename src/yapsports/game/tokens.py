"""Token effect records and the default token catalogue."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from yapsports.util.parsing import safe_float


class EffectType(StrEnum):
    SCORE_MULTIPLIER = "score_multiplier"
    STAT_THRESHOLD = "stat_threshold"
    CONTRACT_ADD = "contract_add"
    SCORE_VARIANCE = "score_variance"
    TEAM_SYNERGY = "team_synergy"
    # legacy names still present on older inventory rows
    MULTIPLIER = "multiplier"
    THRESHOLD = "threshold"


@dataclass(frozen=True)
class TokenEffect:
    """A token applied to a lineup slot.

    `effect` holds the legacy nested effect payload; newer rows carry
    `effect_type`/`effect_value` directly and leave it empty.
    """

    id: str
    effect_type: str
    effect_value: float | None = None
    description: str = ""
    name: str = ""
    effect: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_record(cls, raw: Mapping[str, Any]) -> TokenEffect:
        """Build from an inventory row in either the current or the legacy shape."""
        legacy = raw.get("effect")
        legacy = legacy if isinstance(legacy, Mapping) else {}
        effect_type = (
            raw.get("effect_type") or legacy.get("effect") or legacy.get("type") or raw.get("type")
        )
        return cls(
            id=str(raw.get("id") or ""),
            effect_type=str(effect_type or ""),
            effect_value=safe_float(raw.get("effect_value")),
            description=str(raw.get("description") or ""),
            name=str(raw.get("name") or ""),
            effect=MappingProxyType(dict(legacy)),
        )

    @property
    def label(self) -> str:
        return self.name or self.description or self.id

    def legacy_number(self, *keys: str) -> float | None:
        for key in keys:
            value = safe_float(self.effect.get(key))
            if value is not None:
                return value
        return None

    def value_or(self, *legacy_keys: str, default: float) -> float:
        """`effect_value`, else the first legacy field present, else `default`."""
        if self.effect_value is not None:
            return self.effect_value
        legacy = self.legacy_number(*legacy_keys)
        return legacy if legacy is not None else default


DEFAULT_TOKENS: tuple[TokenEffect, ...] = (
    TokenEffect(
        id="score_boost",
        name="Score Boost",
        effect_type=EffectType.SCORE_MULTIPLIER,
        effect_value=1.5,
        description="1.5x fantasy points",
    ),
    TokenEffect(
        id="big_night",
        name="25+ Points Bonus",
        effect_type=EffectType.STAT_THRESHOLD,
        effect_value=10,
        description="+10 if the player reaches 25 fantasy points",
    ),
    TokenEffect(
        id="contract_extension",
        name="Contract Extension",
        effect_type=EffectType.CONTRACT_ADD,
        effect_value=2,
        description="Adds 2 contracts to the card",
    ),
    TokenEffect(
        id="go_big",
        name="Go Big or Go Home",
        effect_type=EffectType.SCORE_VARIANCE,
        description="Coin flip: double the score or lose half of it",
    ),
    TokenEffect(
        id="team_chemistry",
        name="Team Chemistry",
        effect_type=EffectType.TEAM_SYNERGY,
        effect_value=20,
        description="+20 if 3+ lineup players score 15+ points",
    ),
)
