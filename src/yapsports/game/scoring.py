"""Fantasy scoring: base formula plus composable token effects."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from yapsports.game.lineup import LineupCard
from yapsports.game.tokens import EffectType, TokenEffect
from yapsports.nba_data.models import GameStat

logger = logging.getLogger(__name__)

THRESHOLD_FANTASY_POINTS = 25.0
LEGACY_THRESHOLD_BONUS = 5.0
SYNERGY_BONUS = 20.0
SYNERGY_MIN_PLAYERS = 3
SYNERGY_MIN_POINTS = 15
NO_STATS_REASON = "No stats available"

STAT_WEIGHTS: dict[str, float] = {
    "points": 1.0,
    "rebounds": 1.2,
    "assists": 1.5,
    "steals": 3.0,
    "blocks": 3.0,
    "turnovers": -1.0,
    "three_pointers_made": 0.5,
}


def _round(value: float) -> float:
    return round(value, 2)


def calculate_base_fantasy_points(stats: GameStat) -> float:
    total = sum(getattr(stats, name) * weight for name, weight in STAT_WEIGHTS.items())
    return _round(total)


@dataclass(frozen=True)
class TokenContribution:
    token_id: str
    token_name: str
    type: str
    description: str
    bonus: float
    outcome: str | None = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "tokenId": self.token_id,
            "tokenName": self.token_name,
            "type": self.type,
            "description": self.description,
            "bonus": self.bonus,
        }
        if self.outcome is not None:
            payload["outcome"] = self.outcome
        return payload


@dataclass(frozen=True)
class PlayerScore:
    card_id: str
    player_id: int
    player_name: str
    position: str
    base_fantasy_points: float
    final_score: float
    token_effects: tuple[TokenContribution, ...] = ()
    reason: str | None = None

    @property
    def has_stats(self) -> bool:
        return self.reason is None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "cardId": self.card_id,
            "playerId": self.player_id,
            "playerName": self.player_name,
            "position": self.position,
            "baseFantasyPoints": self.base_fantasy_points,
            "tokenEffects": [item.as_payload() for item in self.token_effects],
            "finalScore": self.final_score,
        }
        if self.reason is not None:
            payload["reason"] = self.reason
        return payload


@dataclass(frozen=True)
class LineupScore:
    total_score: float
    player_scores: tuple[PlayerScore, ...] = field(default_factory=tuple)

    @property
    def players_with_stats(self) -> int:
        return sum(1 for item in self.player_scores if item.has_stats)

    def as_payload(self) -> dict[str, Any]:
        return {
            "totalScore": self.total_score,
            "playerScores": [item.as_payload() for item in self.player_scores],
        }


def _contribution(
    token: TokenEffect, kind: str, description: str, bonus: float, **extra: Any
) -> TokenContribution:
    return TokenContribution(
        token_id=token.id,
        token_name=token.label,
        type=kind,
        description=description,
        bonus=bonus,
        **extra,
    )


def _multiplier(token: TokenEffect, base: float, kind: str) -> TokenContribution:
    factor = token.value_or("multiplier", "value", default=1.0)
    bonus = base * (factor - 1)
    return _contribution(token, kind, f"{factor:g}x score multiplier", bonus)


def _threshold(token: TokenEffect, base: float) -> TokenContribution:
    threshold = THRESHOLD_FANTASY_POINTS
    if base >= threshold:
        bonus = token.value_or("value", default=1.0)
        return _contribution(
            token, "stat_threshold_met", f"{threshold:g}+ fantasy points bonus", bonus
        )
    return _contribution(
        token, "stat_threshold_missed", f"{threshold:g}+ fantasy points bonus (not met)", 0.0
    )


def _legacy_threshold(token: TokenEffect, base: float) -> TokenContribution:
    threshold = token.legacy_number("threshold") or THRESHOLD_FANTASY_POINTS
    description = token.description or f"{threshold:g}+ fantasy points bonus"
    if base >= threshold:
        bonus = token.value_or("bonus", "value", default=LEGACY_THRESHOLD_BONUS)
        return _contribution(token, "threshold_met", description, bonus)
    return _contribution(token, "threshold_missed", description, 0.0)


def _variance(token: TokenEffect, base: float, rng: Callable[[], float]) -> TokenContribution:
    if rng() < 0.5:
        return _contribution(
            token, "risk_reward_high", "Risk/Reward: High outcome!", base, outcome="double"
        )
    return _contribution(
        token, "risk_reward_low", "Risk/Reward: Low outcome", -base * 0.5, outcome="reduce"
    )


def _synergy(token: TokenEffect, lineup_stats: Sequence[GameStat]) -> TokenContribution:
    scorers = sum(1 for stat in lineup_stats if stat.points >= SYNERGY_MIN_POINTS)
    description = f"{SYNERGY_MIN_PLAYERS}+ lineup players with {SYNERGY_MIN_POINTS}+ points"
    if scorers >= SYNERGY_MIN_PLAYERS:
        bonus = token.value_or("value", "bonus", default=SYNERGY_BONUS)
        return _contribution(token, "team_synergy_met", description, bonus)
    return _contribution(token, "team_synergy_missed", f"{description} (not met)", 0.0)


def token_contribution(
    token: TokenEffect,
    base_points: float,
    *,
    lineup_stats: Sequence[GameStat] = (),
    rng: Callable[[], float] = random.random,
) -> TokenContribution:
    """Signed point delta of one token against a player's base points."""
    effect_type = token.effect_type
    if effect_type == EffectType.SCORE_MULTIPLIER:
        return _multiplier(token, base_points, "score_multiplier")
    if effect_type == EffectType.MULTIPLIER:
        return _multiplier(token, base_points, "multiplier")
    if effect_type == EffectType.STAT_THRESHOLD:
        return _threshold(token, base_points)
    if effect_type == EffectType.THRESHOLD:
        return _legacy_threshold(token, base_points)
    if effect_type == EffectType.CONTRACT_ADD:
        amount = token.value_or("value", "contracts", default=0.0)
        return _contribution(token, "contract_add", f"Added {amount:g} contract(s)", 0.0)
    if effect_type == EffectType.SCORE_VARIANCE:
        return _variance(token, base_points, rng)
    if effect_type == EffectType.TEAM_SYNERGY:
        return _synergy(token, lineup_stats)
    logger.warning("unknown token effect type %r on token %s", effect_type, token.id)
    return _contribution(token, "unknown", f"Unknown effect: {effect_type}", 0.0)


def apply_token_effects(
    base_points: float,
    tokens: Sequence[TokenEffect],
    *,
    lineup_stats: Sequence[GameStat] = (),
    rng: Callable[[], float] = random.random,
) -> tuple[float, list[TokenContribution]]:
    """Apply tokens in order; returns the rounded final points and the breakdown."""
    final_points = base_points
    breakdown: list[TokenContribution] = []
    for token in tokens:
        item = token_contribution(token, base_points, lineup_stats=lineup_stats, rng=rng)
        breakdown.append(item)
        final_points += item.bonus
    return _round(final_points), breakdown


def score_lineup(
    lineup: Sequence[LineupCard],
    stats_by_player: Mapping[int, GameStat],
    tokens_by_card: Mapping[str, Sequence[TokenEffect]],
    *,
    rng: Callable[[], float] = random.random,
) -> LineupScore:
    """Score every rostered card; a card without a stat line contributes zero.

    The total is rounded once over base points plus raw token deltas, not
    summed from the already-rounded per-player finals.
    """
    lineup_stats = [
        stats_by_player[card.player_id] for card in lineup if card.player_id in stats_by_player
    ]
    player_scores: list[PlayerScore] = []
    total = 0.0
    for card in lineup:
        stats = stats_by_player.get(card.player_id)
        if stats is None:
            player_scores.append(
                PlayerScore(
                    card_id=card.card_id,
                    player_id=card.player_id,
                    player_name=card.player_name,
                    position=card.position,
                    base_fantasy_points=0.0,
                    final_score=0.0,
                    reason=NO_STATS_REASON,
                )
            )
            continue
        base_points = calculate_base_fantasy_points(stats)
        final_points, breakdown = apply_token_effects(
            base_points,
            tokens_by_card.get(card.card_id, ()),
            lineup_stats=lineup_stats,
            rng=rng,
        )
        player_scores.append(
            PlayerScore(
                card_id=card.card_id,
                player_id=card.player_id,
                player_name=card.player_name,
                position=card.position,
                base_fantasy_points=base_points,
                final_score=final_points,
                token_effects=tuple(breakdown),
            )
        )
        total += base_points + sum(item.bonus for item in breakdown)
    return LineupScore(total_score=_round(total), player_scores=tuple(player_scores))
