"""Lineup cards, submission validation and token/contract bookkeeping."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace

from yapsports.game.errors import LineupError
from yapsports.game.tokens import EffectType, TokenEffect

logger = logging.getLogger(__name__)

POSITIONS = ("PG", "SG", "SF", "PF", "C")
LOW_CONTRACTS = 1


@dataclass(frozen=True)
class LineupCard:
    """A user-owned player card bound to a lineup position."""

    card_id: str
    player_id: int
    player_name: str = ""
    position: str = ""
    rarity: str = "base"
    contracts_remaining: int = 0
    applied_token_id: str | None = None

    @property
    def is_eligible(self) -> bool:
        return self.contracts_remaining > 0

    @property
    def label(self) -> str:
        return self.player_name or self.card_id


@dataclass(frozen=True)
class LineupValidation:
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


def validate_lineup(cards: Sequence[LineupCard]) -> LineupValidation:
    """Check a lineup before submission.

    Missing positions and expired contracts block submission; a card on its
    last contract only produces a warning.
    """
    errors: list[str] = []
    warnings: list[str] = []
    filled = {card.position for card in cards}
    for position in POSITIONS:
        if position not in filled:
            errors.append(f"Missing {position} position")
    expired = [card for card in cards if not card.is_eligible]
    if expired:
        errors.append(f"{len(expired)} cards have expired contracts")
    for card in cards:
        if card.contracts_remaining == LOW_CONTRACTS:
            warnings.append(f"{card.label} has 1 contract remaining")
    return LineupValidation(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))


def place_card(cards: Sequence[LineupCard], card: LineupCard, position: str) -> list[LineupCard]:
    """Start `card` at `position`, replacing whoever held that slot."""
    if position not in POSITIONS:
        raise LineupError(f"unknown lineup position {position!r}")
    if not card.is_eligible:
        raise LineupError(f"card {card.card_id} has no contracts remaining")
    placed = replace(card, position=position)
    kept = [
        existing
        for existing in cards
        if existing.position != position and existing.card_id != card.card_id
    ]
    return [*kept, placed]


def apply_token(cards: Sequence[LineupCard], token_id: str, card_id: str) -> list[LineupCard]:
    """Attach a token to one slot, detaching it from any slot that held it."""
    if not any(card.card_id == card_id for card in cards):
        raise LineupError(f"card {card_id} is not in the lineup")
    updated: list[LineupCard] = []
    for card in cards:
        if card.card_id == card_id:
            updated.append(replace(card, applied_token_id=token_id))
        elif card.applied_token_id == token_id:
            logger.debug("detaching token %s from card %s", token_id, card.card_id)
            updated.append(replace(card, applied_token_id=None))
        else:
            updated.append(card)
    return updated


def remove_token(cards: Sequence[LineupCard], card_id: str) -> list[LineupCard]:
    return [
        replace(card, applied_token_id=None) if card.card_id == card_id else card
        for card in cards
    ]


def tokens_for_lineup(
    cards: Iterable[LineupCard], tokens: Mapping[str, TokenEffect]
) -> dict[str, list[TokenEffect]]:
    """Map card id to its applied token, skipping ids the inventory no longer has."""
    out: dict[str, list[TokenEffect]] = {}
    for card in cards:
        token_id = card.applied_token_id
        if not token_id:
            continue
        token = tokens.get(token_id)
        if token is None:
            logger.warning("card %s references missing token %s", card.card_id, token_id)
            continue
        out[card.card_id] = [token]
    return out


def apply_contract_tokens(
    card: LineupCard, tokens: Iterable[TokenEffect]
) -> tuple[LineupCard, list[int]]:
    """Apply `contract_add` effects to a card's contract counter."""
    applied: list[int] = []
    for token in tokens:
        if token.effect_type != EffectType.CONTRACT_ADD:
            continue
        amount = int(token.value_or("value", "contracts", default=0.0))
        if amount > 0:
            applied.append(amount)
    if not applied:
        return card, applied
    return replace(card, contracts_remaining=card.contracts_remaining + sum(applied)), applied


def consume_contracts(cards: Iterable[LineupCard]) -> list[LineupCard]:
    """Use up one contract on every started card after the lineup is scored."""
    return [
        replace(card, contracts_remaining=max(0, card.contracts_remaining - 1)) for card in cards
    ]
