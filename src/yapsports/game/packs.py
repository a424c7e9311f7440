"""Pack definitions, rarity odds and card draws from an in-memory catalogue."""

from __future__ import annotations

import random
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from yapsports.game.errors import PackError
from yapsports.game.lineup import POSITIONS


@dataclass(frozen=True)
class Rarity:
    key: str
    name: str
    base_contracts: int
    quick_sell_value: int
    score_multiplier: float
    pack_odds: float


# Insertion order is the cumulative draw order.
RARITIES: dict[str, Rarity] = {
    rarity.key: rarity
    for rarity in (
        Rarity("base", "Token Base", 3, 50, 1.0, 0.65),
        Rarity("role_player", "Role Player", 5, 100, 1.15, 0.25),
        Rarity("starter", "Starter", 7, 250, 1.3, 0.08),
        Rarity("all_star", "Base", 3, 50, 1.0, 0.65),
        Rarity("legend", "Legend", 15, 1000, 2.0, 0.001),
    )
}
FALLBACK_RARITY = "base"
PLAYER_TIER = "all_star"
TOKEN_TIER = "base"


@dataclass(frozen=True)
class PackType:
    id: str
    name: str
    description: str
    cost: int
    card_count: int
    player_cards: int
    token_cards: int


PACK_TYPES: dict[str, PackType] = {
    "starter": PackType(
        "starter", "Starter Pack", "10 base-tier player cards and 3 tokens", 0, 13, 10, 3
    ),
    "bronze": PackType("bronze", "Small Pack", "3 players and 1 token", 5, 4, 3, 1),
    "silver": PackType("silver", "Large Pack", "3 players and 2 tokens", 10, 5, 3, 2),
    "gold": PackType(
        "gold", "Premium Pack", "3 players and 2 tokens, higher rarity chance", 20, 5, 3, 2
    ),
}


@dataclass(frozen=True)
class CatalogueCard:
    id: str
    card_type: str
    rarity: str = FALLBACK_RARITY
    name: str = ""
    position: str | None = None
    team_token_value: int = 0

    @property
    def base_contracts(self) -> int:
        rarity = RARITIES.get(self.rarity, RARITIES[FALLBACK_RARITY])
        return rarity.base_contracts


def draw_rarity(rng: Callable[[], float] = random.random) -> str:
    roll = rng()
    cumulative = 0.0
    for key, rarity in RARITIES.items():
        cumulative += rarity.pack_odds
        if roll < cumulative:
            return key
    return FALLBACK_RARITY


def _choose(cards: Sequence[CatalogueCard], rng: Callable[[], float]) -> CatalogueCard:
    index = min(int(rng() * len(cards)), len(cards) - 1)
    return cards[index]


def draw_card(
    catalogue: Sequence[CatalogueCard],
    card_type: str,
    *,
    rarity: str | None = None,
    position: str | None = None,
    rng: Callable[[], float] = random.random,
) -> CatalogueCard:
    """Draw one card of a type, widening the pool when a bucket is empty."""
    pool = [card for card in catalogue if card.card_type == card_type]
    if not pool:
        raise PackError(f"no {card_type} cards available")
    tier = rarity or draw_rarity(rng)
    in_tier = [card for card in pool if card.rarity == tier]
    if position:
        at_position = [card for card in in_tier if card.position == position]
        if at_position:
            return _choose(at_position, rng)
    return _choose(in_tier or pool, rng)


def generate_pack_cards(
    pack_type: str | PackType,
    catalogue: Sequence[CatalogueCard],
    rng: Callable[[], float] = random.random,
) -> list[CatalogueCard]:
    """Draw the cards for one pack opening; persistence is the caller's job."""
    pack = PACK_TYPES.get(pack_type) if isinstance(pack_type, str) else pack_type
    if pack is None:
        raise PackError(f"invalid pack type {pack_type!r}")
    cards: list[CatalogueCard] = []
    if pack.id == "starter":
        per_position = pack.player_cards // len(POSITIONS)
        for position in POSITIONS:
            for _ in range(per_position):
                cards.append(
                    draw_card(catalogue, "player", rarity=PLAYER_TIER, position=position, rng=rng)
                )
    else:
        for _ in range(pack.player_cards):
            cards.append(draw_card(catalogue, "player", rarity=PLAYER_TIER, rng=rng))
    for _ in range(pack.token_cards):
        cards.append(draw_card(catalogue, "token", rarity=TOKEN_TIER, rng=rng))
    while len(cards) < pack.card_count:
        cards.append(draw_card(catalogue, "player", rarity=PLAYER_TIER, rng=rng))
    return cards


def quick_sell_value(cards: Iterable[CatalogueCard]) -> int:
    """Team tokens credited for selling `cards`."""
    return sum(card.team_token_value for card in cards)
