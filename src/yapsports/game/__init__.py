"""Fantasy game rules: lineups, tokens, scoring and packs."""

from yapsports.game.errors import GameRulesError, LineupError, PackError
from yapsports.game.lineup import LineupCard, LineupValidation, validate_lineup
from yapsports.game.packs import PACK_TYPES, RARITIES, generate_pack_cards
from yapsports.game.scoring import LineupScore, PlayerScore, score_lineup
from yapsports.game.tokens import EffectType, TokenEffect

__all__ = [
    "EffectType",
    "GameRulesError",
    "LineupCard",
    "LineupError",
    "LineupScore",
    "LineupValidation",
    "PACK_TYPES",
    "PackError",
    "PlayerScore",
    "RARITIES",
    "TokenEffect",
    "generate_pack_cards",
    "score_lineup",
    "validate_lineup",
]
