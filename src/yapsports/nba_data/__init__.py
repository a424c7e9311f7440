"""NBA game data: upstream client, cache, relevance resolver and stat backfill."""

from yapsports.nba_data.backfill import BackfillResult, StatBackfillReconciler
from yapsports.nba_data.cache import GameDataCache
from yapsports.nba_data.client import BallDontLieClient, GameGateway, iter_pages
from yapsports.nba_data.errors import MissingAPIKeyError, NBADataError, UpstreamError
from yapsports.nba_data.game_state import GamePhase, classify_game
from yapsports.nba_data.live_policy import LivePromotionPolicy
from yapsports.nba_data.models import Game, GameStat, ProgressStatus, TeamRef
from yapsports.nba_data.polling import PollSchedule
from yapsports.nba_data.resolver import GameRelevanceResolver
from yapsports.nba_data.selection import ResolvedState, Selection, SelectionBuffer
from yapsports.nba_data.tracker import PlayerGameTracker

__all__ = [
    "BackfillResult",
    "BallDontLieClient",
    "Game",
    "GameDataCache",
    "GameGateway",
    "GamePhase",
    "GameRelevanceResolver",
    "GameStat",
    "LivePromotionPolicy",
    "MissingAPIKeyError",
    "NBADataError",
    "PlayerGameTracker",
    "PollSchedule",
    "ProgressStatus",
    "ResolvedState",
    "Selection",
    "SelectionBuffer",
    "StatBackfillReconciler",
    "TeamRef",
    "UpstreamError",
    "classify_game",
    "iter_pages",
]
