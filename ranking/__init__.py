"""
YGO tournament ranking engine

Points, performance ordering, tiers, penalties, deck and player statistics
"""
from .calculator import (
    RankingCalculator,
    aggregate,
    aggregate_players,
    calculate_points,
    calculate_top_percentage,
    compare_performance,
    filter_results_by_tournaments,
    performance_sort_key,
    sort_by_performance,
)
from .models import (
    DeckStats,
    ImprovementStats,
    PenaltyRecord,
    PenaltyStanding,
    PlacementRecord,
    PlayerAggregate,
    PlayerRecord,
    StreakStats,
    TierResult,
)
from .penalties import rank_penalties
from .tiers import classify, tier_positions
from .decks import compute_deck_stats, sort_decks
from .statistics import (
    active_player_count,
    improvement,
    leaderboards,
    placement_distribution,
    recent_trend,
    top_n_average,
    top_streaks,
)

__all__ = [
    "RankingCalculator",
    "aggregate",
    "aggregate_players",
    "calculate_points",
    "calculate_top_percentage",
    "compare_performance",
    "filter_results_by_tournaments",
    "performance_sort_key",
    "sort_by_performance",
    "DeckStats",
    "ImprovementStats",
    "PenaltyRecord",
    "PenaltyStanding",
    "PlacementRecord",
    "PlayerAggregate",
    "PlayerRecord",
    "StreakStats",
    "TierResult",
    "rank_penalties",
    "classify",
    "tier_positions",
    "compute_deck_stats",
    "sort_decks",
    "active_player_count",
    "improvement",
    "leaderboards",
    "placement_distribution",
    "recent_trend",
    "top_n_average",
    "top_streaks",
]
