"""
Player performance statistics

- recent trend (last 3 results)
- TOP streaks / droughts
- improvement between the first and second half of a career
- leaderboards and placement distribution for the stats page
"""
import math
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from .calculator import calculate_top_percentage, is_top_placement
from .constants import (
    BEST_PERFORMANCE_LIMIT,
    IMPROVEMENT_THRESHOLD,
    MINIMUM_TOURNAMENTS_FOR_RANKING,
    TOP_PLAYERS_LIMIT,
    TREND_WINDOW,
)
from .models import ImprovementStats, PlacementRecord, PlayerAggregate, StreakStats

TREND_HOT = "hot"
TREND_STABLE = "stable"
TREND_COLD = "cold"

IMPROVING = "improving"
STABLE = "stable"
DECLINING = "declining"


def _date_key(record: PlacementRecord) -> date:
    # results without a tournament date sort as the oldest
    return record.tournament_date or date.min


def sort_by_date(results: Iterable[PlacementRecord], latest_first: bool = False) -> List[PlacementRecord]:
    return sorted(results, key=_date_key, reverse=latest_first)


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


# =====================================================
# Ranking page helpers
# =====================================================

def recent_trend(results: Sequence[PlacementRecord], window: int = TREND_WINDOW) -> Optional[str]:
    """
    hot (>=2 TOPs in the last `window` results), stable (1) or cold (0)

    None when the player has fewer than `window` results.
    """
    if len(results) < window:
        return None

    latest = sort_by_date(results, latest_first=True)[:window]
    tops = sum(1 for r in latest if is_top_placement(r.placement))

    if tops >= 2:
        return TREND_HOT
    if tops == 1:
        return TREND_STABLE
    return TREND_COLD


def top_n_average(ranked: Sequence[PlayerAggregate], n: int = TOP_PLAYERS_LIMIT) -> int:
    """ceil(mean points) of the first n ranked players"""
    top = list(ranked[:n])
    if not top:
        return 0
    return math.ceil(sum(p.points for p in top) / len(top))


def active_player_count(ranked: Iterable[PlayerAggregate]) -> int:
    return sum(1 for p in ranked if p.total_tournaments > 0)


# =====================================================
# Streaks and improvement
# =====================================================

def top_streaks(results: Iterable[PlacementRecord]) -> StreakStats:
    """Consecutive TOPs / non-TOPs walking results oldest first"""
    stats = StreakStats()
    streak = 0
    drought = 0

    for record in sort_by_date(results):
        if is_top_placement(record.placement):
            stats.total_tops += 1
            streak += 1
            drought = 0
            stats.max_streak = max(stats.max_streak, streak)
        else:
            drought += 1
            streak = 0
            stats.max_drought = max(stats.max_drought, drought)

    stats.current_streak = streak
    stats.current_drought = drought
    return stats


def improvement(
    results: Sequence[PlacementRecord],
    threshold: float = IMPROVEMENT_THRESHOLD,
) -> Optional[ImprovementStats]:
    """
    Compare TOP % of the initial half (floor) with the recent half (ceil)

    With 3 results the split is 1/2, with 5 it is 2/3. Needs 2 results.
    """
    total = len(results)
    if total < 2:
        return None

    ordered = sort_by_date(results)
    initial = ordered[:total // 2]
    recent = ordered[-math.ceil(total / 2):]

    initial_tops = sum(1 for r in initial if is_top_placement(r.placement))
    recent_tops = sum(1 for r in recent if is_top_placement(r.placement))
    initial_performance = calculate_top_percentage(initial_tops, len(initial))
    recent_performance = calculate_top_percentage(recent_tops, len(recent))
    delta = recent_performance - initial_performance

    if delta > threshold:
        trend = IMPROVING
    elif delta < -threshold:
        trend = DECLINING
    else:
        trend = STABLE

    return ImprovementStats(
        initial_performance=round_half_up(initial_performance),
        recent_performance=round_half_up(recent_performance),
        improvement=round_half_up(delta),
        trend=trend,
        initial_tops=initial_tops,
        initial_participations=len(initial),
        recent_tops=recent_tops,
        recent_participations=len(recent),
        total_participations=total,
    )


# =====================================================
# Stats page
# =====================================================

def _leaderboard_entry(player: PlayerAggregate) -> dict:
    return {
        "id": player.id,
        "name": player.name,
        "participations": player.total_tournaments,
        "tops": player.total_tops,
        "top_percentage": player.top_percentage,
    }


def leaderboards(
    aggregates: Iterable[PlayerAggregate],
    limit: int = TOP_PLAYERS_LIMIT,
    min_tournaments: int = MINIMUM_TOURNAMENTS_FOR_RANKING,
    best_limit: int = BEST_PERFORMANCE_LIMIT,
) -> Dict[str, List[dict]]:
    """
    most_participations: top `limit` by tournaments played
    most_tops: top `limit` by TOPs
    best_performance: top `best_limit` by TOP %, only players with
    at least `min_tournaments` results and one TOP
    """
    active = [p for p in aggregates if p.total_tournaments > 0]

    by_participation = sorted(active, key=lambda p: -p.total_tournaments)[:limit]
    by_tops = sorted(active, key=lambda p: -p.total_tops)[:limit]
    by_percentage = sorted(
        [p for p in active if p.total_tournaments >= min_tournaments and p.total_tops > 0],
        key=lambda p: -p.top_percentage,
    )[:best_limit]

    return {
        "most_participations": [_leaderboard_entry(p) for p in by_participation],
        "most_tops": [_leaderboard_entry(p) for p in by_tops],
        "best_performance": [_leaderboard_entry(p) for p in by_percentage],
    }


def placement_distribution(
    aggregates: Iterable[PlayerAggregate],
    limit: int = TOP_PLAYERS_LIMIT,
) -> List[dict]:
    """1st-4th counts for the players with the most TOPs"""
    active = [p for p in aggregates if p.total_tournaments > 0]
    by_tops = sorted(active, key=lambda p: -p.total_tops)[:limit]
    return [
        {
            "id": p.id,
            "name": p.name,
            "first_place": p.first_place,
            "second_place": p.second_place,
            "third_place": p.third_place,
            "fourth_place": p.fourth_place,
        }
        for p in by_tops
    ]
