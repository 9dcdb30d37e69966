"""
Tier classification (S/A/B/C/D)

Baseline is the rounded-up mean points of every player with at least one
TOP. Each tier has a point threshold derived from that baseline; S/A/B also
require a rank percentile and a minimum TOP %. Slot counts are advisory
only and never cap membership.
"""
import math
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from .constants import (
    TIER_GATES,
    TIER_POINT_MULTIPLIERS,
    TIER_SLOT_RATIOS,
)
from .models import PlayerAggregate, TierResult


def calculate_avg_points(players: Sequence[PlayerAggregate]) -> int:
    """ceil(mean points) over players with TOPs, 0 when nobody has one"""
    with_tops = [p for p in players if p.total_tops > 0]
    if not with_tops:
        return 0
    return math.ceil(sum(p.points for p in with_tops) / len(with_tops))


def calculate_thresholds(avg_points: int) -> Dict[str, int]:
    return {
        tier: math.ceil(avg_points * multiplier)
        for tier, multiplier in TIER_POINT_MULTIPLIERS.items()
    }


def calculate_tier_slots(eligible_count: int) -> Dict[str, int]:
    return {
        tier: max(1, math.floor(eligible_count * ratio))
        for tier, ratio in TIER_SLOT_RATIOS.items()
    }


def determine_tier(
    player: PlayerAggregate,
    index: int,
    total: int,
    thresholds: Dict[str, int],
) -> Optional[str]:
    """
    Tier for the player at 0-based rank `index` out of `total`

    - S: top 5%, >=55% TOPs, points >= 175% of average
    - A: top 20%, >=45% TOPs, points >= 125% of average
    - B: top 45%, >=35% TOPs, points >= 85% of average
    - C: points >= 55% of average
    - D: any other active player
    """
    if not player.is_eligible:
        return None

    percentile = index / total * 100

    for tier in ("S", "A", "B"):
        max_percentile, min_top_percentage = TIER_GATES[tier]
        if (
            percentile < max_percentile
            and player.top_percentage >= min_top_percentage
            and player.points >= thresholds[tier]
        ):
            return tier

    # thresholds["C"] is 0 when nobody has a TOP, so 0-point players land in C
    if player.points >= thresholds["C"]:
        return "C"

    return "D"


def classify(ranked_players: Sequence[PlayerAggregate]) -> TierResult:
    """
    Assign tiers to an already-ranked list

    Input order is the ranking order. Returns copies of the players with
    their tier set, in the same order.
    """
    avg_points = calculate_avg_points(ranked_players)
    thresholds = calculate_thresholds(avg_points)

    eligible_count = sum(1 for p in ranked_players if p.is_eligible)
    tier_slots = calculate_tier_slots(eligible_count)

    if eligible_count == 0:
        return TierResult(tier_slots=tier_slots, avg_points=avg_points, thresholds=thresholds)

    total = len(ranked_players)
    tiered: List[PlayerAggregate] = []
    for index, player in enumerate(ranked_players):
        tier = determine_tier(player, index, total, thresholds)
        tiered.append(replace(player, tier=tier))

    return TierResult(
        tier_slots=tier_slots,
        avg_points=avg_points,
        thresholds=thresholds,
        tiered_players=tiered,
    )


def tier_positions(tiered_players: Sequence[PlayerAggregate]) -> Dict[int, int]:
    """1-based position of each tiered player inside their own tier, by player id"""
    seen: Dict[str, int] = {}
    positions: Dict[int, int] = {}
    for player in tiered_players:
        if not player.tier:
            continue
        seen[player.tier] = seen.get(player.tier, 0) + 1
        positions[player.id] = seen[player.tier]
    return positions
