"""
YGO ranking calculator

Stat aggregation and performance ordering for tournament placements
- 1st = 4 pts, 2nd = 3 pts, 3rd/4th = 2 pts
- TOP = placement 1-4
- Ranking order: 1st > 2nd > 3rd > 4th > TOPs > TOP %
"""
import json
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set

from loguru import logger

from .constants import (
    BEGINNER_TIER_SLOTS,
    FIRST_PLACE,
    FOURTH_PLACE,
    PLACEMENT_POINTS,
    SCOPE_ALL,
    SCOPE_BEGINNER,
    SCOPE_VETERAN,
    SCOPES,
    SECOND_PLACE,
    THIRD_PLACE,
    TOP_POSITIONS,
)
from .models import PenaltyRecord, PlacementRecord, PlayerAggregate, PlayerRecord, TierResult
from .penalties import rank_penalties
from .schemas import parse_decks, parse_players, parse_tournaments
from .tiers import classify


# =====================================================
# Counting helpers
# =====================================================

def is_top_placement(placement: Optional[int]) -> bool:
    """Placement 1-4"""
    return placement is not None and 1 <= placement <= TOP_POSITIONS


def calculate_points(first: int, second: int, third: int, fourth: int) -> int:
    """first*4 + second*3 + third*2 + fourth*2"""
    return (
        first * PLACEMENT_POINTS[FIRST_PLACE]
        + second * PLACEMENT_POINTS[SECOND_PLACE]
        + third * PLACEMENT_POINTS[THIRD_PLACE]
        + fourth * PLACEMENT_POINTS[FOURTH_PLACE]
    )


def calculate_top_percentage(total_tops: int, total_tournaments: int) -> float:
    if total_tournaments == 0:
        return 0.0
    return total_tops / total_tournaments * 100


def count_scoped_penalties(penalties: Iterable[PenaltyRecord], scope: str = SCOPE_ALL) -> int:
    """
    veteran -> every penalty that is not "beginner"
    beginner -> "beginner" penalties only
    all -> everything
    """
    if scope == SCOPE_VETERAN:
        return sum(1 for p in penalties if not p.is_beginner)
    if scope == SCOPE_BEGINNER:
        return sum(1 for p in penalties if p.is_beginner)
    return sum(1 for _ in penalties)


# =====================================================
# Stat aggregator
# =====================================================

def aggregate(
    player: PlayerRecord,
    placement_records: Sequence[PlacementRecord],
    penalty_records: Sequence[PenaltyRecord] = (),
    scope: str = SCOPE_ALL,
) -> PlayerAggregate:
    """
    Build a player's aggregate from already-scoped records

    Placements outside 1-4 (or None) count toward total_tournaments but
    not toward any placement bucket.
    """
    counts = {FIRST_PLACE: 0, SECOND_PLACE: 0, THIRD_PLACE: 0, FOURTH_PLACE: 0}
    for record in placement_records:
        if record.placement in counts:
            counts[record.placement] += 1

    total_tournaments = len(placement_records)
    total_tops = sum(counts.values())

    return PlayerAggregate(
        id=player.id,
        name=player.name,
        image_url=player.image_url,
        total_tournaments=total_tournaments,
        first_place=counts[FIRST_PLACE],
        second_place=counts[SECOND_PLACE],
        third_place=counts[THIRD_PLACE],
        fourth_place=counts[FOURTH_PLACE],
        total_tops=total_tops,
        top_percentage=calculate_top_percentage(total_tops, total_tournaments),
        points=calculate_points(
            counts[FIRST_PLACE], counts[SECOND_PLACE], counts[THIRD_PLACE], counts[FOURTH_PLACE]
        ),
        penalties=count_scoped_penalties(penalty_records, scope),
        veteran_penalties=count_scoped_penalties(penalty_records, SCOPE_VETERAN),
        beginner_penalties=count_scoped_penalties(penalty_records, SCOPE_BEGINNER),
    )


# =====================================================
# Performance comparator
# =====================================================

def performance_sort_key(player: PlayerAggregate):
    """Ascending key = best first"""
    return (
        -player.first_place,
        -player.second_place,
        -player.third_place,
        -player.fourth_place,
        -player.total_tops,
        -player.top_percentage,
    )


def compare_performance(a: PlayerAggregate, b: PlayerAggregate) -> int:
    """
    Negative if a ranks above b, positive if b ranks above a, 0 on a full tie

    Ties are left to the (stable) sort, which keeps input order.
    """
    key_a = performance_sort_key(a)
    key_b = performance_sort_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def sort_by_performance(players: Iterable[PlayerAggregate]) -> List[PlayerAggregate]:
    return sorted(players, key=performance_sort_key)


# =====================================================
# Scoping
# =====================================================

def filter_results_by_tournaments(
    players: Iterable[PlayerRecord],
    tournament_ids: Iterable[int],
) -> List[PlayerRecord]:
    """Keep only results from the given tournaments"""
    allowed = set(tournament_ids)
    return [
        PlayerRecord(
            id=p.id,
            name=p.name,
            image_url=p.image_url,
            tournament_results=tuple(r for r in p.tournament_results if r.tournament_id in allowed),
            penalties=p.penalties,
        )
        for p in players
    ]


def aggregate_players(
    players: Iterable[PlayerRecord],
    scope: str = SCOPE_ALL,
) -> List[PlayerAggregate]:
    """Aggregate every player and return them ranked by performance"""
    aggregates = [
        aggregate(p, p.tournament_results, p.penalties, scope=scope)
        for p in players
    ]
    return sort_by_performance(aggregates)


# =====================================================
# Ranking calculator
# =====================================================

class RankingCalculator:
    """Ranking over an in-memory snapshot of players/tournaments/decks"""

    def __init__(self, data_file: str = None):
        self.players: List[PlayerRecord] = []
        self.tournaments = []
        self.decks = []
        self.data = None

        if data_file:
            self.load_data(data_file)

    def load_data(self, data_file: str):
        """Load a JSON snapshot"""
        with open(data_file, "r", encoding="utf-8") as f:
            self.load_from_data(json.load(f))

    def load_from_data(self, data: dict):
        """
        Load from memory

        Args:
            data: {"players": [...], "tournaments": [...], "decks": [...]}
        """
        self.data = data
        self.players = parse_players(data.get("players", []))
        self.tournaments = parse_tournaments(data.get("tournaments", []))
        self.decks = parse_decks(data.get("decks", []))
        logger.info(
            f"Snapshot loaded: {len(self.players)} players, "
            f"{len(self.tournaments)} tournaments, {len(self.decks)} decks"
        )

    def tournament_ids(self, scope: str = SCOPE_ALL) -> Set[int]:
        if scope == SCOPE_BEGINNER:
            return {t.id for t in self.tournaments if t.is_beginner}
        if scope == SCOPE_VETERAN:
            return {t.id for t in self.tournaments if not t.is_beginner}
        return {t.id for t in self.tournaments}

    def scoped_players(self, scope: str = SCOPE_ALL) -> List[PlayerRecord]:
        if scope not in SCOPES:
            raise ValueError(f"Unknown scope: {scope}")
        if scope == SCOPE_ALL:
            return list(self.players)
        return filter_results_by_tournaments(self.players, self.tournament_ids(scope))

    def calculate_rankings(self, scope: str = SCOPE_VETERAN) -> List[PlayerAggregate]:
        rankings = aggregate_players(self.scoped_players(scope), scope=scope)
        if scope == SCOPE_BEGINNER:
            rankings = [r for r in rankings if r.total_tournaments > 0]
        return rankings

    def calculate_tiers(self, scope: str = SCOPE_VETERAN) -> TierResult:
        return classify(self.calculate_rankings(scope))

    def calculate_penalty_ranking(self, scope: str = SCOPE_VETERAN):
        return rank_penalties(aggregate_players(self.scoped_players(scope), scope=scope))

    def export_rankings(self, output_file: str, scope: str = SCOPE_VETERAN):
        """Write ranking, tiers and penalty standings as JSON"""
        if scope == SCOPE_BEGINNER:
            tiers = TierResult(
                tier_slots=dict(BEGINNER_TIER_SLOTS),
                avg_points=0,
                thresholds={},
                tiered_players=self.calculate_rankings(scope),
            )
        else:
            tiers = self.calculate_tiers(scope)
        penalties = self.calculate_penalty_ranking(scope)

        export_data = {
            "meta": {
                "generated_at": datetime.now().isoformat(),
                "scope": scope,
                "avg_points": tiers.avg_points,
                "tier_slots": tiers.tier_slots,
                "thresholds": tiers.thresholds,
            },
            "rankings": [
                {"rank": i, **p.to_dict()}
                for i, p in enumerate(tiers.tiered_players, 1)
            ],
            "penalties": [p.to_dict() for p in penalties],
        }

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(export_data, f, ensure_ascii=False, indent=2)

        logger.info(f"Rankings exported: {output_file}")

    def print_ranking_summary(self, rankings: List[PlayerAggregate], title: str = "", top_n: int = 20):
        print(f"\n{'='*64}")
        print(f" {title}")
        print(f"{'='*64}")
        print(f"{'#':>4} {'Player':<20} {'Tier':>4} {'Pts':>5} {'Torn':>5} {'TOPs':>5} {'TOP%':>7}")
        print(f"{'-'*64}")

        for i, r in enumerate(rankings[:top_n], 1):
            name = r.name if len(r.name) <= 20 else r.name[:18] + ".."
            print(
                f"{i:>4} {name:<20} {r.tier or '-':>4} {r.points:>5} "
                f"{r.total_tournaments:>5} {r.total_tops:>5} {r.top_percentage:>6.1f}%"
            )


# =====================================================
# CLI
# =====================================================

def main(argv: Optional[List[str]] = None):
    import argparse

    parser = argparse.ArgumentParser(description="YGO tournament ranking calculator")
    parser.add_argument("--data", type=str, required=True, help="JSON snapshot (players/tournaments/decks)")
    parser.add_argument("--scope", type=str, default=SCOPE_VETERAN, choices=SCOPES, help="Tournament partition")
    parser.add_argument("--output", type=str, help="Export rankings to this JSON file")
    parser.add_argument("--top", type=int, default=20, help="Rows to print")

    args = parser.parse_args(argv)

    calculator = RankingCalculator(args.data)

    if args.output:
        calculator.export_rankings(args.output, scope=args.scope)
        return

    if args.scope == SCOPE_BEGINNER:
        rankings = calculator.calculate_rankings(args.scope)
    else:
        rankings = calculator.calculate_tiers(args.scope).tiered_players

    calculator.print_ranking_summary(rankings, title=f"Ranking ({args.scope})", top_n=args.top)


if __name__ == "__main__":
    main()
