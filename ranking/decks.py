"""
Deck usage statistics

Counted over TOP placements (1-4) only. A result can name a primary and a
secondary deck; both get the TOP, only the primary deck gets the win.
"""
from typing import Dict, Iterable, List, Optional, Sequence

from .calculator import is_top_placement
from .constants import FIRST_PLACE
from .models import DeckStats, PlacementRecord
from .schemas import DeckRow

SORT_USAGE = "usage"
SORT_NAME = "name"
DECK_SORTS = (SORT_USAGE, SORT_NAME)


def _count_use(stats: DeckStats, record: PlacementRecord):
    stats.top_four_count += 1
    stats.placements[record.placement] += 1
    if record.is_beginner:
        stats.beginner_uses += 1
    else:
        stats.veteran_uses += 1


def calculate_win_rate(wins: int, top_four_count: int) -> float:
    if top_four_count == 0:
        return 0.0
    return wins / top_four_count * 100


def compute_deck_stats(
    decks: Sequence[DeckRow],
    results: Iterable[PlacementRecord],
) -> List[DeckStats]:
    """
    Per-deck stats, one entry per deck in `decks` order

    Results that reference an unknown deck id are ignored. Decks that never
    reached a TOP are kept with zero stats.
    """
    stats: Dict[int, DeckStats] = {
        d.id: DeckStats(deck_id=d.id, deck_name=d.name, deck_image_url=d.image_url)
        for d in decks
    }

    for record in results:
        if not is_top_placement(record.placement):
            continue

        primary = stats.get(record.deck_id) if record.deck_id is not None else None
        if primary is not None:
            _count_use(primary, record)
            primary.primary_uses += 1
            if record.placement == FIRST_PLACE:
                primary.wins += 1

        secondary = stats.get(record.deck_id_secondary) if record.deck_id_secondary is not None else None
        if secondary is not None:
            _count_use(secondary, record)
            secondary.secondary_uses += 1

    for deck_stats in stats.values():
        deck_stats.win_rate = calculate_win_rate(deck_stats.wins, deck_stats.top_four_count)

    return list(stats.values())


def usage_sort_key(stats: DeckStats):
    # decks played as primary first, then most TOPs
    return (stats.primary_uses <= 0, -stats.top_four_count)


def sort_decks(
    deck_stats: Iterable[DeckStats],
    sort: str = SORT_USAGE,
    search: Optional[str] = None,
) -> List[DeckStats]:
    """Filter by case-insensitive name substring, then sort by usage or name"""
    if sort not in DECK_SORTS:
        raise ValueError(f"Unknown deck sort: {sort}")

    filtered = list(deck_stats)
    if search:
        needle = search.strip().casefold()
        filtered = [d for d in filtered if needle in d.deck_name.casefold()]

    if sort == SORT_NAME:
        return sorted(filtered, key=lambda d: d.deck_name.casefold())
    return sorted(filtered, key=usage_sort_key)


def deck_summary(deck_stats: Sequence[DeckStats]) -> dict:
    return {
        "total_decks": len(deck_stats),
        "total_top_fours": sum(d.top_four_count for d in deck_stats),
    }
