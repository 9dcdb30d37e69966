"""
Double loss penalty ranking
"""
from typing import Iterable, List

from .models import PenaltyStanding, PlayerAggregate


def calculate_penalty_rate(total_penalties: int, total_tournaments: int) -> float:
    """Penalties per tournament, as a percentage"""
    if total_tournaments == 0:
        return 0.0
    return total_penalties / total_tournaments * 100


def penalty_sort_key(standing: PenaltyStanding):
    # most penalties, then highest rate, then fewest tournaments
    return (-standing.total_penalties, -standing.penalty_rate, standing.total_tournaments)


def rank_penalties(players: Iterable[PlayerAggregate]) -> List[PenaltyStanding]:
    """Players with at least one penalty in the aggregate's scope, worst first"""
    standings = [
        PenaltyStanding(
            id=p.id,
            name=p.name,
            image_url=p.image_url,
            total_penalties=p.penalties,
            total_tournaments=p.total_tournaments,
            penalty_rate=calculate_penalty_rate(p.penalties, p.total_tournaments),
        )
        for p in players
        if p.penalties > 0
    ]
    return sorted(standings, key=penalty_sort_key)
