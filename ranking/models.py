"""
Ranking engine data models

Raw records (PlacementRecord, PenaltyRecord, PlayerRecord) are immutable
snapshots of database rows. PlayerAggregate is derived and never persisted.
"""
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Dict, List, Optional, Tuple

from .constants import MIN_TOURNAMENTS_FOR_TIER, TIERS, TOURNAMENT_TYPE_BEGINNER, TOURNAMENT_TYPE_REGULAR


@dataclass(frozen=True)
class PlacementRecord:
    """One player's result in one tournament"""
    tournament_id: int
    placement: Optional[int] = None  # None = took part, no TOP
    tournament_date: Optional[date] = None
    tournament_type: Optional[str] = None
    deck_id: Optional[int] = None
    deck_id_secondary: Optional[int] = None

    @property
    def is_beginner(self) -> bool:
        return self.tournament_type == TOURNAMENT_TYPE_BEGINNER


@dataclass(frozen=True)
class PenaltyRecord:
    """Double loss penalty"""
    penalty_type: str = TOURNAMENT_TYPE_REGULAR
    player_id: Optional[int] = None

    @property
    def is_beginner(self) -> bool:
        # anything that is not "beginner" counts as a veteran penalty
        return self.penalty_type == TOURNAMENT_TYPE_BEGINNER


@dataclass(frozen=True)
class PlayerRecord:
    """Player row with nested results and penalties"""
    id: int
    name: str
    image_url: Optional[str] = None
    tournament_results: Tuple[PlacementRecord, ...] = ()
    penalties: Tuple[PenaltyRecord, ...] = ()


@dataclass
class PlayerAggregate:
    """Per-player counters derived from placement and penalty records"""
    id: int
    name: str
    image_url: Optional[str] = None
    total_tournaments: int = 0
    first_place: int = 0
    second_place: int = 0
    third_place: int = 0
    fourth_place: int = 0
    total_tops: int = 0
    top_percentage: float = 0.0
    points: int = 0
    penalties: int = 0
    veteran_penalties: int = 0
    beginner_penalties: int = 0
    tier: Optional[str] = None

    @property
    def is_eligible(self) -> bool:
        """Enough tournaments played to receive a tier"""
        return self.total_tournaments >= MIN_TOURNAMENTS_FOR_TIER

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PenaltyStanding:
    """Penalty ranking entry"""
    id: int
    name: str
    image_url: Optional[str]
    total_penalties: int
    total_tournaments: int
    penalty_rate: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DeckStats:
    """Deck usage over TOP placements"""
    deck_id: int
    deck_name: str
    deck_image_url: Optional[str] = None
    top_four_count: int = 0
    wins: int = 0
    primary_uses: int = 0
    secondary_uses: int = 0
    veteran_uses: int = 0
    beginner_uses: int = 0
    win_rate: float = 0.0
    placements: Dict[int, int] = field(default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class StreakStats:
    """TOP streaks / droughts over a player's results in date order"""
    current_streak: int = 0
    max_streak: int = 0
    current_drought: int = 0
    max_drought: int = 0
    total_tops: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ImprovementStats:
    """TOP % change between the initial and recent halves of a career"""
    initial_performance: float
    recent_performance: float
    improvement: float
    trend: str  # improving / stable / declining
    initial_tops: int = 0
    initial_participations: int = 0
    recent_tops: int = 0
    recent_participations: int = 0
    total_participations: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class TierResult:
    """Tier classifier output"""
    tier_slots: Dict[str, int]
    avg_points: int
    thresholds: Dict[str, int]
    tiered_players: List[PlayerAggregate] = field(default_factory=list)

    @property
    def tier_groups(self) -> Dict[str, List[PlayerAggregate]]:
        groups: Dict[str, List[PlayerAggregate]] = {t: [] for t in TIERS}
        for player in self.tiered_players:
            if player.tier in groups:
                groups[player.tier].append(player)
        return groups

    def occupancy(self) -> Dict[str, int]:
        """Members per tier (shown against the advisory slots)"""
        return {tier: len(players) for tier, players in self.tier_groups.items()}
