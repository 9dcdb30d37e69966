"""
API response models
"""
import datetime as dt
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel


class StatusResponse(BaseModel):
    service: str
    version: str
    database_configured: bool


# ==================== Home ====================

class TopPlayer(BaseModel):
    placement: int
    id: int
    name: str
    image_url: Optional[str] = None


class TournamentSummary(BaseModel):
    id: int
    name: str = ""
    date: Optional[dt.date] = None
    tournament_type: Optional[str] = None
    player_count: Optional[int] = None
    location: Optional[str] = None
    top_players: List[TopPlayer] = []


class HomeResponse(BaseModel):
    total_players: int
    total_tournaments: int
    latest_tournaments: List[TournamentSummary]


# ==================== Ranking ====================

class RankingEntry(BaseModel):
    """Ranking row"""
    rank: int
    id: int
    name: str
    image_url: Optional[str] = None
    tier: Optional[str] = None
    tier_position: Optional[int] = None
    trend: Optional[str] = None
    points: int
    total_tournaments: int
    first_place: int
    second_place: int
    third_place: int
    fourth_place: int
    total_tops: int
    top_percentage: float
    penalties: int = 0


class RankingResponse(BaseModel):
    """Ranking response (beginner scope carries zero slots and no tiers)"""
    scope: str
    tier_slots: Dict[str, int]
    avg_points: int
    thresholds: Dict[str, int] = {}
    top10_average: int
    active_players: int
    total: int
    players: List[RankingEntry]


class PenaltyEntry(BaseModel):
    rank: int
    id: int
    name: str
    image_url: Optional[str] = None
    total_penalties: int
    total_tournaments: int
    penalty_rate: float


class PenaltyResponse(BaseModel):
    scope: str
    total: int
    penalties: List[PenaltyEntry]


class TierGroup(BaseModel):
    tier: str
    slots: Optional[int] = None  # advisory, D and C have none
    threshold: int
    count: int
    players: List[RankingEntry]


class TierResponse(BaseModel):
    scope: str
    avg_points: int
    thresholds: Dict[str, int]
    tier_slots: Dict[str, int]
    occupancy: Dict[str, int]
    groups: List[TierGroup]


# ==================== Players ====================

class PlayerSummary(BaseModel):
    id: int
    name: str
    image_url: Optional[str] = None
    participations: int
    tops: int
    top_percentage: float


class PlayerListResponse(BaseModel):
    scope: str
    total: int
    players: List[PlayerSummary]


class PlayerStats(BaseModel):
    total_tournaments: int
    first_place: int
    second_place: int
    third_place: int
    fourth_place: int
    total_tops: int
    top_percentage: float
    points: int
    penalties: int
    veteran_penalties: int
    beginner_penalties: int


class StreakInfo(BaseModel):
    current_streak: int
    max_streak: int
    current_drought: int
    max_drought: int
    total_tops: int


class ImprovementInfo(BaseModel):
    initial_performance: float
    recent_performance: float
    improvement: float
    trend: str
    initial_tops: int
    initial_participations: int
    recent_tops: int
    recent_participations: int
    total_participations: int


class PlayerResultEntry(BaseModel):
    tournament_id: int
    tournament_date: Optional[date] = None
    tournament_type: Optional[str] = None
    placement: Optional[int] = None


class PlayerDetailResponse(BaseModel):
    id: int
    name: str
    image_url: Optional[str] = None
    stats: PlayerStats
    veteran: PlayerStats
    beginner: PlayerStats
    trend: Optional[str] = None
    streaks: StreakInfo
    improvement: Optional[ImprovementInfo] = None
    results: List[PlayerResultEntry]


# ==================== Decks ====================

class DeckEntry(BaseModel):
    deck_id: int
    deck_name: str
    deck_image_url: Optional[str] = None
    top_four_count: int
    wins: int
    primary_uses: int
    secondary_uses: int
    veteran_uses: int
    beginner_uses: int
    win_rate: float
    placements: Dict[int, int]


class DeckListResponse(BaseModel):
    sort: str
    search: Optional[str] = None
    total_decks: int
    total_top_fours: int
    decks: List[DeckEntry]


# ==================== Stats ====================

class LeaderboardEntry(BaseModel):
    id: int
    name: str
    participations: int
    tops: int
    top_percentage: float


class PlacementDistributionEntry(BaseModel):
    id: int
    name: str
    first_place: int
    second_place: int
    third_place: int
    fourth_place: int


class StatsResponse(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tournaments: int
    most_participations: List[LeaderboardEntry]
    most_tops: List[LeaderboardEntry]
    best_performance: List[LeaderboardEntry]
    placement_distribution: List[PlacementDistributionEntry]
