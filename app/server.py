"""
YGO Ranking API Server
FastAPI backend for rankings, tiers, penalties, decks and stats
"""
from contextlib import asynccontextmanager
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger

from app.config import Settings, get_settings
from app.dependencies import get_repository
from app.schemas import (
    DeckEntry,
    DeckListResponse,
    HomeResponse,
    ImprovementInfo,
    LeaderboardEntry,
    PenaltyEntry,
    PenaltyResponse,
    PlacementDistributionEntry,
    PlayerDetailResponse,
    PlayerListResponse,
    PlayerResultEntry,
    PlayerStats,
    PlayerSummary,
    RankingEntry,
    RankingResponse,
    StatsResponse,
    StatusResponse,
    StreakInfo,
    TierGroup,
    TierResponse,
    TopPlayer,
    TournamentSummary,
)
from database.supabase_client import (
    DatabaseNotConfigured,
    RepositoryError,
    TournamentRepository,
    create_supabase_client,
)
from ranking.calculator import aggregate, aggregate_players, filter_results_by_tournaments
from ranking.constants import (
    BEGINNER_TIER_SLOTS,
    SCOPE_ALL,
    SCOPE_BEGINNER,
    SCOPE_VETERAN,
    TOP_POSITIONS,
    TOURNAMENT_TYPE_BEGINNER,
    TOURNAMENT_TYPE_REGULAR,
)
from ranking.decks import SORT_NAME, SORT_USAGE, compute_deck_stats, deck_summary, sort_decks
from ranking.models import PlayerAggregate, PlayerRecord
from ranking.penalties import rank_penalties
from ranking.schemas import parse_decks, parse_placements, parse_players, parse_tournaments
from ranking.statistics import (
    active_player_count,
    improvement,
    leaderboards,
    placement_distribution,
    recent_trend,
    sort_by_date,
    top_n_average,
    top_streaks,
)
from ranking.tiers import classify, tier_positions

SERVICE_NAME = "YGO Ranking"
VERSION = "1.0.0"

# .env for SUPABASE_URL / SUPABASE_KEY
load_dotenv()


class RankingScope(str, Enum):
    veteran = SCOPE_VETERAN
    beginner = SCOPE_BEGINNER


class PlayerScope(str, Enum):
    all = SCOPE_ALL
    veteran = SCOPE_VETERAN
    beginner = SCOPE_BEGINNER


class DeckSort(str, Enum):
    by_usage = SORT_USAGE
    by_name = SORT_NAME


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the Supabase client once per application"""
    settings = get_settings()
    try:
        client = create_supabase_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        app.state.repository = TournamentRepository(client)
        logger.info("Server started - Supabase data source ready")
    except DatabaseNotConfigured as e:
        app.state.repository = None
        logger.warning(f"{e} - data endpoints will answer 503")
    yield
    logger.info("Server stopped")


app = FastAPI(
    title="YGO Ranking",
    description="Yu-Gi-Oh! tournament ranking and tier engine",
    version=VERSION,
    lifespan=lifespan,
)


# ==================== Error handlers ====================

@app.exception_handler(DatabaseNotConfigured)
async def database_not_configured_handler(request: Request, exc: DatabaseNotConfigured):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(RepositoryError)
async def repository_error_handler(request: Request, exc: RepositoryError):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": "Database request failed"})


# ==================== Helpers ====================

def load_scoped_players(repository: TournamentRepository, scope: str) -> List[PlayerRecord]:
    """Players with their results restricted to the scope's tournaments"""
    players = parse_players(repository.list_players_with_results())
    if scope == SCOPE_ALL:
        return players

    tournament_type = TOURNAMENT_TYPE_BEGINNER if scope == SCOPE_BEGINNER else TOURNAMENT_TYPE_REGULAR
    tournament_ids = repository.list_tournament_ids(tournament_type)
    return filter_results_by_tournaments(players, tournament_ids)


def build_ranking_entries(
    ranked: List[PlayerAggregate],
    records: Dict[int, PlayerRecord],
) -> List[RankingEntry]:
    positions = tier_positions(ranked)
    entries = []
    for rank, player in enumerate(ranked, 1):
        record = records.get(player.id)
        entries.append(RankingEntry(
            rank=rank,
            tier_position=positions.get(player.id),
            trend=recent_trend(record.tournament_results) if record else None,
            **player.to_dict(),
        ))
    return entries


def player_stats(aggregate_: PlayerAggregate) -> PlayerStats:
    return PlayerStats(**aggregate_.to_dict())


# ==================== API Endpoints ====================

@app.get("/api/status", response_model=StatusResponse)
def api_status(settings: Settings = Depends(get_settings)):
    """Service status"""
    return StatusResponse(
        service=SERVICE_NAME,
        version=VERSION,
        database_configured=settings.database_configured,
    )


@app.get("/api/home", response_model=HomeResponse)
def api_home(
    repository: TournamentRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    """Totals and the latest tournaments with their TOP 4"""
    tournaments = parse_tournaments(
        repository.list_tournaments(limit=settings.LATEST_TOURNAMENTS_LIMIT, latest_first=True)
    )
    results = repository.list_results_for_tournaments([t.id for t in tournaments])

    top_by_tournament: Dict[int, List[TopPlayer]] = {t.id: [] for t in tournaments}
    for row in results:
        player = row.get("players") or {}
        placement = row.get("placement")
        if not isinstance(placement, int) or not 1 <= placement <= TOP_POSITIONS or not player.get("id"):
            continue
        if row.get("tournament_id") in top_by_tournament:
            top_by_tournament[row["tournament_id"]].append(TopPlayer(
                placement=placement,
                id=player["id"],
                name=player.get("name", ""),
                image_url=player.get("image_url"),
            ))

    return HomeResponse(
        total_players=repository.count("players"),
        total_tournaments=repository.count("tournaments"),
        latest_tournaments=[
            TournamentSummary(
                **t.model_dump(),
                top_players=sorted(top_by_tournament[t.id], key=lambda p: p.placement),
            )
            for t in tournaments
        ],
    )


# ==================== Ranking API ====================

@app.get("/api/ranking", response_model=RankingResponse)
def api_ranking(
    scope: RankingScope = Query(RankingScope.veteran, description="veteran / beginner"),
    repository: TournamentRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    """
    Ranking API

    veteran: tiered ranking (S/A/B/C/D) over non-beginner tournaments
    beginner: plain ranking, players with at least one beginner tournament
    """
    players = load_scoped_players(repository, scope.value)
    records = {p.id: p for p in players}
    ranked = aggregate_players(players, scope=scope.value)

    if scope == RankingScope.beginner:
        ranked = [p for p in ranked if p.total_tournaments > 0]
        tier_slots = dict(BEGINNER_TIER_SLOTS)
        avg_points = 0
        thresholds: Dict[str, int] = {}
    else:
        tiers = classify(ranked)
        ranked = tiers.tiered_players
        tier_slots = tiers.tier_slots
        avg_points = tiers.avg_points
        thresholds = tiers.thresholds

    return RankingResponse(
        scope=scope.value,
        tier_slots=tier_slots,
        avg_points=avg_points,
        thresholds=thresholds,
        top10_average=top_n_average(ranked, settings.TOP_PLAYERS_LIMIT),
        active_players=active_player_count(ranked),
        total=len(ranked),
        players=build_ranking_entries(ranked, records),
    )


@app.get("/api/ranking/penalties", response_model=PenaltyResponse)
def api_penalty_ranking(
    scope: RankingScope = Query(RankingScope.veteran, description="veteran / beginner"),
    repository: TournamentRepository = Depends(get_repository),
):
    """Double loss standings, worst first"""
    players = load_scoped_players(repository, scope.value)
    standings = rank_penalties(aggregate_players(players, scope=scope.value))

    return PenaltyResponse(
        scope=scope.value,
        total=len(standings),
        penalties=[
            PenaltyEntry(rank=rank, **s.to_dict())
            for rank, s in enumerate(standings, 1)
        ],
    )


@app.get("/api/ranking/tiers", response_model=TierResponse)
def api_tiers(
    scope: RankingScope = Query(RankingScope.veteran, description="veteran / beginner"),
    repository: TournamentRepository = Depends(get_repository),
):
    """Tier groups with advisory slots and actual occupancy"""
    if scope == RankingScope.beginner:
        return TierResponse(
            scope=scope.value,
            avg_points=0,
            thresholds={},
            tier_slots=dict(BEGINNER_TIER_SLOTS),
            occupancy={},
            groups=[],
        )

    players = load_scoped_players(repository, scope.value)
    records = {p.id: p for p in players}
    tiers = classify(aggregate_players(players, scope=scope.value))
    entries = {e.id: e for e in build_ranking_entries(tiers.tiered_players, records)}

    groups = [
        TierGroup(
            tier=tier,
            slots=tiers.tier_slots.get(tier),
            threshold=tiers.thresholds.get(tier, 0),
            count=len(members),
            players=[entries[p.id] for p in members],
        )
        for tier, members in tiers.tier_groups.items()
    ]

    return TierResponse(
        scope=scope.value,
        avg_points=tiers.avg_points,
        thresholds=tiers.thresholds,
        tier_slots=tiers.tier_slots,
        occupancy=tiers.occupancy(),
        groups=groups,
    )


# ==================== Players API ====================

@app.get("/api/players", response_model=PlayerListResponse)
def api_players(
    scope: PlayerScope = Query(PlayerScope.all, description="all / veteran / beginner"),
    repository: TournamentRepository = Depends(get_repository),
):
    """Players with participations, TOPs and TOP %, most TOPs first"""
    players = load_scoped_players(repository, scope.value)
    aggregates = sorted(
        aggregate_players(players, scope=scope.value),
        key=lambda p: -p.total_tops,
    )

    return PlayerListResponse(
        scope=scope.value,
        total=len(aggregates),
        players=[
            PlayerSummary(
                id=p.id,
                name=p.name,
                image_url=p.image_url,
                participations=p.total_tournaments,
                tops=p.total_tops,
                top_percentage=p.top_percentage,
            )
            for p in aggregates
        ],
    )


@app.get("/api/players/{player_id}", response_model=PlayerDetailResponse)
def api_player_detail(
    player_id: int,
    repository: TournamentRepository = Depends(get_repository),
):
    """One player's stats, streaks, improvement and recent trend"""
    row = repository.get_player(player_id)
    records = parse_players([row]) if row else []
    if not records:
        raise HTTPException(status_code=404, detail=f"Player {player_id} not found")

    record = records[0]
    results = record.tournament_results
    veteran_results = [r for r in results if not r.is_beginner]
    beginner_results = [r for r in results if r.is_beginner]

    streaks = top_streaks(results)
    progress = improvement(results)

    return PlayerDetailResponse(
        id=record.id,
        name=record.name,
        image_url=record.image_url,
        stats=player_stats(aggregate(record, results, record.penalties, scope=SCOPE_ALL)),
        veteran=player_stats(aggregate(record, veteran_results, record.penalties, scope=SCOPE_VETERAN)),
        beginner=player_stats(aggregate(record, beginner_results, record.penalties, scope=SCOPE_BEGINNER)),
        trend=recent_trend(results),
        streaks=StreakInfo(**streaks.to_dict()),
        improvement=ImprovementInfo(**progress.to_dict()) if progress else None,
        results=[
            PlayerResultEntry(
                tournament_id=r.tournament_id,
                tournament_date=r.tournament_date,
                tournament_type=r.tournament_type,
                placement=r.placement,
            )
            for r in sort_by_date(results, latest_first=True)
        ],
    )


# ==================== Decks API ====================

@app.get("/api/decks", response_model=DeckListResponse)
def api_decks(
    sort: DeckSort = Query(DeckSort.by_usage, description="usage / name"),
    search: Optional[str] = Query(None, description="Deck name filter"),
    repository: TournamentRepository = Depends(get_repository),
):
    """Deck usage over TOP placements"""
    decks = parse_decks(repository.list_decks())
    results = parse_placements(repository.list_top_results())
    stats = compute_deck_stats(decks, results)
    summary = deck_summary(stats)

    return DeckListResponse(
        sort=sort.value,
        search=search,
        total_decks=summary["total_decks"],
        total_top_fours=summary["total_top_fours"],
        decks=[DeckEntry(**d.to_dict()) for d in sort_decks(stats, sort=sort.value, search=search)],
    )


# ==================== Stats API ====================

@app.get("/api/stats", response_model=StatsResponse)
def api_stats(
    start_date: Optional[date] = Query(None, description="YYYY-MM-DD"),
    end_date: Optional[date] = Query(None, description="YYYY-MM-DD"),
    repository: TournamentRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
):
    """Leaderboards and placement distribution for a date window"""
    tournaments = repository.list_tournaments(
        start_date=start_date.isoformat() if start_date else None,
        end_date=end_date.isoformat() if end_date else None,
    )
    tournament_ids = [t["id"] for t in tournaments if t.get("id") is not None]

    aggregates: List[PlayerAggregate] = []
    if tournament_ids:
        players = parse_players(repository.list_players_with_results())
        aggregates = aggregate_players(filter_results_by_tournaments(players, tournament_ids))

    boards = leaderboards(
        aggregates,
        limit=settings.TOP_PLAYERS_LIMIT,
        min_tournaments=settings.MINIMUM_TOURNAMENTS_FOR_RANKING,
    )

    return StatsResponse(
        start_date=start_date,
        end_date=end_date,
        tournaments=len(tournament_ids),
        most_participations=[LeaderboardEntry(**e) for e in boards["most_participations"]],
        most_tops=[LeaderboardEntry(**e) for e in boards["most_tops"]],
        best_performance=[LeaderboardEntry(**e) for e in boards["best_performance"]],
        placement_distribution=[
            PlacementDistributionEntry(**e)
            for e in placement_distribution(aggregates, limit=settings.TOP_PLAYERS_LIMIT)
        ],
    )


# ==================== Server ====================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.server:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
