"""
Supabase data access for the ranking engine

Read-only. Every method returns raw rows (dicts); validation happens in
ranking.schemas.
"""
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger
from supabase import Client, create_client

from ranking.constants import TOP_POSITIONS, TOURNAMENT_TYPE_REGULAR


class RepositoryError(Exception):
    """Supabase query failed"""


class DatabaseNotConfigured(RepositoryError):
    """SUPABASE_URL / SUPABASE_KEY missing"""


RESULT_SELECT = (
    "placement, tournament_id, deck_id, deck_id_secondary, "
    "tournaments(date, tournament_type)"
)
PLAYER_SELECT = (
    "id, name, image_url, "
    f"tournament_results({RESULT_SELECT}), "
    "penalties(player_id, penalty_type)"
)
TOURNAMENT_SELECT = "id, name, date, tournament_type, player_count, location"


def create_supabase_client(url: Optional[str], key: Optional[str]) -> Client:
    if not url or not key:
        raise DatabaseNotConfigured("Set the SUPABASE_URL and SUPABASE_KEY environment variables")
    return create_client(url, key)


class TournamentRepository:
    """Queries over players, tournaments, tournament_results, penalties and decks"""

    def __init__(self, client: Client):
        self.client = client

    def _execute(self, query, description: str):
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"{description} query failed: {e}")
            raise RepositoryError(f"{description} query failed") from e

    # ==================== Tournaments ====================

    def list_tournament_ids(self, tournament_type: Optional[str] = None) -> List[int]:
        """
        Tournament ids, optionally for one type

        "regular" also matches tournaments without a type.
        """
        query = self.client.table("tournaments").select("id")
        if tournament_type == TOURNAMENT_TYPE_REGULAR:
            query = query.or_(f"tournament_type.eq.{TOURNAMENT_TYPE_REGULAR},tournament_type.is.null")
        elif tournament_type:
            query = query.eq("tournament_type", tournament_type)

        result = self._execute(query, "Tournament ids")
        return [row["id"] for row in result.data or []]

    def list_tournaments(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: Optional[int] = None,
        latest_first: bool = False,
    ) -> List[Dict[str, Any]]:
        query = self.client.table("tournaments").select(TOURNAMENT_SELECT)
        if start_date:
            query = query.gte("date", start_date)
        if end_date:
            query = query.lte("date", end_date)
        query = query.order("date", desc=latest_first)
        if limit:
            query = query.limit(limit)

        result = self._execute(query, "Tournament list")
        return result.data or []

    # ==================== Players ====================

    def list_players_with_results(self) -> List[Dict[str, Any]]:
        """All players with nested results and penalties, by name"""
        query = self.client.table("players").select(PLAYER_SELECT).order("name")
        result = self._execute(query, "Player list")
        rows = result.data or []
        logger.info(f"Loaded {len(rows)} players")
        return rows

    def get_player(self, player_id: int) -> Optional[Dict[str, Any]]:
        query = self.client.table("players").select(PLAYER_SELECT).eq("id", player_id).limit(1)
        result = self._execute(query, f"Player {player_id}")
        if result.data:
            return result.data[0]
        return None

    # ==================== Results / decks ====================

    def list_decks(self) -> List[Dict[str, Any]]:
        query = self.client.table("decks").select("id, name, image_url").order("name")
        result = self._execute(query, "Deck list")
        return result.data or []

    def list_top_results(self) -> List[Dict[str, Any]]:
        """Placements 1-4 with their decks and tournament type"""
        query = (
            self.client.table("tournament_results")
            .select("placement, tournament_id, deck_id, deck_id_secondary, tournaments(tournament_type)")
            .in_("placement", list(range(1, TOP_POSITIONS + 1)))
        )
        result = self._execute(query, "TOP results")
        return result.data or []

    def list_results_for_tournaments(self, tournament_ids: Iterable[int]) -> List[Dict[str, Any]]:
        """Results of the given tournaments with the player joined"""
        ids = list(tournament_ids)
        if not ids:
            return []
        query = (
            self.client.table("tournament_results")
            .select("placement, tournament_id, player_id, players(id, name, image_url)")
            .in_("tournament_id", ids)
        )
        result = self._execute(query, "Tournament results")
        return result.data or []

    # ==================== Stats ====================

    def count(self, table: str) -> int:
        """Exact row count"""
        result = self._execute(self.client.table(table).select("id", count="exact"), f"{table} count")
        return result.count or 0
