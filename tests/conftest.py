"""
Pytest configuration and fixtures for YGO Ranking tests
"""

import copy
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ranking.calculator import aggregate
from ranking.models import PenaltyRecord, PlacementRecord, PlayerRecord


# =============================================================================
# Builders
# =============================================================================

def make_player(player_id, name, placements, penalties=(), tournament_type=None):
    """PlayerRecord with one result per placement (tournament ids 1..n)"""
    return PlayerRecord(
        id=player_id,
        name=name,
        tournament_results=tuple(
            PlacementRecord(tournament_id=i, placement=p, tournament_type=tournament_type)
            for i, p in enumerate(placements, 1)
        ),
        penalties=tuple(PenaltyRecord(penalty_type=t) for t in penalties),
    )


def make_aggregate(player_id, name, placements, penalties=()):
    player = make_player(player_id, name, placements, penalties)
    return aggregate(player, player.tournament_results, player.penalties)


@pytest.fixture
def player_factory():
    return make_player


@pytest.fixture
def aggregate_factory():
    return make_aggregate


# =============================================================================
# Snapshot
# =============================================================================

TOURNAMENTS = [
    {"id": 1, "name": "Weekly #1", "date": "2024-01-06", "tournament_type": "regular", "player_count": 16},
    {"id": 2, "name": "Weekly #2", "date": "2024-01-13", "tournament_type": "regular", "player_count": 12},
    {"id": 3, "name": "Beginner Cup", "date": "2024-01-20", "tournament_type": "beginner", "player_count": 8},
    {"id": 4, "name": "Weekly #3", "date": "2024-01-27", "tournament_type": None, "player_count": 10},
    {"id": 5, "name": "Weekly #4", "date": "2024-02-03", "tournament_type": "regular", "player_count": 14},
]

DECKS = [
    {"id": 10, "name": "Blue-Eyes", "image_url": None},
    {"id": 13, "name": "Branded", "image_url": None},
    {"id": 11, "name": "Dark Magician", "image_url": None},
    {"id": 12, "name": "Sky Striker", "image_url": None},
]


def _result(tournament_id, placement, deck_id=None, deck_id_secondary=None):
    tournament = next(t for t in TOURNAMENTS if t["id"] == tournament_id)
    return {
        "placement": placement,
        "tournament_id": tournament_id,
        "deck_id": deck_id,
        "deck_id_secondary": deck_id_secondary,
        "tournaments": {"date": tournament["date"], "tournament_type": tournament["tournament_type"]},
    }


PLAYERS = [
    {
        "id": 1,
        "name": "Alice",
        "image_url": "https://example.com/alice.png",
        "tournament_results": [
            _result(1, 1, 10),
            _result(2, 2, 10, 11),
            _result(4, 1, 10),
            _result(5, None),
        ],
        "penalties": [{"player_id": 1, "penalty_type": "regular"}],
    },
    {
        "id": 2,
        "name": "Bob",
        "image_url": None,
        "tournament_results": [
            _result(1, 2, 11),
            _result(2, 1, 11),
            _result(3, 1, 12),
        ],
        "penalties": [
            {"player_id": 2, "penalty_type": "beginner"},
            {"player_id": 2, "penalty_type": "regular"},
            {"player_id": 2, "penalty_type": "regular"},
        ],
    },
    {
        "id": 3,
        "name": "Carol",
        "image_url": None,
        "tournament_results": [
            _result(1, None),
            _result(2, 3, 12),
            _result(3, 2, 10),
            _result(5, 4, 11),
        ],
        "penalties": [],
    },
    {
        "id": 4,
        "name": "Dave",
        "image_url": None,
        "tournament_results": [],
        "penalties": [],
    },
]


@pytest.fixture
def snapshot():
    """Players / tournaments / decks as returned by Supabase"""
    return copy.deepcopy({"players": PLAYERS, "tournaments": TOURNAMENTS, "decks": DECKS})


# =============================================================================
# Fake repository
# =============================================================================

class FakeRepository:
    """In-memory stand-in for TournamentRepository"""

    def __init__(self, data):
        self.players = data["players"]
        self.tournaments = data["tournaments"]
        self.decks = data["decks"]

    def list_tournament_ids(self, tournament_type=None):
        if tournament_type == "regular":
            return [t["id"] for t in self.tournaments if t.get("tournament_type") in (None, "regular")]
        if tournament_type:
            return [t["id"] for t in self.tournaments if t.get("tournament_type") == tournament_type]
        return [t["id"] for t in self.tournaments]

    def list_tournaments(self, start_date=None, end_date=None, limit=None, latest_first=False):
        rows = [
            t for t in self.tournaments
            if (not start_date or t["date"] >= start_date) and (not end_date or t["date"] <= end_date)
        ]
        rows = sorted(rows, key=lambda t: t["date"], reverse=latest_first)
        return copy.deepcopy(rows[:limit] if limit else rows)

    def list_players_with_results(self):
        return copy.deepcopy(sorted(self.players, key=lambda p: p["name"]))

    def get_player(self, player_id):
        for player in self.players:
            if player["id"] == player_id:
                return copy.deepcopy(player)
        return None

    def list_decks(self):
        return copy.deepcopy(sorted(self.decks, key=lambda d: d["name"]))

    def list_top_results(self):
        return [
            copy.deepcopy(r)
            for p in self.players
            for r in p["tournament_results"]
            if r["placement"] in (1, 2, 3, 4)
        ]

    def list_results_for_tournaments(self, tournament_ids):
        ids = set(tournament_ids)
        return [
            {
                "placement": r["placement"],
                "tournament_id": r["tournament_id"],
                "player_id": p["id"],
                "players": {"id": p["id"], "name": p["name"], "image_url": p["image_url"]},
            }
            for p in self.players
            for r in p["tournament_results"]
            if r["tournament_id"] in ids
        ]

    def count(self, table):
        return len({"players": self.players, "tournaments": self.tournaments, "decks": self.decks}[table])


@pytest.fixture
def fake_repository(snapshot):
    return FakeRepository(snapshot)


@pytest.fixture
def client(fake_repository):
    """TestClient with the repository dependency replaced"""
    from fastapi.testclient import TestClient
    from app.dependencies import get_repository
    from app.server import app

    app.dependency_overrides[get_repository] = lambda: fake_repository
    yield TestClient(app)
    app.dependency_overrides.clear()
