"""
Row schemas for records coming from the database

Raw Supabase rows are validated here before they reach the engine.
Unparseable placements/dates are coerced to None instead of rejecting the
row; rows without an id or name are skipped.
"""
import datetime as dt
from datetime import date
from typing import Any, Iterable, List, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .constants import TOURNAMENT_TYPE_BEGINNER, TOURNAMENT_TYPE_REGULAR
from .models import PenaltyRecord, PlacementRecord, PlayerRecord


def _coerce_int(value: Any) -> Optional[int]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _coerce_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _flatten_tournament(data: Any) -> Any:
    """Lift the joined tournaments(date, tournament_type) object onto the row"""
    if not isinstance(data, dict):
        return data
    joined = data.get("tournaments") or data.get("tournament")
    if isinstance(joined, list):
        joined = joined[0] if joined else None
    if isinstance(joined, dict):
        data = dict(data)
        data.setdefault("tournament_date", joined.get("date"))
        data.setdefault("tournament_type", joined.get("tournament_type"))
        if data.get("tournament_id") is None:
            data["tournament_id"] = joined.get("id")
    return data


class PlacementRow(BaseModel):
    """tournament_results row"""
    tournament_id: int
    placement: Optional[int] = None
    tournament_date: Optional[date] = None
    tournament_type: Optional[str] = None
    deck_id: Optional[int] = None
    deck_id_secondary: Optional[int] = None

    model_config = {"extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def flatten_join(cls, data):
        return _flatten_tournament(data)

    @field_validator("placement", "deck_id", "deck_id_secondary", mode="before")
    @classmethod
    def coerce_int(cls, v):
        return _coerce_int(v)

    @field_validator("tournament_date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        return _coerce_date(v)

    def to_record(self) -> PlacementRecord:
        return PlacementRecord(
            tournament_id=self.tournament_id,
            placement=self.placement,
            tournament_date=self.tournament_date,
            tournament_type=self.tournament_type,
            deck_id=self.deck_id,
            deck_id_secondary=self.deck_id_secondary,
        )


class PenaltyRow(BaseModel):
    """penalties row"""
    penalty_type: str = TOURNAMENT_TYPE_REGULAR
    player_id: Optional[int] = None

    model_config = {"extra": "ignore"}

    @field_validator("penalty_type", mode="before")
    @classmethod
    def default_type(cls, v):
        # anything that is not beginner counts as regular
        return v if v == TOURNAMENT_TYPE_BEGINNER else TOURNAMENT_TYPE_REGULAR

    def to_record(self) -> PenaltyRecord:
        return PenaltyRecord(penalty_type=self.penalty_type, player_id=self.player_id)


class PlayerRow(BaseModel):
    """players row with nested tournament_results and penalties"""
    id: int
    name: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    tournament_results: List[PlacementRow] = Field(default_factory=list)
    penalties: List[PenaltyRow] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("tournament_results", mode="before")
    @classmethod
    def drop_invalid_results(cls, v):
        # a broken result row should not hide the whole player
        if not isinstance(v, list):
            return []
        results = []
        for row in v:
            try:
                results.append(PlacementRow.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping result row: {e.error_count()} error(s)")
        return results

    @field_validator("penalties", mode="before")
    @classmethod
    def drop_invalid_penalties(cls, v):
        if not isinstance(v, list):
            return []
        penalties = []
        for row in v:
            try:
                penalties.append(PenaltyRow.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping penalty row: {e.error_count()} error(s)")
        return penalties

    def to_record(self) -> PlayerRecord:
        return PlayerRecord(
            id=self.id,
            name=self.name,
            image_url=self.image_url,
            tournament_results=tuple(r.to_record() for r in self.tournament_results),
            penalties=tuple(p.to_record() for p in self.penalties),
        )


class TournamentRow(BaseModel):
    """tournaments row"""
    id: int
    name: str = ""
    date: Optional[dt.date] = None
    tournament_type: Optional[str] = None
    player_count: Optional[int] = None
    location: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        return _coerce_date(v)

    @property
    def is_beginner(self) -> bool:
        return self.tournament_type == TOURNAMENT_TYPE_BEGINNER


class DeckRow(BaseModel):
    """decks row"""
    id: int
    name: str
    image_url: Optional[str] = None

    model_config = {"extra": "ignore"}


def parse_players(rows: Iterable[dict]) -> List[PlayerRecord]:
    """Validate player rows, skipping the ones that cannot be used"""
    players = []
    for row in rows or []:
        try:
            players.append(PlayerRow.model_validate(row).to_record())
        except ValidationError as e:
            logger.warning(f"Skipping player row {row.get('id') if isinstance(row, dict) else row!r}: {e.error_count()} error(s)")
    return players


def parse_tournaments(rows: Iterable[dict]) -> List[TournamentRow]:
    tournaments = []
    for row in rows or []:
        try:
            tournaments.append(TournamentRow.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Skipping tournament row: {e.error_count()} error(s)")
    return tournaments


def parse_decks(rows: Iterable[dict]) -> List[DeckRow]:
    decks = []
    for row in rows or []:
        try:
            decks.append(DeckRow.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Skipping deck row: {e.error_count()} error(s)")
    return decks


def parse_placements(rows: Iterable[dict]) -> List[PlacementRecord]:
    """Validate flat tournament_results rows (deck statistics input)"""
    placements = []
    for row in rows or []:
        try:
            placements.append(PlacementRow.model_validate(row).to_record())
        except ValidationError as e:
            logger.warning(f"Skipping result row: {e.error_count()} error(s)")
    return placements
