"""
API dependencies
"""
from fastapi import Request

from database.supabase_client import DatabaseNotConfigured, TournamentRepository


def get_repository(request: Request) -> TournamentRepository:
    """Repository created in the app lifespan"""
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise DatabaseNotConfigured("Supabase client is not configured")
    return repository
