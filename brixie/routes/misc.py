"""
Miscellaneous routes: health check and sync status.
"""

from fastapi import APIRouter, HTTPException

from .. import __version__
from ..config import config
from ..database import SyncType
from ..exceptions import PersistenceError
from ..repositories import DatabaseDep, ThemeRepositoryDep
from ..schemas import StatusResponse, SyncTimestampResponse

router = APIRouter(tags=["misc"])


# ─────────────────────────────────────────────────────────────
# Health Check
# ─────────────────────────────────────────────────────────────

@router.get("/status")
async def health_check(db: DatabaseDep) -> StatusResponse:
    """API health check."""
    try:
        cached_sets = db.sets.count()
        cached_themes = db.themes.count()
    except PersistenceError:
        cached_sets = cached_themes = 0

    return StatusResponse(
        status="ok",
        version=__version__,
        api_key_configured=config.has_api_key(),
        cached_sets=cached_sets,
        cached_themes=cached_themes,
    )


# ─────────────────────────────────────────────────────────────
# Sync Status
# ─────────────────────────────────────────────────────────────

@router.get("/sync")
async def list_sync_timestamps(repo: ThemeRepositoryDep) -> list[SyncTimestampResponse]:
    """Last sync attempt of every feed, most recent first."""
    timestamps = await repo.get_all_sync_timestamps()
    return [
        SyncTimestampResponse.from_db(ts, config.SYNC_MAX_AGE_SECONDS)
        for ts in timestamps
    ]


@router.get("/sync/{feed}")
async def get_sync_timestamp(feed: str, repo: ThemeRepositoryDep) -> SyncTimestampResponse:
    try:
        sync_type = SyncType(feed)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown feed: {feed}")

    timestamp = await repo.get_last_sync_timestamp(sync_type)
    if timestamp is None:
        raise HTTPException(status_code=404, detail=f"Feed {feed} has not synced yet")
    return SyncTimestampResponse.from_db(timestamp, config.SYNC_MAX_AGE_SECONDS)
