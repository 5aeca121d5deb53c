"""
Pydantic models for API responses.
"""

from pydantic import BaseModel

from .database import CollectionStats, LegoSet, LegoTheme, SyncTimestamp


# ─────────────────────────────────────────────────────────────
# Set Schemas
# ─────────────────────────────────────────────────────────────

class SetResponse(BaseModel):
    """Set for list and detail views."""
    set_num: str
    name: str
    year: int
    theme_id: int
    theme_name: str | None  # None when the theme is not cached yet
    num_parts: int
    image_url: str | None
    is_favorite: bool
    is_owned: bool = False
    is_wishlist: bool = False
    last_viewed: str | None
    has_cached_image: bool = False

    @classmethod
    def from_db(cls, lego_set: LegoSet) -> "SetResponse":
        return cls(
            set_num=lego_set.set_num,
            name=lego_set.name,
            year=lego_set.year,
            theme_id=lego_set.theme_id,
            theme_name=lego_set.theme_name,
            num_parts=lego_set.num_parts,
            image_url=lego_set.image_url,
            is_favorite=lego_set.is_favorite,
            is_owned=lego_set.is_owned,
            is_wishlist=lego_set.is_wishlist,
            last_viewed=lego_set.last_viewed.isoformat() if lego_set.last_viewed else None,
            has_cached_image=lego_set.cached_image_data is not None,
        )


class BackfillResponse(BaseModel):
    updated: int


class CollectionStatsResponse(BaseModel):
    owned_count: int
    wishlist_count: int
    owned_parts: int
    owned_themes: int

    @classmethod
    def from_db(cls, stats: CollectionStats) -> "CollectionStatsResponse":
        return cls(
            owned_count=stats.owned_count,
            wishlist_count=stats.wishlist_count,
            owned_parts=stats.owned_parts,
            owned_themes=stats.owned_themes,
        )


# ─────────────────────────────────────────────────────────────
# Theme Schemas
# ─────────────────────────────────────────────────────────────

class ThemeResponse(BaseModel):
    id: int
    name: str
    parent_id: int | None
    set_count: int

    @classmethod
    def from_db(cls, theme: LegoTheme) -> "ThemeResponse":
        return cls(
            id=theme.id,
            name=theme.name,
            parent_id=theme.parent_id,
            set_count=theme.set_count,
        )


# ─────────────────────────────────────────────────────────────
# Sync Schemas
# ─────────────────────────────────────────────────────────────

class SyncTimestampResponse(BaseModel):
    sync_type: str
    display_name: str
    last_sync: str
    is_successful: bool
    item_count: int
    is_stale: bool

    @classmethod
    def from_db(cls, timestamp: SyncTimestamp, max_age_seconds: int) -> "SyncTimestampResponse":
        return cls(
            sync_type=timestamp.sync_type.value,
            display_name=timestamp.sync_type.display_name,
            last_sync=timestamp.last_sync.isoformat(),
            is_successful=timestamp.is_successful,
            item_count=timestamp.item_count,
            is_stale=not timestamp.is_fresh(max_age_seconds),
        )


class StatusResponse(BaseModel):
    status: str
    version: str
    api_key_configured: bool
    cached_sets: int
    cached_themes: int
