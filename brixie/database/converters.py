"""
Database row converters - convert SQLite rows to dataclasses.
"""

import sqlite3
from datetime import datetime

from .models import LegoSet, LegoTheme, SyncTimestamp, SyncType


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def row_to_set(row: sqlite3.Row) -> LegoSet:
    """Convert a database row to a LegoSet."""
    image_data = row["cached_image_data"]
    return LegoSet(
        set_num=row["set_num"],
        name=row["name"],
        year=row["year"] or 0,
        theme_id=row["theme_id"] or 0,
        num_parts=row["num_parts"] or 0,
        image_url=row["image_url"],
        theme_name=row["theme_name"],
        is_favorite=bool(row["is_favorite"]),
        is_owned=bool(row["is_owned"]),
        is_wishlist=bool(row["is_wishlist"]),
        last_viewed=_parse_datetime(row["last_viewed"]),
        cached_image_data=bytes(image_data) if image_data is not None else None,
    )


def set_to_params(lego_set: LegoSet) -> tuple:
    """Column values for an INSERT into sets, in schema order."""
    return (
        lego_set.set_num,
        lego_set.name,
        lego_set.year,
        lego_set.theme_id,
        lego_set.theme_name,
        lego_set.num_parts,
        lego_set.image_url,
        lego_set.is_favorite,
        lego_set.is_owned,
        lego_set.is_wishlist,
        lego_set.last_viewed.isoformat() if lego_set.last_viewed else None,
        lego_set.cached_image_data,
        datetime.now().isoformat(),
    )


def row_to_theme(row: sqlite3.Row) -> LegoTheme:
    """Convert a database row to a LegoTheme."""
    return LegoTheme(
        id=row["id"],
        name=row["name"],
        parent_id=row["parent_id"],
        set_count=row["set_count"] or 0,
    )


def row_to_sync_timestamp(row: sqlite3.Row) -> SyncTimestamp | None:
    """
    Convert a database row to a SyncTimestamp.

    Unknown feed keys and unreadable sync times yield None, so a corrupt
    record reads as never synced.
    """
    try:
        sync_type = SyncType(row["sync_type"])
    except ValueError:
        return None

    last_sync = _parse_datetime(row["last_sync"])
    if last_sync is None:
        return None

    return SyncTimestamp(
        sync_type=sync_type,
        last_sync=last_sync,
        is_successful=bool(row["is_successful"]),
        item_count=row["item_count"] or 0,
    )
