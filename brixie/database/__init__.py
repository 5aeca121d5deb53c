"""
Database module - SQLite cache for sets, themes and sync timestamps.

Uses one store class per table behind the Database facade.
"""

from .connection import DatabaseConnection
from .models import CollectionStats, LegoSet, LegoTheme, SyncTimestamp, SyncType
from .set_store import SetStore
from .theme_store import ThemeStore
from .sync_store import SyncTimestampStore
from .database import Database

__all__ = [
    "CollectionStats",
    "Database",
    "DatabaseConnection",
    "LegoSet",
    "LegoTheme",
    "SyncTimestamp",
    "SyncType",
    "SetStore",
    "ThemeStore",
    "SyncTimestampStore",
]
