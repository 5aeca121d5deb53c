"""
Database facade - provides unified access to all stores.
"""

import asyncio
from pathlib import Path

from .connection import DatabaseConnection
from .set_store import SetStore
from .sync_store import SyncTimestampStore
from .theme_store import ThemeStore


class Database:
    """
    Unified local store access.

    Also owns one asyncio lock per entity table. Repositories hold the
    lock for a table across every write section touching it, so a
    page-1 refresh can never interleave with another writer.
    """

    # Sync timestamps are single-row upserts and need no lock
    TABLES = ("sets", "themes")

    def __init__(self, db_path: Path):
        self._connection = DatabaseConnection(db_path)

        self.sets = SetStore(self._connection)
        self.themes = ThemeStore(self._connection)
        self.sync = SyncTimestampStore(self._connection)

        self._locks = {table: asyncio.Lock() for table in self.TABLES}

    @property
    def path(self) -> Path:
        return self._connection.db_path

    def table_lock(self, table: str) -> asyncio.Lock:
        """Get the write lock for an entity table."""
        try:
            return self._locks[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None
