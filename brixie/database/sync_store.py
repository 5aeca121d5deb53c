"""
Sync timestamp store - one record per feed key.
"""

from .connection import DatabaseConnection
from .converters import row_to_sync_timestamp
from .models import SyncTimestamp, SyncType


class SyncTimestampStore:
    """Store for the last sync attempt of each feed."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def save(self, timestamp: SyncTimestamp):
        """Set the record for the timestamp's feed, overwriting any previous one."""
        with self._db.conn() as conn:
            conn.execute(
                """INSERT INTO sync_timestamps (sync_type, last_sync, is_successful, item_count)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(sync_type) DO UPDATE SET
                   last_sync = excluded.last_sync,
                   is_successful = excluded.is_successful,
                   item_count = excluded.item_count""",
                (
                    timestamp.sync_type.value,
                    timestamp.last_sync.isoformat(),
                    timestamp.is_successful,
                    timestamp.item_count,
                )
            )

    def get_last(self, sync_type: SyncType) -> SyncTimestamp | None:
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM sync_timestamps WHERE sync_type = ?",
                (sync_type.value,)
            ).fetchone()
            return row_to_sync_timestamp(row) if row else None

    def get_all(self) -> list[SyncTimestamp]:
        """Get all feed records, most recent first."""
        with self._db.conn() as conn:
            rows = conn.execute(
                "SELECT * FROM sync_timestamps ORDER BY last_sync DESC"
            ).fetchall()
            timestamps = [row_to_sync_timestamp(row) for row in rows]
            return [ts for ts in timestamps if ts is not None]
