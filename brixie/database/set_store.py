"""
Set store - persistence operations for cached LEGO sets.
"""

import sqlite3

from .connection import DatabaseConnection
from .converters import row_to_set, set_to_params
from .models import LegoSet

_UPSERT_SQL = """
    INSERT INTO sets (
        set_num, name, year, theme_id, theme_name, num_parts, image_url,
        is_favorite, is_owned, is_wishlist, last_viewed, cached_image_data,
        updated_at
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(set_num) DO UPDATE SET
        name = excluded.name,
        year = excluded.year,
        theme_id = excluded.theme_id,
        theme_name = excluded.theme_name,
        num_parts = excluded.num_parts,
        image_url = excluded.image_url,
        is_favorite = excluded.is_favorite,
        is_owned = excluded.is_owned,
        is_wishlist = excluded.is_wishlist,
        last_viewed = excluded.last_viewed,
        cached_image_data = excluded.cached_image_data,
        updated_at = excluded.updated_at
"""


class SetStore:
    """Store for set rows, keyed by set number."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def _upsert(self, conn: sqlite3.Connection, sets: list[LegoSet]):
        conn.executemany(_UPSERT_SQL, [set_to_params(s) for s in sets])

    def save(self, sets: list[LegoSet]):
        """Insert or update sets by set number. The latest values win."""
        if not sets:
            return
        with self._db.conn() as conn:
            self._upsert(conn, sets)

    def replace_all(self, sets: list[LegoSet]):
        """Delete every cached set and insert the given ones in one transaction."""
        with self._db.conn() as conn:
            conn.execute("DELETE FROM sets")
            self._upsert(conn, sets)

    def get(self, set_num: str) -> LegoSet | None:
        """Get single set by set number."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM sets WHERE set_num = ?", (set_num,)
            ).fetchone()
            return row_to_set(row) if row else None

    def get_by_ids(self, set_nums: list[str]) -> dict[str, LegoSet]:
        """Get cached sets for the given set numbers, keyed by set number."""
        if not set_nums:
            return {}
        placeholders = ",".join("?" * len(set_nums))
        with self._db.conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM sets WHERE set_num IN ({placeholders})",
                list(set_nums)
            ).fetchall()
            return {row["set_num"]: row_to_set(row) for row in rows}

    def get_all(self) -> list[LegoSet]:
        """Get every cached set, newest release first."""
        return self.get_many()

    def get_many(
        self,
        favorites_only: bool = False,
        owned_only: bool = False,
        wishlist_only: bool = False,
        theme_id: int | None = None,
        missing_theme_name: bool = False,
        viewed_only: bool = False,
        limit: int | None = None,
    ) -> list[LegoSet]:
        """Get cached sets matching all of the given filters."""
        conditions = []
        params: list = []

        if favorites_only:
            conditions.append("is_favorite = 1")
        if owned_only:
            conditions.append("is_owned = 1")
        if wishlist_only:
            conditions.append("is_wishlist = 1")
        if theme_id is not None:
            conditions.append("theme_id = ?")
            params.append(theme_id)
        if missing_theme_name:
            conditions.append("theme_name IS NULL")
        if viewed_only:
            conditions.append("last_viewed IS NOT NULL")

        query = "SELECT * FROM sets"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)

        if viewed_only:
            query += " ORDER BY last_viewed DESC"
        else:
            query += " ORDER BY year DESC, set_num"

        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self._db.conn() as conn:
            rows = conn.execute(query, params).fetchall()
            return [row_to_set(row) for row in rows]

    def count(self) -> int:
        with self._db.conn() as conn:
            return conn.execute("SELECT COUNT(*) FROM sets").fetchone()[0]

    def delete(self, set_num: str) -> bool:
        """Delete a single set. Returns True if a row was removed."""
        with self._db.conn() as conn:
            cursor = conn.execute("DELETE FROM sets WHERE set_num = ?", (set_num,))
            return cursor.rowcount > 0

    def delete_all(self):
        with self._db.conn() as conn:
            conn.execute("DELETE FROM sets")
