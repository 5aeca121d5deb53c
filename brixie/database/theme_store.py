"""
Theme store - persistence operations for cached themes.
"""

import sqlite3

from .connection import DatabaseConnection
from .converters import row_to_theme
from .models import LegoTheme


class ThemeStore:
    """Store for theme rows, keyed by theme ID."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def _upsert(self, conn: sqlite3.Connection, themes: list[LegoTheme]):
        conn.executemany(
            """INSERT INTO themes (id, name, parent_id, set_count, updated_at)
               VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
               ON CONFLICT(id) DO UPDATE SET
               name = excluded.name,
               parent_id = excluded.parent_id,
               set_count = excluded.set_count,
               updated_at = excluded.updated_at""",
            [(t.id, t.name, t.parent_id, t.set_count) for t in themes]
        )

    def save(self, themes: list[LegoTheme]):
        """Insert or update themes by ID."""
        if not themes:
            return
        with self._db.conn() as conn:
            self._upsert(conn, themes)

    def replace_all(self, themes: list[LegoTheme]):
        """Delete every cached theme and insert the given ones in one transaction."""
        with self._db.conn() as conn:
            conn.execute("DELETE FROM themes")
            self._upsert(conn, themes)

    def get(self, theme_id: int) -> LegoTheme | None:
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM themes WHERE id = ?", (theme_id,)
            ).fetchone()
            return row_to_theme(row) if row else None

    def get_all(self) -> list[LegoTheme]:
        """Get every cached theme ordered by name."""
        with self._db.conn() as conn:
            rows = conn.execute("SELECT * FROM themes ORDER BY name, id").fetchall()
            return [row_to_theme(row) for row in rows]

    def get_many(self, parent_id: int | None = None, roots_only: bool = False) -> list[LegoTheme]:
        """Get themes by parent. roots_only selects themes without a parent."""
        with self._db.conn() as conn:
            if roots_only:
                rows = conn.execute(
                    "SELECT * FROM themes WHERE parent_id IS NULL ORDER BY name, id"
                ).fetchall()
            elif parent_id is not None:
                rows = conn.execute(
                    "SELECT * FROM themes WHERE parent_id = ? ORDER BY name, id",
                    (parent_id,)
                ).fetchall()
            else:
                rows = conn.execute("SELECT * FROM themes ORDER BY name, id").fetchall()
            return [row_to_theme(row) for row in rows]

    def count(self) -> int:
        with self._db.conn() as conn:
            return conn.execute("SELECT COUNT(*) FROM themes").fetchone()[0]

    def delete(self, theme_id: int) -> bool:
        with self._db.conn() as conn:
            cursor = conn.execute("DELETE FROM themes WHERE id = ?", (theme_id,))
            return cursor.rowcount > 0

    def delete_all(self):
        with self._db.conn() as conn:
            conn.execute("DELETE FROM themes")
