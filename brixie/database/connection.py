"""
Database connection management and schema initialization.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..exceptions import PersistenceError


class DatabaseConnection:
    """Manages database connection and schema."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def conn(self) -> Iterator[sqlite3.Connection]:
        """
        Get database connection with row factory.

        Commits on success, rolls back on error. Driver errors surface as
        PersistenceError.
        """
        try:
            connection = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not open database {self.db_path}: {e}") from e

        connection.row_factory = sqlite3.Row
        try:
            yield connection
            connection.commit()
        except sqlite3.Error as e:
            connection.rollback()
            raise PersistenceError(f"Data persistence failed: {e}") from e
        except Exception:
            connection.rollback()
            raise
        finally:
            connection.close()

    def _init_schema(self):
        """Initialize database schema."""
        with self.conn() as connection:
            connection.executescript("""
                CREATE TABLE IF NOT EXISTS sets (
                    set_num TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    year INTEGER NOT NULL DEFAULT 0,
                    theme_id INTEGER NOT NULL DEFAULT 0,
                    theme_name TEXT,
                    num_parts INTEGER NOT NULL DEFAULT 0,
                    image_url TEXT,
                    is_favorite BOOLEAN DEFAULT FALSE,
                    is_owned BOOLEAN DEFAULT FALSE,
                    is_wishlist BOOLEAN DEFAULT FALSE,
                    last_viewed TIMESTAMP,
                    cached_image_data BLOB,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                CREATE TABLE IF NOT EXISTS themes (
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    parent_id INTEGER,
                    set_count INTEGER NOT NULL DEFAULT 0,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                CREATE TABLE IF NOT EXISTS sync_timestamps (
                    sync_type TEXT PRIMARY KEY,
                    last_sync TIMESTAMP NOT NULL,
                    is_successful BOOLEAN NOT NULL,
                    item_count INTEGER NOT NULL DEFAULT 0
                );

                CREATE INDEX IF NOT EXISTS idx_sets_theme ON sets(theme_id);
                CREATE INDEX IF NOT EXISTS idx_sets_favorite ON sets(is_favorite);
                CREATE INDEX IF NOT EXISTS idx_sets_viewed ON sets(last_viewed DESC);
                CREATE INDEX IF NOT EXISTS idx_themes_parent ON themes(parent_id);
            """)

            # Collection flags, for caches created before they existed
            self._migrate_add_column(connection, "sets", "is_owned", "BOOLEAN DEFAULT FALSE")
            self._migrate_add_column(connection, "sets", "is_wishlist", "BOOLEAN DEFAULT FALSE")

    def _migrate_add_column(
        self,
        conn: sqlite3.Connection,
        table: str,
        column: str,
        column_type: str
    ):
        """Add a column to a table if it doesn't exist."""
        cursor = conn.execute(f"PRAGMA table_info({table})")
        columns = [row[1] for row in cursor.fetchall()]
        if column not in columns:
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
