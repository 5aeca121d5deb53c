"""
Theme repository: remote theme fetches with local cache fallback.

Keeps the theme table in sync with Rebrickable and records the outcome of
every theme page fetch under the "themes" feed key.
"""

import logging

from ..database import Database
from ..database.models import LegoTheme, SyncTimestamp, SyncType
from ..exceptions import NetworkError, PersistenceError
from ..remote import CatalogRemote, EntityKind, payload_to_theme, payloads_to_themes
from .sync import record_sync

logger = logging.getLogger(__name__)


class ThemeRepository:
    """Repository for theme data, local-first."""

    def __init__(self, remote: CatalogRemote, db: Database):
        self.remote = remote
        self.db = db

    # ─────────────────────────────────────────────────────────────
    # Remote operations
    # ─────────────────────────────────────────────────────────────

    async def fetch_themes(self, page: int, page_size: int) -> list[LegoTheme]:
        """
        Fetch a page of themes and write it through to the cache.

        Page 1 is a full refresh: every previously cached theme is dropped.

        Raises:
            BrixieError: if the fetch fails and no cached themes can stand in
        """
        try:
            payloads = await self.remote.fetch_page(EntityKind.THEMES, page, page_size)
            themes = payloads_to_themes(payloads)

            async with self.db.table_lock("themes"):
                if page == 1:
                    self.db.themes.replace_all(themes)
                else:
                    self.db.themes.save(themes)

            record_sync(self.db, SyncType.THEMES, True, len(themes))
            logger.info(f"Fetched {len(themes)} themes (page {page})")
            return themes

        except Exception as e:
            record_sync(self.db, SyncType.THEMES, False, 0)

            if isinstance(e, NetworkError):
                cached = await self.get_cached_themes()
                if cached:
                    logger.warning(
                        f"Theme fetch failed ({e}), serving {len(cached)} cached themes"
                    )
                    return cached
            raise

    async def search_themes(self, query: str, page: int, page_size: int) -> list[LegoTheme]:
        """Search themes remotely, falling back to a local name match. Never raises."""
        try:
            payloads = await self.remote.search(EntityKind.THEMES, query, page, page_size)
            themes = payloads_to_themes(payloads)
            async with self.db.table_lock("themes"):
                self.db.themes.save(themes)
            return themes
        except Exception as e:
            logger.warning(f"Theme search for '{query}' failed ({e}), searching cache")
            needle = query.casefold()
            cached = await self.get_cached_themes()
            return [t for t in cached if needle in t.name.casefold()]

    async def get_theme_details(self, theme_id: int) -> LegoTheme | None:
        """Fetch a single theme, falling back to the cached copy."""
        try:
            payload = await self.remote.fetch_by_id(EntityKind.THEMES, theme_id)
            if payload is None:
                return None
            theme = payload_to_theme(payload)
            async with self.db.table_lock("themes"):
                self.db.themes.save([theme])
            return theme
        except Exception as e:
            logger.warning(f"Theme {theme_id} lookup failed ({e}), checking cache")
            try:
                return self.db.themes.get(theme_id)
            except PersistenceError:
                return None

    # ─────────────────────────────────────────────────────────────
    # Cache reads (never raise)
    # ─────────────────────────────────────────────────────────────

    async def get_cached_themes(self) -> list[LegoTheme]:
        """All cached themes; empty on persistence failure."""
        try:
            return self.db.themes.get_all()
        except PersistenceError as e:
            logger.warning(f"Could not read cached themes: {e}")
            return []

    async def get_root_themes(self) -> list[LegoTheme]:
        try:
            return self.db.themes.get_many(roots_only=True)
        except PersistenceError as e:
            logger.warning(f"Could not read root themes: {e}")
            return []

    async def get_child_themes(self, parent_id: int) -> list[LegoTheme]:
        try:
            return self.db.themes.get_many(parent_id=parent_id)
        except PersistenceError as e:
            logger.warning(f"Could not read child themes of {parent_id}: {e}")
            return []

    async def get_last_sync_timestamp(self, sync_type: SyncType) -> SyncTimestamp | None:
        try:
            return self.db.sync.get_last(sync_type)
        except PersistenceError:
            return None

    async def get_all_sync_timestamps(self) -> list[SyncTimestamp]:
        try:
            return self.db.sync.get_all()
        except PersistenceError:
            return []
