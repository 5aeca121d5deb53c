"""
Set repository: remote set fetches with local cache fallback.

Handles:
- Paged fetch, search and detail lookups against the remote catalog
- Write-through to the local cache, page 1 being a full refresh
- Theme name denormalization from the cached themes
- Local-only user state (favorites, collection, recently viewed, cached images)
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from ..database import Database
from ..database.models import CollectionStats, LegoSet, SyncTimestamp, SyncType
from ..exceptions import NetworkError, PersistenceError
from ..remote import CatalogRemote, EntityKind, payload_to_set, payloads_to_sets
from .sync import record_sync
from .theme_repository import ThemeRepository

if TYPE_CHECKING:
    from ..image_cache import ImageService

logger = logging.getLogger(__name__)


class SetRepository:
    """Repository for set data, local-first."""

    def __init__(
        self,
        remote: CatalogRemote,
        db: Database,
        theme_repository: ThemeRepository,
        image_service: "ImageService | None" = None,
    ):
        self.remote = remote
        self.db = db
        self.theme_repository = theme_repository
        self.image_service = image_service

    # ─────────────────────────────────────────────────────────────
    # Remote operations
    # ─────────────────────────────────────────────────────────────

    async def fetch_sets(self, page: int, page_size: int) -> list[LegoSet]:
        """
        Fetch a page of sets and write it through to the cache.

        Page 1 is a full refresh: every previously cached set is dropped,
        except that favorites and other user state survive for sets that
        come back in the page.

        Args:
            page: 1-based page number
            page_size: Sets per page

        Returns:
            The fetched sets with theme names filled in, or every cached
            set if the network failed and the cache is not empty

        Raises:
            BrixieError: if the fetch fails and no cached sets can stand in
        """
        try:
            payloads = await self.remote.fetch_page(EntityKind.SETS, page, page_size)
            sets = await self._populate_theme_names(payloads_to_sets(payloads))

            async with self.db.table_lock("sets"):
                sets = self._carry_over_local_state(sets)
                if page == 1:
                    self.db.sets.replace_all(sets)
                else:
                    self.db.sets.save(sets)

            record_sync(self.db, SyncType.SETS, True, len(sets))
            logger.info(f"Fetched {len(sets)} sets (page {page})")
            return sets

        except Exception as e:
            record_sync(self.db, SyncType.SETS, False, 0)

            if isinstance(e, NetworkError):
                cached = await self.get_cached_sets()
                if cached:
                    logger.warning(f"Set fetch failed ({e}), serving {len(cached)} cached sets")
                    return cached
            raise

    async def search_sets(self, query: str, page: int, page_size: int) -> list[LegoSet]:
        """
        Search sets remotely. Never raises.

        Any failure degrades to a case-insensitive match on name or set
        number over the whole cache.
        """
        try:
            payloads = await self.remote.search(EntityKind.SETS, query, page, page_size)
            sets = await self._populate_theme_names(payloads_to_sets(payloads))

            async with self.db.table_lock("sets"):
                sets = self._carry_over_local_state(sets)
                self.db.sets.save(sets)

            record_sync(self.db, SyncType.SEARCH, True, len(sets))
            return sets

        except Exception as e:
            record_sync(self.db, SyncType.SEARCH, False, 0)
            logger.warning(f"Set search for '{query}' failed ({e}), searching cache")
            return filter_sets(await self.get_cached_sets(), query)

    async def get_set_details(self, set_num: str) -> LegoSet | None:
        """Fetch a single set, falling back to the cached copy."""
        try:
            payload = await self.remote.fetch_by_id(EntityKind.SETS, set_num)
            if payload is None:
                record_sync(self.db, SyncType.SET_DETAILS, True, 0)
                return None

            sets = await self._populate_theme_names([payload_to_set(payload)])
            async with self.db.table_lock("sets"):
                sets = self._carry_over_local_state(sets)
                self.db.sets.save(sets)

            record_sync(self.db, SyncType.SET_DETAILS, True, 1)
            return sets[0]

        except Exception as e:
            record_sync(self.db, SyncType.SET_DETAILS, False, 0)
            logger.warning(f"Set {set_num} lookup failed ({e}), checking cache")
            try:
                return self.db.sets.get(set_num)
            except PersistenceError:
                return None

    async def get_sets_for_theme(self, theme_id: int, page: int, page_size: int) -> list[LegoSet]:
        """Fetch the sets of one theme, falling back to the cached ones on any failure."""
        try:
            payloads = await self.remote.fetch_page(
                EntityKind.SETS, page, page_size, theme_id=theme_id
            )
            sets = await self._populate_theme_names(payloads_to_sets(payloads))
            async with self.db.table_lock("sets"):
                sets = self._carry_over_local_state(sets)
                self.db.sets.save(sets)
            return sets
        except Exception as e:
            logger.warning(f"Sets for theme {theme_id} failed ({e}), using cache")
            try:
                return self.db.sets.get_many(theme_id=theme_id)
            except PersistenceError:
                return []

    # ─────────────────────────────────────────────────────────────
    # Cache reads (never raise)
    # ─────────────────────────────────────────────────────────────

    async def get_cached_sets(self) -> list[LegoSet]:
        """All cached sets; empty on persistence failure."""
        try:
            return self.db.sets.get_all()
        except PersistenceError as e:
            logger.warning(f"Could not read cached sets: {e}")
            return []

    async def get_cached_set(self, set_num: str) -> LegoSet | None:
        try:
            return self.db.sets.get(set_num)
        except PersistenceError as e:
            logger.warning(f"Could not read cached set {set_num}: {e}")
            return None

    async def get_favorite_sets(self) -> list[LegoSet]:
        try:
            return self.db.sets.get_many(favorites_only=True)
        except PersistenceError as e:
            logger.warning(f"Could not read favorite sets: {e}")
            return []

    async def get_recently_viewed(self, limit: int = 20) -> list[LegoSet]:
        try:
            return self.db.sets.get_many(viewed_only=True, limit=limit)
        except PersistenceError as e:
            logger.warning(f"Could not read recently viewed sets: {e}")
            return []

    async def get_last_sync_timestamp(self, sync_type: SyncType) -> SyncTimestamp | None:
        try:
            return self.db.sync.get_last(sync_type)
        except PersistenceError:
            return None

    async def is_feed_stale(self, sync_type: SyncType, max_age_seconds: int) -> bool:
        """True if the feed never synced, last failed, or synced too long ago."""
        timestamp = await self.get_last_sync_timestamp(sync_type)
        return timestamp is None or not timestamp.is_fresh(max_age_seconds)

    # ─────────────────────────────────────────────────────────────
    # Local user state
    # ─────────────────────────────────────────────────────────────

    async def mark_as_favorite(self, set_num: str) -> LegoSet | None:
        return await self._update_local_state(set_num, lambda s: replace(s, is_favorite=True))

    async def remove_from_favorites(self, set_num: str) -> LegoSet | None:
        return await self._update_local_state(set_num, lambda s: replace(s, is_favorite=False))

    async def mark_as_viewed(self, set_num: str) -> LegoSet | None:
        now = datetime.now()
        return await self._update_local_state(set_num, lambda s: replace(s, last_viewed=now))

    async def mark_as_owned(self, set_num: str) -> LegoSet | None:
        """Add a set to the collection. Owned sets leave the wishlist."""
        return await self._update_local_state(
            set_num, lambda s: replace(s, is_owned=True, is_wishlist=False)
        )

    async def remove_from_owned(self, set_num: str) -> LegoSet | None:
        return await self._update_local_state(set_num, lambda s: replace(s, is_owned=False))

    async def add_to_wishlist(self, set_num: str) -> LegoSet | None:
        """Put a set on the wishlist. Has no effect on sets already owned."""
        return await self._update_local_state(
            set_num, lambda s: replace(s, is_wishlist=not s.is_owned)
        )

    async def remove_from_wishlist(self, set_num: str) -> LegoSet | None:
        return await self._update_local_state(set_num, lambda s: replace(s, is_wishlist=False))

    async def get_owned_sets(self) -> list[LegoSet]:
        try:
            return self.db.sets.get_many(owned_only=True)
        except PersistenceError as e:
            logger.warning(f"Could not read owned sets: {e}")
            return []

    async def get_wishlist_sets(self) -> list[LegoSet]:
        try:
            return self.db.sets.get_many(wishlist_only=True)
        except PersistenceError as e:
            logger.warning(f"Could not read wishlist sets: {e}")
            return []

    async def get_collection_stats(self) -> CollectionStats:
        """Counts over owned and wishlisted sets; all zero on persistence failure."""
        owned = await self.get_owned_sets()
        wishlist = await self.get_wishlist_sets()
        return CollectionStats(
            owned_count=len(owned),
            wishlist_count=len(wishlist),
            owned_parts=sum(s.num_parts for s in owned),
            owned_themes=len({s.theme_id for s in owned}),
        )

    async def load_image(self, lego_set: LegoSet) -> bytes | None:
        """
        Image bytes for a set, downloading and caching them on first use.

        Returns None when the set has no image URL, no image service is
        configured, or the download failed.
        """
        if lego_set.cached_image_data is not None:
            return lego_set.cached_image_data
        if not lego_set.image_url or self.image_service is None:
            return None

        data = await self.image_service.get(lego_set.image_url)
        if not data:
            return None

        lego_set.cached_image_data = data
        image_url = lego_set.image_url

        def store_image(current: LegoSet) -> LegoSet:
            # The set may have been refreshed with a new image meanwhile
            if current.image_url != image_url:
                return current
            return replace(current, cached_image_data=data)

        try:
            await self._update_local_state(lego_set.set_num, store_image)
        except PersistenceError as e:
            logger.warning(f"Could not store image for set {lego_set.set_num}: {e}")
        return data

    # ─────────────────────────────────────────────────────────────
    # Maintenance
    # ─────────────────────────────────────────────────────────────

    async def backfill_theme_names(self) -> int:
        """
        Fill in theme names on cached sets that were stored before their
        theme was known.

        Returns:
            Number of sets updated; 0 when nothing needed a name
        """
        names = await self._theme_name_map()

        async with self.db.table_lock("sets"):
            try:
                missing = self.db.sets.get_many(missing_theme_name=True)
            except PersistenceError as e:
                logger.warning(f"Could not read sets for theme name backfill: {e}")
                return 0

            updated = [
                replace(s, theme_name=names[s.theme_id])
                for s in missing
                if s.theme_id in names
            ]
            if updated:
                self.db.sets.save(updated)

        if updated:
            logger.info(f"Backfilled theme names on {len(updated)} sets")
        return len(updated)

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    async def _update_local_state(
        self,
        set_num: str,
        update: Callable[[LegoSet], LegoSet],
    ) -> LegoSet | None:
        """
        Apply a user state change to the cached copy of a set.

        The cached copy is read and written under the sets lock.

        Returns:
            The updated set, or None if the set is not cached
        """
        async with self.db.table_lock("sets"):
            current = self.db.sets.get(set_num)
            if current is None:
                return None
            updated = update(current)
            self.db.sets.save([updated])
            return updated

    async def _theme_name_map(self) -> dict[int, str]:
        themes = await self.theme_repository.get_cached_themes()
        return {theme.id: theme.name for theme in themes}

    async def _populate_theme_names(self, sets: list[LegoSet]) -> list[LegoSet]:
        """Copies of the sets with theme_name taken from the cached themes (None if unknown)."""
        names = await self._theme_name_map()
        return [replace(s, theme_name=names.get(s.theme_id)) for s in sets]

    def _carry_over_local_state(self, sets: list[LegoSet]) -> list[LegoSet]:
        """Copies of freshly fetched sets keeping the user state of their cached versions."""
        existing = self.db.sets.get_by_ids([s.set_num for s in sets])
        merged = []
        for lego_set in sets:
            cached = existing.get(lego_set.set_num)
            if cached is not None:
                # A changed image URL invalidates the stored image
                same_image = cached.image_url == lego_set.image_url
                lego_set = replace(
                    lego_set,
                    is_favorite=cached.is_favorite,
                    is_owned=cached.is_owned,
                    is_wishlist=cached.is_wishlist,
                    last_viewed=cached.last_viewed,
                    cached_image_data=cached.cached_image_data if same_image else None,
                )
            merged.append(lego_set)
        return merged


def filter_sets(sets: list[LegoSet], query: str) -> list[LegoSet]:
    """Case-insensitive substring match on name or set number."""
    needle = query.casefold()
    return [
        s for s in sets
        if needle in s.name.casefold() or needle in s.set_num.casefold()
    ]
