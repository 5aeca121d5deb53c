"""
Database models - dataclasses for cached catalog entities.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SyncType(str, Enum):
    """Feed keys for sync timestamps. Values are read by clients verbatim."""
    SETS = "sets"
    THEMES = "themes"
    SEARCH = "search"
    SET_DETAILS = "setDetails"

    @property
    def display_name(self) -> str:
        return {
            SyncType.SETS: "Sets",
            SyncType.THEMES: "Themes",
            SyncType.SEARCH: "Search",
            SyncType.SET_DETAILS: "Set Details",
        }[self]


@dataclass
class LegoSet:
    set_num: str
    name: str
    year: int
    theme_id: int
    num_parts: int
    image_url: str | None = None
    theme_name: str | None = None  # Denormalized from the theme cache
    is_favorite: bool = False
    is_owned: bool = False
    is_wishlist: bool = False
    last_viewed: datetime | None = None
    cached_image_data: bytes | None = None

    @property
    def display_name(self) -> str:
        return f"{self.set_num} - {self.name}"


@dataclass
class LegoTheme:
    id: int
    name: str
    parent_id: int | None = None
    set_count: int = 0

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass
class SyncTimestamp:
    sync_type: SyncType
    last_sync: datetime
    is_successful: bool = True
    item_count: int = 0

    @property
    def id(self) -> str:
        return f"{self.sync_type.value}-sync"

    def age(self, now: datetime | None = None) -> float:
        """Seconds elapsed since this sync attempt."""
        return ((now or datetime.now()) - self.last_sync).total_seconds()

    def is_fresh(self, max_age_seconds: int, now: datetime | None = None) -> bool:
        """True if the attempt succeeded and is younger than max_age_seconds."""
        return self.is_successful and self.age(now) <= max_age_seconds


@dataclass
class CollectionStats:
    owned_count: int = 0
    wishlist_count: int = 0
    owned_parts: int = 0
    owned_themes: int = 0
