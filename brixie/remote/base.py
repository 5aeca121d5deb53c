"""
Remote catalog interface.

Defines the abstract interface the repositories consume. Implementations
return raw API payloads (dicts) and raise BrixieError subclasses on failure;
they never retry and never touch the local store.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class EntityKind(Enum):
    """Entity families exposed by the remote catalog."""
    SETS = "sets"
    THEMES = "themes"


class CatalogRemote(ABC):
    """
    Abstract base class for remote catalog sources.

    Failures:
        CredentialsMissingError: no usable API key
        NetworkError (and subclasses): transport, HTTP or payload problems
    """

    @abstractmethod
    async def fetch_page(
        self,
        kind: EntityKind,
        page: int,
        page_size: int,
        **filters: Any,
    ) -> list[dict]:
        """
        Fetch one page of entities.

        Args:
            kind: Entity family to list
            page: 1-based page number
            page_size: Number of entities per page
            **filters: Extra list filters (e.g. theme_id for sets)

        Returns:
            Raw entity payloads; empty past the last page
        """
        pass

    @abstractmethod
    async def search(
        self,
        kind: EntityKind,
        query: str,
        page: int,
        page_size: int,
    ) -> list[dict]:
        """Search entities by free-text query."""
        pass

    @abstractmethod
    async def fetch_by_id(self, kind: EntityKind, entity_id: str | int) -> dict | None:
        """Fetch a single entity, or None if the catalog does not know it."""
        pass
