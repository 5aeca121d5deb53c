"""
Rebrickable catalog client - fetch sets and themes over the REST API.

Handles:
- API key authentication (Authorization: key ...)
- Paged list, search and detail endpoints for sets and themes
- Mapping HTTP and transport failures to the error taxonomy

No retries happen here. Repositories decide what to do when a call fails.
"""

import asyncio
import json
import logging
from typing import Any

import aiohttp

from ..exceptions import (
    CredentialsMissingError,
    InvalidCredentialsError,
    NetworkError,
    ParsingError,
    RateLimitError,
    ServerError,
)
from .base import CatalogRemote, EntityKind

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://rebrickable.com/api/v3"

# List ordering used for each entity family
_ORDERING = {
    EntityKind.SETS: "-year",
    EntityKind.THEMES: "name",
}


def raise_for_status(status: int, url: str):
    """
    Raise the matching catalog error for a non-success HTTP status.

    404 is not handled here; callers treat it as absence.
    """
    if status < 400:
        return
    if status in (401, 403):
        raise InvalidCredentialsError(f"Rebrickable rejected the API key (HTTP {status})")
    if status == 429:
        raise RateLimitError(f"Rebrickable rate limit exceeded for {url}")
    if status >= 500:
        raise ServerError(status, f"Rebrickable server error (status: {status}) for {url}")
    raise NetworkError(f"Unexpected HTTP {status} from {url}")


def parse_json(body: bytes, url: str) -> Any:
    """Decode a UTF-8 JSON response body."""
    try:
        return json.loads(body.decode("utf-8"))
    except ValueError as e:
        # Covers both invalid UTF-8 and invalid JSON
        raise ParsingError(f"Failed to parse response from {url}: {e}") from e


def extract_results(body: Any) -> list[dict]:
    """Get the results array of a paged list response."""
    if not isinstance(body, dict) or not isinstance(body.get("results"), list):
        raise ParsingError("Paged response without a results array")
    return [item for item in body["results"] if isinstance(item, dict)]


class RebrickableCatalog(CatalogRemote):
    """Remote catalog backed by the Rebrickable v3 API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 30,
        user_agent: str | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent or "Brixie/1.0 (+https://github.com/brixie)"

    def _url(self, kind: EntityKind, entity_id: str | int | None = None) -> str:
        url = f"{self.base_url}/lego/{kind.value}/"
        if entity_id is not None:
            url += f"{entity_id}/"
        return url

    def _headers(self) -> dict[str, str]:
        if not self.api_key or not self.api_key.strip():
            raise CredentialsMissingError()
        return {
            "Authorization": f"key {self.api_key}",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    async def _get_json(self, url: str, params: dict | None = None) -> Any | None:
        """
        GET a JSON document.

        Returns:
            Decoded JSON, or None on 404
        """
        headers = self._headers()

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    if resp.status == 404:
                        return None
                    raise_for_status(resp.status, url)
                    body = await resp.read()
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network error: {e}") from e
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Request to {url} timed out after {self.timeout}s") from e

        return parse_json(body, url)

    async def fetch_page(
        self,
        kind: EntityKind,
        page: int,
        page_size: int,
        **filters: Any,
    ) -> list[dict]:
        params: dict[str, Any] = {
            "page": page,
            "page_size": page_size,
            "ordering": _ORDERING[kind],
        }
        params.update({k: v for k, v in filters.items() if v is not None})

        body = await self._get_json(self._url(kind), params)
        if body is None:
            # Rebrickable answers 404 for pages past the end
            logger.debug(f"No {kind.value} page {page} (past the end)")
            return []
        return extract_results(body)

    async def search(
        self,
        kind: EntityKind,
        query: str,
        page: int,
        page_size: int,
    ) -> list[dict]:
        if kind is EntityKind.THEMES:
            # The themes endpoint has no search parameter; filter the page by name
            themes = await self.fetch_page(kind, page, page_size)
            needle = query.casefold()
            return [t for t in themes if needle in str(t.get("name", "")).casefold()]

        params = {
            "page": page,
            "page_size": page_size,
            "search": query,
            "ordering": _ORDERING[kind],
        }
        body = await self._get_json(self._url(kind), params)
        if body is None:
            return []
        return extract_results(body)

    async def fetch_by_id(self, kind: EntityKind, entity_id: str | int) -> dict | None:
        body = await self._get_json(self._url(kind, entity_id))
        if body is None:
            return None
        if not isinstance(body, dict):
            raise ParsingError(f"Expected {kind.value} object for {entity_id}")
        return body
