"""
Tests for the Rebrickable client and payload converters.
"""

from unittest.mock import AsyncMock, patch

import pytest

from brixie.database import LegoSet, SyncType
from brixie.exceptions import (
    CredentialsMissingError,
    InvalidCredentialsError,
    NetworkError,
    ParsingError,
    RateLimitError,
    ServerError,
)
from brixie.remote import (
    EntityKind,
    RebrickableCatalog,
    payload_to_set,
    payload_to_theme,
    payloads_to_sets,
)
from brixie.remote.rebrickable import extract_results, parse_json, raise_for_status
from brixie.repositories import build_repositories


class TestStatusMapping:
    """HTTP status to error class."""

    def test_success_passes(self):
        raise_for_status(200, "https://x")

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_failures(self, status):
        with pytest.raises(InvalidCredentialsError):
            raise_for_status(status, "https://x")

    def test_rate_limit(self):
        with pytest.raises(RateLimitError):
            raise_for_status(429, "https://x")

    def test_server_error_keeps_status(self):
        with pytest.raises(ServerError) as exc_info:
            raise_for_status(503, "https://x")
        assert exc_info.value.status == 503

    def test_other_client_errors(self):
        with pytest.raises(NetworkError):
            raise_for_status(400, "https://x")

    def test_invalid_key_is_a_credentials_error(self):
        assert issubclass(InvalidCredentialsError, CredentialsMissingError)
        assert not issubclass(CredentialsMissingError, NetworkError)


class TestExtractResults:
    def test_results_array(self):
        body = {"count": 2, "next": None, "results": [{"id": 1}, {"id": 2}]}
        assert extract_results(body) == [{"id": 1}, {"id": 2}]

    def test_missing_results(self):
        with pytest.raises(ParsingError):
            extract_results({"detail": "oops"})
        with pytest.raises(ParsingError):
            extract_results([1, 2])


class TestConverters:
    """Tests for payload conversion defaults."""

    def test_set_payload(self):
        lego_set = payload_to_set({
            "set_num": "75192-1",
            "name": "Millennium Falcon",
            "year": 2017,
            "theme_id": 171,
            "num_parts": 7541,
            "set_img_url": "https://cdn.rebrickable.com/media/sets/75192-1.jpg",
        })

        assert lego_set.year == 2017
        assert lego_set.image_url.endswith("75192-1.jpg")
        assert lego_set.theme_name is None
        assert lego_set.is_favorite is False

    def test_set_payload_defaults(self):
        lego_set = payload_to_set({"set_num": "1-1"})

        assert lego_set.name == ""
        assert lego_set.year == 0
        assert lego_set.num_parts == 0
        assert lego_set.image_url is None

    def test_sets_without_number_are_dropped(self):
        sets = payloads_to_sets([{"name": "No number"}, {"set_num": "1-1", "name": "One"}])
        assert [s.set_num for s in sets] == ["1-1"]

    def test_theme_payload(self):
        theme = payload_to_theme({"id": 158, "name": "Star Wars", "parent_id": None})
        assert theme.is_root
        child = payload_to_theme({"id": 171, "name": "Ultimate Collector Series", "parent_id": 158})
        assert child.parent_id == 158

    def test_theme_without_id(self):
        with pytest.raises(ParsingError):
            payload_to_theme({"name": "Nameless"})

    def test_non_object_payload(self):
        with pytest.raises(ParsingError):
            payload_to_set(["not", "a", "dict"])


class TestRebrickableCatalog:
    """Tests for request building, with HTTP patched out."""

    def test_headers_require_key(self):
        with pytest.raises(CredentialsMissingError):
            RebrickableCatalog(api_key="  ")._headers()

    def test_headers_send_key(self):
        headers = RebrickableCatalog(api_key="abc123")._headers()
        assert headers["Authorization"] == "key abc123"

    def test_urls(self):
        catalog = RebrickableCatalog(api_key="k", base_url="https://rebrickable.com/api/v3/")
        assert catalog._url(EntityKind.SETS) == "https://rebrickable.com/api/v3/lego/sets/"
        assert catalog._url(EntityKind.THEMES, 158) == "https://rebrickable.com/api/v3/lego/themes/158/"

    @pytest.mark.asyncio
    async def test_missing_key_raises_before_request(self):
        catalog = RebrickableCatalog(api_key="")
        with pytest.raises(CredentialsMissingError):
            await catalog.fetch_page(EntityKind.SETS, 1, 20)

    @pytest.mark.asyncio
    async def test_fetch_page_params(self):
        catalog = RebrickableCatalog(api_key="k")
        with patch.object(catalog, "_get_json", new=AsyncMock(return_value={"results": [{"set_num": "1-1"}]})) as get:
            results = await catalog.fetch_page(EntityKind.SETS, 2, 50, theme_id=158, min_year=None)

        assert results == [{"set_num": "1-1"}]
        url, params = get.await_args.args
        assert url.endswith("/lego/sets/")
        assert params == {"page": 2, "page_size": 50, "ordering": "-year", "theme_id": 158}

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self):
        catalog = RebrickableCatalog(api_key="k")
        with patch.object(catalog, "_get_json", new=AsyncMock(return_value=None)):
            assert await catalog.fetch_page(EntityKind.THEMES, 99, 50) == []

    @pytest.mark.asyncio
    async def test_set_search_passes_query(self):
        catalog = RebrickableCatalog(api_key="k")
        with patch.object(catalog, "_get_json", new=AsyncMock(return_value={"results": []})) as get:
            await catalog.search(EntityKind.SETS, "falcon", 1, 20)

        assert get.await_args.args[1]["search"] == "falcon"

    @pytest.mark.asyncio
    async def test_theme_search_filters_by_name(self):
        catalog = RebrickableCatalog(api_key="k")
        body = {"results": [{"id": 1, "name": "Star Wars"}, {"id": 2, "name": "City"}]}
        with patch.object(catalog, "_get_json", new=AsyncMock(return_value=body)) as get:
            results = await catalog.search(EntityKind.THEMES, "star", 1, 20)

        assert [r["id"] for r in results] == [1]
        assert "search" not in get.await_args.args[1]

    @pytest.mark.asyncio
    async def test_fetch_by_id(self):
        catalog = RebrickableCatalog(api_key="k")
        with patch.object(catalog, "_get_json", new=AsyncMock(return_value=None)):
            assert await catalog.fetch_by_id(EntityKind.SETS, "0000-1") is None
        with patch.object(catalog, "_get_json", new=AsyncMock(return_value=[])):
            with pytest.raises(ParsingError):
                await catalog.fetch_by_id(EntityKind.SETS, "0000-1")


class FakeResponse:
    def __init__(self, status: int, body: bytes):
        self.status = status
        self._body = body

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession, answering every GET with one response."""

    def __init__(self, response: FakeResponse):
        self.response = response

    def __call__(self, *args, **kwargs):
        return self

    def get(self, url, **kwargs):
        return self.response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


def serve(status: int, body: bytes):
    """Patch aiohttp so every request gets the given response."""
    return patch(
        "brixie.remote.rebrickable.aiohttp.ClientSession",
        new=FakeSession(FakeResponse(status, body)),
    )


class TestResponseDecoding:
    """Tests for body decoding in the HTTP path."""

    def test_parse_json(self):
        assert parse_json(b'{"results": []}', "https://x") == {"results": []}

    @pytest.mark.parametrize("body", [b"not json", b'{"results": [\xff\xfe]}', b"\xc3"])
    def test_undecodable_bodies(self, body):
        with pytest.raises(ParsingError):
            parse_json(body, "https://x")

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_parsing_error(self):
        catalog = RebrickableCatalog(api_key="k")
        with serve(200, b'{"results": [\xff\xfe]}'):
            with pytest.raises(ParsingError):
                await catalog.fetch_page(EntityKind.SETS, 1, 10)

    @pytest.mark.asyncio
    async def test_valid_body(self):
        catalog = RebrickableCatalog(api_key="k")
        with serve(200, '{"results": [{"set_num": "10305-1", "name": "Château"}]}'.encode()):
            results = await catalog.fetch_page(EntityKind.SETS, 1, 10)

        assert results[0]["name"] == "Château"

    @pytest.mark.asyncio
    async def test_http_status_mapped(self):
        catalog = RebrickableCatalog(api_key="k")
        with serve(429, b""):
            with pytest.raises(RateLimitError):
                await catalog.fetch_page(EntityKind.SETS, 1, 10)
        with serve(404, b""):
            assert await catalog.fetch_by_id(EntityKind.SETS, "0000-1") is None

    @pytest.mark.asyncio
    async def test_invalid_utf8_falls_back_to_cache(self, test_db):
        test_db.sets.save([LegoSet("75192-1", "Millennium Falcon", 2017, theme_id=171, num_parts=7541)])
        set_repo, _ = build_repositories(RebrickableCatalog(api_key="k"), test_db)

        with serve(200, b'{"results": [\xff\xfe]}'):
            sets = await set_repo.fetch_sets(1, 10)

        assert [s.set_num for s in sets] == ["75192-1"]
        assert test_db.sync.get_last(SyncType.SETS).is_successful is False
