"""
Tests for the HTTP API.
"""

from datetime import datetime

from brixie.database import LegoSet, LegoTheme, SyncTimestamp, SyncType
from brixie.exceptions import CredentialsMissingError, NetworkError
from brixie.tests.fakes import set_payload, theme_payload


def store_set(db, set_num: str, **kwargs) -> LegoSet:
    lego_set = LegoSet(set_num=set_num, name=kwargs.pop("name", "Cached"), year=2020,
                       theme_id=kwargs.pop("theme_id", 1), num_parts=10, **kwargs)
    db.sets.save([lego_set])
    return lego_set


class TestStatus:
    def test_status_counts_cache(self, client, test_db):
        store_set(test_db, "1-1")
        test_db.themes.save([LegoTheme(id=1, name="City")])

        response = client.get("/status")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["cached_sets"] == 1
        assert data["cached_themes"] == 1


class TestSetRoutes:
    """Tests for /sets endpoints."""

    def test_list_sets(self, client, remote):
        remote.sets = [set_payload("75192-1", "Millennium Falcon")]

        response = client.get("/sets", params={"page": 1, "page_size": 10})

        assert response.status_code == 200
        assert [s["set_num"] for s in response.json()] == ["75192-1"]

    def test_invalid_page(self, client):
        assert client.get("/sets", params={"page": 0}).status_code == 422

    def test_missing_credentials_is_401(self, client, remote):
        remote.error = CredentialsMissingError()

        response = client.get("/sets")

        assert response.status_code == 401
        assert "recovery_suggestion" in response.json()

    def test_offline_with_empty_cache_is_502(self, client, remote):
        remote.error = NetworkError("offline")
        assert client.get("/sets").status_code == 502

    def test_offline_serves_cache(self, client, remote, test_db):
        store_set(test_db, "1-1")
        remote.error = NetworkError("offline")

        response = client.get("/sets")

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_search(self, client, remote):
        remote.sets = [set_payload("75192-1", "Millennium Falcon"), set_payload("21318-1", "Tree House")]

        response = client.get("/sets/search", params={"q": "tree"})

        assert [s["set_num"] for s in response.json()] == ["21318-1"]

    def test_details_marks_viewed(self, client, remote, test_db):
        remote.sets = [set_payload("75192-1", "Millennium Falcon")]

        response = client.get("/sets/75192-1")

        assert response.status_code == 200
        assert response.json()["name"] == "Millennium Falcon"
        assert test_db.sets.get("75192-1").last_viewed is not None
        assert [s["set_num"] for s in client.get("/sets/recent").json()] == ["75192-1"]

    def test_details_not_found(self, client):
        assert client.get("/sets/0000-1").status_code == 404

    def test_favorite_toggle(self, client, test_db):
        store_set(test_db, "1-1")

        response = client.post("/sets/1-1/favorite")
        assert response.status_code == 200
        assert response.json()["is_favorite"] is True
        assert [s["set_num"] for s in client.get("/sets/favorites").json()] == ["1-1"]

        response = client.delete("/sets/1-1/favorite")
        assert response.json()["is_favorite"] is False
        assert client.get("/sets/favorites").json() == []

    def test_favorite_uncached_set(self, client):
        assert client.post("/sets/9999-1/favorite").status_code == 404

    def test_cached_image_served(self, client, test_db):
        store_set(test_db, "1-1", image_url="https://img/1-1.png", cached_image_data=b"png")

        response = client.get("/sets/1-1/image")

        assert response.status_code == 200
        assert response.content == b"png"
        assert response.headers["content-type"] == "image/png"

    def test_image_unavailable(self, client, test_db):
        store_set(test_db, "1-1")
        assert client.get("/sets/1-1/image").status_code == 404

    def test_backfill(self, client, test_db):
        store_set(test_db, "1-1", theme_id=5)
        test_db.themes.save([LegoTheme(id=5, name="Space")])

        assert client.post("/sets/backfill-theme-names").json() == {"updated": 1}


class TestThemeRoutes:
    """Tests for /themes endpoints."""

    def test_list_themes(self, client, remote):
        remote.themes = [theme_payload(1, "City"), theme_payload(2, "Police", parent_id=1)]

        response = client.get("/themes")

        assert [t["id"] for t in response.json()] == [1, 2]
        assert [t["id"] for t in client.get("/themes/1/children").json()] == [2]

    def test_theme_details(self, client, remote):
        remote.themes = [theme_payload(158, "Star Wars")]

        assert client.get("/themes/158").json()["name"] == "Star Wars"
        assert client.get("/themes/999").status_code == 404

    def test_theme_sets(self, client, remote):
        remote.sets = [set_payload("1-1", "A", theme_id=5), set_payload("2-1", "B", theme_id=6)]

        response = client.get("/themes/5/sets")

        assert [s["set_num"] for s in response.json()] == ["1-1"]


class TestSyncRoutes:
    """Tests for sync status endpoints."""

    def test_feed_status(self, client, test_db):
        test_db.sync.save(SyncTimestamp(SyncType.SET_DETAILS, datetime.now(), True, 1))

        response = client.get("/sync/setDetails")

        assert response.status_code == 200
        data = response.json()
        assert data["item_count"] == 1
        assert data["is_stale"] is False

    def test_unknown_feed(self, client):
        assert client.get("/sync/bogus").status_code == 404

    def test_feed_never_synced(self, client):
        assert client.get("/sync/themes").status_code == 404

    def test_list_after_fetch(self, client, remote):
        remote.themes = [theme_payload(1, "City")]
        client.get("/themes")

        feeds = [ts["sync_type"] for ts in client.get("/sync").json()]
        assert feeds == ["themes"]


class TestCollectionRoutes:
    """Tests for owned and wishlist endpoints."""

    def test_owned_and_wishlist(self, client, test_db):
        store_set(test_db, "1-1")
        store_set(test_db, "2-1")

        assert client.post("/sets/2-1/wishlist").json()["is_wishlist"] is True
        response = client.post("/sets/1-1/owned")
        assert response.status_code == 200
        assert response.json()["is_owned"] is True

        assert [s["set_num"] for s in client.get("/sets/owned").json()] == ["1-1"]
        assert [s["set_num"] for s in client.get("/sets/wishlist").json()] == ["2-1"]

        stats = client.get("/sets/collection/stats").json()
        assert stats["owned_count"] == 1
        assert stats["wishlist_count"] == 1
        assert stats["owned_parts"] == 10

        assert client.delete("/sets/1-1/owned").json()["is_owned"] is False
        assert client.delete("/sets/2-1/wishlist").json()["is_wishlist"] is False

    def test_uncached_set(self, client):
        assert client.post("/sets/9999-1/owned").status_code == 404
        assert client.delete("/sets/9999-1/wishlist").status_code == 404
