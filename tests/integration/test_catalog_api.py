"""Integration tests for the Melodia catalog HTTP API.

Runs the full request/response cycle through FastAPI's TestClient with a
temporary SQLite catalog and a local asset store rooted in ``tmp_path``.
"""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from melodia.config.settings import Settings
from melodia.main import create_app
from melodia.providers.assets.local_asset_store import LocalAssetStore
from melodia.providers.catalog.sqlite_artist_provider import SQLiteArtistProvider
from melodia.providers.catalog.sqlite_release_provider import SQLiteReleaseProvider
from melodia.services.artist_service import ArtistService
from melodia.services.release_service import ReleaseService

ARTISTS = "/api/v1/artists"
RELEASES = "/api/v1/releases"
FAR_FUTURE = "2999-01-01T00:00:00Z"


@pytest.fixture
def client(tmp_db, uploads_dir):
    """TestClient wired to throwaway stores."""
    artist_store = SQLiteArtistProvider(db_path=tmp_db)
    release_store = SQLiteReleaseProvider(db_path=tmp_db)
    app_settings = Settings(_env_file=None, uploads_dir=str(uploads_dir), app_env="test")

    app = create_app(
        components={
            "artist_store": artist_store,
            "release_store": release_store,
            "asset_store": LocalAssetStore(root=uploads_dir, url_prefix="/uploads"),
            "artist_service": ArtistService(artist_store=artist_store),
            "release_service": ReleaseService(release_store=release_store, artist_store=artist_store),
        },
        app_settings=app_settings,
    )

    with TestClient(app) as c:
        yield c


def _create_artist(client: TestClient, artist_id: str = "a1", name: str = "X", **form) -> dict:
    response = client.post(f"{ARTISTS}/", data={"id": artist_id, "name": name, **form})
    assert response.status_code == 201, response.text
    return response.json()


def _release_body(**overrides) -> dict:
    body = {
        "title": "Vida",
        "type": "album",
        "release_date": "2023-05-12",
        "cover_url": "u",
        "song_ids": ["s1"],
    }
    body.update(overrides)
    return body


def _create_release(client: TestClient, artist_id: str = "a1", **overrides) -> dict:
    response = client.post(f"{ARTISTS}/{artist_id}/releases/", json=_release_body(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


# ─── Health ───────────────────────────────────────────────────────

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["providers"] == {
        "artist_store": "sqlite_artist",
        "release_store": "sqlite_release",
        "asset_store": "local",
    }


# ─── Artists ──────────────────────────────────────────────────────

class TestArtistEndpoints:
    def test_create_with_image_and_links(self, client, png_bytes):
        response = client.post(
            f"{ARTISTS}/",
            data={
                "id": "a1",
                "name": "Nina Kraviz",
                "social_links": json.dumps({"instagram": "https://instagram.com/nk"}),
            },
            files={"image": ("face.png", png_bytes, "image/png")},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["artist_id"] == "a1"
        assert data["social_links"] == {"instagram": "https://instagram.com/nk"}
        assert data["image_url"].startswith("/uploads/artists/")

        served = client.get(data["image_url"])
        assert served.status_code == 200
        assert served.content == png_bytes

    def test_duplicate_name_conflict(self, client):
        _create_artist(client)
        response = client.post(f"{ARTISTS}/", data={"id": "a2", "name": "X"})
        assert response.status_code == 409
        assert response.json()["error"] == "ArtistNameConflictError"

    def test_duplicate_id_conflict(self, client):
        _create_artist(client)
        response = client.post(f"{ARTISTS}/", data={"id": "a1", "name": "Other"})
        assert response.status_code == 409
        assert response.json()["error"] == "ArtistIdConflictError"

    def test_invalid_social_links(self, client):
        response = client.post(f"{ARTISTS}/", data={"name": "X", "social_links": "not json"})
        assert response.status_code == 400

    def test_non_image_upload_rejected(self, client):
        response = client.post(
            f"{ARTISTS}/",
            data={"name": "X"},
            files={"image": ("face.png", b"plain text", "image/png")},
        )
        assert response.status_code == 400
        assert "not a valid image" in response.json()["detail"]

    def test_upload_over_configured_cap_rejected(self, client, png_bytes):
        client.app.state.settings.max_image_bytes = len(png_bytes) - 1
        response = client.post(
            f"{ARTISTS}/",
            data={"name": "X"},
            files={"image": ("face.png", png_bytes, "image/png")},
        )
        assert response.status_code == 400
        assert f"exceeds the {len(png_bytes) - 1} byte limit" in response.json()["detail"]
        assert client.get(f"{ARTISTS}/search", params={"query": "X"}).json() == []

    def test_get_missing(self, client):
        response = client.get(f"{ARTISTS}/nope")
        assert response.status_code == 404
        assert response.json()["detail"] == "Artist with ID nope not found"

    def test_partial_update_and_bio(self, client):
        _create_artist(client, bio="old")
        response = client.patch(f"{ARTISTS}/a1", json={"name": "Renamed"})
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["bio"] == "old"

        response = client.patch(f"{ARTISTS}/a1/bio", json={"bio": "Line one\nLine two"})
        assert response.json()["bio"] == "Line one\nLine two"

    def test_image_and_cover_uploads(self, client, png_bytes, jpeg_bytes):
        _create_artist(client)
        image = client.patch(f"{ARTISTS}/a1/image", files={"image": ("i.png", png_bytes, "image/png")})
        cover = client.patch(f"{ARTISTS}/a1/cover", files={"cover": ("c.jpg", jpeg_bytes, "image/jpeg")})

        assert image.status_code == 200
        assert cover.status_code == 200
        assert cover.json()["image_url"] == image.json()["image_url"]
        assert cover.json()["cover_url"].endswith("-c.jpg")

    def test_follow_unfollow_floor(self, client):
        _create_artist(client)
        assert client.post(f"{ARTISTS}/a1/unfollow").json()["followers_count"] == 0
        assert client.post(f"{ARTISTS}/a1/follow").json()["followers_count"] == 1
        assert client.post(f"{ARTISTS}/a1/follow").json()["followers_count"] == 2
        assert client.post(f"{ARTISTS}/a1/unfollow").json()["followers_count"] == 1

    def test_delete(self, client):
        _create_artist(client)
        assert client.delete(f"{ARTISTS}/a1").status_code == 204
        assert client.get(f"{ARTISTS}/a1").status_code == 404
        assert client.delete(f"{ARTISTS}/a1").status_code == 404


class TestArtistSearch:
    def test_requires_query(self, client):
        response = client.get(f"{ARTISTS}/search")
        assert response.status_code == 400
        assert response.json()["detail"] == "Query parameter is required"

    @pytest.mark.parametrize(
        "params, detail",
        [
            ({"query": "x", "page": 0}, "Page must be greater than 0"),
            ({"query": "x", "limit": 0}, "Limit must be between 1 and 100"),
            ({"query": "x", "limit": 101}, "Limit must be between 1 and 100"),
        ],
    )
    def test_window_bounds(self, client, params, detail):
        response = client.get(f"{ARTISTS}/search", params=params)
        assert response.status_code == 400
        assert response.json()["detail"] == detail

    def test_ordered_by_followers_then_name(self, client):
        _create_artist(client, "a1", "Test B")
        _create_artist(client, "a2", "Test A")
        _create_artist(client, "a3", "Popular", bio="test bio")
        client.post(f"{ARTISTS}/a3/follow")

        response = client.get(f"{ARTISTS}/search", params={"query": "TEST"})
        assert [a["artist_id"] for a in response.json()] == ["a3", "a2", "a1"]

        page_two = client.get(f"{ARTISTS}/search", params={"query": "test", "page": 2, "limit": 1})
        assert [a["artist_id"] for a in page_two.json()] == ["a2"]


# ─── Releases ─────────────────────────────────────────────────────

class TestCreateRelease:
    def test_defaults_to_published(self, client):
        _create_artist(client)
        data = _create_release(client)
        assert data["status"] == "published"
        assert data["release_date"] == "2023-05-12"
        assert data["song_ids"] == ["s1"]

    def test_uppercase_type_accepted(self, client):
        _create_artist(client, artist_id="a1", name="X")
        data = _create_release(client, title="Vida", type="ALBUM", release_date="2023-05-12")
        assert data["type"] == "album"
        assert data["status"] == "published"

    def test_unknown_type_is_client_error(self, client):
        _create_artist(client)
        response = client.post(f"{ARTISTS}/a1/releases/", json=_release_body(type="mixtape"))
        assert response.status_code == 422

    def test_future_schedule_is_scheduled(self, client):
        _create_artist(client)
        data = _create_release(client, scheduled_publish_at=FAR_FUTURE)
        assert data["status"] == "scheduled"

    def test_timestamp_release_date_keeps_day(self, client):
        _create_artist(client)
        data = _create_release(client, release_date="2023-05-12T10:00:00Z")
        assert data["release_date"] == "2023-05-12"

    def test_validation_errors_aggregated(self, client):
        _create_artist(client)
        response = client.post(
            f"{ARTISTS}/a1/releases/",
            json={"type": "single", "release_date": "2023-05-12", "genres": []},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ReleaseValidationError"
        assert body["errors"] == [
            "Title is required",
            "If genres are provided, at least one genre is required",
            "Cover image is required",
            "At least one song is required",
        ]

    def test_duplicate_title_conflict(self, client):
        _create_artist(client)
        _create_release(client)
        response = client.post(f"{ARTISTS}/a1/releases/", json=_release_body())
        assert response.status_code == 409

    def test_unknown_artist(self, client):
        response = client.post(f"{ARTISTS}/ghost/releases/", json=_release_body())
        assert response.status_code == 404


class TestArtistReleaseEndpoints:
    def test_latest_flag_and_latest(self, client):
        _create_artist(client)
        _create_release(client, title="Old", release_date="2020-01-01")
        _create_release(client, title="B", release_date="2024-01-01")
        _create_release(client, title="A", release_date="2024-01-01", type="ep")

        flagged = client.get(f"{ARTISTS}/a1/releases/", params={"with_latest_flag": "true"}).json()
        assert [(r["title"], r["is_latest"]) for r in flagged] == [
            ("A", True), ("B", True), ("Old", False),
        ]

        eps = client.get(f"{ARTISTS}/a1/releases/", params={"type": "ep"}).json()
        assert [r["title"] for r in eps] == ["A"]

        latest = client.get(f"{ARTISTS}/a1/releases/latest").json()
        assert latest["title"] == "A"

    def test_latest_without_releases_is_null(self, client):
        _create_artist(client)
        response = client.get(f"{ARTISTS}/a1/releases/latest")
        assert response.status_code == 200
        assert response.json() is None

    def test_scoped_get_of_foreign_release(self, client):
        _create_artist(client, "a1", "X")
        _create_artist(client, "a2", "Y")
        release = _create_release(client, "a1")

        response = client.get(f"{ARTISTS}/a2/releases/{release['release_id']}")
        assert response.status_code == 404
        assert "for artist a2" in response.json()["detail"]

    def test_published_songs_are_frozen(self, client):
        _create_artist(client)
        release = _create_release(client)
        response = client.patch(
            f"{ARTISTS}/a1/releases/{release['release_id']}/songs/add",
            json={"song_ids": ["s2"]},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "PublishedReleaseError"

    def test_draft_song_membership(self, client):
        _create_artist(client)
        release = _create_release(client, status="draft")
        base = f"{ARTISTS}/a1/releases/{release['release_id']}/songs"

        added = client.patch(f"{base}/add", json={"song_ids": ["s2", "s1"]}).json()
        assert added["song_ids"] == ["s1", "s2"]
        removed = client.patch(f"{base}/remove", json={"song_ids": ["s1"]}).json()
        assert removed["song_ids"] == ["s2"]

    def test_update_and_cover_upload(self, client, png_bytes):
        _create_artist(client)
        release = _create_release(client)
        url = f"{ARTISTS}/a1/releases/{release['release_id']}"

        updated = client.patch(url, json={"title": "Vida (Deluxe)", "genres": ["pop"]}).json()
        assert updated["title"] == "Vida (Deluxe)"
        assert updated["genres"] == ["pop"]

        cover = client.patch(f"{url}/cover", files={"cover": ("art.png", png_bytes, "image/png")})
        assert cover.status_code == 200
        assert cover.json()["cover_url"].startswith("/uploads/releases/")

    def test_delete_release(self, client):
        _create_artist(client)
        release = _create_release(client)
        url = f"{ARTISTS}/a1/releases/{release['release_id']}"
        assert client.delete(url).status_code == 204
        assert client.get(url).status_code == 404


class TestCatalogEndpoints:
    def test_list_get_and_search(self, client):
        _create_artist(client, "a1", "X")
        _create_artist(client, "a2", "Y")
        first = _create_release(client, "a1", title="Test One", release_date="2024-05-01")
        _create_release(client, "a2", title="test two", release_date="2024-01-01")

        all_releases = client.get(f"{RELEASES}/").json()
        assert len(all_releases) == 2

        assert client.get(f"{RELEASES}/{first['release_id']}").json()["title"] == "Test One"

        page_two = client.get(f"{RELEASES}/search", params={"query": "test", "page": 2, "limit": 1})
        assert [r["title"] for r in page_two.json()] == ["test two"]

    def test_search_requires_query(self, client):
        assert client.get(f"{RELEASES}/search").status_code == 400

    def test_cover_by_song(self, client):
        _create_artist(client)
        _create_release(client, cover_url="https://cdn.example.com/vida.png", song_ids=["s1"])

        response = client.get(f"{RELEASES}/song/s1/cover")
        assert response.json() == {"cover_url": "https://cdn.example.com/vida.png"}
        assert client.get(f"{RELEASES}/song/unknown/cover").status_code == 404

    def test_artist_delete_cascades_to_releases(self, client):
        _create_artist(client)
        release = _create_release(client)
        client.delete(f"{ARTISTS}/a1")
        assert client.get(f"{RELEASES}/{release['release_id']}").status_code == 404
