"""Unit tests for ReleaseService against a real temporary SQLite catalog.

The clock is injected (``FIXED_NOW``) so scheduling rules are exercised
without freezing time globally.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from melodia.models.release import ReleaseStatus, ReleaseType
from melodia.services.release_service import (
    ReleaseService,
    as_calendar_date,
    as_utc,
    derive_status,
    unique_in_order,
)
from melodia.utils.errors import (
    ArtistNotFoundError,
    CoverNotFoundError,
    PublishedReleaseError,
    ReleaseNotFoundError,
    ReleaseTitleConflictError,
    ReleaseValidationError,
    SongNotFoundError,
    ValidationError,
)
from tests.conftest import FIXED_NOW, make_artist


@pytest.fixture
async def service(artist_store, release_store):
    await artist_store.insert_artist(make_artist("a1", "X"))
    await artist_store.insert_artist(make_artist("a2", "Y"))
    return ReleaseService(
        release_store=release_store,
        artist_store=artist_store,
        clock=lambda: FIXED_NOW,
    )


async def _create(service: ReleaseService, **overrides):
    fields = {
        "artist_id": "a1",
        "title": "Vida",
        "release_type": "album",
        "release_date": "2023-05-12",
        "cover_url": "u",
        "song_ids": ["s1"],
    }
    fields.update(overrides)
    return await service.create_release(**fields)


# ─── Pure helpers ─────────────────────────────────────────────────

class TestHelpers:
    def test_derive_status_table(self):
        future = FIXED_NOW + timedelta(hours=1)
        past = FIXED_NOW - timedelta(hours=1)
        assert derive_status(None, None, FIXED_NOW) is ReleaseStatus.PUBLISHED
        assert derive_status(None, future, FIXED_NOW) is ReleaseStatus.SCHEDULED
        assert derive_status(None, past, FIXED_NOW) is ReleaseStatus.PUBLISHED
        assert derive_status(None, FIXED_NOW, FIXED_NOW) is ReleaseStatus.PUBLISHED
        assert derive_status(ReleaseStatus.DRAFT, None, FIXED_NOW) is ReleaseStatus.DRAFT
        assert derive_status(ReleaseStatus.DRAFT, future, FIXED_NOW) is ReleaseStatus.SCHEDULED

    def test_unique_in_order(self):
        assert unique_in_order(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_as_utc_treats_naive_as_utc(self):
        assert as_utc(datetime(2025, 1, 1, 10)) == datetime(2025, 1, 1, 10, tzinfo=timezone.utc)
        assert as_utc("2025-01-01T12:00:00+02:00") == datetime(2025, 1, 1, 10, tzinfo=timezone.utc)

    def test_as_calendar_date(self):
        assert as_calendar_date("2023-05-12") == date(2023, 5, 12)
        assert as_calendar_date("2023-05-12T23:00:00") == date(2023, 5, 12)
        assert as_calendar_date(datetime(2023, 5, 12, 8)) == date(2023, 5, 12)
        with pytest.raises(ValidationError):
            as_calendar_date("not a date")


# ─── Create: status derivation scenarios ──────────────────────────

class TestCreateStatus:
    async def test_no_status_no_schedule_is_published(self, service):
        release = await _create(service)
        assert release.status is ReleaseStatus.PUBLISHED
        assert release.type is ReleaseType.ALBUM
        assert release.release_date == date(2023, 5, 12)

    async def test_future_schedule_is_scheduled(self, service):
        release = await _create(service, scheduled_publish_at=FIXED_NOW + timedelta(hours=1))
        assert release.status is ReleaseStatus.SCHEDULED

    async def test_past_schedule_is_published(self, service):
        release = await _create(service, scheduled_publish_at=FIXED_NOW - timedelta(hours=1))
        assert release.status is ReleaseStatus.PUBLISHED

    async def test_explicit_draft_honoured(self, service):
        release = await _create(service, status="draft")
        assert release.status is ReleaseStatus.DRAFT

    async def test_naive_schedule_read_as_utc(self, service):
        naive_future = (FIXED_NOW + timedelta(minutes=5)).replace(tzinfo=None)
        release = await _create(service, scheduled_publish_at=naive_future)
        assert release.status is ReleaseStatus.SCHEDULED
        assert release.scheduled_publish_at.tzinfo is not None

    async def test_uppercase_type_and_status_accepted(self, service):
        release = await _create(service, release_type="ALBUM")
        assert release.type is ReleaseType.ALBUM
        assert release.status is ReleaseStatus.PUBLISHED

        draft = await _create(service, title="Vida II", release_type="Single", status="DRAFT")
        assert draft.type is ReleaseType.SINGLE
        assert draft.status is ReleaseStatus.DRAFT

    async def test_unknown_type_is_a_validation_error(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await _create(service, release_type="mixtape")
        assert exc_info.value.status_code == 400
        assert exc_info.value.errors == ["Release type must be one of: album, single, ep"]

    async def test_unknown_status_is_a_validation_error(self, service):
        with pytest.raises(ValidationError, match="Invalid status"):
            await _create(service, status="archived")


# ─── Create: validation ───────────────────────────────────────────

class TestCreateValidation:
    async def test_all_failures_reported_together(self, service):
        with pytest.raises(ReleaseValidationError) as exc_info:
            await _create(service, title="  ", cover_url=None, song_ids=[], genres=[])

        assert exc_info.value.errors == [
            "Title is required",
            "If genres are provided, at least one genre is required",
            "Cover image is required",
            "At least one song is required",
        ]

    async def test_omitted_genres_are_valid(self, service):
        release = await _create(service, genres=None)
        assert release.genres is None

    async def test_scheduled_without_date(self, service):
        with pytest.raises(ReleaseValidationError) as exc_info:
            await _create(service, status="scheduled")
        assert exc_info.value.errors == [
            "Scheduled publish date is required for programmed releases"
        ]

    async def test_scheduled_with_past_date(self, service):
        with pytest.raises(ReleaseValidationError) as exc_info:
            await _create(
                service, status="scheduled", scheduled_publish_at=FIXED_NOW - timedelta(days=1)
            )
        assert exc_info.value.errors == ["Scheduled publish date must be in the future"]

    async def test_unknown_artist_checked_first(self, service):
        with pytest.raises(ArtistNotFoundError):
            await _create(service, artist_id="ghost", title="")

    async def test_song_ids_deduplicated(self, service):
        release = await _create(service, song_ids=["s1", "s2", "s1"])
        assert release.song_ids == ["s1", "s2"]


# ─── Create: uniqueness ───────────────────────────────────────────

class TestCreateUniqueness:
    async def test_duplicate_title_for_artist_conflicts(self, service):
        await _create(service)
        with pytest.raises(ReleaseTitleConflictError):
            await _create(service)

    async def test_same_title_other_artist_allowed(self, service):
        await _create(service)
        other = await _create(service, artist_id="a2")
        assert other.artist_id == "a2"


# ─── Read ─────────────────────────────────────────────────────────

class TestGetRelease:
    async def test_artist_scoped_lookup(self, service):
        release = await _create(service)
        assert (await service.get_release(release.release_id, "a1")).title == "Vida"
        with pytest.raises(ReleaseNotFoundError, match="for artist a2"):
            await service.get_release(release.release_id, "a2")

    async def test_missing(self, service):
        with pytest.raises(ReleaseNotFoundError):
            await service.get_release("nope")


class TestListing:
    async def test_latest_flag_marks_every_tie(self, service):
        await _create(service, title="Older", release_date="2022-01-01")
        await _create(service, title="B Side", release_date="2024-06-01")
        await _create(service, title="A Side", release_date="2024-06-01")

        flagged = await service.list_releases_with_latest_flag("a1")
        assert [(f.release.title, f.is_latest) for f in flagged] == [
            ("A Side", True),
            ("B Side", True),
            ("Older", False),
        ]

    async def test_latest_flag_empty(self, service):
        assert await service.list_releases_with_latest_flag("a1") == []

    async def test_latest_release(self, service):
        assert await service.get_latest_release("a1") is None
        await _create(service, title="Older", release_date="2022-01-01")
        await _create(service, title="Newer", release_date="2024-01-01")
        assert (await service.get_latest_release("a1")).title == "Newer"

    async def test_type_filter_accepts_uppercase(self, service):
        await _create(service)
        assert [r.title for r in await service.list_releases("a1", release_type="ALBUM")] == ["Vida"]
        with pytest.raises(ValidationError):
            await service.list_releases("a1", release_type="cassette")

    async def test_type_filter(self, service):
        await _create(service, title="LP")
        await _create(service, title="Single", release_type="single")
        singles = await service.list_releases(artist_id="a1", release_type="single")
        assert [r.title for r in singles] == ["Single"]

    async def test_unknown_artist(self, service):
        with pytest.raises(ArtistNotFoundError):
            await service.list_releases(artist_id="ghost")

    async def test_search_second_page(self, service):
        await _create(service, title="Test A", release_date="2024-02-01")
        await _create(service, title="test B", release_date="2024-01-01")
        results = await service.search_releases("test", limit=1, page=2)
        assert [r.title for r in results] == ["test B"]


# ─── Update ───────────────────────────────────────────────────────

class TestUpdateRelease:
    async def test_rename_to_taken_title_conflicts(self, service):
        await _create(service, title="One")
        two = await _create(service, title="Two")
        with pytest.raises(ReleaseTitleConflictError):
            await service.update_release(two.release_id, {"title": "One"})

    async def test_keeping_own_title_is_fine(self, service):
        release = await _create(service)
        updated = await service.update_release(release.release_id, {"title": "Vida", "genres": ["pop"]})
        assert updated.genres == ["pop"]

    async def test_release_date_normalised(self, service):
        release = await _create(service)
        updated = await service.update_release(
            release.release_id, {"release_date": "2024-01-02T15:00:00Z"}
        )
        assert updated.release_date == date(2024, 1, 2)

    async def test_status_override_is_literal(self, service):
        release = await _create(service, status="draft")
        updated = await service.update_release(release.release_id, {"status": "published"})
        assert updated.status is ReleaseStatus.PUBLISHED

    async def test_unknown_type_or_status_rejected_on_update(self, service):
        release = await _create(service)
        with pytest.raises(ValidationError, match="Invalid release type"):
            await service.update_release(release.release_id, {"type": "LP"})
        with pytest.raises(ValidationError, match="Invalid status"):
            await service.update_release(release.release_id, {"status": "live"})

    async def test_song_change_on_published_is_rejected(self, service):
        release = await _create(service)
        with pytest.raises(PublishedReleaseError):
            await service.update_release(release.release_id, {"song_ids": ["s9"]})

    async def test_scoped_update_of_foreign_release(self, service):
        release = await _create(service)
        with pytest.raises(ReleaseNotFoundError):
            await service.update_release(release.release_id, {"title": "New"}, artist_id="a2")


# ─── Song membership ──────────────────────────────────────────────

class TestSongMembership:
    @pytest.mark.parametrize("status", ["draft", "scheduled"])
    async def test_editable_statuses_accept_changes(self, service, status):
        extra = {"scheduled_publish_at": FIXED_NOW + timedelta(days=1)} if status == "scheduled" else {}
        release = await _create(service, status=status, **extra)

        added = await service.add_songs(release.release_id, ["s2", "s3"])
        assert added.song_ids == ["s1", "s2", "s3"]
        removed = await service.remove_songs(release.release_id, ["s1", "s3"])
        assert removed.song_ids == ["s2"]

    async def test_add_is_idempotent(self, service):
        release = await _create(service, status="draft")
        await service.add_songs(release.release_id, ["song1"])
        again = await service.add_songs(release.release_id, ["song1"])
        assert again.song_ids.count("song1") == 1

    async def test_published_rejects_add_and_remove(self, service):
        release = await _create(service)
        with pytest.raises(PublishedReleaseError):
            await service.add_songs(release.release_id, ["s2"])
        with pytest.raises(PublishedReleaseError):
            await service.remove_songs(release.release_id, ["s1"])


# ─── Delete / cover lookup ────────────────────────────────────────

class TestRemoveAndCover:
    async def test_remove(self, service):
        release = await _create(service)
        await service.remove_release(release.release_id, artist_id="a1")
        with pytest.raises(ReleaseNotFoundError):
            await service.remove_release(release.release_id)

    async def test_cover_by_song(self, service):
        await _create(service, cover_url="https://cdn.example.com/vida.png", song_ids=["s1"])
        assert await service.get_cover_url_by_song_id("s1") == {
            "cover_url": "https://cdn.example.com/vida.png"
        }

    async def test_cover_by_unknown_song(self, service):
        with pytest.raises(SongNotFoundError):
            await service.get_cover_url_by_song_id("nope")

    async def test_release_without_cover(self, service):
        release = await _create(service, status="draft", song_ids=["s1"])
        await service.update_release(release.release_id, {"cover_url": None})
        with pytest.raises(CoverNotFoundError):
            await service.get_cover_url_by_song_id("s1")
