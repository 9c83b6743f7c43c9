"""Unit tests for the concert search, playlist synthesis and publishing services."""

from __future__ import annotations

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from soniccompass.models.concert import DateWindow, PlaceQuery
from soniccompass.models.pipeline import PipelinePhase
from soniccompass.models.playlist import PlaylistEntry, SongSuggestion, video_link_for
from soniccompass.models.session import Credential
from soniccompass.services.concert_search_service import ConcertSearchService
from soniccompass.services.playlist_publisher import (
    NO_SELECTION_MESSAGE,
    NO_VIDEO_KEY_MESSAGE,
    SIGN_IN_MESSAGE,
    PlaylistPublisher,
)
from soniccompass.services.playlist_synthesizer import NO_ARTISTS_MESSAGE, PlaylistSynthesizer
from soniccompass.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    GeocodingError,
    LLMResponseError,
    PlaylistCreateError,
    TransientNetworkError,
    UserInputError,
)


class ProgressRecorder:
    def __init__(self) -> None:
        self.events: list[tuple[PipelinePhase, float, str]] = []

    async def __call__(self, phase: PipelinePhase, progress: float, message: str) -> None:
        self.events.append((phase, progress, message))

    @property
    def phases(self) -> list[PipelinePhase]:
        return [phase for phase, _, _ in self.events]


# ======================================================================
# ConcertSearchService
# ======================================================================


class TestConcertSearchService:
    @pytest.mark.asyncio
    async def test_geocodes_then_searches(
        self, mock_geocoder, mock_event_search, sample_concerts
    ) -> None:
        service = ConcertSearchService(mock_geocoder, mock_event_search)
        progress = ProgressRecorder()
        query = PlaceQuery(
            city_name="Spartanburg", radius_miles=25, genre="Rock", date_window_days=60
        )

        concerts = await service.search(query, on_progress=progress)

        assert concerts == sample_concerts
        mock_geocoder.geocode.assert_awaited_once_with("Spartanburg")
        coords = mock_geocoder.geocode.return_value
        mock_event_search.search_events.assert_awaited_once_with(
            coords, 25, genre="Rock", date_window_days=DateWindow.DAYS_60
        )
        assert progress.phases == [PipelinePhase.GEOCODING, PipelinePhase.SEARCHING_EVENTS]

    @pytest.mark.asyncio
    async def test_geocode_failure_skips_event_search(
        self, mock_geocoder, mock_event_search
    ) -> None:
        mock_geocoder.geocode.side_effect = GeocodingError("down", provider_name="opencage")
        service = ConcertSearchService(mock_geocoder, mock_event_search)

        with pytest.raises(GeocodingError):
            await service.search(PlaceQuery(city_name="Spartanburg"))

        mock_event_search.search_events.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_result_is_not_an_error(self, mock_geocoder, mock_event_search) -> None:
        mock_event_search.search_events.return_value = []
        service = ConcertSearchService(mock_geocoder, mock_event_search)
        assert await service.search(PlaceQuery(city_name="Nowhere")) == []


# ======================================================================
# PlaylistSynthesizer
# ======================================================================


class TestPlaylistSynthesizer:
    @pytest.mark.asyncio
    async def test_empty_artists_calls_nothing(
        self, mock_song_generator, mock_video_search
    ) -> None:
        synthesizer = PlaylistSynthesizer(mock_song_generator, mock_video_search)

        with pytest.raises(UserInputError, match="No unique artists"):
            await synthesizer.synthesize([])

        assert NO_ARTISTS_MESSAGE.startswith("No unique artists")
        mock_song_generator.generate_songs.assert_not_awaited()
        mock_video_search.find_video.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_entries_are_linked_and_selected(
        self, mock_song_generator, mock_video_search
    ) -> None:
        synthesizer = PlaylistSynthesizer(mock_song_generator, mock_video_search)
        progress = ProgressRecorder()

        entries = await synthesizer.synthesize(["Band A", "Band B"], on_progress=progress)

        assert [(e.artist_name, e.song_title) for e in entries] == [
            ("Band A", "Song One"),
            ("Band B", "Song Two"),
        ]
        assert all(e.selected for e in entries)
        assert entries[0].video_link == video_link_for("vid-BandA")
        assert entries[1].video_id == "vid-BandB"
        mock_video_search.find_video.assert_any_await("Band A - Song One official audio")
        assert progress.phases == [
            PipelinePhase.GENERATING_SONGS,
            PipelinePhase.RESOLVING_VIDEOS,
        ]

    @pytest.mark.asyncio
    async def test_same_input_same_playlist(
        self, mock_song_generator, mock_video_search
    ) -> None:
        synthesizer = PlaylistSynthesizer(mock_song_generator, mock_video_search)

        first = await synthesizer.synthesize(["Band A", "Band B"])
        second = await synthesizer.synthesize(["Band A", "Band B"])

        assert first == second

    @pytest.mark.asyncio
    async def test_order_follows_generator_not_completion(
        self, mock_song_generator, mock_video_search
    ) -> None:
        async def _slow_first(query: str) -> str:
            if query.startswith("Band A"):
                await asyncio.sleep(0.02)
            return "id-" + query[:6].replace(" ", "")

        mock_video_search.find_video.side_effect = _slow_first
        synthesizer = PlaylistSynthesizer(mock_song_generator, mock_video_search)

        entries = await synthesizer.synthesize(["Band A", "Band B"])

        assert [e.video_id for e in entries] == ["id-BandA", "id-BandB"]

    @pytest.mark.asyncio
    async def test_failed_lookups_leave_entry_unlinked(
        self, mock_song_generator, mock_video_search
    ) -> None:
        async def _lookup(query: str) -> str | None:
            if query.startswith("Band A"):
                raise TransientNetworkError("HTTP 403: quota", status=403)
            return None

        mock_video_search.find_video.side_effect = _lookup
        synthesizer = PlaylistSynthesizer(mock_song_generator, mock_video_search)

        entries = await synthesizer.synthesize(["Band A", "Band B"])

        assert len(entries) == 2
        assert all(e.video_link is None for e in entries)
        assert all(e.selected for e in entries)

    @pytest.mark.asyncio
    async def test_lookup_skipped_without_video_key(
        self, mock_song_generator, mock_video_search
    ) -> None:
        mock_video_search.is_available.return_value = False
        synthesizer = PlaylistSynthesizer(mock_song_generator, mock_video_search)

        entries = await synthesizer.synthesize(["Band A", "Band B"])

        assert [e.video_link for e in entries] == [None, None]
        mock_video_search.find_video.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_generator_error_propagates(
        self, mock_song_generator, mock_video_search
    ) -> None:
        mock_song_generator.generate_songs.side_effect = LLMResponseError("bad json")
        synthesizer = PlaylistSynthesizer(mock_song_generator, mock_video_search)

        with pytest.raises(LLMResponseError):
            await synthesizer.synthesize(["Band A"])
        mock_video_search.find_video.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lookup_concurrency_is_bounded(
        self, mock_song_generator, mock_video_search
    ) -> None:
        artists = [f"Artist {i}" for i in range(8)]
        mock_song_generator.generate_songs.return_value = [
            SongSuggestion(artist_name=a, song_title="Hit") for a in artists
        ]
        in_flight = 0
        peak = 0

        async def _lookup(query: str) -> str:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return "v"

        mock_video_search.find_video.side_effect = _lookup
        synthesizer = PlaylistSynthesizer(
            mock_song_generator, mock_video_search, max_concurrent_lookups=2
        )

        entries = await synthesizer.synthesize(artists)

        assert len(entries) == 8
        assert peak == 2


# ======================================================================
# PlaylistPublisher
# ======================================================================


_FIXED_LOCAL = datetime(2025, 3, 1, 18, 5, 9)


def _publisher(playlists, video_search) -> PlaylistPublisher:
    return PlaylistPublisher(
        playlists,
        video_search,
        title_prefix="SonicCompass Hype",
        description="desc",
        clock=lambda: _FIXED_LOCAL,
    )


class TestPlaylistPublisher:
    def test_title_uses_local_timestamp(self, mock_playlist_provider, mock_video_search) -> None:
        publisher = _publisher(mock_playlist_provider, mock_video_search)
        assert publisher.playlist_title() == "SonicCompass Hype - 2025-03-01 18:05:09"

    @pytest.mark.asyncio
    async def test_publishes_selected_in_order(
        self, mock_playlist_provider, mock_video_search, credential
    ) -> None:
        entries = [
            PlaylistEntry(artist_name="A", song_title="1", video_link=video_link_for("v1")),
            PlaylistEntry(artist_name="B", song_title="2", video_link=video_link_for("v2"), selected=False),
            PlaylistEntry(artist_name="C", song_title="3", video_link=video_link_for("v3")),
        ]
        publisher = _publisher(mock_playlist_provider, mock_video_search)
        progress = ProgressRecorder()

        result = await publisher.publish(credential, entries, on_progress=progress)

        mock_playlist_provider.create_playlist.assert_awaited_once_with(
            "ya29.token", "SonicCompass Hype - 2025-03-01 18:05:09", "desc"
        )
        added_ids = [c.args[2] for c in mock_playlist_provider.add_playlist_item.await_args_list]
        assert added_ids == ["v1", "v3"]
        assert [e.artist_name for e in result.added] == ["A", "C"]
        assert result.failures == []
        assert result.warning() is None
        mock_video_search.find_video.assert_not_awaited()
        assert progress.phases[0] is PipelinePhase.CREATING_PLAYLIST
        assert progress.phases.count(PipelinePhase.ADDING_ITEMS) == 2

    @pytest.mark.asyncio
    async def test_partial_failure_continues(
        self, mock_playlist_provider, mock_video_search, credential
    ) -> None:
        entries = [
            PlaylistEntry(artist_name="A", song_title="1", video_link=video_link_for("v1")),
            PlaylistEntry(artist_name="B", song_title="2"),
            PlaylistEntry(artist_name="C", song_title="3", video_link=video_link_for("v3")),
        ]
        mock_video_search.find_video = AsyncMock(return_value=None)
        publisher = _publisher(mock_playlist_provider, mock_video_search)

        result = await publisher.publish(credential, entries)

        mock_video_search.find_video.assert_awaited_once_with("B - 2 official audio")
        assert [e.artist_name for e in result.added] == ["A", "C"]
        assert len(result.failures) == 1
        assert result.failures[0].artist_name == "B"
        assert result.failures[0].reason == "No matching video found"
        warning = result.warning()
        assert warning is not None
        assert warning.message == "1 of 3 songs could not be added"

    @pytest.mark.asyncio
    async def test_unlinked_entry_resolved_at_publish(
        self, mock_playlist_provider, mock_video_search, credential
    ) -> None:
        entries = [PlaylistEntry(artist_name="Band B", song_title="2")]
        publisher = _publisher(mock_playlist_provider, mock_video_search)

        result = await publisher.publish(credential, entries)

        assert len(result.added) == 1
        mock_playlist_provider.add_playlist_item.assert_awaited_once_with(
            "ya29.token", "PL123", "vid-BandB"
        )

    @pytest.mark.asyncio
    async def test_item_errors_become_reasons(
        self, mock_playlist_provider, mock_video_search, credential
    ) -> None:
        entries = [
            PlaylistEntry(artist_name="A", song_title="1"),
            PlaylistEntry(artist_name="B", song_title="2", video_link=video_link_for("v2")),
        ]
        mock_video_search.find_video = AsyncMock(
            side_effect=TransientNetworkError("HTTP 403: quotaExceeded")
        )
        mock_playlist_provider.add_playlist_item.side_effect = TransientNetworkError(
            "HTTP 404: videoNotFound"
        )
        publisher = _publisher(mock_playlist_provider, mock_video_search)

        result = await publisher.publish(credential, entries)

        assert result.added == []
        assert [f.reason for f in result.failures] == [
            "Video search failed: HTTP 403: quotaExceeded",
            "Could not add to playlist: HTTP 404: videoNotFound",
        ]

    @pytest.mark.asyncio
    async def test_nothing_selected_checked_first(
        self, mock_playlist_provider, mock_video_search
    ) -> None:
        mock_video_search.is_available.return_value = False
        entries = [PlaylistEntry(artist_name="A", song_title="1", selected=False)]
        publisher = _publisher(mock_playlist_provider, mock_video_search)

        with pytest.raises(UserInputError) as exc_info:
            await publisher.publish(None, entries)

        assert exc_info.value.message == NO_SELECTION_MESSAGE
        mock_playlist_provider.create_playlist.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sign_in_checked_before_video_key(
        self, mock_playlist_provider, mock_video_search
    ) -> None:
        mock_video_search.is_available.return_value = False
        entries = [PlaylistEntry(artist_name="A", song_title="1")]
        publisher = _publisher(mock_playlist_provider, mock_video_search)

        with pytest.raises(AuthenticationError) as exc_info:
            await publisher.publish(Credential(bearer_token=""), entries)

        assert exc_info.value.message == SIGN_IN_MESSAGE
        mock_playlist_provider.create_playlist.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_video_key_required(
        self, mock_playlist_provider, mock_video_search, credential
    ) -> None:
        mock_video_search.is_available.return_value = False
        entries = [PlaylistEntry(artist_name="A", song_title="1")]
        publisher = _publisher(mock_playlist_provider, mock_video_search)

        with pytest.raises(ConfigurationError) as exc_info:
            await publisher.publish(credential, entries)

        assert exc_info.value.message == NO_VIDEO_KEY_MESSAGE
        mock_playlist_provider.create_playlist.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_failure_adds_nothing(
        self, mock_playlist_provider, mock_video_search, credential
    ) -> None:
        mock_playlist_provider.create_playlist.side_effect = PlaylistCreateError("HTTP 500")
        entries = [PlaylistEntry(artist_name="A", song_title="1", video_link=video_link_for("v1"))]
        publisher = _publisher(mock_playlist_provider, mock_video_search)

        with pytest.raises(PlaylistCreateError):
            await publisher.publish(credential, entries)

        mock_playlist_provider.add_playlist_item.assert_not_awaited()
