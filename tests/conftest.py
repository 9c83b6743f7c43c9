"""Shared pytest fixtures for the SonicCompass test suite."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from soniccompass.interfaces.event_search_provider import IEventSearchProvider
from soniccompass.interfaces.geocoding_provider import IGeocodingProvider
from soniccompass.interfaces.identity_provider import IIdentityProvider
from soniccompass.interfaces.playlist_provider import IPlaylistProvider
from soniccompass.interfaces.song_generator import ISongGenerator
from soniccompass.interfaces.video_search_provider import IVideoSearchProvider
from soniccompass.models.concert import ConcertRecord, Coordinates
from soniccompass.models.playlist import PlaylistHandle, SongSuggestion
from soniccompass.models.session import Credential
from soniccompass.utils.retry import RetryPolicy

# ---------------------------------------------------------------------------
# Fake clock / transport helpers
# ---------------------------------------------------------------------------


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class RecordingHandler:
    """``httpx.MockTransport`` handler replaying queued responses in order.

    Each queued item is either an ``httpx.Response``, an exception instance
    to raise, or a callable taking the request and returning a response.
    The last item repeats once the queue is exhausted.
    """

    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self._responses) - 1)
        item = self._responses[index]
        if isinstance(item, Exception):
            raise item
        if callable(item) and not isinstance(item, httpx.Response):
            return item(request)
        # Fresh copy so a repeated response is never reused across requests.
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


class FakeClock:
    """Monotonic clock stand-in that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def http_handler() -> type[RecordingHandler]:
    """The :class:`RecordingHandler` class, for building mock transports."""
    return RecordingHandler


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fast_policy(fake_sleep: RecordingSleep) -> RetryPolicy:
    """Default 2-retry / 1 s linear policy, without real waiting."""
    return RetryPolicy(sleep=fake_sleep)


@pytest.fixture
def make_client() -> Callable[[RecordingHandler], httpx.AsyncClient]:
    """Factory for an ``httpx.AsyncClient`` backed by a mock transport."""

    def _make(handler: RecordingHandler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 1, 12, 30, 45, 987654, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Sample payloads and models
# ---------------------------------------------------------------------------


@pytest.fixture
def ticketmaster_event() -> dict[str, Any]:
    """A fully-populated Ticketmaster ``_embedded.events[]`` element."""
    return {
        "id": "G5vYZ9a1",
        "name": "The Avett Brothers",
        "url": "https://www.ticketmaster.com/event/G5vYZ9a1",
        "info": "All ages. Doors at 7pm.",
        "dates": {"start": {"localDate": "2025-03-14", "localTime": "19:30:00"}},
        "classifications": [{"genre": {"name": "Folk"}}],
        "_embedded": {
            "venues": [
                {
                    "name": "Bon Secours Wellness Arena",
                    "city": {"name": "Greenville"},
                    "state": {"stateCode": "SC"},
                }
            ]
        },
    }


@pytest.fixture
def sample_concerts() -> list[ConcertRecord]:
    return [
        ConcertRecord(id="e1", artist_name="Band A", venue_name="Hall", location="Spartanburg, SC"),
        ConcertRecord(id="e2", artist_name="Band B", venue_name="Club", location="Greenville, SC"),
        ConcertRecord(id="e3", artist_name="Band A", venue_name="Park", location="Asheville, NC"),
    ]


@pytest.fixture
def sample_suggestions() -> list[SongSuggestion]:
    return [
        SongSuggestion(artist_name="Band A", song_title="Song One"),
        SongSuggestion(artist_name="Band B", song_title="Song Two"),
    ]


@pytest.fixture
def credential() -> Credential:
    return Credential(display_name="Sam Rivera", email="sam@example.com", bearer_token="ya29.token")


# ---------------------------------------------------------------------------
# Mock providers
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_geocoder() -> MagicMock:
    geocoder = MagicMock(spec=IGeocodingProvider)
    geocoder.geocode = AsyncMock(return_value=Coordinates(latitude=34.9496, longitude=-81.932))
    geocoder.get_provider_name.return_value = "mock-geocoder"
    geocoder.is_available.return_value = True
    return geocoder


@pytest.fixture
def mock_event_search(sample_concerts: list[ConcertRecord]) -> MagicMock:
    events = MagicMock(spec=IEventSearchProvider)
    events.search_events = AsyncMock(return_value=sample_concerts)
    events.get_provider_name.return_value = "mock-events"
    events.is_available.return_value = True
    return events


@pytest.fixture
def mock_song_generator(sample_suggestions: list[SongSuggestion]) -> MagicMock:
    generator = MagicMock(spec=ISongGenerator)
    generator.generate_songs = AsyncMock(return_value=sample_suggestions)
    generator.get_provider_name.return_value = "mock-llm"
    generator.is_available.return_value = True
    return generator


@pytest.fixture
def mock_video_search() -> MagicMock:
    video = MagicMock(spec=IVideoSearchProvider)
    video.find_video = AsyncMock(side_effect=lambda query: "vid-" + query.split(" - ")[0].replace(" ", ""))
    video.get_provider_name.return_value = "mock-video"
    video.is_available.return_value = True
    return video


@pytest.fixture
def mock_playlist_provider() -> MagicMock:
    playlists = MagicMock(spec=IPlaylistProvider)
    playlists.create_playlist = AsyncMock(
        return_value=PlaylistHandle(playlist_id="PL123", title="SonicCompass Hype - now")
    )
    playlists.add_playlist_item = AsyncMock(return_value=None)
    playlists.get_provider_name.return_value = "mock-playlists"
    return playlists


@pytest.fixture
def mock_identity(credential: Credential) -> MagicMock:
    identity = MagicMock(spec=IIdentityProvider)
    identity.resolve = AsyncMock(return_value=credential)
    identity.get_provider_name.return_value = "mock-identity"
    return identity
