"""Public interface definitions for all external service providers.

Every external API used by SonicCompass is accessed exclusively through the
abstract base classes defined in this package, one capability each.
Concrete adapters live in ``soniccompass/providers/`` and are wired together
in ``soniccompass/main.py``.  Tests substitute deterministic fakes.

CONCRETE PROVIDER MAP:
    Interface               →  Concrete implementations
    ─────────────────────────────────────────────────────
    IGeocodingProvider      →  OpenCageGeocodingProvider
    IEventSearchProvider    →  TicketmasterEventProvider
    ISongGenerator          →  GeminiSongGenerator, OpenAISongGenerator
    IVideoSearchProvider    →  YouTubeSearchProvider
    IPlaylistProvider       →  YouTubePlaylistProvider
    IIdentityProvider       →  GoogleIdentityProvider
"""

from soniccompass.interfaces.event_search_provider import IEventSearchProvider
from soniccompass.interfaces.geocoding_provider import IGeocodingProvider
from soniccompass.interfaces.identity_provider import IIdentityProvider
from soniccompass.interfaces.playlist_provider import IPlaylistProvider
from soniccompass.interfaces.song_generator import ISongGenerator, build_song_prompt
from soniccompass.interfaces.video_search_provider import IVideoSearchProvider

__all__ = [
    "IEventSearchProvider",
    "IGeocodingProvider",
    "IIdentityProvider",
    "IPlaylistProvider",
    "ISongGenerator",
    "IVideoSearchProvider",
    "build_song_prompt",
]
