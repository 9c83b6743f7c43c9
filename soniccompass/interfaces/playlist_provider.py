"""Abstract base class for remote playlist providers.

Both operations act on behalf of a signed-in user and take that user's
OAuth bearer token explicitly; providers never hold a token themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from soniccompass.models.playlist import PlaylistHandle


# Concrete implementation: YouTubePlaylistProvider (soniccompass/providers/playlist/)
class IPlaylistProvider(ABC):
    """Contract for creating a playlist and appending videos to it."""

    @abstractmethod
    async def create_playlist(
        self,
        bearer_token: str,
        title: str,
        description: str,
    ) -> PlaylistHandle:
        """Create a new private playlist.

        Raises
        ------
        soniccompass.utils.errors.AuthenticationError
            If the provider rejects the token.
        soniccompass.utils.errors.PlaylistCreateError
            For any other failure.
        """

    @abstractmethod
    async def add_playlist_item(
        self,
        bearer_token: str,
        playlist_id: str,
        video_id: str,
    ) -> None:
        """Append *video_id* to the end of *playlist_id*.

        Raises
        ------
        soniccompass.utils.errors.SonicCompassError
            If the item could not be added.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"youtube"``."""
