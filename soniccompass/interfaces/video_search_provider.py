"""Abstract base class for video search providers."""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: YouTubeSearchProvider (soniccompass/providers/video/)
class IVideoSearchProvider(ABC):
    """Contract for finding the single best-matching video for a query."""

    @abstractmethod
    async def find_video(self, query: str) -> str | None:
        """Return the top video id for *query*, or ``None`` if nothing matched.

        Raises
        ------
        soniccompass.utils.errors.ConfigurationError
            If no API key is configured.
        soniccompass.utils.errors.SonicCompassError
            On transport or response failures.  Callers treat any error
            as "no video" for that one song.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"youtube"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
