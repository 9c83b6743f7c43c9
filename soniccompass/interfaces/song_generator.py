"""Abstract base class for generative song-suggestion providers.

Defines the contract for asking a large language model for one popular
song per artist.  Implementations must request structured JSON output
(a declared response schema) rather than parsing free text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from soniccompass.models.playlist import SongSuggestion

SONG_PROMPT_TEMPLATE = (
    "Generate a JSON array of objects. Each object should represent an artist "
    "and their single most popular song. The array should contain objects for "
    "the following artists: [{artists}]. Each object must have two properties: "
    '"artistName" (string) and "songTitle" (string). For example: '
    '[{{"artistName": "Artist1", "songTitle": "Song A"}}, '
    '{{"artistName": "Artist2", "songTitle": "Song B"}}]. '
    "Please ensure to generate a song for each artist provided."
)


def build_song_prompt(artist_names: list[str]) -> str:
    """Render the song-list prompt for *artist_names*."""
    quoted = ", ".join(f'"{name}"' for name in artist_names)
    return SONG_PROMPT_TEMPLATE.format(artists=quoted)


# Concrete implementations: GeminiSongGenerator, OpenAISongGenerator
# Located in: soniccompass/providers/llm/
class ISongGenerator(ABC):
    """Contract for artist → song-title suggestion services."""

    @abstractmethod
    async def generate_songs(self, artist_names: list[str]) -> list[SongSuggestion]:
        """Return one suggestion per artist, in the model's order.

        Raises
        ------
        soniccompass.utils.errors.ConfigurationError
            If no API key is configured.
        soniccompass.utils.errors.LLMResponseError
            If the response cannot be parsed into suggestions.  No partial
            list is ever returned.
        soniccompass.utils.errors.TransientNetworkError
            If the model could not be reached or answered with an HTTP error.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"gemini"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
