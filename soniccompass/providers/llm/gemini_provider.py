"""Google Gemini song generator.

Posts a single prompt to the Generative Language REST API
(``models/<model>:generateContent``) with a declared response schema so the
model answers with a bare JSON array of ``{artistName, songTitle}``.  The
text of the first candidate's first part is then parsed and validated.

The call is made once; a generation failure is reported to the user rather
than silently repeated.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from soniccompass.config.settings import Settings
from soniccompass.interfaces.song_generator import ISongGenerator, build_song_prompt
from soniccompass.models.playlist import SongSuggestion
from soniccompass.providers.llm.song_parsing import parse_song_json
from soniccompass.utils.errors import (
    ConfigurationError,
    LLMResponseError,
    ProviderResponseError,
)
from soniccompass.utils.http_caller import RequestSpec, RetryingHttpCaller
from soniccompass.utils.logging import get_logger
from soniccompass.utils.retry import RetryPolicy

_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
_PROVIDER_NAME = "gemini"

SONG_LIST_SCHEMA: dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "artistName": {"type": "STRING"},
            "songTitle": {"type": "STRING"},
        },
        "required": ["artistName", "songTitle"],
    },
}


class GeminiSongGenerator(ISongGenerator):
    """Song generator backed by the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._api_key = settings.gemini_api_key
        self._model = settings.gemini_model
        self._caller = RetryingHttpCaller(
            http_client,
            policy or RetryPolicy(max_retries=0),
            provider_name=_PROVIDER_NAME,
        )
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @staticmethod
    def build_payload(artist_names: list[str]) -> dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": build_song_prompt(artist_names)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": SONG_LIST_SCHEMA,
            },
        }

    async def generate_songs(self, artist_names: list[str]) -> list[SongSuggestion]:
        if not self._api_key:
            raise ConfigurationError(
                message="Gemini API key is not configured",
                provider_name=_PROVIDER_NAME,
            )

        spec = RequestSpec(
            url=f"{_API_BASE}/{self._model}:generateContent",
            method="POST",
            params={"key": self._api_key},
            headers={"Content-Type": "application/json"},
            json_body=self.build_payload(artist_names),
        )
        try:
            result = await self._caller.call(spec, label="gemini_generate")
        except ProviderResponseError as exc:
            raise LLMResponseError(
                message=f"Failed to generate playlist: {exc.message}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        songs = parse_song_json(self._candidate_text(result), _PROVIDER_NAME)
        self._logger.info(
            "songs_generated",
            provider=_PROVIDER_NAME,
            model=self._model,
            artists=len(artist_names),
            songs=len(songs),
        )
        return songs

    @staticmethod
    def _candidate_text(result: Any) -> str:
        """Return ``candidates[0].content.parts[0].text`` or raise."""
        try:
            text = result["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMResponseError(
                message="LLM response was not as expected. Could not generate playlist.",
                provider_name=_PROVIDER_NAME,
            ) from exc
        if not isinstance(text, str):
            raise LLMResponseError(
                message="LLM response part has no text",
                provider_name=_PROVIDER_NAME,
            )
        return text

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return bool(self._api_key)
