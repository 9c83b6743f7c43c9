"""OpenAI-compatible song generator.

Wraps the ``openai`` async client to implement :class:`ISongGenerator`.
When a custom ``openai_base_url`` is configured (TogetherAI, Fireworks,
Groq, a local server), the client points at that URL instead.

Structured output uses a JSON-schema ``response_format``.  That API only
accepts an object at the schema root, so the song array is wrapped as
``{"songs": [...]}`` and unwrapped again before validation.
"""

from __future__ import annotations

from typing import Any

import openai
import structlog

from soniccompass.config.settings import Settings
from soniccompass.interfaces.song_generator import ISongGenerator, build_song_prompt
from soniccompass.models.playlist import SongSuggestion
from soniccompass.providers.llm.song_parsing import parse_song_json
from soniccompass.utils.errors import (
    ConfigurationError,
    LLMResponseError,
    TransientNetworkError,
)

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "gpt-4o-mini"
_ROOT_KEY = "songs"

SONG_LIST_RESPONSE_FORMAT: dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": "song_list",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                _ROOT_KEY: {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "artistName": {"type": "string"},
                            "songTitle": {"type": "string"},
                        },
                        "required": ["artistName", "songTitle"],
                        "additionalProperties": False,
                    },
                }
            },
            "required": [_ROOT_KEY],
            "additionalProperties": False,
        },
    },
}


class OpenAISongGenerator(ISongGenerator):
    """Song generator backed by an OpenAI-compatible chat completions API."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._text_model = settings.openai_text_model or _DEFAULT_MODEL
        self._provider_label = (
            "openai-compatible" if settings.openai_base_url else "openai"
        )
        self._client: openai.AsyncOpenAI | None = None
        if self._api_key:
            client_kwargs: dict = {
                "api_key": self._api_key,
                "timeout": openai.Timeout(settings.http_timeout_seconds, connect=5.0),
            }
            if settings.openai_base_url:
                client_kwargs["base_url"] = settings.openai_base_url
            self._client = openai.AsyncOpenAI(**client_kwargs)

    async def generate_songs(self, artist_names: list[str]) -> list[SongSuggestion]:
        if self._client is None:
            raise ConfigurationError(
                message="OpenAI API key is not configured",
                provider_name=self.get_provider_name(),
            )

        try:
            response = await self._client.chat.completions.create(
                model=self._text_model,
                messages=[{"role": "user", "content": build_song_prompt(artist_names)}],
                response_format=SONG_LIST_RESPONSE_FORMAT,
                temperature=0.3,
            )
        except openai.APITimeoutError as exc:
            raise TransientNetworkError(
                message=f"{self._provider_label} timed out",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIConnectionError as exc:
            raise TransientNetworkError(
                message=f"{self._provider_label} unreachable: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIStatusError as exc:
            raise TransientNetworkError(
                message=f"{self._provider_label} HTTP {exc.status_code}: {exc.message}",
                provider_name=self.get_provider_name(),
                status=exc.status_code,
            ) from exc
        except openai.APIError as exc:
            raise LLMResponseError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if content is None:
            raise LLMResponseError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )

        songs = parse_song_json(content, self.get_provider_name(), root_key=_ROOT_KEY)
        logger.info(
            "songs_generated",
            provider=self._provider_label,
            model=self._text_model,
            artists=len(artist_names),
            songs=len(songs),
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return songs

    def get_provider_name(self) -> str:
        return "openai"

    def is_available(self) -> bool:
        return self._client is not None
