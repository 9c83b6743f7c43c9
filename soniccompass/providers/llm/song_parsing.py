"""Validation shared by the song generators.

Both generators end up with a JSON string from the model.  This module turns
that string into ``SongSuggestion`` objects or raises ``LLMResponseError``;
it never returns a partial list.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from soniccompass.models.playlist import SongSuggestion
from soniccompass.utils.errors import LLMResponseError


def parse_song_json(text: str, provider_name: str, root_key: str | None = None) -> list[SongSuggestion]:
    """Parse *text* as a song array (or an object holding one under *root_key*)."""
    try:
        payload: Any = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise LLMResponseError(
            message="Song list is not valid JSON",
            provider_name=provider_name,
        ) from exc

    if root_key is not None:
        if not isinstance(payload, dict):
            raise LLMResponseError(
                message=f"Expected a JSON object with a '{root_key}' array",
                provider_name=provider_name,
            )
        payload = payload.get(root_key)

    if not isinstance(payload, list):
        raise LLMResponseError(
            message="Song list is not a JSON array",
            provider_name=provider_name,
        )

    try:
        return [SongSuggestion.model_validate(item) for item in payload]
    except ValidationError as exc:
        raise LLMResponseError(
            message=f"Song list entry is missing artistName or songTitle: {exc.error_count()} error(s)",
            provider_name=provider_name,
        ) from exc
