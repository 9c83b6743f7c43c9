"""YouTube playlist writes on behalf of a signed-in user.

Both calls authenticate with the user's OAuth bearer token.  Neither is
retried: a repeated ``POST /playlists`` would create a second playlist, and
item failures are reported per song by the publisher instead.

An HTTP 401 means the token has expired or was revoked; it is raised as
:class:`AuthenticationError` so the session can drop the credential.
"""

from __future__ import annotations

import httpx
import structlog

from soniccompass.interfaces.playlist_provider import IPlaylistProvider
from soniccompass.models.playlist import PlaylistHandle
from soniccompass.utils.errors import (
    AuthenticationError,
    PlaylistCreateError,
    ProviderResponseError,
    TransientNetworkError,
)
from soniccompass.utils.http_caller import RequestSpec, RetryingHttpCaller
from soniccompass.utils.logging import get_logger
from soniccompass.utils.retry import RetryPolicy

_API_BASE = "https://www.googleapis.com/youtube/v3"
_PROVIDER_NAME = "youtube"
_PRIVACY_STATUS = "private"


def _auth_headers(bearer_token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {bearer_token}",
        "Content-Type": "application/json",
    }


class YouTubePlaylistProvider(IPlaylistProvider):
    """Creates private playlists and appends videos through the YouTube Data API."""

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._caller = RetryingHttpCaller(
            http_client,
            RetryPolicy(max_retries=0),
            provider_name=_PROVIDER_NAME,
        )
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def create_playlist(
        self,
        bearer_token: str,
        title: str,
        description: str,
    ) -> PlaylistHandle:
        spec = RequestSpec(
            url=f"{_API_BASE}/playlists",
            method="POST",
            params={"part": "snippet,status"},
            headers=_auth_headers(bearer_token),
            json_body={
                "snippet": {"title": title, "description": description},
                "status": {"privacyStatus": _PRIVACY_STATUS},
            },
        )
        try:
            data = await self._caller.call(spec, label="youtube_create_playlist")
        except TransientNetworkError as exc:
            if exc.status == 401:
                raise AuthenticationError(
                    message="YouTube rejected the access token; please sign in again",
                    provider_name=_PROVIDER_NAME,
                ) from exc
            raise PlaylistCreateError(
                message=f"Failed to create playlist: {exc.message}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except ProviderResponseError as exc:
            raise PlaylistCreateError(
                message=f"Failed to create playlist: {exc.message}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        playlist_id = data.get("id") if isinstance(data, dict) else None
        if not playlist_id:
            raise PlaylistCreateError(
                message="Playlist response did not include an id",
                provider_name=_PROVIDER_NAME,
            )
        created_title = ((data.get("snippet") or {}).get("title")) or title
        self._logger.info("playlist_created", playlist_id=playlist_id, title=created_title)
        return PlaylistHandle(playlist_id=str(playlist_id), title=created_title)

    async def add_playlist_item(
        self,
        bearer_token: str,
        playlist_id: str,
        video_id: str,
    ) -> None:
        spec = RequestSpec(
            url=f"{_API_BASE}/playlistItems",
            method="POST",
            params={"part": "snippet"},
            headers=_auth_headers(bearer_token),
            json_body={
                "snippet": {
                    "playlistId": playlist_id,
                    "resourceId": {"kind": "youtube#video", "videoId": video_id},
                }
            },
        )
        await self._caller.call(spec, label="youtube_add_item")

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME
