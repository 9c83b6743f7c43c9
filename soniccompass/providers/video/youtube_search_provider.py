"""YouTube Data API video search.

``GET https://www.googleapis.com/youtube/v3/search`` with ``part=id``,
``type=video`` and ``maxResults=1`` returns at most one hit; its
``id.videoId`` is the answer.  Public searches use the server-side API key,
never a user's OAuth token.
"""

from __future__ import annotations

import httpx
import structlog

from soniccompass.interfaces.video_search_provider import IVideoSearchProvider
from soniccompass.utils.errors import ConfigurationError
from soniccompass.utils.http_caller import RequestSpec, RetryingHttpCaller
from soniccompass.utils.logging import get_logger
from soniccompass.utils.retry import RetryPolicy

_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
_PROVIDER_NAME = "youtube"


class YouTubeSearchProvider(IVideoSearchProvider):
    """Finds the top video for a free-text query."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._api_key = api_key
        self._caller = RetryingHttpCaller(
            http_client,
            policy or RetryPolicy(max_retries=0),
            provider_name=_PROVIDER_NAME,
        )
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def find_video(self, query: str) -> str | None:
        if not self._api_key:
            raise ConfigurationError(
                message="YouTube API key is not configured",
                provider_name=_PROVIDER_NAME,
            )

        spec = RequestSpec(
            url=_SEARCH_URL,
            params={
                "part": "id",
                "q": query,
                "type": "video",
                "maxResults": 1,
                "key": self._api_key,
            },
        )
        data = await self._caller.call(spec, label="youtube_search")

        items = data.get("items") if isinstance(data, dict) else None
        video_id = (((items or [{}])[0] or {}).get("id") or {}).get("videoId")
        if not video_id:
            self._logger.warning("video_not_found", query=query)
            return None
        return str(video_id)

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return bool(self._api_key)
