"""Ticketmaster Discovery API event search.

Queries ``GET https://app.ticketmaster.com/discovery/v2/events.json`` for
music events around a lat/long pair and normalizes each one into a
:class:`~soniccompass.models.concert.ConcertRecord`.

Follows the same adapter pattern as the other HTTP providers: injected
``httpx.AsyncClient``, the shared retry policy, and an injectable clock so
the date-window parameters can be asserted exactly in tests.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

import httpx
import structlog

from soniccompass.interfaces.event_search_provider import IEventSearchProvider
from soniccompass.models.concert import ConcertRecord, Coordinates, DateWindow
from soniccompass.utils.errors import (
    ConfigurationError,
    EventSearchError,
    ProviderResponseError,
    TransientNetworkError,
)
from soniccompass.utils.http_caller import RequestSpec, RetryingHttpCaller
from soniccompass.utils.logging import get_logger
from soniccompass.utils.retry import RetryPolicy
from soniccompass.utils.timefmt import date_window, utc_now

_EVENTS_URL = "https://app.ticketmaster.com/discovery/v2/events.json"
_PROVIDER_NAME = "ticketmaster"
_PAGE_SIZE = 50
_SEGMENT = "Music"


class TicketmasterEventProvider(IEventSearchProvider):
    """Music event search backed by the Ticketmaster Discovery API.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient``.
    api_key:
        Discovery API consumer key; empty means "not configured".
    policy:
        Retry policy; defaults to 2 retries with 1 s / 2 s backoff.
    clock:
        Zero-argument callable returning "now" as an aware datetime.
    page_size:
        Events requested per search (Ticketmaster caps this at 200).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        policy: RetryPolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
        page_size: int = _PAGE_SIZE,
    ) -> None:
        self._api_key = api_key
        self._caller = RetryingHttpCaller(http_client, policy, provider_name=_PROVIDER_NAME)
        self._clock = clock
        self._page_size = page_size
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def build_params(
        self,
        coordinates: Coordinates,
        radius_miles: int,
        genre: str | None = None,
        date_window_days: DateWindow | None = None,
    ) -> dict[str, Any]:
        """Return the query parameters for one search.

        ``keyword`` and the date range are only present when their filter
        is set.
        """
        params: dict[str, Any] = {
            "apikey": self._api_key,
            "size": self._page_size,
            "segmentName": _SEGMENT,
            "latlong": coordinates.as_latlong(),
            "radius": radius_miles,
            "unit": "miles",
        }
        if genre:
            params["keyword"] = genre
        if date_window_days:
            start, end = date_window(self._clock(), int(date_window_days))
            params["startDateTime"] = start
            params["endDateTime"] = end
        return params

    async def search_events(
        self,
        coordinates: Coordinates,
        radius_miles: int,
        genre: str | None = None,
        date_window_days: DateWindow | None = None,
    ) -> list[ConcertRecord]:
        if not self._api_key:
            raise ConfigurationError(
                message="Ticketmaster API key is not configured",
                provider_name=_PROVIDER_NAME,
            )

        spec = RequestSpec(
            url=_EVENTS_URL,
            params=self.build_params(coordinates, radius_miles, genre, date_window_days),
        )
        try:
            data = await self._caller.call(spec, label="ticketmaster_search")
        except TransientNetworkError as exc:
            raise EventSearchError(
                message=f"Failed to fetch concerts: {exc.message}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if not isinstance(data, dict):
            raise ProviderResponseError(
                message="Event search response is not a JSON object",
                provider_name=_PROVIDER_NAME,
            )

        events = (data.get("_embedded") or {}).get("events") or []
        concerts = [ConcertRecord.from_ticketmaster(event) for event in events]
        self._logger.info(
            "event_search_complete",
            latlong=coordinates.as_latlong(),
            radius=radius_miles,
            keyword=genre,
            window_days=int(date_window_days) if date_window_days else None,
            count=len(concerts),
        )
        return concerts

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return bool(self._api_key)
