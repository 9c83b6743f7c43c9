"""OpenCage forward-geocoding adapter.

Resolves a free-text place name to the first result's coordinates through
``GET https://api.opencagedata.com/geocode/v1/json``.  Transport failures
and non-2xx statuses are retried by the shared :class:`RetryPolicy`; an
empty result set is a definite answer and is reported at once as
:class:`NotFoundError`.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from soniccompass.interfaces.geocoding_provider import IGeocodingProvider
from soniccompass.models.concert import Coordinates
from soniccompass.utils.errors import (
    ConfigurationError,
    GeocodingError,
    NotFoundError,
    ProviderResponseError,
    TransientNetworkError,
)
from soniccompass.utils.http_caller import RequestSpec, RetryingHttpCaller
from soniccompass.utils.logging import get_logger
from soniccompass.utils.retry import RetryPolicy

_OPENCAGE_URL = "https://api.opencagedata.com/geocode/v1/json"
_PROVIDER_NAME = "opencage"


class OpenCageGeocodingProvider(IGeocodingProvider):
    """Geocoder backed by the OpenCage Data API.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    api_key:
        OpenCage key; empty means "not configured".
    policy:
        Retry policy; defaults to 2 retries with 1 s / 2 s backoff.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        policy: RetryPolicy | None = None,
    ) -> None:
        self._api_key = api_key
        self._caller = RetryingHttpCaller(http_client, policy, provider_name=_PROVIDER_NAME)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def geocode(self, city_name: str) -> Coordinates:
        if not self._api_key:
            raise ConfigurationError(
                message="OpenCage API key is not configured",
                provider_name=_PROVIDER_NAME,
            )

        spec = RequestSpec(
            url=_OPENCAGE_URL,
            params={"q": city_name, "key": self._api_key, "limit": 1},
        )
        try:
            data = await self._caller.call(spec, label="opencage_geocode")
        except TransientNetworkError as exc:
            raise GeocodingError(
                message=f"Failed to get location coordinates: {exc.message}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        coordinates = self._first_result(data, city_name)
        self._logger.info(
            "geocode_complete",
            city=city_name,
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
        )
        return coordinates

    @staticmethod
    def _first_result(data: Any, city_name: str) -> Coordinates:
        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            raise NotFoundError(
                message=f'Could not find coordinates for "{city_name}".',
                provider_name=_PROVIDER_NAME,
            )
        geometry = (results[0] or {}).get("geometry") or {}
        try:
            return Coordinates(latitude=geometry["lat"], longitude=geometry["lng"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderResponseError(
                message="Geocoding result has no usable geometry",
                provider_name=_PROVIDER_NAME,
            ) from exc

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    def is_available(self) -> bool:
        return bool(self._api_key)
