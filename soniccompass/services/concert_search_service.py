"""Concert search: geocode a place, then search events around it.

The two calls are strictly sequential because the event search needs the
coordinates.  Each adapter applies its own retry policy; this service only
chains them and reports progress.
"""

from __future__ import annotations

import structlog

from soniccompass.interfaces.event_search_provider import IEventSearchProvider
from soniccompass.interfaces.geocoding_provider import IGeocodingProvider
from soniccompass.models.concert import ConcertRecord, PlaceQuery
from soniccompass.models.pipeline import PipelinePhase
from soniccompass.services.progress import ProgressCallback, report
from soniccompass.utils.logging import get_logger


class ConcertSearchService:
    """Runs one place query end to end."""

    def __init__(
        self,
        geocoder: IGeocodingProvider,
        event_search: IEventSearchProvider,
    ) -> None:
        self._geocoder = geocoder
        self._event_search = event_search
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def search(
        self,
        query: PlaceQuery,
        on_progress: ProgressCallback | None = None,
    ) -> list[ConcertRecord]:
        """Return the concerts matching *query*; an empty list means none found.

        Raises
        ------
        ConfigurationError
            When either provider has no API key.
        GeocodingError, NotFoundError, EventSearchError
            Propagated from the adapters.
        """
        await report(on_progress, PipelinePhase.GEOCODING, 10.0, f"Locating {query.city_name}")
        coordinates = await self._geocoder.geocode(query.city_name)

        await report(on_progress, PipelinePhase.SEARCHING_EVENTS, 50.0, "Searching for concerts")
        concerts = await self._event_search.search_events(
            coordinates,
            query.radius_miles,
            genre=query.genre,
            date_window_days=query.date_window_days,
        )

        self._logger.info(
            "concert_search_complete",
            city=query.city_name,
            radius=query.radius_miles,
            genre=query.genre,
            count=len(concerts),
        )
        return concerts
