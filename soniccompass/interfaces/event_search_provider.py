"""Abstract base class for concert/event search providers.

Defines the contract for finding music events around a point.  The one
implementation wraps the Ticketmaster Discovery API; others (Songkick,
Bandsintown) would normalize into the same :class:`ConcertRecord`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from soniccompass.models.concert import ConcertRecord, Coordinates, DateWindow


# Concrete implementation: TicketmasterEventProvider (soniccompass/providers/event/)
class IEventSearchProvider(ABC):
    """Contract for music event searches restricted to one area."""

    @abstractmethod
    async def search_events(
        self,
        coordinates: Coordinates,
        radius_miles: int,
        genre: str | None = None,
        date_window_days: DateWindow | None = None,
    ) -> list[ConcertRecord]:
        """Return normalized concerts within *radius_miles* of *coordinates*.

        Parameters
        ----------
        coordinates:
            Centre of the search.
        radius_miles:
            Search radius in miles.
        genre:
            Optional free-text keyword, passed through verbatim.
        date_window_days:
            Optional window starting now; omitted means no date filter.

        Returns
        -------
        list[ConcertRecord]
            Possibly empty.  An empty list is a successful "no concerts
            found" outcome, not an error.

        Raises
        ------
        soniccompass.utils.errors.ConfigurationError
            If no API key is configured.
        soniccompass.utils.errors.EventSearchError
            If the request still fails after all retries.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"ticketmaster"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the credentials it needs."""
