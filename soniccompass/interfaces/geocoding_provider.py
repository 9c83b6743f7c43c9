"""Abstract base class for geocoding service providers.

Defines the contract for turning a free-text place name into coordinates.
Implementations may wrap OpenCage, Nominatim, Google Geocoding or any other
service.  The concert search service depends only on this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from soniccompass.models.concert import Coordinates


# Concrete implementation: OpenCageGeocodingProvider (soniccompass/providers/geocoding/)
class IGeocodingProvider(ABC):
    """Contract for place-name → coordinates lookups."""

    @abstractmethod
    async def geocode(self, city_name: str) -> Coordinates:
        """Resolve *city_name* to the provider's first (best) match.

        Raises
        ------
        soniccompass.utils.errors.ConfigurationError
            If no API key is configured.
        soniccompass.utils.errors.NotFoundError
            If the provider returns zero results.
        soniccompass.utils.errors.GeocodingError
            If the request still fails after all retries.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"opencage"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the credentials it needs."""
