from soniccompass.providers.geocoding.opencage_provider import OpenCageGeocodingProvider

__all__ = ["OpenCageGeocodingProvider"]
