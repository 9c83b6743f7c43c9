"""Concert discovery models: search input, coordinates and normalized events.

All models use frozen config (immutable).  A new search replaces the
session's whole ``list[ConcertRecord]``; records are never merged or
edited in place.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_VENUE = "Unknown Venue"
UNKNOWN_CITY = "Unknown City"
DATE_TBD = "Date TBD"
VARIOUS_GENRE = "Various"
NO_DESCRIPTION = "No additional info available."


class DateWindow(IntEnum):
    """How far ahead to search, in days."""

    DAYS_30 = 30
    DAYS_60 = 60
    DAYS_90 = 90


class PlaceQuery(BaseModel):
    """One concert search as entered by the user.

    Empty strings for ``genre`` and ``date_window_days`` mean "no filter",
    matching what an untouched dropdown submits.
    """

    model_config = ConfigDict(frozen=True)

    city_name: str = Field(min_length=1, description="Free-text place name to geocode.")
    radius_miles: int = Field(default=50, gt=0, description="Search radius in miles.")
    genre: str | None = Field(default=None, description="Free-text keyword, sent verbatim.")
    date_window_days: DateWindow | None = Field(
        default=None, description="Restrict to the next 30, 60 or 90 days."
    )

    @field_validator("city_name", mode="before")
    @classmethod
    def _strip_city(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("genre", "date_window_days", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("date_window_days", mode="before")
    @classmethod
    def _window_from_string(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return value


class Coordinates(BaseModel):
    """A latitude/longitude pair; lives only for the duration of one search."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    def as_latlong(self) -> str:
        return f"{self.latitude},{self.longitude}"


class ConcertRecord(BaseModel):
    """A single music event normalized from the event-search provider.

    Every display field is always populated; absent provider data is
    replaced with the module-level placeholder strings.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Provider-assigned id, unique within one result set.")
    artist_name: str = Field(description="Event name as listed (usually the headliner).")
    venue_name: str = UNKNOWN_VENUE
    date: str = DATE_TBD
    genre: str = VARIOUS_GENRE
    location: str = UNKNOWN_CITY
    description: str = NO_DESCRIPTION
    ticket_url: str | None = None

    @classmethod
    def from_ticketmaster(cls, event: dict[str, Any]) -> ConcertRecord:
        """Parse one element of Ticketmaster's ``_embedded.events[]``."""
        venues = (event.get("_embedded") or {}).get("venues") or [{}]
        venue = venues[0] or {}
        city = (venue.get("city") or {}).get("name") or UNKNOWN_CITY
        state_code = (venue.get("state") or {}).get("stateCode") or ""
        location = f"{city}, {state_code}" if state_code else city

        classifications = event.get("classifications") or [{}]
        genre = ((classifications[0] or {}).get("genre") or {}).get("name") or VARIOUS_GENRE

        start = (event.get("dates") or {}).get("start") or {}

        return cls(
            id=str(event.get("id", "")),
            artist_name=event.get("name") or "",
            venue_name=venue.get("name") or UNKNOWN_VENUE,
            date=start.get("localDate") or DATE_TBD,
            genre=genre,
            location=location,
            description=event.get("info") or NO_DESCRIPTION,
            ticket_url=event.get("url"),
        )


def distinct_artists(concerts: list[ConcertRecord]) -> list[str]:
    """Return artist names in first-seen order without duplicates or blanks."""
    seen: dict[str, None] = {}
    for concert in concerts:
        if concert.artist_name and concert.artist_name not in seen:
            seen[concert.artist_name] = None
    return list(seen)
