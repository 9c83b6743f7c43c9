"""Progress phases and flow outcomes reported by the orchestrator."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from soniccompass.models.concert import ConcertRecord
from soniccompass.models.playlist import PlaylistEntry


class PipelinePhase(str, Enum):  # noqa: UP042
    """Phases of the concert → playlist flows.

    A search moves GEOCODING → SEARCHING_EVENTS; a generation moves
    GENERATING_SONGS → RESOLVING_VIDEOS; a publish moves
    CREATING_PLAYLIST → ADDING_ITEMS.  Every flow ends in COMPLETE or
    FAILED.  The WebSocket progress channel pushes these to the client.
    """

    IDLE = "IDLE"
    GEOCODING = "GEOCODING"
    SEARCHING_EVENTS = "SEARCHING_EVENTS"
    GENERATING_SONGS = "GENERATING_SONGS"
    RESOLVING_VIDEOS = "RESOLVING_VIDEOS"
    CREATING_PLAYLIST = "CREATING_PLAYLIST"
    ADDING_ITEMS = "ADDING_ITEMS"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


class SearchOutcome(BaseModel):
    """Result of one concert search as seen by the session.

    ``applied`` is ``False`` when a newer search started before this one
    finished; the concerts were then discarded rather than stored.
    """

    model_config = ConfigDict(frozen=True)

    concerts: list[ConcertRecord] = Field(default_factory=list)
    applied: bool = True
    generation: int = 0


class GenerationOutcome(BaseModel):
    """Result of one playlist generation; ``applied`` as for searches."""

    model_config = ConfigDict(frozen=True)

    playlist: list[PlaylistEntry] = Field(default_factory=list)
    applied: bool = True
    generation: int = 0


class SelectionSummary(BaseModel):
    """The "save selected songs" summary: what would be published right now."""

    model_config = ConfigDict(frozen=True)

    count: int
    songs: list[PlaylistEntry] = Field(default_factory=list)
    message: str
