"""SonicCompass domain models: re-exports all public model classes.

The models are organized by domain concern:
    - concert.py   search input, coordinates, normalized concert records
    - playlist.py  song suggestions, playlist entries, publish results
    - session.py   credential, notices, per-session application state
    - pipeline.py  progress phases and flow outcomes
"""

from __future__ import annotations

from soniccompass.models.concert import (
    ConcertRecord,
    Coordinates,
    DateWindow,
    PlaceQuery,
    distinct_artists,
)
from soniccompass.models.pipeline import (
    GenerationOutcome,
    PipelinePhase,
    SearchOutcome,
    SelectionSummary,
)
from soniccompass.models.playlist import (
    PlaylistEntry,
    PlaylistHandle,
    PlaylistItemFailure,
    PublishResult,
    SongSuggestion,
    video_id_from_link,
    video_link_for,
)
from soniccompass.models.session import Credential, Notice, NoticeLevel, SessionState

__all__ = [
    "ConcertRecord",
    "Coordinates",
    "Credential",
    "DateWindow",
    "GenerationOutcome",
    "Notice",
    "NoticeLevel",
    "PipelinePhase",
    "PlaceQuery",
    "PlaylistEntry",
    "PlaylistHandle",
    "PlaylistItemFailure",
    "PublishResult",
    "SearchOutcome",
    "SelectionSummary",
    "SessionState",
    "SongSuggestion",
    "distinct_artists",
    "video_id_from_link",
    "video_link_for",
]
