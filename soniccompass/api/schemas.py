"""Pydantic request/response schemas for the SonicCompass API.

Domain models (``ConcertRecord``, ``PlaylistEntry``, ``Notice``...) are
returned as-is where their shape is already the public contract; these
schemas cover request bodies and the responses that wrap or reshape them.

Convention: Request schemas end with "Request", response schemas end with
"Response".
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from soniccompass.models.concert import ConcertRecord
from soniccompass.models.playlist import PlaylistEntry, PlaylistItemFailure
from soniccompass.models.session import Notice, SessionState


class ConcertSearchRequest(BaseModel):
    """Search form as submitted by the client.

    Blank ``genre`` / ``date_window_days`` mean "no filter".
    """

    city_name: str = Field(..., min_length=1, max_length=200)
    radius_miles: int = Field(default=50, gt=0, le=500)
    genre: str | None = None
    date_window_days: int | str | None = None


class SignInRequest(BaseModel):
    """OAuth access token obtained by the client's Google sign-in."""

    access_token: str = Field(..., min_length=1)


class CredentialView(BaseModel):
    """Public view of a credential; the bearer token is never echoed."""

    display_name: str
    email: str


class SessionResponse(BaseModel):
    """Snapshot of one session."""

    session_id: str
    anonymous_id: str
    signed_in: bool
    user: CredentialView | None = None
    concerts: list[ConcertRecord]
    playlist: list[PlaylistEntry]
    notices: list[Notice]
    created_at: datetime

    @classmethod
    def from_state(cls, state: SessionState) -> SessionResponse:
        user = None
        if state.credential is not None:
            user = CredentialView(
                display_name=state.credential.display_name,
                email=state.credential.email,
            )
        return cls(
            session_id=state.session_id,
            anonymous_id=state.anonymous_id,
            signed_in=state.is_signed_in,
            user=user,
            concerts=state.concerts,
            playlist=state.playlist,
            notices=state.notices,
            created_at=state.created_at,
        )


class ConcertSearchResponse(BaseModel):
    """Concerts found; ``applied`` is False when a newer search superseded this one."""

    session_id: str
    applied: bool
    count: int
    concerts: list[ConcertRecord]
    notices: list[Notice] = Field(default_factory=list)


class PlaylistResponse(BaseModel):
    session_id: str
    applied: bool
    playlist: list[PlaylistEntry]


class ToggleResponse(BaseModel):
    index: int
    entry: PlaylistEntry


class SelectionResponse(BaseModel):
    count: int
    songs: list[PlaylistEntry]
    message: str


class PublishResponse(BaseModel):
    """Outcome of creating the remote playlist.

    ``warning`` summarizes ``failures`` when some songs were skipped.
    """

    playlist_id: str
    title: str
    url: str
    added: int
    failures: list[PlaylistItemFailure]
    warning: str | None = None


class GenreOption(BaseModel):
    value: str
    label: str


class GenresResponse(BaseModel):
    genres: list[GenreOption]
    date_windows: list[int]
    default_city: str
    default_radius_miles: int


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
