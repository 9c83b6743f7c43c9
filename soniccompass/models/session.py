"""Session state: the explicit application-state struct for one user.

Architecture note:
    SessionState is the single source of truth for a browser session.
    The SessionStore (soniccompass/pipeline/session_store.py) holds one
    SessionState per session id and replaces it wholesale on every change
    via model_copy(update={...}).  Nothing here is ever written to disk.

    Two monotonic counters close the stale-response race: a search or
    playlist generation captures the counter when it starts, and its
    result is applied only if the counter has not moved on since.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from soniccompass.models.concert import ConcertRecord
from soniccompass.models.playlist import PlaylistEntry


class Credential(BaseModel):
    """A signed-in identity plus the OAuth bearer token for playlist writes.

    Identity and token are one value so they can only be cleared together.
    """

    model_config = ConfigDict(frozen=True)

    display_name: str = ""
    email: str = ""
    bearer_token: str = Field(repr=False)


class NoticeLevel(str, Enum):  # noqa: UP042
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notice(BaseModel):
    """A message in the session's notification channel (shown until dismissed)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex[:12])
    message: str
    level: NoticeLevel = NoticeLevel.INFO
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )


class SessionState(BaseModel):
    """Everything one user session holds in memory.

    Immutable: use model_copy(update={...}) to produce new states.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    # Bootstrap identity for sessions that have not signed in.
    anonymous_id: str = Field(default_factory=lambda: uuid4().hex)
    credential: Credential | None = None
    concerts: list[ConcertRecord] = Field(default_factory=list)
    playlist: list[PlaylistEntry] = Field(default_factory=list)
    search_generation: int = 0
    playlist_generation: int = 0
    notices: list[Notice] = Field(default_factory=list)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )

    @property
    def is_signed_in(self) -> bool:
        return self.credential is not None and bool(self.credential.bearer_token)

    @property
    def selected_entries(self) -> list[PlaylistEntry]:
        return [entry for entry in self.playlist if entry.selected]
