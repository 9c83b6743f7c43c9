"""In-memory store of :class:`SessionState` values, one per session.

Every change replaces the stored state with a new frozen instance.  All
mutation happens on the event loop, so no locking is needed.

Sessions are held in a ``cachetools.TTLCache``.  Every write restarts a
session's time-to-live, so only idle sessions expire, and the oldest
session is dropped once ``max_sessions`` is reached.  The id of every
expired or dropped session is passed to ``on_evict``.

# ─── STALE RESULTS ────────────────────────────────────────────────────
#
# A search (or playlist generation) takes a generation token when it
# starts:
#
#     token = store.begin_search(sid)        # search_generation += 1
#     concerts = await service.search(...)   # other requests may run here
#     store.complete_search(sid, token, concerts)
#
# complete_search() stores the concerts only if search_generation still
# equals token.  A slower, older search that finishes after a newer one
# has started is dropped instead of overwriting the newer result.
#
# Starting a search also bumps playlist_generation, because the playlist
# it clears was derived from the concerts being replaced.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time
from collections.abc import Callable
from uuid import uuid4

import structlog
from cachetools import TTLCache

from soniccompass.models.concert import ConcertRecord
from soniccompass.models.playlist import PlaylistEntry
from soniccompass.models.session import Credential, Notice, NoticeLevel, SessionState
from soniccompass.utils.errors import NotFoundError, SessionNotFoundError
from soniccompass.utils.logging import get_logger

DEFAULT_MAX_SESSIONS = 1000
DEFAULT_SESSION_TTL_SECONDS = 6 * 3600


class _SessionCache(TTLCache):
    """``TTLCache`` that reports every key it expires or evicts."""

    def __init__(
        self,
        maxsize: int,
        ttl: float,
        timer: Callable[[], float],
        on_evict: Callable[[str], None],
    ) -> None:
        super().__init__(maxsize=maxsize, ttl=ttl, timer=timer)
        self._on_evict = on_evict

    def expire(self, now=None):  # noqa: ANN001, ANN201
        expired = super().expire(now)
        for key, _ in expired:
            self._on_evict(key)
        return expired

    def popitem(self):  # noqa: ANN201
        key, value = super().popitem()
        self._on_evict(key)
        return key, value


class SessionStore:
    """Holds the live application state for every session in this process.

    Parameters
    ----------
    max_sessions:
        Upper bound on live sessions; the oldest is dropped beyond it.
    ttl_seconds:
        Idle time after which a session expires.
    on_evict:
        Called with the id of each expired or dropped session.
    timer:
        Clock used for expiry; tests pass a fake one.
    """

    def __init__(
        self,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS,
        on_evict: Callable[[str], None] | None = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._on_evict = on_evict
        self._sessions: TTLCache[str, SessionState] = _SessionCache(
            maxsize=max_sessions,
            ttl=ttl_seconds,
            timer=timer,
            on_evict=self._evicted,
        )
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # -- lifecycle ----------------------------------------------------------

    def create(self) -> SessionState:
        """Start an anonymous session."""
        self._sessions.expire()
        state = SessionState(session_id=uuid4().hex)
        self._sessions[state.session_id] = state
        self._logger.info("session_created", session_id=state.session_id)
        return state

    def get(self, session_id: str) -> SessionState:
        state = self._sessions.get(session_id)
        if state is None:
            raise SessionNotFoundError(session_id)
        return state

    def replace(self, state: SessionState) -> SessionState:
        if state.session_id not in self._sessions:
            raise SessionNotFoundError(state.session_id)
        self._sessions[state.session_id] = state
        return state

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def expire(self) -> list[str]:
        """Drop idle sessions now and return their ids."""
        return [key for key, _ in self._sessions.expire()]

    def __len__(self) -> int:
        self._sessions.expire()
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def _evicted(self, session_id: str) -> None:
        self._logger.info("session_expired", session_id=session_id)
        if self._on_evict is not None:
            self._on_evict(session_id)

    # -- concert search -----------------------------------------------------

    def begin_search(self, session_id: str) -> int:
        """Clear concerts and playlist, and return the new search token."""
        state = self.get(session_id)
        token = state.search_generation + 1
        self.replace(
            state.model_copy(
                update={
                    "concerts": [],
                    "playlist": [],
                    "search_generation": token,
                    "playlist_generation": state.playlist_generation + 1,
                }
            )
        )
        return token

    def complete_search(
        self,
        session_id: str,
        token: int,
        concerts: list[ConcertRecord],
    ) -> bool:
        """Store *concerts* if *token* is still current; return whether it was."""
        state = self.get(session_id)
        if state.search_generation != token:
            self._logger.info(
                "stale_search_discarded",
                session_id=session_id,
                token=token,
                current=state.search_generation,
            )
            return False
        self.replace(state.model_copy(update={"concerts": list(concerts)}))
        return True

    def is_current_search(self, session_id: str, token: int) -> bool:
        return self.get(session_id).search_generation == token

    # -- playlist -----------------------------------------------------------

    def begin_generation(self, session_id: str) -> int:
        """Clear the playlist and return the new generation token."""
        state = self.get(session_id)
        token = state.playlist_generation + 1
        self.replace(state.model_copy(update={"playlist": [], "playlist_generation": token}))
        return token

    def complete_generation(
        self,
        session_id: str,
        token: int,
        playlist: list[PlaylistEntry],
    ) -> bool:
        state = self.get(session_id)
        if state.playlist_generation != token:
            self._logger.info(
                "stale_playlist_discarded",
                session_id=session_id,
                token=token,
                current=state.playlist_generation,
            )
            return False
        self.replace(state.model_copy(update={"playlist": list(playlist)}))
        return True

    def is_current_generation(self, session_id: str, token: int) -> bool:
        return self.get(session_id).playlist_generation == token

    def toggle_selection(self, session_id: str, index: int) -> PlaylistEntry:
        """Flip ``selected`` on entry *index* and return the updated entry."""
        state = self.get(session_id)
        if not 0 <= index < len(state.playlist):
            raise NotFoundError(message=f"No playlist entry at position {index}")
        entry = state.playlist[index].toggled()
        playlist = list(state.playlist)
        playlist[index] = entry
        self.replace(state.model_copy(update={"playlist": playlist}))
        return entry

    # -- identity -----------------------------------------------------------

    def set_credential(self, session_id: str, credential: Credential) -> SessionState:
        state = self.get(session_id)
        return self.replace(state.model_copy(update={"credential": credential}))

    def clear_credential(self, session_id: str) -> SessionState:
        """Forget identity and token together."""
        state = self.get(session_id)
        return self.replace(state.model_copy(update={"credential": None}))

    # -- notices ------------------------------------------------------------

    def add_notice(
        self,
        session_id: str,
        message: str,
        level: NoticeLevel = NoticeLevel.INFO,
    ) -> Notice:
        state = self.get(session_id)
        notice = Notice(message=message, level=level)
        self.replace(state.model_copy(update={"notices": [*state.notices, notice]}))
        return notice

    def dismiss_notice(self, session_id: str, notice_id: str) -> None:
        state = self.get(session_id)
        remaining = [n for n in state.notices if n.id != notice_id]
        if len(remaining) == len(state.notices):
            raise NotFoundError(message=f"Notice not found: {notice_id}")
        self.replace(state.model_copy(update={"notices": remaining}))
