"""Flow progress tracking with callback-based listener notification.

Tracks the current phase and progress percentage for each session and
broadcasts updates to registered listener callbacks.  Listeners are keyed
by session ID so concurrent sessions never see each other's progress.

# ─── HOW PROGRESS TRACKING WORKS ──────────────────────────────────────
#
#   Orchestrator ──update()──→ ProgressTracker ──callback()──→ WebSocket handler
#                                              ──→ (any other listener)
#
#   1. The orchestrator calls tracker.update(session_id, phase, progress, msg)
#   2. ProgressTracker stores the snapshot and calls all registered listeners
#   3. The WebSocket handler (registered as a listener) pushes JSON to the client
#
#   Listener errors are caught and logged; one broken listener cannot stop
#   a search or a publish.  Sync and async callbacks are both accepted.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from soniccompass.models.pipeline import PipelinePhase
from soniccompass.utils.logging import get_logger


@dataclass
class _SessionStatus:
    """Internal snapshot of a single session's progress."""

    phase: PipelinePhase = PipelinePhase.IDLE
    progress: float = 0.0
    message: str = ""


class ProgressTracker:
    """Tracks and broadcasts flow progress via callbacks.

    External consumers (the WebSocket handler, the CLI) register callbacks
    that are invoked whenever :meth:`update` is called for their session.
    """

    def __init__(self) -> None:
        self._statuses: dict[str, _SessionStatus] = {}
        self._listeners: dict[str, list[Callable]] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def update(
        self,
        session_id: str,
        phase: PipelinePhase,
        progress: float,
        message: str,
    ) -> None:
        """Record a progress update and notify all registered listeners.

        Parameters
        ----------
        session_id:
            The session to update.
        phase:
            The current phase.
        progress:
            Completion percentage (0.0 – 100.0); clamped.
        message:
            Human-readable status message.
        """
        progress = max(0.0, min(100.0, progress))

        self._statuses[session_id] = _SessionStatus(
            phase=phase,
            progress=progress,
            message=message,
        )

        self._logger.debug(
            "progress_update",
            session_id=session_id,
            phase=phase.value,
            progress=round(progress, 1),
            message=message,
        )

        await self._notify_listeners(session_id, phase, progress, message)

    def register_listener(self, session_id: str, callback: Callable) -> None:
        """Register a callback accepting ``(session_id, phase, progress, message)``."""
        listeners = self._listeners.setdefault(session_id, [])
        if callback not in listeners:
            listeners.append(callback)
            self._logger.debug(
                "listener_registered",
                session_id=session_id,
                total_listeners=len(listeners),
            )

    def unregister_listener(self, session_id: str, callback: Callable) -> None:
        listeners = self._listeners.get(session_id, [])
        if callback in listeners:
            listeners.remove(callback)
            self._logger.debug(
                "listener_unregistered",
                session_id=session_id,
                remaining_listeners=len(listeners),
            )
        if not listeners:
            self._listeners.pop(session_id, None)

    def get_status(self, session_id: str) -> dict:
        """Return ``{phase, progress, message}`` for a session (IDLE when untracked)."""
        status = self._statuses.get(session_id) or _SessionStatus()
        return {
            "phase": status.phase.value,
            "progress": status.progress,
            "message": status.message,
        }

    def forget(self, session_id: str) -> None:
        """Drop the stored snapshot and listeners for a finished session."""
        self._statuses.pop(session_id, None)
        self._listeners.pop(session_id, None)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _notify_listeners(
        self,
        session_id: str,
        phase: PipelinePhase,
        progress: float,
        message: str,
    ) -> None:
        for callback in list(self._listeners.get(session_id, [])):
            try:
                result = callback(session_id, phase, progress, message)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    session_id=session_id,
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )
