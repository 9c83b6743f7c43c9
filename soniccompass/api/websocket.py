"""WebSocket endpoint for real-time flow progress updates.

Connects a client to a session via the ``ProgressTracker`` listener
mechanism.  Progress updates are pushed as JSON messages:

    { "session_id": "abc", "phase": "RESOLVING_VIDEOS", "progress": 60.0, "message": "..." }

The current snapshot is sent immediately on connect, so a client that
connects mid-flow is up to date at once.
"""

from __future__ import annotations

import contextlib

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from soniccompass.models.pipeline import PipelinePhase
from soniccompass.pipeline.progress_tracker import ProgressTracker
from soniccompass.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


async def websocket_progress(websocket: WebSocket, session_id: str) -> None:
    """Stream progress updates for *session_id* until the client disconnects."""
    progress_tracker: ProgressTracker = websocket.app.state.progress_tracker

    await websocket.accept()
    _logger.info("websocket_connected", session_id=session_id)

    async def _on_progress(
        sid: str,
        phase: PipelinePhase,
        progress: float,
        message: str,
    ) -> None:
        # The socket may close between the update and the send.
        with contextlib.suppress(Exception):
            await websocket.send_json(
                {
                    "session_id": sid,
                    "phase": phase.value,
                    "progress": round(progress, 1),
                    "message": message,
                }
            )

    progress_tracker.register_listener(session_id, _on_progress)

    try:
        status = progress_tracker.get_status(session_id)
        await websocket.send_json({"session_id": session_id, **status})

        while True:
            await websocket.receive_text()

    except WebSocketDisconnect:
        _logger.info("websocket_disconnected", session_id=session_id)

    finally:
        progress_tracker.unregister_listener(session_id, _on_progress)
        _logger.debug("websocket_listener_cleaned_up", session_id=session_id)
