"""Callback type the services use to report phase changes."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from soniccompass.models.pipeline import PipelinePhase

# (phase, progress 0-100, message) -> awaitable
ProgressCallback = Callable[[PipelinePhase, float, str], Awaitable[None]]


async def report(
    callback: ProgressCallback | None,
    phase: PipelinePhase,
    progress: float,
    message: str,
) -> None:
    if callback is not None:
        await callback(phase, progress, message)
