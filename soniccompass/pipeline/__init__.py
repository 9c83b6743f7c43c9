"""Session state, progress broadcasting and the flow orchestrator."""

from soniccompass.pipeline.orchestrator import SonicCompassPipeline
from soniccompass.pipeline.progress_tracker import ProgressTracker
from soniccompass.pipeline.session_store import SessionStore

__all__ = ["ProgressTracker", "SessionStore", "SonicCompassPipeline"]
