"""SonicCompass FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and the packaged ``config.yaml`` and configures
structured logging.

Also exposes :func:`build_pipeline` so the CLI can run the same flows
outside the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI, WebSocket

from soniccompass import __version__
from soniccompass.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    install_error_handling,
)
from soniccompass.api.routes import router as api_router
from soniccompass.api.websocket import websocket_progress
from soniccompass.config.loader import load_config
from soniccompass.config.settings import Settings
from soniccompass.interfaces.song_generator import ISongGenerator
from soniccompass.pipeline.orchestrator import SonicCompassPipeline
from soniccompass.pipeline.progress_tracker import ProgressTracker
from soniccompass.pipeline.session_store import SessionStore
from soniccompass.providers.event.ticketmaster_provider import TicketmasterEventProvider
from soniccompass.providers.geocoding.opencage_provider import OpenCageGeocodingProvider
from soniccompass.providers.identity.google_identity_provider import GoogleIdentityProvider
from soniccompass.providers.llm.gemini_provider import GeminiSongGenerator
from soniccompass.providers.llm.openai_provider import OpenAISongGenerator
from soniccompass.providers.playlist.youtube_playlist_provider import YouTubePlaylistProvider
from soniccompass.providers.video.youtube_search_provider import YouTubeSearchProvider
from soniccompass.services.concert_search_service import ConcertSearchService
from soniccompass.services.playlist_publisher import (
    DEFAULT_DESCRIPTION,
    DEFAULT_TITLE_PREFIX,
    PlaylistPublisher,
)
from soniccompass.services.playlist_synthesizer import PlaylistSynthesizer
from soniccompass.utils.logging import configure_logging, get_logger
from soniccompass.utils.retry import RetryPolicy

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Song generator selection
# ---------------------------------------------------------------------------


def _build_song_generator(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
) -> ISongGenerator:
    """Select the first song generator with an API key.

    Priority order: Gemini -> OpenAI.  With neither configured, Gemini is
    returned anyway and raises ConfigurationError on first use.
    """
    if app_settings.gemini_api_key or not app_settings.openai_api_key:
        return GeminiSongGenerator(settings=app_settings, http_client=http_client)
    return OpenAISongGenerator(settings=app_settings)


# ---------------------------------------------------------------------------
# DI assembly
# ---------------------------------------------------------------------------


def build_pipeline(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
    app_config: dict[str, Any] | None = None,
    progress_tracker: ProgressTracker | None = None,
) -> tuple[SonicCompassPipeline, dict[str, bool]]:
    """Construct the orchestrator and every provider it needs.

    Returns the pipeline plus a ``{provider: configured}`` registry for the
    health endpoint.
    """
    app_config = app_config or {}
    search_config = app_config.get("search") or {}
    playlist_config = app_config.get("playlist") or {}

    policy = RetryPolicy(
        max_retries=app_settings.http_max_retries,
        backoff_base=app_settings.http_backoff_seconds,
    )

    geocoder = OpenCageGeocodingProvider(
        http_client=http_client,
        api_key=app_settings.opencage_api_key,
        policy=policy,
    )
    events = TicketmasterEventProvider(
        http_client=http_client,
        api_key=app_settings.ticketmaster_api_key,
        policy=policy,
        page_size=search_config.get("page_size", 50),
    )
    song_generator = _build_song_generator(app_settings, http_client)
    video_search = YouTubeSearchProvider(
        http_client=http_client,
        api_key=app_settings.youtube_api_key,
    )
    playlists = YouTubePlaylistProvider(http_client=http_client)
    identity = GoogleIdentityProvider(http_client=http_client)

    progress_tracker = progress_tracker or ProgressTracker()
    store = SessionStore(
        max_sessions=app_settings.session_max_count,
        ttl_seconds=app_settings.session_ttl_seconds,
        on_evict=progress_tracker.forget,
    )

    pipeline = SonicCompassPipeline(
        store=store,
        concert_search=ConcertSearchService(geocoder=geocoder, event_search=events),
        synthesizer=PlaylistSynthesizer(
            song_generator=song_generator,
            video_search=video_search,
            max_concurrent_lookups=app_settings.max_concurrent_video_lookups,
        ),
        publisher=PlaylistPublisher(
            playlist_provider=playlists,
            video_search=video_search,
            title_prefix=playlist_config.get("title_prefix", DEFAULT_TITLE_PREFIX),
            description=playlist_config.get("description", DEFAULT_DESCRIPTION),
        ),
        identity=identity,
        progress_tracker=progress_tracker,
    )

    registry = {
        "geocoding": geocoder.is_available(),
        "events": events.is_available(),
        "song_generator": song_generator.is_available(),
        "video_search": video_search.is_available(),
    }
    return pipeline, registry


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every component for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    http_client = httpx.AsyncClient(timeout=app_settings.http_timeout_seconds)
    progress_tracker = ProgressTracker()
    pipeline, registry = build_pipeline(
        app_settings,
        http_client,
        app_config=config,
        progress_tracker=progress_tracker,
    )
    return {
        "http_client": http_client,
        "pipeline": pipeline,
        "progress_tracker": progress_tracker,
        "provider_registry": registry,
        "config": config,
    }


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        providers=components["provider_registry"],
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="SonicCompass API",
        version=__version__,
        description=(
            "Find concerts near a city, turn the line-up into a playlist of "
            "each artist's best-known song, and save it to YouTube."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.get_cors_origins())
    install_error_handling(application)

    application.include_router(api_router)

    @application.websocket("/ws/progress/{session_id}")
    async def ws_progress(websocket: WebSocket, session_id: str) -> None:
        await websocket_progress(websocket, session_id)

    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "soniccompass.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
