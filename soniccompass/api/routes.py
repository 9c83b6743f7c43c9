"""FastAPI API routes for SonicCompass.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                                   Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/health                             GET     Health + configured providers
# /api/v1/genres                             GET     Genre dropdown + search defaults
# /api/v1/sessions                           POST    Start an anonymous session
# /api/v1/sessions/{sid}                     GET     Session snapshot
# /api/v1/sessions/{sid}                     DELETE  End the session
# /api/v1/sessions/{sid}/sign-in             POST    Attach a Google credential
# /api/v1/sessions/{sid}/sign-out            POST    Drop identity + token
# /api/v1/sessions/{sid}/concerts/search     POST    Geocode + event search
# /api/v1/sessions/{sid}/concerts/{cid}      GET     One concert's details
# /api/v1/sessions/{sid}/playlist/generate   POST    Songs + video links
# /api/v1/sessions/{sid}/playlist/{i}/toggle POST    Flip one entry's selection
# /api/v1/sessions/{sid}/playlist/selection  GET     Selected-songs summary
# /api/v1/sessions/{sid}/playlist/publish    POST    Create the YouTube playlist
# /api/v1/sessions/{sid}/notices             GET     Notification list
# /api/v1/sessions/{sid}/notices/{nid}       DELETE  Dismiss one notice
#
# Errors are raised as SonicCompassError subclasses and rendered by the
# handler in middleware.py; routes never build error responses themselves.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError

from soniccompass import __version__
from soniccompass.api.schemas import (
    ConcertSearchRequest,
    ConcertSearchResponse,
    CredentialView,
    GenreOption,
    GenresResponse,
    HealthResponse,
    PlaylistResponse,
    PublishResponse,
    SelectionResponse,
    SessionResponse,
    SignInRequest,
    ToggleResponse,
)
from soniccompass.models.concert import ConcertRecord, PlaceQuery
from soniccompass.models.session import Notice
from soniccompass.pipeline.orchestrator import SonicCompassPipeline
from soniccompass.utils.errors import UserInputError
from soniccompass.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_DEFAULT_CITY = "Spartanburg"
_DEFAULT_RADIUS = 50
_DEFAULT_DATE_WINDOWS = [30, 60, 90]

# Providers whose absence makes the core search flow unusable.
_CRITICAL_PROVIDERS = ("geocoding", "events")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_pipeline(request: Request) -> SonicCompassPipeline:
    return request.app.state.pipeline


def _get_app_config(request: Request) -> dict[str, Any]:
    return getattr(request.app.state, "config", None) or {}


PipelineDep = Annotated[SonicCompassPipeline, Depends(_get_pipeline)]
ConfigDep = Annotated[dict[str, Any], Depends(_get_app_config)]


# ---------------------------------------------------------------------------
# Meta
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(request: Request) -> HealthResponse:
    """Report which provider keys are configured.

    ``healthy`` when everything is configured, ``degraded`` when search
    works but generation or publishing does not, ``unhealthy`` otherwise.
    """
    providers: dict[str, Any] = dict(getattr(request.app.state, "provider_registry", {}))
    core_ok = all(providers.get(name, False) for name in _CRITICAL_PROVIDERS)
    everything_ok = core_ok and all(
        bool(value) for key, value in providers.items() if key not in _CRITICAL_PROVIDERS
    )

    if everything_ok:
        status = "healthy"
    elif core_ok:
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(status=status, version=__version__, providers=providers)


@router.get("/genres", response_model=GenresResponse, summary="Search form options")
async def list_genres(config: ConfigDep) -> GenresResponse:
    search = config.get("search") or {}
    return GenresResponse(
        genres=[GenreOption(**option) for option in config.get("genres") or []],
        date_windows=search.get("date_windows") or _DEFAULT_DATE_WINDOWS,
        default_city=search.get("default_city") or _DEFAULT_CITY,
        default_radius_miles=search.get("default_radius_miles") or _DEFAULT_RADIUS,
    )


# ---------------------------------------------------------------------------
# Sessions and identity
# ---------------------------------------------------------------------------


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(pipeline: PipelineDep) -> SessionResponse:
    return SessionResponse.from_state(pipeline.create_session())


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, pipeline: PipelineDep) -> SessionResponse:
    return SessionResponse.from_state(pipeline.get_session(session_id))


@router.delete("/sessions/{session_id}", status_code=204)
async def end_session(session_id: str, pipeline: PipelineDep) -> Response:
    pipeline.end_session(session_id)
    return Response(status_code=204)


@router.post("/sessions/{session_id}/sign-in", response_model=CredentialView)
async def sign_in(
    session_id: str,
    body: SignInRequest,
    pipeline: PipelineDep,
) -> CredentialView:
    credential = await pipeline.sign_in(session_id, body.access_token)
    return CredentialView(display_name=credential.display_name, email=credential.email)


@router.post("/sessions/{session_id}/sign-out", response_model=SessionResponse)
async def sign_out(session_id: str, pipeline: PipelineDep) -> SessionResponse:
    return SessionResponse.from_state(pipeline.sign_out(session_id))


# ---------------------------------------------------------------------------
# Concerts
# ---------------------------------------------------------------------------


@router.post(
    "/sessions/{session_id}/concerts/search",
    response_model=ConcertSearchResponse,
    summary="Search concerts near a place",
)
async def search_concerts(
    session_id: str,
    body: ConcertSearchRequest,
    pipeline: PipelineDep,
) -> ConcertSearchResponse:
    try:
        query = PlaceQuery(**body.model_dump())
    except ValidationError as exc:
        raise UserInputError(
            message=f"Invalid search: {exc.errors()[0].get('msg', 'bad value')}"
        ) from exc

    outcome = await pipeline.search_concerts(session_id, query)
    return ConcertSearchResponse(
        session_id=session_id,
        applied=outcome.applied,
        count=len(outcome.concerts),
        concerts=outcome.concerts,
        notices=pipeline.list_notices(session_id),
    )


@router.get(
    "/sessions/{session_id}/concerts/{concert_id}",
    response_model=ConcertRecord,
)
async def get_concert(
    session_id: str,
    concert_id: str,
    pipeline: PipelineDep,
) -> ConcertRecord:
    return pipeline.get_concert(session_id, concert_id)


# ---------------------------------------------------------------------------
# Playlist
# ---------------------------------------------------------------------------


@router.post(
    "/sessions/{session_id}/playlist/generate",
    response_model=PlaylistResponse,
    summary="Generate a playlist from the current concerts",
)
async def generate_playlist(session_id: str, pipeline: PipelineDep) -> PlaylistResponse:
    outcome = await pipeline.generate_playlist(session_id)
    return PlaylistResponse(
        session_id=session_id,
        applied=outcome.applied,
        playlist=outcome.playlist,
    )


@router.get(
    "/sessions/{session_id}/playlist/selection",
    response_model=SelectionResponse,
)
async def playlist_selection(session_id: str, pipeline: PipelineDep) -> SelectionResponse:
    summary = pipeline.selection_summary(session_id)
    return SelectionResponse(count=summary.count, songs=summary.songs, message=summary.message)


@router.post(
    "/sessions/{session_id}/playlist/{index}/toggle",
    response_model=ToggleResponse,
)
async def toggle_entry(session_id: str, index: int, pipeline: PipelineDep) -> ToggleResponse:
    entry = pipeline.toggle_selection(session_id, index)
    return ToggleResponse(index=index, entry=entry)


@router.post(
    "/sessions/{session_id}/playlist/publish",
    response_model=PublishResponse,
    summary="Create a private YouTube playlist from the selected songs",
)
async def publish_playlist(session_id: str, pipeline: PipelineDep) -> PublishResponse:
    result = await pipeline.publish_playlist(session_id)
    warning = result.warning()
    _logger.info(
        "publish_response",
        session_id=session_id,
        playlist_id=result.playlist.playlist_id,
        failures=len(result.failures),
    )
    return PublishResponse(
        playlist_id=result.playlist.playlist_id,
        title=result.playlist.title,
        url=result.playlist.url,
        added=len(result.added),
        failures=result.failures,
        warning=warning.message if warning else None,
    )


# ---------------------------------------------------------------------------
# Notices
# ---------------------------------------------------------------------------


@router.get("/sessions/{session_id}/notices", response_model=list[Notice])
async def list_notices(session_id: str, pipeline: PipelineDep) -> list[Notice]:
    return pipeline.list_notices(session_id)


@router.delete("/sessions/{session_id}/notices/{notice_id}", status_code=204)
async def dismiss_notice(session_id: str, notice_id: str, pipeline: PipelineDep) -> Response:
    pipeline.dismiss_notice(session_id, notice_id)
    return Response(status_code=204)
