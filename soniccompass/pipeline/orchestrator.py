"""Central orchestrator for the SonicCompass session flows.

Coordinates the three flows (concert search, playlist generation, playlist
publishing) against the session store, and reports on two channels:

* progress → :class:`ProgressTracker` (pushed over the WebSocket)
* outcomes → the session's notice list (errors, "no concerts found",
  "playlist created", one warning per song that could not be added)

ARCHITECTURE NOTE:
    The services are stateless; all application state lives in the
    :class:`SessionStore`.  Each flow follows the same shape:

        1. Take a generation token from the store (search/generate only)
        2. Broadcast progress
        3. Call the service
        4. Apply the result if the token is still current
        5. On error: notice + FAILED progress, then re-raise for the API
"""

from __future__ import annotations

import structlog

from soniccompass.interfaces.identity_provider import IIdentityProvider
from soniccompass.models.concert import ConcertRecord, PlaceQuery, distinct_artists
from soniccompass.models.pipeline import (
    GenerationOutcome,
    PipelinePhase,
    SearchOutcome,
    SelectionSummary,
)
from soniccompass.models.playlist import PlaylistEntry, PublishResult
from soniccompass.models.session import Credential, Notice, NoticeLevel, SessionState
from soniccompass.pipeline.progress_tracker import ProgressTracker
from soniccompass.pipeline.session_store import SessionStore
from soniccompass.services.concert_search_service import ConcertSearchService
from soniccompass.services.playlist_publisher import PlaylistPublisher
from soniccompass.services.playlist_synthesizer import PlaylistSynthesizer
from soniccompass.services.progress import ProgressCallback
from soniccompass.utils.errors import (
    AuthenticationError,
    NotFoundError,
    SonicCompassError,
    UserInputError,
)
from soniccompass.utils.logging import get_logger

NO_CONCERTS_MESSAGE = (
    "No concerts found for your search criteria. Try a different city, "
    "widen the radius, or adjust the date range!"
)
SEARCH_FIRST_MESSAGE = (
    "No concerts found to generate a playlist from. Please search for concerts first."
)
NO_SONGS_SELECTED_MESSAGE = "No songs selected!"
SIGNED_IN_MESSAGE = (
    "Successfully signed in with Google! You can now create YouTube Music playlists."
)
SIGNED_OUT_MESSAGE = "Successfully signed out of Google."
SESSION_EXPIRED_MESSAGE = "Your Google sign-in has expired. Please sign in again."


class SonicCompassPipeline:
    """Runs the SonicCompass flows for any number of sessions.

    All services are injected at construction time.
    """

    def __init__(
        self,
        store: SessionStore,
        concert_search: ConcertSearchService,
        synthesizer: PlaylistSynthesizer,
        publisher: PlaylistPublisher,
        identity: IIdentityProvider,
        progress_tracker: ProgressTracker,
    ) -> None:
        self._store = store
        self._concert_search = concert_search
        self._synthesizer = synthesizer
        self._publisher = publisher
        self._identity = identity
        self._progress = progress_tracker
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def progress_tracker(self) -> ProgressTracker:
        return self._progress

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self) -> SessionState:
        return self._store.create()

    def get_session(self, session_id: str) -> SessionState:
        return self._store.get(session_id)

    def end_session(self, session_id: str) -> None:
        """Drop the session, its credential and its progress snapshot."""
        self._store.get(session_id)
        self._store.delete(session_id)
        self._progress.forget(session_id)
        self._logger.info("session_ended", session_id=session_id)

    # ------------------------------------------------------------------
    # Flow 1: concert search
    # ------------------------------------------------------------------

    async def search_concerts(self, session_id: str, query: PlaceQuery) -> SearchOutcome:
        """Geocode *query*, search events, and store the result.

        Raises whatever the search raised, after recording an error notice.
        """
        token = self._store.begin_search(session_id)
        self._logger.info(
            "search_started",
            session_id=session_id,
            city=query.city_name,
            radius=query.radius_miles,
            token=token,
        )

        try:
            concerts = await self._concert_search.search(
                query, on_progress=self._reporter(session_id)
            )
        except SonicCompassError as exc:
            if self._store.is_current_search(session_id, token):
                await self._fail(session_id, exc)
            raise

        applied = self._store.complete_search(session_id, token, concerts)
        if not applied:
            return SearchOutcome(concerts=concerts, applied=False, generation=token)

        if not concerts:
            self._store.add_notice(session_id, NO_CONCERTS_MESSAGE, NoticeLevel.INFO)
        await self._progress.update(
            session_id,
            PipelinePhase.COMPLETE,
            100.0,
            f"Found {len(concerts)} concerts",
        )
        return SearchOutcome(concerts=concerts, applied=True, generation=token)

    def get_concert(self, session_id: str, concert_id: str) -> ConcertRecord:
        for concert in self._store.get(session_id).concerts:
            if concert.id == concert_id:
                return concert
        raise NotFoundError(message=f"Concert not found: {concert_id}")

    # ------------------------------------------------------------------
    # Flow 2: playlist generation
    # ------------------------------------------------------------------

    async def generate_playlist(self, session_id: str) -> GenerationOutcome:
        """Synthesize a playlist from the distinct artists of the current concerts."""
        state = self._store.get(session_id)
        if not state.concerts:
            raise UserInputError(message=SEARCH_FIRST_MESSAGE)
        artists = distinct_artists(state.concerts)

        token = self._store.begin_generation(session_id)
        self._logger.info(
            "generation_started",
            session_id=session_id,
            artists=len(artists),
            token=token,
        )

        try:
            playlist = await self._synthesizer.synthesize(
                artists, on_progress=self._reporter(session_id)
            )
        except SonicCompassError as exc:
            if self._store.is_current_generation(session_id, token):
                await self._fail(session_id, exc)
            raise

        applied = self._store.complete_generation(session_id, token, playlist)
        if applied:
            await self._progress.update(
                session_id,
                PipelinePhase.COMPLETE,
                100.0,
                f"Generated {len(playlist)} songs",
            )
        return GenerationOutcome(playlist=playlist, applied=applied, generation=token)

    def toggle_selection(self, session_id: str, index: int) -> PlaylistEntry:
        return self._store.toggle_selection(session_id, index)

    def selection_summary(self, session_id: str) -> SelectionSummary:
        selected = self._store.get(session_id).selected_entries
        if not selected:
            return SelectionSummary(count=0, songs=[], message=NO_SONGS_SELECTED_MESSAGE)
        lines = "\n".join(f"{e.song_title} by {e.artist_name}" for e in selected)
        return SelectionSummary(
            count=len(selected),
            songs=selected,
            message=f"You've selected {len(selected)} songs for your playlist:\n{lines}",
        )

    # ------------------------------------------------------------------
    # Flow 3: publishing
    # ------------------------------------------------------------------

    async def publish_playlist(self, session_id: str) -> PublishResult:
        """Create the remote playlist from the session's selected entries.

        An :class:`AuthenticationError` from the provider signs the session
        out before it is re-raised.
        """
        state = self._store.get(session_id)
        try:
            result = await self._publisher.publish(
                state.credential,
                state.playlist,
                on_progress=self._reporter(session_id),
            )
        except AuthenticationError as exc:
            if state.credential is not None:
                self._store.clear_credential(session_id)
                self._logger.warning("credential_cleared", session_id=session_id)
                await self._fail(session_id, exc, SESSION_EXPIRED_MESSAGE)
            else:
                await self._fail(session_id, exc)
            raise
        except SonicCompassError as exc:
            await self._fail(session_id, exc)
            raise

        for failure in result.failures:
            self._store.add_notice(
                session_id,
                f'Could not add "{failure.artist_name} - {failure.song_title}": '
                f"{failure.reason}. Skipped.",
                NoticeLevel.WARNING,
            )
        self._store.add_notice(
            session_id,
            "YouTube Music playlist created successfully! "
            f"You can view it here: {result.playlist.url}",
            NoticeLevel.INFO,
        )
        await self._progress.update(
            session_id,
            PipelinePhase.COMPLETE,
            100.0,
            f"Added {len(result.added)} of {result.attempted} songs",
        )
        return result

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def sign_in(self, session_id: str, access_token: str) -> Credential:
        self._store.get(session_id)
        credential = await self._identity.resolve(access_token)
        self._store.set_credential(session_id, credential)
        self._store.add_notice(session_id, SIGNED_IN_MESSAGE, NoticeLevel.INFO)
        self._logger.info("signed_in", session_id=session_id, email=credential.email)
        return credential

    def sign_out(self, session_id: str) -> SessionState:
        self._store.clear_credential(session_id)
        self._store.add_notice(session_id, SIGNED_OUT_MESSAGE, NoticeLevel.INFO)
        self._logger.info("signed_out", session_id=session_id)
        return self._store.get(session_id)

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def list_notices(self, session_id: str) -> list[Notice]:
        return list(self._store.get(session_id).notices)

    def dismiss_notice(self, session_id: str, notice_id: str) -> None:
        self._store.dismiss_notice(session_id, notice_id)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _reporter(self, session_id: str) -> ProgressCallback:
        async def _report(phase: PipelinePhase, progress: float, message: str) -> None:
            await self._progress.update(session_id, phase, progress, message)

        return _report

    async def _fail(
        self,
        session_id: str,
        exc: SonicCompassError,
        message: str | None = None,
    ) -> None:
        text = message or exc.message
        self._logger.error(
            "flow_failed",
            session_id=session_id,
            error_type=type(exc).__name__,
            provider=exc.provider_name,
            error=exc.message,
        )
        self._store.add_notice(session_id, text, NoticeLevel.ERROR)
        await self._progress.update(session_id, PipelinePhase.FAILED, 0.0, text)
