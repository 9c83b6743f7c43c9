"""Remote playlist publishing.

Creates one private playlist for the signed-in user and appends every
selected entry to it, strictly one after another in the order shown.
Once the playlist exists the publish is a success: songs that could not be
resolved or added are collected as :class:`PlaylistItemFailure` values and
the loop carries on with the next song.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import structlog

from soniccompass.interfaces.playlist_provider import IPlaylistProvider
from soniccompass.interfaces.video_search_provider import IVideoSearchProvider
from soniccompass.models.pipeline import PipelinePhase
from soniccompass.models.playlist import PlaylistEntry, PlaylistItemFailure, PublishResult
from soniccompass.models.session import Credential
from soniccompass.services.progress import ProgressCallback, report
from soniccompass.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    SonicCompassError,
    UserInputError,
)
from soniccompass.utils.logging import get_logger

DEFAULT_TITLE_PREFIX = "SonicCompass Hype"
DEFAULT_DESCRIPTION = (
    "Playlist created by SonicCompass from your selected concert artists."
)

NO_SELECTION_MESSAGE = (
    "Please select at least one song to create a YouTube Music playlist."
)
SIGN_IN_MESSAGE = (
    "Please sign in with Google and authorize YouTube access to create a playlist."
)
NO_VIDEO_KEY_MESSAGE = (
    "A YouTube API key is required to look up videos for playlist creation."
)


class PlaylistPublisher:
    """Publishes selected playlist entries as a remote playlist.

    Parameters
    ----------
    playlist_provider:
        Creates the playlist and adds items with the user's token.
    video_search:
        Fallback lookup for entries that have no video link yet.
    title_prefix, description:
        Playlist metadata; the title gets a local timestamp appended.
    clock:
        Returns "now" in local time, for the title.
    """

    def __init__(
        self,
        playlist_provider: IPlaylistProvider,
        video_search: IVideoSearchProvider,
        title_prefix: str = DEFAULT_TITLE_PREFIX,
        description: str = DEFAULT_DESCRIPTION,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._playlists = playlist_provider
        self._video_search = video_search
        self._title_prefix = title_prefix
        self._description = description
        self._clock = clock
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def playlist_title(self) -> str:
        return f"{self._title_prefix} - {self._clock().strftime('%Y-%m-%d %H:%M:%S')}"

    async def publish(
        self,
        credential: Credential | None,
        entries: list[PlaylistEntry],
        on_progress: ProgressCallback | None = None,
    ) -> PublishResult:
        """Create the playlist and add every selected entry.

        Preconditions are checked in order, before any network call.

        Raises
        ------
        UserInputError
            No entry is selected.
        AuthenticationError
            No credential or token, or the token was rejected.
        ConfigurationError
            Video search is not configured.
        PlaylistCreateError
            The playlist itself could not be created.
        """
        selected = [entry for entry in entries if entry.selected]
        if not selected:
            raise UserInputError(message=NO_SELECTION_MESSAGE)
        if credential is None or not credential.bearer_token:
            raise AuthenticationError(message=SIGN_IN_MESSAGE, provider_name="youtube")
        if not self._video_search.is_available():
            raise ConfigurationError(message=NO_VIDEO_KEY_MESSAGE, provider_name="youtube")

        token = credential.bearer_token
        await report(on_progress, PipelinePhase.CREATING_PLAYLIST, 5.0, "Creating playlist")
        handle = await self._playlists.create_playlist(
            token, self.playlist_title(), self._description
        )

        added: list[PlaylistEntry] = []
        failures: list[PlaylistItemFailure] = []
        total = len(selected)

        for position, entry in enumerate(selected, start=1):
            await report(
                on_progress,
                PipelinePhase.ADDING_ITEMS,
                5.0 + 95.0 * (position - 1) / total,
                f"Adding {entry.artist_name} - {entry.song_title} ({position}/{total})",
            )
            reason = await self._add_one(token, handle.playlist_id, entry)
            if reason is None:
                added.append(entry)
            else:
                self._logger.warning(
                    "playlist_item_failed",
                    playlist_id=handle.playlist_id,
                    artist=entry.artist_name,
                    song=entry.song_title,
                    reason=reason,
                )
                failures.append(
                    PlaylistItemFailure(
                        artist_name=entry.artist_name,
                        song_title=entry.song_title,
                        reason=reason,
                    )
                )

        self._logger.info(
            "playlist_published",
            playlist_id=handle.playlist_id,
            added=len(added),
            failed=len(failures),
        )
        return PublishResult(playlist=handle, added=added, failures=failures)

    async def _add_one(self, token: str, playlist_id: str, entry: PlaylistEntry) -> str | None:
        """Add one entry; return ``None`` on success or the failure reason."""
        video_id = entry.video_id
        if video_id is None:
            try:
                video_id = await self._video_search.find_video(entry.search_term)
            except SonicCompassError as exc:
                return f"Video search failed: {exc.message}"
            if not video_id:
                return "No matching video found"

        try:
            await self._playlists.add_playlist_item(token, playlist_id, video_id)
        except SonicCompassError as exc:
            return f"Could not add to playlist: {exc.message}"
        return None
