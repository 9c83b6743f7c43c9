"""Playlist synthesis: artists → suggested songs → video links.

Step 1 asks the song generator for one song per artist.  Step 2 looks up a
video for every suggestion concurrently (bounded by a semaphore).  A failed
or empty lookup only leaves that entry without a link; it never fails the
whole playlist.  When video search is not configured, step 2 is skipped.

Output order always follows the generator's order, whatever order the
lookups complete in.
"""

from __future__ import annotations

import asyncio

import structlog

from soniccompass.interfaces.song_generator import ISongGenerator
from soniccompass.interfaces.video_search_provider import IVideoSearchProvider
from soniccompass.models.pipeline import PipelinePhase
from soniccompass.models.playlist import PlaylistEntry, SongSuggestion, video_link_for
from soniccompass.services.progress import ProgressCallback, report
from soniccompass.utils.concurrency import throttled_gather
from soniccompass.utils.errors import UserInputError
from soniccompass.utils.logging import get_logger

NO_ARTISTS_MESSAGE = (
    "No unique artists found in the current concert list to generate a playlist."
)
_DEFAULT_CONCURRENCY = 5


class PlaylistSynthesizer:
    """Builds candidate playlist entries for a list of artist names.

    Parameters
    ----------
    song_generator:
        Produces ``{artist, song}`` suggestions.
    video_search:
        Resolves each suggestion to a video id.
    max_concurrent_lookups:
        Upper bound on simultaneous video searches.
    """

    def __init__(
        self,
        song_generator: ISongGenerator,
        video_search: IVideoSearchProvider,
        max_concurrent_lookups: int = _DEFAULT_CONCURRENCY,
    ) -> None:
        self._song_generator = song_generator
        self._video_search = video_search
        self._lookup_semaphore = asyncio.Semaphore(max_concurrent_lookups)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def synthesize(
        self,
        artist_names: list[str],
        on_progress: ProgressCallback | None = None,
    ) -> list[PlaylistEntry]:
        """Return one selected entry per suggested song.

        Raises
        ------
        UserInputError
            If *artist_names* is empty; no provider is called.
        ConfigurationError, LLMResponseError, TransientNetworkError
            Propagated from the song generator.
        """
        if not artist_names:
            raise UserInputError(message=NO_ARTISTS_MESSAGE)

        await report(
            on_progress,
            PipelinePhase.GENERATING_SONGS,
            20.0,
            f"Picking songs for {len(artist_names)} artists",
        )
        suggestions = await self._song_generator.generate_songs(artist_names)

        if not self._video_search.is_available():
            self._logger.info("video_lookup_skipped", reason="no_video_search_key")
            return [self._entry(song, None) for song in suggestions]

        await report(
            on_progress,
            PipelinePhase.RESOLVING_VIDEOS,
            60.0,
            f"Finding videos for {len(suggestions)} songs",
        )
        results = await throttled_gather(
            [self._lookup(song) for song in suggestions],
            semaphore=self._lookup_semaphore,
        )

        entries: list[PlaylistEntry] = []
        for song, result in zip(suggestions, results):
            video_id = result if isinstance(result, str) else None
            entries.append(self._entry(song, video_id))

        self._logger.info(
            "playlist_synthesized",
            artists=len(artist_names),
            songs=len(entries),
            linked=sum(1 for entry in entries if entry.video_link),
        )
        return entries

    async def _lookup(self, song: SongSuggestion) -> str | None:
        query = f"{song.artist_name} - {song.song_title} official audio"
        try:
            return await self._video_search.find_video(query)
        except Exception as exc:
            self._logger.warning("video_lookup_failed", query=query, error=str(exc))
            return None

    @staticmethod
    def _entry(song: SongSuggestion, video_id: str | None) -> PlaylistEntry:
        return PlaylistEntry(
            artist_name=song.artist_name,
            song_title=song.song_title,
            selected=True,
            video_link=video_link_for(video_id) if video_id else None,
        )
