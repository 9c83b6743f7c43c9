"""Playlist models: LLM song suggestions, user-facing entries and publish results."""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ConfigDict, Field

from soniccompass.utils.errors import PartialBatchError

VIDEO_LINK_BASE = "https://music.youtube.com/watch?v="
PLAYLIST_LINK_BASE = "https://music.youtube.com/playlist?list="


def video_link_for(video_id: str) -> str:
    return f"{VIDEO_LINK_BASE}{video_id}"


def video_id_from_link(link: str | None) -> str | None:
    """Extract the ``v`` query parameter from a watch URL, or ``None``."""
    if not link:
        return None
    values = parse_qs(urlparse(link).query).get("v")
    return values[0] if values and values[0] else None


class SongSuggestion(BaseModel):
    """One ``{artistName, songTitle}`` pair as produced by the generative provider."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    artist_name: str = Field(alias="artistName", min_length=1)
    song_title: str = Field(alias="songTitle", min_length=1)


class PlaylistEntry(BaseModel):
    """A candidate song shown to the user.

    Only ``selected`` ever changes after creation, via ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    artist_name: str
    song_title: str
    selected: bool = True
    video_link: str | None = None

    @property
    def video_id(self) -> str | None:
        return video_id_from_link(self.video_link)

    @property
    def search_term(self) -> str:
        """The video-search query used for this song."""
        return f"{self.artist_name} - {self.song_title} official audio"

    def toggled(self) -> PlaylistEntry:
        return self.model_copy(update={"selected": not self.selected})


class PlaylistHandle(BaseModel):
    """A remote playlist that was created on the video platform."""

    model_config = ConfigDict(frozen=True)

    playlist_id: str
    title: str

    @property
    def url(self) -> str:
        return f"{PLAYLIST_LINK_BASE}{self.playlist_id}"


class PlaylistItemFailure(BaseModel):
    """A selected song that could not be added to the remote playlist."""

    model_config = ConfigDict(frozen=True)

    artist_name: str
    song_title: str
    reason: str


class PublishResult(BaseModel):
    """Outcome of a publish: the playlist always exists, items may have failed."""

    model_config = ConfigDict(frozen=True)

    playlist: PlaylistHandle
    added: list[PlaylistEntry] = Field(default_factory=list)
    failures: list[PlaylistItemFailure] = Field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.added) + len(self.failures)

    def warning(self) -> PartialBatchError | None:
        """Summarize item failures, or ``None`` when every song was added."""
        if not self.failures:
            return None
        return PartialBatchError(
            failed_count=len(self.failures),
            total_count=self.attempted,
            provider_name="youtube",
        )
