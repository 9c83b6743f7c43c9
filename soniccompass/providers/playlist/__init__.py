from soniccompass.providers.playlist.youtube_playlist_provider import YouTubePlaylistProvider

__all__ = ["YouTubePlaylistProvider"]
