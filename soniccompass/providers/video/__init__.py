from soniccompass.providers.video.youtube_search_provider import YouTubeSearchProvider

__all__ = ["YouTubeSearchProvider"]
