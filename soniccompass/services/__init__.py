"""Stateless flow services: concert search, playlist synthesis and publishing."""

from soniccompass.services.concert_search_service import ConcertSearchService
from soniccompass.services.playlist_publisher import PlaylistPublisher
from soniccompass.services.playlist_synthesizer import PlaylistSynthesizer

__all__ = ["ConcertSearchService", "PlaylistPublisher", "PlaylistSynthesizer"]
