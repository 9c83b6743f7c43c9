"""SonicCompass: concert search, song playlists and YouTube playlist publishing."""

__version__ = "0.1.0"
