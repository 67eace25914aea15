"""Spotify Kiosk API App"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("spotify-kiosk")
except PackageNotFoundError:
    __version__ = "dev"
