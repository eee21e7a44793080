"""Exceptions shared by the album stores, batch jobs and the web app."""


class AlbumError(Exception):
    """Base class for album related failures."""


class InvalidAlbumId(AlbumError):
    """Album identifier was missing or blank."""


class StoreError(AlbumError):
    """A backing store could not be read or written."""


class ConfigError(AlbumError):
    """Required configuration is missing or invalid."""


class GuestbookError(Exception):
    """Guestbook table could not be queried or written."""
