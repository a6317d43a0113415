"""Exceptions raised by the playlist engine."""


class PlaylistEngineError(Exception):
    """Base class for playlist engine errors."""


class CatalogEmptyError(PlaylistEngineError):
    """The catalog provider returned no candidate tracks; nothing can be generated."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"No tracks available to generate a playlist for user {user_id!r}")


class ProfileUnavailableError(PlaylistEngineError):
    """A profile provider could not load the listener profile.

    The pipeline never lets this escape: it falls back to an empty profile.
    """
