"""Exceptions raised by stores and the media pipeline."""


class AlbumError(Exception):
    """Base class for album storage and rendering errors."""


class InvalidIdentifierError(AlbumError):
    """Raised when an album id or username is malformed."""


class InvalidFilenameError(AlbumError):
    """Raised when a content filename is malformed."""


class UnknownIdentifierError(AlbumError):
    """Raised when an update targets a record that does not exist."""


class IdentifierConflictError(AlbumError):
    """Raised when a record with the same identifier already exists."""


class ContentConflictError(AlbumError):
    """Raised when a content filename is already used in an album."""


class StoreNotInitializedError(AlbumError):
    """Raised when a store is used before its records were loaded."""


class IdentifierAllocationError(AlbumError):
    """Raised when no unused identifier could be generated."""


class StorageIOError(AlbumError):
    """Raised when a durable read or write fails."""


class MediaDecodeError(AlbumError):
    """Raised when an image or video cannot be decoded."""


class UnsupportedFormatError(AlbumError):
    """Raised when a file extension or content type is not supported."""


class InvalidUserDataError(AlbumError):
    """Raised when a user field such as the e-mail is malformed."""
