"""
Reproductor - Library Errors

Every failure the library service can report.  Each error carries the
HTTP status code the API layer answers with, so routes only need to
translate a ``LibraryError`` into an ``HTTPException``.
"""


class LibraryError(Exception):
    """Base class for library failures."""

    status_code = 500
    default_detail = "Library operation failed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NoFileProvided(LibraryError):
    status_code = 400
    default_detail = "No file was received"


class NotFound(LibraryError):
    status_code = 404
    default_detail = "Song not found"


class StorageWriteFailed(LibraryError):
    default_detail = "Failed to store the audio file"


class StorageReadFailed(LibraryError):
    default_detail = "Failed to read the uploads directory"


class StorageUnlinkFailed(LibraryError):
    """
    Blob could not be removed during a delete.

    Deletes are best effort on blobs, so this is built and logged by the
    library service but never raised to callers.
    """

    default_detail = "Failed to delete the audio file"


class MetadataWriteFailed(LibraryError):
    default_detail = "Failed to save the song in the database"


class MetadataReadFailed(LibraryError):
    default_detail = "Failed to read songs from the database"


class MetadataDeleteFailed(LibraryError):
    default_detail = "Failed to delete songs from the database"
