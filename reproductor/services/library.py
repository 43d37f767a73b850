"""
Reproductor - Library Service

Keeps the blob directory and the ``songs`` table in step for the four
operations the API exposes: upload, list, delete one and delete all.

There is no transaction spanning the two stores.  The rules are:

- Upload writes the blob first, then the row.  If the row insert fails
  the freshly written blob is removed again (best effort).
- Deletes remove blobs first and always go on to remove the rows; a
  blob that cannot be unlinked is logged and otherwise ignored.
- Delete-all works from the directory listing, not from the rows, so any
  stray file in the uploads directory is removed too.
"""

from typing import List, Optional

import aiosqlite
from loguru import logger

from reproductor.database import MetadataStore
from reproductor.errors import (
    MetadataDeleteFailed,
    MetadataReadFailed,
    MetadataWriteFailed,
    NoFileProvided,
    NotFound,
    StorageReadFailed,
    StorageUnlinkFailed,
    StorageWriteFailed,
)
from reproductor.models import Track
from reproductor.storage import BlobStore, generate_stored_name


class LibraryService:
    """Upload / list / delete tracks across the blob and metadata stores."""

    def __init__(self, blobs: BlobStore, metadata: MetadataStore):
        self.blobs = blobs
        self.metadata = metadata

    # -----------------------------------------------------------------------
    # Upload
    # -----------------------------------------------------------------------
    async def upload(
        self, data: Optional[bytes], original_filename: Optional[str]
    ) -> Track:
        """Store *data* as a new blob and register it under *original_filename*."""
        if data is None or not original_filename:
            raise NoFileProvided()

        stored_name = generate_stored_name(original_filename)
        file_path = self.blobs.public_path(stored_name)

        try:
            await self.blobs.write(stored_name, data)
        except (OSError, ValueError) as e:
            logger.error("❌ Could not write blob for '{}': {}", original_filename, e)
            raise StorageWriteFailed() from e

        try:
            song_id = await self.metadata.insert(original_filename, file_path)
        except aiosqlite.Error as e:
            logger.error("❌ Error inserting song '{}': {}", original_filename, e)
            await self._discard_blob(stored_name)
            raise MetadataWriteFailed() from e

        logger.info(
            "📤 Upload stored: '{}' -> {} ({} bytes)",
            original_filename,
            file_path,
            len(data),
        )
        return Track(id=song_id, title=original_filename, file_path=file_path)

    async def _discard_blob(self, stored_name: str) -> None:
        """Remove a blob whose row never made it into the database."""
        try:
            await self.blobs.unlink(stored_name)
            logger.warning(
                "↩️ Orphaned blob {} removed after failed insert", stored_name
            )
        except OSError as e:
            logger.error("❌ Orphaned blob {} left on disk: {}", stored_name, e)

    # -----------------------------------------------------------------------
    # Read
    # -----------------------------------------------------------------------
    async def list_tracks(self) -> List[Track]:
        """Every track in natural row order."""
        try:
            rows = await self.metadata.select_all()
        except aiosqlite.Error as e:
            logger.error("❌ Error fetching songs: {}", e)
            raise MetadataReadFailed() from e
        return [Track.from_row(r) for r in rows]

    async def get_track(self, song_id: int) -> Track:
        try:
            row = await self.metadata.select_by_id(song_id)
        except aiosqlite.Error as e:
            logger.error("❌ Error finding song id={}: {}", song_id, e)
            raise MetadataReadFailed() from e
        if row is None:
            raise NotFound(f"Song {song_id} not found")
        return Track.from_row(row)

    # -----------------------------------------------------------------------
    # Delete
    # -----------------------------------------------------------------------
    async def delete_one(self, song_id: int) -> int:
        """
        Delete a track and, best effort, its blob.

        Returns the number of rows removed.  Raises ``NotFound`` when no row
        has *song_id*; a missing or undeletable blob does not fail the call.
        """
        track = await self.get_track(song_id)

        stored_name = track.stored_name
        if stored_name:
            try:
                await self.blobs.unlink(stored_name)
            except (OSError, ValueError) as e:
                # Keep going: the row is removed even if the blob is not
                logger.warning(
                    "⚠️ {} ({}). Removing from database anyway.",
                    StorageUnlinkFailed(f"Failed to delete audio file {stored_name}"),
                    e,
                )

        try:
            deleted = await self.metadata.delete_by_id(song_id)
        except aiosqlite.Error as e:
            logger.error("❌ Error deleting song id={} from database: {}", song_id, e)
            raise MetadataDeleteFailed() from e

        logger.info(
            "🗑️ Song with id {} deleted. Rows affected: {}", song_id, deleted
        )
        return deleted

    async def delete_all(self) -> int:
        """
        Remove every file in the uploads directory, then every row.

        Returns the number of rows removed.  Safe to call repeatedly.
        """
        try:
            names = await self.blobs.list_names()
        except OSError as e:
            logger.error("❌ Error reading uploads directory: {}", e)
            raise StorageReadFailed() from e

        failed = 0
        for name in names:
            try:
                await self.blobs.unlink(name)
            except OSError as e:
                failed += 1
                logger.warning(
                    "⚠️ {} ({})",
                    StorageUnlinkFailed(f"Failed to delete audio file {name}"),
                    e,
                )

        try:
            deleted = await self.metadata.delete_all()
        except aiosqlite.Error as e:
            logger.error("❌ Error deleting all songs from database: {}", e)
            raise MetadataDeleteFailed() from e

        logger.info(
            "🗑️ All songs deleted. Rows affected: {} | files removed: {} | failed: {}",
            deleted,
            len(names) - failed,
            failed,
        )
        return deleted

    async def count(self) -> int:
        try:
            return await self.metadata.count()
        except aiosqlite.Error as e:
            raise MetadataReadFailed() from e
