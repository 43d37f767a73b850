"""
Reproductor - Blob Store

Audio uploads live as flat files in a single directory.  The stored name
is generated on upload and never derived from user input beyond the
original file extension, so titles may contain anything without ever
touching the file system.

All I/O goes through aiofiles so no request blocks the event loop while
the disk is busy.
"""

import time
import uuid
from pathlib import Path, PurePosixPath
from typing import List

import aiofiles
import aiofiles.os
from loguru import logger

from reproductor.config import UPLOADS_URL_PREFIX


def generate_stored_name(original_filename: str) -> str:
    """
    Build a collision-resistant on-disk name for an upload.

    ``<unix-millis>-<random hex><ext>``: the timestamp keeps names roughly
    sortable by upload time, the random token keeps two uploads within the
    same millisecond apart.  The extension is taken from the original
    filename and lower-cased.
    """
    ext = PurePosixPath(original_filename.replace("\\", "/")).suffix.lower()
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}{ext}"


class BlobStore:
    """A directory of uploaded audio files."""

    def __init__(self, root: Path, url_prefix: str = UPLOADS_URL_PREFIX):
        self.root = Path(root)
        self.url_prefix = "/" + url_prefix.strip("/")

    # -----------------------------------------------------------------------
    # Naming
    # -----------------------------------------------------------------------
    def path_for(self, name: str) -> Path:
        """Absolute path of a blob.  Only the final path component is used."""
        safe = PurePosixPath(name.replace("\\", "/")).name
        if not safe or safe in {".", ".."}:
            raise ValueError(f"Invalid blob name: {name!r}")
        return self.root / safe

    def public_path(self, name: str) -> str:
        """Path clients use to fetch the blob, e.g. ``/uploads/<name>``."""
        return f"{self.url_prefix}/{name}"

    # -----------------------------------------------------------------------
    # I/O
    # -----------------------------------------------------------------------
    async def write(self, name: str, data: bytes) -> Path:
        """
        Write a new blob.

        The file is opened in exclusive-create mode, so an existing blob is
        never overwritten; a name clash raises ``FileExistsError``.
        """
        path = self.path_for(name)
        await aiofiles.os.makedirs(self.root, exist_ok=True)
        async with aiofiles.open(path, "xb") as f:
            await f.write(data)
        logger.debug("💾 Blob written: {} ({} bytes)", path.name, len(data))
        return path

    async def unlink(self, name: str) -> None:
        await aiofiles.os.remove(self.path_for(name))
        logger.debug("🗑️ Blob removed: {}", name)

    async def list_names(self) -> List[str]:
        """Names of every regular file currently in the directory."""
        names = await aiofiles.os.listdir(self.root)
        files = []
        for name in sorted(names):
            if await aiofiles.os.path.isfile(self.root / name):
                files.append(name)
        return files
