"""
Reproductor - Pytest Configuration & Shared Fixtures

Provides reusable fixtures for:
- Temporary uploads directory and database path
- Blob store / metadata store / library service wired to those paths
- A FastAPI TestClient running the full application lifespan
- Sample audio payloads
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import pytest
from fastapi.testclient import TestClient

from reproductor.database import MetadataStore
from reproductor.main import create_app
from reproductor.services.library import LibraryService
from reproductor.storage import BlobStore

# 128 bytes that look vaguely like an MP3 frame header followed by padding
SAMPLE_AUDIO = b"ID3\x04\x00\x00\x00\x00\x00\x00" + bytes(range(118))


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    d = tmp_path / "uploads"
    d.mkdir()
    return d


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "db" / "music.db"


@pytest.fixture
def sample_audio() -> bytes:
    return SAMPLE_AUDIO


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@pytest.fixture
def blob_store(uploads_dir: Path) -> BlobStore:
    return BlobStore(uploads_dir)


@pytest.fixture
def open_library(uploads_dir: Path, db_path: Path):
    """
    Return an async context manager yielding a LibraryService with an open
    metadata store.

    aiosqlite connections must be opened and closed on the loop that uses
    them, so tests enter this inside the coroutine they pass to ``asyncio.run``.
    """

    @asynccontextmanager
    async def _open() -> AsyncIterator[LibraryService]:
        metadata = MetadataStore(db_path)
        await metadata.open()
        try:
            yield LibraryService(BlobStore(uploads_dir), metadata)
        finally:
            await metadata.close()

    return _open


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest.fixture
def client(uploads_dir: Path, db_path: Path):
    """TestClient with the lifespan running (stores open)."""
    app = create_app(uploads_dir=uploads_dir, db_path=db_path)
    with TestClient(app) as c:
        yield c
