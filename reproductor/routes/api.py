"""
Reproductor - JSON API Routes

Provides the REST endpoints used by the browser player:
- Upload an audio file (multipart)
- List songs / get one song
- Delete one song / delete every song
- Health check

Routes stay thin: each one calls the library service and turns a
``LibraryError`` into an ``HTTPException`` with the error's status code.
"""

import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from loguru import logger
from starlette.datastructures import UploadFile as StarletteUploadFile

from reproductor.config import APP_VERSION, UPLOAD_FIELD_NAME
from reproductor.errors import LibraryError, NotFound
from reproductor.models import Track
from reproductor.services.library import LibraryService

router = APIRouter(tags=["API"])

# Track startup time for health check
_START_TIME = time.time()


def get_library(request: Request) -> LibraryService:
    """The process-wide library service created in the app lifespan."""
    return request.app.state.library


def _http_error(exc: LibraryError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.detail)


def _parse_song_id(raw: str) -> int:
    """Song ids are integers; anything else names no song."""
    try:
        return int(raw)
    except ValueError:
        raise NotFound(f"Song {raw} not found") from None


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@router.get("/health")
async def health_check(library: LibraryService = Depends(get_library)):
    """Health check endpoint for the service."""
    uptime = round(time.time() - _START_TIME, 2)
    db_ok = library.metadata.is_open
    uploads_ok = library.blobs.root.is_dir()

    total: Optional[int] = None
    if db_ok:
        try:
            total = await library.count()
        except LibraryError:
            db_ok = False

    return {
        "status": "ok" if db_ok and uploads_ok else "degraded",
        "database": "ok" if db_ok else "unavailable",
        "uploads_dir": "ok" if uploads_ok else "missing",
        "uptime_seconds": uptime,
        "version": APP_VERSION,
        "total_songs": total,
    }


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------
@router.post("/upload", response_model=Track)
async def api_upload_song(
    request: Request,
    library: LibraryService = Depends(get_library),
):
    """
    Upload one audio file from the ``song`` multipart field.

    The file is stored under a generated name and registered with its
    original filename as the title.  No type or size checks are made.
    A missing field, or a field holding plain text instead of a file,
    answers 400.
    """
    async with request.form() as form:
        song = form.get(UPLOAD_FIELD_NAME)
        if not isinstance(song, StarletteUploadFile):
            song = None

        filename = song.filename if song is not None else None
        try:
            data = await song.read() if song is not None else None
            logger.info(
                "📤 Upload received: {} ({} bytes)",
                filename,
                len(data) if data is not None else 0,
            )
            return await library.upload(data, filename)
        except LibraryError as e:
            raise _http_error(e)
        except Exception as e:
            logger.exception("❌ Upload processing error: {}", e)
            raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}")


# ---------------------------------------------------------------------------
# Songs
# ---------------------------------------------------------------------------
@router.get("/songs", response_model=List[Track])
async def api_list_songs(library: LibraryService = Depends(get_library)):
    """List every song in insertion order."""
    try:
        return await library.list_tracks()
    except LibraryError as e:
        raise _http_error(e)


# Registered before /songs/{song_id} so "all" is never parsed as an id
@router.delete("/songs/all", response_class=PlainTextResponse)
async def api_delete_all_songs(library: LibraryService = Depends(get_library)):
    """Delete every file in the uploads directory and every song row."""
    try:
        await library.delete_all()
    except LibraryError as e:
        raise _http_error(e)
    return PlainTextResponse("All songs have been deleted.")


@router.get("/songs/{song_id}", response_model=Track)
async def api_get_song(song_id: str, library: LibraryService = Depends(get_library)):
    """Get a single song by ID."""
    try:
        return await library.get_track(_parse_song_id(song_id))
    except LibraryError as e:
        raise _http_error(e)


@router.delete("/songs/{song_id}", response_class=PlainTextResponse)
async def api_delete_song(song_id: str, library: LibraryService = Depends(get_library)):
    """Delete a song from the database and, best effort, its audio file."""
    try:
        await library.delete_one(_parse_song_id(song_id))
    except LibraryError as e:
        raise _http_error(e)
    return PlainTextResponse(f"Song {song_id} deleted successfully.")
