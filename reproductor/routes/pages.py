"""
Reproductor - Page Routes

Serves the browser player: a single Jinja2 page listing every track with
its ``/uploads`` path and delete buttons.  ``static/player.js`` drives the
shared ``<audio>`` element (next, previous, auto-advance), uploads several
files at once and calls the delete endpoints, alerting on any failure.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from reproductor.config import APP_VERSION, UPLOAD_FIELD_NAME
from reproductor.errors import LibraryError
from reproductor.routes.api import get_library
from reproductor.services.library import LibraryService

router = APIRouter(tags=["Pages"])


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, library: LibraryService = Depends(get_library)):
    """Playlist page."""
    error = None
    try:
        tracks = await library.list_tracks()
    except LibraryError as e:
        tracks = []
        error = e.detail

    context = {
        "page_title": "Playlist",
        "tracks": tracks,
        "error": error,
        "upload_field": UPLOAD_FIELD_NAME,
        "version": APP_VERSION,
    }
    return request.app.state.templates.TemplateResponse(request, "index.html", context)
