"""
Reproductor - Configuration
All settings loaded from environment variables with sensible defaults.

Persistent data is two things on local disk: the uploads directory that
holds the audio blobs, and the SQLite database that holds one row per
track.  Both default to a ``data/`` folder next to the package.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
_ = load_dotenv()

# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "3000"))
APP_ENV = os.getenv("APP_ENV", "development")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

# Comma separated list of allowed origins for the browser player
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent

DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))

# Audio blobs, served back to the player under UPLOADS_URL_PREFIX
UPLOADS_DIR = Path(os.getenv("UPLOADS_DIR", str(DATA_DIR / "uploads")))
UPLOADS_URL_PREFIX = "/uploads"

DB_PATH = Path(os.getenv("DB_PATH", str(DATA_DIR / "music.db")))

TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

# ---------------------------------------------------------------------------
# Upload form
# ---------------------------------------------------------------------------
# Name of the multipart field that carries the audio file
UPLOAD_FIELD_NAME = os.getenv("UPLOAD_FIELD_NAME", "song")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
# Optional log file; leave empty for stdout only
LOG_FILE = os.getenv("LOG_FILE", "")
LOG_FILE_SIZE = os.getenv("LOG_FILE_SIZE", "10 MB")
LOG_RETENTION = os.getenv("LOG_RETENTION", "7 days")


def ensure_directories(
    uploads_dir: Path = UPLOADS_DIR, db_path: Path = DB_PATH
) -> None:
    """Create the uploads directory and the database parent directory."""
    uploads_dir.mkdir(parents=True, exist_ok=True)
    db_path.parent.mkdir(parents=True, exist_ok=True)
