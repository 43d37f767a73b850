"""
Reproductor - SQLite Metadata Store

One ``songs`` table maps a track id to its display title and the public
path of its audio blob.  A single aiosqlite connection is opened when the
application starts and closed on shutdown; every route shares it through
the library service.

Errors are not caught here: ``aiosqlite.Error`` (an alias of
``sqlite3.Error``) propagates to the service layer, which maps it to the
library error taxonomy.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import aiosqlite
from loguru import logger

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS songs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT,
    file_path TEXT
);
"""


# ---------------------------------------------------------------------------
# Helper: convert aiosqlite.Row to plain dict
# ---------------------------------------------------------------------------
def row_to_dict(row) -> Dict[str, Any]:
    """Convert a database row to a plain dictionary."""
    if row is None:
        return {}
    return dict(row)


class MetadataStore:
    """Process-wide handle on the songs database."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._db: Optional[aiosqlite.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._db is not None

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("MetadataStore is not open")
        return self._db

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------
    async def open(self) -> None:
        """Connect, install the row factory and create the schema."""
        if self._db is not None:
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._db = await aiosqlite.connect(str(self.db_path))
            self._db.row_factory = aiosqlite.Row
            await self._db.executescript(SCHEMA_SQL)
            await self._db.commit()
        except Exception as e:
            logger.critical("❌ Failed to initialize database: {}", e)
            if self._db is not None:
                await self._db.close()
                self._db = None
            raise
        logger.success("✅ Database initialized at {}", self.db_path)

    async def close(self) -> None:
        if self._db is None:
            return
        await self._db.close()
        self._db = None
        logger.info("🔒 Database connection closed")

    # -----------------------------------------------------------------------
    # CRUD operations
    # -----------------------------------------------------------------------
    async def insert(self, title: str, file_path: str) -> int:
        """Insert a song row and return its id."""
        cursor = await self.db.execute(
            "INSERT INTO songs (title, file_path) VALUES (?, ?)",
            (title, file_path),
        )
        await self.db.commit()
        song_id = cursor.lastrowid or 0
        logger.success("✅ Song added (id={}): {}", song_id, title)
        return song_id

    async def select_all(self) -> List[Dict[str, Any]]:
        """Return every song in natural row order."""
        cursor = await self.db.execute("SELECT * FROM songs")
        rows = await cursor.fetchall()
        return [row_to_dict(r) for r in rows]

    async def select_by_id(self, song_id: int) -> Optional[Dict[str, Any]]:
        """Fetch a single song by its id."""
        cursor = await self.db.execute("SELECT * FROM songs WHERE id = ?", (song_id,))
        row = await cursor.fetchone()
        return row_to_dict(row) if row else None

    async def delete_by_id(self, song_id: int) -> int:
        """Delete a song by id. Returns the number of rows affected."""
        cursor = await self.db.execute("DELETE FROM songs WHERE id = ?", (song_id,))
        await self.db.commit()
        deleted = cursor.rowcount
        if deleted:
            logger.info("🗑️ Song id={} deleted from database", song_id)
        else:
            logger.warning("⚠️ Song id={} not found for deletion", song_id)
        return deleted

    async def delete_all(self) -> int:
        """Delete every song. Returns the number of rows affected."""
        cursor = await self.db.execute("DELETE FROM songs")
        await self.db.commit()
        deleted = cursor.rowcount
        logger.info(
            "🗑️ All songs deleted from database ({} row{})",
            deleted,
            "s" if deleted != 1 else "",
        )
        return deleted

    async def count(self) -> int:
        """Return the total number of songs."""
        cursor = await self.db.execute("SELECT COUNT(*) as cnt FROM songs")
        row = await cursor.fetchone()
        return row["cnt"] if row else 0
