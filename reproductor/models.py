"""
Reproductor - Track model
"""

from pathlib import PurePosixPath
from typing import Any, Mapping

from pydantic import BaseModel


class Track(BaseModel):
    """A row of the ``songs`` table as returned to clients."""

    id: int
    title: str
    file_path: str

    @property
    def stored_name(self) -> str:
        """On-disk filename of the blob, derived from the public path."""
        return PurePosixPath(self.file_path).name

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Track":
        """Build a Track from a database row (``aiosqlite.Row`` or dict)."""
        return cls(
            id=row["id"],
            title=row["title"] or "",
            file_path=row["file_path"] or "",
        )
