"""Storage-agnostic read contract consumed by the animation data core."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class FileListItem:
    """One directory entry, with ``path`` relative to the study root."""

    name: str
    path: str
    is_directory: bool


class ContentAccessor(ABC):
    """Boundary the core uses for every file read and directory listing.

    Implementations report unreadable content as ``None`` and never raise into
    the caller.
    """

    @abstractmethod
    async def read_file_as_text(self, relative_path: str) -> str | None:
        """Return the UTF-8 text of ``relative_path`` or ``None``."""

    @abstractmethod
    async def list_directory_contents(self, relative_path: str) -> list[FileListItem] | None:
        """Return the entries of ``relative_path`` or ``None`` if it cannot be listed."""

    @abstractmethod
    def resolve_full_path(self, relative_path: str) -> str:
        """Join ``relative_path`` onto the study root without touching storage."""
