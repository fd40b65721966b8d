"""Local file-system implementation of the content accessor."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath

from animation.content_accessor import ContentAccessor, FileListItem

LOGGER = logging.getLogger(__name__)


class StudyRootNotFoundError(FileNotFoundError):
    """Raised when the configured study root does not exist."""


def _strip_current_dir(relative_path: str) -> str:
    return relative_path.removeprefix("./")


class FileSystemContentAccessor(ContentAccessor):
    """Reads study files below ``study_root`` off the event loop thread."""

    def __init__(self, study_root: str | Path) -> None:
        self.study_root = Path(study_root).resolve()
        if not self.study_root.exists():
            raise StudyRootNotFoundError(f"Study root path does not exist: {self.study_root}")

    def resolve_full_path(self, relative_path: str) -> str:
        return str(self.study_root / _strip_current_dir(relative_path))

    async def read_file_as_text(self, relative_path: str) -> str | None:
        full_path = Path(self.resolve_full_path(relative_path))
        try:
            return await asyncio.to_thread(full_path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Error reading file %s: %s", full_path, exc)
            return None

    async def list_directory_contents(self, relative_path: str) -> list[FileListItem] | None:
        full_path = Path(self.resolve_full_path(relative_path))
        try:
            entries = await asyncio.to_thread(
                lambda: sorted((entry.name, entry.is_dir()) for entry in full_path.iterdir())
            )
        except OSError as exc:
            LOGGER.warning("Error listing directory %s: %s", full_path, exc)
            return None

        base = PurePosixPath(_strip_current_dir(relative_path))
        return [
            FileListItem(name=name, path=str(base / name), is_directory=is_directory)
            for name, is_directory in entries
        ]
