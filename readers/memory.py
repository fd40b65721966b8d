"""In-memory content accessor for tests and embedded studies."""

from __future__ import annotations

from collections import Counter
from pathlib import PurePosixPath
from typing import Mapping

from animation.content_accessor import ContentAccessor, FileListItem


def _normalize(relative_path: str) -> str:
    path = str(PurePosixPath(relative_path.removeprefix("./")))
    return "" if path == "." else path


class InMemoryContentAccessor(ContentAccessor):
    """Serves a fixed mapping of relative POSIX paths to text.

    Directories exist implicitly for every prefix of a stored path. Reads are
    counted per path in ``read_counts``.
    """

    def __init__(self, files: Mapping[str, str], root: str = "memory://study") -> None:
        self.files = {_normalize(path): text for path, text in files.items()}
        self.root = root
        self.read_counts: Counter[str] = Counter()

    def resolve_full_path(self, relative_path: str) -> str:
        normalized = _normalize(relative_path)
        return f"{self.root}/{normalized}" if normalized else self.root

    async def read_file_as_text(self, relative_path: str) -> str | None:
        path = _normalize(relative_path)
        self.read_counts[path] += 1
        return self.files.get(path)

    async def list_directory_contents(self, relative_path: str) -> list[FileListItem] | None:
        base = _normalize(relative_path)
        prefix = f"{base}/" if base else ""
        children: dict[str, bool] = {}
        for path in self.files:
            if not path.startswith(prefix):
                continue
            remainder = path[len(prefix):]
            name, _, rest = remainder.partition("/")
            children[name] = children.get(name, False) or bool(rest)
        if not children:
            return None
        return [
            FileListItem(name=name, path=f"{prefix}{name}", is_directory=is_directory)
            for name, is_directory in sorted(children.items())
        ]
