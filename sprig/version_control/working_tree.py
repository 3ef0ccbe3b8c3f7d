"""
Access to the files of the working directory.

Paths are repository-relative POSIX strings; the metadata directory is
never listed or touched.
"""

import os
from pathlib import Path
from typing import List

from .errors import ValidationError

OUTSIDE_WORKING_TREE = "That path is not in the working directory."


class WorkingTree:
    """Reads and writes the user's files under a repository root."""

    def __init__(self, root: Path, metadata_dir: str = ".sprig"):
        self.root = Path(os.path.abspath(root))
        self.metadata_dir = metadata_dir

    def _path(self, path: str) -> Path:
        return self.root / path

    def normalize(self, path: str) -> str:
        """
        Canonical repository-relative form of a user-supplied path.

        ``./a.txt``, ``sub/../a.txt`` and an absolute path under the root
        all map to ``a.txt``.

        Raises:
            ValidationError: If the path leaves the root, is the root itself,
                or points into the metadata directory
        """
        candidate = Path(os.path.normpath(self.root / path))
        try:
            relative = candidate.relative_to(self.root)
        except ValueError:
            raise ValidationError(OUTSIDE_WORKING_TREE) from None
        if not relative.parts or relative.parts[0] == self.metadata_dir:
            raise ValidationError(OUTSIDE_WORKING_TREE)
        return relative.as_posix()

    def list_files(self) -> List[str]:
        """All regular files below the root, sorted, excluding metadata."""
        files = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            current = Path(dirpath)
            if current == self.root and self.metadata_dir in dirnames:
                dirnames.remove(self.metadata_dir)
            for name in filenames:
                files.append((current / name).relative_to(self.root).as_posix())
        return sorted(files)

    def exists(self, path: str) -> bool:
        return self._path(path).is_file()

    def read(self, path: str) -> bytes:
        return self._path(path).read_bytes()

    def write(self, path: str, content: bytes) -> None:
        target = self._path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    def delete(self, path: str) -> None:
        """Remove a file and any parent directories it leaves empty."""
        target = self._path(path)
        if not target.is_file():
            return
        target.unlink()
        parent = target.parent
        while parent != self.root and not any(parent.iterdir()):
            parent.rmdir()
            parent = parent.parent
