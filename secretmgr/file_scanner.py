"""
Filesystem scanning.

This module is responsible for:
- walking a directory tree in a stable order
- yielding the regular files that substitution should look at

This module does NOT:
- read or rewrite file content
- know anything about secrets
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .errors import FilesystemError
from .utils import is_binary_file


class FileScanner:
    def __init__(self, root: str | Path, skip_binary: bool = False, ignore_dirs: Iterable[str] = ()):
        self.root = Path(root)
        self.skip_binary = skip_binary
        self.ignore_dirs = frozenset(ignore_dirs)

    def scan(self) -> Iterator[Path]:
        """
        Walk the tree and yield every regular file.

        A file root yields just that file. Directory entries are visited in
        name order; symlinks are neither followed nor yielded, so a link
        cycle cannot trap the walk. Directories named in ``ignore_dirs``
        are pruned.

        Raises:
            FilesystemError: if the root does not exist or a directory
                cannot be listed
        """

        if self.root.is_file():
            yield from self._filter(self.root)
            return

        if not self.root.is_dir():
            raise FilesystemError("Path not found", self.root)

        def on_error(err: OSError) -> None:
            raise FilesystemError("Cannot list directory", err.filename) from err

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=on_error, followlinks=False):
            dirnames[:] = sorted(d for d in dirnames if d not in self.ignore_dirs)
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if path.is_symlink() or not path.is_file():
                    continue
                yield from self._filter(path)

    def _filter(self, path: Path) -> Iterator[Path]:
        if self.skip_binary:
            try:
                binary = is_binary_file(path)
            except OSError as e:
                raise FilesystemError("Cannot read file", path) from e
            if binary:
                return
        yield path


def walk(root: str | Path, visit: Callable[[Path], None], skip_binary: bool = False) -> None:
    """Call ``visit`` once for every file under ``root``."""
    for path in FileScanner(root, skip_binary=skip_binary).scan():
        visit(path)
