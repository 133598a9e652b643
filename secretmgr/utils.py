"""
Shared utility helpers.

This module contains small, reusable helpers that do not belong
to the vault format, the secret store, or substitution.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import List

from .config import BINARY_SAMPLE_SIZE


# ---------------------------------------------------------------------------
# Byte helpers
# ---------------------------------------------------------------------------


def chunk_bytes(data: bytes, size: int) -> List[bytes]:
    """Split bytes into fixed-size chunks."""
    return [data[i : i + size] for i in range(0, len(data), size)]


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------


def is_binary_file(path: Path, sample_size: int = BINARY_SAMPLE_SIZE) -> bool:
    """Heuristically determine whether a file is binary."""
    with path.open("rb") as fh:
        sample = fh.read(sample_size)
    return b"\x00" in sample


def ensure_parent_dir(path: Path) -> None:
    """Ensure the parent directory of a file exists."""
    path.parent.mkdir(parents=True, exist_ok=True)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """
    Replace the content of ``path`` without ever leaving it truncated.

    The data goes to a temporary file in the same directory which is then
    renamed over the target. Permission bits of an existing target are kept.
    """

    path = Path(path)
    ensure_parent_dir(path)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        if path.exists():
            os.chmod(tmp, path.stat().st_mode & 0o7777)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
