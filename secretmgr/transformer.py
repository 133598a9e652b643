"""
Content transformation: secrets to placeholders and back.

``hide`` swaps every literal secret for its placeholder token and
``reveal`` swaps placeholders back. Both work in a single regex pass,
so text produced by one replacement is never matched again.

When one secret is a substring of another, the longer one wins:
alternatives are tried longest first at every position.

This module is intentionally dumb about policy and filesystem
traversal; it only knows how to rewrite one piece of text or one file.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional, Pattern, Tuple

from .errors import ContentEncodingError, FilesystemError
from .store import SecretStore, placeholder_for
from .utils import atomic_write_bytes


def _build_pattern(mapping: Dict[str, str]) -> Optional[Pattern[str]]:
    if not mapping:
        return None
    needles = sorted(mapping, key=len, reverse=True)
    return re.compile("|".join(re.escape(n) for n in needles))


def _substitute(content: str, pattern: Optional[Pattern[str]], mapping: Dict[str, str]) -> Tuple[str, bool]:
    if pattern is None:
        return content, False
    new_content, count = pattern.subn(lambda m: mapping[m.group(0)], content)
    return new_content, count > 0


class Transformer:
    def __init__(self, store: SecretStore, dry_run: bool = False):
        self.store = store
        self.dry_run = dry_run

        self._hide_map: Dict[str, str] = {}
        self._reveal_map: Dict[str, str] = {}
        for identifier, record in store.items():
            if not record.secret:
                continue
            # Same literal under two ids: the first one added keeps it
            self._hide_map.setdefault(record.secret, placeholder_for(identifier))
            self._reveal_map[placeholder_for(identifier)] = record.secret

        self._hide_pattern = _build_pattern(self._hide_map)
        self._reveal_pattern = _build_pattern(self._reveal_map)

    # ------------------------------------------------------------------
    # Text API
    # ------------------------------------------------------------------

    def hide(self, content: str) -> Tuple[str, bool]:
        """Replace every secret with its placeholder. Returns (content, changed)."""
        return _substitute(content, self._hide_pattern, self._hide_map)

    def reveal(self, content: str) -> Tuple[str, bool]:
        """Replace every known placeholder with its secret. Returns (content, changed)."""
        return _substitute(content, self._reveal_pattern, self._reveal_map)

    # ------------------------------------------------------------------
    # File API
    # ------------------------------------------------------------------

    def hide_file(self, path: Path) -> bool:
        """
        Replace secrets in a file in place.
        The file is only written when something changed.
        """
        return self._rewrite(Path(path), self.hide)

    def reveal_file(self, path: Path) -> bool:
        """
        Restore secrets in a file in place.
        """
        return self._rewrite(Path(path), self.reveal)

    def _rewrite(self, path: Path, apply) -> bool:
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise FilesystemError("Cannot read file", path) from e

        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ContentEncodingError("File is not valid UTF-8", path) from e

        new_content, changed = apply(content)
        if changed and not self.dry_run:
            try:
                atomic_write_bytes(path, new_content.encode("utf-8"))
            except OSError as e:
                raise FilesystemError("Cannot write file", path) from e
        return changed


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def forward_apply(content: str, store: SecretStore) -> Tuple[str, bool]:
    return Transformer(store).hide(content)


def reverse_apply(content: str, store: SecretStore) -> Tuple[str, bool]:
    return Transformer(store).reveal(content)


def hide_file(path: str | Path, store: SecretStore) -> bool:
    return Transformer(store).hide_file(Path(path))


def reveal_file(path: str | Path, store: SecretStore) -> bool:
    return Transformer(store).reveal_file(Path(path))
