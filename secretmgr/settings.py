"""
Project settings loading, validation, and normalization.

This module answers one question:
    "Where is the vault, and how should it be opened?"

Responsibilities:
- Load the optional settings YAML file
- Validate structure and version
- Normalize defaults

Example ``.secretmgr.yml``::

    version: 1
    store: config/secrets.json
    kdf_iterations: 10000
    vault_id: dev
    skip_binary: true
    ignore: [.git, node_modules]

This module does NOT:
- Decrypt anything
- Walk the filesystem
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .config import (
    DEFAULT_IGNORED_DIRS,
    DEFAULT_SETTINGS_FILE,
    DEFAULT_STORE_PATH,
    KDF_ITERATIONS,
    SUPPORTED_SETTINGS_VERSION,
)
from .errors import SecretManagerError


@dataclass(frozen=True)
class Settings:
    store: str = DEFAULT_STORE_PATH
    kdf_iterations: int = KDF_ITERATIONS
    vault_id: Optional[str] = None
    skip_binary: bool = True
    ignore: Tuple[str, ...] = DEFAULT_IGNORED_DIRS

    # ------------------------------------------------------------------
    # Loading API
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Optional[str | Path] = None) -> "Settings":
        """
        Load and validate a settings file.

        Args:
            path: explicit settings file; when omitted, ``.secretmgr.yml``
                in the working directory is used if present

        Raises:
            SecretManagerError: if an explicit file is missing or any
                file is invalid

        Returns:
            Settings
        """

        if path is None:
            path = Path(DEFAULT_SETTINGS_FILE)
            if not path.exists():
                return cls()

        path = Path(path)
        if not path.exists():
            raise SecretManagerError("Settings file not found", path)

        try:
            with path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as e:
            raise SecretManagerError("Settings file is not valid YAML", path) from e

        if not isinstance(raw, dict):
            raise SecretManagerError("Settings file must be a mapping", path)

        return cls._from_dict(raw, path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @classmethod
    def _from_dict(cls, data: Dict[str, Any], path: Path) -> "Settings":
        version = data.get("version", SUPPORTED_SETTINGS_VERSION)
        if version != SUPPORTED_SETTINGS_VERSION:
            raise SecretManagerError(f"Unsupported settings version {version}", path)

        iterations = data.get("kdf_iterations", KDF_ITERATIONS)
        if not isinstance(iterations, int) or isinstance(iterations, bool) or iterations < 1:
            raise SecretManagerError("'kdf_iterations' must be a positive integer", path)

        vault_id = data.get("vault_id")
        if vault_id is not None:
            vault_id = str(vault_id)
            if ";" in vault_id or "\n" in vault_id:
                raise SecretManagerError("'vault_id' must not contain ';' or newlines", path)

        ignore = data.get("ignore", list(DEFAULT_IGNORED_DIRS))
        if not isinstance(ignore, list) or not all(isinstance(d, str) for d in ignore):
            raise SecretManagerError("'ignore' must be a list of directory names", path)

        return cls(
            store=str(data.get("store") or DEFAULT_STORE_PATH),
            kdf_iterations=iterations,
            vault_id=vault_id or None,
            skip_binary=bool(data.get("skip_binary", True)),
            ignore=tuple(ignore),
        )

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    def store_path(self, override: Optional[str] = None) -> Path:
        """Return the vault path, preferring a command-line override."""
        return Path(override or self.store).expanduser().resolve()
