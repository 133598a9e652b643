"""
Error taxonomy.

Every failure the tool reports to the user is one of these.
The CLI maps them to cause-specific messages; nothing below
the CLI recovers from them on its own.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class SecretManagerError(RuntimeError):
    """Base class for all expected failures."""

    def __init__(self, message: str, path: Optional[str | Path] = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        text = self.message
        if self.path is not None:
            text = f"{text}: {self.path}"
        if self.__cause__ is not None:
            text = f"{text} ({self.__cause__})"
        return text


class VaultNotFound(SecretManagerError):
    """The vault file does not exist."""


class WrongPassword(SecretManagerError):
    """The vault HMAC did not verify with the given password."""


class MalformedVaultFile(SecretManagerError):
    """The vault file or its decrypted payload cannot be parsed."""


class FilesystemError(SecretManagerError):
    """Reading or writing a file failed."""


class ContentEncodingError(SecretManagerError):
    """A file selected for substitution is not valid UTF-8."""
