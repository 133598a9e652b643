"""
Secret store: the decrypted payload of the vault file.

The payload is a JSON object mapping an identifier to a secret
record. Older stores hold a bare string per entry instead of an
object; both shapes are accepted and normalized to ``SecretRecord``.

Responsibilities:
- Parse and serialize the JSON payload
- Mint identifiers for new secrets
- Load and save the store through the vault codec

This module does NOT:
- Walk the filesystem
- Rewrite file content
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from . import vault
from .config import KDF_ITERATIONS, PLACEHOLDER_PREFIX, PLACEHOLDER_SUFFIX
from .errors import FilesystemError, MalformedVaultFile, SecretManagerError, VaultNotFound
from .utils import atomic_write_bytes


def placeholder_for(identifier: str) -> str:
    """Return the placeholder token that stands in for a secret."""
    return f"{PLACEHOLDER_PREFIX}{identifier}{PLACEHOLDER_SUFFIX}"


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass
class SecretRecord:
    secret: str
    description: Optional[str] = None
    created: Optional[str] = None
    # True when read from a bare-string entry; kept so untouched
    # entries are written back in the same shape.
    legacy: bool = field(default=False, compare=False)

    @classmethod
    def from_json(cls, identifier: str, value: Any) -> "SecretRecord":
        if isinstance(value, str):
            return cls(secret=value, legacy=True)

        if not isinstance(value, dict) or not isinstance(value.get("secret"), str):
            raise MalformedVaultFile(f"Invalid record for secret {identifier!r}")

        description = value.get("description")
        created = value.get("created")
        return cls(
            secret=value["secret"],
            description=str(description) if description is not None else None,
            created=str(created) if created is not None else None,
        )

    def to_json(self) -> Any:
        if self.legacy and self.description is None and self.created is None:
            return self.secret

        data: Dict[str, str] = {"secret": self.secret}
        if self.description is not None:
            data["description"] = self.description
        if self.created is not None:
            data["created"] = self.created
        return data


class SecretStore:
    """Ordered mapping of identifier to ``SecretRecord``."""

    def __init__(self, records: Optional[Dict[str, SecretRecord]] = None):
        self.records: Dict[str, SecretRecord] = dict(records or {})

    # ------------------------------------------------------------------
    # Mapping helpers
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self.records

    def __getitem__(self, identifier: str) -> SecretRecord:
        return self.records[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self.records)

    def items(self) -> Iterator[Tuple[str, SecretRecord]]:
        return iter(self.records.items())

    def __repr__(self) -> str:
        # Never show secret values
        return f"SecretStore({len(self.records)} secrets)"

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, secret: str, description: Optional[str] = None) -> str:
        """
        Add a secret under a fresh random identifier.

        The same value added twice gets two identifiers; values are
        never deduplicated.

        Returns:
            str: the new identifier
        """

        if not secret:
            raise ValueError("Secret value must not be empty")

        identifier = str(uuid.uuid4())
        self.records[identifier] = SecretRecord(
            secret=secret,
            description=description or None,
            created=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )
        return identifier

    # ------------------------------------------------------------------
    # JSON payload
    # ------------------------------------------------------------------

    @classmethod
    def loads(cls, text: Optional[str]) -> "SecretStore":
        """
        Parse the decrypted JSON payload.

        Empty or missing content is an empty store, not an error.

        Raises:
            MalformedVaultFile: if the payload is not a JSON object of records
        """

        if text is None or not text.strip():
            return cls()

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedVaultFile("Secret store is not valid JSON") from e

        if not isinstance(raw, dict):
            raise MalformedVaultFile("Secret store must be a JSON object")

        return cls({str(k): SecretRecord.from_json(str(k), v) for k, v in raw.items()})

    def dumps(self) -> str:
        return json.dumps(
            {identifier: record.to_json() for identifier, record in self.records.items()},
            indent=2,
            ensure_ascii=False,
        )


# ---------------------------------------------------------------------------
# Vault file boundary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VaultContext:
    """Everything needed to open one vault file."""

    path: Path
    password: str = field(repr=False)
    iterations: int = KDF_ITERATIONS
    vault_id: Optional[str] = None


def load_store(ctx: VaultContext, missing_ok: bool = False) -> SecretStore:
    """
    Read, decrypt and parse the vault file.

    A missing file is an error unless ``missing_ok`` is set, in which
    case an empty store is returned. An empty file is an empty store.

    Raises:
        VaultNotFound, WrongPassword, MalformedVaultFile, FilesystemError
    """

    path = Path(ctx.path)
    try:
        data = path.read_bytes()
    except FileNotFoundError as e:
        if missing_ok:
            return SecretStore()
        raise VaultNotFound("Vault file not found (no such file)", path) from e
    except OSError as e:
        raise FilesystemError("Cannot read vault file", path) from e

    if not data.strip():
        return SecretStore()

    try:
        plaintext = vault.decrypt(data, ctx.password, ctx.iterations)
        text = plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedVaultFile("Decrypted vault payload is not UTF-8", path) from e
    except SecretManagerError as e:
        e.path = path
        raise

    try:
        return SecretStore.loads(text)
    except MalformedVaultFile as e:
        e.path = path
        raise


def save_store(ctx: VaultContext, store: SecretStore) -> None:
    """Encrypt the whole store and replace the vault file atomically."""

    path = Path(ctx.path)
    data = vault.encrypt(
        store.dumps().encode("utf-8"),
        ctx.password,
        iterations=ctx.iterations,
        vault_id=ctx.vault_id,
    )
    try:
        atomic_write_bytes(path, data)
    except OSError as e:
        raise FilesystemError("Cannot write vault file", path) from e


def vault_exists(ctx: VaultContext) -> bool:
    return Path(ctx.path).is_file()
