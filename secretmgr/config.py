"""
Global constants and defaults.

This module is responsible for:
- Defining the vault file format constants
- Defining global defaults used by the CLI and the store
- Exposing the placeholder token format

Nothing in this file should depend on:
- the filesystem
- the settings file
- CLI arguments

If something here changes, the *entire tool* behavior changes.
The vault constants in particular must stay compatible with
Ansible Vault, otherwise existing stores become unreadable.
"""

from __future__ import annotations

from typing import Final, Tuple

# ---------------------------------------------------------------------------
# Tool / format versioning
# ---------------------------------------------------------------------------

TOOL_NAME: Final[str] = "uu-secret-manager"
TOOL_VERSION: Final[str] = "1.0.0"
SUPPORTED_SETTINGS_VERSION: Final[int] = 1

# ---------------------------------------------------------------------------
# Vault format (Ansible Vault, AES256 cipher)
# ---------------------------------------------------------------------------

VAULT_TAG: Final[str] = "$ANSIBLE_VAULT"
VAULT_VERSION: Final[str] = "1.1"
VAULT_VERSION_WITH_ID: Final[str] = "1.2"
SUPPORTED_VAULT_VERSIONS: Final[Tuple[str, ...]] = (VAULT_VERSION, VAULT_VERSION_WITH_ID)
VAULT_CIPHER: Final[str] = "AES256"

VAULT_SALT_SIZE: Final[int] = 32
AES_KEY_SIZE: Final[int] = 32
HMAC_KEY_SIZE: Final[int] = 32
AES_BLOCK_SIZE: Final[int] = 16
KDF_ITERATIONS: Final[int] = 10000

# Width of the hex lines in the vault body
VAULT_LINE_WIDTH: Final[int] = 80

# ---------------------------------------------------------------------------
# Placeholders
# ---------------------------------------------------------------------------

PLACEHOLDER_PREFIX: Final[str] = "<!secret_"
PLACEHOLDER_SUFFIX: Final[str] = "!>"

# ---------------------------------------------------------------------------
# Default behavior
# ---------------------------------------------------------------------------

DEFAULT_STORE_PATH: Final[str] = "secrets.json"
DEFAULT_SETTINGS_FILE: Final[str] = ".secretmgr.yml"
BINARY_SAMPLE_SIZE: Final[int] = 1024

# Directory names never descended into by replace/reverse/check
DEFAULT_IGNORED_DIRS: Final[Tuple[str, ...]] = (".git",)

# Marker written into the pre-commit hook so reinstalls are detected
HOOK_MARKER: Final[str] = TOOL_NAME
