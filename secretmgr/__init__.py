"""
uu-secret-manager

Keeps literal secret values out of a source tree by swapping them
for placeholder tokens, while the real values live in a single
password-encrypted vault file (Ansible Vault format).
"""

__version__ = "1.0.0"

from .errors import (
    SecretManagerError,
    VaultNotFound,
    WrongPassword,
    MalformedVaultFile,
    FilesystemError,
    ContentEncodingError,
)
from .store import SecretRecord, SecretStore, VaultContext, load_store, save_store, placeholder_for
from .transformer import Transformer, forward_apply, reverse_apply, hide_file, reveal_file
from .file_scanner import FileScanner, walk

__all__ = [
    "SecretManagerError",
    "VaultNotFound",
    "WrongPassword",
    "MalformedVaultFile",
    "FilesystemError",
    "ContentEncodingError",
    "SecretRecord",
    "SecretStore",
    "VaultContext",
    "load_store",
    "save_store",
    "placeholder_for",
    "Transformer",
    "forward_apply",
    "reverse_apply",
    "hide_file",
    "reveal_file",
    "FileScanner",
    "walk",
]
