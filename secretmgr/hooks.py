"""
Git pre-commit hook installation.

The installed hook runs ``check`` over the working tree before each
commit and blocks the commit if a known secret is still present in
plain text. An existing foreign hook is backed up, never overwritten.
"""

from __future__ import annotations

import shutil
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import HOOK_MARKER
from .errors import FilesystemError, SecretManagerError

HOOK_SCRIPT = f"""#!/bin/sh
# {HOOK_MARKER} pre-commit hook
# Blocks the commit if tracked secrets appear in plain text.
# Bypass (not recommended): git commit --no-verify

exec python -m secretmgr check . < /dev/tty
"""


@dataclass(frozen=True)
class HookInstallResult:
    hook_path: Path
    installed: bool
    backup_path: Optional[Path] = None

    @property
    def already_installed(self) -> bool:
        return not self.installed


def install_hook(repo_root: str | Path = ".") -> HookInstallResult:
    """
    Install the pre-commit hook into ``<repo_root>/.git/hooks``.

    Raises:
        SecretManagerError: if ``repo_root`` is not a git repository
        FilesystemError: if the hook cannot be written
    """

    repo_root = Path(repo_root)
    git_dir = repo_root / ".git"
    if not git_dir.is_dir():
        raise SecretManagerError("Not a git repository", repo_root.resolve())

    hooks_dir = git_dir / "hooks"
    hook_path = hooks_dir / "pre-commit"
    backup_path: Optional[Path] = None

    try:
        hooks_dir.mkdir(parents=True, exist_ok=True)

        if hook_path.exists():
            existing = hook_path.read_text(encoding="utf-8", errors="replace")
            if HOOK_MARKER in existing:
                return HookInstallResult(hook_path=hook_path, installed=False)

            backup_path = hook_path.with_name(hook_path.name + ".backup")
            shutil.copy2(hook_path, backup_path)

        hook_path.write_text(HOOK_SCRIPT, encoding="utf-8")
        mode = hook_path.stat().st_mode
        hook_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH | stat.S_IRUSR)
    except OSError as e:
        raise FilesystemError("Cannot install pre-commit hook", hook_path) from e

    return HookInstallResult(hook_path=hook_path, installed=True, backup_path=backup_path)
