"""Tests for secretmgr.hooks — pre-commit hook installation."""

import os

import pytest

from secretmgr.config import HOOK_MARKER
from secretmgr.errors import SecretManagerError
from secretmgr.hooks import install_hook


@pytest.fixture
def repo(tmp_path):
    (tmp_path / ".git").mkdir()
    return tmp_path


def test_not_a_git_repository(tmp_path):
    with pytest.raises(SecretManagerError):
        install_hook(tmp_path)


def test_installs_executable_hook(repo):
    result = install_hook(repo)

    hook = repo / ".git" / "hooks" / "pre-commit"
    assert result.installed
    assert result.hook_path == hook
    assert result.backup_path is None
    assert HOOK_MARKER in hook.read_text()
    assert "check" in hook.read_text()
    if os.name != "nt":
        assert os.access(hook, os.X_OK)


def test_second_install_is_noop(repo):
    install_hook(repo)
    result = install_hook(repo)
    assert result.already_installed
    assert not (repo / ".git" / "hooks" / "pre-commit.backup").exists()


def test_foreign_hook_backed_up(repo):
    hooks = repo / ".git" / "hooks"
    hooks.mkdir()
    (hooks / "pre-commit").write_text("#!/bin/sh\nrun-linter\n")

    result = install_hook(repo)

    assert result.installed
    assert result.backup_path == hooks / "pre-commit.backup"
    assert result.backup_path.read_text() == "#!/bin/sh\nrun-linter\n"
    assert HOOK_MARKER in (hooks / "pre-commit").read_text()
