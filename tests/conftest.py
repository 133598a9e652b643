"""Shared test fixtures."""

from __future__ import annotations

import getpass
from types import SimpleNamespace

import pytest

from secretmgr.store import SecretRecord, SecretStore, VaultContext

PASSWORD = "testpassword"


@pytest.fixture
def store():
    """One secret, sk-ABC, stored under id1."""
    return SecretStore({"id1": SecretRecord(secret="sk-ABC")})


@pytest.fixture
def vault_ctx(tmp_path):
    return VaultContext(path=tmp_path / "secrets.json", password=PASSWORD)


@pytest.fixture
def prompts(monkeypatch):
    """
    Answer getpass prompts from a dict keyed by prompt text.

    Both password prompts answer PASSWORD unless overridden; the
    prompts seen are recorded under ``asked``.
    """

    answers = {
        "Vault password: ": PASSWORD,
        "Confirm vault password: ": PASSWORD,
    }
    asked = []

    def fake_getpass(prompt="Password: ", stream=None):
        asked.append(prompt)
        return answers[prompt]

    monkeypatch.setattr(getpass, "getpass", fake_getpass)
    return SimpleNamespace(answers=answers, asked=asked)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run in an empty directory so no stray settings file is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
