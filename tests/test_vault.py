"""Tests for secretmgr.vault — the Ansible Vault codec."""

import binascii
import hashlib
import hmac
import os

import pytest
from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad

from secretmgr import vault
from secretmgr.errors import MalformedVaultFile, WrongPassword

PASSWORD = "testpassword"


def _split_body(data: bytes):
    lines = data.decode("ascii").splitlines()
    inner = binascii.unhexlify("".join(lines[1:]))
    salt_hex, mac_hex, ct_hex = inner.split(b"\n")
    return binascii.unhexlify(salt_hex), mac_hex, binascii.unhexlify(ct_hex)


def _reference_keys(password: str, salt: bytes, iterations: int = 10000):
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations, dklen=80)
    return derived[:32], derived[32:64], derived[64:]


class TestRoundTrip:
    def test_encrypt_then_decrypt(self):
        plaintext = b'{"id1": {"secret": "sk-ABC"}}'
        assert vault.decrypt(vault.encrypt(plaintext, PASSWORD), PASSWORD) == plaintext

    def test_unicode_password_and_payload(self):
        plaintext = "clé secrète ✓".encode("utf-8")
        data = vault.encrypt(plaintext, "pässwörd")
        assert vault.decrypt(data, "pässwörd") == plaintext

    def test_block_aligned_payload(self):
        plaintext = b"x" * 32
        assert vault.decrypt(vault.encrypt(plaintext, PASSWORD), PASSWORD) == plaintext

    def test_fresh_salt_every_time(self):
        first = vault.encrypt(b"same", PASSWORD)
        second = vault.encrypt(b"same", PASSWORD)
        assert first != second
        assert _split_body(first)[0] != _split_body(second)[0]

    def test_custom_iterations(self):
        data = vault.encrypt(b"payload", PASSWORD, iterations=1000)
        assert vault.decrypt(data, PASSWORD, iterations=1000) == b"payload"
        with pytest.raises(WrongPassword):
            vault.decrypt(data, PASSWORD)


class TestFormat:
    def test_header_line(self):
        data = vault.encrypt(b"payload", PASSWORD)
        assert data.splitlines()[0] == b"$ANSIBLE_VAULT;1.1;AES256"

    def test_body_wrapped_at_80_columns(self):
        data = vault.encrypt(b"a" * 500, PASSWORD)
        body = data.splitlines()[1:]
        assert len(body) > 1
        assert all(len(line) <= 80 for line in body)
        assert all(len(line) == 80 for line in body[:-1])
        assert data.endswith(b"\n")

    def test_vault_id_uses_version_1_2(self):
        data = vault.encrypt(b"payload", PASSWORD, vault_id="dev")
        assert data.splitlines()[0] == b"$ANSIBLE_VAULT;1.2;AES256;dev"
        assert vault.parse_envelope(data).vault_id == "dev"
        assert vault.decrypt(data, PASSWORD) == b"payload"

    def test_salt_is_32_bytes(self):
        salt, _, _ = _split_body(vault.encrypt(b"payload", PASSWORD))
        assert len(salt) == 32

    def test_is_encrypted(self):
        assert vault.is_encrypted(vault.encrypt(b"payload", PASSWORD))
        assert not vault.is_encrypted(b'{"id1": "sk-ABC"}')


class TestInterop:
    def test_output_matches_reference_derivation(self):
        plaintext = b'{"k": "v"}'
        data = vault.encrypt(plaintext, PASSWORD)
        salt, mac_hex, ciphertext = _split_body(data)

        aes_key, hmac_key, counter_block = _reference_keys(PASSWORD, salt)
        assert hmac.new(hmac_key, ciphertext, hashlib.sha256).hexdigest().encode() == mac_hex

        cipher = AES.new(aes_key, AES.MODE_CTR, nonce=b"", initial_value=counter_block)
        assert unpad(cipher.decrypt(ciphertext), 16) == plaintext

    def test_decrypts_externally_built_vault(self):
        plaintext = b"written by another implementation\n"
        salt = os.urandom(32)
        aes_key, hmac_key, counter_block = _reference_keys(PASSWORD, salt)

        cipher = AES.new(aes_key, AES.MODE_CTR, nonce=b"", initial_value=counter_block)
        ciphertext = cipher.encrypt(pad(plaintext, 16))
        mac_hex = hmac.new(hmac_key, ciphertext, hashlib.sha256).hexdigest().encode()

        inner = b"\n".join([binascii.hexlify(salt), mac_hex, binascii.hexlify(ciphertext)])
        body = binascii.hexlify(inner)
        lines = [b"$ANSIBLE_VAULT;1.1;AES256"] + [body[i:i + 80] for i in range(0, len(body), 80)]

        assert vault.decrypt(b"\n".join(lines) + b"\n", PASSWORD) == plaintext


class TestFailures:
    def test_wrong_password(self):
        data = vault.encrypt(b"payload", PASSWORD)
        with pytest.raises(WrongPassword):
            vault.decrypt(data, "wrongpassword")

    def test_tampered_ciphertext(self):
        data = vault.encrypt(b"payload", PASSWORD)
        envelope = vault.parse_envelope(data)
        flipped = bytes([envelope.ciphertext[0] ^ 1]) + envelope.ciphertext[1:]
        tampered = vault.format_envelope(
            vault.VaultEnvelope(
                version=envelope.version,
                cipher=envelope.cipher,
                salt=envelope.salt,
                hmac=envelope.hmac,
                ciphertext=flipped,
            )
        )
        with pytest.raises(WrongPassword):
            vault.decrypt(tampered, PASSWORD)

    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"   \n",
            b'{"id1": "sk-ABC"}',
            b"$ANSIBLE_VAULT;1.1\nabcd\n",
            b"$ANSIBLE_VAULT;2.0;AES256\nabcd\n",
            b"$ANSIBLE_VAULT;1.1;AES128\nabcd\n",
            b"$ANSIBLE_VAULT;1.1;AES256\nnot hex at all\n",
            b"$ANSIBLE_VAULT;1.1;AES256\n" + binascii.hexlify(b"only-one-field") + b"\n",
        ],
    )
    def test_malformed(self, data):
        with pytest.raises(MalformedVaultFile):
            vault.decrypt(data, PASSWORD)

    def test_wrong_password_is_not_malformed(self):
        data = vault.encrypt(b"payload", PASSWORD)
        with pytest.raises(WrongPassword) as exc_info:
            vault.decrypt(data, "nope")
        assert not isinstance(exc_info.value, MalformedVaultFile)
