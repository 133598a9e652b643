"""
Vault codec: password-based encryption in the Ansible Vault format.

A vault file looks like::

    $ANSIBLE_VAULT;1.1;AES256
    6231353466373262...   (hex, 80 columns per line)

The hex body decodes to three newline-separated hex fields: the salt,
the HMAC-SHA256 of the ciphertext, and the ciphertext. Keys come from
PBKDF2-HMAC-SHA256 over the password and salt; the plaintext is PKCS#7
padded and encrypted with AES-256 in CTR mode.

This module works on byte buffers only. Reading and writing the vault
file is the store's job.
"""

from __future__ import annotations

import binascii
from dataclasses import dataclass
from typing import Optional, Tuple

from Crypto.Cipher import AES
from Crypto.Hash import HMAC, SHA256
from Crypto.Protocol.KDF import PBKDF2
from Crypto.Random import get_random_bytes
from Crypto.Util import Counter
from Crypto.Util.Padding import pad, unpad

from .config import (
    AES_BLOCK_SIZE,
    AES_KEY_SIZE,
    HMAC_KEY_SIZE,
    KDF_ITERATIONS,
    SUPPORTED_VAULT_VERSIONS,
    VAULT_CIPHER,
    VAULT_LINE_WIDTH,
    VAULT_SALT_SIZE,
    VAULT_TAG,
    VAULT_VERSION,
    VAULT_VERSION_WITH_ID,
)
from .errors import MalformedVaultFile, WrongPassword
from .utils import chunk_bytes


@dataclass(frozen=True)
class VaultEnvelope:
    version: str
    cipher: str
    salt: bytes
    hmac: bytes
    ciphertext: bytes
    vault_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------


def derive_keys(password: str, salt: bytes, iterations: int = KDF_ITERATIONS) -> Tuple[bytes, bytes, bytes]:
    """
    Derive the AES key, the HMAC key and the initial CTR counter block.

    Returns:
        (aes_key, hmac_key, counter_block)
    """

    material = PBKDF2(
        password.encode("utf-8"),
        salt,
        dkLen=AES_KEY_SIZE + HMAC_KEY_SIZE + AES_BLOCK_SIZE,
        count=iterations,
        hmac_hash_module=SHA256,
    )
    aes_key = material[:AES_KEY_SIZE]
    hmac_key = material[AES_KEY_SIZE : AES_KEY_SIZE + HMAC_KEY_SIZE]
    counter_block = material[AES_KEY_SIZE + HMAC_KEY_SIZE :]
    return aes_key, hmac_key, counter_block


def _ctr_cipher(aes_key: bytes, counter_block: bytes):
    counter = Counter.new(AES_BLOCK_SIZE * 8, initial_value=int.from_bytes(counter_block, "big"))
    return AES.new(aes_key, AES.MODE_CTR, counter=counter)


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


def is_encrypted(data: bytes) -> bool:
    """Return True if ``data`` starts with a vault header."""
    return data.lstrip().startswith(VAULT_TAG.encode("ascii") + b";")


def format_envelope(envelope: VaultEnvelope) -> bytes:
    header_fields = [VAULT_TAG, envelope.version, envelope.cipher]
    if envelope.vault_id:
        header_fields.append(envelope.vault_id)
    header = ";".join(header_fields).encode("utf-8")

    inner = b"\n".join(
        binascii.hexlify(part) for part in (envelope.salt, envelope.hmac, envelope.ciphertext)
    )
    body = binascii.hexlify(inner)

    lines = [header] + chunk_bytes(body, VAULT_LINE_WIDTH)
    return b"\n".join(lines) + b"\n"


def parse_envelope(data: bytes) -> VaultEnvelope:
    """
    Parse the header and hex body of a vault file.

    Raises:
        MalformedVaultFile: if the header or body cannot be parsed
    """

    lines = data.strip().splitlines()
    if not lines:
        raise MalformedVaultFile("Vault file is empty")

    try:
        header = lines[0].decode("utf-8").strip()
    except UnicodeDecodeError as e:
        raise MalformedVaultFile("Vault header is not valid text") from e

    fields = [f.strip() for f in header.split(";")]
    if len(fields) < 3 or fields[0] != VAULT_TAG:
        raise MalformedVaultFile("Missing vault header")

    version, cipher = fields[1], fields[2]
    vault_id = fields[3] if len(fields) > 3 and fields[3] else None

    if version not in SUPPORTED_VAULT_VERSIONS:
        raise MalformedVaultFile(f"Unsupported vault format version {version!r}")
    if cipher != VAULT_CIPHER:
        raise MalformedVaultFile(f"Unsupported vault cipher {cipher!r}")

    try:
        inner = binascii.unhexlify(b"".join(line.strip() for line in lines[1:]))
        parts = inner.split(b"\n", 2)
        if len(parts) != 3:
            raise MalformedVaultFile("Vault body must hold salt, HMAC and ciphertext")
        salt, mac, ciphertext = (binascii.unhexlify(p) for p in parts)
    except (binascii.Error, ValueError) as e:
        raise MalformedVaultFile("Vault body is not valid hex") from e

    return VaultEnvelope(
        version=version,
        cipher=cipher,
        salt=salt,
        hmac=mac,
        ciphertext=ciphertext,
        vault_id=vault_id,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def encrypt(
    plaintext: bytes,
    password: str,
    iterations: int = KDF_ITERATIONS,
    vault_id: Optional[str] = None,
) -> bytes:
    """
    Encrypt ``plaintext`` into vault file bytes.

    A new random salt is drawn on every call, so encrypting the same
    plaintext twice never produces the same output.
    """

    salt = get_random_bytes(VAULT_SALT_SIZE)
    aes_key, hmac_key, counter_block = derive_keys(password, salt, iterations)

    ciphertext = _ctr_cipher(aes_key, counter_block).encrypt(pad(plaintext, AES_BLOCK_SIZE))
    mac = HMAC.new(hmac_key, ciphertext, digestmod=SHA256).digest()

    return format_envelope(
        VaultEnvelope(
            version=VAULT_VERSION_WITH_ID if vault_id else VAULT_VERSION,
            cipher=VAULT_CIPHER,
            salt=salt,
            hmac=mac,
            ciphertext=ciphertext,
            vault_id=vault_id,
        )
    )


def decrypt(data: bytes, password: str, iterations: int = KDF_ITERATIONS) -> bytes:
    """
    Decrypt vault file bytes.

    The HMAC is verified before anything is decrypted; a mismatch is how a
    wrong password shows up, since CTR mode itself cannot tell.

    Raises:
        MalformedVaultFile: unparseable file or bad padding
        WrongPassword: HMAC verification failed
    """

    envelope = parse_envelope(data)
    aes_key, hmac_key, counter_block = derive_keys(password, envelope.salt, iterations)

    try:
        HMAC.new(hmac_key, envelope.ciphertext, digestmod=SHA256).verify(envelope.hmac)
    except ValueError as e:
        raise WrongPassword("Decryption failed, wrong vault password or tampered file") from e

    padded = _ctr_cipher(aes_key, counter_block).decrypt(envelope.ciphertext)
    try:
        return unpad(padded, AES_BLOCK_SIZE)
    except ValueError as e:
        raise MalformedVaultFile("Decrypted vault payload has invalid padding") from e
