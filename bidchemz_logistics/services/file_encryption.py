"""
AES-256-GCM encryption for documents at rest.

Encrypted blobs are laid out as ``iv (16 bytes) || tag (16 bytes) ||
ciphertext``. Keys are 32 random bytes, passed around base64 encoded; every
document gets its own key.
"""

from __future__ import annotations

import base64
import binascii
import os
import secrets
from pathlib import Path
from typing import Optional, Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from bidchemz_logistics.core.errors import DecryptionError
from bidchemz_logistics.core.logging_config import get_logger

logger = get_logger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 16
TAG_LENGTH = 16
ENCRYPTED_SUFFIX = ".enc"


def generate_encryption_key() -> str:
    """Return a fresh base64-encoded 256-bit key."""
    return base64.b64encode(secrets.token_bytes(KEY_LENGTH)).decode("ascii")


def _decode_key(key: str) -> bytes:
    try:
        raw = base64.b64decode(key, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Encryption key is not valid base64") from e
    if len(raw) != KEY_LENGTH:
        raise ValueError(f"Encryption key must decode to {KEY_LENGTH} bytes")
    return raw


def validate_encryption_key(key: str) -> bool:
    """True when ``key`` is base64 for exactly 32 bytes."""
    try:
        _decode_key(key)
    except ValueError:
        return False
    return True


def encrypt_buffer(data: bytes, key: Optional[str] = None) -> Tuple[bytes, str]:
    """Encrypt ``data`` and return ``(blob, key)``; a key is generated when none is given."""
    key = key or generate_encryption_key()
    iv = secrets.token_bytes(IV_LENGTH)
    sealed = AESGCM(_decode_key(key)).encrypt(iv, data, None)
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
    return iv + tag + ciphertext, key


def decrypt_buffer(blob: bytes, key: str) -> bytes:
    """Authenticate and decrypt a blob produced by ``encrypt_buffer``.

    Raises:
        DecryptionError: the blob is truncated, was tampered with, or the key is wrong.
    """
    if len(blob) < IV_LENGTH + TAG_LENGTH:
        raise DecryptionError("Encrypted data is truncated")
    iv = blob[:IV_LENGTH]
    tag = blob[IV_LENGTH : IV_LENGTH + TAG_LENGTH]
    ciphertext = blob[IV_LENGTH + TAG_LENGTH :]
    try:
        return AESGCM(_decode_key(key)).decrypt(iv, ciphertext + tag, None)
    except (InvalidTag, ValueError) as e:
        raise DecryptionError("Failed to decrypt file") from e


def encrypt_file(data: bytes, directory: Union[str, Path], key: Optional[str] = None) -> Tuple[Path, str]:
    """Encrypt ``data`` into a new randomly named file under ``directory``.

    Returns:
        The written path and the key needed to decrypt it.
    """
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    blob, key = encrypt_buffer(data, key)
    path = target_dir / f"{secrets.token_hex(16)}{ENCRYPTED_SUFFIX}"
    path.write_bytes(blob)
    logger.debug(f"Encrypted {len(data)} bytes to {path}")
    return path, key


def decrypt_file(path: Union[str, Path], key: str) -> bytes:
    return decrypt_buffer(Path(path).read_bytes(), key)


def secure_delete_file(path: Union[str, Path]) -> bool:
    """Overwrite a file with random bytes, then unlink it.

    Returns False when the file does not exist.
    """
    target = Path(path)
    if not target.exists():
        return False
    size = target.stat().st_size
    with target.open("r+b") as handle:
        handle.write(os.urandom(size))
        handle.flush()
        os.fsync(handle.fileno())
    target.unlink()
    logger.debug(f"Securely deleted {target}")
    return True
