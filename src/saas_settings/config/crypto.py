"""Encryption of secure setting values at rest.

AES-256-GCM with a random 96-bit nonce per value. Encrypting the same
plaintext twice yields different ciphertexts, so a stored secure value can
only be matched against its own stored representation.
"""

from __future__ import annotations

import asyncio
import base64
import os
import uuid

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_BYTES = 12


def _load_key(key_base64: str) -> AESGCM:
    key = base64.b64decode(key_base64)
    if len(key) != 32:
        raise ValueError("Key must be 32 bytes for AES-256")
    return AESGCM(key)


def encrypt_secret(plaintext: str, key_base64: str, associated_data: str | None = None) -> str:
    """Encrypt a value using AES-256-GCM.

    Args:
        plaintext: Value to encrypt
        key_base64: Base64-encoded 32-byte key
        associated_data: Optional authenticated context (e.g., the parameter name)

    Returns:
        Base64-encoded nonce + ciphertext

    Raises:
        ValueError: If key is invalid
    """
    aesgcm = _load_key(key_base64)
    nonce = os.urandom(NONCE_BYTES)
    aad = associated_data.encode() if associated_data is not None else None
    ciphertext = aesgcm.encrypt(nonce, plaintext.encode(), aad)
    return base64.b64encode(nonce + ciphertext).decode()


def decrypt_secret(encrypted_base64: str, key_base64: str, associated_data: str | None = None) -> str:
    """Decrypt a value produced by encrypt_secret.

    Raises:
        ValueError: If key is invalid, or the value was tampered with or
            encrypted under a different key or context
    """
    aesgcm = _load_key(key_base64)
    encrypted = base64.b64decode(encrypted_base64)
    nonce = encrypted[:NONCE_BYTES]
    ciphertext = encrypted[NONCE_BYTES:]
    aad = associated_data.encode() if associated_data is not None else None
    try:
        plaintext_bytes = aesgcm.decrypt(nonce, ciphertext, aad)
    except InvalidTag as e:
        raise ValueError("Secret could not be decrypted with the configured key") from e
    return plaintext_bytes.decode()


async def encrypt_secret_async(plaintext: str, key_base64: str, associated_data: str | None = None) -> str:
    """Async wrapper for encrypt_secret (offloads to thread pool)."""
    return await asyncio.to_thread(encrypt_secret, plaintext, key_base64, associated_data)


async def decrypt_secret_async(
    encrypted_base64: str, key_base64: str, associated_data: str | None = None
) -> str:
    """Async wrapper for decrypt_secret (offloads to thread pool)."""
    return await asyncio.to_thread(decrypt_secret, encrypted_base64, key_base64, associated_data)


def generate_master_key() -> tuple[str, str]:
    """Generate AES-256 master key for encryption.

    Returns:
        Tuple of (key_base64, key_id)
    """
    key = os.urandom(32)  # 256 bits for AES-256
    key_base64 = base64.b64encode(key).decode()
    key_id = str(uuid.uuid4())
    return key_base64, key_id
