"""
AES-256-CBC encryption of values with the application key.

Payload layout: base64(iv[16] + ciphertext). Values are JSON-serialized
before encryption unless serialize=False.
"""
import base64
import binascii
import json
import os
from typing import Any

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

KEY_BYTES = 32
IV_BYTES = 16


class EncryptionError(ValueError):
    """Raised when a value can't be encrypted (e.g. no application key)."""


class DecryptionError(EncryptionError):
    """Raised when a payload can't be decrypted or unserialized."""


def normalize_key(key: str | bytes | None) -> bytes:
    """
    Turn an application key into 32 bytes: NUL-padded when short, truncated
    when long.
    """
    if not key:
        raise EncryptionError("No application key configured (set APP_KEY)")
    raw = key.encode("utf-8") if isinstance(key, str) else bytes(key)
    return raw[:KEY_BYTES].ljust(KEY_BYTES, b"\0")


class Encrypter:
    """Encrypts and decrypts values with a fixed key."""

    def __init__(self, key: str | bytes | None):
        self._key = normalize_key(key)

    def _cipher(self, iv: bytes) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(iv))

    def encrypt(self, val: Any, serialize: bool = True) -> str:
        if serialize:
            try:
                plain = json.dumps(val).encode("utf-8")
            except TypeError as e:
                raise EncryptionError(f"Value is not serializable: {e}") from e
        elif isinstance(val, str):
            plain = val.encode("utf-8")
        elif isinstance(val, bytes):
            plain = val
        else:
            raise EncryptionError(
                f"Expected str or bytes with serialize=False, got {type(val).__name__}"
            )
        iv = os.urandom(IV_BYTES)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plain) + padder.finalize()
        encryptor = self._cipher(iv).encryptor()
        encrypted = encryptor.update(padded) + encryptor.finalize()
        return base64.b64encode(iv + encrypted).decode("ascii")

    def decrypt(self, payload: str, unserialize: bool = True) -> Any:
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Payload is not valid base64") from e
        if len(raw) <= IV_BYTES or (len(raw) - IV_BYTES) % IV_BYTES:
            raise DecryptionError("Payload has an invalid length")
        iv, encrypted = raw[:IV_BYTES], raw[IV_BYTES:]
        decryptor = self._cipher(iv).decryptor()
        padded = decryptor.update(encrypted) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            plain = unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise DecryptionError("Invalid padding; wrong key or corrupted payload") from e
        if not unserialize:
            return plain.decode("utf-8", errors="replace")
        try:
            return json.loads(plain.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecryptionError("Decrypted payload is not valid JSON") from e
