"""Summary: Key derivation and AES-CBC decryption for the editor's safe storage.

Importance: Reproduces the fixed parameters the editor uses, so the plaintext is not garbage.
Alternatives: Call the platform crypto library through ctypes.
"""

from __future__ import annotations

import hashlib

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from copilotquota.errors import DecryptFailed


SALT = b"saltysalt"
ROUNDS = 1003
KEY_LENGTH = 16
BLOCK_SIZE = 16
IV = b" " * BLOCK_SIZE


def derive_key(
    password: str,
    salt: bytes = SALT,
    rounds: int = ROUNDS,
    length: int = KEY_LENGTH,
) -> bytes:
    """Summary: Derive a symmetric key with PBKDF2-HMAC-SHA1.

    Importance: Round count and hash must match the editor exactly.
    Alternatives: Use cryptography's PBKDF2HMAC primitive.
    """

    if length <= 0:
        raise ValueError("Derived key length must be positive")
    if rounds <= 0:
        raise ValueError("PBKDF2 round count must be positive")
    return hashlib.pbkdf2_hmac("sha1", password.encode("utf-8"), salt, rounds, dklen=length)


def decrypt(ciphertext: bytes, key: bytes) -> bytes:
    """Summary: Decrypt AES-128-CBC ciphertext with the fixed space IV and strip PKCS#7 padding.

    Importance: The IV is a property of the stored format, not a per-message value.
    Alternatives: Use pycryptodome's AES module.
    """

    if len(key) != KEY_LENGTH:
        raise DecryptFailed(f"Secret decrypt failed: key must be {KEY_LENGTH} bytes")
    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise DecryptFailed("Secret decrypt failed: ciphertext is not block aligned")
    decryptor = Cipher(algorithms.AES(key), modes.CBC(IV)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise DecryptFailed("Secret decrypt failed") from exc


def encrypt(plaintext: bytes, key: bytes) -> bytes:
    """Summary: Encrypt with the same fixed IV and padding scheme.

    Importance: Used to build fixtures that the decrypt path must accept.
    Alternatives: Ship pre-encrypted binary fixtures.
    """

    if len(key) != KEY_LENGTH:
        raise ValueError(f"Key must be {KEY_LENGTH} bytes")
    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(IV)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()
