import base64
import binascii
import os
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from middleman.core.errors import (
    AuthenticationError,
    DecodeError,
    EnvelopeKeyError,
    RandomSourceError,
    TruncatedEnvelopeError,
)

__all__ = [
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "generate_key",
    "key_fingerprint",
    "open_envelope",
    "seal",
]

KEY_SIZE = 32  # AES-256
NONCE_SIZE = 12  # 96-bit GCM nonce
TAG_SIZE = 16


def _cipher(key: bytes) -> AESGCM:
    if len(key) != KEY_SIZE:
        raise EnvelopeKeyError(f"Invalid key length: {len(key)} (expected {KEY_SIZE})")
    return AESGCM(key)


def _fresh_nonce() -> bytes:
    try:
        return os.urandom(NONCE_SIZE)
    except (NotImplementedError, OSError) as e:
        raise RandomSourceError(f"Secure random source unavailable: {e}") from e


def seal(plaintext: bytes, key: bytes) -> str:
    """
    Encrypts and authenticates `plaintext` under `key`.

    The envelope is base64(nonce || ciphertext || tag). A new random nonce is
    drawn for every call, so sealing the same plaintext twice never yields the
    same envelope.
    """
    aesgcm = _cipher(key)
    nonce = _fresh_nonce()
    sealed = aesgcm.encrypt(nonce, plaintext, None)
    return base64.b64encode(nonce + sealed).decode("ascii")


def open_envelope(envelope: str, key: bytes) -> bytes:
    """
    Verifies and decrypts an envelope produced by `seal`.

    Raises DecodeError, TruncatedEnvelopeError or AuthenticationError; no
    plaintext is returned unless the tag verifies.
    """
    aesgcm = _cipher(key)

    try:
        raw = base64.b64decode(envelope, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"base64 decode failed: {e}") from e

    if len(raw) < NONCE_SIZE:
        raise TruncatedEnvelopeError(
            f"ciphertext too short: {len(raw)} bytes (nonce is {NONCE_SIZE})"
        )

    nonce, sealed = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
    try:
        return aesgcm.decrypt(nonce, sealed, None)
    except InvalidTag as e:
        raise AuthenticationError("message authentication failed") from e


def generate_key() -> str:
    """Returns a new 32-character key; its ASCII bytes are the AES-256 key."""
    return secrets.token_hex(KEY_SIZE // 2)


def key_fingerprint(key: str) -> str:
    # Enough to tell deployments apart without disclosing the secret
    return key[:8] + "..."
