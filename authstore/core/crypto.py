"""Secret hashing helpers."""

import base64
import functools
import hashlib
import hmac
import secrets

from authstore.config import settings

ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16


def _b64(data: bytes) -> str:
    """Unpadded urlsafe base64."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64(data: str) -> bytes:
    """Decode unpadded urlsafe base64."""
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def hash_secret_pbkdf2(secret: str, iterations: int | None = None) -> str:
    """Hash a secret as `pbkdf2_sha256$<iterations>$<salt>$<digest>`."""
    rounds = iterations or settings.PBKDF2_ITERATIONS
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), salt, rounds)
    return f"{ALGORITHM}${rounds}${_b64(salt)}${_b64(digest)}"


def verify_secret_pbkdf2(secret: str, encoded: str) -> bool:
    """Check a secret against an encoded PBKDF2 hash in constant time."""
    try:
        algorithm, rounds, salt, expected = encoded.split("$", 3)
        iterations = int(rounds)
        salt_bytes = _unb64(salt)
        expected_bytes = _unb64(expected)
    except (ValueError, TypeError):
        return False
    if algorithm != ALGORITHM or iterations <= 0:
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", secret.encode("utf-8"), salt_bytes, iterations
    )
    return hmac.compare_digest(digest, expected_bytes)


@functools.cache
def dummy_secret_hash() -> str:
    """Hash checked for unknown users so both failure paths cost the same."""
    return hash_secret_pbkdf2(secrets.token_urlsafe(16))
