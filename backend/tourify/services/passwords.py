"""
Share-link password hashing.

Stored format: ``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>`` with a
16-byte random salt per password. The iteration count is embedded so it can
be raised in configuration without invalidating existing hashes.
"""

import hashlib
import hmac
import secrets
from typing import Optional

from tourify.config import settings

ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    iterations = iterations or settings.password_hash_iterations
    salt = secrets.token_bytes(SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return f"{ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: Optional[str], encoded: str) -> bool:
    """Constant-time check of `password` against a stored hash; malformed hashes never match."""
    if password is None:
        return False
    try:
        algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
        if algorithm != ALGORITHM:
            return False
        candidate = _derive(password, bytes.fromhex(salt_hex), int(iterations))
    except ValueError:
        return False
    return hmac.compare_digest(candidate.hex(), digest_hex)
