"""
Password hashing and verification utilities.

- Always use a strong, salted hashing algorithm (bcrypt)
- NEVER log plaintext passwords or hashes
"""
from __future__ import annotations
import bcrypt

DEFAULT_ROUNDS = 10

# bcrypt only reads the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


def _to_bytes(x) -> bytes:
    """Convert input to bytes for bcrypt."""
    if x is None:
        return b""
    if isinstance(x, (bytes, bytearray)):
        return bytes(x)
    return str(x).encode()


def _password_bytes(plain) -> bytes:
    """UTF-8 password bytes, cut to what bcrypt actually hashes."""
    return _to_bytes(plain)[:MAX_PASSWORD_BYTES]


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Hash a plaintext password using bcrypt.

    Args:
        plain: Plaintext password
        rounds: bcrypt cost factor

    Returns:
        Hashed password string
    """
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(plain: str, hashed: str | None) -> bool:
    """
    Verify a plaintext password against a hash.

    Returns False for missing or malformed hashes instead of raising.
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain), _to_bytes(hashed))
    except ValueError:
        return False
