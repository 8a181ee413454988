"""Salted PBKDF2 hashes for student portal passwords.

Stored form: ``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>``.
"""

from __future__ import annotations

import asyncio
import binascii
import hashlib
import hmac
import secrets

from ..config import settings

SCHEME = "pbkdf2_sha256"


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def _parse(stored_hash: str) -> tuple[int, bytes, bytes] | None:
    parts = (stored_hash or "").split("$")
    if len(parts) != 4 or parts[0] != SCHEME:
        return None
    try:
        return int(parts[1]), binascii.unhexlify(parts[2]), binascii.unhexlify(parts[3])
    except (ValueError, binascii.Error):
        return None


def hash_password(password: str, iterations: int | None = None) -> str:
    if not password:
        raise ValueError("Password is required")
    iterations = iterations or settings.password_iterations
    salt = secrets.token_bytes(16)
    return f"{SCHEME}${iterations}${salt.hex()}${_derive(password, salt, iterations).hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    parsed = _parse(stored_hash)
    if not password or parsed is None:
        return False
    iterations, salt, expected = parsed
    return hmac.compare_digest(_derive(password, salt, iterations), expected)


def needs_rehash(stored_hash: str) -> bool:
    """True when the hash was made with a different iteration count."""
    parsed = _parse(stored_hash)
    return parsed is None or parsed[0] != settings.password_iterations


async def hash_password_async(password: str) -> str:
    return await asyncio.to_thread(hash_password, password)


async def verify_password_async(password: str, stored_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, stored_hash)
