"""Public survey link tokens."""

from __future__ import annotations

import secrets

from ..config import settings


def generate_token(nbytes: int | None = None) -> str:
    """Return an unguessable URL-safe token (192 bits by default)."""
    return secrets.token_urlsafe(nbytes or settings.token_bytes)
