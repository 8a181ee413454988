"""Admin API key guard."""

from __future__ import annotations

import hmac

from fastapi import HTTPException, Request

from ..config import settings


def _extract_key(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return request.headers.get("x-api-key", "").strip()


def require_admin_key(request: Request) -> None:
    """Enforce the admin API key when one is configured."""
    expected = settings.admin_api_key.strip()
    if not expected:
        return

    provided = _extract_key(request)
    if not provided or not hmac.compare_digest(provided, expected):
        raise HTTPException(status_code=401, detail="Invalid admin API key")
