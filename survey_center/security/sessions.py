"""Signed student portal sessions.

A session is an explicit value: login issues it, every portal request
decodes it from the cookie or bearer header, logout drops the cookie.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from dataclasses import asdict, dataclass

from fastapi import HTTPException, Request

from ..config import settings


@dataclass(frozen=True)
class StudentSession:
    student_id: str
    student_code: str
    student_name: str
    login_at: int
    class_id: str | None = None
    class_name: str | None = None

    def as_document(self) -> dict:
        doc = {
            "studentId": self.student_id,
            "studentCode": self.student_code,
            "studentName": self.student_name,
            "loginAt": self.login_at,
        }
        if self.class_id:
            doc["classId"] = self.class_id
        if self.class_name:
            doc["className"] = self.class_name
        return doc


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * ((4 - (len(data) % 4)) % 4)
    return base64.urlsafe_b64decode((data + padding).encode("utf-8"))


def _sign(body: str) -> str:
    secret = settings.auth_secret.strip()
    if not secret:
        raise RuntimeError("auth_secret is required for student sessions")
    return hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()


def _ttl_seconds() -> int:
    return max(60, int(settings.auth_session_ttl_seconds))


def issue_session_token(session: StudentSession) -> str:
    payload = asdict(session)
    payload["exp"] = session.login_at + _ttl_seconds()
    body = _b64url_encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))
    return f"{body}.{_sign(body)}"


def decode_session_token(token: str) -> StudentSession | None:
    if not token:
        return None
    try:
        body, provided_sig = token.split(".", 1)
    except ValueError:
        return None

    if not hmac.compare_digest(provided_sig, _sign(body)):
        return None

    try:
        payload = json.loads(_b64url_decode(body))
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict):
        return None

    exp = payload.pop("exp", None)
    if not isinstance(exp, int) or exp <= int(time.time()):
        return None
    try:
        return StudentSession(**payload)
    except TypeError:
        return None


def _extract_token(request: Request) -> str:
    cookie_token = request.cookies.get(settings.auth_cookie_name, "")
    if cookie_token:
        return cookie_token

    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return ""


def require_student_session(request: Request) -> StudentSession:
    """FastAPI dependency resolving the caller's portal session."""
    session = decode_session_token(_extract_token(request))
    if session is None:
        raise HTTPException(status_code=401, detail="Not logged in")
    return session
