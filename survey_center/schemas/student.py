"""Student and portal session schemas."""

from __future__ import annotations

from pydantic import BaseModel


class StudentCreate(BaseModel):
    code: str
    full_name: str
    class_id: str | None = None
    class_name: str | None = None
    password: str | None = None


class PasswordSet(BaseModel):
    password: str


class LoginIn(BaseModel):
    code: str
    password: str


class PasswordChange(BaseModel):
    old_password: str
    new_password: str
