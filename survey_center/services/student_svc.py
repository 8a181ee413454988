"""Student records and portal authentication."""

from __future__ import annotations

import hmac
import logging
import time
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import AuthenticationFailed, NotFound
from ..models.student import Student
from ..security.passwords import hash_password_async, needs_rehash, verify_password_async
from ..security.sessions import StudentSession

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


async def get_student(db: AsyncSession, student_id: uuid.UUID) -> Student | None:
    return await db.get(Student, student_id)


async def get_by_code(db: AsyncSession, code: str) -> Student | None:
    stmt = select(Student).where(Student.code == normalize_code(code))
    return (await db.execute(stmt)).scalar_one_or_none()


async def create_student(
    db: AsyncSession,
    code: str,
    full_name: str,
    class_id: str | None = None,
    class_name: str | None = None,
    password: str | None = None,
) -> Student:
    student = Student(
        code=normalize_code(code),
        full_name=full_name.strip(),
        class_id=class_id or None,
        class_name=class_name or None,
        password_hash=await hash_password_async(password) if password else None,
    )
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return student


async def set_password(db: AsyncSession, student_id: uuid.UUID, password: str) -> Student | None:
    student = await db.get(Student, student_id)
    if not student:
        return None
    student.password_hash = await hash_password_async(password)
    await db.commit()
    await db.refresh(student)
    return student


async def _password_matches(student: Student, password: str) -> bool:
    if student.password_hash:
        return await verify_password_async(password, student.password_hash)
    default = settings.student_default_password
    return bool(default) and hmac.compare_digest(password or "", default)


async def authenticate(db: AsyncSession, code: str, password: str) -> StudentSession:
    student = await get_by_code(db, code)
    if not student:
        logger.warning("Portal login for unknown student code %s", normalize_code(code))
        raise AuthenticationFailed("Unknown student code")
    if not await _password_matches(student, password):
        logger.warning("Portal login with wrong password for %s", student.code)
        raise AuthenticationFailed("Wrong password")

    if student.password_hash and needs_rehash(student.password_hash):
        student.password_hash = await hash_password_async(password)
        await db.commit()
        logger.info("Upgraded password hash for %s", student.code)

    return StudentSession(
        student_id=str(student.id),
        student_code=student.code,
        student_name=student.full_name,
        login_at=int(time.time()),
        class_id=student.class_id,
        class_name=student.class_name,
    )


async def change_password(
    db: AsyncSession, student_id: uuid.UUID, old_password: str, new_password: str
) -> None:
    student = await db.get(Student, student_id)
    if not student:
        raise NotFound(f"Student {student_id} not found")
    if not await _password_matches(student, old_password):
        raise AuthenticationFailed("Old password is incorrect")
    student.password_hash = await hash_password_async(new_password)
    await db.commit()
