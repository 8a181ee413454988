"""FastAPI application for the Survey Center."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .worker import expiry_sweeper

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Auto-create tables for SQLite (local dev); PostgreSQL uses Alembic migrations
    if "sqlite" in settings.database_url:
        from .database import create_tables
        await create_tables()
    expiry_sweeper.start()
    yield
    await expiry_sweeper.stop()


app = FastAPI(title=settings.app_title, lifespan=lifespan)

# Import and register routers
from .routers import (  # noqa: E402
    assignments, health, live, portal, public, responses, students, templates,
)

app.include_router(templates.router)
app.include_router(assignments.router)
app.include_router(responses.router)
app.include_router(students.router)
app.include_router(public.router)
app.include_router(portal.router)
app.include_router(live.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"service": settings.app_title, "status": "ok"}
