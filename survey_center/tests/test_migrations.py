"""Smoke tests for Survey Center Alembic migrations."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from survey_center.config import settings


def test_alembic_upgrade_creates_survey_tables(tmp_path: Path, monkeypatch):
    db_path = tmp_path / "survey_migrations.db"
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{db_path}")

    cfg = Config(str(settings.base_dir / "alembic.ini"))
    command.upgrade(cfg, "head")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names())
        indexes = {ix["name"]: ix for ix in inspector.get_indexes("survey_assignment")}
    finally:
        engine.dispose()

    assert {"survey_template", "survey_assignment", "survey_response", "student"} <= tables
    assert indexes["uq_survey_assignment_pending"]["unique"]


def test_alembic_downgrade_drops_tables(tmp_path: Path, monkeypatch):
    db_path = tmp_path / "survey_downgrade.db"
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{db_path}")

    cfg = Config(str(settings.base_dir / "alembic.ini"))
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()

    assert "survey_assignment" not in tables
