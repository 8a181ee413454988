"""Survey Center configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class SurveySettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///survey_center.db"
    echo_sql: bool = False
    app_title: str = "Survey Center"
    log_level: str = "INFO"

    # Base URL used to build public survey links (/s/{token})
    public_base_url: str = "http://localhost:8030"
    token_bytes: int = 24

    # Student portal sessions
    auth_secret: str = "dev-secret-change-me"
    auth_cookie_name: str = "sc_student_session"
    auth_cookie_secure: bool = False
    auth_session_ttl_seconds: int = 86400
    password_iterations: int = 200_000
    # Empty disables the shared default password entirely.
    student_default_password: str = ""

    # Admin JSON API key; empty leaves /api open (local dev).
    admin_api_key: str = ""

    # Public form hardening
    form_rate_limit_window_seconds: int = 60
    form_rate_limit_max_submissions: int = 10
    form_rate_limit_block_seconds: int = 300

    expiry_sweeper_enabled: bool = True
    expiry_sweep_interval_seconds: float = 300.0

    model_config = {"env_prefix": "SURVEY_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def project_dir(self) -> Path:
        return self.base_dir.parent

    @property
    def migrations_dir(self) -> Path:
        return self.base_dir / "migrations"

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}

    def survey_link(self, token: str) -> str:
        return f"{self.public_base_url.rstrip('/')}/s/{token}"


settings = SurveySettings()
