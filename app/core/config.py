"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

AUTH_MODES = ("request", "static")
GATEWAY_BACKENDS = ("github", "memory")


class Settings(BaseSettings):
    """Central configuration for repo-gateway. Reads from .env automatically."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # ── Authentication ────────────────────────────────────────────────
    # "request" → every call carries ``Authorization: Bearer <token>`` which is
    #             validated against the upstream ``/user`` endpoint.
    # "static"  → TOKEN / OWNER are read once at startup and shared by all
    #             requests.  The process refuses to start without them.
    auth_mode: str = "request"

    # Static-mode credentials.  Env vars: TOKEN, OWNER
    token: str = ""
    owner: str = ""

    # ── Upstream ──────────────────────────────────────────────────────
    # "github" → real GitHub REST API
    # "memory" → in-memory double (no network), optionally seeded from YAML
    gateway_backend: str = "github"

    # Override for GitHub Enterprise (e.g. https://ghe.example.com/api/v3)
    github_api_url: str = "https://api.github.com"
    github_timeout_seconds: float = 15.0

    # YAML file with repositories / pull requests for the memory backend.
    memory_seed_path: str = ""

    @field_validator("auth_mode")
    @classmethod
    def _check_auth_mode(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in AUTH_MODES:
            raise ValueError(f"auth_mode must be one of {AUTH_MODES}, got {value!r}")
        return value

    @field_validator("gateway_backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in GATEWAY_BACKENDS:
            raise ValueError(f"gateway_backend must be one of {GATEWAY_BACKENDS}, got {value!r}")
        return value

    @field_validator("memory_seed_path")
    @classmethod
    def _resolve_seed(cls, value: str) -> str:
        if value:
            return str(Path(value).expanduser().resolve())
        return value

    # Web server
    web_host: str = "127.0.0.1"
    web_port: int = 8080

    # Logging
    log_level: str = "INFO"
    log_file: str = "logs/gateway.log"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Singleton accessor."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
