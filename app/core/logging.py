"""Centralized logging configuration for repo-gateway."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.core.config import Settings, get_settings

ROOT_LOGGER = "repo_gateway"

_configured = False


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """Configure root logger with console + rotating file handlers. Idempotent."""
    global _configured
    if _configured:
        return logging.getLogger(ROOT_LOGGER)

    settings = settings or get_settings()
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.propagate = False

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    logger.addHandler(console)

    # File handler (rotating, 5 MB × 3 backups); empty LOG_FILE disables it
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    _configured = True
    logger.info("Logging initialised (level=%s, file=%s)", settings.log_level, settings.log_file)
    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Get a child logger under ``repo_gateway``. Call setup_logging() at startup first."""
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def redact_token(token: str | None) -> str:
    """Return a log-safe rendering of *token*."""
    if not token:
        return "unset"
    if len(token) <= 8:
        return "***"
    return f"{token[:4]}...{token[-4:]}"
