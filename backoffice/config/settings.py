# backoffice/config/settings.py
"""
Application configuration management.
Loads settings from environment variables (and an optional .env file)
with sensible defaults.

Environment selection:
1) explicit argument to get_settings()
2) APP_ENV / FLASK_ENV
3) fallback to "prod"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


LOG_FORMAT = "%(levelname)s: %(message)s"
PERFORMANCE_LOGGER = "backoffice.performance"


# -------------------------- helpers (pure) --------------------------


def _norm_env_name(raw: Optional[str]) -> str:
    """
    Normalize environment name to one of: dev | prod | test
    Accepts FLASK_ENV compatibility.
    """
    if not raw:
        raw = os.getenv("APP_ENV") or os.getenv("FLASK_ENV") or "prod"
    raw = raw.lower().strip()
    if raw in {"development", "debug"}:
        return "dev"
    if raw in {"production", "release"}:
        return "prod"
    if raw in {"testing"}:
        return "test"
    if raw not in {"dev", "prod", "test"}:
        return "prod"
    return raw


def _project_root() -> Path:
    return Path(
        os.getenv("PROJECT_ROOT", Path(__file__).parent.parent.parent)
    ).resolve()


def _choose_db_path(env: str, root: Path) -> str:
    """DB_PATH wins; otherwise an in-memory database for tests, a file elsewhere."""
    db_path = os.getenv("DB_PATH")
    if db_path:
        return str(Path(db_path).expanduser())
    if env == "test":
        return ":memory:"
    dbdir = root / "data"
    return str(dbdir / ("backoffice_dev.db" if env == "dev" else "backoffice.db"))


def _bool(var: str, default: bool = False) -> bool:
    val = os.getenv(var)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _int(var: str, default: int) -> int:
    try:
        return int(os.getenv(var, "").strip() or default)
    except ValueError:
        return default


def _prefix(raw: str) -> str:
    """Backend prefix always starts with a slash and never ends with one."""
    raw = "/" + raw.strip().strip("/")
    return raw if raw != "/" else ""


# -------------------------- dataclasses --------------------------


@dataclass
class DatabaseConfig:
    """Database configuration."""

    db_path: str


@dataclass
class WebConfig:
    """Web server configuration."""

    secret_key: str
    debug: bool
    host: str
    port: int
    force_ssl: bool


@dataclass
class CmsConfig:
    """Backend (CMS) configuration shared into every view."""

    name: str
    backend_prefix: str
    backend_language: str
    fallback_language: str
    log_performance: bool
    admin_username: str
    admin_password: str


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str
    performance_log_path: Optional[str]


@dataclass
class Settings:
    """Application settings."""

    environment: str
    project_root: Path
    database: DatabaseConfig
    web: WebConfig
    cms: CmsConfig
    logging: LoggingConfig


# -------------------------- public API --------------------------


def get_settings(environment: Optional[str] = None) -> Settings:
    """
    Get application settings based on environment.
    """
    load_dotenv()

    env = _norm_env_name(environment)
    project_root = _project_root()

    database = DatabaseConfig(db_path=_choose_db_path(env, project_root))

    web = WebConfig(
        secret_key=os.getenv("SECRET_KEY", "dev-secret-key-change-in-production"),
        debug=_bool("DEBUG", env == "dev"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_int("PORT", 8000),
        force_ssl=_bool("FORCE_SSL", env == "prod"),
    )

    cms = CmsConfig(
        name=os.getenv("CMS_NAME", "Backoffice"),
        backend_prefix=_prefix(os.getenv("BACKEND_PREFIX", "admin")),
        backend_language=os.getenv("BACKEND_LANGUAGE", "en"),
        fallback_language=os.getenv("FALLBACK_LANGUAGE", "en"),
        log_performance=_bool("LOG_PERFORMANCE", env != "test"),
        admin_username=os.getenv("ADMIN_USERNAME", "admin"),
        admin_password=os.getenv("ADMIN_PASSWORD", ""),
    )

    log_config = LoggingConfig(
        level=os.getenv("LOG_LEVEL", "DEBUG" if env == "dev" else "INFO").upper(),
        performance_log_path=os.getenv("PERFORMANCE_LOG_PATH") or None,
    )

    return Settings(
        environment=env,
        project_root=project_root,
        database=database,
        web=web,
        cms=cms,
        logging=log_config,
    )


def configure_logging(settings: Settings) -> None:
    """Root logging plus an optional file sink for the performance log."""
    level = getattr(logging, settings.logging.level, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    path = settings.logging.performance_log_path
    if not path:
        return

    perf_logger = logging.getLogger(PERFORMANCE_LOGGER)
    for handler in perf_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(path):
            return
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s " + LOG_FORMAT))
    perf_logger.addHandler(handler)
