# backend/police_training/config.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


def _bool_env(name: str, default: bool) -> bool:
    return os.environ.get(name, str(default)).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    ENV = os.environ.get("APP_ENV", "development")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # PostgreSQL in production; SQLite file for local development
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///police_training.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Connection pool bounds. The pool is the only state shared between requests.
    DB_MAX_OPEN_CONNS = _int_env("DB_MAX_OPEN_CONNS", 25)
    DB_MAX_IDLE_CONNS = _int_env("DB_MAX_IDLE_CONNS", 25)
    DB_MAX_IDLE_TIME = _int_env("DB_MAX_IDLE_TIME", 60)
    DB_QUERY_TIMEOUT_SECONDS = _int_env("DB_QUERY_TIMEOUT_SECONDS", 3)

    CORS_TRUSTED_ORIGINS = os.environ.get("CORS_TRUSTED_ORIGINS", "").split()

    MAIL_ENABLED = _bool_env("MAIL_ENABLED", False)
    SMTP_HOST = os.environ.get("SMTP_HOST", "smtp.mailtrap.io")
    SMTP_PORT = _int_env("SMTP_PORT", 2525)
    SMTP_USERNAME = os.environ.get("SMTP_USERNAME", "")
    SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
    SMTP_SENDER = os.environ.get("SMTP_SENDER", "Training <noreply@example.com>")

    BACKGROUND_MAX_WORKERS = _int_env("BACKGROUND_MAX_WORKERS", 4)


def engine_options(config) -> dict:
    """
    Build SQLALCHEMY_ENGINE_OPTIONS from the pool and deadline settings.

    Server databases get a bounded pool; new requests wait up to the query
    deadline for a connection instead of opening more. SQLite only gets a
    busy timeout.
    """
    uri = config["SQLALCHEMY_DATABASE_URI"]
    timeout = config["DB_QUERY_TIMEOUT_SECONDS"]

    if uri.startswith("sqlite"):
        return {"connect_args": {"timeout": timeout}}

    max_open = config["DB_MAX_OPEN_CONNS"]
    max_idle = min(config["DB_MAX_IDLE_CONNS"], max_open)
    options = {
        "pool_size": max_idle,
        "max_overflow": max_open - max_idle,
        "pool_recycle": config["DB_MAX_IDLE_TIME"],
        "pool_timeout": timeout,
        "pool_pre_ping": True,
    }
    if uri.startswith("postgres"):
        options["connect_args"] = {"options": f"-c statement_timeout={timeout * 1000}"}
    return options
