from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Core
    backend: str = os.getenv("SVCHEAL_BACKEND", "systemd")
    delay_s: float = _env_float("SVCHEAL_DELAY_S", 60.0)
    action_timeout_s: int = _env_int("SVCHEAL_ACTION_TIMEOUT_S", 60)
    systemctl: str = os.getenv("SVCHEAL_SYSTEMCTL", "systemctl")

    # Event log
    enable_event_log: bool = _env_bool("SVCHEAL_ENABLE_EVENT_LOG", True)
    db_path: str = os.getenv("SVCHEAL_DB_PATH", "svcheal.db")

    # Email alerting (optional)
    enable_email: bool = _env_bool("SVCHEAL_ENABLE_EMAIL", False)
    smtp_host: str = os.getenv("SVCHEAL_SMTP_HOST", "smtp.gmail.com")
    smtp_port: int = _env_int("SVCHEAL_SMTP_PORT", 587)
    smtp_user: str | None = os.getenv("SVCHEAL_SMTP_USER")
    smtp_password: str | None = os.getenv("SVCHEAL_SMTP_PASSWORD")
    email_from: str | None = os.getenv("SVCHEAL_EMAIL_FROM")
    email_to: str | None = os.getenv("SVCHEAL_EMAIL_TO")


settings = Settings()
