from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    email_user: str
    email_password: str
    email_recipient: str
    smtp_host: str
    smtp_port: int
    smtp_timeout_seconds: int
    state_dir: str
    artifact_dir: str
    navigation_timeout_ms: int
    headless: bool
    persist_on_notify_failure: bool
    log_level: str


def _get_int(name: str, default: int, minimum: int) -> int:
    raw_value = os.getenv(name, str(default)).strip()
    try:
        value = int(raw_value)
    except ValueError:
        raise ValueError(f"{name} must be an integer") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _get_required(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")
    return value


def _get_bool(name: str, default: bool) -> bool:
    raw_value = os.getenv(name, "true" if default else "false").strip().lower()
    if raw_value in {"1", "true", "yes", "on"}:
        return True
    if raw_value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean value")


def load_settings() -> Settings:
    load_dotenv()

    return Settings(
        email_user=_get_required("EMAIL_USER"),
        email_password=_get_required("EMAIL_PASSWORD"),
        email_recipient=_get_required("EMAIL_RECIPIENT"),
        smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com").strip(),
        smtp_port=_get_int("SMTP_PORT", default=587, minimum=1),
        smtp_timeout_seconds=_get_int("SMTP_TIMEOUT_SECONDS", default=30, minimum=5),
        state_dir=os.getenv("STATE_DIR", ".").strip() or ".",
        artifact_dir=os.getenv("ARTIFACT_DIR", ".").strip() or ".",
        navigation_timeout_ms=_get_int("NAVIGATION_TIMEOUT_MS", default=30000, minimum=1000),
        headless=_get_bool("HEADLESS", default=True),
        persist_on_notify_failure=_get_bool("PERSIST_ON_NOTIFY_FAILURE", default=True),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    )
