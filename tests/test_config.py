from __future__ import annotations

import pytest

import housing_monitor.config as config
from housing_monitor.config import load_settings

REQUIRED = {
    "EMAIL_USER": "sender@example.com",
    "EMAIL_PASSWORD": "app-password",
    "EMAIL_RECIPIENT": "me@example.com",
}

OPTIONAL = [
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_TIMEOUT_SECONDS",
    "STATE_DIR",
    "ARTIFACT_DIR",
    "NAVIGATION_TIMEOUT_MS",
    "HEADLESS",
    "PERSIST_ON_NOTIFY_FAILURE",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "load_dotenv", lambda: False)
    for name in OPTIONAL:
        monkeypatch.delenv(name, raising=False)
    for name, value in REQUIRED.items():
        monkeypatch.setenv(name, value)


def test_defaults() -> None:
    settings = load_settings()

    assert settings.email_user == "sender@example.com"
    assert settings.email_recipient == "me@example.com"
    assert settings.smtp_host == "smtp.gmail.com"
    assert settings.smtp_port == 587
    assert settings.state_dir == "."
    assert settings.navigation_timeout_ms == 30000
    assert settings.headless is True
    assert settings.persist_on_notify_failure is True
    assert settings.log_level == "INFO"


@pytest.mark.parametrize("name", sorted(REQUIRED))
def test_missing_secret_fails_fast(monkeypatch: pytest.MonkeyPatch, name: str) -> None:
    monkeypatch.delenv(name)

    with pytest.raises(ValueError, match=name):
        load_settings()


def test_blank_secret_counts_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EMAIL_PASSWORD", "   ")

    with pytest.raises(ValueError, match="EMAIL_PASSWORD"):
        load_settings()


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SMTP_PORT", "465")
    monkeypatch.setenv("HEADLESS", "no")
    monkeypatch.setenv("PERSIST_ON_NOTIFY_FAILURE", "0")
    monkeypatch.setenv("STATE_DIR", "data")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.smtp_port == 465
    assert settings.headless is False
    assert settings.persist_on_notify_failure is False
    assert settings.state_dir == "data"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name, value",
    [
        ("NAVIGATION_TIMEOUT_MS", "10"),
        ("SMTP_PORT", "abc"),
        ("HEADLESS", "maybe"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError, match=name):
        load_settings()
