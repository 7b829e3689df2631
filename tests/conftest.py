from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from housing_monitor.config import Settings
from housing_monitor.extractors import (
    FIND_SCROLLABLE_JS,
    HIGHLIGHTED_TEXT_JS,
    SCROLL_STEP_JS,
)
from housing_monitor.state_store import StateStore


class FakeKeyboard:
    def __init__(self, page: FakePage) -> None:
        self.page = page
        self.presses: list[str] = []

    def press(self, key: str) -> None:
        self.presses.append(key)
        self.page.highlight_index += 1


class FakePage:
    """Stand-in for the parts of a Playwright page the monitor touches."""

    def __init__(
        self,
        html: str = "<html><body></body></html>",
        *,
        options: list[str] | None = None,
        cycle: bool = True,
        goto_error: Exception | None = None,
        evaluate_handler: Callable[[str, Any], Any] | None = None,
    ) -> None:
        self.html = html
        self.options = options or []
        self.cycle = cycle
        self.goto_error = goto_error
        self.evaluate_handler = evaluate_handler
        self.keyboard = FakeKeyboard(self)
        self.highlight_index = -1
        self.visited: list[tuple[str, str | None, int | None]] = []
        self.waits: list[int] = []
        self.evaluated: list[str] = []
        self.screenshots: list[str] = []
        self.closed = False

    def goto(self, url: str, wait_until: str | None = None, timeout: int | None = None) -> None:
        self.visited.append((url, wait_until, timeout))
        if self.goto_error is not None:
            raise self.goto_error

    def wait_for_timeout(self, timeout: int) -> None:
        self.waits.append(timeout)

    def content(self) -> str:
        return self.html

    def evaluate(self, script: str, arg: Any = None) -> Any:
        self.evaluated.append(script)
        if self.evaluate_handler is not None:
            return self.evaluate_handler(script, arg)
        if script == HIGHLIGHTED_TEXT_JS:
            return self._highlighted()
        if script in (FIND_SCROLLABLE_JS, SCROLL_STEP_JS):
            return None
        return False

    def screenshot(self, path: str) -> None:
        self.screenshots.append(path)
        Path(path).write_bytes(b"png")

    def close(self) -> None:
        self.closed = True

    def _highlighted(self) -> str:
        if not self.options or self.highlight_index < 0:
            return ""
        if self.cycle:
            return self.options[self.highlight_index % len(self.options)]
        return self.options[min(self.highlight_index, len(self.options) - 1)]


class RecordingNotifier:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.calls: list[dict[str, Any]] = []

    def notify(self, subject: str, items, apply_url: str, source_label: str) -> bool:
        self.calls.append(
            {
                "subject": subject,
                "items": list(items),
                "apply_url": apply_url,
                "source_label": source_label,
            }
        )
        return self.result


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        email_user="sender@example.com",
        email_password="app-password",
        email_recipient="me@example.com",
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_timeout_seconds=30,
        state_dir=str(tmp_path / "state"),
        artifact_dir=str(tmp_path / "artifacts"),
        navigation_timeout_ms=30000,
        headless=True,
        persist_on_notify_failure=True,
        log_level="INFO",
    )


@pytest.fixture
def store(settings: Settings) -> StateStore:
    return StateStore(settings.state_dir)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
