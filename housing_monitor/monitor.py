from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Callable, Sequence

from playwright.sync_api import Browser, Page
from playwright.sync_api import Error as PlaywrightError

from housing_monitor.browser import browser_session, capture_error_screenshot
from housing_monitor.config import Settings
from housing_monitor.email_notifier import EmailNotifier
from housing_monitor.site_monitor import CheckResult, SiteMonitor
from housing_monitor.sources import DEFAULT_SOURCES, SourceConfig
from housing_monitor.state_store import StateStore

LOGGER = logging.getLogger(__name__)

SessionFactory = Callable[[Settings], AbstractContextManager[Browser]]


@dataclass
class RunSummary:
    results: dict[str, CheckResult] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)

    @property
    def new_listing_count(self) -> int:
        return sum(len(result.added) for result in self.results.values())


class MonitorService:
    def __init__(
        self,
        settings: Settings,
        sources: Sequence[SourceConfig] = DEFAULT_SOURCES,
        *,
        store: StateStore | None = None,
        notifier: EmailNotifier | None = None,
        session_factory: SessionFactory = browser_session,
        dry_run: bool = False,
    ) -> None:
        self.settings = settings
        self.sources = tuple(sources)
        self.store = store or StateStore(settings.state_dir)
        self.notifier = notifier or EmailNotifier(
            sender=settings.email_user,
            password=settings.email_password,
            recipient=settings.email_recipient,
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            timeout_seconds=settings.smtp_timeout_seconds,
            dry_run=dry_run,
        )
        self.session_factory = session_factory
        self.monitors = [
            SiteMonitor(source, self.store, self.notifier, settings) for source in self.sources
        ]

    def run_once(self) -> RunSummary:
        summary = RunSummary()
        with self.session_factory(self.settings) as browser:
            for monitor in self.monitors:
                name = monitor.source.name
                page = browser.new_page()
                try:
                    summary.results[name] = monitor.check(page)
                except PlaywrightError as exc:
                    summary.failed.append(name)
                    LOGGER.error("%s error: %s", monitor.source.label, exc)
                    capture_error_screenshot(page, self.settings.artifact_dir, name)
                except Exception:
                    summary.failed.append(name)
                    LOGGER.exception("Unexpected failure while checking %s", monitor.source.label)
                    capture_error_screenshot(page, self.settings.artifact_dir, name)
                finally:
                    _close_page(page)

        LOGGER.info(
            "All checks complete: checked=%s failed=%s new=%s",
            len(summary.results),
            len(summary.failed),
            summary.new_listing_count,
        )
        return summary


def _close_page(page: Page) -> None:
    try:
        page.close()
    except PlaywrightError as exc:
        LOGGER.debug("Page close failed: %s", exc)
