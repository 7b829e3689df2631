from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from playwright.sync_api import Page

from housing_monitor.config import Settings
from housing_monitor.diff import diff_listings
from housing_monitor.email_notifier import EmailNotifier
from housing_monitor.extractors import page_text
from housing_monitor.models import Snapshot, SnapshotKind, normalize_text
from housing_monitor.state_store import StateStore
from housing_monitor.sources import SourceConfig

LOGGER = logging.getLogger(__name__)

PREVIEW_CHARS = 500


class CheckOutcome(str, Enum):
    NO_AVAILABILITY = "no_availability"
    NEW_LISTINGS = "new_listings"
    NO_CHANGE = "no_change"
    PAGE_CHANGED_ALERTED = "page_changed_alerted"
    PAGE_CHANGED_SILENT = "page_changed_silent"


@dataclass(frozen=True)
class CheckResult:
    outcome: CheckOutcome
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    # None when no email was attempted.
    alert_sent: bool | None = None


class SiteMonitor:
    def __init__(
        self,
        source: SourceConfig,
        store: StateStore,
        notifier: EmailNotifier,
        settings: Settings,
    ) -> None:
        self.source = source
        self.store = store
        self.notifier = notifier
        self.settings = settings

    def check(self, page: Page) -> CheckResult:
        source = self.source
        LOGGER.info("Loading %s (%s)", source.label, source.url)
        page.goto(source.url, wait_until="networkidle", timeout=self.settings.navigation_timeout_ms)
        page.wait_for_timeout(source.settle_ms)

        previous = self.store.load(source.snapshot_key)

        if source.no_availability_phrase:
            phrase = normalize_text(source.no_availability_phrase)
            if phrase in page_text(page):
                return self._handle_no_availability(previous)

        listings = source.extractor.extract(page)
        if listings:
            return self._handle_listings(previous, listings)

        return self._handle_page_changed(previous, page_text(page))

    def _handle_no_availability(self, previous: Snapshot) -> CheckResult:
        LOGGER.info("%s: no listings available (showing 'no availability' message)", self.source.label)
        alert_sent = None
        if self.source.alert_on_no_availability and previous.kind is not SnapshotKind.NO_AVAILABILITY:
            alert_sent = self._notify(
                self.source.subject,
                ["The site now reports that no units are available."],
                label=self.source.label,
            )
        self._persist(Snapshot.no_availability(), alert_sent)
        return CheckResult(outcome=CheckOutcome.NO_AVAILABILITY, alert_sent=alert_sent)

    def _handle_listings(self, previous: Snapshot, listings: list[str]) -> CheckResult:
        source = self.source
        LOGGER.info("%s: %s listing(s) found", source.label, len(listings))

        result = diff_listings(previous.listings, listings)
        for item in result.removed:
            LOGGER.info("  - no longer listed: %s", _preview(item, 100))

        alert_sent = None
        if result.added:
            LOGGER.info("NEW %s LISTINGS!", source.label.upper())
            for item in result.added:
                LOGGER.info("  + %s", _preview(item, 100))
            items = result.added
            if source.max_item_chars:
                items = [item[: source.max_item_chars] for item in items]
            alert_sent = self._notify(source.subject, items, label=source.label)
            outcome = CheckOutcome.NEW_LISTINGS
        else:
            LOGGER.info("%s: no new listings", source.label)
            outcome = CheckOutcome.NO_CHANGE

        self._persist(Snapshot.of_listings(listings), alert_sent)
        return CheckResult(
            outcome=outcome,
            added=result.added,
            removed=result.removed,
            alert_sent=alert_sent,
        )

    def _handle_page_changed(self, previous: Snapshot, text: str) -> CheckResult:
        source = self.source
        preview = text[:PREVIEW_CHARS]
        LOGGER.warning("%s PAGE CHANGED! Nothing could be extracted and no quiet-state message is shown", source.label)
        LOGGER.warning("Page preview: %s", preview)

        alert_sent = None
        outcome = CheckOutcome.PAGE_CHANGED_SILENT
        if source.alert_on_page_changed and previous.is_quiet:
            LOGGER.warning("Alerting: %s left its known quiet state", source.label)
            alert_sent = self._notify(
                source.page_changed_subject,
                [
                    "⚠️ The expected listings could not be found on the page.",
                    "The page structure may have changed. Please check manually:",
                    f"First {PREVIEW_CHARS} characters of page: {preview}",
                ],
                label=f"{source.label} (Requires Manual Check)",
            )
            outcome = CheckOutcome.PAGE_CHANGED_ALERTED
        elif previous.kind is SnapshotKind.PAGE_CHANGED:
            LOGGER.info("%s was already marked as changed, not alerting again", source.label)

        self._persist(Snapshot.page_changed(), alert_sent)
        return CheckResult(outcome=outcome, alert_sent=alert_sent)

    def _notify(self, subject: str, items: Sequence[str], label: str) -> bool:
        return self.notifier.notify(subject, items, apply_url=self.source.url, source_label=label)

    def _persist(self, snapshot: Snapshot, alert_sent: bool | None) -> None:
        if alert_sent is False and not self.settings.persist_on_notify_failure:
            LOGGER.warning(
                "Alert for %s was not delivered, keeping previous snapshot so the next run retries",
                self.source.label,
            )
            return
        self.store.save(self.source.snapshot_key, snapshot)


def _preview(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."
