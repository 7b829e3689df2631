from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Union

from bs4 import BeautifulSoup, Tag
from playwright.sync_api import Page

from housing_monitor.models import normalize_listings, normalize_text

LOGGER = logging.getLogger(__name__)

SELECT_PLACEHOLDERS = frozenset({"", "Select an option", "Choose an option"})
KEYBOARD_PLACEHOLDERS = frozenset({"", "Search", "Select an option", "Choose an option"})

FIND_SCROLLABLE_JS = """
(selectors) => {
  for (const selector of selectors) {
    for (const el of document.querySelectorAll(selector)) {
      if (el.scrollHeight > el.clientHeight) {
        el.setAttribute('data-housing-monitor-scroll', '1');
        return selector;
      }
    }
  }
  return null;
}
"""

SCROLL_STEP_JS = """
(step) => {
  const el = document.querySelector('[data-housing-monitor-scroll="1"]');
  if (!el) return true;
  el.scrollTop = Math.min(el.scrollTop + step, el.scrollHeight);
  return el.scrollTop + el.clientHeight >= el.scrollHeight;
}
"""

CLICK_BUTTON_JS = """
(labels) => {
  const buttons = Array.from(document.querySelectorAll('button'));
  for (const label of labels) {
    const match = buttons.find(btn => (btn.textContent || '').includes(label)
      || (btn.getAttribute('aria-label') || '').includes(label));
    if (match) {
      match.click();
      return true;
    }
  }
  return false;
}
"""

FOCUS_JS = """
(selectors) => {
  for (const selector of selectors) {
    const el = document.querySelector(selector);
    if (el) {
      el.focus();
      return true;
    }
  }
  return false;
}
"""

HIGHLIGHTED_TEXT_JS = """
(selectors) => {
  for (const selector of selectors) {
    const el = document.querySelector(selector);
    if (el) return (el.textContent || '').trim();
  }
  return '';
}
"""


def parse_page(page: Page) -> BeautifulSoup:
    return BeautifulSoup(page.content(), "html.parser")


def page_text(page: Page) -> str:
    soup = parse_page(page)
    root = soup.body or soup
    return normalize_text(root.get_text())


def first_matching_rule(
    soup: BeautifulSoup,
    selectors: Iterable[str],
    placeholders: frozenset[str] = frozenset({""}),
) -> list[str] | None:
    for selector in selectors:
        texts = [_element_text(element) for element in soup.select(selector)]
        usable = normalize_listings(text for text in texts if text not in placeholders)
        if usable:
            LOGGER.debug("Selector %r matched %s item(s)", selector, len(usable))
            return usable
    return None


def _element_text(element: Tag) -> str:
    return normalize_text(element.get_text())


@dataclass(frozen=True)
class StaticSelectExtractor:
    selectors: tuple[str, ...] = ("select option", "option")
    placeholders: frozenset[str] = SELECT_PLACEHOLDERS

    def extract(self, page: Page) -> list[str] | None:
        return first_matching_rule(parse_page(page), self.selectors, self.placeholders)


@dataclass(frozen=True)
class AriaListboxExtractor:
    selectors: tuple[str, ...] = (
        '[role="listbox"] [role="option"]',
        '[role="option"]',
    )
    placeholders: frozenset[str] = SELECT_PLACEHOLDERS

    def extract(self, page: Page) -> list[str] | None:
        return first_matching_rule(parse_page(page), self.selectors, self.placeholders)


@dataclass(frozen=True)
class ScrollLazyLoadExtractor:
    container_selectors: tuple[str, ...] = (
        '[role="listbox"]',
        '[class*="scroll"]',
        '[class*="list"]',
        "main",
    )
    step_px: int = 200
    max_steps: int = 30
    step_delay_ms: int = 150
    listbox: AriaListboxExtractor = field(default_factory=AriaListboxExtractor)

    def extract(self, page: Page) -> list[str] | None:
        selector = page.evaluate(FIND_SCROLLABLE_JS, list(self.container_selectors))
        if selector is None:
            LOGGER.debug("No scrollable container found, reading listbox as rendered")
        else:
            steps = self._scroll_to_bottom(page)
            LOGGER.debug("Scrolled %r in %s step(s)", selector, steps)
        return self.listbox.extract(page)

    def _scroll_to_bottom(self, page: Page) -> int:
        for step in range(1, self.max_steps + 1):
            reached_bottom = page.evaluate(SCROLL_STEP_JS, self.step_px)
            page.wait_for_timeout(self.step_delay_ms)
            if reached_bottom:
                return step
        return self.max_steps


@dataclass(frozen=True)
class KeyboardIncrementalExtractor:
    highlighted_selectors: tuple[str, ...] = (
        '[role="option"][data-selected="true"]',
        '[role="option"][aria-selected="true"]',
        '[role="option"][class*="selected"]',
        '[role="option"][class*="active"]',
        '[role="option"][class*="highlight"]',
    )
    open_button_labels: tuple[str, ...] = ("Add unit", "Add")
    focus_selectors: tuple[str, ...] = ('input[type="text"]', 'input[placeholder*="Search"]')
    key: str = "ArrowDown"
    max_iterations: int = 200
    max_repeats: int = 2
    key_delay_ms: int = 100
    open_delay_ms: int = 2000
    focus_delay_ms: int = 500
    placeholders: frozenset[str] = KEYBOARD_PLACEHOLDERS

    def extract(self, page: Page) -> list[str] | None:
        if self.open_button_labels:
            if not page.evaluate(CLICK_BUTTON_JS, list(self.open_button_labels)):
                LOGGER.debug("No button matching %s found", self.open_button_labels)
            page.wait_for_timeout(self.open_delay_ms)

        if self.focus_selectors:
            page.evaluate(FOCUS_JS, list(self.focus_selectors))
            page.wait_for_timeout(self.focus_delay_ms)

        return self.traverse(page)

    def traverse(self, page: Page) -> list[str] | None:
        collected: list[str] = []
        seen: set[str] = set()
        repeats = 0

        self._advance(page)
        for _ in range(self.max_iterations):
            text = normalize_text(page.evaluate(HIGHLIGHTED_TEXT_JS, list(self.highlighted_selectors)) or "")
            if text not in self.placeholders:
                if text in seen:
                    repeats += 1
                    if repeats > self.max_repeats:
                        LOGGER.info("Option list wrapped around after %s item(s)", len(collected))
                        break
                else:
                    repeats = 0
                    seen.add(text)
                    collected.append(text)
            self._advance(page)

        return collected or None

    def _advance(self, page: Page) -> None:
        page.keyboard.press(self.key)
        page.wait_for_timeout(self.key_delay_ms)


@dataclass(frozen=True)
class CardTextExtractor:
    selectors: tuple[str, ...] = (
        "article",
        ".property-card",
        ".listing-item",
        ".availability-item",
        '[class*="property"]',
        '[class*="listing"]',
        '[class*="unit"]',
    )
    min_length: int = 50
    excluded_prefixes: tuple[str, ...] = ("View All", "About")

    def extract(self, page: Page) -> list[str] | None:
        soup = parse_page(page)
        for selector in self.selectors:
            texts = [_element_text(element) for element in soup.select(selector)]
            cards = [text for text in texts if self._looks_like_listing(text)]
            if cards:
                LOGGER.debug("Selector %r matched %s card(s)", selector, len(cards))
                return normalize_listings(cards)
        return None

    def _looks_like_listing(self, text: str) -> bool:
        if len(text) <= self.min_length:
            return False
        return not text.startswith(self.excluded_prefixes)


Extractor = Union[
    StaticSelectExtractor,
    AriaListboxExtractor,
    ScrollLazyLoadExtractor,
    KeyboardIncrementalExtractor,
    CardTextExtractor,
]
