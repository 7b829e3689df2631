from __future__ import annotations

from dataclasses import dataclass

from housing_monitor.extractors import CardTextExtractor, Extractor, KeyboardIncrementalExtractor


@dataclass(frozen=True)
class SourceConfig:
    name: str
    label: str
    url: str
    snapshot_key: str
    extractor: Extractor
    subject: str
    page_changed_subject: str
    no_availability_phrase: str | None = None
    settle_ms: int = 3000
    # Entering the "no availability" state is quiet unless this is set.
    alert_on_no_availability: bool = False
    alert_on_page_changed: bool = True
    max_item_chars: int | None = None


AIRTABLE = SourceConfig(
    name="airtable",
    label="Airtable Form",
    url="https://airtable.com/appsseXTOVx59HC0W/pagcVengefPFQvMZC/form",
    snapshot_key="airtable-data.json",
    extractor=KeyboardIncrementalExtractor(),
    subject="🚨 NEW Affordable Housing (Airtable)!",
    page_changed_subject="⚠️ AIRTABLE FORM CHANGED - Manual Check Needed!",
    settle_ms=5000,
)

ROCKROSE = SourceConfig(
    name="rockrose",
    label="Rockrose",
    url="https://rockrose.com/affordable-availabilities/",
    snapshot_key="rockrose-data.json",
    extractor=CardTextExtractor(),
    subject="🚨 NEW Affordable Housing (Rockrose)!",
    page_changed_subject="⚠️ ROCKROSE PAGE CHANGED - Manual Check Needed!",
    no_availability_phrase="There is currently no affordable housing availability at this time",
    settle_ms=3000,
    max_item_chars=200,
)

DEFAULT_SOURCES: tuple[SourceConfig, ...] = (AIRTABLE, ROCKROSE)


def select_sources(names: list[str] | None) -> tuple[SourceConfig, ...]:
    if not names:
        return DEFAULT_SOURCES
    by_name = {source.name: source for source in DEFAULT_SOURCES}
    unknown = [name for name in names if name not in by_name]
    if unknown:
        raise ValueError(f"Unknown source(s): {', '.join(unknown)}")
    return tuple(by_name[name] for name in dict.fromkeys(names))
