from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

NO_AVAILABILITY_MARKER = "__NO_AVAILABILITY__"
PAGE_CHANGED_MARKER = "__PAGE_CHANGED_SELECTORS_FAILED__"


class SnapshotKind(str, Enum):
    LISTINGS = "listings"
    NO_AVAILABILITY = "no_availability"
    PAGE_CHANGED = "page_changed"


_MARKER_BY_KIND = {
    SnapshotKind.NO_AVAILABILITY: NO_AVAILABILITY_MARKER,
    SnapshotKind.PAGE_CHANGED: PAGE_CHANGED_MARKER,
}
_KIND_BY_MARKER = {marker: kind for kind, marker in _MARKER_BY_KIND.items()}


def normalize_text(value: str) -> str:
    return " ".join(value.split())


def normalize_listings(values: Iterable[str]) -> list[str]:
    output: list[str] = []
    seen: set[str] = set()
    for value in values:
        cleaned = normalize_text(value)
        if not cleaned or cleaned in seen:
            continue
        seen.add(cleaned)
        output.append(cleaned)
    return output


def is_marker(value: str) -> bool:
    return value in _KIND_BY_MARKER


@dataclass(frozen=True)
class Snapshot:
    """Last persisted state of one source.

    Marker kinds never carry listings, so a "no availability" or
    "page changed" snapshot cannot be mixed with real entries.
    """

    kind: SnapshotKind
    listings: tuple[str, ...] = ()
    last_checked: str | None = None

    def __post_init__(self) -> None:
        if self.kind is not SnapshotKind.LISTINGS and self.listings:
            raise ValueError(f"{self.kind.value} snapshot cannot carry listings")

    @classmethod
    def empty(cls) -> Snapshot:
        return cls(kind=SnapshotKind.LISTINGS)

    @classmethod
    def of_listings(cls, listings: Iterable[str], last_checked: str | None = None) -> Snapshot:
        return cls(
            kind=SnapshotKind.LISTINGS,
            listings=tuple(normalize_listings(listings)),
            last_checked=last_checked,
        )

    @classmethod
    def no_availability(cls, last_checked: str | None = None) -> Snapshot:
        return cls(kind=SnapshotKind.NO_AVAILABILITY, last_checked=last_checked)

    @classmethod
    def page_changed(cls, last_checked: str | None = None) -> Snapshot:
        return cls(kind=SnapshotKind.PAGE_CHANGED, last_checked=last_checked)

    @classmethod
    def from_stored(cls, values: list[str], last_checked: str | None = None) -> Snapshot:
        markers = [value for value in values if is_marker(value)]
        if not markers:
            return cls.of_listings(values, last_checked=last_checked)
        if len(values) != 1:
            raise ValueError("Marker entries cannot be mixed with listings")
        return cls(kind=_KIND_BY_MARKER[markers[0]], last_checked=last_checked)

    def to_stored(self) -> list[str]:
        if self.kind is SnapshotKind.LISTINGS:
            return list(self.listings)
        return [_MARKER_BY_KIND[self.kind]]

    @property
    def is_marker(self) -> bool:
        return self.kind is not SnapshotKind.LISTINGS

    @property
    def is_quiet(self) -> bool:
        """True when nothing was listed: never checked, or confirmed empty."""
        if self.kind is SnapshotKind.NO_AVAILABILITY:
            return True
        return self.kind is SnapshotKind.LISTINGS and not self.listings


@dataclass(frozen=True)
class DiffResult:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def has_additions(self) -> bool:
        return bool(self.added)
