from __future__ import annotations

from typing import Iterable, Sequence

from housing_monitor.models import DiffResult


def diff_listings(previous: Sequence[str], current: Iterable[str]) -> DiffResult:
    current_items = list(dict.fromkeys(current))
    current_set = set(current_items)
    previous_set = set(previous)

    added = [item for item in current_items if item not in previous_set]
    unchanged = [item for item in current_items if item in previous_set]
    removed = [item for item in dict.fromkeys(previous) if item not in current_set]
    return DiffResult(added=added, removed=removed, unchanged=unchanged)
