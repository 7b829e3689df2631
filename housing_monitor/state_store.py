from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone

from housing_monitor.models import Snapshot

LOGGER = logging.getLogger(__name__)


class StateStore:
    def __init__(self, state_dir: str) -> None:
        self.state_dir = state_dir
        if state_dir:
            os.makedirs(state_dir, exist_ok=True)

    def path_for(self, key: str) -> str:
        return os.path.join(self.state_dir, key)

    def load(self, key: str) -> Snapshot:
        path = self.path_for(key)
        if not os.path.exists(path):
            LOGGER.info("Starting fresh - no previous data for %s", key)
            return Snapshot.empty()

        try:
            with open(path, encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Unreadable snapshot %s (%s), starting fresh", path, exc)
            return Snapshot.empty()

        if not isinstance(payload, dict):
            LOGGER.warning("Unexpected snapshot shape in %s, starting fresh", path)
            return Snapshot.empty()

        raw_listings = payload.get("listings") or []
        if not isinstance(raw_listings, list) or not all(isinstance(item, str) for item in raw_listings):
            LOGGER.warning("Snapshot %s has a malformed listings field, starting fresh", path)
            return Snapshot.empty()

        last_checked = payload.get("lastChecked")
        if not isinstance(last_checked, str):
            last_checked = None

        try:
            return Snapshot.from_stored(raw_listings, last_checked=last_checked)
        except ValueError as exc:
            LOGGER.warning("Snapshot %s is inconsistent (%s), starting fresh", path, exc)
            return Snapshot.empty()

    def save(self, key: str, snapshot: Snapshot) -> Snapshot:
        now = datetime.now(timezone.utc).isoformat()
        data = {
            "listings": snapshot.to_stored(),
            "lastChecked": now,
        }
        path = self.path_for(key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as handle:
            handle.write(json.dumps(data, indent=2, ensure_ascii=False))
        os.replace(tmp_path, path)
        LOGGER.debug("Saved %s entr(y/ies) to %s", len(data["listings"]), path)
        return Snapshot(kind=snapshot.kind, listings=snapshot.listings, last_checked=now)
