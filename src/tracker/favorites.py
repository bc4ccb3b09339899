"""Device-local favorite set.

Favorites are kept outside the application store: one JSON file holding
the ids the user starred on this machine. They are not synchronized and
are discarded on sign-out.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorite_applications"


class FavoriteStore:
    """A JSON-backed set of favorited application ids."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._ids: set[str] = set()

    def load(self) -> None:
        """Load favorites from disk (empty if missing or unreadable)."""
        if not self.path.exists():
            self._ids = set()
            return

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read favorites from %s: %s", self.path, e)
            self._ids = set()
            return

        entries = raw.get(FAVORITES_KEY, []) if isinstance(raw, dict) else []
        if not isinstance(entries, list):
            entries = []
        self._ids = {item for item in entries if isinstance(item, str) and item}

    def save(self) -> None:
        """Persist favorites to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        payload = {FAVORITES_KEY: sorted(self._ids)}

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def toggle(self, application_id: str) -> bool:
        """Flip the favorite flag of one application and save.

        Returns:
            True if the application is now a favorite.
        """
        if application_id in self._ids:
            self._ids.discard(application_id)
            favorited = False
        else:
            self._ids.add(application_id)
            favorited = True
        self.save()
        return favorited

    def is_favorite(self, application_id: str) -> bool:
        return application_id in self._ids

    def clear(self) -> None:
        """Forget all favorites and remove the file."""
        self._ids = set()
        self.path.unlink(missing_ok=True)

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    def __contains__(self, application_id: object) -> bool:
        return application_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))

    def __len__(self) -> int:
        return len(self._ids)
