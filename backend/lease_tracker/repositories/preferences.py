"""SQLite-backed store for per-project dashboard preferences."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from ..db import preferences_connection
from ..models import ProjectCard


logger = logging.getLogger(__name__)


def card_order_key(project_id: str) -> str:
    return f"project-card-order-{project_id}"


def _encode(cards: Sequence[ProjectCard]) -> str:
    return json.dumps([card.model_dump() for card in cards], separators=(",", ":"))


@dataclass(frozen=True)
class StoredCardOrder:
    """A cached card order and whether its remote write is still outstanding."""

    cards: list[ProjectCard]
    pending_sync: bool = False


class PreferencesRepository:
    """Durable key/value storage for dashboard card orders."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path

    def load_card_order_entry(self, project_id: str) -> StoredCardOrder | None:
        """Return the cached entry, or ``None`` when absent or unreadable."""

        with preferences_connection(self._path) as connection:
            row = connection.execute(
                "SELECT value_json, pending_sync FROM preferences WHERE key = ?",
                (card_order_key(project_id),),
            ).fetchone()

        if row is None:
            return None

        try:
            payload = json.loads(row["value_json"])
            cards = [ProjectCard.model_validate(item) for item in payload]
        except (ValueError, TypeError, ValidationError) as exc:
            logger.warning("Ignoring unreadable card order for project %s: %s", project_id, exc)
            return None
        return StoredCardOrder(cards=cards, pending_sync=bool(row["pending_sync"]))

    def load_card_order(self, project_id: str) -> list[ProjectCard] | None:
        entry = self.load_card_order_entry(project_id)
        return entry.cards if entry is not None else None

    def save_card_order(
        self, project_id: str, cards: Sequence[ProjectCard], *, pending_sync: bool = False
    ) -> None:
        """Cache ``cards``; ``pending_sync`` marks an order not yet on the server."""

        now = datetime.now(timezone.utc).isoformat()
        with preferences_connection(self._path) as connection:
            connection.execute(
                """
                INSERT INTO preferences (key, value_json, updated_at, pending_sync)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value_json = excluded.value_json,
                    updated_at = excluded.updated_at,
                    pending_sync = excluded.pending_sync
                """,
                (card_order_key(project_id), _encode(cards), now, int(pending_sync)),
            )

    def mark_card_order_synced(self, project_id: str, cards: Sequence[ProjectCard]) -> bool:
        """Clear the pending flag if the cached order is still ``cards``.

        Returns ``False`` when a newer local order has replaced it since.
        """

        with preferences_connection(self._path) as connection:
            cursor = connection.execute(
                "UPDATE preferences SET pending_sync = 0 WHERE key = ? AND value_json = ?",
                (card_order_key(project_id), _encode(cards)),
            )
            updated = cursor.rowcount
        return updated > 0

    def count(self) -> int:
        with preferences_connection(self._path) as connection:
            row = connection.execute("SELECT COUNT(*) FROM preferences").fetchone()
        return int(row[0])
