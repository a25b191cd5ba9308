from __future__ import annotations

import sqlite3
from pathlib import Path

from lease_tracker.cards import DEFAULT_CARD_ORDER, move_card
from lease_tracker.repositories.preferences import PreferencesRepository, card_order_key


def test_key_format() -> None:
    assert card_order_key("abc") == "project-card-order-abc"


def test_missing_order_is_none(preferences: PreferencesRepository) -> None:
    assert preferences.load_card_order("project-1") is None
    assert preferences.count() == 0


def test_orders_are_stored_per_project(preferences: PreferencesRepository) -> None:
    moved = move_card(DEFAULT_CARD_ORDER, 0, 2)
    preferences.save_card_order("project-1", moved)
    preferences.save_card_order("project-2", DEFAULT_CARD_ORDER)

    assert preferences.load_card_order("project-1") == moved
    assert preferences.load_card_order("project-2") == list(DEFAULT_CARD_ORDER)
    assert preferences.count() == 2


def test_save_overwrites(preferences: PreferencesRepository) -> None:
    preferences.save_card_order("project-1", DEFAULT_CARD_ORDER)
    preferences.save_card_order("project-1", DEFAULT_CARD_ORDER[:2])
    stored = preferences.load_card_order("project-1")
    assert stored is not None and len(stored) == 2
    assert preferences.count() == 1


def test_corrupt_entry_is_ignored(preferences: PreferencesRepository, db_path: Path) -> None:
    preferences.save_card_order("project-1", DEFAULT_CARD_ORDER)
    connection = sqlite3.connect(db_path)
    with connection:
        connection.execute(
            "UPDATE preferences SET value_json = ? WHERE key = ?",
            ('[{"id": "x"}]', card_order_key("project-1")),
        )
    connection.close()

    assert preferences.load_card_order("project-1") is None


def test_pending_flag_round_trips(preferences: PreferencesRepository) -> None:
    preferences.save_card_order("project-1", DEFAULT_CARD_ORDER, pending_sync=True)
    entry = preferences.load_card_order_entry("project-1")
    assert entry is not None
    assert entry.pending_sync is True
    assert entry.cards == list(DEFAULT_CARD_ORDER)


def test_mark_synced_only_matches_current_order(preferences: PreferencesRepository) -> None:
    moved = move_card(DEFAULT_CARD_ORDER, 0, 2)
    preferences.save_card_order("project-1", moved, pending_sync=True)

    assert preferences.mark_card_order_synced("project-1", DEFAULT_CARD_ORDER) is False
    assert preferences.load_card_order_entry("project-1").pending_sync is True  # type: ignore[union-attr]

    assert preferences.mark_card_order_synced("project-1", moved) is True
    assert preferences.load_card_order_entry("project-1").pending_sync is False  # type: ignore[union-attr]
