"""Helpers for lexicographic order keys."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence, TypeVar

T = TypeVar("T", bound=Mapping[str, Any])

ORDER_KEY_FIELD = "order_key"


def sequential_key(index: int) -> str:
    return f"a{index}"


def _sort_token(record: Mapping[str, Any]) -> tuple[int, str]:
    key = record.get(ORDER_KEY_FIELD)
    if isinstance(key, str) and key:
        return (0, key)
    # rows without a key go after every keyed row
    return (1, "")


def sort_by_order_key(records: Iterable[T]) -> list[T]:
    """Return ``records`` sorted ascending by their ``order_key``.

    The sort is stable, so rows sharing a key (or lacking one) keep their
    relative order.
    """

    return sorted(records, key=_sort_token)


def keys_are_unique(records: Sequence[Mapping[str, Any]]) -> bool:
    keys = [record.get(ORDER_KEY_FIELD) for record in records]
    return len(set(keys)) == len(keys)
