"""Dashboard card descriptors, card-order schema upgrades and reordering."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Final, Mapping, Sequence

from .models import ProjectCard
from .order_keys import ORDER_KEY_FIELD, keys_are_unique, sequential_key, sort_by_order_key


DEFAULT_CARD_ORDER: Final[tuple[ProjectCard, ...]] = (
    ProjectCard(id="updates", type="updates", title="Recent Updates", order_key="a0"),
    ProjectCard(
        id="availability",
        type="availability",
        title="Client Tour Availability",
        order_key="a1",
    ),
    ProjectCard(
        id="properties",
        type="properties",
        title="Properties of Interest",
        order_key="a2",
    ),
    ProjectCard(id="roadmap", type="roadmap", title="Project Roadmap", order_key="a3"),
    ProjectCard(id="documents", type="documents", title="Project Documents", order_key="a4"),
)

_DEFAULTS_BY_TYPE: Final[dict[str, ProjectCard]] = {card.type: card for card in DEFAULT_CARD_ORDER}


class CardOrderError(ValueError):
    """Raised when a reorder request references a position outside the list."""


class UpgradeStatus(str, enum.Enum):
    UNCHANGED = "unchanged"
    UPGRADED = "upgraded"
    DEFAULTED = "defaulted"


@dataclass(frozen=True)
class CardOrderUpgrade:
    """Tagged result of :func:`upgrade_card_order`.

    Attributes:
        status: ``unchanged`` when the stored value already uses the current
            shape, ``upgraded`` when legacy entries were given order keys and
            ``defaulted`` when the stored value was absent or unusable.
        cards: The card order to display.
        source_present: Whether any stored value was supplied at all.
    """

    status: UpgradeStatus
    cards: tuple[ProjectCard, ...]
    source_present: bool

    @property
    def needs_write_back(self) -> bool:
        """True when the stored value should be replaced by :attr:`cards`."""

        return self.source_present and self.status is not UpgradeStatus.UNCHANGED


def _resolve_legacy_entry(entry: Any) -> tuple[ProjectCard, str | None] | None:
    """Map one stored entry onto a default card plus its stored key, if any."""

    if isinstance(entry, str):
        template = _DEFAULTS_BY_TYPE.get(entry)
        return (template, None) if template else None

    if not isinstance(entry, Mapping):
        return None

    card_type = entry.get("type") or entry.get("id")
    template = _DEFAULTS_BY_TYPE.get(card_type) if isinstance(card_type, str) else None
    if template is None:
        return None

    title = entry.get("title")
    if isinstance(title, str) and title.strip():
        template = template.model_copy(update={"title": title})
    card_id = entry.get("id")
    if isinstance(card_id, str) and card_id:
        template = template.model_copy(update={"id": card_id})

    stored_key = entry.get(ORDER_KEY_FIELD)
    return template, stored_key if isinstance(stored_key, str) and stored_key else None


def upgrade_card_order(
    stored: Any,
    default: Sequence[ProjectCard] = DEFAULT_CARD_ORDER,
) -> CardOrderUpgrade:
    """Upgrade a stored card order to the current keyed shape.

    Legacy entries are either bare card ids or mappings without an
    ``order_key``. They keep their stored position and receive sequential
    keys. Any entry that cannot be mapped to a built-in card, or a repeated
    card type, invalidates the whole value and the default order is used.
    """

    fallback = tuple(default)
    if stored is None:
        return CardOrderUpgrade(UpgradeStatus.DEFAULTED, fallback, source_present=False)

    if not isinstance(stored, list) or not stored:
        return CardOrderUpgrade(UpgradeStatus.DEFAULTED, fallback, source_present=True)

    resolved: list[tuple[ProjectCard, str | None]] = []
    for entry in stored:
        match = _resolve_legacy_entry(entry)
        if match is None:
            return CardOrderUpgrade(UpgradeStatus.DEFAULTED, fallback, source_present=True)
        resolved.append(match)

    if len({card.type for card, _ in resolved}) != len(resolved):
        return CardOrderUpgrade(UpgradeStatus.DEFAULTED, fallback, source_present=True)

    current_shape = all(key is not None for _, key in resolved)
    if current_shape:
        keyed = [card.model_copy(update={ORDER_KEY_FIELD: key}) for card, key in resolved]
        if keys_are_unique([card.model_dump() for card in keyed]):
            ordered = sort_by_order_key(card.model_dump() for card in keyed)
            return CardOrderUpgrade(
                UpgradeStatus.UNCHANGED,
                tuple(ProjectCard.model_validate(card) for card in ordered),
                source_present=True,
            )

    upgraded = tuple(
        card.model_copy(update={ORDER_KEY_FIELD: sequential_key(index)})
        for index, (card, _) in enumerate(resolved)
    )
    return CardOrderUpgrade(UpgradeStatus.UPGRADED, upgraded, source_present=True)


def move_card(
    cards: Sequence[ProjectCard], source_index: int, destination_index: int
) -> list[ProjectCard]:
    """Move one card and regenerate every order key sequentially.

    Raises:
        CardOrderError: If either index is outside the list.
    """

    count = len(cards)
    for label, index in (("source", source_index), ("destination", destination_index)):
        if not 0 <= index < count:
            raise CardOrderError(f"Card {label} index {index} is out of range.")

    reordered = list(cards)
    moved = reordered.pop(source_index)
    reordered.insert(destination_index, moved)
    return [
        card.model_copy(update={ORDER_KEY_FIELD: sequential_key(index)})
        for index, card in enumerate(reordered)
    ]


def serialise_card_order(cards: Sequence[ProjectCard]) -> list[dict[str, str]]:
    return [card.model_dump() for card in cards]
