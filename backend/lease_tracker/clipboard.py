"""Clipboard writers used by the share action."""

from __future__ import annotations

import logging
from typing import Protocol


logger = logging.getLogger(__name__)


class ClipboardError(RuntimeError):
    """Raised by a clipboard writer that cannot take the text."""


class ClipboardCopyError(RuntimeError):
    """Raised when neither clipboard mechanism accepted the text."""

    def __init__(self) -> None:
        super().__init__("Failed to copy link to clipboard. Please try again.")


class Clipboard(Protocol):
    """Primary clipboard API."""

    async def write_text(self, text: str) -> None:
        """Place ``text`` on the clipboard or raise :class:`ClipboardError`."""


class SelectionClipboard(Protocol):
    """Legacy selection-based copy: put the text in a hidden field, select it
    and issue a copy command."""

    def select_and_copy(self, text: str) -> bool:
        """Return whether the copy command reported success."""


class ResponseClipboard:
    """Primary clipboard for HTTP callers.

    The text is handed back in the response body and the browser performs the
    actual write, so this writer only records what should be copied.
    """

    def __init__(self) -> None:
        self.text: str | None = None

    async def write_text(self, text: str) -> None:
        self.text = text


async def copy_to_clipboard(
    text: str,
    *,
    primary: Clipboard | None,
    fallback: SelectionClipboard | None = None,
) -> bool:
    """Copy ``text`` with the primary clipboard, then the selection fallback.

    Returns ``False`` only when both mechanisms are unavailable or fail.
    """

    if primary is not None:
        try:
            await primary.write_text(text)
            return True
        except ClipboardError as exc:
            logger.info("Primary clipboard refused text, trying fallback: %s", exc)

    if fallback is None:
        return False
    try:
        return fallback.select_and_copy(text)
    except ClipboardError as exc:
        logger.warning("Fallback clipboard failed: %s", exc)
        return False
