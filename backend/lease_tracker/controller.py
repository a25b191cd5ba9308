"""Page controller for a single project's dashboard.

The controller owns the page lifecycle: it checks the viewer's identity,
loads the project, settles the card order (local preference, upgraded
server value or the built-in default), renders cards and runs the reorder
and share actions. Remote writes that must not block the page are handed to
an injected ``defer`` callable, which the web layer binds to FastAPI
background tasks.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Sequence
from uuid import uuid4

from .backend import BackendClient, BackendError
from .cards import DEFAULT_CARD_ORDER, move_card, upgrade_card_order
from .clipboard import Clipboard, ClipboardCopyError, SelectionClipboard, copy_to_clipboard
from .fetcher import ProjectDataFetcher
from .identity import AuthState
from .models import DashboardCard, Project, ProjectCard
from .queries import CARD_DATA_TYPES
from .repositories.preferences import PreferencesRepository
from .repositories.projects import ProjectNotFoundError, ProjectsRepository


logger = logging.getLogger(__name__)

Defer = Callable[..., None]

HOME_PATH = "/"
PROJECTS_PATH = "/projects"


class PagePhase(str, enum.Enum):
    LOADING = "loading"
    REDIRECT = "redirect"
    NOT_FOUND = "not_found"
    READY = "ready"


@dataclass(frozen=True)
class PageOutcome:
    phase: PagePhase
    redirect_to: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class ShareLink:
    share_id: str
    url: str
    persisted: bool
    reused: bool


class PageNotReadyError(RuntimeError):
    """Raised when an action needs a loaded project and a signed-in viewer."""


def public_share_url(origin: str, share_id: str) -> str:
    return f"{origin.rstrip('/')}/share/{share_id}"


def _new_share_id() -> str:
    return str(uuid4())


class ProjectPageController:
    def __init__(
        self,
        *,
        backend: BackendClient,
        auth: AuthState,
        preferences: PreferencesRepository,
        public_origin: str,
        defer: Defer,
        clipboard: Clipboard | None = None,
        fallback_clipboard: SelectionClipboard | None = None,
        share_id_factory: Callable[[], str] = _new_share_id,
    ) -> None:
        self._backend = backend
        self._projects = ProjectsRepository(backend)
        self._auth = auth
        self._preferences = preferences
        self._public_origin = public_origin
        self._defer = defer
        self._clipboard = clipboard
        self._fallback_clipboard = fallback_clipboard
        self._share_id_factory = share_id_factory
        self._project: Project | None = None
        self._cards: list[ProjectCard] = list(DEFAULT_CARD_ORDER)

    @property
    def project(self) -> Project | None:
        return self._project

    @property
    def cards(self) -> list[ProjectCard]:
        return list(self._cards)

    async def activate(self, project_id: str) -> PageOutcome:
        """Load the page for ``project_id``."""

        if not self._auth.is_loaded:
            return PageOutcome(PagePhase.LOADING)
        if self._auth.user is None:
            return PageOutcome(PagePhase.REDIRECT, redirect_to=HOME_PATH)

        local = self._preferences.load_card_order_entry(project_id)
        self._cards = list(local.cards) if local is not None else list(DEFAULT_CARD_ORDER)

        try:
            project = await self._projects.get_project(project_id)
        except ProjectNotFoundError as exc:
            self._project = None
            return PageOutcome(PagePhase.NOT_FOUND, redirect_to=PROJECTS_PATH, message=exc.message)

        self._project = project
        self._settle_card_order(project, pending_sync=local is not None and local.pending_sync)
        return PageOutcome(PagePhase.READY)

    def _settle_card_order(self, project: Project, *, pending_sync: bool = False) -> None:
        if pending_sync:
            # the server copy predates a local reorder that has not landed yet
            logger.info("Card order for project %s has an unsynced reorder; retrying write", project.id)
            self._defer(self.persist_card_order, project.id, list(self._cards))
            return

        upgrade = upgrade_card_order(project.dashboard_card_order)
        if not upgrade.source_present:
            return

        self._cards = list(upgrade.cards)
        self._preferences.save_card_order(project.id, self._cards)
        if upgrade.needs_write_back:
            logger.info(
                "Card order for project %s is %s; writing it back", project.id, upgrade.status.value
            )
            self._defer(self.persist_card_order, project.id, list(upgrade.cards))

    def reorder(self, source_index: int, destination_index: int) -> list[ProjectCard]:
        """Move a card, update local state at once and defer the remote write.

        Raises:
            CardOrderError: If either index is out of range.
        """

        updated = move_card(self._cards, source_index, destination_index)
        self._cards = updated
        if self._project is not None:
            self._preferences.save_card_order(self._project.id, updated, pending_sync=True)
            self._defer(self.persist_card_order, self._project.id, list(updated))
        return self.cards

    async def persist_card_order(self, project_id: str, cards: Sequence[ProjectCard]) -> bool:
        """Write a card order to the project record; failures are logged only."""

        try:
            await self._projects.save_card_order(project_id, cards)
        except BackendError:
            logger.exception("Failed to save card order for project %s", project_id)
            return False
        self._preferences.mark_card_order_synced(project_id, cards)
        return True

    async def share(self) -> ShareLink:
        """Copy the project's public link, provisioning a share id if needed.

        Raises:
            PageNotReadyError: If no project is loaded or nobody is signed in.
            ClipboardCopyError: If the link could not be copied.
        """

        project = self._project
        if project is None or not self._auth.is_signed_in:
            raise PageNotReadyError("Project is not loaded.")

        if project.public_share_id:
            url = public_share_url(self._public_origin, project.public_share_id)
            if not await self._copy(url):
                raise ClipboardCopyError()
            return ShareLink(project.public_share_id, url, persisted=True, reused=True)

        share_id = self._share_id_factory()
        url = public_share_url(self._public_origin, share_id)
        # copied before it is persisted
        if not await self._copy(url):
            raise ClipboardCopyError()

        try:
            await self._projects.set_share_id(project.id, share_id)
        except BackendError:
            logger.warning("Share id for project %s copied but not saved", project.id, exc_info=True)
            return ShareLink(share_id, url, persisted=False, reused=False)

        self._project = project.model_copy(update={"public_share_id": share_id})
        return ShareLink(share_id, url, persisted=True, reused=False)

    async def _copy(self, text: str) -> bool:
        return await copy_to_clipboard(
            text, primary=self._clipboard, fallback=self._fallback_clipboard
        )

    def share_url(self) -> str | None:
        if self._project is None or not self._project.public_share_id:
            return None
        return public_share_url(self._public_origin, self._project.public_share_id)

    def card_fetcher(self, card: ProjectCard) -> ProjectDataFetcher:
        if self._project is None:
            raise PageNotReadyError("Project is not loaded.")
        return ProjectDataFetcher(
            self._backend,
            data_type=CARD_DATA_TYPES[card.type],
            project_id=self._project.id,
            viewer=self._auth.user,
        )

    async def render_cards(self) -> list[DashboardCard]:
        """Fetch every card's content in display order."""

        fetchers = [(card, self.card_fetcher(card)) for card in self._cards]
        results = await asyncio.gather(*(fetcher.fetch() for _, fetcher in fetchers))
        return [
            DashboardCard(card=card, data_type=fetcher.data_type, content=content)
            for (card, fetcher), content in zip(fetchers, results)
        ]
