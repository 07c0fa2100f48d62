"""
Journal - collectible pages unlocked by commands or by conditions.

Pages with an unlock condition unlock themselves as soon as the
condition holds. The check runs whenever a store flag or integer
changes, never on a timer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict

from whisper_engine.core.events import WorldEvent

if TYPE_CHECKING:
    from whisper_engine.resources.database import ContentDatabase
    from whisper_framework.world.context import WorldContext

logger = logging.getLogger(__name__)


class JournalPage(BaseModel):
    """
    A journal page.

    Attributes:
        page_id: Unique id
        title: Display title
        sort_order: Lower sorts earlier
        text: Page content
        unlocked_by_default: Available from the start
        unlock_condition: Auto-unlocks when this holds
        unlock_flag: Flag set when the page unlocks
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    page_id: str
    title: str = ""
    sort_order: int = 0
    text: str = ""
    unlocked_by_default: bool = False
    unlock_condition: str = ""
    unlock_flag: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JournalPage:
        fields = dict(data)
        fields['page_id'] = fields.pop('id')
        return cls(**fields)


class JournalManager:
    """
    Tracks which pages are unlocked and viewed.

    Publishes WorldEvent.JOURNAL_PICKED_UP, JOURNAL_OPENED (page_id),
    JOURNAL_CLOSED and PAGE_UNLOCKED (page, silent).
    """

    def __init__(self, context: WorldContext, pages: Iterable[JournalPage] = ()):
        self.context = context

        self._pages: dict[str, JournalPage] = {}
        self._unlocked: set[str] = set()
        self._viewed: set[str] = set()
        self._checking = False

        self.has_journal = False
        self.is_open = False
        self.open_page: Optional[str] = None

        self.add_pages(pages)

        store = context.store
        self._subscriptions = [
            store.on_bool_changed.subscribe(self._on_store_changed),
            store.on_int_changed.subscribe(self._on_store_changed),
        ]

    def dispose(self) -> None:
        """Stop listening to the store."""
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()

    # --- Pages ---

    def add_pages(self, pages: Iterable[JournalPage]) -> None:
        for page in pages:
            self._pages[page.page_id] = page
            if page.unlocked_by_default:
                self._unlocked.add(page.page_id)
        self.check_auto_unlocks()

    def load_pages(self, db: ContentDatabase) -> None:
        """Add every journal page from the content database."""
        self.add_pages(JournalPage.from_dict(data) for data in db.journal_pages.values())

    def has_page(self, page_id: str) -> bool:
        return page_id in self._pages

    def get_page(self, page_id: str) -> Optional[JournalPage]:
        return self._pages.get(page_id)

    def is_page_unlocked(self, page_id: str) -> bool:
        return page_id in self._unlocked

    def get_unlocked_pages(self) -> list[JournalPage]:
        """Unlocked pages in sort order."""
        pages = [self._pages[p] for p in self._unlocked if p in self._pages]
        return sorted(pages, key=lambda page: (page.sort_order, page.page_id))

    def unlock_page(self, page_id: str, silent: bool = False) -> bool:
        """
        Unlock a page.

        Returns:
            False if no page has that id
        """
        page = self._pages.get(page_id)
        if page is None:
            return False
        if page_id in self._unlocked:
            return True

        self._unlocked.add(page_id)
        logger.info(f"Journal page unlocked: {page_id}")
        self.context.events.publish(WorldEvent.PAGE_UNLOCKED, page=page, silent=silent)

        if page.unlock_flag:
            self.context.store.set_bool(page.unlock_flag, True)
        return True

    def check_auto_unlocks(self) -> None:
        """Unlock every locked page whose condition now holds."""
        if self._checking:
            return

        store = self.context.store
        self._checking = True
        try:
            unlocked_any = True
            while unlocked_any:
                unlocked_any = False
                for page in self._pages.values():
                    if page.page_id in self._unlocked or not page.unlock_condition.strip():
                        continue
                    if store.evaluate_condition(page.unlock_condition):
                        self.unlock_page(page.page_id, silent=True)
                        unlocked_any = True
        finally:
            self._checking = False

    def _on_store_changed(self, key: str, value: Any) -> None:
        self.check_auto_unlocks()

    # --- Viewing ---

    def mark_page_viewed(self, page_id: str) -> None:
        self._viewed.add(page_id)

    def is_page_viewed(self, page_id: str) -> bool:
        return page_id in self._viewed

    def get_new_page_count(self) -> int:
        return len(self._unlocked - self._viewed)

    # --- Journal item ---

    def pick_up(self) -> None:
        """Give the player the journal."""
        if self.has_journal:
            return

        self.has_journal = True
        store = self.context.store
        store.set_bool("has_journal", True)
        store.set_bool("journal_found", True)
        logger.info("Journal picked up")
        self.context.events.publish(WorldEvent.JOURNAL_PICKED_UP)

    def open(self, goto_page: Optional[str] = None) -> bool:
        """
        Open the journal, optionally at a page.

        Returns:
            False if the player has no journal
        """
        if not self.has_journal:
            logger.debug("Cannot open journal: not picked up yet")
            return False

        if goto_page:
            self.open_page = goto_page
            self.mark_page_viewed(goto_page)

        if not self.is_open:
            self.is_open = True
            self.context.events.publish(WorldEvent.JOURNAL_OPENED, page_id=self.open_page)
        return True

    def close(self) -> None:
        if not self.is_open:
            return
        self.is_open = False
        self.context.events.publish(WorldEvent.JOURNAL_CLOSED)

    def restore(self, unlocked_pages: Iterable[str], has_journal: bool) -> None:
        """Replace unlock state from a save (no events)."""
        self._unlocked = {p for p in unlocked_pages if p in self._pages}
        self.has_journal = has_journal
