"""
AUTIHD Reminder Store - In-Memory Application State

Owns the authoritative list of categories and their reminders for the
lifetime of the process.

Design:
- No persistence: the session is the store's whole lifetime
- Every mutation is atomic and serialized behind one lock
- Lookup misses are silent no-ops (logged, never raised)
- Presentation layer observes changes through subscribe()
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .reminder_models import Category, Reminder, create_reminder

logger = logging.getLogger(__name__)


DEFAULT_CATEGORIES = ("Appointments", "Chores", "Groceries")


class StoreEventKind(Enum):
    """Kinds of store mutation"""
    ADDED = "added"
    TOGGLED = "toggled"
    DELETED = "deleted"


@dataclass(frozen=True)
class StoreEvent:
    """Published to subscribers after every successful mutation"""
    kind: StoreEventKind
    category_id: Optional[str]
    reminder_ids: Tuple[str, ...]


StoreListener = Callable[[StoreEvent], None]


class _ObservableStore:
    """Lock and listener bookkeeping shared by both store variants"""

    def __init__(self):
        self._lock = threading.RLock()
        self._listeners: List[StoreListener] = []

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """
        Register a change listener.

        Args:
            listener: Called with a StoreEvent after each mutation

        Returns:
            Function that removes the listener again
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event: StoreEvent):
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                # A broken view must not undo or block the mutation
                logger.error(f"Store listener failed on {event.kind.value}: {e}", exc_info=True)

    @staticmethod
    def _remove_positions(
        reminders: List[Reminder],
        indices: Iterable[int]
    ) -> Optional[List[Reminder]]:
        """
        Remove reminders at the given positions, all or nothing.

        Returns:
            Removed reminders in display order, or None if any position
            is out of range (sequence left untouched)
        """
        positions = sorted(set(indices))
        if not positions:
            return []

        if positions[0] < 0 or positions[-1] >= len(reminders):
            return None

        removed = [reminders[i] for i in positions]
        for i in reversed(positions):
            del reminders[i]
        return removed


class ReminderStore(_ObservableStore):
    """
    Categorized reminder store.

    Categories are fixed at construction; their names must be unique
    because reminders refer to them by name.
    """

    def __init__(self, category_names: Optional[Iterable[str]] = None):
        """
        Initialize reminder store.

        Args:
            category_names: Initial categories in display order
                (default: Appointments, Chores, Groceries)
        """
        super().__init__()

        names = list(category_names) if category_names is not None else list(DEFAULT_CATEGORIES)
        seen = set()
        for name in names:
            if name in seen:
                raise ValueError(f"Duplicate category name: {name}")
            seen.add(name)

        self._categories: List[Category] = [Category(name=name) for name in names]

        logger.info(f"ReminderStore initialized with {len(self._categories)} categories")

    @property
    def categories(self) -> List[Category]:
        """Categories in display order (live objects, do not mutate)"""
        return list(self._categories)

    def category_names(self) -> List[str]:
        """Names for the add-form category picker"""
        return [c.name for c in self._categories]

    def get_category(self, category_id: str) -> Optional[Category]:
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def find_category(self, name: str) -> Optional[Category]:
        for category in self._categories:
            if category.name == name:
                return category
        return None

    def get_reminder(self, reminder_id: str) -> Optional[Reminder]:
        """
        Get a specific reminder by ID, searching every category.

        Args:
            reminder_id: Reminder ID to find

        Returns:
            Reminder if found, None otherwise
        """
        with self._lock:
            for category in self._categories:
                index = category.index_of(reminder_id)
                if index is not None:
                    return category.reminders[index]
        return None

    def all_reminders(self) -> List[Reminder]:
        """Every reminder, category by category in display order"""
        with self._lock:
            return [r for c in self._categories for r in c.reminders]

    def add_reminder(
        self,
        category: str,
        title: str,
        time: datetime,
        description: Optional[str] = None,
        is_repeating: bool = False
    ) -> Optional[Reminder]:
        """
        Create a reminder at the end of the named category.

        Args:
            category: Category name as shown in the picker
            title: Reminder title, must be non-empty after trimming
            time: When the reminder is due
            description: Optional description, blank becomes None
            is_repeating: Also fire every 10 minutes

        Returns:
            The new Reminder, or None if the title was blank or the
            category does not exist (nothing changes in either case)
        """
        if not title or not title.strip():
            logger.warning("Refusing to add reminder with empty title")
            return None

        with self._lock:
            target = self.find_category(category)
            if target is None:
                logger.warning(f"Category '{category}' not found, reminder not added")
                return None

            reminder = create_reminder(
                title=title,
                time=time,
                description=description,
                is_repeating=is_repeating,
                category=target.name
            )
            target.reminders.append(reminder)

        logger.info(f"Added reminder: {reminder.id} - {reminder.title} ({target.name})")
        self._publish(StoreEvent(StoreEventKind.ADDED, target.id, (reminder.id,)))
        return reminder

    def toggle_completion(self, category_id: str, reminder_id: str) -> bool:
        """
        Flip a reminder's completion flag.

        Args:
            category_id: ID of the category holding the reminder
            reminder_id: ID of the reminder to toggle

        Returns:
            True if toggled, False if either ID was not found
        """
        with self._lock:
            category = self.get_category(category_id)
            if category is None:
                logger.warning(f"Cannot toggle: category {category_id} not found")
                return False

            index = category.index_of(reminder_id)
            if index is None:
                logger.warning(f"Cannot toggle: reminder {reminder_id} not found")
                return False

            completed = category.reminders[index].toggle()

        logger.info(f"Toggled reminder {reminder_id} (completed={completed})")
        self._publish(StoreEvent(StoreEventKind.TOGGLED, category_id, (reminder_id,)))
        return True

    def delete_reminders(self, category_id: str, indices: Iterable[int]) -> List[Reminder]:
        """
        Delete reminders by position within one category.

        Positions refer to the sequence as currently displayed. The whole
        set is applied at once: if any position is out of range nothing
        is removed.

        Args:
            category_id: ID of the category to delete from
            indices: Positions to remove

        Returns:
            Removed reminders (empty if nothing was removed)
        """
        with self._lock:
            category = self.get_category(category_id)
            if category is None:
                logger.warning(f"Cannot delete: category {category_id} not found")
                return []

            removed = self._remove_positions(category.reminders, indices)
            if removed is None:
                logger.warning(
                    f"Cannot delete: positions out of range for '{category.name}' "
                    f"({len(category.reminders)} reminders)"
                )
                return []

        if removed:
            logger.info(f"Deleted {len(removed)} reminder(s) from '{category.name}'")
            self._publish(StoreEvent(
                StoreEventKind.DELETED,
                category_id,
                tuple(r.id for r in removed)
            ))
        return removed

    def get_stats(self) -> Dict[str, int]:
        """
        Get store statistics.

        Returns:
            Dict with total, completed and open counts
        """
        reminders = self.all_reminders()
        completed = sum(1 for r in reminders if r.is_completed)

        return {
            'total': len(reminders),
            'completed': completed,
            'open': len(reminders) - completed,
            'categories': len(self._categories)
        }


class FlatReminderStore(_ObservableStore):
    """
    Single-list reminder store.

    Same operations as ReminderStore applied to one ordered sequence,
    for setups that do not group reminders by category.
    """

    def __init__(self):
        super().__init__()
        self._reminders: List[Reminder] = []
        logger.info("FlatReminderStore initialized")

    @property
    def reminders(self) -> List[Reminder]:
        """Reminders in display order"""
        with self._lock:
            return list(self._reminders)

    def get_reminder(self, reminder_id: str) -> Optional[Reminder]:
        with self._lock:
            for reminder in self._reminders:
                if reminder.id == reminder_id:
                    return reminder
        return None

    def all_reminders(self) -> List[Reminder]:
        return self.reminders

    def add_reminder(
        self,
        title: str,
        time: datetime,
        description: Optional[str] = None,
        is_repeating: bool = False
    ) -> Optional[Reminder]:
        """Append a reminder; None (no change) if the title is blank"""
        if not title or not title.strip():
            logger.warning("Refusing to add reminder with empty title")
            return None

        reminder = create_reminder(
            title=title,
            time=time,
            description=description,
            is_repeating=is_repeating
        )
        with self._lock:
            self._reminders.append(reminder)

        logger.info(f"Added reminder: {reminder.id} - {reminder.title}")
        self._publish(StoreEvent(StoreEventKind.ADDED, None, (reminder.id,)))
        return reminder

    def toggle_completion(self, reminder_id: str) -> bool:
        with self._lock:
            reminder = self.get_reminder(reminder_id)
            if reminder is None:
                logger.warning(f"Cannot toggle: reminder {reminder_id} not found")
                return False
            completed = reminder.toggle()

        logger.info(f"Toggled reminder {reminder_id} (completed={completed})")
        self._publish(StoreEvent(StoreEventKind.TOGGLED, None, (reminder_id,)))
        return True

    def delete_reminders(self, indices: Iterable[int]) -> List[Reminder]:
        """Remove reminders by position, all or nothing"""
        with self._lock:
            removed = self._remove_positions(self._reminders, indices)
            if removed is None:
                logger.warning(
                    f"Cannot delete: positions out of range ({len(self._reminders)} reminders)"
                )
                return []

        if removed:
            logger.info(f"Deleted {len(removed)} reminder(s)")
            self._publish(StoreEvent(
                StoreEventKind.DELETED,
                None,
                tuple(r.id for r in removed)
            ))
        return removed

    def get_stats(self) -> Dict[str, int]:
        reminders = self.reminders
        completed = sum(1 for r in reminders if r.is_completed)
        return {
            'total': len(reminders),
            'completed': completed,
            'open': len(reminders) - completed
        }
