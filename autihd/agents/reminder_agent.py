"""
AUTIHD Reminder Agent - Add Flow and List Operations

Responsibilities:
- Create reminders from the add form (validate, store, schedule alerts)
- Toggle and delete on behalf of the list view
- Format reminder rows for display

The agent holds no state of its own: the store owns reminders and the
scheduler owns the notification policy.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple, Union

from autihd.memory.reminder_models import Reminder, normalize_description
from autihd.memory.reminder_store import FlatReminderStore, ReminderStore
from autihd.notifications.scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


class ReminderValidationError(ValueError):
    """Raised by strict creation when the add form is not valid"""
    pass


def format_time(moment: datetime) -> str:
    """12-hour clock as shown in list rows, e.g. '09:05 AM'"""
    return moment.strftime("%I:%M %p")


def format_reminder_row(reminder: Reminder) -> str:
    """
    Render one list row.

    Completed reminders get a filled circle, open ones an empty circle.
    """
    mark = "●" if reminder.is_completed else "○"
    lines = [f"{mark} {reminder.title}"]
    if reminder.description:
        lines.append(f"  {reminder.description}")
    lines.append(f"  Time: {format_time(reminder.time)}")
    return "\n".join(lines)


class ReminderAgent:
    """
    Service behind the list screen and the add-reminder form.

    Works with either store variant: the category arguments are ignored
    by a FlatReminderStore.
    """

    def __init__(
        self,
        store: Union[ReminderStore, FlatReminderStore],
        scheduler: NotificationScheduler
    ):
        """
        Initialize reminder agent.

        Args:
            store: Reminder store (categorized or flat)
            scheduler: Notification scheduler for new reminders
        """
        self.store = store
        self.scheduler = scheduler
        logger.info("ReminderAgent initialized")

    @property
    def categorized(self) -> bool:
        return isinstance(self.store, ReminderStore)

    def create_reminder(
        self,
        title: str,
        time: datetime,
        category: Optional[str] = None,
        description: Optional[str] = None,
        is_repeating: bool = False,
        strict: bool = False
    ) -> Optional[Reminder]:
        """
        Save a reminder from the add form and schedule its notifications.

        Notifications are only scheduled for reminders the store
        accepted. A delivery failure never removes the reminder.

        Args:
            title: Reminder title (required)
            time: Due date and time
            category: Category name (required for a categorized store)
            description: Optional description, blank becomes None
            is_repeating: Repeat every 10 minutes
            strict: Raise instead of returning None on invalid input

        Returns:
            Created Reminder, or None if nothing was created

        Raises:
            ReminderValidationError: Only when strict and input is invalid
        """
        if not title or not title.strip():
            return self._reject("Reminder title cannot be empty", strict)

        description = normalize_description(description)

        if self.categorized:
            if category is None:
                return self._reject("A category is required", strict)
            reminder = self.store.add_reminder(
                category,
                title,
                time,
                description=description,
                is_repeating=is_repeating
            )
            if reminder is None:
                return self._reject(f"Unknown category: {category}", strict)
        else:
            reminder = self.store.add_reminder(
                title,
                time,
                description=description,
                is_repeating=is_repeating
            )

        self.scheduler.schedule(reminder)

        logger.info(f"Created reminder: {reminder.title} (due: {reminder.time})")
        return reminder

    def _reject(self, message: str, strict: bool) -> None:
        logger.warning(f"Reminder not created: {message}")
        if strict:
            raise ReminderValidationError(message)
        return None

    def toggle_completion(self, reminder_id: str, *, category_id: Optional[str] = None) -> bool:
        """
        Toggle a reminder's completion flag.

        Returns:
            True if toggled, False if not found
        """
        if self.categorized:
            if category_id is None:
                return False
            return self.store.toggle_completion(category_id, reminder_id)
        return self.store.toggle_completion(reminder_id)

    def delete_reminders(
        self,
        indices: Iterable[int],
        *,
        category_id: Optional[str] = None
    ) -> List[Reminder]:
        """
        Delete reminders by displayed position (swipe to delete).

        Already scheduled notifications are left alone.

        Returns:
            Removed reminders
        """
        if self.categorized:
            if category_id is None:
                return []
            return self.store.delete_reminders(category_id, indices)
        return self.store.delete_reminders(indices)

    def list_sections(self) -> List[Tuple[Optional[str], List[Reminder]]]:
        """
        Reminders grouped for display.

        Returns:
            (category name, reminders) pairs in display order; a flat
            store yields a single section named None
        """
        if self.categorized:
            return [(c.name, list(c.reminders)) for c in self.store.categories]
        return [(None, self.store.reminders)]

    def render(self) -> str:
        """Plain-text rendering of the whole list"""
        blocks = []
        for name, reminders in self.list_sections():
            rows = [format_reminder_row(r) for r in reminders]
            if name is not None:
                rows.insert(0, f"[{name}]")
            blocks.append("\n".join(rows))
        return "\n\n".join(blocks)

    def get_stats(self) -> dict:
        return self.store.get_stats()
