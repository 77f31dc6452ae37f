"""
AUTIHD Memory - In-Session Reminder State

Categories and reminders live for the process session only.
"""

from .reminder_models import Category, Reminder, create_reminder, new_id
from .reminder_store import (
    DEFAULT_CATEGORIES,
    FlatReminderStore,
    ReminderStore,
    StoreEvent,
    StoreEventKind,
)

__all__ = [
    'Category',
    'Reminder',
    'create_reminder',
    'new_id',
    'DEFAULT_CATEGORIES',
    'FlatReminderStore',
    'ReminderStore',
    'StoreEvent',
    'StoreEventKind',
]
