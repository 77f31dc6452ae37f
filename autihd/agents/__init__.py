"""
AUTIHD Agents - Services behind the list screen and add form
"""

from .reminder_agent import (
    ReminderAgent,
    ReminderValidationError,
    format_reminder_row,
    format_time,
)

__all__ = [
    'ReminderAgent',
    'ReminderValidationError',
    'format_reminder_row',
    'format_time',
]
