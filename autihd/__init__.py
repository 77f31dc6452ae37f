"""
AUTIHD - Reminder list with local notification scheduling

Two components:
- memory: in-session reminder store (categorized or flat)
- notifications: repeat policy, request scheduling and delivery

The presentation layer drives both through agents.ReminderAgent.
"""

from .memory import Category, FlatReminderStore, Reminder, ReminderStore
from .notifications import (
    LocalNotificationCenter,
    NotificationCenterBridge,
    NotificationScheduler,
    RepeatPolicy,
)
from .agents import ReminderAgent, ReminderValidationError
from .config import ConfigError, ReminderSettings, configure_logging
from .app import ReminderApp

__version__ = "0.1.0"

__all__ = [
    'Category',
    'FlatReminderStore',
    'Reminder',
    'ReminderStore',
    'LocalNotificationCenter',
    'NotificationCenterBridge',
    'NotificationScheduler',
    'RepeatPolicy',
    'ReminderAgent',
    'ReminderValidationError',
    'ConfigError',
    'ReminderSettings',
    'configure_logging',
    'ReminderApp',
]
