"""
AUTIHD Application Wiring

Builds the store, delivery collaborator, notification bridge, scheduler
and agent from settings, and owns their startup and shutdown.

Usage:
    with ReminderApp.from_env() as app:
        app.agent.create_reminder("Take medicine", due, category="Appointments")
"""

import logging
from typing import Optional, Union

from autihd.agents.reminder_agent import ReminderAgent
from autihd.config import ReminderSettings, configure_logging
from autihd.memory.reminder_store import FlatReminderStore, ReminderStore
from autihd.notifications.bridge import NotificationCenterBridge
from autihd.notifications.delivery import NotificationDelivery
from autihd.notifications.local_delivery import (
    LocalNotificationCenter,
    LogPresenter,
    SpokenPresenter,
)
from autihd.notifications.scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


class ReminderApp:
    """
    Composition root for one process session.

    Nothing here survives the process: reminders are in memory and
    notifications live in the delivery collaborator.
    """

    def __init__(
        self,
        settings: Optional[ReminderSettings] = None,
        delivery: Optional[NotificationDelivery] = None,
        categorized: bool = True
    ):
        """
        Initialize application components.

        Args:
            settings: Resolved settings (default: built-in defaults)
            delivery: Delivery collaborator (default: a LocalNotificationCenter)
            categorized: Group reminders by category, or keep one flat list
        """
        self.settings = settings or ReminderSettings()

        if delivery is None:
            presenter = SpokenPresenter() if self.settings.voice_alerts else LogPresenter()
            delivery = LocalNotificationCenter(presenter=presenter)
            self._owns_delivery = True
        else:
            self._owns_delivery = False
        self.delivery = delivery

        self.store: Union[ReminderStore, FlatReminderStore]
        if categorized:
            self.store = ReminderStore(self.settings.default_categories)
        else:
            self.store = FlatReminderStore()

        self.bridge = NotificationCenterBridge(self.delivery)
        self.scheduler = NotificationScheduler.from_settings(self.delivery, self.settings)
        self.agent = ReminderAgent(self.store, self.scheduler)
        self._started = False

    @classmethod
    def from_env(cls, **kwargs) -> 'ReminderApp':
        """Load settings from the environment, configure logging, build the app"""
        settings = ReminderSettings.from_env()
        configure_logging(settings.log_level)
        return cls(settings=settings, **kwargs)

    def start(self):
        """Ask for notification permission and register the foreground delegate"""
        if self._started:
            return
        self.bridge.start()
        self._started = True
        logger.info("ReminderApp started")

    def shutdown(self):
        if self._started:
            self.bridge.stop()
            self._started = False
        if self._owns_delivery and isinstance(self.delivery, LocalNotificationCenter):
            self.delivery.shutdown()
        logger.info("ReminderApp stopped")

    def __enter__(self) -> 'ReminderApp':
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False
