"""
AUTIHD Notification Bridge

Application-side counterpart of the delivery collaborator: asks for
permission at startup and tells the collaborator to keep presenting
notifications while the application is in the foreground.
"""

import logging
from typing import Optional

from .delivery import DeliveryDelegate, NotificationDelivery
from .notification_models import (
    AuthorizationOptions,
    Notification,
    PresentationOptions,
)

logger = logging.getLogger(__name__)


REQUESTED_AUTHORIZATION = AuthorizationOptions.ALERT | AuthorizationOptions.SOUND | AuthorizationOptions.BADGE
FOREGROUND_PRESENTATION = PresentationOptions.BANNER | PresentationOptions.SOUND


class NotificationCenterBridge(DeliveryDelegate):
    """
    Startup hook and foreground delegate.

    The permission answer is only logged. Scheduling goes ahead whether
    or not permission was granted.
    """

    def __init__(self, delivery: NotificationDelivery):
        self.delivery = delivery
        self.permission_granted: Optional[bool] = None

    def start(self):
        """Request permission once and register as the delivery delegate"""
        self.delivery.request_permission(REQUESTED_AUTHORIZATION, self._on_permission)
        self.delivery.set_delegate(self)
        logger.info("Notification bridge started")

    def stop(self):
        self.delivery.set_delegate(None)

    def _on_permission(self, granted: bool, error: Optional[Exception]):
        if error is not None:
            logger.error(f"Notification permission error: {error}")
            return
        self.permission_granted = granted
        logger.info(f"Notification permission granted: {granted}")

    def will_present(self, notification: Notification) -> PresentationOptions:
        """Always show the banner and play the sound, even in the foreground"""
        logger.debug(f"Presenting foreground notification {notification.request.id}")
        return FOREGROUND_PRESENTATION
