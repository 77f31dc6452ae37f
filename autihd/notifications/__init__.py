"""
AUTIHD Notifications - Scheduling Policy and Delivery

The scheduler decides which requests a reminder needs; a delivery
collaborator surfaces them.
"""

from .notification_models import (
    AuthorizationOptions,
    IntervalTrigger,
    Notification,
    NotificationContent,
    NotificationRequest,
    OneShotTrigger,
    PresentationOptions,
)
from .delivery import DeliveryDelegate, DeliveryError, NotificationDelivery
from .scheduler import NotificationScheduler, RepeatPolicy
from .bridge import NotificationCenterBridge
from .local_delivery import (
    LocalNotificationCenter,
    LogPresenter,
    Presenter,
    SpokenPresenter,
)

__all__ = [
    # Models
    'AuthorizationOptions',
    'IntervalTrigger',
    'Notification',
    'NotificationContent',
    'NotificationRequest',
    'OneShotTrigger',
    'PresentationOptions',
    # Delivery
    'DeliveryDelegate',
    'DeliveryError',
    'NotificationDelivery',
    # Scheduling
    'NotificationScheduler',
    'RepeatPolicy',
    'NotificationCenterBridge',
    # Local delivery
    'LocalNotificationCenter',
    'LogPresenter',
    'Presenter',
    'SpokenPresenter',
]
