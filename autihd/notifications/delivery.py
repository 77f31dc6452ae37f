"""
AUTIHD Notification Delivery - Collaborator Interface

The platform capability that actually surfaces notifications. AUTIHD only
talks to it through this interface so the scheduler can be exercised
without a real notification service.

Contract:
- request_permission: asked once per process start, answer via callback
- schedule: one call per request, acknowledged later via callback
  (possibly from another thread)
- set_delegate: who decides how a notification is presented while the
  application is in the foreground
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from .notification_models import (
    AuthorizationOptions,
    Notification,
    NotificationRequest,
    PresentationOptions,
)


class DeliveryError(Exception):
    """Reported by a delivery collaborator when a request cannot be scheduled"""
    pass


PermissionHandler = Callable[[bool, Optional[Exception]], None]
CompletionHandler = Callable[[Optional[Exception]], None]


class DeliveryDelegate(ABC):
    """Answers presentation questions for notifications fired in the foreground"""

    @abstractmethod
    def will_present(self, notification: Notification) -> PresentationOptions:
        pass


class NotificationDelivery(ABC):

    @abstractmethod
    def request_permission(
        self,
        options: AuthorizationOptions,
        callback: PermissionHandler
    ) -> None:
        pass

    @abstractmethod
    def schedule(
        self,
        request: NotificationRequest,
        completion: CompletionHandler
    ) -> None:
        pass

    @abstractmethod
    def set_delegate(self, delegate: Optional[DeliveryDelegate]) -> None:
        pass
