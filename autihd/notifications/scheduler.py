"""
AUTIHD Notification Scheduler

Turns a stored reminder into notification requests and submits them to
the delivery collaborator.

Repeat policies:
- NATIVE: a repeating reminder becomes a single request on a repeating
  interval trigger; the collaborator handles every repeat, forever
- FANOUT: a repeating reminder becomes a bounded run of one-shot requests
  (the first at the due time, the rest spaced by the interval starting two
  intervals after it); nothing is scheduled after the last one

Submission is fire-and-forget. Each request is handed over on its own; a
failure for one request is logged and never blocks, retries or rolls back
the others.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from autihd.memory.reminder_models import Reminder

from .delivery import NotificationDelivery
from .notification_models import (
    IntervalTrigger,
    NotificationContent,
    NotificationRequest,
    OneShotTrigger,
)

logger = logging.getLogger(__name__)


REPEAT_INTERVAL_SECONDS = 600
DEFAULT_OCCURRENCES = 10
DEFAULT_FALLBACK_BODY = "Don't forget your reminder!"


class RepeatPolicy(Enum):
    """How repeating reminders are expressed as requests"""
    NATIVE = "native"
    FANOUT = "fanout"


def truncate_to_minute(moment: datetime) -> datetime:
    """Calendar triggers match year/month/day/hour/minute only"""
    return moment.replace(second=0, microsecond=0)


class NotificationScheduler:
    """
    Computes and submits notification requests for reminders.

    Request computation (build_requests) is pure; schedule() is the only
    place that talks to the delivery collaborator.
    """

    def __init__(
        self,
        delivery: NotificationDelivery,
        policy: RepeatPolicy = RepeatPolicy.FANOUT,
        interval_seconds: int = REPEAT_INTERVAL_SECONDS,
        occurrences: int = DEFAULT_OCCURRENCES,
        fallback_body: str = DEFAULT_FALLBACK_BODY
    ):
        """
        Initialize scheduler.

        Args:
            delivery: Notification delivery collaborator
            policy: Repeat policy for repeating reminders
            interval_seconds: Spacing between repeats
            occurrences: Total alerts per repeating reminder (FANOUT only)
            fallback_body: Body used when a reminder has no description
        """
        if interval_seconds < 1:
            raise ValueError("interval_seconds must be positive")
        if occurrences < 1:
            raise ValueError("occurrences must be at least 1")

        self.delivery = delivery
        self.policy = policy
        self.interval_seconds = interval_seconds
        self.occurrences = occurrences
        self.fallback_body = fallback_body

        logger.info(
            f"NotificationScheduler initialized (policy={policy.value}, "
            f"interval={interval_seconds}s, occurrences={occurrences})"
        )

    @classmethod
    def from_settings(cls, delivery: NotificationDelivery, settings) -> 'NotificationScheduler':
        """Build a scheduler from ReminderSettings"""
        return cls(
            delivery,
            policy=settings.repeat_policy,
            interval_seconds=settings.repeat_interval_seconds,
            occurrences=settings.repeat_occurrences,
            fallback_body=settings.fallback_body
        )

    def content_for(self, reminder: Reminder) -> NotificationContent:
        return NotificationContent(
            title=reminder.title,
            body=reminder.description or self.fallback_body,
            sound=True
        )

    def fanout_times(self, due: datetime) -> List[datetime]:
        """
        Fire times for a repeating reminder under FANOUT.

        The first alert is at the due time; the following ones are spaced
        by the interval, beginning two intervals after the due time.
        """
        interval = timedelta(seconds=self.interval_seconds)
        times = [truncate_to_minute(due)]
        for n in range(1, self.occurrences):
            times.append(truncate_to_minute(due + interval * (n + 1)))
        return times

    def build_requests(self, reminder: Reminder) -> List[NotificationRequest]:
        """
        Compute every request for a reminder without submitting anything.

        Args:
            reminder: Reminder that passed the store's creation checks

        Returns:
            Requests in submission order
        """
        content = self.content_for(reminder)

        if not reminder.is_repeating:
            return [NotificationRequest(
                id=reminder.id,
                content=content,
                trigger=OneShotTrigger(truncate_to_minute(reminder.time))
            )]

        if self.policy is RepeatPolicy.NATIVE:
            return [NotificationRequest(
                id=reminder.id,
                content=content,
                trigger=IntervalTrigger(self.interval_seconds, repeats=True)
            )]

        requests = []
        for n, fire_at in enumerate(self.fanout_times(reminder.time)):
            request_id = reminder.id if n == 0 else f"{reminder.id}-{n}"
            requests.append(NotificationRequest(
                id=request_id,
                content=content,
                trigger=OneShotTrigger(fire_at)
            ))
        return requests

    def schedule(self, reminder: Reminder) -> List[NotificationRequest]:
        """
        Submit every request for a reminder (fire-and-forget).

        Args:
            reminder: Reminder to schedule alerts for

        Returns:
            The requests handed to the delivery collaborator
        """
        requests = self.build_requests(reminder)

        for request in requests:
            self._submit(request)

        logger.info(f"Submitted {len(requests)} notification request(s) for '{reminder.title}'")
        return requests

    def _submit(self, request: NotificationRequest):
        def completion(error: Optional[Exception]):
            if error is not None:
                logger.error(f"Error scheduling notification {request.describe()}: {error}")
            else:
                logger.info(f"Notification scheduled {request.describe()}")

        try:
            self.delivery.schedule(request, completion)
        except Exception as e:
            # Same outcome as a failure acknowledgment: log, keep going
            logger.error(f"Delivery rejected notification {request.describe()}: {e}", exc_info=True)
