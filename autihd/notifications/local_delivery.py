"""
AUTIHD Local Notification Center - In-Process Delivery

A desktop stand-in for a platform notification service.

Architecture:
- Caller thread: queues schedule/cancel commands (non-blocking)
- Worker thread: applies commands, acknowledges them through their
  completion callbacks, fires due notifications
- Presenter: surfaces fired notifications (log line, optionally spoken)

Trigger semantics:
- OneShotTrigger fires once when the clock reaches its minute; a fire
  time already in the past at submission never fires
- IntervalTrigger fires `seconds` after submission, then every `seconds`
  again if it repeats
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from queue import Empty, Queue
from typing import Callable, Deque, Dict, Iterable, List, Optional

import pyttsx3

from .delivery import (
    CompletionHandler,
    DeliveryDelegate,
    DeliveryError,
    NotificationDelivery,
    PermissionHandler,
)
from .notification_models import (
    AuthorizationOptions,
    IntervalTrigger,
    Notification,
    NotificationRequest,
    OneShotTrigger,
    PresentationOptions,
)
from .scheduler import truncate_to_minute

logger = logging.getLogger(__name__)


Clock = Callable[[], datetime]

DELIVERED_HISTORY = 100


class Presenter(ABC):
    """Surfaces a fired notification"""

    @abstractmethod
    def present(self, notification: Notification, options: PresentationOptions) -> None:
        pass

    def close(self):
        pass


class LogPresenter(Presenter):
    """Writes fired notifications to the log"""

    def present(self, notification: Notification, options: PresentationOptions) -> None:
        content = notification.request.content
        if not options & (PresentationOptions.BANNER | PresentationOptions.LIST):
            logger.info(f"Notification {notification.request.id} suppressed")
            return
        sound = " (sound)" if options & PresentationOptions.SOUND and content.sound else ""
        logger.info(f"🔔 {content.title}: {content.body}{sound}")


class SpokenPresenter(LogPresenter):
    """
    Logs like LogPresenter and reads the title aloud when sound is requested.

    The pyttsx3 engine is created lazily on the worker thread that first
    presents, and reused afterwards.
    """

    def __init__(self, rate: int = 175):
        self._rate = rate
        self._engine = None

    def present(self, notification: Notification, options: PresentationOptions) -> None:
        super().present(notification, options)

        content = notification.request.content
        if not (options & PresentationOptions.SOUND and content.sound):
            return

        try:
            if self._engine is None:
                self._engine = pyttsx3.init()
                self._engine.setProperty('rate', self._rate)
            self._engine.say(f"Reminder: {content.title}")
            self._engine.runAndWait()
        except Exception as e:
            logger.error(f"TTS error: {e}", exc_info=True)
            self._engine = None

    def close(self):
        if self._engine is not None:
            self._engine.stop()
            self._engine = None


@dataclass
class _Pending:
    request: NotificationRequest
    next_fire: datetime


class LocalNotificationCenter(NotificationDelivery):
    """
    In-process notification delivery with a background worker.

    Scheduling a request whose id is already pending replaces it. Only
    the most recent `history_size` fired notifications are kept.
    """

    def __init__(
        self,
        presenter: Optional[Presenter] = None,
        clock: Clock = datetime.now,
        poll_interval: float = 1.0,
        grant_permission: bool = True,
        history_size: int = DELIVERED_HISTORY
    ):
        """
        Initialize local notification center.

        Args:
            presenter: Where fired notifications go (default: LogPresenter)
            clock: Source of the current local time
            poll_interval: Seconds between checks for due notifications
            grant_permission: Answer given to permission requests
            history_size: How many fired notifications `delivered` keeps
        """
        self.presenter = presenter or LogPresenter()
        self._clock = clock
        self._poll_interval = poll_interval
        self._grant_permission = grant_permission

        self._commands: Queue = Queue()
        self._submit_lock = threading.Lock()
        self._pending: Dict[str, _Pending] = {}
        self._pending_lock = threading.Lock()
        self._delegate: Optional[DeliveryDelegate] = None
        self._delivered: Deque[Notification] = deque(maxlen=history_size)
        self._shutdown = threading.Event()

        self._worker = threading.Thread(
            target=self._run,
            daemon=True,
            name="AUTIHD-Notifications"
        )
        self._worker.start()

        logger.info(f"LocalNotificationCenter initialized (poll={poll_interval}s)")

    # ------------------------------------------------------------------
    # NotificationDelivery
    # ------------------------------------------------------------------

    def request_permission(self, options: AuthorizationOptions, callback: PermissionHandler) -> None:
        logger.debug(f"Permission requested: {options}")
        self._enqueue(
            lambda: callback(self._grant_permission, None),
            lambda: callback(False, DeliveryError("Notification center is shut down"))
        )

    def schedule(self, request: NotificationRequest, completion: CompletionHandler) -> None:
        self._enqueue(
            lambda: self._apply_schedule(request, completion),
            lambda: completion(DeliveryError(f"Notification center shut down before {request.id} was scheduled"))
        )

    def set_delegate(self, delegate: Optional[DeliveryDelegate]) -> None:
        self._delegate = delegate

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def cancel(self, request_ids: Iterable[str]) -> None:
        """Remove pending requests (unknown ids are ignored)"""
        ids = list(request_ids)
        self._enqueue(lambda: self._apply_cancel(ids), None)

    @property
    def is_shut_down(self) -> bool:
        return self._shutdown.is_set()

    def pending_requests(self) -> List[NotificationRequest]:
        with self._pending_lock:
            return [p.request for p in self._pending.values()]

    def next_fire_time(self, request_id: str) -> Optional[datetime]:
        with self._pending_lock:
            pending = self._pending.get(request_id)
            return pending.next_fire if pending else None

    @property
    def delivered(self) -> List[Notification]:
        with self._pending_lock:
            return list(self._delivered)

    def flush(self):
        """Block until every queued command has been applied"""
        self._commands.join()

    def fire_due(self, now: Optional[datetime] = None) -> List[Notification]:
        """
        Fire every pending notification due at `now`.

        Called by the worker on each poll; exposed so callers can drive
        delivery with their own clock.
        """
        now = now or self._clock()
        due: List[NotificationRequest] = []

        with self._pending_lock:
            for request_id, pending in list(self._pending.items()):
                if pending.next_fire > now:
                    continue
                due.append(pending.request)
                trigger = pending.request.trigger
                if isinstance(trigger, IntervalTrigger) and trigger.repeats:
                    pending.next_fire += timedelta(seconds=trigger.seconds)
                else:
                    del self._pending[request_id]

        fired = []
        for request in due:
            notification = Notification(request=request, delivered_at=now)
            self._present(notification)
            fired.append(notification)

        if fired:
            with self._pending_lock:
                self._delivered.extend(fired)
        return fired

    def shutdown(self):
        """
        Stop the worker thread.

        Pending notifications are dropped. Commands still queued are
        answered with a DeliveryError so every submission is acknowledged.
        """
        logger.info("Shutting down LocalNotificationCenter")
        with self._submit_lock:
            self._shutdown.set()

        if self._worker.is_alive():
            self._worker.join(timeout=2.0)
            if self._worker.is_alive():
                logger.warning("Notification worker thread did not stop cleanly")

        self._abort_queued()
        self.presenter.close()
        logger.info("LocalNotificationCenter shutdown complete")

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _enqueue(self, command: Callable[[], None], abort: Optional[Callable[[], None]]):
        with self._submit_lock:
            if self._shutdown.is_set():
                raise DeliveryError("Notification center is shut down")
            self._commands.put((command, abort))

    def _abort_queued(self):
        aborted = 0
        while True:
            try:
                _, abort = self._commands.get_nowait()
            except Empty:
                break
            try:
                if abort is not None:
                    abort()
                    aborted += 1
            except Exception as e:
                logger.error(f"Notification abort callback failed: {e}", exc_info=True)
            finally:
                self._commands.task_done()

        if aborted:
            logger.warning(f"Answered {aborted} queued notification command(s) with DeliveryError")

    def _apply_schedule(self, request: NotificationRequest, completion: CompletionHandler):
        now = self._clock()
        trigger = request.trigger

        if isinstance(trigger, OneShotTrigger):
            next_fire = trigger.fire_at
            if next_fire < truncate_to_minute(now):
                # A calendar match in the past never comes round again
                logger.warning(f"Notification {request.describe()} is in the past and will not fire")
                completion(None)
                return
        else:
            next_fire = now + timedelta(seconds=trigger.seconds)

        with self._pending_lock:
            replaced = request.id in self._pending
            self._pending[request.id] = _Pending(request=request, next_fire=next_fire)

        if replaced:
            logger.debug(f"Replaced pending notification {request.id}")
        completion(None)

    def _apply_cancel(self, request_ids: List[str]):
        with self._pending_lock:
            for request_id in request_ids:
                self._pending.pop(request_id, None)
        logger.debug(f"Cancelled {len(request_ids)} notification(s)")

    def _present(self, notification: Notification):
        delegate = self._delegate
        if delegate is None:
            options = PresentationOptions.NONE
        else:
            try:
                options = delegate.will_present(notification)
            except Exception as e:
                logger.error(f"Delivery delegate failed: {e}", exc_info=True)
                options = PresentationOptions.NONE

        try:
            self.presenter.present(notification, options)
        except Exception as e:
            logger.error(f"Presenter failed for {notification.request.id}: {e}", exc_info=True)

    def _run(self):
        """Worker loop: apply commands, then fire whatever is due"""
        while not self._shutdown.is_set():
            try:
                command, _ = self._commands.get(timeout=self._poll_interval)
            except Empty:
                command = None

            if command is not None:
                try:
                    command()
                except Exception as e:
                    # Keep the worker alive
                    logger.error(f"Notification command failed: {e}", exc_info=True)
                finally:
                    self._commands.task_done()

            self.fire_due()

        logger.info("Notification worker shutting down")
