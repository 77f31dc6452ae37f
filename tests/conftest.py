"""
Shared test doubles for the AUTIHD test suite.
"""

from datetime import datetime
from typing import List, Optional, Set, Tuple

import pytest

from autihd.memory import ReminderStore
from autihd.notifications import (
    DeliveryDelegate,
    DeliveryError,
    NotificationDelivery,
    NotificationRequest,
    NotificationScheduler,
    RepeatPolicy,
)


class RecordingDelivery(NotificationDelivery):
    """
    Records every request and acknowledges synchronously.

    Ids in `fail_ids` are acknowledged with a DeliveryError, ids in
    `raise_ids` make schedule() itself raise.
    """

    def __init__(self, fail_ids: Optional[Set[str]] = None, raise_ids: Optional[Set[str]] = None):
        self.fail_ids = fail_ids or set()
        self.raise_ids = raise_ids or set()
        self.requests: List[NotificationRequest] = []
        self.acks: List[Tuple[str, Optional[Exception]]] = []
        self.permission_requests = 0
        self.delegate: Optional[DeliveryDelegate] = None

    def request_permission(self, options, callback):
        self.permission_requests += 1
        callback(True, None)

    def schedule(self, request, completion):
        if request.id in self.raise_ids:
            raise DeliveryError(f"rejected {request.id}")
        self.requests.append(request)
        error = DeliveryError(f"failed {request.id}") if request.id in self.fail_ids else None
        self.acks.append((request.id, error))
        completion(error)

    def set_delegate(self, delegate):
        self.delegate = delegate

    @property
    def ids(self) -> List[str]:
        return [r.id for r in self.requests]


@pytest.fixture
def delivery():
    return RecordingDelivery()


@pytest.fixture
def store():
    return ReminderStore()


@pytest.fixture
def fanout_scheduler(delivery):
    return NotificationScheduler(delivery, policy=RepeatPolicy.FANOUT)


@pytest.fixture
def native_scheduler(delivery):
    return NotificationScheduler(delivery, policy=RepeatPolicy.NATIVE)


@pytest.fixture
def morning():
    """A fixed due time: 2026-03-02 08:00:27 (seconds on purpose)"""
    return datetime(2026, 3, 2, 8, 0, 27)
