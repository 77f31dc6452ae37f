"""
Tests for the in-process notification center and the notification bridge

The center runs a real worker thread; a fixed clock keeps the worker
from firing anything on its own, and tests drive fire_due() explicitly.
"""

import threading
import time
from datetime import datetime, timedelta

import pytest

from autihd.memory import create_reminder
from autihd.notifications import (
    AuthorizationOptions,
    DeliveryError,
    IntervalTrigger,
    LocalNotificationCenter,
    NotificationCenterBridge,
    NotificationContent,
    NotificationRequest,
    NotificationScheduler,
    OneShotTrigger,
    PresentationOptions,
    Presenter,
    RepeatPolicy,
)


NOW = datetime(2026, 3, 2, 7, 0)


class RecordingPresenter(Presenter):
    def __init__(self):
        self.presented = []

    def present(self, notification, options):
        self.presented.append((notification.request.id, options))


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def center(presenter):
    center = LocalNotificationCenter(presenter=presenter, clock=lambda: NOW, poll_interval=0.05)
    yield center
    center.shutdown()


def _request(request_id, trigger):
    return NotificationRequest(
        id=request_id,
        content=NotificationContent(title="Stretch", body="Don't forget your reminder!"),
        trigger=trigger
    )


def test_schedule_is_acknowledged_asynchronously(center):
    acks = []
    center.schedule(_request("r1", OneShotTrigger(NOW + timedelta(hours=1))), acks.append)
    center.flush()

    assert acks == [None]
    assert [r.id for r in center.pending_requests()] == ["r1"]


def test_one_shot_fires_once(center, presenter):
    fire_at = NOW + timedelta(hours=1)
    center.schedule(_request("r1", OneShotTrigger(fire_at)), lambda error: None)
    center.flush()

    assert center.fire_due(fire_at - timedelta(minutes=1)) == []
    fired = center.fire_due(fire_at)

    assert [n.request.id for n in fired] == ["r1"]
    assert center.pending_requests() == []
    assert center.fire_due(fire_at + timedelta(hours=1)) == []
    assert [n.request.id for n in center.delivered] == ["r1"]
    assert len(presenter.presented) == 1


def test_past_one_shot_never_fires(center):
    acks = []
    center.schedule(_request("old", OneShotTrigger(NOW - timedelta(days=1))), acks.append)
    center.flush()

    assert acks == [None]
    assert center.pending_requests() == []


def test_repeating_interval_refires(center):
    center.schedule(_request("r1", IntervalTrigger(600, repeats=True)), lambda error: None)
    center.flush()

    assert center.next_fire_time("r1") == NOW + timedelta(seconds=600)
    assert len(center.fire_due(NOW + timedelta(seconds=600))) == 1
    assert center.next_fire_time("r1") == NOW + timedelta(seconds=1200)
    assert center.fire_due(NOW + timedelta(seconds=900)) == []
    assert len(center.fire_due(NOW + timedelta(seconds=1200))) == 1


def test_non_repeating_interval_fires_once(center):
    center.schedule(_request("r1", IntervalTrigger(60)), lambda error: None)
    center.flush()

    assert len(center.fire_due(NOW + timedelta(minutes=5))) == 1
    assert center.pending_requests() == []


def test_same_id_replaces_pending(center):
    center.schedule(_request("r1", OneShotTrigger(NOW + timedelta(hours=1))), lambda error: None)
    center.schedule(_request("r1", OneShotTrigger(NOW + timedelta(hours=2))), lambda error: None)
    center.flush()

    assert len(center.pending_requests()) == 1
    assert center.next_fire_time("r1") == NOW + timedelta(hours=2)


def test_cancel(center):
    center.schedule(_request("r1", OneShotTrigger(NOW + timedelta(hours=1))), lambda error: None)
    center.schedule(_request("r2", OneShotTrigger(NOW + timedelta(hours=1))), lambda error: None)
    center.cancel(["r1", "unknown"])
    center.flush()

    assert [r.id for r in center.pending_requests()] == ["r2"]


def test_failing_completion_keeps_worker_alive(center):
    def explode(error):
        raise RuntimeError("callback bug")

    acks = []
    center.schedule(_request("r1", OneShotTrigger(NOW + timedelta(hours=1))), explode)
    center.schedule(_request("r2", OneShotTrigger(NOW + timedelta(hours=1))), acks.append)
    center.flush()

    assert acks == [None]
    assert len(center.pending_requests()) == 2


def test_schedule_after_shutdown_raises(presenter):
    center = LocalNotificationCenter(presenter=presenter, clock=lambda: NOW, poll_interval=0.05)
    center.shutdown()

    with pytest.raises(DeliveryError):
        center.schedule(_request("r1", IntervalTrigger(60)), lambda error: None)


def test_delivered_history_is_bounded(presenter):
    center = LocalNotificationCenter(
        presenter=presenter,
        clock=lambda: NOW,
        poll_interval=0.05,
        history_size=50
    )
    try:
        center.schedule(_request("r1", IntervalTrigger(600, repeats=True)), lambda error: None)
        center.flush()

        for n in range(1, 501):
            center.fire_due(NOW + timedelta(seconds=600 * n))

        delivered = center.delivered
        assert len(delivered) == 50
        assert delivered[-1].delivered_at == NOW + timedelta(seconds=600 * 500)
        assert len(presenter.presented) == 500
    finally:
        center.shutdown()


def test_cancel_and_permission_after_shutdown_raise(presenter):
    center = LocalNotificationCenter(presenter=presenter, clock=lambda: NOW, poll_interval=0.05)
    center.shutdown()

    with pytest.raises(DeliveryError):
        center.cancel(["r1"])
    with pytest.raises(DeliveryError):
        center.request_permission(AuthorizationOptions.ALERT, lambda granted, error: None)

    flusher = threading.Thread(target=center.flush, daemon=True)
    flusher.start()
    flusher.join(timeout=2.0)
    assert not flusher.is_alive()


def test_shutdown_answers_queued_schedules(presenter):
    center = LocalNotificationCenter(presenter=presenter, clock=lambda: NOW, poll_interval=0.05)
    entered = threading.Event()
    release = threading.Event()

    def hold(error):
        entered.set()
        release.wait(timeout=5)

    acks = []
    center.schedule(_request("r1", OneShotTrigger(NOW + timedelta(hours=1))), hold)
    assert entered.wait(timeout=5)
    # The worker is busy with r1, so r2 is still queued when shutdown starts
    center.schedule(_request("r2", OneShotTrigger(NOW + timedelta(hours=1))), acks.append)

    stopper = threading.Thread(target=center.shutdown)
    stopper.start()
    for _ in range(500):
        if center.is_shut_down:
            break
        time.sleep(0.01)
    release.set()
    stopper.join(timeout=5)

    assert not stopper.is_alive()
    assert len(acks) == 1
    assert isinstance(acks[0], DeliveryError)
    center.flush()


def test_scheduler_survives_shut_down_center(presenter):
    center = LocalNotificationCenter(presenter=presenter, clock=lambda: NOW, poll_interval=0.05)
    center.shutdown()
    scheduler = NotificationScheduler(center)

    requests = scheduler.schedule(create_reminder(title="Stretch", time=NOW, is_repeating=True))
    assert len(requests) == 10


# ============================================================================
# Bridge
# ============================================================================

def test_without_delegate_foreground_is_suppressed(center, presenter):
    center.schedule(_request("r1", IntervalTrigger(60)), lambda error: None)
    center.flush()
    center.fire_due(NOW + timedelta(minutes=1))

    assert presenter.presented == [("r1", PresentationOptions.NONE)]


def test_bridge_grants_and_presents_with_sound(center, presenter):
    bridge = NotificationCenterBridge(center)
    bridge.start()
    center.flush()

    assert bridge.permission_granted is True

    center.schedule(_request("r1", IntervalTrigger(60)), lambda error: None)
    center.flush()
    center.fire_due(NOW + timedelta(minutes=1))

    [(request_id, options)] = presenter.presented
    assert request_id == "r1"
    assert options == PresentationOptions.BANNER | PresentationOptions.SOUND


def test_permission_denied_does_not_block_scheduling(presenter):
    center = LocalNotificationCenter(
        presenter=presenter,
        clock=lambda: NOW,
        poll_interval=0.05,
        grant_permission=False
    )
    try:
        bridge = NotificationCenterBridge(center)
        bridge.start()
        scheduler = NotificationScheduler(center, policy=RepeatPolicy.FANOUT)
        reminder = create_reminder(title="Stretch", time=NOW + timedelta(hours=1), is_repeating=True)

        scheduler.schedule(reminder)
        center.flush()

        assert bridge.permission_granted is False
        assert len(center.pending_requests()) == 10
    finally:
        center.shutdown()


def test_bridge_stop_clears_delegate(delivery):
    bridge = NotificationCenterBridge(delivery)
    bridge.start()
    assert delivery.delegate is bridge
    assert delivery.permission_requests == 1

    bridge.stop()
    assert delivery.delegate is None


# ============================================================================
# Spoken alerts
# ============================================================================

class FakeEngine:
    def __init__(self):
        self.said = []
        self.properties = {}
        self.stopped = False

    def setProperty(self, name, value):
        self.properties[name] = value

    def say(self, text):
        self.said.append(text)

    def runAndWait(self):
        pass

    def stop(self):
        self.stopped = True


def test_spoken_presenter_reads_title(monkeypatch):
    from autihd.notifications import Notification, SpokenPresenter
    from autihd.notifications import local_delivery

    engine = FakeEngine()
    monkeypatch.setattr(local_delivery.pyttsx3, "init", lambda: engine)

    presenter = SpokenPresenter(rate=150)
    notification = Notification(request=_request("r1", IntervalTrigger(60)), delivered_at=NOW)

    presenter.present(notification, PresentationOptions.BANNER)
    assert engine.said == []

    presenter.present(notification, PresentationOptions.BANNER | PresentationOptions.SOUND)
    assert engine.said == ["Reminder: Stretch"]
    assert engine.properties == {'rate': 150}

    presenter.close()
    assert engine.stopped
