"""
AUTIHD Notification Models

Value types exchanged with the notification delivery collaborator.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Flag, auto
from typing import Union


class PresentationOptions(Flag):
    """How a notification is surfaced when it fires"""
    NONE = 0
    BANNER = auto()
    SOUND = auto()
    BADGE = auto()
    LIST = auto()


class AuthorizationOptions(Flag):
    """Capabilities asked for in the permission request"""
    NONE = 0
    ALERT = auto()
    SOUND = auto()
    BADGE = auto()


@dataclass(frozen=True)
class NotificationContent:
    title: str
    body: str
    sound: bool = True


@dataclass(frozen=True)
class OneShotTrigger:
    """Fire once at an absolute local time (minute precision)"""
    fire_at: datetime


@dataclass(frozen=True)
class IntervalTrigger:
    """Fire `seconds` after submission, again every `seconds` if repeating"""
    seconds: int
    repeats: bool = False

    def __post_init__(self):
        if self.seconds <= 0:
            raise ValueError("Interval must be positive")


Trigger = Union[OneShotTrigger, IntervalTrigger]


@dataclass(frozen=True)
class NotificationRequest:
    """
    One scheduled instruction for the delivery collaborator.

    The identifier is caller-supplied; scheduling a request whose id is
    already pending replaces the pending one.
    """
    id: str
    content: NotificationContent
    trigger: Trigger

    def describe(self) -> str:
        """Short human-readable form for logs"""
        if isinstance(self.trigger, OneShotTrigger):
            when = f"at {self.trigger.fire_at:%Y-%m-%d %H:%M}"
        else:
            every = "every" if self.trigger.repeats else "in"
            when = f"{every} {self.trigger.seconds}s"
        return f"'{self.content.title}' {when} [{self.id}]"


@dataclass(frozen=True)
class Notification:
    """A request that has fired"""
    request: NotificationRequest
    delivered_at: datetime
