"""
AUTIHD Reminder Models

Data structures for the reminder list.

Philosophy:
- Created only through the add flow
- Only the completion flag changes after creation
- Categories own their reminders, reminders name their category
- Pure data representation
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import uuid


def new_id() -> str:
    """Fresh opaque identifier (random 128-bit token, never reused)"""
    return uuid.uuid4().hex


def normalize_description(description: Optional[str]) -> Optional[str]:
    """Empty or whitespace-only descriptions are stored as absent"""
    if description is None:
        return None
    description = description.strip()
    return description or None


@dataclass
class Reminder:
    """
    A single user-created reminder.
    
    The id doubles as the notification request identifier, so it must
    stay stable for the reminder's whole lifetime.
    """
    id: str
    title: str
    time: datetime  # Naive datetime in system local time
    description: Optional[str] = None
    is_completed: bool = False
    is_repeating: bool = False
    category: Optional[str] = None  # Category name, None in the flat list
    
    def __post_init__(self):
        """Validate reminder data"""
        if not self.id:
            raise ValueError("Reminder ID cannot be empty")
        if not self.title or not self.title.strip():
            raise ValueError("Reminder title cannot be empty")
        if not isinstance(self.time, datetime):
            raise TypeError("time must be datetime")
    
    def toggle(self) -> bool:
        """Flip the completion flag and return the new value"""
        self.is_completed = not self.is_completed
        return self.is_completed


@dataclass
class Category:
    """
    A named bucket of reminders.
    
    Reminder order is display order: new reminders go to the end.
    """
    name: str
    reminders: List[Reminder] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    
    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Category name cannot be empty")
    
    def index_of(self, reminder_id: str) -> Optional[int]:
        """Position of a reminder in this category, None if absent"""
        for i, reminder in enumerate(self.reminders):
            if reminder.id == reminder_id:
                return i
        return None


def create_reminder(
    title: str,
    time: datetime,
    description: Optional[str] = None,
    is_repeating: bool = False,
    category: Optional[str] = None
) -> Reminder:
    """
    Factory function to create a new reminder.
    
    Args:
        title: Short human-readable title (trimmed)
        time: When to remind (naive datetime, local time)
        description: Optional longer description, blank becomes None
        is_repeating: Also fire every 10 minutes after the first alert
        category: Name of the owning category, if any
        
    Returns:
        New Reminder, not completed
    """
    return Reminder(
        id=new_id(),
        title=title.strip(),
        description=normalize_description(description),
        is_completed=False,
        time=time,
        is_repeating=is_repeating,
        category=category
    )
