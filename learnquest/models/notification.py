"""Notification feed entry models"""
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationKind(str, Enum):
    """Kinds of user-facing progress events"""
    XP_GAINED = "xp_gained"
    LEVEL_UP = "level_up"
    ACHIEVEMENT = "achievement"
    MISSION_COMPLETE = "mission_complete"
    STREAK_BONUS = "streak_bonus"


class NotificationEvent(BaseModel):
    """
    One entry of the notification feed.

    id and timestamp are left empty by producers and filled in when the
    entry is appended to a feed.
    """
    model_config = ConfigDict(frozen=True)

    kind: NotificationKind
    title: str
    description: str = ""
    id: Optional[str] = None
    timestamp: Optional[datetime] = None
    read: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)

    def as_read(self) -> "NotificationEvent":
        if self.read:
            return self
        return self.model_copy(update={"read": True})
