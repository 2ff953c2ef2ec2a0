"""Progression state and profile snapshot models"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProgressionState(BaseModel):
    """Learner progression for one session. level always equals level_for(xp)."""
    model_config = ConfigDict(frozen=True)

    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    coins: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    daily_missions_completed: int = Field(default=0, ge=0)
    weekly_missions_completed: int = Field(default=0, ge=0)
    total_missions_completed: int = Field(default=0, ge=0)


class Profile(BaseModel):
    """
    Profile snapshot returned by the external profile store.

    Mirrors the backend's user payload; unknown keys are ignored.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    coins: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    age_group: Optional[str] = Field(default=None, alias="ageGroup")
    unlocked_achievements: list[str] = Field(default_factory=list, alias="unlockedAchievements")
