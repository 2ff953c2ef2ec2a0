"""Achievement models for gamification"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from learnquest.utils.datetime_helpers import to_utc


class AchievementRarity(str, Enum):
    """Achievement rarity"""
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class AchievementDefinition(BaseModel):
    """Achievement catalog entry"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    title: str
    description: str = ""
    icon: str = "🏆"
    xp_reward: int = Field(default=0, alias="xpReward", ge=0)
    rarity: AchievementRarity = AchievementRarity.COMMON


class Achievement(AchievementDefinition):
    """Learner's view of a catalog achievement"""
    unlocked: bool = False
    unlocked_at: Optional[datetime] = Field(default=None, alias="unlockedAt")

    @classmethod
    def locked(cls, definition: AchievementDefinition) -> "Achievement":
        return cls(**definition.model_dump())

    def unlock(self, at: datetime) -> "Achievement":
        return self.model_copy(update={"unlocked": True, "unlocked_at": to_utc(at)})
