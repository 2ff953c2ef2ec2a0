"""Static game rules loaded from game_config.json"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from learnquest.models.achievement import AchievementDefinition


class AgeGroup(str, Enum):
    """Learner age groups, each with its own messaging"""
    KIDS = "kids"
    TEEN = "teen"
    YOUNG_ADULT = "young-adult"


class LevelConfig(BaseModel):
    """XP thresholds; thresholds[0] is the XP needed for level 2"""
    model_config = ConfigDict(frozen=True)

    thresholds: tuple[int, ...]

    @field_validator("thresholds")
    @classmethod
    def validate_thresholds(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        if not v:
            raise ValueError("at least one level threshold is required")
        if v[0] <= 0:
            raise ValueError("first threshold must be positive (level 1 starts at 0 XP)")
        for previous, current in zip(v, v[1:]):
            if current <= previous:
                raise ValueError(f"thresholds must be strictly ascending ({previous} >= {current})")
        return v


class XPConfig(BaseModel):
    """XP rewards and streak multipliers"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_reward: int = Field(alias="baseReward", ge=0)
    # Sparse map: streak length -> multiplier. JSON keys arrive as strings.
    streak_multipliers: dict[int, float] = Field(default_factory=dict, alias="streakMultipliers")

    @field_validator("streak_multipliers")
    @classmethod
    def validate_multipliers(cls, v: dict[int, float]) -> dict[int, float]:
        for streak, multiplier in v.items():
            if streak <= 0:
                raise ValueError(f"streak milestone must be positive, got {streak}")
            if multiplier < 0:
                raise ValueError(f"multiplier for streak {streak} must not be negative")
        return v

    def multiplier_for(self, streak: int) -> float:
        """Multiplier for a streak length; missing milestones count as 1"""
        return self.streak_multipliers.get(streak, 1.0)


class CoinConfig(BaseModel):
    """Coin rewards"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    level_up_bonus: int = Field(alias="levelUpBonus", ge=0)


class MessagingConfig(BaseModel):
    """Age-group specific copy"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    welcome: str
    level_up: str = Field(alias="levelUp")
    achievement: str


class GameConfig(BaseModel):
    """
    Complete static configuration consumed (never mutated) by the engine
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    levels: LevelConfig
    xp: XPConfig
    coins: CoinConfig
    achievements: tuple[AchievementDefinition, ...] = ()
    messaging: dict[AgeGroup, MessagingConfig] = Field(default_factory=dict)
    feed_limit: int = Field(default=50, alias="feedLimit", gt=0)

    @model_validator(mode="after")
    def validate_catalog(self) -> "GameConfig":
        seen = set()
        for achievement in self.achievements:
            if achievement.id in seen:
                raise ValueError(f"duplicate achievement id '{achievement.id}'")
            seen.add(achievement.id)
        return self

    def find_achievement(self, achievement_id: str) -> Optional[AchievementDefinition]:
        for achievement in self.achievements:
            if achievement.id == achievement_id:
                return achievement
        return None

    def messages_for(self, age_group: AgeGroup) -> Optional[MessagingConfig]:
        return self.messaging.get(age_group)
