"""
Canonical event vocabulary and push payload schemas

Push payloads (network origin, untrusted) are validated with the *Payload
models; only the canonical events below ever reach the engine.
"""
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# Push event names delivered by the transport
ACHIEVEMENT_UNLOCKED_EVENT = "achievement:unlocked"
XP_GAINED_EVENT = "xp:gained"


def _reject_non_numeric(value: Any) -> Any:
    # bool is an int subclass and numeric strings would be coerced in lax mode
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("amount must be a number")
    return value


PositiveAmount = Annotated[int, BeforeValidator(_reject_non_numeric), Field(gt=0)]


# ============================================================================
# Canonical events
# ============================================================================

class XPGained(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["xp_gained"] = "xp_gained"
    amount: PositiveAmount
    source: str = "unknown"


class CoinsGranted(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["coins_granted"] = "coins_granted"
    amount: PositiveAmount
    source: str = "unknown"


class AchievementUnlocked(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["achievement_unlocked"] = "achievement_unlocked"
    achievement_id: str = Field(min_length=1)


class StreakAdvanced(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["streak_advanced"] = "streak_advanced"
    continued: bool = True


class MissionCompleted(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["mission_completed"] = "mission_completed"
    mission_id: str = Field(min_length=1)
    title: str = ""
    xp_reward: int = Field(default=0, ge=0)
    coin_reward: int = Field(default=0, ge=0)


CanonicalEvent = Annotated[
    Union[XPGained, CoinsGranted, AchievementUnlocked, StreakAdvanced, MissionCompleted],
    Field(discriminator="kind"),
]

# ============================================================================
# Push payloads
# ============================================================================

class AchievementUnlockedPayload(BaseModel):
    """`achievement:unlocked` payload; extra keys (title, xpReward) are ignored"""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)

    def to_event(self) -> AchievementUnlocked:
        return AchievementUnlocked(achievement_id=self.id)


class XPGainedPayload(BaseModel):
    """`xp:gained` payload"""
    model_config = ConfigDict(extra="ignore")

    amount: PositiveAmount
    source: Optional[str] = None

    def to_event(self) -> XPGained:
        return XPGained(amount=self.amount, source=self.source or "push")


PAYLOAD_MODELS: dict[str, type[BaseModel]] = {
    ACHIEVEMENT_UNLOCKED_EVENT: AchievementUnlockedPayload,
    XP_GAINED_EVENT: XPGainedPayload,
}
