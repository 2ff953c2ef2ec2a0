"""
Mission System

Rewards a completed mission: bumps the mission counters, grants the
mission's XP and coins, and appends a mission_complete entry.
"""

import logging

from learnquest.exceptions import ValidationError
from learnquest.gamification.coin_system import grant_coins
from learnquest.gamification.state import GameState, Transition
from learnquest.gamification.xp_system import grant_xp
from learnquest.models.game_config import GameConfig
from learnquest.models.notification import NotificationEvent, NotificationKind

logger = logging.getLogger(__name__)

MISSION_XP_SOURCE = "mission"
MISSION_COIN_SOURCE = "mission_reward"


def _validate_reward(name: str, value) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValidationError(
            f"{name} must be a non-negative integer, got {value!r}",
            field=name,
            value=value,
            operation="complete_mission"
        )


def complete_mission(
    state: GameState,
    mission_id: str,
    config: GameConfig,
    title: str = "",
    xp_reward: int = 0,
    coin_reward: int = 0,
) -> Transition:
    """
    Apply the rewards of a completed mission

    Args:
        state: Current game state
        mission_id: Mission identifier
        config: Game rules
        title: Mission title for the notification
        xp_reward: XP granted (0 for none)
        coin_reward: Coins granted (0 for none)

    Returns:
        Transition; leveled_up reflects the XP reward

    Raises:
        ValidationError: empty mission id or negative rewards (state untouched)
    """
    if not isinstance(mission_id, str) or not mission_id:
        raise ValidationError(
            "Mission id must not be empty",
            field="mission_id",
            value=mission_id,
            operation="complete_mission"
        )
    _validate_reward("xp_reward", xp_reward)
    _validate_reward("coin_reward", coin_reward)

    progression = state.progression
    new_state = state.with_progression(
        daily_missions_completed=progression.daily_missions_completed + 1,
        weekly_missions_completed=progression.weekly_missions_completed + 1,
        total_missions_completed=progression.total_missions_completed + 1,
    )

    xp_result = None
    if xp_reward > 0:
        xp_result = grant_xp(new_state, xp_reward, MISSION_XP_SOURCE, config)
        new_state = xp_result.state

    if coin_reward > 0:
        new_state = grant_coins(new_state, coin_reward, MISSION_COIN_SOURCE, config).state

    new_state = new_state.with_notification(NotificationEvent(
        kind=NotificationKind.MISSION_COMPLETE,
        title=f"Mission Complete: {title or mission_id}",
        description=f"+{xp_reward} XP, +{coin_reward} coins",
        metadata={
            "mission_id": mission_id,
            "xp_reward": xp_reward,
            "coin_reward": coin_reward,
        },
    ))

    logger.info(
        f"Mission {mission_id} completed (+{xp_reward} XP, +{coin_reward} coins). "
        f"Total missions: {new_state.progression.total_missions_completed}"
    )

    if xp_result is None:
        return Transition(state=new_state)
    return Transition(
        state=new_state,
        leveled_up=xp_result.leveled_up,
        levels_gained=xp_result.levels_gained,
        bonus_coins=xp_result.bonus_coins,
    )


def reset_mission_counters(state: GameState, daily: bool = True, weekly: bool = False) -> Transition:
    """Start a new daily and/or weekly mission period"""
    changes = {}
    if daily:
        changes["daily_missions_completed"] = 0
    if weekly:
        changes["weekly_missions_completed"] = 0
    if not changes:
        return Transition(state=state)

    logger.info(f"Reset mission counters: {', '.join(sorted(changes))}")
    return Transition(state=state.with_progression(**changes))
