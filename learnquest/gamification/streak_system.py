"""
Streak System

Tracks consecutive qualifying activity periods (days).

Logic:
- continued=True: streak += 1, then check the sparse milestone map
- continued=False: streak resets to 0, no bonus, no notification

Milestone bonus:
- multiplier = streak_multipliers.get(new_streak, 1)
- bonus_xp = floor(base_reward * (multiplier - 1)), only when multiplier > 1
- the bonus goes through grant_xp (source "streak_bonus") and a dedicated
  streak_bonus entry is appended on top of the generic XP entry
"""

import logging
import math

from learnquest.gamification.state import GameState, Transition
from learnquest.gamification.xp_system import grant_xp
from learnquest.models.game_config import GameConfig
from learnquest.models.notification import NotificationEvent, NotificationKind
from learnquest.observability.metrics import streak_bonuses_total

logger = logging.getLogger(__name__)

STREAK_BONUS_SOURCE = "streak_bonus"


def calculate_streak_bonus(streak: int, config: GameConfig) -> int:
    """
    Bonus XP for reaching a streak length

    Args:
        streak: New streak length
        config: Game rules (base reward, multiplier map)

    Returns:
        Bonus XP (0 when the streak is not a milestone or the multiplier is <= 1)
    """
    multiplier = config.xp.multiplier_for(streak)
    if multiplier <= 1:
        return 0
    return math.floor(config.xp.base_reward * (multiplier - 1))


def advance_streak(
    state: GameState,
    continued: bool,
    config: GameConfig,
) -> Transition:
    """
    Continue or break the streak

    Args:
        state: Current game state
        continued: True when the learner kept the streak going
        config: Game rules

    Returns:
        Transition; bonus_xp is the milestone bonus (0 if none), leveled_up
        reflects the bonus grant
    """
    old_streak = state.progression.streak

    if not continued:
        logger.info(f"Streak broken. Was {old_streak}, resetting to 0")
        return Transition(state=state.with_progression(streak=0))

    new_streak = old_streak + 1
    new_state = state.with_progression(streak=new_streak)
    logger.info(f"Streak continues: {old_streak} → {new_streak}")

    bonus_xp = calculate_streak_bonus(new_streak, config)
    if bonus_xp <= 0:
        return Transition(state=new_state)

    xp_result = grant_xp(new_state, bonus_xp, STREAK_BONUS_SOURCE, config)
    new_state = xp_result.state.with_notification(NotificationEvent(
        kind=NotificationKind.STREAK_BONUS,
        title=f"{new_streak} Day Streak!",
        description=f"Bonus +{bonus_xp} XP for your streak!",
        metadata={"streak": new_streak, "bonus_xp": bonus_xp},
    ))

    streak_bonuses_total.labels(streak=str(new_streak)).inc()
    logger.info(f"🏆 {new_streak}-day milestone reached! +{bonus_xp} XP")

    return Transition(
        state=new_state,
        leveled_up=xp_result.leveled_up,
        levels_gained=xp_result.levels_gained,
        bonus_coins=xp_result.bonus_coins,
        bonus_xp=bonus_xp,
    )
