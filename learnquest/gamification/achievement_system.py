"""
Achievement System

Unlocks catalog achievements and rewards them.

Guarantees:
- Unknown ids are a no-op (stale or foreign push events are expected)
- An achievement unlocks exactly once; replays report already_unlocked
  and never grant XP again
- The XP reward goes through grant_xp (source "achievement"), so level-ups
  caused by an unlock behave like any other grant
"""

import logging
from typing import Any, Dict, List

from learnquest.gamification.messaging import get_achievement_message
from learnquest.gamification.state import GameState, Transition
from learnquest.gamification.xp_system import grant_xp
from learnquest.models.achievement import Achievement
from learnquest.models.game_config import GameConfig
from learnquest.models.notification import NotificationEvent, NotificationKind
from learnquest.observability.metrics import achievement_unlock_replays_total, achievements_unlocked_total
from learnquest.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)

ACHIEVEMENT_SOURCE = "achievement"


def unlock_achievement(
    state: GameState,
    achievement_id: str,
    config: GameConfig,
) -> Transition:
    """
    Unlock an achievement by catalog id

    Args:
        state: Current game state
        achievement_id: Catalog key
        config: Game rules (catalog, thresholds, messaging)

    Returns:
        Transition with not_found / already_unlocked flags for no-ops,
        otherwise the rewarded state
    """
    definition = config.find_achievement(achievement_id)
    if definition is None:
        achievement_unlock_replays_total.labels(reason="not_found").inc()
        logger.info(f"Achievement '{achievement_id}' not in catalog, ignoring")
        return Transition(state=state, not_found=True)

    current = state.achievements.get(achievement_id)
    if current is not None and current.unlocked:
        achievement_unlock_replays_total.labels(reason="already_unlocked").inc()
        logger.info(f"Achievement '{achievement_id}' already unlocked, ignoring replay")
        return Transition(state=state, already_unlocked=True)

    unlocked = (current or Achievement.locked(definition)).unlock(now_utc())
    new_state = state.with_achievement(unlocked)

    xp_result = None
    if definition.xp_reward > 0:
        xp_result = grant_xp(new_state, definition.xp_reward, ACHIEVEMENT_SOURCE, config)
        new_state = xp_result.state

    new_state = new_state.with_notification(NotificationEvent(
        kind=NotificationKind.ACHIEVEMENT,
        title=f"{definition.icon} {definition.title}",
        description=get_achievement_message(config, state.age_group),
        metadata={"achievement": definition.model_dump(mode="json")},
    ))

    achievements_unlocked_total.labels(rarity=definition.rarity.value).inc()
    logger.info(
        f"Unlocked achievement: {achievement_id} ({definition.title}) +{definition.xp_reward} XP"
    )

    if xp_result is None:
        return Transition(state=new_state)
    return Transition(
        state=new_state,
        leveled_up=xp_result.leveled_up,
        levels_gained=xp_result.levels_gained,
        bonus_coins=xp_result.bonus_coins,
    )


def get_achievements(state: GameState, include_locked: bool = True) -> Dict[str, Any]:
    """
    Learner's achievements for display

    Returns:
        {
            'unlocked': [unlocked achievements, most recent first],
            'locked': [locked achievements] (if include_locked=True),
            'total_unlocked': int,
            'total_achievements': int,
            'total_xp_from_achievements': int
        }
    """
    unlocked: List[Achievement] = [a for a in state.achievements.values() if a.unlocked]
    # Achievements restored from the profile have no unlock time; keep them last
    unlocked.sort(key=lambda a: a.unlocked_at.timestamp() if a.unlocked_at else float("-inf"), reverse=True)

    result = {
        "unlocked": unlocked,
        "total_unlocked": len(unlocked),
        "total_achievements": len(state.achievements),
        "total_xp_from_achievements": sum(a.xp_reward for a in unlocked),
    }
    if include_locked:
        result["locked"] = [a for a in state.achievements.values() if not a.unlocked]

    return result
