"""
Progression Engine

Reducer over canonical events: (GameState, event) -> Transition.

Every canonical event maps onto exactly one operation of the systems
modules; nothing here reads or writes anything outside the state passed in.
"""

import logging
from dataclasses import replace

from learnquest.gamification.achievement_system import unlock_achievement
from learnquest.gamification.coin_system import grant_coins
from learnquest.gamification.mission_system import complete_mission
from learnquest.gamification.state import GameState, Transition
from learnquest.gamification.streak_system import advance_streak
from learnquest.gamification.xp_system import grant_xp
from learnquest.models.events import (
    AchievementUnlocked,
    CanonicalEvent,
    CoinsGranted,
    MissionCompleted,
    StreakAdvanced,
    XPGained,
)
from learnquest.models.game_config import GameConfig

logger = logging.getLogger(__name__)


def apply_event(state: GameState, event: CanonicalEvent, config: GameConfig) -> Transition:
    """
    Apply one canonical event

    Raises:
        learnquest.exceptions.ValidationError: event carries invalid input
        TypeError: event is not a canonical event
    """
    if isinstance(event, XPGained):
        return grant_xp(state, event.amount, event.source, config)
    if isinstance(event, CoinsGranted):
        return grant_coins(state, event.amount, event.source, config)
    if isinstance(event, AchievementUnlocked):
        return unlock_achievement(state, event.achievement_id, config)
    if isinstance(event, StreakAdvanced):
        return advance_streak(state, event.continued, config)
    if isinstance(event, MissionCompleted):
        return complete_mission(
            state,
            event.mission_id,
            config,
            title=event.title,
            xp_reward=event.xp_reward,
            coin_reward=event.coin_reward,
        )

    raise TypeError(f"Not a canonical event: {type(event).__name__}")


def acknowledge_level_up(state: GameState) -> Transition:
    """Clear the pending level-up celebration once the UI has shown it"""
    if not state.level_up_pending:
        return Transition(state=state)
    return Transition(state=replace(state, level_up_pending=False))


def mark_notification_read(state: GameState, notification_id: str) -> Transition:
    feed = state.feed.mark_read(notification_id)
    if feed is state.feed:
        return Transition(state=state, not_found=state.feed.get(notification_id) is None)
    return Transition(state=replace(state, feed=feed))


def mark_all_notifications_read(state: GameState) -> Transition:
    feed = state.feed.mark_all_read()
    if feed is state.feed:
        return Transition(state=state)
    return Transition(state=replace(state, feed=feed))
