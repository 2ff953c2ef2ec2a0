"""
Game state and transition results

GameState is an immutable snapshot of everything the engine owns for one
learner. Every engine operation takes a GameState and returns a Transition
carrying the new state plus the derived signals the caller needs
(level-up, idempotent replay, unknown reference).
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from learnquest.gamification.levels import get_level_table
from learnquest.gamification.messaging import parse_age_group
from learnquest.gamification.notifications import NotificationFeed
from learnquest.models.achievement import Achievement
from learnquest.models.game_config import AgeGroup, GameConfig
from learnquest.models.notification import NotificationEvent
from learnquest.models.progression import Profile, ProgressionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameState:
    progression: ProgressionState = field(default_factory=ProgressionState)
    achievements: Dict[str, Achievement] = field(default_factory=dict)
    feed: NotificationFeed = field(default_factory=NotificationFeed)
    age_group: AgeGroup = AgeGroup.TEEN
    level_up_pending: bool = False

    def with_progression(self, **changes) -> "GameState":
        return replace(self, progression=self.progression.model_copy(update=changes))

    def with_notification(self, event: NotificationEvent) -> "GameState":
        return replace(self, feed=self.feed.append(event))

    def with_achievement(self, achievement: Achievement) -> "GameState":
        return replace(self, achievements={**self.achievements, achievement.id: achievement})


@dataclass(frozen=True)
class Transition:
    """New state plus derived facts about the operation that produced it"""
    state: GameState
    leveled_up: bool = False
    levels_gained: int = 0
    bonus_coins: int = 0
    bonus_xp: int = 0
    already_unlocked: bool = False
    not_found: bool = False


def initial_state(
    profile: Profile,
    config: GameConfig,
    default_age_group: AgeGroup = AgeGroup.TEEN,
    feed: Optional[NotificationFeed] = None,
) -> GameState:
    """
    Build the session's starting state from a profile snapshot

    The stored level is never trusted: it is recomputed from XP so that
    level == level_for(xp) holds from the first snapshot on.

    Args:
        profile: Snapshot from the profile store
        config: Static game rules
        default_age_group: Used when the profile has no (valid) age group
        feed: Existing feed to keep (e.g. when rebasing after a refresh)

    Returns:
        GameState for the session
    """
    level = get_level_table(config).level_for(profile.xp)
    if level != profile.level:
        logger.warning(
            f"Profile level {profile.level} does not match {profile.xp} XP, using level {level}"
        )

    progression = ProgressionState(
        xp=profile.xp,
        level=level,
        coins=profile.coins,
        streak=profile.streak,
    )

    unlocked_ids = set(profile.unlocked_achievements)
    achievements = {}
    for definition in config.achievements:
        achievement = Achievement.locked(definition)
        if definition.id in unlocked_ids:
            achievement = achievement.model_copy(update={"unlocked": True})
        achievements[definition.id] = achievement

    unknown = unlocked_ids - set(achievements)
    if unknown:
        logger.debug(f"Profile lists achievements missing from catalog: {sorted(unknown)}")

    return GameState(
        progression=progression,
        achievements=achievements,
        feed=feed if feed is not None else NotificationFeed(limit=config.feed_limit),
        age_group=parse_age_group(profile.age_group, default_age_group),
    )


def rebase_state(state: GameState, profile: Profile, config: GameConfig) -> GameState:
    """
    Replace progression with a freshly fetched profile

    The feed, the session's mission counters and known unlocks are kept;
    achievements the backend reports as unlocked are merged in.
    """
    fresh = initial_state(profile, config, default_age_group=state.age_group, feed=state.feed)

    achievements = dict(fresh.achievements)
    for achievement_id, achievement in state.achievements.items():
        if achievement.unlocked:
            achievements[achievement_id] = achievement

    progression = fresh.progression.model_copy(update={
        "daily_missions_completed": state.progression.daily_missions_completed,
        "weekly_missions_completed": state.progression.weekly_missions_completed,
        "total_missions_completed": state.progression.total_missions_completed,
    })

    return replace(
        fresh,
        progression=progression,
        achievements=achievements,
        level_up_pending=state.level_up_pending,
    )
