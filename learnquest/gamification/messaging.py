"""
Age-group messaging

Copy shown in level-up and achievement notifications, chosen by the
learner's age group. The game config may override any group; the
defaults below are used for groups it leaves out.
"""

import logging
from typing import Optional, Union

from learnquest.models.game_config import AgeGroup, GameConfig, MessagingConfig

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES = {
    AgeGroup.KIDS: MessagingConfig(
        welcome="Awesome job! You're doing great!",
        level_up="Wow! You leveled up! Your pet dragon is so proud!",
        achievement="You did it! Here's a shiny new badge!",
    ),
    AgeGroup.TEEN: MessagingConfig(
        welcome="Ready to dominate? Let's crush these challenges!",
        level_up="LEVEL UP! You're on fire! Keep that streak alive!",
        achievement="Epic achievement unlocked! You're a legend!",
    ),
    AgeGroup.YOUNG_ADULT: MessagingConfig(
        welcome="System ready. Initiating next challenge sequence.",
        level_up="Level threshold exceeded. Unlocking advanced features.",
        achievement="Achievement protocol completed. View detailed stats in profile.",
    ),
}


def parse_age_group(value: Optional[Union[str, AgeGroup]], default: AgeGroup = AgeGroup.TEEN) -> AgeGroup:
    """Age group from a profile value; unknown or missing values fall back to default"""
    if value is None:
        return default
    try:
        return AgeGroup(value)
    except ValueError:
        logger.warning(f"Unknown age group '{value}', using {default.value}")
        return default


def get_messages(config: GameConfig, age_group: AgeGroup) -> MessagingConfig:
    return config.messages_for(age_group) or DEFAULT_MESSAGES[age_group]


def get_level_up_message(config: GameConfig, age_group: AgeGroup) -> str:
    return get_messages(config, age_group).level_up


def get_achievement_message(config: GameConfig, age_group: AgeGroup) -> str:
    return get_messages(config, age_group).achievement


def get_welcome_message(config: GameConfig, age_group: AgeGroup) -> str:
    return get_messages(config, age_group).welcome
