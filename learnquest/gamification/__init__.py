"""
Gamification engine for LearnQuest

This module implements the progression core:
- Level table (XP thresholds)
- XP grants and level-ups
- Coins
- Daily streaks with milestone bonuses
- Idempotent achievement unlocks
- Mission rewards
- Bounded notification feed

All operations are pure: (GameState, ...) -> Transition.
"""

from learnquest.gamification.levels import LevelTable, get_level_table
from learnquest.gamification.notifications import NotificationFeed
from learnquest.gamification.state import GameState, Transition, initial_state
from learnquest.gamification.xp_system import grant_xp
from learnquest.gamification.coin_system import grant_coins, LEVEL_UP_BONUS_SOURCE
from learnquest.gamification.streak_system import advance_streak, calculate_streak_bonus
from learnquest.gamification.achievement_system import unlock_achievement, get_achievements
from learnquest.gamification.mission_system import complete_mission, reset_mission_counters
from learnquest.gamification.engine import apply_event, acknowledge_level_up

__all__ = [
    "LevelTable",
    "get_level_table",
    "NotificationFeed",
    "GameState",
    "Transition",
    "initial_state",
    "grant_xp",
    "grant_coins",
    "LEVEL_UP_BONUS_SOURCE",
    "advance_streak",
    "calculate_streak_bonus",
    "unlock_achievement",
    "get_achievements",
    "complete_mission",
    "reset_mission_counters",
    "apply_event",
    "acknowledge_level_up",
]
