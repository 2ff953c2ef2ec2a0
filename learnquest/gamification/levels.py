"""
Level Table

Maps cumulative XP to levels using a static, strictly ascending list of
thresholds. thresholds[0] is the XP required for level 2; level 1 is the
floor and needs 0 XP. With n thresholds the highest level is n + 1.

Example (thresholds [100, 250, 500]):
- 0-99 XP: level 1
- 100-249 XP: level 2
- 250-499 XP: level 3
- 500+ XP: level 4 (max)
"""

from bisect import bisect_right
from functools import lru_cache
from typing import Dict, Sequence, Any

from learnquest.exceptions import ConfigurationError


class LevelTable:
    """Static XP thresholds and the level arithmetic built on them"""

    def __init__(self, thresholds: Sequence[int]):
        thresholds = tuple(thresholds)
        if not thresholds:
            raise ConfigurationError("Level table needs at least one threshold", config_key="levels.thresholds")
        if thresholds[0] <= 0 or any(b <= a for a, b in zip(thresholds, thresholds[1:])):
            raise ConfigurationError(
                f"Level thresholds must be positive and strictly ascending: {list(thresholds)}",
                config_key="levels.thresholds"
            )
        self._thresholds = thresholds

    @property
    def thresholds(self) -> tuple:
        return self._thresholds

    @property
    def max_level(self) -> int:
        return len(self._thresholds) + 1

    def level_for(self, xp: int) -> int:
        """Greatest level whose threshold is <= xp; 1 below the first threshold"""
        if xp < self._thresholds[0]:
            return 1
        return bisect_right(self._thresholds, xp) + 1

    def floor_for(self, level: int) -> int:
        """Minimum XP for a level (0 for level 1)"""
        if level <= 1:
            return 0
        return self._thresholds[min(level, self.max_level) - 2]

    def is_max_level(self, level: int) -> bool:
        return level >= self.max_level

    def xp_to_next_level(self, xp: int, level: int) -> int:
        """XP still needed for the next level, 0 at max level"""
        if self.is_max_level(level):
            return 0
        return max(self._thresholds[level - 1] - xp, 0)

    def progress_to_next_level(self, xp: int, level: int) -> float:
        """Percentage [0, 100] of the way from the current level floor to the next threshold"""
        if self.is_max_level(level):
            return 100.0

        current_floor = self.floor_for(level)
        next_threshold = self._thresholds[level - 1]
        progress = (xp - current_floor) / (next_threshold - current_floor) * 100

        return min(max(progress, 0.0), 100.0)

    def level_info(self, xp: int) -> Dict[str, Any]:
        """
        Calculate level and progress from total XP

        Returns:
            {
                'current_level': int,
                'xp_in_current_level': int,
                'xp_to_next_level': int,
                'next_level_threshold': int or None at max level,
                'progress_percent': float,
                'max_level_reached': bool
            }
        """
        level = self.level_for(xp)
        max_level_reached = self.is_max_level(level)

        return {
            "current_level": level,
            "xp_in_current_level": max(xp - self.floor_for(level), 0),
            "xp_to_next_level": self.xp_to_next_level(xp, level),
            "next_level_threshold": None if max_level_reached else self._thresholds[level - 1],
            "progress_percent": self.progress_to_next_level(xp, level),
            "max_level_reached": max_level_reached,
        }

    def __repr__(self) -> str:
        return f"LevelTable(thresholds={list(self._thresholds)})"


@lru_cache(maxsize=16)
def _cached_table(thresholds: tuple) -> LevelTable:
    return LevelTable(thresholds)


def get_level_table(config) -> LevelTable:
    """LevelTable for a GameConfig, built once per distinct threshold list"""
    return _cached_table(tuple(config.levels.thresholds))
