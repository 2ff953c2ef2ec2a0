"""LearnQuest progression core: XP, levels, coins, streaks, achievements and the notification feed"""

__version__ = "0.1.0"
