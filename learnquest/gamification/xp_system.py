"""
XP and Leveling System

Manages XP grants and level-ups on top of the Level Table.

Level-up rules:
- Level is recomputed from total XP after every grant
- A grant that crosses several thresholds produces ONE level_up entry, for
  the final level reached
- Each level-up grant applies the configured coin bonus exactly once, via the
  coin path (source "level_up_bonus"), never back through grant_xp

XP sources used by the engine:
- mission: mission completion reward
- achievement: achievement unlock reward
- streak_bonus: streak milestone bonus
- push / server labels: XP granted by the backend
"""

import logging
from dataclasses import replace

from learnquest.exceptions import InvalidAmountError
from learnquest.gamification.coin_system import LEVEL_UP_BONUS_SOURCE, grant_coins, is_valid_amount
from learnquest.gamification.levels import get_level_table
from learnquest.gamification.messaging import get_level_up_message
from learnquest.gamification.state import GameState, Transition
from learnquest.models.game_config import GameConfig
from learnquest.models.notification import NotificationEvent, NotificationKind
from learnquest.observability.metrics import invalid_grants_total, level_ups_total, xp_granted_total

logger = logging.getLogger(__name__)


def grant_xp(
    state: GameState,
    amount: int,
    source: str,
    config: GameConfig,
) -> Transition:
    """
    Grant XP and handle level-up

    Args:
        state: Current game state
        amount: XP to add (positive int)
        source: Label of the activity that earned the XP
        config: Game rules (thresholds, level-up coin bonus, messaging)

    Returns:
        Transition with:
            leveled_up: level rose during this grant
            levels_gained: how many levels were crossed
            bonus_coins: level-up coin bonus applied (0 if none)

    Raises:
        InvalidAmountError: amount is not a positive int (state untouched)
    """
    if not is_valid_amount(amount):
        invalid_grants_total.labels(currency="xp").inc()
        raise InvalidAmountError(amount, source=source, operation="grant_xp")

    table = get_level_table(config)
    old_level = state.progression.level
    new_xp = state.progression.xp + amount
    new_level = table.level_for(new_xp)
    levels_gained = max(new_level - old_level, 0)

    new_state = state.with_progression(xp=new_xp, level=new_level)
    new_state = new_state.with_notification(NotificationEvent(
        kind=NotificationKind.XP_GAINED,
        title=f"+{amount} XP",
        description=f"Gained from {source}",
        metadata={"amount": amount, "source": source},
    ))
    xp_granted_total.labels(source=source).inc(amount)

    logger.info(f"Granted {amount} XP from {source}. Total: {new_xp} XP, Level: {new_level}")

    if not levels_gained:
        return Transition(state=new_state)

    bonus_coins = config.coins.level_up_bonus
    new_state = new_state.with_notification(NotificationEvent(
        kind=NotificationKind.LEVEL_UP,
        title=f"Level {new_level} Reached!",
        description=get_level_up_message(config, state.age_group),
        metadata={
            "old_level": old_level,
            "new_level": new_level,
            "levels_gained": levels_gained,
            "bonus_coins": bonus_coins,
        },
    ))
    new_state = replace(new_state, level_up_pending=True)

    if bonus_coins > 0:
        new_state = grant_coins(new_state, bonus_coins, LEVEL_UP_BONUS_SOURCE, config).state

    level_ups_total.inc()
    logger.info(f"Leveled up from {old_level} to {new_level} (+{bonus_coins} bonus coins)")

    return Transition(
        state=new_state,
        leveled_up=True,
        levels_gained=levels_gained,
        bonus_coins=bonus_coins,
    )
