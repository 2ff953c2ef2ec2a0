"""
Coin System

Coins are the spendable currency. This module only ever adds coins.

Notification rule: every grant appends an entry except grants attributed
to LEVEL_UP_BONUS_SOURCE, which are shown as part of the level-up entry.
"""

import logging
from typing import Optional

from learnquest.exceptions import InvalidAmountError
from learnquest.gamification.state import GameState, Transition
from learnquest.models.game_config import GameConfig
from learnquest.models.notification import NotificationEvent, NotificationKind
from learnquest.observability.metrics import coins_granted_total, invalid_grants_total

logger = logging.getLogger(__name__)

LEVEL_UP_BONUS_SOURCE = "level_up_bonus"


def is_valid_amount(amount) -> bool:
    """Positive int; bool is rejected even though it subclasses int"""
    return isinstance(amount, int) and not isinstance(amount, bool) and amount > 0


def grant_coins(
    state: GameState,
    amount: int,
    source: str = "unknown",
    config: Optional[GameConfig] = None,
) -> Transition:
    """
    Add coins to the learner

    Args:
        state: Current game state
        amount: Coins to add (positive int)
        source: What earned the coins (mission_reward, level_up_bonus, ...)
        config: Game rules (unused today, kept for a uniform engine signature)

    Returns:
        Transition with the new state

    Raises:
        InvalidAmountError: amount is not a positive int (state untouched)
    """
    if not is_valid_amount(amount):
        invalid_grants_total.labels(currency="coins").inc()
        raise InvalidAmountError(amount, source=source, operation="grant_coins")

    new_coins = state.progression.coins + amount
    new_state = state.with_progression(coins=new_coins)

    if source != LEVEL_UP_BONUS_SOURCE:
        new_state = new_state.with_notification(NotificationEvent(
            kind=NotificationKind.XP_GAINED,
            title=f"+{amount} Coins",
            description=f"Earned from {source}",
            metadata={"amount": amount, "source": source, "currency": "coins"},
        ))

    coins_granted_total.labels(source=source).inc(amount)
    logger.info(f"Granted {amount} coins from {source}. Total: {new_coins} coins")

    return Transition(state=new_state)
