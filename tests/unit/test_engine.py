"""Unit tests for the progression engine reducer (learnquest/gamification/engine.py)"""
import pytest

from learnquest.exceptions import InvalidAmountError
from learnquest.gamification.engine import (
    acknowledge_level_up,
    apply_event,
    mark_all_notifications_read,
    mark_notification_read,
)
from learnquest.models.events import (
    AchievementUnlocked,
    CoinsGranted,
    MissionCompleted,
    StreakAdvanced,
    XPGained,
)


# ============================================================================
# Event Dispatch Tests
# ============================================================================

def test_apply_xp_gained(empty_state, small_config):
    result = apply_event(empty_state, XPGained(amount=30, source="quiz"), small_config)

    assert result.state.progression.xp == 30
    assert result.state.feed.entries[0].description == "Gained from quiz"


def test_apply_coins_granted(empty_state, small_config):
    result = apply_event(empty_state, CoinsGranted(amount=5, source="daily_chest"), small_config)

    assert result.state.progression.coins == 5


def test_apply_achievement_unlocked(empty_state, small_config):
    result = apply_event(empty_state, AchievementUnlocked(achievement_id="first_steps"), small_config)

    assert result.state.achievements["first_steps"].unlocked is True


def test_apply_streak_advanced(empty_state, small_config):
    state = apply_event(empty_state, StreakAdvanced(), small_config).state
    state = apply_event(state, StreakAdvanced(continued=False), small_config).state

    assert state.progression.streak == 0


def test_apply_mission_completed(empty_state, small_config):
    event = MissionCompleted(mission_id="m1", title="Warmup", xp_reward=10, coin_reward=2)

    result = apply_event(empty_state, event, small_config)

    assert result.state.progression.xp == 10
    assert result.state.progression.coins == 2
    assert result.state.progression.total_missions_completed == 1


def test_apply_unknown_event_type(empty_state, small_config):
    """Test anything that is not a canonical event is a programming error"""
    with pytest.raises(TypeError):
        apply_event(empty_state, {"kind": "xp_gained", "amount": 5}, small_config)


def test_apply_event_validation_still_applies(empty_state, small_config):
    """Test events built without validation are still checked by the engine"""
    event = XPGained.model_construct(amount=-5, source="forged")

    with pytest.raises(InvalidAmountError):
        apply_event(empty_state, event, small_config)


# ============================================================================
# UI Acknowledgement Tests
# ============================================================================

def test_acknowledge_level_up(empty_state, small_config):
    """Test the pending celebration flag is cleared once"""
    state = apply_event(empty_state, XPGained(amount=150), small_config).state
    assert state.level_up_pending is True

    cleared = acknowledge_level_up(state).state
    assert cleared.level_up_pending is False
    assert acknowledge_level_up(cleared).state is cleared


def test_mark_notification_read(empty_state, small_config):
    state = apply_event(empty_state, XPGained(amount=10), small_config).state
    notification_id = state.feed.entries[0].id

    result = mark_notification_read(state, notification_id)

    assert result.state.feed.unread_count() == 0
    assert result.not_found is False


def test_mark_notification_read_unknown(empty_state):
    result = mark_notification_read(empty_state, "missing")

    assert result.not_found is True
    assert result.state is empty_state


def test_mark_all_notifications_read(empty_state, small_config):
    state = apply_event(empty_state, XPGained(amount=10), small_config).state
    state = apply_event(state, CoinsGranted(amount=10), small_config).state

    result = mark_all_notifications_read(state)

    assert result.state.feed.unread_count() == 0
