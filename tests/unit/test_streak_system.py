"""Unit tests for Streak System (learnquest/gamification/streak_system.py)"""
from learnquest.gamification.streak_system import advance_streak, calculate_streak_bonus
from learnquest.models.notification import NotificationKind


# ============================================================================
# Bonus Calculation Tests
# ============================================================================

def test_calculate_streak_bonus_milestones(small_config):
    """Test floor(base * (multiplier - 1)) at milestones only"""
    assert calculate_streak_bonus(3, small_config) == 50
    assert calculate_streak_bonus(7, small_config) == 100


def test_calculate_streak_bonus_non_milestone(small_config):
    """Test missing milestones count as multiplier 1"""
    assert calculate_streak_bonus(1, small_config) == 0
    assert calculate_streak_bonus(4, small_config) == 0


def test_calculate_streak_bonus_multiplier_below_one(small_config):
    """Test multipliers <= 1 never grant a bonus"""
    config = small_config.model_copy(update={
        "xp": small_config.xp.model_copy(update={"streak_multipliers": {5: 0.5}}),
    })

    assert calculate_streak_bonus(5, config) == 0


# ============================================================================
# Streak Advance Tests
# ============================================================================

def test_advance_streak_without_bonus(make_state, small_config):
    """Test a plain continuation: no XP, no entry"""
    state = make_state(streak=0)

    result = advance_streak(state, True, small_config)

    assert result.state.progression.streak == 1
    assert result.state.progression.xp == 0
    assert result.bonus_xp == 0
    assert len(result.state.feed) == 0


def test_advance_streak_to_milestone(make_state, small_config):
    """Test reaching streak 3 grants 50 XP with xp_gained and streak_bonus entries"""
    state = make_state(streak=2)

    result = advance_streak(state, True, small_config)

    assert result.state.progression.streak == 3
    assert result.state.progression.xp == 50
    assert result.bonus_xp == 50

    entries = result.state.feed.entries
    assert [entry.kind for entry in entries] == [
        NotificationKind.STREAK_BONUS,
        NotificationKind.XP_GAINED,
    ]
    assert entries[0].title == "3 Day Streak!"
    assert entries[0].description == "Bonus +50 XP for your streak!"
    assert entries[1].description == "Gained from streak_bonus"


def test_advance_streak_bonus_can_level_up(make_state, small_config):
    """Test a streak bonus crossing a threshold levels up like any grant"""
    state = make_state(xp=60, streak=2)

    result = advance_streak(state, True, small_config)

    assert result.leveled_up is True
    assert result.state.progression.level == 2
    assert result.state.progression.coins == 50


def test_advance_streak_broken(make_state, small_config):
    """Test breaking the streak resets to 0 with no bonus and no entry"""
    state = make_state(streak=6)

    result = advance_streak(state, False, small_config)

    assert result.state.progression.streak == 0
    assert result.bonus_xp == 0
    assert len(result.state.feed) == 0
