"""Unit tests for session state construction (learnquest/gamification/state.py)"""
from learnquest.gamification.state import initial_state, rebase_state
from learnquest.gamification.xp_system import grant_xp
from learnquest.models.game_config import AgeGroup
from learnquest.models.progression import Profile


def test_initial_state_recomputes_level(small_config):
    """Test the stored level is replaced by the level for the stored XP"""
    state = initial_state(Profile(xp=150, level=7), small_config)

    assert state.progression.xp == 150
    assert state.progression.level == 2


def test_initial_state_builds_catalog(small_config):
    """Test every catalog achievement is present, profile unlocks marked"""
    state = initial_state(Profile(unlocked_achievements=["big_win", "retired_badge"]), small_config)

    assert set(state.achievements) == {"first_steps", "big_win", "just_a_badge"}
    assert state.achievements["big_win"].unlocked is True
    assert state.achievements["first_steps"].unlocked is False


def test_initial_state_age_group(small_config):
    """Test profile age group parsing with fallback"""
    assert initial_state(Profile(age_group="kids"), small_config).age_group == AgeGroup.KIDS
    assert initial_state(Profile(age_group="pirates"), small_config).age_group == AgeGroup.TEEN
    assert initial_state(Profile(), small_config, AgeGroup.YOUNG_ADULT).age_group == AgeGroup.YOUNG_ADULT


def test_initial_state_feed_limit(small_config):
    """Test the feed uses the configured limit"""
    config = small_config.model_copy(update={"feed_limit": 5})

    assert initial_state(Profile(), config).feed.limit == 5


def test_rebase_state_keeps_local_data(empty_state, small_config):
    """Test a refresh replaces progression but keeps feed, counters and local unlocks"""
    state = grant_xp(empty_state, 150, "mission", small_config).state
    state = state.with_progression(total_missions_completed=3)
    feed = state.feed

    rebased = rebase_state(state, Profile(xp=210, coins=7, unlocked_achievements=["big_win"]), small_config)

    assert rebased.progression.xp == 210
    assert rebased.progression.level == 3
    assert rebased.progression.coins == 7
    assert rebased.progression.total_missions_completed == 3
    assert rebased.feed is feed
    assert rebased.level_up_pending is True
    assert rebased.achievements["big_win"].unlocked is True
