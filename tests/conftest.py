"""Global test fixtures and utilities for learnquest tests"""
import pytest

from learnquest.config import load_game_config
from learnquest.gamification.state import GameState, initial_state
from learnquest.models.game_config import GameConfig
from learnquest.models.progression import Profile
from learnquest.services.profile_store import MockProfileStore
from learnquest.services.session import GameSession


# ============================================================================
# Game Config Fixtures
# ============================================================================

@pytest.fixture
def small_config():
    """Two-threshold config keeping the arithmetic easy to follow"""
    return GameConfig.model_validate({
        "levels": {"thresholds": [100, 200]},
        "xp": {"baseReward": 100, "streakMultipliers": {"3": 1.5, "7": 2.0}},
        "coins": {"levelUpBonus": 50},
        "achievements": [
            {
                "id": "first_steps",
                "title": "First Steps",
                "description": "Complete your first mission",
                "icon": "🎯",
                "xpReward": 50,
                "rarity": "common",
            },
            {
                "id": "big_win",
                "title": "Big Win",
                "xpReward": 150,
                "rarity": "epic",
            },
            {
                "id": "just_a_badge",
                "title": "Just a Badge",
                "xpReward": 0,
            },
        ],
        "messaging": {
            "teen": {
                "welcome": "Ready?",
                "levelUp": "LEVEL UP!",
                "achievement": "Epic!",
            },
        },
        "feedLimit": 50,
    })


@pytest.fixture
def game_config():
    """The bundled game_config.json"""
    return load_game_config()


# ============================================================================
# State Fixtures
# ============================================================================

@pytest.fixture
def empty_state(small_config):
    """Fresh learner: 0 XP, level 1, nothing unlocked"""
    return initial_state(Profile(), small_config)


@pytest.fixture
def make_state(small_config):
    """Factory building a state from profile fields"""
    def _make(**profile_fields) -> GameState:
        return initial_state(Profile(**profile_fields), small_config)
    return _make


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def mock_store():
    """In-memory profile store starting from an empty learner"""
    return MockProfileStore({"xp": 0, "level": 1, "coins": 0, "streak": 0, "ageGroup": "teen"})


@pytest.fixture
async def session(mock_store, small_config):
    """Open session with immediate (zero-delay) retries"""
    game_session = await GameSession.start(
        mock_store,
        small_config,
        sync_max_retries=0,
        sync_base_delay=0.0,
    )
    yield game_session
    await game_session.close()
