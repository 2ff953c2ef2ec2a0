"""Tests for game configuration loading and environment validation"""
import json
import pytest

from learnquest import config
from learnquest.config import load_game_config, validate_config
from learnquest.exceptions import ConfigurationError
from learnquest.models.game_config import AgeGroup


class TestLoadGameConfig:
    """Test game_config.json loading"""

    def test_bundled_config_loads(self):
        """Test the shipped config is valid"""
        game_config = load_game_config()

        assert game_config.levels.thresholds[0] == 100
        assert game_config.xp.base_reward == 100
        assert game_config.xp.multiplier_for(7) == 2.0
        assert game_config.xp.multiplier_for(8) == 1.0
        assert game_config.coins.level_up_bonus == 50
        assert game_config.feed_limit == 50
        assert game_config.find_achievement("first_steps") is not None
        assert set(game_config.messaging) == set(AgeGroup)

    def test_custom_path(self, tmp_path):
        """Test loading from an explicit path with camelCase keys"""
        path = tmp_path / "game.json"
        path.write_text(json.dumps({
            "levels": {"thresholds": [10, 20]},
            "xp": {"baseReward": 5},
            "coins": {"levelUpBonus": 0},
        }))

        game_config = load_game_config(path)

        assert game_config.levels.thresholds == (10, 20)
        assert game_config.xp.streak_multipliers == {}
        assert game_config.achievements == ()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_game_config(tmp_path / "missing.json")

        assert exc_info.value.config_key == "GAME_CONFIG_PATH"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            load_game_config(path)

    @pytest.mark.parametrize("levels", [
        {"thresholds": []},
        {"thresholds": [100, 50]},
        {"thresholds": [0, 100]},
    ])
    def test_invalid_thresholds(self, tmp_path, levels):
        path = tmp_path / "game.json"
        path.write_text(json.dumps({
            "levels": levels,
            "xp": {"baseReward": 100},
            "coins": {"levelUpBonus": 50},
        }))

        with pytest.raises(ConfigurationError):
            load_game_config(path)

    def test_duplicate_achievement_ids(self, tmp_path):
        path = tmp_path / "game.json"
        path.write_text(json.dumps({
            "levels": {"thresholds": [100]},
            "xp": {"baseReward": 100},
            "coins": {"levelUpBonus": 50},
            "achievements": [
                {"id": "dup", "title": "One"},
                {"id": "dup", "title": "Two"},
            ],
        }))

        with pytest.raises(ConfigurationError):
            load_game_config(path)


class TestValidateConfig:
    """Test environment validation"""

    def test_defaults_are_valid(self):
        validate_config()

    def test_invalid_inbox_size(self, monkeypatch):
        monkeypatch.setattr(config, "EVENT_INBOX_SIZE", 0)

        with pytest.raises(ConfigurationError) as exc_info:
            validate_config()

        assert exc_info.value.config_key == "EVENT_INBOX_SIZE"

    def test_invalid_age_group(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_AGE_GROUP", "toddler")

        with pytest.raises(ConfigurationError):
            validate_config()

    def test_real_backend_needs_url(self, monkeypatch):
        monkeypatch.setattr(config, "MOCK_API", False)
        monkeypatch.setattr(config, "PROFILE_API_URL", "")

        with pytest.raises(ConfigurationError):
            validate_config()
