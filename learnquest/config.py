"""Configuration management"""
import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from learnquest.exceptions import ConfigurationError
from learnquest.models.game_config import GameConfig, AgeGroup

load_dotenv()

logger = logging.getLogger(__name__)

# Game rules
DEFAULT_GAME_CONFIG_PATH: Path = Path(__file__).parent / "data" / "game_config.json"
GAME_CONFIG_PATH: Path = Path(os.getenv("GAME_CONFIG_PATH", str(DEFAULT_GAME_CONFIG_PATH)))
DEFAULT_AGE_GROUP: str = os.getenv("DEFAULT_AGE_GROUP", AgeGroup.TEEN.value)

# Event router
EVENT_INBOX_SIZE: int = int(os.getenv("EVENT_INBOX_SIZE", "100"))

# Profile backend
PROFILE_API_URL: str = os.getenv("PROFILE_API_URL", "http://localhost:3001/api")
PROFILE_API_TOKEN: str = os.getenv("PROFILE_API_TOKEN", "")
PROFILE_API_TIMEOUT: float = float(os.getenv("PROFILE_API_TIMEOUT", "10.0"))
PROFILE_SYNC_MAX_RETRIES: int = int(os.getenv("PROFILE_SYNC_MAX_RETRIES", "3"))

# Development mocks (profile store + push transport)
MOCK_API: bool = os.getenv("MOCK_API", "true").lower() == "true"
MOCK_EVENT_INTERVAL_SECONDS: float = float(os.getenv("MOCK_EVENT_INTERVAL_SECONDS", "30"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Sentry
ENABLE_SENTRY: bool = os.getenv("ENABLE_SENTRY", "false").lower() == "true"
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "development")
SENTRY_TRACES_SAMPLE_RATE: float = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0"))


def load_game_config(path: Optional[Union[str, Path]] = None) -> GameConfig:
    """
    Load and validate the static game rules

    Args:
        path: JSON file to read (defaults to GAME_CONFIG_PATH)

    Returns:
        Validated GameConfig

    Raises:
        ConfigurationError: If the file is missing, not JSON, or fails validation
    """
    config_path = Path(path) if path is not None else GAME_CONFIG_PATH

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(
            f"Game config not found at {config_path}",
            config_key="GAME_CONFIG_PATH",
            cause=e
        )
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Game config at {config_path} is not valid JSON: {e}",
            config_key="GAME_CONFIG_PATH",
            cause=e
        )

    try:
        config = GameConfig.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Game config at {config_path} is invalid: {e}",
            config_key="GAME_CONFIG_PATH",
            cause=e
        )

    logger.info(
        f"Loaded game config from {config_path}: {len(config.levels.thresholds)} thresholds, "
        f"{len(config.achievements)} achievements"
    )
    return config


# Validation
def validate_config() -> None:
    """Validate environment configuration"""
    if EVENT_INBOX_SIZE <= 0:
        raise ConfigurationError("EVENT_INBOX_SIZE must be positive", config_key="EVENT_INBOX_SIZE")
    if PROFILE_SYNC_MAX_RETRIES < 0:
        raise ConfigurationError(
            "PROFILE_SYNC_MAX_RETRIES must not be negative",
            config_key="PROFILE_SYNC_MAX_RETRIES"
        )
    if DEFAULT_AGE_GROUP not in {group.value for group in AgeGroup}:
        raise ConfigurationError(
            f"DEFAULT_AGE_GROUP must be one of {[group.value for group in AgeGroup]}",
            config_key="DEFAULT_AGE_GROUP"
        )
    if not MOCK_API and not PROFILE_API_URL:
        raise ConfigurationError("PROFILE_API_URL is required when MOCK_API=false", config_key="PROFILE_API_URL")
