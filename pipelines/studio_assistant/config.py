"""Configuration constants for the Studio Assistant pipeline."""

import os
from pathlib import Path
from typing import Any, Dict

from core.config_loader import load_config, merge_config

# Pipeline identification
PIPELINE_NAME = "STUDIO_ASSISTANT_PIPELINE"

# Packaged defaults; STUDIO_ASSISTANT_CONFIG points at an override file
DEFAULT_CONFIG_PATH = Path(__file__).with_name("assistant.yaml")


def load_assistant_config() -> Dict[str, Any]:
    """
    Load packaged defaults merged with the optional override file.

    Returns:
        Merged configuration dictionary.
    """
    config = load_config(DEFAULT_CONFIG_PATH)
    override_path = os.getenv("STUDIO_ASSISTANT_CONFIG")
    if override_path:
        config = merge_config(config, load_config(override_path))
    return config


ASSISTANT_CONFIG = load_assistant_config()

# Weekday names in calendar order; index is the weekly-minute day offset
WEEKDAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)
MINUTES_PER_DAY = 24 * 60

# Availability projection
HORIZON_DAYS: int = ASSISTANT_CONFIG["availability"]["horizon_days"]

# Schedule generation
_generator = ASSISTANT_CONFIG["schedule_generator"]
SCHEDULE_WEEKDAYS: tuple = tuple(_generator["weekdays"])
OPENING_HOUR: int = _generator["opening_hour"]
CLOSING_HOUR: int = _generator["closing_hour"]
SLOT_GRANULARITY_MINUTES: int = _generator["slot_granularity_minutes"]
MIN_SLOTS: int = _generator["min_slots"]
MAX_SLOTS: int = _generator["max_slots"]
MAX_ATTEMPTS_PER_SLOT: int = _generator["max_attempts_per_slot"]

# Business defaults
DEFAULT_TIMEZONE: str = ASSISTANT_CONFIG["business"]["default_timezone"]

# LLM generation settings
LLM_TEMPERATURE: float = ASSISTANT_CONFIG["llm"]["temperature"]
LLM_MAX_TOKENS: int = ASSISTANT_CONFIG["llm"]["max_tokens"]

# Persistence
STATE_FILE = Path(os.getenv("STUDIO_STATE_FILE", ASSISTANT_CONFIG["storage"]["state_file"]))

# Collection keys in the state store
USERS_KEY = "Users"
BUSINESSES_KEY = "Businesses"
SESSION_USER_KEY = "session:user_id"
