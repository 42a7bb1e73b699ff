"""
Configuration file for Powerball Oracle.

This file contains the game constants and the default runtime settings.
Values under config/config.ini override the runtime settings; the game
constants are fixed by the official Powerball rules.
"""
import configparser
import os
from typing import List

from loguru import logger

# --- Game Rules ---
WHITE_BALL_MIN: int = 1
WHITE_BALL_MAX: int = 69
WHITE_BALL_COUNT: int = 5

POWERBALL_MIN: int = 1
POWERBALL_MAX: int = 26

# Tokens in a full draw string: 5 white balls followed by the Powerball
DRAW_TOKEN_COUNT: int = WHITE_BALL_COUNT + 1

# --- Dataset ---
DATASET_FILE_PATH: str = "data/lottery-data.json"
MAX_STORED_RESULTS: int = 200

# --- Logging ---
LOG_FILE_PATH: str = "logs/pboracle.log"

# --- Fetching ---
FETCH_TIMEOUT_SECONDS: int = 10
HEALTH_CHECK_TIMEOUT_SECONDS: int = 5
NY_OPEN_DATA_LIMIT: int = 50
ALLOW_FALLBACK: bool = True

# Ranked order in which sources are tried
DEFAULT_SOURCES: List[str] = [
    "ny_open_data",
    "nc_lottery_csv",
    "powerball_official",
    "usamega",
    "lottery_dot_com",
]

USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

FALLBACK_SOURCE_NAME: str = "Fallback Generator"

DEFAULT_CONFIG_PATH: str = "config/config.ini"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> configparser.ConfigParser:
    """
    Loads the configuration file.

    A missing file is not fatal: every setting has a default in this module,
    so an empty parser is returned and callers read values with `fallback=`.
    """
    config = configparser.ConfigParser()
    if not os.path.exists(config_path):
        logger.warning(f"Configuration file not found at {config_path}, using defaults.")
        return config

    config.read(config_path)
    logger.info(f"Configuration loaded from {config_path}")
    return config


def get_source_names(config: configparser.ConfigParser) -> List[str]:
    """Returns the ranked list of source keys from [fetch] sources."""
    raw = config.get("fetch", "sources", fallback="")
    names = [name.strip() for name in raw.split(",") if name.strip()]
    return names or list(DEFAULT_SOURCES)
