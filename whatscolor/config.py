"""
Settings read from the environment (or a local .env).

- DATABASE_URL: where the best level per difficulty is stored
- APP_ENV: "local" auto-creates tables on startup
- LOG_LEVEL: root log level
- WHATSCOLOR_EASY_SECONDS / _NORMAL_ / _HARD_: override the time budgets

Difficulty presets live here too so the engine and the API agree on them.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict

from dotenv import load_dotenv

from .types import Difficulty

# dev convenience; in prod the platform injects env vars
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./whatscolor.db")
APP_ENV = os.getenv("APP_ENV", "local")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Time limit picker range (seconds)
MIN_TIME_LIMIT = 10
MAX_TIME_LIMIT = 300
# Used when a session is sent back to the start screen
RESTART_TIME_LIMIT = 120

MAX_LEVEL = 500


@dataclass(frozen=True)
class DifficultyPreset:
    max_attempts: int
    base_time: int  # seconds


def _seconds(name: str, default: int) -> int:
    raw = os.getenv(f"WHATSCOLOR_{name.upper()}_SECONDS")
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"WHATSCOLOR_{name.upper()}_SECONDS must be an integer, got {raw!r}.")
    return max(MIN_TIME_LIMIT, min(MAX_TIME_LIMIT, value))


# easy -> 10 attempts, 3 minutes
# normal -> 7 attempts, 2 minutes
# hard -> 5 attempts, 1 minute
DIFFICULTY_PRESETS: Dict[Difficulty, DifficultyPreset] = {
    "easy": DifficultyPreset(max_attempts=10, base_time=_seconds("easy", 180)),
    "normal": DifficultyPreset(max_attempts=7, base_time=_seconds("normal", 120)),
    "hard": DifficultyPreset(max_attempts=5, base_time=_seconds("hard", 60)),
}


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
