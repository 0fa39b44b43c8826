# config.py
import logging
import os
from typing import List, Optional

from pydantic import PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from data_models import TimeSlot

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
INPUT_DIR = os.path.join(BASE_DIR, 'input_data')
OUTPUT_DIR = os.path.join(BASE_DIR, 'output_data')

# Shared time grid. Slots are half-open hour intervals; 12:00-13:00 is lunch.
DAYS: List[str] = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
TIME_SLOTS: List[TimeSlot] = [
    TimeSlot(0, 8, 9),
    TimeSlot(1, 9, 10),
    TimeSlot(2, 10, 11),
    TimeSlot(3, 11, 12),
    TimeSlot(4, 13, 14),
    TimeSlot(5, 14, 15),
    TimeSlot(6, 15, 16),
]
SLOTS_PER_DAY = len(TIME_SLOTS)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class SchedulerSettings(BaseSettings):
    """Runtime knobs read from SCHEDULER_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_")

    # Legality-check budget for one solve; unset means unbounded.
    max_steps: Optional[PositiveInt] = None
    # Wall-clock budget in seconds for one solve; unset means unbounded.
    time_limit: Optional[PositiveFloat] = None
    log_level: str = "INFO"

    @field_validator("max_steps", "time_limit", mode="before")
    @classmethod
    def _blank_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        name = v.strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown log level {v!r}")
        return name


def load_settings() -> SchedulerSettings:
    """Read settings from the environment. Bad values raise pydantic.ValidationError."""
    return SchedulerSettings()


def max_steps_from_env() -> Optional[int]:
    return load_settings().max_steps


def time_limit_from_env() -> Optional[float]:
    return load_settings().time_limit


def setup_logging(level: Optional[str] = None) -> None:
    """Configure console logging once.

    The level comes from the argument, then SCHEDULER_LOG_LEVEL, then INFO.
    Calling it again after handlers exist does nothing.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    name = (level or load_settings().log_level).upper().strip()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    root.addHandler(handler)
    root.setLevel(getattr(logging, name, logging.INFO))
