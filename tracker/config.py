"""Configuration for the budget tracker.

Paths and log level come from environment variables with project-relative
defaults; user preferences live in the store and are turned into a
``Settings`` value here.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

# Base project root - assumes this file is in tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))
STORE_PATH = Path(os.getenv("TRACKER_STORE_PATH", DATA_DIR / "tracker.json")).resolve()
SAMPLE_PATH = DATA_DIR / "sample.json"

LOG_LEVEL = os.getenv("TRACKER_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

WEEK_STARTS = ("monday", "sunday")


@dataclass(frozen=True)
class Settings:
    currency: str = "USD"
    locale: str = "en-US"
    start_of_week: str = "monday"
    start_of_month: int = 1     # informational, 1-28

    @property
    def starts_on_monday(self) -> bool:
        return self.start_of_week == "monday"


DEFAULT_SETTINGS = Settings()

_SETTING_KEYS = {
    "currency": "currency",
    "locale": "locale",
    "startOfWeek": "start_of_week",
    "start_of_week": "start_of_week",
    "startOfMonth": "start_of_month",
    "start_of_month": "start_of_month",
}


def settings_from_dict(data: Optional[Dict[str, Any]]) -> Settings:
    """Merge stored preferences over the defaults.

    Unknown keys (theme, density and other display-only preferences) are
    ignored.
    """
    values = {
        _SETTING_KEYS[k]: v for k, v in (data or {}).items() if k in _SETTING_KEYS and v is not None
    }
    settings = replace(DEFAULT_SETTINGS, **values)
    if settings.start_of_week not in WEEK_STARTS:
        raise ValueError(f"start_of_week must be one of {WEEK_STARTS}, got {settings.start_of_week!r}")
    day = int(settings.start_of_month)
    if not 1 <= day <= 28:
        raise ValueError(f"start_of_month must be within 1-28, got {day}")
    return replace(settings, start_of_month=day)


def settings_to_dict(settings: Settings) -> Dict[str, Any]:
    return {
        "currency": settings.currency,
        "locale": settings.locale,
        "startOfWeek": settings.start_of_week,
        "startOfMonth": settings.start_of_month,
    }


def setup_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)


def ensure_data_directories() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    STORE_PATH.parent.mkdir(parents=True, exist_ok=True)
