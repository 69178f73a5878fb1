"""Module-level configuration for calendar generation defaults."""

import threading
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidYearRange


@dataclass
class CalendarConfig:
    """Defaults read when a registry or calendar is created."""

    start_year: int = 1950
    end_year: int = 2099
    max_lookahead_days: int = 10


# Module-level singleton
_calendar_config: Optional[CalendarConfig] = None
_config_lock = threading.Lock()


def get_calendar_config() -> CalendarConfig:
    """Get the global calendar configuration singleton."""
    global _calendar_config
    if _calendar_config is None:
        with _config_lock:
            if _calendar_config is None:
                _calendar_config = CalendarConfig()
    return _calendar_config


def configure_calendars(
    start_year: Optional[int] = None,
    end_year: Optional[int] = None,
    max_lookahead_days: Optional[int] = None,
) -> None:
    """Configure default calendar settings.

    Args:
        start_year: First year generated by registry lookups.
        end_year: Last year generated by registry lookups.
        max_lookahead_days: Maximum number of days a business-day search may
            walk before the calendar data is considered broken.

    Calendars that were already built keep the settings they were built with.
    Call ``reset_default_registry()`` to rebuild registry calendars.

    Example:
        from holiday_calendars import configure_calendars

        configure_calendars(start_year=1990, end_year=2060)
    """
    config = get_calendar_config()
    with _config_lock:
        start = config.start_year if start_year is None else int(start_year)
        end = config.end_year if end_year is None else int(end_year)
        if end < start:
            raise InvalidYearRange(f"end_year {end} is before start_year {start}")
        if max_lookahead_days is not None and max_lookahead_days < 1:
            raise ValueError("max_lookahead_days must be >= 1")

        config.start_year = start
        config.end_year = end
        if max_lookahead_days is not None:
            config.max_lookahead_days = int(max_lookahead_days)


def reset_calendar_config() -> None:
    """Reset configuration to defaults. Useful for testing."""
    global _calendar_config
    with _config_lock:
        _calendar_config = CalendarConfig()
