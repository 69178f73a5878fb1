"""
holiday_calendars

Holiday calendars of financial centres, generated from declarative rules:
  - rules (fixed dates, n-th weekday of a month, Easter offsets, one-off overrides)
  - substitution policies for holidays falling on a weekend
  - a builder evaluating rules over a range of years
  - an immutable HolidayCalendar answering business-day queries with numpy
  - a registry of jurisdictions keyed by market code (GBLO, FRPA, USGS, JPTO...)

Usage:
    from holiday_calendars import lookup

    gblo = lookup("GBLO")
    gblo.is_business_day("2015-12-28")        # False
    gblo.shift_business_days("2015-12-24", 1)  # 2015-12-29
"""

from .builder import CalendarBuilder, GeneratedHoliday
from .calendar import HolidayCalendar
from .config import CalendarConfig, configure_calendars, get_calendar_config, reset_calendar_config
from .errors import (
    CalendarError,
    InvalidYearRange,
    LookAheadExceeded,
    QueryOutOfRange,
    RuleApplicationError,
    UnknownCalendarError,
)
from .logging import configure_logging, get_logger
from .policies import SubstitutionPolicy
from .registry import CalendarRegistry, get_default_registry, lookup, reset_default_registry
from .rules import (
    ALWAYS,
    LAST,
    EasterOffset,
    ExplicitOverride,
    FixedDate,
    HolidayRule,
    NthWeekdayOfMonth,
    YearWindow,
    between,
    easter,
    only,
    since,
    until,
)

__version__ = "0.1.0"

__all__ = [
    "ALWAYS",
    "LAST",
    "CalendarBuilder",
    "CalendarConfig",
    "CalendarError",
    "CalendarRegistry",
    "EasterOffset",
    "ExplicitOverride",
    "FixedDate",
    "GeneratedHoliday",
    "HolidayCalendar",
    "HolidayRule",
    "InvalidYearRange",
    "LookAheadExceeded",
    "NthWeekdayOfMonth",
    "QueryOutOfRange",
    "RuleApplicationError",
    "SubstitutionPolicy",
    "UnknownCalendarError",
    "YearWindow",
    "between",
    "configure_calendars",
    "configure_logging",
    "easter",
    "get_calendar_config",
    "get_default_registry",
    "get_logger",
    "lookup",
    "only",
    "reset_calendar_config",
    "reset_default_registry",
    "since",
    "until",
]
