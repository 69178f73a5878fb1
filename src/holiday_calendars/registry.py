import threading
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .builder import CalendarBuilder
from .calendar import HolidayCalendar
from .config import get_calendar_config
from .errors import InvalidYearRange, UnknownCalendarError
from .jurisdictions import BUILDERS, CALENDAR_ALIASES
from .logging import get_logger
from .utils import _norm_key

logger = get_logger(__name__)


class CalendarRegistry:
    """
    Read-only map from jurisdiction code to HolidayCalendar.

    Builders and aliases are fixed at construction. Each calendar is built on
    first lookup and memoized; lookups are safe to call from several threads,
    and concurrent first lookups build a calendar only once.
    """

    def __init__(self,
                 builders: Optional[Mapping[str, CalendarBuilder]] = None,
                 aliases: Optional[Mapping[str, str]] = None,
                 *,
                 start_year: Optional[int] = None,
                 end_year: Optional[int] = None,
                 max_lookahead_days: Optional[int] = None):
        """
        Parameters
        ----------
        builders: Optional[Mapping[str, CalendarBuilder]]
            Code to builder. Defaults to every supported jurisdiction.
        aliases: Optional[Mapping[str, str]]
            Alternative names to code. Defaults to the built-in aliases.
        start_year: Optional[int]
            First generated year, defaults to the configured value. Clamped to a
            jurisdiction's first year when it has one.
        end_year: Optional[int]
            Last generated year, defaults to the configured value.
        max_lookahead_days: Optional[int]
            Look-ahead bound of the built calendars, defaults to the configured value.
        """
        config = get_calendar_config()
        self.start_year = config.start_year if start_year is None else int(start_year)
        self.end_year = config.end_year if end_year is None else int(end_year)
        if self.end_year < self.start_year:
            raise InvalidYearRange(f"end_year {self.end_year} is before start_year {self.start_year}")
        self.max_lookahead_days = config.max_lookahead_days if max_lookahead_days is None else int(max_lookahead_days)

        source = BUILDERS if builders is None else builders
        self._builders: Mapping[str, CalendarBuilder] = MappingProxyType(
            {_norm_key(code): b for code, b in source.items()}
        )
        alias_source = CALENDAR_ALIASES if aliases is None else aliases
        for alias, code in alias_source.items():
            if _norm_key(code) not in self._builders:
                raise UnknownCalendarError(f"Alias {alias!r} points to unknown calendar {code!r}")
        self._aliases: Mapping[str, str] = MappingProxyType(
            {_norm_key(alias): _norm_key(code) for alias, code in alias_source.items()}
        )

        self._calendars: Dict[str, HolidayCalendar] = {}
        self._lock = threading.Lock()

    @classmethod
    def default(cls) -> "CalendarRegistry":
        """The process-wide registry of every supported jurisdiction."""
        return get_default_registry()

    def resolve(self, code: str) -> str:
        """
        Resolve a code or alias to a registered jurisdiction code.

        Raises
        ------
        UnknownCalendarError
            If neither a code nor an alias matches.
        """
        key = _norm_key(code)
        key = self._aliases.get(key, key)
        if key not in self._builders:
            raise UnknownCalendarError(
                f"Unknown calendar code: {code!r}. Known codes: {', '.join(self.codes())}"
            )
        return key

    def builder(self, code: str) -> CalendarBuilder:
        return self._builders[self.resolve(code)]

    def lookup(self, code: str) -> HolidayCalendar:
        """
        Return the calendar registered under a code or alias, building it on first use.

        Parameters
        ----------
        code: str
            A jurisdiction code such as "GBLO", or an alias such as "LONDON" or "SOFR". Case-insensitive.

        Returns
        -------
        HolidayCalendar
        """
        key = self.resolve(code)
        cal = self._calendars.get(key)
        if cal is not None:
            return cal

        with self._lock:
            cal = self._calendars.get(key)
            if cal is None:
                builder = self._builders[key]
                start = self.start_year
                if builder.first_year is not None:
                    start = max(start, builder.first_year)
                cal = builder.build(start, self.end_year, max_lookahead_days=self.max_lookahead_days)
                self._calendars[key] = cal
                logger.info("calendar_registered", calendar=key, start_year=start, end_year=self.end_year)
        return cal

    def __contains__(self, code: str) -> bool:
        key = _norm_key(code)
        return self._aliases.get(key, key) in self._builders

    def codes(self) -> List[str]:
        """Registered jurisdiction codes, sorted."""
        return sorted(self._builders)

    def aliases(self) -> Dict[str, str]:
        """Alias to jurisdiction code."""
        return dict(self._aliases)


# Module-level singleton
_default_registry: Optional[CalendarRegistry] = None
_registry_lock = threading.Lock()


def get_default_registry() -> CalendarRegistry:
    """Get the process-wide registry, created from the configuration on first use."""
    global _default_registry
    if _default_registry is None:
        with _registry_lock:
            if _default_registry is None:
                _default_registry = CalendarRegistry()
    return _default_registry


def reset_default_registry() -> None:
    """Drop the process-wide registry so the next lookup rebuilds it from the current configuration."""
    global _default_registry
    with _registry_lock:
        _default_registry = None


def lookup(code: str) -> HolidayCalendar:
    """
    Return the calendar of a jurisdiction code from the process-wide registry.

    Example:
        from holiday_calendars import lookup

        gblo = lookup("GBLO")
        gblo.next_or_same_business_day("2015-12-25")
    """
    return get_default_registry().lookup(code)
