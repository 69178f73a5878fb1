import calendar as pycal
import datetime as dt
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import ClassVar, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

from .errors import InvalidYearRange, RuleApplicationError

LAST = "last"
Ordinal = Union[int, str]


@lru_cache(maxsize=1024)
def easter(year: int) -> dt.date:
    """
    Return the date of Easter Sunday in the proleptic Gregorian calendar.

    Anonymous Gregorian algorithm (Meeus/Jones/Butcher). No Julian correction is
    applied, so the result is only meaningful from 1583 onwards.

    Parameters
    ----------
    year: int
        The year, >= 1583.

    Returns
    -------
    dt.date
        Easter Sunday of the given year.
    """
    if year < 1583:
        raise ValueError(f"Gregorian Easter is undefined before 1583, got {year}")

    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return dt.date(year, month, day + 1)


# =========================
# Validity windows
# =========================
@dataclass(frozen=True)
class YearWindow:
    """
    Years in which a rule applies.

    Attributes
    ----------
    start: Optional[int]
        First applicable year (inclusive), None for open-ended.
    end: Optional[int]
        Last applicable year (inclusive), None for open-ended.
    excluded: FrozenSet[int]
        Years inside [start, end] in which the rule does not apply.
    only: Optional[FrozenSet[int]]
        If set, the rule applies in these years only (still bounded by start/end).
    """
    start: Optional[int] = None
    end: Optional[int] = None
    excluded: FrozenSet[int] = frozenset()
    only: Optional[FrozenSet[int]] = None

    def __post_init__(self):
        if self.start is not None and self.end is not None and self.end < self.start:
            raise InvalidYearRange(f"Window end {self.end} is before start {self.start}")
        if not isinstance(self.excluded, frozenset):
            object.__setattr__(self, "excluded", frozenset(self.excluded))
        if self.only is not None and not isinstance(self.only, frozenset):
            object.__setattr__(self, "only", frozenset(self.only))

    def __contains__(self, year: int) -> bool:
        if self.start is not None and year < self.start:
            return False
        if self.end is not None and year > self.end:
            return False
        if self.only is not None and year not in self.only:
            return False
        return year not in self.excluded

    def excluding(self, *years: int) -> "YearWindow":
        return replace(self, excluded=self.excluded | frozenset(years))

    def clipped(self, start: Optional[int] = None, end: Optional[int] = None) -> Optional["YearWindow"]:
        """
        Narrow the window to [start, end].

        Returns None when no year of the window is left.
        """
        if start is None or (self.start is not None and self.start > start):
            start = self.start
        if end is None or (self.end is not None and self.end < end):
            end = self.end
        if start is not None and end is not None and end < start:
            return None
        window = replace(self, start=start, end=end)
        if window.only is not None and not any(y in window for y in window.only):
            return None
        return window


ALWAYS = YearWindow()


def since(year: int) -> YearWindow:
    return YearWindow(start=year)


def until(year: int) -> YearWindow:
    return YearWindow(end=year)


def between(start: int, end: int) -> YearWindow:
    return YearWindow(start=start, end=end)


def only(years: Iterable[int]) -> YearWindow:
    return YearWindow(only=frozenset(years))


# =========================
# Rules
# =========================
class HolidayRule(ABC):
    """
    Abstract base class for holiday rules.

    A rule yields at most one candidate date per year. Subclasses are frozen
    dataclasses carrying a ``window`` and a ``label`` field.
    """
    substitutable: ClassVar[bool] = True

    window: YearWindow
    label: str

    def apply(self, year: int) -> Optional[dt.date]:
        """
        Return the candidate date of this rule for the given year.

        Parameters
        ----------
        year: int
            The year to evaluate.

        Returns
        -------
        Optional[dt.date]
            The unadjusted candidate date, or None if the rule does not apply in that year.
        """
        if year not in self.window:
            return None
        return self._candidate(year)

    @abstractmethod
    def _candidate(self, year: int) -> Optional[dt.date]:
        pass


@dataclass(frozen=True)
class FixedDate(HolidayRule):
    """Same month and day every applicable year, e.g. 25 December."""
    month: int
    day: int
    window: YearWindow = ALWAYS
    label: str = ""

    def __post_init__(self):
        # 2000 is a leap year, so Feb 29 passes here and is checked per year
        try:
            dt.date(2000, self.month, self.day)
        except ValueError as e:
            raise ValueError(f"Invalid month/day for FixedDate: {self.month}/{self.day}") from e

    def _candidate(self, year: int) -> dt.date:
        try:
            return dt.date(year, self.month, self.day)
        except ValueError as e:
            raise RuleApplicationError(f"{self!r} has no date in {year}") from e


@dataclass(frozen=True)
class NthWeekdayOfMonth(HolidayRule):
    """
    The n-th (1 to 5) or last occurrence of a weekday within a month.

    Attributes
    ----------
    month: int
        Month number, 1 to 12.
    weekday: int
        Weekday as in ``datetime.date.weekday()`` (Monday=0, Sunday=6).
    ordinal: int or "last"
        Which occurrence of the weekday to take.
    """
    month: int
    weekday: int
    ordinal: Ordinal
    window: YearWindow = ALWAYS
    label: str = ""

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be in 1..12, got {self.month}")
        if not 0 <= self.weekday <= 6:
            raise ValueError(f"weekday must be in 0..6, got {self.weekday}")
        if self.ordinal != LAST and not (isinstance(self.ordinal, int) and 1 <= self.ordinal <= 5):
            raise ValueError(f"ordinal must be 1..5 or 'last', got {self.ordinal!r}")

    def _candidate(self, year: int) -> dt.date:
        month_length = pycal.monthrange(year, self.month)[1]
        if self.ordinal == LAST:
            last = dt.date(year, self.month, month_length)
            return last - dt.timedelta(days=(last.weekday() - self.weekday) % 7)

        first = dt.date(year, self.month, 1)
        day = 1 + (self.weekday - first.weekday()) % 7 + 7 * (self.ordinal - 1)
        if day > month_length:
            raise RuleApplicationError(
                f"There is no occurrence #{self.ordinal} of weekday {self.weekday} in {year}-{self.month:02d}"
            )
        return dt.date(year, self.month, day)


@dataclass(frozen=True)
class EasterOffset(HolidayRule):
    """Movable feast at a fixed number of days from Easter Sunday, e.g. -2 for Good Friday."""
    offset_days: int
    window: YearWindow = ALWAYS
    label: str = ""

    def _candidate(self, year: int) -> dt.date:
        d = easter(year) + dt.timedelta(days=self.offset_days)
        if d.year != year:
            raise RuleApplicationError(f"Easter offset {self.offset_days} leaves year {year}: {d}")
        return d


@dataclass(frozen=True)
class ExplicitOverride(HolidayRule):
    """
    One-off holidays decided by government or market authorities, one date per year.

    The dates are final: the builder never applies a substitution policy to them.
    """
    substitutable: ClassVar[bool] = False

    dates: Tuple[Tuple[int, dt.date], ...]
    window: YearWindow = ALWAYS
    label: str = ""
    _by_year: Mapping[int, dt.date] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        items = self.dates.items() if isinstance(self.dates, Mapping) else self.dates
        pairs = tuple(sorted((int(year), d) for year, d in items))
        for year, d in pairs:
            if d.year != year:
                raise ValueError(f"Override date {d} does not fall in its year {year}")
        if len({year for year, _ in pairs}) != len(pairs):
            raise ValueError("ExplicitOverride accepts at most one date per year")
        object.__setattr__(self, "dates", pairs)
        object.__setattr__(self, "_by_year", dict(pairs))

    @classmethod
    def of(cls, *dates: dt.date, window: YearWindow = ALWAYS, label: str = "") -> "ExplicitOverride":
        return cls(dates=tuple((d.year, d) for d in dates), window=window, label=label)

    def _candidate(self, year: int) -> Optional[dt.date]:
        return self._by_year.get(year)
