import numpy as np
import datetime as dt
from calendar import SATURDAY, SUNDAY
from typing import Tuple, Iterable, Optional, List, FrozenSet

from .utils import DateLike, OutputType
from .date_universe import DateUniverse
from .config import get_calendar_config
from .errors import CalendarError, InvalidYearRange, LookAheadExceeded, QueryOutOfRange
from .logging import get_logger
from .utils import _to_date, _to_internal_date, _from_internal_date

logger = get_logger(__name__)

WEEKEND: FrozenSet[int] = frozenset({SATURDAY, SUNDAY})


class HolidayCalendar:
    """
    Immutable holiday calendar over whole years [start_year, end_year].

    It is defined by :
        - A set of weekend days (weekday numbers, Monday=0), non-business every week.
        - A strictly ordered set of holiday dates, all inside the generated years.
        - A DateUniverse and a boolean business-day mask derived from the two above.

    A day is a holiday when it is a weekend day or one of the holiday dates.
    Every query outside the generated years raises QueryOutOfRange rather than guessing.
    """

    def __init__(self,
                 holiday_dates: Iterable[DateLike],
                 start_year: int,
                 end_year: int,
                 *,
                 weekend_days: Iterable[int] = WEEKEND,
                 name: str = "",
                 max_lookahead_days: Optional[int] = None,
                 date_type: OutputType = "date",
                 str_sep: str = "-"):
        """
        Parameters
        ----------
        holiday_dates: Iterable[DateLike]
            The holiday dates. Duplicates collapse; weekend dates may be included or not.
        start_year: int
            First year covered by the calendar.
        end_year: int
            Last year covered by the calendar (inclusive).
        weekend_days: Iterable[int], default Saturday and Sunday
            Weekday numbers (Monday=0, Sunday=6) that are never business days.
        name: str, default ""
            The code of the calendar, e.g. "GBLO". Not part of equality.
        max_lookahead_days: Optional[int]
            Maximum number of days a business-day search may walk. Defaults to the configured value.
        date_type: OutputType, default "date"
            The output type for methods returning dates: "date", "numpy", "datetime", "str" or "pandas".
        str_sep: str, default "-"
            When date_type is "str", the separator between year, month and day.
        """
        if end_year < start_year:
            raise InvalidYearRange(f"end_year {end_year} is before start_year {start_year}")

        self._name = name
        self._date_type = date_type
        self._str_sep = str_sep
        self._weekend_days = frozenset(int(w) for w in weekend_days)
        if any(not 0 <= w <= 6 for w in self._weekend_days):
            raise ValueError(f"weekend_days must be weekday numbers in 0..6, got {sorted(self._weekend_days)}")
        if len(self._weekend_days) == 7:
            raise ValueError("A calendar needs at least one working weekday.")

        lookahead = get_calendar_config().max_lookahead_days if max_lookahead_days is None else max_lookahead_days
        if lookahead < 1:
            raise ValueError("max_lookahead_days must be >= 1")
        self._max_lookahead = int(lookahead)

        self.universe = DateUniverse(start_year=int(start_year), end_year=int(end_year))

        holidays = sorted({_to_date(d) for d in holiday_dates})
        outside = [d for d in holidays if not start_year <= d.year <= end_year]
        if outside:
            raise QueryOutOfRange(
                f"{len(outside)} holiday date(s) outside [{start_year}, {end_year}], first is {outside[0]}"
            )
        self._holidays: Tuple[dt.date, ...] = tuple(holidays)

        self.business_mask: np.ndarray = self._create_mask()
        self.business_position: np.ndarray = np.flatnonzero(self.business_mask).astype("int64")
        self.business_mask.setflags(write=False)
        self.business_position.setflags(write=False)

    # ---------------------------------------
    # |            Helper methods           |
    # ---------------------------------------

    def _create_mask(self) -> np.ndarray:
        """
        Create the business day mask: True where the day is neither a weekend day nor a holiday.

        Returns
        -------
        np.ndarray
            A boolean array of the same length as the universe.
        """
        mask = ~np.isin(self.universe.weekday, list(self._weekend_days))
        if self._holidays:
            pos = self.universe.positions(np.array(self._holidays, dtype="datetime64[D]"))
            mask[pos] = False
        return mask

    def _locate(self, day: DateLike) -> int:
        return self.universe.locate(_to_internal_date(day))

    def _out(self, i: int):
        return _from_internal_date(self.universe.days[i], self._date_type, str_sep=self._str_sep)

    def _range_indices(self, start: Optional[DateLike], end: Optional[DateLike]) -> Tuple[int, int]:
        """
        Give the universe indices of the given start and end dates, defaulting to the whole range.
        """
        i0 = 0 if start is None else self._locate(start)
        i1 = len(self.universe) - 1 if end is None else self._locate(end)
        if i1 < i0:
            raise ValueError("end < start")
        return i0, i1

    def _inclusive_flags(self, inclusive: str) -> Tuple[bool, bool]:
        inc = inclusive.lower()
        if inc == "both":
            return True, True
        if inc == "left":
            return True, False
        if inc == "right":
            return False, True
        if inc == "none":
            return False, False
        raise ValueError("inclusive must be one of: 'both', 'left', 'right', 'none'")

    def _check_gaps(self, i: int, path: np.ndarray, day: DateLike) -> None:
        """Raise LookAheadExceeded if any step from i along path skips more non-business days than the bound."""
        skipped = np.abs(np.diff(np.concatenate(([i], path)))) - 1
        if skipped.size and not self.business_mask[i]:
            # the start day itself is one of the skipped days
            skipped[0] += 1
        if skipped.size and int(skipped.max()) > self._max_lookahead:
            logger.error("lookahead_exceeded", calendar=self._name, date=str(day), bound=self._max_lookahead)
            raise LookAheadExceeded(
                f"{self._name or 'calendar'}: no business day within {self._max_lookahead} days "
                f"while stepping from {day}"
            )

    def _search(self, day: DateLike, forward: bool):
        i = self._locate(day)
        bpos = self.business_position
        limit = self._max_lookahead
        if forward:
            k = np.searchsorted(bpos, i, side="left")
            if k < len(bpos) and bpos[k] - i <= limit:
                return self._out(bpos[k])
            walked_off = i + limit >= len(self.universe)
        else:
            k = np.searchsorted(bpos, i, side="right") - 1
            if k >= 0 and i - bpos[k] <= limit:
                return self._out(bpos[k])
            walked_off = i - limit < 0

        if walked_off:
            raise QueryOutOfRange(
                f"No business day found for {day} before leaving the generated range "
                f"[{self.start_year}, {self.end_year}]"
            )
        logger.error("lookahead_exceeded", calendar=self._name, date=str(day), bound=limit)
        raise LookAheadExceeded(
            f"{self._name or 'calendar'}: no business day within {limit} days of {day}"
        )

    # ---------------------------------------
    # |          Public API methods         |
    # ---------------------------------------

    # ----------------------------------------
    # 1. Static information about the calendar
    # ----------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def start_year(self) -> int:
        return self.universe.start_year

    @property
    def end_year(self) -> int:
        return self.universe.end_year

    @property
    def weekend_days(self) -> FrozenSet[int]:
        return self._weekend_days

    @property
    def holiday_dates(self) -> Tuple[dt.date, ...]:
        """The generated holiday dates in ascending order, excluding plain weekend days."""
        return self._holidays

    @property
    def max_lookahead_days(self) -> int:
        return self._max_lookahead

    def covers(self, day: DateLike) -> bool:
        """Return whether the given date lies inside the generated years."""
        return self.universe.contains(_to_internal_date(day))

    def __len__(self) -> int:
        """Return the number of days in the calendar."""
        return len(self.universe)

    def __eq__(self, other) -> bool:
        if not isinstance(other, HolidayCalendar):
            return NotImplemented
        return (self._weekend_days == other._weekend_days
                and self.start_year == other.start_year
                and self.end_year == other.end_year
                and self._holidays == other._holidays)

    def __hash__(self) -> int:
        return hash((self._weekend_days, self.start_year, self.end_year, self._holidays))

    def __repr__(self) -> str:
        return (f"HolidayCalendar(name={self._name!r}, years=[{self.start_year}, {self.end_year}], "
                f"holidays={len(self._holidays)}, weekend_days={sorted(self._weekend_days)})")

    # ------------------------------------------------
    # 2. Basic business / non-business day information
    # ------------------------------------------------

    def is_holiday(self, day: DateLike) -> bool:
        """
        Return whether the given date is a holiday, weekend days included.

        Parameters
        ----------
        day: DateLike
            The date to check. Can be any date-like object (str, datetime, date, np.datetime64, etc.).

        Returns
        -------
        bool
            True if the date is a weekend day or a generated holiday.
        """
        return not bool(self.business_mask[self._locate(day)])

    def is_business_day(self, day: DateLike) -> bool:
        """Return whether the given date is a business day."""
        return bool(self.business_mask[self._locate(day)])

    def is_weekend(self, day: DateLike) -> bool:
        """Return whether the given date falls on one of the calendar's weekend days."""
        return int(self.universe.weekday[self._locate(day)]) in self._weekend_days

    def business_days(self, start_date: Optional[DateLike] = None, end_date: Optional[DateLike] = None) -> List[OutputType]:
        """
        Return the business days between the given start and end dates (both inclusive).

        Parameters
        ----------
        start_date: Optional[DateLike]
            The start date of the range. If None, uses the first day of the calendar.
        end_date: Optional[DateLike]
            The end date of the range. If None, uses the last day of the calendar.

        Returns
        -------
        List[OutputType]
            The business days in the given range, in the calendar's output type.
        """
        i0, i1 = self._range_indices(start_date, end_date)
        pos = self.business_position
        left = np.searchsorted(pos, i0, side="left")
        right = np.searchsorted(pos, i1, side="right")
        return [self._out(i) for i in pos[left:right]]

    def non_business_days(self, start_date: Optional[DateLike] = None, end_date: Optional[DateLike] = None) -> List[OutputType]:
        """
        Return the weekend days and holidays between the given start and end dates (both inclusive).
        """
        i0, i1 = self._range_indices(start_date, end_date)
        off = np.flatnonzero(~self.business_mask[i0:i1 + 1]) + i0
        return [self._out(i) for i in off]

    def business_days_between(self,
                              start_date: DateLike,
                              end_date: DateLike,
                              *,
                              inclusive: str = "left") -> int:
        """
        Count the business days between two dates.

        Parameters
        ----------
        start_date: DateLike
            The start date of the range.
        end_date: DateLike
            The end date of the range, not before start_date.
        inclusive: str, default "left"
            Whether to include the start and/or end date in the count: "both", "left", "right" or "none".
        """
        i1 = self._locate(start_date)
        i2 = self._locate(end_date)
        if i2 < i1:
            raise ValueError("Please ensure that end_date >= start_date.")

        inc_start, inc_end = self._inclusive_flags(inclusive)
        bpos = self.business_position
        left = np.searchsorted(bpos, i1, side="left" if inc_start else "right")
        right = np.searchsorted(bpos, i2, side="right" if inc_end else "left")
        return int(max(right - left, 0))

    # -------------------------
    # 3. Business day offseting
    # -------------------------

    def next_or_same_business_day(self, day: DateLike) -> OutputType:
        """
        Return the given date if it is a business day, otherwise the first business day after it.

        Raises
        ------
        LookAheadExceeded
            If no business day exists within max_lookahead_days.
        QueryOutOfRange
            If the date, or the search, leaves the generated years.
        """
        return self._search(day, forward=True)

    def previous_or_same_business_day(self, day: DateLike) -> OutputType:
        """
        Return the given date if it is a business day, otherwise the last business day before it.
        """
        return self._search(day, forward=False)

    def shift_business_days(self, day: DateLike, n: int) -> OutputType:
        """
        Return the date obtained by moving n business days from the given date.

        Non-business days are skipped, so shifting by 1 from a Friday before a
        holiday Monday lands on Tuesday. Shifting by 0 is only defined for
        business days. Uses numpy.searchsorted on the business positions, so the
        cost does not grow with n.

        Parameters
        ----------
        day: DateLike
            The start date. Can be any date-like object (str, datetime, date, np.datetime64, etc.).
        n: int
            The number of business days to move, forward if positive, backward if negative.

        Returns
        -------
        OutputType
            The resulting date in the calendar's output type.
        """
        i = self._locate(day)
        bpos = self.business_position

        if n == 0:
            if not self.business_mask[i]:
                raise CalendarError(f"Cannot shift {day} by 0 business days: it is not a business day.")
            return self._out(i)

        if n > 0:
            first = int(np.searchsorted(bpos, i, side="right"))
            k = first + (n - 1)
            if k >= len(bpos):
                raise QueryOutOfRange(f"Shifting {day} by {n} business days goes beyond {self.end_year}-12-31.")
            self._check_gaps(i, bpos[first:k + 1], day)
        else:
            first = int(np.searchsorted(bpos, i, side="left")) - 1
            k = first + (n + 1)
            if k < 0:
                raise QueryOutOfRange(f"Shifting {day} by {n} business days goes before {self.start_year}-01-01.")
            self._check_gaps(i, bpos[k:first + 1][::-1], day)

        return self._out(bpos[k])

    def next_business_day(self, day: DateLike) -> OutputType:
        """Return the first business day strictly after the given date."""
        return self.shift_business_days(day, 1)

    def previous_business_day(self, day: DateLike) -> OutputType:
        """Return the last business day strictly before the given date."""
        return self.shift_business_days(day, -1)

    # -------------------------------
    # 4. Combination with other calendars
    # -------------------------------

    def combined_with(self, other: "HolidayCalendar") -> "HolidayCalendar":
        """
        Combine with another calendar: a day is a business day only if it is one in both.

        The result covers the years common to both calendars and uses the smaller look-ahead bound.

        Parameters
        ----------
        other: HolidayCalendar
            The calendar to combine with.

        Returns
        -------
        HolidayCalendar
            A new calendar named "<self>+<other>".
        """
        start = max(self.start_year, other.start_year)
        end = min(self.end_year, other.end_year)
        if end < start:
            raise InvalidYearRange(
                f"Calendars {self._name!r} [{self.start_year}, {self.end_year}] and "
                f"{other.name!r} [{other.start_year}, {other.end_year}] do not overlap"
            )
        holidays = {d for d in self._holidays + other.holiday_dates if start <= d.year <= end}
        return HolidayCalendar(
            holidays,
            start,
            end,
            weekend_days=self._weekend_days | other.weekend_days,
            name=f"{self._name}+{other.name}",
            max_lookahead_days=min(self._max_lookahead, other.max_lookahead_days),
            date_type=self._date_type,
            str_sep=self._str_sep,
        )

    def with_date_type(self, date_type: OutputType, str_sep: str = "-") -> "HolidayCalendar":
        """Return the same calendar rendering its dates in another output type."""
        return HolidayCalendar(
            self._holidays,
            self.start_year,
            self.end_year,
            weekend_days=self._weekend_days,
            name=self._name,
            max_lookahead_days=self._max_lookahead,
            date_type=date_type,
            str_sep=str_sep,
        )

    def summary(self) -> dict:
        """
        Return a summary of the calendar: code, years, and counts of business and non-business days.
        """
        total_days = len(self.universe)
        business_days = int(self.business_mask.sum())
        return {
            "name": self._name,
            "start_year": self.start_year,
            "end_year": self.end_year,
            "weekend_days": sorted(self._weekend_days),
            "holidays": len(self._holidays),
            "total_days": total_days,
            "business_days": business_days,
            "non_business_days": total_days - business_days,
            "business_ratio": round(business_days / total_days, 4),
        }
