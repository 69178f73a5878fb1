import datetime as dt
from calendar import SATURDAY, SUNDAY
from dataclasses import dataclass, field
from typing import FrozenSet, List, NamedTuple, Optional, Tuple

from .calendar import HolidayCalendar
from .errors import InvalidYearRange
from .logging import get_logger, timed_block
from .policies import SubstitutionPolicy
from .rules import HolidayRule

logger = get_logger(__name__)

RuleEntry = Tuple[HolidayRule, SubstitutionPolicy]


class GeneratedHoliday(NamedTuple):
    """An observed holiday together with the rule candidate it came from."""
    date: dt.date
    label: str
    candidate: dt.date

    @property
    def substituted(self) -> bool:
        return self.date != self.candidate


@dataclass(frozen=True)
class CalendarBuilder:
    """
    Ordered holiday rules of one jurisdiction, each paired with the policy used
    when its candidate date falls on a weekend day.

    Attributes
    ----------
    name: str
        The calendar code, e.g. "GBLO".
    rules: Tuple[RuleEntry, ...]
        (rule, policy) pairs, evaluated in order for every year.
    weekend_days: FrozenSet[int]
        Weekday numbers that are never business days.
    first_year: Optional[int]
        Earliest year in which the jurisdiction exists, if any.
    """
    name: str
    rules: Tuple[RuleEntry, ...]
    weekend_days: FrozenSet[int] = field(default=frozenset({SATURDAY, SUNDAY}))
    first_year: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(self, "weekend_days", frozenset(self.weekend_days))

    def generate(self, start_year: int, end_year: int) -> List[GeneratedHoliday]:
        """
        Evaluate every rule for every year of [start_year, end_year].

        Substitution is applied to substitutable candidates falling on a weekend
        day. A substituted date leaving the candidate's year is dropped, so that
        holiday is not observed that year.

        Returns
        -------
        List[GeneratedHoliday]
            Observed holidays in evaluation order (year, then rule order). Entries
            may share a date when two rules collide.
        """
        if end_year < start_year:
            raise InvalidYearRange(f"end_year {end_year} is before start_year {start_year}")

        out: List[GeneratedHoliday] = []
        for year in range(start_year, end_year + 1):
            for rule, policy in self.rules:
                candidate = rule.apply(year)
                if candidate is None:
                    continue
                observed = candidate
                if rule.substitutable and candidate.weekday() in self.weekend_days:
                    observed = policy.substitute(candidate)
                    if observed.year != year:
                        logger.debug(
                            "substitution_dropped",
                            calendar=self.name,
                            label=rule.label,
                            candidate=candidate.isoformat(),
                            substituted=observed.isoformat(),
                        )
                        continue
                out.append(GeneratedHoliday(observed, rule.label, candidate))
        return out

    def build(self, start_year: int, end_year: int, **calendar_kwargs) -> HolidayCalendar:
        """
        Build the immutable calendar of this jurisdiction over [start_year, end_year].

        Parameters
        ----------
        start_year: int
            First year to generate.
        end_year: int
            Last year to generate (inclusive).
        **calendar_kwargs
            Passed to HolidayCalendar (max_lookahead_days, date_type, str_sep).

        Returns
        -------
        HolidayCalendar
        """
        with timed_block(logger, "calendar_built", calendar=self.name,
                         start_year=start_year, end_year=end_year) as fields:
            holidays = {h.date for h in self.generate(start_year, end_year)}
            cal = HolidayCalendar(
                holidays,
                start_year,
                end_year,
                weekend_days=self.weekend_days,
                name=self.name,
                **calendar_kwargs,
            )
            fields["holidays"] = len(cal.holiday_dates)
        return cal
