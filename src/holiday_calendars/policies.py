import datetime as dt
from calendar import SATURDAY, SUNDAY
from enum import Enum


class SubstitutionPolicy(Enum):
    """
    How a holiday falling on Saturday or Sunday is observed.

    Policies are attached to individual rules rather than to a calendar, as one
    jurisdiction often mixes holidays that are re-observed with holidays that are not.

        - NONE: the date is kept, and simply coincides with the weekend.
        - ROLL_TO_MONDAY: Saturday or Sunday moves to the following Monday.
        - ROLL_FRIDAY_MONDAY: Saturday moves to the preceding Friday, Sunday to the following Monday.
        - ROLL_SUNDAY_TO_MONDAY: Sunday moves to the following Monday, Saturday is kept.
        - ROLL_TWO_DAYS: Saturday or Sunday moves two days later, so that a pair of
          consecutive holidays (UK Christmas Day and Boxing Day) stays a pair.
    """
    NONE = "none"
    ROLL_TO_MONDAY = "roll_to_monday"
    ROLL_FRIDAY_MONDAY = "roll_friday_monday"
    ROLL_SUNDAY_TO_MONDAY = "roll_sunday_to_monday"
    ROLL_TWO_DAYS = "roll_two_days"

    def substitute(self, day: dt.date) -> dt.date:
        """
        Return the observed date for a candidate holiday.

        Parameters
        ----------
        day: dt.date
            The candidate date produced by a rule.

        Returns
        -------
        dt.date
            The candidate itself if it is a weekday or the policy keeps it, otherwise the shifted date.
        """
        wd = day.weekday()
        if wd not in (SATURDAY, SUNDAY) or self is SubstitutionPolicy.NONE:
            return day
        return day + dt.timedelta(days=_SHIFTS[self][wd - SATURDAY])


# (Saturday shift, Sunday shift) in days
_SHIFTS = {
    SubstitutionPolicy.ROLL_TO_MONDAY: (2, 1),
    SubstitutionPolicy.ROLL_FRIDAY_MONDAY: (-1, 1),
    SubstitutionPolicy.ROLL_SUNDAY_TO_MONDAY: (0, 1),
    SubstitutionPolicy.ROLL_TWO_DAYS: (2, 2),
}
