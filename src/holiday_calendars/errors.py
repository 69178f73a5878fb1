class CalendarError(Exception):
    pass


class InvalidYearRange(CalendarError):
    """Raised when a year range, window or combination has end < start."""


class RuleApplicationError(CalendarError):
    """Raised when a holiday rule yields a date outside its month or year."""


class QueryOutOfRange(CalendarError):
    """Raised when a query (or its answer) falls outside the generated years."""


class LookAheadExceeded(CalendarError):
    """Raised when business-day stepping runs past the configured bound."""


class UnknownCalendarError(CalendarError):
    pass
