from datetime import date, datetime, timedelta

import numpy as np
import pytest
from structlog.testing import capture_logs

from holiday_calendars import (
    CalendarError,
    CalendarRegistry,
    HolidayCalendar,
    InvalidYearRange,
    LookAheadExceeded,
    QueryOutOfRange,
    configure_calendars,
)

# A small London-like calendar for 2015-2016
HOLIDAYS = [
    date(2015, 1, 1), date(2015, 4, 3), date(2015, 4, 6), date(2015, 5, 4), date(2015, 5, 25),
    date(2015, 8, 31), date(2015, 12, 25), date(2015, 12, 28),
    date(2016, 1, 1), date(2016, 3, 25), date(2016, 3, 28), date(2016, 5, 2), date(2016, 5, 30),
    date(2016, 8, 29), date(2016, 12, 26), date(2016, 12, 27),
]


@pytest.fixture
def cal() -> HolidayCalendar:
    return HolidayCalendar(HOLIDAYS, 2015, 2016, name="LDN")


def _days(start: date, end: date):
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


# ============================================================
# 1) Basic predicates
# ============================================================
def test_weekends_and_holidays_are_off(cal: HolidayCalendar) -> None:
    assert cal.is_holiday(date(2015, 12, 25))       # Friday holiday
    assert cal.is_holiday(date(2015, 12, 26))       # Saturday
    assert cal.is_holiday(date(2015, 12, 27))       # Sunday
    assert cal.is_business_day(date(2015, 12, 29))
    assert cal.is_weekend(date(2015, 12, 26))
    assert not cal.is_weekend(date(2015, 12, 25))


def test_business_day_is_negation_of_holiday(cal: HolidayCalendar) -> None:
    for d in _days(date(2015, 1, 1), date(2016, 12, 31)):
        assert cal.is_business_day(d) is (not cal.is_holiday(d))


def test_accepts_date_like_inputs(cal: HolidayCalendar) -> None:
    assert cal.is_holiday("2015-12-25")
    assert cal.is_holiday("12/25/2015")
    assert cal.is_holiday(datetime(2015, 12, 25, 17, 30))
    assert cal.is_holiday(np.datetime64("2015-12-25"))


def test_queries_outside_range_raise(cal: HolidayCalendar) -> None:
    for query in (cal.is_holiday, cal.is_business_day, cal.next_or_same_business_day):
        with pytest.raises(QueryOutOfRange):
            query(date(2014, 12, 31))
        with pytest.raises(QueryOutOfRange):
            query(date(2017, 1, 1))
    assert cal.covers(date(2016, 12, 31))
    assert not cal.covers(date(2017, 1, 1))


def test_holiday_dates_are_sorted_and_unique() -> None:
    cal = HolidayCalendar([date(2015, 5, 1), date(2015, 1, 1), date(2015, 5, 1)], 2015, 2015)
    assert cal.holiday_dates == (date(2015, 1, 1), date(2015, 5, 1))


def test_holiday_outside_range_rejected() -> None:
    with pytest.raises(QueryOutOfRange):
        HolidayCalendar([date(2014, 12, 25)], 2015, 2015)


def test_invalid_construction() -> None:
    with pytest.raises(InvalidYearRange):
        HolidayCalendar([], 2016, 2015)
    with pytest.raises(ValueError):
        HolidayCalendar([], 2015, 2015, weekend_days=range(7))
    with pytest.raises(ValueError):
        HolidayCalendar([], 2015, 2015, weekend_days=[7])


# ============================================================
# 2) Business day searches
# ============================================================
def test_next_or_same(cal: HolidayCalendar) -> None:
    assert cal.next_or_same_business_day(date(2015, 12, 29)) == date(2015, 12, 29)
    assert cal.next_or_same_business_day(date(2015, 12, 25)) == date(2015, 12, 29)
    assert cal.previous_or_same_business_day(date(2015, 12, 28)) == date(2015, 12, 24)
    assert cal.previous_or_same_business_day(date(2015, 12, 24)) == date(2015, 12, 24)


def test_next_or_same_properties(cal: HolidayCalendar) -> None:
    previous = None
    for d in _days(date(2015, 1, 1), date(2016, 12, 28)):
        n = cal.next_or_same_business_day(d)
        assert n >= d
        assert cal.is_business_day(n)
        # idempotent
        assert cal.next_or_same_business_day(n) == n
        # monotonic
        if previous is not None:
            assert n >= previous
        previous = n


def test_search_walking_off_range_raises() -> None:
    # Dec 31 2016 is a Saturday: nothing after it in range
    cal = HolidayCalendar([], 2016, 2016)
    with pytest.raises(QueryOutOfRange):
        cal.next_or_same_business_day(date(2016, 12, 31))
    # Jan 1 2016 is a Friday holiday followed by a weekend
    cal = HolidayCalendar([date(2016, 1, 1)], 2016, 2016)
    with pytest.raises(QueryOutOfRange):
        cal.previous_or_same_business_day(date(2016, 1, 3))


def test_lookahead_exceeded() -> None:
    # Three weeks of holidays in the middle of the year
    closed = [date(2015, 7, 1) + timedelta(days=i) for i in range(21)]
    cal = HolidayCalendar(closed, 2015, 2015, name="LONGCLOSE")
    with capture_logs() as logs:
        with pytest.raises(LookAheadExceeded):
            cal.next_or_same_business_day(date(2015, 7, 1))
    assert any(e["event"] == "lookahead_exceeded" for e in logs)
    with pytest.raises(LookAheadExceeded):
        cal.previous_or_same_business_day(date(2015, 7, 21))
    with pytest.raises(LookAheadExceeded):
        cal.shift_business_days(date(2015, 6, 30), 1)

    assert HolidayCalendar(closed, 2015, 2015, max_lookahead_days=30).next_or_same_business_day(
        date(2015, 7, 1)) == date(2015, 7, 22)


def test_lookahead_default_comes_from_config() -> None:
    configure_calendars(max_lookahead_days=3)
    cal = HolidayCalendar([date(2015, 12, 25), date(2015, 12, 28)], 2015, 2015)
    assert cal.max_lookahead_days == 3
    # Friday holiday, weekend, Monday holiday: Tuesday is 4 days away
    with pytest.raises(LookAheadExceeded):
        cal.next_or_same_business_day(date(2015, 12, 25))


@pytest.mark.parametrize("bound, reachable", [(3, False), (4, True)])
def test_searches_and_shifts_agree_on_the_bound(bound: int, reachable: bool) -> None:
    # Four non-business days in a row, Dec 25 to Dec 28
    cal = HolidayCalendar([date(2015, 12, 25), date(2015, 12, 28)], 2015, 2015, max_lookahead_days=bound)
    queries = [
        lambda: cal.next_or_same_business_day(date(2015, 12, 25)) == date(2015, 12, 29),
        lambda: cal.previous_or_same_business_day(date(2015, 12, 28)) == date(2015, 12, 24),
        lambda: cal.shift_business_days(date(2015, 12, 24), 1) == date(2015, 12, 29),
        lambda: cal.shift_business_days(date(2015, 12, 29), -1) == date(2015, 12, 24),
        lambda: cal.shift_business_days(date(2015, 12, 25), 1) == date(2015, 12, 29),
    ]
    for query in queries:
        if reachable:
            assert query()
        else:
            with pytest.raises(LookAheadExceeded):
                query()


# ============================================================
# 3) Business day shifts
# ============================================================
@pytest.mark.parametrize("start, n, expected", [
    (date(2015, 12, 24), 1, date(2015, 12, 29)),
    (date(2015, 12, 24), 2, date(2015, 12, 30)),
    (date(2015, 12, 29), -1, date(2015, 12, 24)),
    (date(2015, 12, 25), 1, date(2015, 12, 29)),    # from a holiday
    (date(2015, 12, 27), -1, date(2015, 12, 24)),   # from a weekend
    (date(2015, 12, 29), 0, date(2015, 12, 29)),
    (date(2015, 1, 2), 252, date(2015, 12, 31)),    # first to last business day of 2015
])
def test_shift_business_days(cal: HolidayCalendar, start: date, n: int, expected: date) -> None:
    assert cal.shift_business_days(start, n) == expected


def test_shift_round_trip(cal: HolidayCalendar) -> None:
    for d in cal.business_days(date(2015, 3, 1), date(2016, 10, 31)):
        for n in (1, 3, 10, 40):
            assert cal.shift_business_days(cal.shift_business_days(d, n), -n) == d


CODES = ["CHZU", "EUTA", "FRPA", "GBLO", "JPTO", "NYFD", "NYSE", "USGS", "USNY"]


@pytest.mark.parametrize("code", CODES)
@pytest.mark.parametrize("year", [2001, 2019])
def test_shift_properties_on_registry_calendars(registry: CalendarRegistry, code: str, year: int) -> None:
    # 2001 has the NYSE September closure, 2019 the ten-day Tokyo Golden Week
    cal = registry.lookup(code)
    start, end = date(year, 1, 1), date(year, 12, 31)
    for d in cal.business_days(start, end):
        for n in (1, 5, 20):
            assert cal.shift_business_days(cal.shift_business_days(d, n), -n) == d
            assert cal.shift_business_days(cal.shift_business_days(d, -n), n) == d

    for n in (1, -1, 5, -5):
        previous = None
        for d in _days(start, end):
            shifted = cal.shift_business_days(d, n)
            assert cal.is_business_day(shifted)
            if previous is not None:
                assert shifted >= previous
            previous = shifted


def test_shift_zero_on_holiday_raises(cal: HolidayCalendar) -> None:
    with pytest.raises(CalendarError):
        cal.shift_business_days(date(2015, 12, 25), 0)


def test_shift_leaving_range_raises(cal: HolidayCalendar) -> None:
    with pytest.raises(QueryOutOfRange):
        cal.shift_business_days(date(2016, 12, 30), 1)
    with pytest.raises(QueryOutOfRange):
        cal.shift_business_days(date(2015, 1, 2), -1)


def test_next_and_previous_business_day(cal: HolidayCalendar) -> None:
    assert cal.next_business_day(date(2015, 12, 24)) == date(2015, 12, 29)
    assert cal.previous_business_day(date(2015, 12, 29)) == date(2015, 12, 24)
    assert cal.next_business_day(date(2015, 12, 29)) == date(2015, 12, 30)


# ============================================================
# 4) Listings and counts
# ============================================================
def test_business_and_non_business_days_partition_range(cal: HolidayCalendar) -> None:
    s, e = date(2015, 12, 20), date(2016, 1, 10)
    on = cal.business_days(s, e)
    off = cal.non_business_days(s, e)
    assert sorted(on + off) == list(_days(s, e))
    assert set(on).isdisjoint(off)
    assert date(2015, 12, 28) in off


@pytest.mark.parametrize("inclusive, expected", [
    ("left", 3),
    ("right", 3),
    ("both", 4),
    ("none", 2),
])
def test_business_days_between(cal: HolidayCalendar, inclusive: str, expected: int) -> None:
    # Business days: 12-24, 12-29, 12-30, 12-31
    assert cal.business_days_between(date(2015, 12, 24), date(2015, 12, 31), inclusive=inclusive) == expected


def test_business_days_between_validation(cal: HolidayCalendar) -> None:
    with pytest.raises(ValueError):
        cal.business_days_between(date(2015, 12, 31), date(2015, 12, 24))
    with pytest.raises(ValueError):
        cal.business_days_between(date(2015, 12, 24), date(2015, 12, 31), inclusive="all")


def test_summary(cal: HolidayCalendar) -> None:
    s = cal.summary()
    assert s["name"] == "LDN"
    assert s["total_days"] == 731
    assert s["holidays"] == len(HOLIDAYS)
    assert s["business_days"] + s["non_business_days"] == 731
    assert s["business_days"] == len(cal.business_days())


# ============================================================
# 5) Value semantics and combination
# ============================================================
def test_equality_ignores_name() -> None:
    a = HolidayCalendar(HOLIDAYS, 2015, 2016, name="A")
    b = HolidayCalendar(reversed(HOLIDAYS), 2015, 2016, name="B")
    assert a == b
    assert hash(a) == hash(b)
    assert a != HolidayCalendar(HOLIDAYS[:-1], 2015, 2016)
    assert a != HolidayCalendar(HOLIDAYS, 2015, 2016, weekend_days=(4, 5))


def test_calendar_arrays_are_read_only(cal: HolidayCalendar) -> None:
    with pytest.raises(ValueError):
        cal.business_mask[0] = True
    with pytest.raises(ValueError):
        cal.universe.days[0] = np.datetime64("2000-01-01")


def test_combined_with() -> None:
    a = HolidayCalendar([date(2015, 12, 25)], 2014, 2016, name="A")
    b = HolidayCalendar([date(2015, 12, 28)], 2015, 2017, name="B")
    c = a.combined_with(b)
    assert c.name == "A+B"
    assert (c.start_year, c.end_year) == (2015, 2016)
    assert c.holiday_dates == (date(2015, 12, 25), date(2015, 12, 28))
    for d in _days(date(2015, 1, 1), date(2016, 12, 31)):
        assert c.is_business_day(d) is (a.is_business_day(d) and b.is_business_day(d))


def test_combined_weekends_union() -> None:
    a = HolidayCalendar([], 2015, 2015)
    b = HolidayCalendar([], 2015, 2015, weekend_days=(4, 5))
    assert a.combined_with(b).weekend_days == frozenset({4, 5, 6})


def test_combined_disjoint_raises() -> None:
    with pytest.raises(InvalidYearRange):
        HolidayCalendar([], 2010, 2011).combined_with(HolidayCalendar([], 2012, 2013))


# ============================================================
# 6) Output types
# ============================================================
def test_output_types(cal: HolidayCalendar) -> None:
    d = date(2015, 12, 24)
    assert cal.with_date_type("str").next_business_day(d) == "2015-12-29"
    assert cal.with_date_type("str", str_sep="/").next_business_day(d) == "2015/12/29"
    assert cal.with_date_type("numpy").next_business_day(d) == np.datetime64("2015-12-29")
    assert cal.with_date_type("datetime").next_business_day(d) == datetime(2015, 12, 29)
    assert cal.with_date_type("str") == cal


def test_pandas_output() -> None:
    pd = pytest.importorskip("pandas")
    cal = HolidayCalendar(HOLIDAYS, 2015, 2016, date_type="pandas")
    assert cal.next_business_day("2015-12-24") == pd.Timestamp("2015-12-29")
    assert cal.is_holiday(pd.Timestamp("2015-12-28"))
