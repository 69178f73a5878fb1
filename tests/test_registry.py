import threading
from datetime import date

import pytest
from structlog.testing import capture_logs

from holiday_calendars import (
    CalendarBuilder,
    CalendarRegistry,
    FixedDate,
    InvalidYearRange,
    SubstitutionPolicy,
    UnknownCalendarError,
    configure_calendars,
    get_calendar_config,
    get_default_registry,
    lookup,
    reset_default_registry,
)
from holiday_calendars.jurisdictions import BUILDERS


def test_codes() -> None:
    registry = CalendarRegistry(start_year=2015, end_year=2016)
    assert registry.codes() == ["CHZU", "EUTA", "FRPA", "GBLO", "JPTO", "NYFD", "NYSE", "USGS", "USNY"]


@pytest.mark.parametrize("alias, code", [
    ("LONDON", "GBLO"),
    ("sonia", "GBLO"),
    ("  Sonia   Index ", "GBLO"),
    ("TARGET", "EUTA"),
    ("€STR", "EUTA"),
    ("SOFR", "USGS"),
    ("XNYS", "NYSE"),
    ("tokyo", "JPTO"),
    ("gblo", "GBLO"),
])
def test_aliases_resolve(alias: str, code: str) -> None:
    registry = CalendarRegistry(start_year=2015, end_year=2016)
    assert registry.resolve(alias) == code
    assert alias in registry
    assert registry.lookup(alias) is registry.lookup(code)


def test_unknown_code_raises() -> None:
    registry = CalendarRegistry(start_year=2015, end_year=2016)
    with pytest.raises(UnknownCalendarError):
        registry.lookup("XXXX")
    assert "XXXX" not in registry


def test_lookup_is_memoized_and_logged() -> None:
    registry = CalendarRegistry(start_year=2015, end_year=2016)
    with capture_logs() as logs:
        first = registry.lookup("GBLO")
        second = registry.lookup("GBLO")
    assert first is second
    registered = [e for e in logs if e["event"] == "calendar_registered"]
    assert len(registered) == 1
    assert registered[0]["calendar"] == "GBLO"


def test_first_year_clamps_start() -> None:
    registry = CalendarRegistry(start_year=1990, end_year=2000)
    assert registry.lookup("EUTA").start_year == 1997
    assert registry.lookup("GBLO").start_year == 1990


def test_invalid_range_raises() -> None:
    with pytest.raises(InvalidYearRange):
        CalendarRegistry(start_year=2000, end_year=1999)


def test_alias_to_unknown_code_raises() -> None:
    with pytest.raises(UnknownCalendarError):
        CalendarRegistry(builders={"GBLO": BUILDERS["GBLO"]}, aliases={"PARIS": "FRPA"})


def test_custom_builders() -> None:
    builder = CalendarBuilder(
        name="XMAS",
        rules=[(FixedDate(12, 25), SubstitutionPolicy.ROLL_TO_MONDAY)],
    )
    registry = CalendarRegistry(builders={"XMAS": builder}, aliases={"CHRISTMAS": "XMAS"},
                                start_year=2016, end_year=2016)
    cal = registry.lookup("christmas")
    assert cal.holiday_dates == (date(2016, 12, 26),)
    assert registry.codes() == ["XMAS"]
    assert registry.builder("XMAS") is builder


def test_concurrent_first_lookup_builds_once() -> None:
    registry = CalendarRegistry(start_year=2000, end_year=2030)
    results = []
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        results.append(registry.lookup("JPTO"))

    with capture_logs() as logs:
        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    assert len(results) == 8
    assert all(r is results[0] for r in results)
    assert len([e for e in logs if e["event"] == "calendar_registered"]) == 1


# ============================================================
# Default registry and configuration
# ============================================================
def test_default_registry_uses_configuration() -> None:
    configure_calendars(start_year=2000, end_year=2010, max_lookahead_days=5)
    cal = lookup("GBLO")
    assert (cal.start_year, cal.end_year) == (2000, 2010)
    assert cal.max_lookahead_days == 5
    assert CalendarRegistry.default() is get_default_registry()


def test_reset_default_registry_rebuilds() -> None:
    first = lookup("USGS")
    configure_calendars(start_year=2010, end_year=2012)
    # built calendars keep the settings they were built with
    assert lookup("USGS") is first
    reset_default_registry()
    assert lookup("USGS").start_year == 2010


def test_configure_validation() -> None:
    with pytest.raises(InvalidYearRange):
        configure_calendars(start_year=2050, end_year=2040)
    with pytest.raises(ValueError):
        configure_calendars(max_lookahead_days=0)
    # failed calls leave the configuration untouched
    assert get_calendar_config().start_year == 1950
    assert get_calendar_config().end_year == 2099
