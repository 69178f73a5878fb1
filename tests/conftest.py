import pytest

from holiday_calendars import CalendarRegistry, reset_calendar_config, reset_default_registry


@pytest.fixture(autouse=True)
def _fresh_settings():
    # Configuration and the default registry are process-wide
    reset_calendar_config()
    reset_default_registry()
    yield
    reset_calendar_config()
    reset_default_registry()


@pytest.fixture(scope="session")
def registry() -> CalendarRegistry:
    return CalendarRegistry(start_year=1950, end_year=2099)
