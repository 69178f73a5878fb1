"""
Command line interface to look at holiday calendars.

Month and year grids follow the layout of the trading_calendars ``tcal`` tool:
business days as plain numbers, weekends and holidays in brackets.
"""

import sys
from calendar import monthrange
from datetime import date
from typing import List, Optional

import click

from .calendar import HolidayCalendar
from .errors import CalendarError
from .logging import configure_logging
from .registry import get_default_registry
from .utils import _to_date


MONTHS = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
]

WEEKDAYS = ['Mo', 'Tu', 'We', 'Th', 'Fr', 'Sa', 'Su']

COLUMN_WIDTH = 28


def render_month(calendar: HolidayCalendar, year: int, month: int, print_year: bool = False) -> str:
    """
    Render one month as a Monday-first grid, each day 4 characters wide.

    Args:
        calendar: Calendar deciding which days are bracketed
        year: Year to render
        month: Month to render (1-12)
        print_year: Whether to include the year in the title

    Returns:
        The month grid, one line per week
    """
    title = MONTHS[month - 1] + (f' {year}' if print_year else '')
    lines = [f'{title:^{COLUMN_WIDTH}}'.rstrip(), ''.join(f' {wd} ' for wd in WEEKDAYS).rstrip()]

    week = ' ' * (4 * date(year, month, 1).weekday())
    for day in range(1, monthrange(year, month)[1] + 1):
        d = date(year, month, day)
        week += f' {day:2} ' if calendar.is_business_day(d) else f'[{day:2}]'
        if d.weekday() == 6:
            lines.append(week.rstrip())
            week = ''
    if week:
        lines.append(week.rstrip())

    return '\n'.join(lines)


def concat_months(month_strings: List[str], width: int = COLUMN_WIDTH) -> str:
    """
    Put month grids side by side, padding shorter months with blank lines.
    """
    columns = [s.splitlines() for s in month_strings]
    height = max(len(col) for col in columns)
    for col in columns:
        col.extend([''] * (height - len(col)))

    rows = ('   '.join(part.ljust(width) for part in parts) for parts in zip(*columns))
    return '\n'.join(row.rstrip() for row in rows)


def render_year(calendar: HolidayCalendar, year: int) -> str:
    """
    Render a full year, three months per row.
    """
    quarters = [
        concat_months([render_month(calendar, year, q * 3 + m + 1) for m in range(3)])
        for q in range(4)
    ]
    return f'{year:^88}'.rstrip() + '\n' + '\n\n'.join(quarters)


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group()
@click.option('--log-level', default='WARNING', show_default=True,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Log level of the calendar events')
@click.option('--json-logs', is_flag=True, help='Emit log events as JSON')
def main(log_level: str, json_logs: bool):
    """
    Holiday calendars of financial centres.

    Examples:

        # Show the London calendar for 2015
        holical show GBLO 2015

        # Show December 2015 for London and Tokyo combined
        holical show GBLO 2015 12 -c JPTO

        # List the US government securities holidays of 2012
        holical holidays USGS 2012

        # Move 5 business days from a date on TARGET
        holical shift TARGET 2015-12-23 5
    """
    configure_logging(level=log_level, json_output=json_logs)


@main.command()
@click.argument('code')
@click.argument('year', type=int, required=False)
@click.argument('month', type=click.IntRange(1, 12), required=False)
@click.option('-c', '--combine', multiple=True,
              help='Other calendar code; a day is shown as business day only if it is one in every calendar')
def show(code: str, year: Optional[int], month: Optional[int], combine: tuple):
    """
    Display a month or a year of CODE.

    Business days are shown as regular numbers.
    Holidays/weekends are shown in brackets [like this].
    """
    if year is None:
        year = date.today().year

    registry = get_default_registry()
    try:
        calendar = registry.lookup(code)
        for other in combine:
            calendar = calendar.combined_with(registry.lookup(other))

        if month is not None:
            output = render_month(calendar, year, month, print_year=True)
        else:
            output = render_year(calendar, year)
    except CalendarError as e:
        _fail(e)

    click.echo(output)


@main.command()
@click.argument('code')
@click.argument('year', type=int)
def holidays(code: str, year: int):
    """List the holidays of CODE in YEAR with their names."""
    registry = get_default_registry()
    try:
        builder = registry.builder(code)
        if builder.first_year is not None and year < builder.first_year:
            raise CalendarError(f"{builder.name} starts in {builder.first_year}")
        entries = builder.generate(year, year)
    except (CalendarError, ValueError) as e:
        _fail(e)

    for h in sorted(entries, key=lambda h: h.date):
        line = f"{h.date.isoformat()}  {h.date:%a}  {h.label}"
        if h.substituted:
            line += f" (for {h.candidate.isoformat()})"
        click.echo(line)


@main.command(context_settings={'ignore_unknown_options': True})
@click.argument('code')
@click.argument('day')
@click.argument('n', type=int)
@click.option('--dayfirst', is_flag=True, help='Read DAY as day/month/year when the year comes last')
def shift(code: str, day: str, n: int, dayfirst: bool):
    """Move N business days (negative for backwards) from DAY on CODE."""
    try:
        start = _to_date(day, dayfirst=dayfirst)
        result = get_default_registry().lookup(code).shift_business_days(start, n)
    except (CalendarError, ValueError) as e:
        _fail(e)

    click.echo(result.isoformat())


@main.command()
def codes():
    """List the calendar codes and their aliases."""
    registry = get_default_registry()
    by_code = {}
    for alias, code in sorted(registry.aliases().items()):
        by_code.setdefault(code, []).append(alias)

    for code in registry.codes():
        aliases = ', '.join(by_code.get(code, []))
        click.echo(f"{code:<6}{aliases}".rstrip())


if __name__ == '__main__':
    main()
