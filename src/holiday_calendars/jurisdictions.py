"""
Holiday rule sets of the supported jurisdictions.

Each ``*_BUILDER`` below is pure data: an ordered list of (rule, policy) pairs
handed to a CalendarBuilder. Codes follow the usual market identifiers
(GBLO London, FRPA Paris, CHZU Zurich, EUTA TARGET, USGS US government
securities, USNY New York state, NYFD New York Fed, NYSE New York Stock
Exchange, JPTO Tokyo).
"""
import datetime as dt
from calendar import MONDAY, THURSDAY, SUNDAY
from typing import Dict, List

from .builder import CalendarBuilder, RuleEntry
from .policies import SubstitutionPolicy
from .rules import (
    ALWAYS,
    LAST,
    EasterOffset,
    ExplicitOverride,
    FixedDate,
    NthWeekdayOfMonth,
    YearWindow,
    between,
    only,
    since,
    until,
)

NONE = SubstitutionPolicy.NONE
TO_MONDAY = SubstitutionPolicy.ROLL_TO_MONDAY
FRIDAY_MONDAY = SubstitutionPolicy.ROLL_FRIDAY_MONDAY
SUNDAY_TO_MONDAY = SubstitutionPolicy.ROLL_SUNDAY_TO_MONDAY
TWO_DAYS = SubstitutionPolicy.ROLL_TWO_DAYS


def _d(iso: str) -> dt.date:
    return dt.date.fromisoformat(iso)


def _overrides(label: str, *isos: str) -> List[RuleEntry]:
    """
    Split one-off dates into as many overrides as needed, at most one date per year each.
    """
    by_round: List[List[dt.date]] = []
    seen: Dict[int, int] = {}
    for iso in isos:
        d = _d(iso)
        k = seen.get(d.year, 0)
        seen[d.year] = k + 1
        if k == len(by_round):
            by_round.append([])
        by_round[k].append(d)
    return [(ExplicitOverride.of(*dates, label=label), NONE) for dates in by_round]


# =========================
# London
# =========================
GBLO_BUILDER = CalendarBuilder(
    name="GBLO",
    rules=[
        (FixedDate(1, 1, since(1974), "New Year's Day"), TO_MONDAY),
        (EasterOffset(-2, label="Good Friday"), NONE),
        (EasterOffset(1, label="Easter Monday"), NONE),
        (NthWeekdayOfMonth(5, MONDAY, 1, since(1978).excluding(1995, 2020), "Early May Bank Holiday"), NONE),
        *_overrides("VE Day", "1995-05-08", "2020-05-08"),
        (EasterOffset(50, until(1964), "Whit Monday"), NONE),
        *_overrides(
            "Whitsun Bank Holiday",
            "1965-06-07", "1966-05-30", "1967-05-29", "1968-06-03", "1969-05-26", "1970-05-25",
        ),
        (NthWeekdayOfMonth(5, MONDAY, LAST, since(1971).excluding(2002, 2012, 2022), "Spring Bank Holiday"), NONE),
        *_overrides("Spring Bank Holiday", "2002-06-04", "2012-06-04", "2022-06-02"),
        *_overrides("Jubilee", "1977-06-07", "2002-06-03", "2012-06-05", "2022-06-03"),
        (NthWeekdayOfMonth(8, MONDAY, 1, until(1964), "Summer Bank Holiday"), NONE),
        *_overrides(
            "Summer Bank Holiday",
            "1965-08-30", "1966-08-29", "1967-08-28", "1968-09-02", "1969-09-01", "1970-08-31",
        ),
        (NthWeekdayOfMonth(8, MONDAY, LAST, since(1971), "Summer Bank Holiday"), NONE),
        (FixedDate(12, 25, label="Christmas Day"), TWO_DAYS),
        (FixedDate(12, 26, label="Boxing Day"), TWO_DAYS),
        *_overrides(
            "Special Bank Holiday",
            "1973-11-14", "1981-07-29", "1999-12-31", "2011-04-29", "2022-09-19", "2023-05-08",
        ),
    ],
)

# =========================
# Paris (no weekend substitution)
# =========================
FRPA_BUILDER = CalendarBuilder(
    name="FRPA",
    rules=[
        (FixedDate(1, 1, label="Jour de l'an"), NONE),
        (EasterOffset(1, label="Lundi de Pâques"), NONE),
        (FixedDate(5, 1, label="Fête du Travail"), NONE),
        (FixedDate(5, 8, label="Victoire 1945"), NONE),
        (EasterOffset(39, label="Ascension"), NONE),
        # Journée de solidarité replaced Whit Monday in 2005-2007
        (EasterOffset(50, ALWAYS.excluding(2005, 2006, 2007), "Lundi de Pentecôte"), NONE),
        (FixedDate(7, 14, label="Fête nationale"), NONE),
        (FixedDate(8, 15, label="Assomption"), NONE),
        (FixedDate(11, 1, label="Toussaint"), NONE),
        (FixedDate(11, 11, label="Armistice"), NONE),
        (FixedDate(12, 25, label="Noël"), NONE),
    ],
)

# =========================
# Zurich
# =========================
CHZU_BUILDER = CalendarBuilder(
    name="CHZU",
    rules=[
        (FixedDate(1, 1, label="Neujahrstag"), NONE),
        (FixedDate(1, 2, label="Berchtoldstag"), NONE),
        (EasterOffset(-2, label="Karfreitag"), NONE),
        (EasterOffset(1, label="Ostermontag"), NONE),
        (FixedDate(5, 1, label="Tag der Arbeit"), NONE),
        (EasterOffset(39, label="Auffahrt"), NONE),
        (EasterOffset(50, label="Pfingstmontag"), NONE),
        (FixedDate(8, 1, label="Nationalfeiertag"), NONE),
        (FixedDate(12, 25, label="Weihnachtstag"), NONE),
        (FixedDate(12, 26, label="Stephanstag"), NONE),
    ],
)

# =========================
# TARGET (euro settlement), from 1997
# =========================
EUTA_BUILDER = CalendarBuilder(
    name="EUTA",
    first_year=1997,
    rules=[
        (FixedDate(1, 1, label="New Year's Day"), NONE),
        (EasterOffset(-2, since(2000), "Good Friday"), NONE),
        (EasterOffset(1, since(2000), "Easter Monday"), NONE),
        (FixedDate(5, 1, since(2000), "Labour Day"), NONE),
        (FixedDate(12, 25, label="Christmas Day"), NONE),
        (FixedDate(12, 26, since(2000), "Christmas Holiday"), NONE),
        *_overrides("Year-end closing", "1999-12-31", "2001-12-31"),
    ],
)


# =========================
# United States
# =========================
def _us_rules(bump_back: bool, columbus_veterans: bool, mlk_since: int) -> List[RuleEntry]:
    """
    Federal holidays shared by the US calendars.

    Parameters
    ----------
    bump_back: bool
        Whether a Saturday holiday is observed on the preceding Friday (markets)
        rather than kept (New York state offices).
    columbus_veterans: bool
        Whether Columbus Day and Veterans Day are holidays.
    mlk_since: int
        First year Martin Luther King Jr. Day is observed.
    """
    observed = FRIDAY_MONDAY if bump_back else SUNDAY_TO_MONDAY
    rules: List[RuleEntry] = [
        (FixedDate(1, 1, label="New Year's Day"), observed),
        (NthWeekdayOfMonth(1, MONDAY, 3, since(mlk_since), "Martin Luther King Jr. Day"), NONE),
        (FixedDate(2, 22, until(1970), "Washington's Birthday"), SUNDAY_TO_MONDAY),
        (NthWeekdayOfMonth(2, MONDAY, 3, since(1971), "Washington's Birthday"), NONE),
        (FixedDate(5, 30, until(1970), "Memorial Day"), SUNDAY_TO_MONDAY),
        (NthWeekdayOfMonth(5, MONDAY, LAST, since(1971), "Memorial Day"), NONE),
        (FixedDate(6, 19, since(2022), "Juneteenth"), observed),
        (FixedDate(7, 4, label="Independence Day"), observed),
        (NthWeekdayOfMonth(9, MONDAY, 1, label="Labor Day"), NONE),
    ]
    if columbus_veterans:
        rules += [
            (FixedDate(10, 12, until(1970), "Columbus Day"), SUNDAY_TO_MONDAY),
            (NthWeekdayOfMonth(10, MONDAY, 2, since(1971), "Columbus Day"), NONE),
            (NthWeekdayOfMonth(10, MONDAY, 4, between(1971, 1977), "Veterans Day"), NONE),
            (FixedDate(11, 11, ALWAYS.excluding(*range(1971, 1978)), "Veterans Day"), SUNDAY_TO_MONDAY),
        ]
    rules += [
        (NthWeekdayOfMonth(11, THURSDAY, 4, label="Thanksgiving Day"), NONE),
        (FixedDate(12, 25, label="Christmas Day"), observed),
    ]
    return rules


USGS_BUILDER = CalendarBuilder(
    name="USGS",
    rules=[
        *_us_rules(bump_back=True, columbus_veterans=True, mlk_since=1986),
        (EasterOffset(-2, label="Good Friday"), NONE),
        *_overrides("Market closure", "2012-10-30", "2018-12-05"),
    ],
)

USNY_BUILDER = CalendarBuilder(
    name="USNY",
    rules=_us_rules(bump_back=False, columbus_veterans=True, mlk_since=1986),
)

NYFD_BUILDER = CalendarBuilder(
    name="NYFD",
    rules=_us_rules(bump_back=False, columbus_veterans=True, mlk_since=1986),
)

NYSE_BUILDER = CalendarBuilder(
    name="NYSE",
    rules=[
        *_us_rules(bump_back=True, columbus_veterans=False, mlk_since=1998),
        (EasterOffset(-2, label="Good Friday"), NONE),
        *_overrides(
            "Exchange closure",
            "1994-04-27",
            "2001-09-11", "2001-09-12", "2001-09-13", "2001-09-14",
            "2004-06-11", "2007-01-02", "2018-12-05", "2025-01-09",
        ),
    ],
)


# =========================
# Tokyo
# =========================
SUBSTITUTES_START = dt.date(1973, 4, 12)


def _jp_fixed(month: int, day: int, window: YearWindow = ALWAYS, label: str = "") -> List[RuleEntry]:
    """
    A fixed-date holiday moved from Sunday to Monday only once substitute holidays exist.

    Substitute holidays started on 12 April 1973, so a holiday earlier in the
    year is first substituted in 1974.
    """
    first = SUBSTITUTES_START.year
    if (month, day) < (SUBSTITUTES_START.month, SUBSTITUTES_START.day):
        first += 1
    halves = ((window.clipped(end=first - 1), NONE), (window.clipped(start=first), SUNDAY_TO_MONDAY))
    return [(FixedDate(month, day, w, label), policy) for w, policy in halves if w is not None]


def _equinox_day(year: int, base_1980: float, base_pre_1980: float) -> int:
    if year >= 1980:
        return int(base_1980 + 0.242194 * (year - 1980) - int((year - 1980) / 4))
    return int(base_pre_1980 + 0.242194 * (year - 1980) - int((year - 1983) / 4))


def _equinox_rules(month: int, base_1980: float, base_pre_1980: float, label: str) -> List[RuleEntry]:
    """One fixed-date rule per day of the month the equinox falls on, restricted to its years."""
    years_by_day: Dict[int, List[int]] = {}
    for y in range(1949, 2100):
        years_by_day.setdefault(_equinox_day(y, base_1980, base_pre_1980), []).append(y)
    return [
        entry
        for day, years in sorted(years_by_day.items())
        for entry in _jp_fixed(month, day, only(years), label)
    ]


def _golden_week_substitutes() -> List[str]:
    # From 2007 a Sunday 3 or 4 May is substituted after the whole run, on 6 May
    return [
        f"{y}-05-06" for y in range(2007, 2100)
        if SUNDAY in (dt.date(y, 5, 3).weekday(), dt.date(y, 5, 4).weekday())
    ]


def _citizens_holidays() -> List[str]:
    # A day sandwiched between Respect for the Aged Day and the autumn equinox
    out = []
    for y in range(2003, 2100):
        aged = NthWeekdayOfMonth(9, MONDAY, 3).apply(y)
        if _equinox_day(y, 23.2488, 23.2588) - aged.day == 2:
            out.append((aged + dt.timedelta(days=1)).isoformat())
    return out


OLYMPICS = (2020, 2021)

JPTO_BUILDER = CalendarBuilder(
    name="JPTO",
    rules=[
        (FixedDate(1, 1, label="New Year's Day"), NONE),
        (FixedDate(1, 2, label="Bank Holiday"), NONE),
        (FixedDate(1, 3, label="Bank Holiday"), NONE),
        *_jp_fixed(1, 15, until(1999), "Coming of Age Day"),
        (NthWeekdayOfMonth(1, MONDAY, 2, since(2000), "Coming of Age Day"), NONE),
        *_jp_fixed(2, 11, since(1967), "National Foundation Day"),
        *_jp_fixed(2, 23, since(2020), "Emperor's Birthday"),
        *_equinox_rules(3, 20.8431, 20.8357, "Vernal Equinox Day"),
        *_jp_fixed(4, 29, label="Showa Day"),
        *_jp_fixed(5, 3, label="Constitution Memorial Day"),
        *_jp_fixed(5, 4, since(1986), "Greenery Day"),
        *_jp_fixed(5, 5, label="Children's Day"),
        *_overrides("Substitute Holiday", *_golden_week_substitutes()),
        *_jp_fixed(7, 20, between(1996, 2002), "Marine Day"),
        (NthWeekdayOfMonth(7, MONDAY, 3, since(2003).excluding(*OLYMPICS), "Marine Day"), NONE),
        *_jp_fixed(8, 11, since(2016).excluding(*OLYMPICS), "Mountain Day"),
        *_jp_fixed(9, 15, between(1966, 2002), "Respect for the Aged Day"),
        (NthWeekdayOfMonth(9, MONDAY, 3, since(2003), "Respect for the Aged Day"), NONE),
        *_overrides("Citizens' Holiday", *_citizens_holidays()),
        *_equinox_rules(9, 23.2488, 23.2588, "Autumnal Equinox Day"),
        *_jp_fixed(10, 10, between(1966, 1999), "Sports Day"),
        (NthWeekdayOfMonth(10, MONDAY, 2, since(2000).excluding(*OLYMPICS), "Sports Day"), NONE),
        *_jp_fixed(11, 3, label="Culture Day"),
        *_jp_fixed(11, 23, label="Labour Thanksgiving Day"),
        *_jp_fixed(12, 23, between(1989, 2018), "Emperor's Birthday"),
        (FixedDate(12, 31, label="Bank Holiday"), NONE),
        *_overrides("Olympic Games", "2020-07-23", "2020-07-24", "2020-08-10",
                    "2021-07-22", "2021-07-23", "2021-08-09"),
        *_overrides("Imperial Succession", "2019-04-30", "2019-05-01", "2019-05-02", "2019-10-22"),
        *_overrides("Imperial Ceremony", "1959-04-10", "1989-02-24", "1990-11-12", "1993-06-09"),
    ],
)


# =========================
# Codes and aliases
# =========================
BUILDERS: Dict[str, CalendarBuilder] = {
    b.name: b for b in (
        GBLO_BUILDER, FRPA_BUILDER, CHZU_BUILDER, EUTA_BUILDER,
        USGS_BUILDER, USNY_BUILDER, NYFD_BUILDER, NYSE_BUILDER, JPTO_BUILDER,
    )
}

CALENDAR_ALIASES: Dict[str, str] = {
    # London
    "LONDON": "GBLO",
    "GB": "GBLO",
    "UK": "GBLO",
    "SONIA": "GBLO",
    "SONIA INDEX": "GBLO",
    "SONIO/N INDEX": "GBLO",

    # Paris
    "PARIS": "FRPA",
    "FR": "FRPA",

    # Zurich
    "ZURICH": "CHZU",
    "CH": "CHZU",
    "SARON": "CHZU",

    # TARGET
    "TARGET": "EUTA",
    "TARGET2": "EUTA",
    "EUR": "EUTA",
    "ESTR": "EUTA",
    "ESTER": "EUTA",
    "€STR": "EUTA",
    "ESTR INDEX": "EUTA",
    "ESTRON INDEX": "EUTA",

    # US
    "SOFR": "USGS",
    "SOFR INDEX": "USGS",
    "SOFRRATE INDEX": "USGS",
    "US_GOVIES": "USGS",
    "SIFMA": "USGS",
    "NEW_YORK": "USNY",
    "FED": "NYFD",
    "FRBNY": "NYFD",
    "XNYS": "NYSE",

    # Tokyo
    "TOKYO": "JPTO",
    "JP": "JPTO",
    "XTKS": "JPTO",
    "TONA": "JPTO",
}
