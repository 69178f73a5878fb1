import re
import numpy as np
import datetime as dt
from typing import Union, Literal, Any

PandasTimestamp = Any
DateLike = Union[dt.date, dt.datetime, str, np.datetime64, PandasTimestamp, Any]
OutputType = Literal["date", "numpy", "datetime", "str", "pandas"]

_ISO_RE = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})")


def _parse_date_str(s: str, dayfirst: bool = False) -> dt.date:
    """
    Parse a date string with exactly three numeric components.

    Rules:
        1. ISO strings (YYYY-MM-DD) are always read year-month-day.
        2. Otherwise the year must be the only 4-digit component and come first or last.
        3. When the year comes last, dayfirst decides between D/M/Y and M/D/Y.
        4. Compact forms such as "20250131" are rejected as ambiguous.

    Parameters
    ----------
    s: str
        The date string to parse.
    dayfirst: bool, default False
        For strings ending with the year, read them as day/month/year.

    Returns
    -------
    dt.date
        The parsed date.
    """
    s = s.strip()
    if not s:
        raise ValueError("Empty date string.")

    m = _ISO_RE.fullmatch(s)
    if m:
        y, mo, d = (int(g) for g in m.groups())
    else:
        parts = re.findall(r"\d+", s)
        if len(parts) != 3:
            raise ValueError(
                f"Invalid date string: {s!r}. Expected three numeric components "
                "such as '2025-01-31' or '31/01/2025'."
            )
        a, b, c = parts
        if len(a) == 4 and len(c) != 4:
            y, mo, d = int(a), int(b), int(c)
        elif len(c) == 4 and len(a) != 4:
            y = int(c)
            d, mo = (int(a), int(b)) if dayfirst else (int(b), int(a))
        else:
            raise ValueError(
                f"Ambiguous date string: {s!r}. "
                "A single 4-digit year must be either the first or the last component."
            )

    try:
        return dt.date(y, mo, d)
    except ValueError as e:
        raise ValueError(f"Invalid calendar date parsed from {s!r}: (y={y}, m={mo}, d={d}).") from e


def _to_date(x: DateLike, *, dayfirst: bool = False) -> dt.date:
    """
    Convert a date-like input to ``datetime.date``; any time part is dropped.

    Supported input types :
        - datetime.date and datetime.datetime
        - np.datetime64 (any unit)
        - str (see _parse_date_str)
        - pandas.Timestamp, or anything exposing to_pydatetime()
    """
    if isinstance(x, dt.datetime):
        return x.date()
    if isinstance(x, dt.date):
        return x
    if isinstance(x, np.datetime64):
        return x.astype("datetime64[D]").astype(object)
    if isinstance(x, str):
        return _parse_date_str(x, dayfirst=dayfirst)
    if hasattr(x, "to_pydatetime"):
        py = x.to_pydatetime()
        if isinstance(py, dt.datetime):
            return py.date()
    raise ValueError(f"Unsupported date type: {type(x)}")


def _to_internal_date(x: DateLike, *, dayfirst: bool = False) -> np.datetime64:
    """Convert a date-like input to np.datetime64[D]."""
    if isinstance(x, np.datetime64):
        return x.astype("datetime64[D]")
    return np.datetime64(_to_date(x, dayfirst=dayfirst), "D")


def _from_internal_date(d64: np.datetime64, output: OutputType, *, str_sep: str = "-"):
    """
    Convert an internal np.datetime64[D] to the requested output type.

    Parameters
    ----------
    d64: np.datetime64
        The date to convert.
    output: OutputType
        One of "date", "numpy", "datetime", "str" or "pandas".
    str_sep: str, default "-"
        Separator used for "str" output, which is always year-month-day ordered.
    """
    d64 = d64.astype("datetime64[D]")
    if output == "numpy":
        return d64
    if output == "date":
        return d64.astype(object)
    if output == "datetime":
        return dt.datetime.combine(d64.astype(object), dt.time())
    if output == "str":
        iso = np.datetime_as_string(d64, unit="D")
        return iso if str_sep == "-" else iso.replace("-", str_sep)
    if output == "pandas":
        try:
            import pandas as pd
        except ImportError as e:
            raise ImportError("pandas is required for date_type='pandas'. Install extra: pip install holiday-calendars[pandas]") from e
        return pd.Timestamp(d64.astype(object))
    raise ValueError(f"Unknown output type: {output!r}")


def _norm_key(s: str) -> str:
    return " ".join(s.strip().upper().split())
