import numpy as np
from typing import Dict
from dataclasses import dataclass, field

from .errors import InvalidYearRange, QueryOutOfRange


@dataclass()
class DateUniverse:
    """
    Contiguous days covering whole years [start_year, end_year] :
        1. Non-lazy fields (built at init):
            - First and last day of the universe : np.datetime64
            - Contiguous days : np.ndarray of datetime64[D]
        2. Lazy fields (built on demand and cached):
            - Weekday as int (Monday=0, Sunday=6) : np.ndarray

    Arrays are flagged read-only so a universe can back an immutable calendar.
    """
    start_year: int
    end_year: int

    days: np.ndarray = field(init=False)
    _cache: Dict[str, np.ndarray] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.end_year < self.start_year:
            raise InvalidYearRange(f"end_year {self.end_year} is before start_year {self.start_year}")

        self.start64 = np.datetime64(f"{self.start_year:04d}-01-01", "D")
        self.end64 = np.datetime64(f"{self.end_year:04d}-12-31", "D")

        n_days = int((self.end64 - self.start64) / np.timedelta64(1, "D")) + 1
        self.days = self.start64 + np.arange(n_days, dtype="int64").astype("timedelta64[D]")
        self.days.setflags(write=False)

    def __len__(self) -> int:
        return int(self.days.shape[0])

    def contains(self, d64: np.datetime64) -> bool:
        return bool(self.start64 <= d64 <= self.end64)

    def locate(self, d64: np.datetime64) -> int:
        """Return index i such that days[i] == d64. Raises QueryOutOfRange if outside."""
        i = int((d64 - self.start64) / np.timedelta64(1, "D"))
        if i < 0 or i >= len(self):
            raise QueryOutOfRange(
                f"Date {d64} outside generated range [{self.start64}, {self.end64}]"
            )
        return i

    def positions(self, days64: np.ndarray) -> np.ndarray:
        """Vectorised locate for dates already known to be inside the universe."""
        return (days64.astype("datetime64[D]") - self.start64).astype("int64")

    @property
    def weekday(self) -> np.ndarray:
        key = "weekday"
        if key not in self._cache:
            days_int = self.days.astype("int64")
            # 1970-01-01 was a Thursday
            wd = ((days_int + 3) % 7).astype("uint8")
            wd.setflags(write=False)
            self._cache[key] = wd
        return self._cache[key]

