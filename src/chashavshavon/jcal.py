# src/chashavshavon/jcal.py
from datetime import date
from functools import lru_cache, total_ordering
from typing import Tuple

from pyluach import dates, hebrewcal

from .exceptions import InvalidArgument

DOW_ENG = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Shabbos"]
MONTHS_ENG = [
    "", "Nissan", "Iyar", "Sivan", "Tamuz", "Av", "Elul", "Tishrei",
    "Cheshvan", "Kislev", "Teves", "Shvat", "Adar", "Adar Sheini",
]


def is_leap_year(year: int) -> bool:
    return hebrewcal.Year(year).leap


def months_in_year(year: int) -> int:
    return 13 if is_leap_year(year) else 12


def _months_elapsed(year: int) -> int:
    # Monate seit der Schöpfung bis Tishrei des gegebenen Jahres (19-Jahres-Zyklus)
    return (235 * year - 234) // 19


def _month_index(year: int, month: int) -> int:
    """Fortlaufende Monatsnummer. Tishrei ist der erste Monat des Jahres, Nissan ist aber Monat 1."""
    if month >= 7:
        offset = month - 7
    else:
        offset = month + months_in_year(year) - 7
    return _months_elapsed(year) + offset


def _from_month_index(index: int) -> Tuple[int, int]:
    year = (19 * index + 234) // 235
    while _months_elapsed(year + 1) <= index:
        year += 1
    while _months_elapsed(year) > index:
        year -= 1
    offset = index - _months_elapsed(year)
    month = offset + 7
    if month > months_in_year(year):
        month -= months_in_year(year)
    return year, month


@lru_cache(maxsize=4096)
def _abs_from_ymd(year: int, month: int, day: int) -> int:
    return dates.HebrewDate(year, month, day).to_pydate().toordinal()


@lru_cache(maxsize=4096)
def _ymd_from_abs(absolute: int) -> Tuple[int, int, int]:
    hd = dates.HebrewDate.from_pydate(date.fromordinal(absolute))
    return hd.year, hd.month, hd.day


def days_in_month(year: int, month: int) -> int:
    next_year, next_month = _from_month_index(_month_index(year, month) + 1)
    return _abs_from_ymd(next_year, next_month, 1) - _abs_from_ymd(year, month, 1)


@total_ordering
class JDate:
    """
    Ein Tag im jüdischen Kalender.
    Intern zählt nur die absolute Tageszahl (Tage seit dem 31.12.0001 v.d.Z., wie date.toordinal()),
    Jahr/Monat/Tag werden über pyluach berechnet. Nissan ist Monat 1, Adar Sheini ist 13.
    """

    __slots__ = ("_abs",)

    def __init__(self, absolute: int):
        if isinstance(absolute, bool) or not isinstance(absolute, int):
            raise InvalidArgument("JDate braucht eine absolute Tageszahl (int).")
        self._abs = absolute

    @classmethod
    def from_ymd(cls, year: int, month: int, day: int) -> "JDate":
        try:
            return cls(_abs_from_ymd(year, month, day))
        except ValueError as e:
            raise InvalidArgument(f"Ungültiges jüdisches Datum {year}/{month}/{day}: {e}") from e

    @classmethod
    def from_pydate(cls, pydate: date) -> "JDate":
        return cls(pydate.toordinal())

    @classmethod
    def today(cls) -> "JDate":
        return cls.from_pydate(date.today())

    @property
    def abs(self) -> int:
        return self._abs

    @property
    def year(self) -> int:
        return _ymd_from_abs(self._abs)[0]

    @property
    def month(self) -> int:
        return _ymd_from_abs(self._abs)[1]

    @property
    def day(self) -> int:
        return _ymd_from_abs(self._abs)[2]

    @property
    def day_of_week(self) -> int:
        """0 = Sonntag … 6 = Shabbos"""
        return self._abs % 7

    def to_pydate(self) -> date:
        return date.fromordinal(self._abs)

    def add_days(self, days: int) -> "JDate":
        return JDate(self._abs + days)

    def add_months(self, months: int) -> "JDate":
        """Ist der Tag der 30. und hat der Zielmonat nur 29 Tage, wird der 29. genommen."""
        year, month = _from_month_index(_month_index(self.year, self.month) + months)
        day = self.day
        if day == 30 and days_in_month(year, month) == 29:
            day = 29
        return JDate.from_ymd(year, month, day)

    def add_years(self, years: int) -> "JDate":
        year = self.year + years
        month = self.month
        day = self.day
        if month == 13 and not is_leap_year(year):
            month = 12
        if day == 30 and days_in_month(year, month) == 29:
            # kurzer Cheshvan bzw. Kislev: auf den Ersten des Folgemonats
            if month in (8, 9):
                month += 1
                day = 1
            else:
                day = 29
        return JDate.from_ymd(year, month, day)

    def diff_days(self, other: "JDate") -> int:
        """Negativ, wenn other vor diesem Datum liegt."""
        return other.abs - self._abs

    def diff_months(self, other: "JDate") -> int:
        """Monatsdifferenz ohne Berücksichtigung des Tages."""
        return _month_index(other.year, other.month) - _month_index(self.year, self.month)

    def __eq__(self, other):
        if not isinstance(other, JDate):
            return NotImplemented
        return self._abs == other._abs

    def __lt__(self, other):
        if not isinstance(other, JDate):
            return NotImplemented
        return self._abs < other._abs

    def __hash__(self):
        return hash(self._abs)

    def __repr__(self):
        return f"JDate({self._abs})"

    def __str__(self):
        return f"{DOW_ENG[self.day_of_week]}, {MONTHS_ENG[self.month]} {self.day}, {self.year}"
