# tests/test_jcal.py

from datetime import date
import pytest

from chashavshavon.exceptions import InvalidArgument
from chashavshavon.jcal import JDate, days_in_month, is_leap_year


def test_from_ymd_roundtrip():
    jd = JDate.from_ymd(5780, 1, 10)
    assert (jd.year, jd.month, jd.day) == (5780, 1, 10)
    assert JDate.from_pydate(jd.to_pydate()) == jd


def test_day_of_week_sunday_is_zero():
    # 2025-04-27 war ein Sonntag
    assert JDate.from_pydate(date(2025, 4, 27)).day_of_week == 0
    assert JDate.from_pydate(date(2025, 4, 26)).day_of_week == 6


def test_leap_years():
    assert is_leap_year(5782)
    assert is_leap_year(5784)
    assert not is_leap_year(5780)
    assert not is_leap_year(5783)


def test_days_in_month():
    assert days_in_month(5780, 1) == 30   # Nissan
    assert days_in_month(5780, 2) == 29   # Iyar


def test_add_months():
    jd = JDate.from_ymd(5780, 1, 10)
    nxt = jd.add_months(1)
    assert (nxt.year, nxt.month, nxt.day) == (5780, 2, 10)
    # Elul -> Tishrei des nächsten Jahres
    tishrei = JDate.from_ymd(5780, 6, 10).add_months(1)
    assert (tishrei.year, tishrei.month, tishrei.day) == (5781, 7, 10)


def test_add_months_clamps_thirtieth():
    jd = JDate.from_ymd(5780, 1, 30).add_months(1)
    assert (jd.year, jd.month, jd.day) == (5780, 2, 29)


def test_add_years_adar_sheini():
    jd = JDate.from_ymd(5782, 13, 5).add_years(1)
    assert (jd.year, jd.month, jd.day) == (5783, 12, 5)


def test_diff_days_and_months():
    a = JDate.from_ymd(5780, 1, 5)
    b = JDate.from_ymd(5780, 3, 5)
    assert a.diff_days(a.add_days(17)) == 17
    assert a.add_days(17).diff_days(a) == -17
    assert a.diff_months(b) == 2
    assert JDate.from_ymd(5780, 6, 1).diff_months(JDate.from_ymd(5781, 7, 1)) == 1


def test_ordering_and_hash():
    a = JDate.from_ymd(5780, 1, 5)
    assert a < a.add_days(1)
    assert a == JDate(a.abs)
    assert len({a, JDate(a.abs)}) == 1


def test_invalid_dates():
    with pytest.raises(InvalidArgument):
        JDate.from_ymd(5780, 14, 1)
    with pytest.raises(InvalidArgument):
        JDate("5780-01-01")
