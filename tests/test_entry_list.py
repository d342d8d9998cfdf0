# tests/test_entry_list.py

import pytest

from chashavshavon.entry_list import EntryList
from chashavshavon.exceptions import InvalidArgument
from chashavshavon.jcal import JDate
from chashavshavon.models import Entry, NightDay, Onah

BASE = JDate.from_ymd(5780, 1, 1).abs


def make_entry(offset, nd=NightDay.NIGHT, **kwargs):
    return Entry(Onah(JDate(BASE + offset), nd), **kwargs)


def test_add_is_unique():
    el = EntryList()
    assert el.add(make_entry(0)) == 0
    # gleiche Onah, anderes Objekt
    assert el.add(make_entry(0)) == -1
    assert len(el) == 1
    assert el.add(make_entry(0, NightDay.DAY)) == 1
    assert len(el) == 2


def test_add_rejects_other_types():
    with pytest.raises(InvalidArgument):
        EntryList().add("kein Entry")


def test_real_entry_list_is_ordered():
    el = EntryList([make_entry(30), make_entry(0, NightDay.DAY), make_entry(0), make_entry(60)])
    keys = [(e.date.abs, int(e.night_day)) for e in el.real_entry_list]
    assert keys == sorted(keys)
    assert el.real_entry_list[0].night_day == NightDay.NIGHT
    assert [e.date.abs for e in el.descending] == [BASE + 60, BASE + 30, BASE, BASE]


def test_ignored_entries_are_not_real():
    ignored = make_entry(10, ignore_for_flagged_dates=True)
    el = EntryList([make_entry(0), ignored, make_entry(30)])
    assert ignored not in el.real_entry_list
    assert ignored in el
    el.calculate_haflagas()
    assert ignored.haflaga is None
    assert el.real_entry_list[1].haflaga == 30
    assert el.last_entry().date.abs == BASE + 30
    assert el.last_regular_entry().date.abs == BASE + 30


def test_haflaga_chain():
    el = EntryList([make_entry(55), make_entry(0), make_entry(27), make_entry(84, NightDay.DAY)])
    el.calculate_haflagas()
    real = el.real_entry_list
    assert real[0].haflaga is None
    for prev, cur in zip(real, real[1:]):
        assert cur.haflaga == prev.date.diff_days(cur.date)
    assert [e.haflaga for e in real] == [None, 27, 28, 29]


def test_calculate_haflagas_is_idempotent():
    el = EntryList([make_entry(0), make_entry(31), make_entry(59)])
    el.calculate_haflagas()
    first = [e.haflaga for e in el.real_entry_list]
    el.calculate_haflagas()
    assert [e.haflaga for e in el.real_entry_list] == first


def test_remove():
    a = make_entry(0)
    b = make_entry(30)
    el = EntryList([a, b])
    # nicht vorhanden: kein Fehler, nichts passiert
    assert el.remove(make_entry(99)) is None
    assert el.remove(5) is None
    assert len(el) == 2
    assert el.remove(make_entry(0)) is a
    assert el.remove(0) is b
    assert len(el) == 0
    with pytest.raises(InvalidArgument):
        el.remove("a")


def test_empty_list():
    el = EntryList()
    assert el.last_entry() is None
    assert el.last_regular_entry() is None
    el.calculate_haflagas()
    assert el.real_entry_list == []


def test_sample_entry_list():
    sample = EntryList.get_sample_entry_list()
    assert len(sample) == 3
    assert all(e.has_id for e in sample)
