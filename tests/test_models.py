# tests/test_models.py

import pytest

from chashavshavon.exceptions import InvalidArgument
from chashavshavon.jcal import JDate
from chashavshavon.models import (
    Entry, NightDay, Onah, ProblemFlag, ProblemOnah, TaharaEvent, TaharaEventType, sort_key,
)

BASE = JDate.from_ymd(5780, 1, 10)


def test_onah_requires_fields():
    with pytest.raises(InvalidArgument):
        Onah(None, NightDay.NIGHT)
    with pytest.raises(InvalidArgument):
        Onah(BASE, 0)
    # -1/1 als int sind erlaubt
    assert Onah(BASE, 1).night_day is NightDay.DAY


def test_next_and_previous():
    night = Onah(BASE, NightDay.NIGHT)
    day = Onah(BASE, NightDay.DAY)
    assert night.next == day
    assert day.previous == night
    assert day.next == Onah(BASE.add_days(1), NightDay.NIGHT)
    assert night.previous == Onah(BASE.add_days(-1), NightDay.DAY)


@pytest.mark.parametrize("start", [NightDay.NIGHT, NightDay.DAY])
def test_add_onahs_moves_by_index(start):
    onah = Onah(BASE, start)
    for n in range(-7, 8):
        assert onah.add_onahs(n).index == onah.index + n


def test_entry_requires_onah():
    with pytest.raises(InvalidArgument):
        Entry(None)


def test_entry_onah_differential():
    a = Entry(Onah(BASE, NightDay.NIGHT))
    b = Entry(Onah(BASE.add_days(3), NightDay.DAY))
    assert a.get_onah_differential(b) == 7
    assert b.get_onah_differential(a) == -7


def test_entry_haflaga_and_text():
    a = Entry(Onah(BASE, NightDay.NIGHT))
    b = Entry(Onah(BASE.add_days(28), NightDay.DAY), comments="Test")
    b.set_haflaga(a)
    assert b.haflaga == 28
    assert "[Haflaga of 28]" in str(b)
    assert "Comments: Test" in b.to_long_string()
    b.set_haflaga(None)
    assert b.haflaga is None
    assert not b.has_id


def test_night_sorts_before_day():
    day = Entry(Onah(BASE, NightDay.DAY))
    night = Entry(Onah(BASE, NightDay.NIGHT))
    assert sorted([day, night], key=sort_key) == [night, day]


def test_problem_flag_needs_description():
    with pytest.raises(InvalidArgument):
        ProblemFlag(BASE, NightDay.NIGHT, "")


def test_problem_onah_flags():
    po = ProblemOnah(BASE, NightDay.NIGHT)
    assert po.add_flag(ProblemFlag(BASE, NightDay.NIGHT, "Yom Hachodesh"))
    # gleiches Flag nur einmal
    assert not po.add_flag(ProblemFlag(BASE, NightDay.NIGHT, "Yom Hachodesh"))
    assert len(po.flags) == 1

    other = ProblemOnah(BASE, NightDay.NIGHT)
    other.add_flag(ProblemFlag(BASE, NightDay.NIGHT, "Yom Hachodesh"))
    other.add_flag(ProblemFlag(BASE, NightDay.NIGHT, "Thirtieth Day (Onah Beinonis)"))
    assert po.is_same_prob(other)
    assert not other.is_same_prob(po)

    txt = str(po)
    assert txt.startswith("The night of")
    # Die Nacht gehört zum bürgerlichen Vortag
    assert BASE.add_days(-1).to_pydate().isoformat() in txt
    assert "►  Yom Hachodesh" in txt


def test_probs_sort_and_lookup():
    later = ProblemOnah(BASE.add_days(1), NightDay.NIGHT)
    day = ProblemOnah(BASE, NightDay.DAY)
    night = ProblemOnah(BASE, NightDay.NIGHT)
    probs = ProblemOnah.sort_prob_list([later, day, night])
    assert probs == [night, day, later]
    assert ProblemOnah.get_probs_for_date(BASE, probs) == [night, day]


def test_tahara_event():
    te = TaharaEvent(BASE, TaharaEventType.HEFSEK)
    assert te.to_type_string() == "Hefsek Tahara"
    assert not te.has_id
    assert str(te).startswith("Hefsek Tahara on ")
    # gespeicherte Zahl wird zum Enum
    assert TaharaEvent(BASE, 8, 3).tahara_event_type is TaharaEventType.MIKVAH
    assert TaharaEvent.to_tahara_event_type_string(TaharaEventType.SHAILAH) == "Shailah"
    assert TaharaEvent.to_tahara_event_type_string(16) is None
    with pytest.raises(InvalidArgument):
        TaharaEvent(None, TaharaEventType.BEDIKA)
    with pytest.raises(InvalidArgument):
        TaharaEvent(BASE, 3)


def test_tahara_events_sort_chronologically():
    later = TaharaEvent(BASE.add_days(7), TaharaEventType.MIKVAH)
    first = TaharaEvent(BASE, TaharaEventType.HEFSEK)
    assert TaharaEvent.sort_list([later, first]) == [first, later]
