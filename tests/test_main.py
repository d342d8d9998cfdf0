# tests/test_main.py

from datetime import date

from chashavshavon import main
from chashavshavon.app_data import AppData
from chashavshavon.config import Settings
from chashavshavon.data import Database
from chashavshavon.jcal import JDate
from chashavshavon.kavuah import Kavuah, KavuahType
from chashavshavon.models import NightDay, TaharaEventType


def test_entry_from_gregorian():
    day = main.entry_from_gregorian(date(2025, 4, 25), after_sunset=False)
    assert day.night_day == NightDay.DAY
    assert day.date == JDate.from_pydate(date(2025, 4, 25))
    # nach Sonnenuntergang: Nacht des nächsten jüdischen Tages
    night = main.entry_from_gregorian(date(2025, 4, 25), after_sunset=True, comments="abends")
    assert night.night_day == NightDay.NIGHT
    assert night.date == JDate.from_pydate(date(2025, 4, 26))
    assert night.comments == "abends"


def test_handle_new_entry_saves_suggested_kavuah(monkeypatch):
    db = Database(':memory:')
    app = AppData.from_database(db)
    # jede Frage mit "j" beantworten
    monkeypatch.setattr("builtins.input", lambda prompt="": "j")
    start = date(2025, 1, 1)
    for days in (0, 30, 60, 90):
        entry = main.entry_from_gregorian(date.fromordinal(start.toordinal() + days), after_sunset=True)
        main.handle_new_entry(db, app, entry)

    assert len(db.load_entry_list()) == 4
    kavuahs = db.load_kavuahs(db.load_entry_list())
    assert [k.kavuah_type for k in kavuahs].count(KavuahType.HAFLAGAH) == 1

    # doppelter Entry wird nicht gespeichert
    main.handle_new_entry(db, app, main.entry_from_gregorian(start, after_sunset=True))
    assert len(db.load_entry_list()) == 4
    db.close()


def test_visible_kavuahs_hides_ignored():
    app = AppData()
    entry = main.entry_from_gregorian(date(2025, 1, 1), after_sunset=True)
    shown = Kavuah(KavuahType.HAFLAGAH, entry, 30)
    hidden = Kavuah(KavuahType.DAY_OF_MONTH, entry, entry.day, ignore=True)
    app.kavuah_list = [shown, hidden]
    assert main.visible_kavuahs(app) == [shown]
    app.settings = Settings(show_ignored_kavuahs=True)
    assert main.visible_kavuahs(app) == [shown, hidden]


def test_input_tahara_event_asks_until_valid(monkeypatch):
    answers = iter(["9", "x", "4", "2025-04-25"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    event = main.input_tahara_event()
    assert event.tahara_event_type == TaharaEventType.MIKVAH
    assert event.jdate == JDate.from_pydate(date(2025, 4, 25))

    db = Database(':memory:')
    app = AppData.from_database(db)
    main.handle_new_tahara_event(db, app, event)
    assert event.has_id
    assert app.tahara_events == [event]
    assert len(db.load_tahara_events()) == 1
    db.close()
