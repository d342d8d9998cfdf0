# tests/test_data.py

import pytest

from chashavshavon.data import (
    Database, kavuah_from_row, kavuah_to_row, tahara_event_from_row, tahara_event_to_row,
)
from chashavshavon.exceptions import PreconditionViolation
from chashavshavon.jcal import JDate
from chashavshavon.kavuah import Kavuah, KavuahType
from chashavshavon.models import Entry, NightDay, Onah, TaharaEvent, TaharaEventType

START = JDate.from_ymd(5780, 1, 10)


@pytest.fixture
def db():
    db = Database(':memory:')
    yield db
    db.close()


def night(offset, **kwargs):
    return Entry(Onah(START.add_days(offset), NightDay.NIGHT), **kwargs)


def test_save_and_load_entries(db):
    a = db.save_entry(night(0, comments="erste"))
    b = db.save_entry(Entry(Onah(START.add_days(29), NightDay.DAY), ignore_for_kavuah=True))
    assert a.has_id and b.has_id and a.entry_id != b.entry_id

    el = db.load_entry_list()
    assert len(el) == 2
    first, second = el.real_entry_list
    assert first.comments == "erste"
    assert second.night_day == NightDay.DAY
    assert second.ignore_for_kavuah
    # Haflagas sind nach dem Laden schon berechnet
    assert second.haflaga == 29


def test_update_entry(db):
    e = db.save_entry(night(0))
    e.ignore_for_flagged_dates = True
    db.save_entry(e)
    el = db.load_entry_list()
    assert len(el) == 1
    assert el[0].ignore_for_flagged_dates
    assert el.real_entry_list == []


def test_delete_entry_needs_id(db):
    with pytest.raises(PreconditionViolation):
        db.delete_entry(night(0))


def test_kavuah_row_roundtrip():
    setting = night(0, entry_id=7)
    row = {
        'kavuahId': 3,
        'kavuahType': 64,
        'settingEntryId': 7,
        'specialNumber': 31,
        'cancelsOnahBeinunis': False,
        'active': True,
        'ignore': True,
    }
    k = kavuah_from_row(row, [night(30, entry_id=8), setting])
    assert k.kavuah_type == KavuahType.HAFLAGA_MAAYAN_PASUACH
    assert k.setting_entry is setting
    assert kavuah_to_row(k) == row


def test_kavuah_row_without_setting_entry():
    row = {'kavuahId': 1, 'kavuahType': 1, 'settingEntryId': 99, 'specialNumber': 30,
           'cancelsOnahBeinunis': True, 'active': True, 'ignore': False}
    assert kavuah_from_row(row, [night(0, entry_id=1)]) is None


def test_save_kavuah_needs_saved_setting_entry(db):
    k = Kavuah(KavuahType.HAFLAGAH, night(0), 30)
    with pytest.raises(PreconditionViolation):
        db.save_kavuah(k)
    with pytest.raises(PreconditionViolation):
        db.delete_kavuah(k)


def test_save_update_and_delete_kavuah(db):
    setting = db.save_entry(night(0))
    k = db.save_kavuah(Kavuah(KavuahType.DILUG_HAFLAGA, setting, -2, cancels_onah_beinunis=False))
    assert k.has_id

    el = db.load_entry_list()
    loaded = db.load_kavuahs(el)
    assert len(loaded) == 1
    assert loaded[0].kavuah_type == KavuahType.DILUG_HAFLAGA
    assert loaded[0].special_number == -2
    assert not loaded[0].cancels_onah_beinunis
    assert loaded[0].setting_entry.entry_id == setting.entry_id

    k.active = False
    db.save_kavuah(k)
    assert not db.load_kavuahs(el)[0].active

    db.delete_kavuah(k)
    assert db.load_kavuahs(el) == []


def test_deleting_entry_deletes_its_kavuahs(db):
    setting = db.save_entry(night(0))
    db.save_kavuah(Kavuah(KavuahType.HAFLAGAH, setting, 30))
    db.delete_entry(setting)
    el = db.load_entry_list()
    assert len(el) == 0
    assert db.load_kavuahs(el) == []


def test_export_import_roundtrip(tmp_path):
    # 1) Original-DB mit einem Entry und einem Kavuah
    db1 = Database(str(tmp_path / "original.db"))
    setting = db1.save_entry(night(0))
    db1.save_kavuah(Kavuah(KavuahType.SIRUG, setting, 2))
    db1.save_tahara_event(TaharaEvent(START.add_days(7), TaharaEventType.HEFSEK))

    # 2) Dump schreiben
    dump_file = tmp_path / "dump.sql"
    db1.export_to_sql(str(dump_file))
    assert dump_file.exists() and dump_file.stat().st_size > 0

    # 3) In eine neue DB einlesen
    db2 = Database(str(tmp_path / "restored.db"))
    db2.import_from_sql(str(dump_file))
    el = db2.load_entry_list()
    kavuahs = db2.load_kavuahs(el)
    assert len(el) == 1
    assert el[0].date == setting.date
    assert len(kavuahs) == 1 and kavuahs[0].kavuah_type == KavuahType.SIRUG
    assert [te.tahara_event_type for te in db2.load_tahara_events()] == [TaharaEventType.HEFSEK]

    db1.close()
    db2.close()


def test_old_schema_gets_new_columns(tmp_path):
    path = str(tmp_path / "alt.db")
    db = Database(path)
    db.conn.execute("DROP TABLE kavuahs")
    db.conn.execute("DROP TABLE entries")
    db.conn.execute(
        "CREATE TABLE entries (entryId INTEGER PRIMARY KEY AUTOINCREMENT, dateAbs INTEGER NOT NULL, "
        "day INTEGER NOT NULL, ignoreForFlaggedDates INTEGER NOT NULL DEFAULT 0)"
    )
    db.conn.execute("INSERT INTO entries (dateAbs, day) VALUES (?, 0)", (START.abs,))
    db.conn.commit()
    db.close()

    db = Database(path)
    el = db.load_entry_list()
    assert len(el) == 1
    assert el[0].comments == ""
    assert not el[0].ignore_for_kavuah
    db.close()


def test_invalid_kavuah_row_is_skipped(db):
    setting = db.save_entry(night(0))
    db.save_kavuah(Kavuah(KavuahType.HAFLAGAH, setting, 30))
    # Dilug Yom Hachodesh mit 0 Tagen kann es nicht geben
    db.conn.execute(
        "INSERT INTO kavuahs (kavuahType, settingEntryId, specialNumber, cancelsOnahBeinunis, active, [ignore]) "
        "VALUES (32, ?, 0, 1, 1, 0)",
        (setting.entry_id,)
    )
    db.conn.execute(
        "INSERT INTO kavuahs (kavuahType, settingEntryId, specialNumber, cancelsOnahBeinunis, active, [ignore]) "
        "VALUES (3, ?, 10, 1, 1, 0)",
        (setting.entry_id,)
    )
    db.conn.commit()
    kavuahs = db.load_kavuahs(db.load_entry_list())
    assert [k.kavuah_type for k in kavuahs] == [KavuahType.HAFLAGAH]


def test_save_load_and_delete_tahara_events(db):
    mikvah = db.save_tahara_event(TaharaEvent(START.add_days(12), TaharaEventType.MIKVAH))
    hefsek = db.save_tahara_event(TaharaEvent(START.add_days(5), TaharaEventType.HEFSEK))
    assert mikvah.has_id and hefsek.has_id

    loaded = db.load_tahara_events()
    # chronologisch
    assert [te.tahara_event_type for te in loaded] == [TaharaEventType.HEFSEK, TaharaEventType.MIKVAH]
    assert loaded[1].jdate == mikvah.jdate

    hefsek.tahara_event_type = TaharaEventType.BEDIKA
    db.save_tahara_event(hefsek)
    assert db.load_tahara_events()[0].tahara_event_type == TaharaEventType.BEDIKA

    db.delete_tahara_event(mikvah)
    assert len(db.load_tahara_events()) == 1
    with pytest.raises(PreconditionViolation):
        db.delete_tahara_event(TaharaEvent(START, TaharaEventType.SHAILAH))


def test_tahara_event_row_roundtrip():
    row = {'taharaEventId': 4, 'dateAbs': START.abs, 'taharaEventType': 2}
    te = tahara_event_from_row(row)
    assert te.tahara_event_type == TaharaEventType.BEDIKA
    assert tahara_event_to_row(te) == row
    assert tahara_event_from_row({'taharaEventId': 5, 'dateAbs': START.abs, 'taharaEventType': 3}) is None
