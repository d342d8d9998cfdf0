import os
import sqlite3
import logging
from typing import Dict, List, Optional, Sequence

from chashavshavon.entry_list import EntryList
from chashavshavon.exceptions import InvalidArgument, PreconditionViolation
from chashavshavon.jcal import JDate
from chashavshavon.kavuah import Kavuah, KavuahType
from chashavshavon.models import Entry, NightDay, Onah, TaharaEvent

# Die gespeicherten Kavuah-Typen sind Zweierpotenzen, nur hier an der Datenbankgrenze
KAVUAH_TYPE_CODES: Dict[KavuahType, int] = {
    KavuahType.HAFLAGAH: 1,
    KavuahType.DAY_OF_MONTH: 2,
    KavuahType.DAY_OF_WEEK: 4,
    KavuahType.SIRUG: 8,
    KavuahType.DILUG_HAFLAGA: 16,
    KavuahType.DILUG_DAY_OF_MONTH: 32,
    KavuahType.HAFLAGA_MAAYAN_PASUACH: 64,
    KavuahType.DAY_OF_MONTH_MAAYAN_PASUACH: 128,
    KavuahType.HAFLAGA_ONAHS: 256,
}
KAVUAH_TYPES_BY_CODE: Dict[int, KavuahType] = {v: k for k, v in KAVUAH_TYPE_CODES.items()}


def entry_to_row(entry: Entry) -> dict:
    return {
        'entryId': entry.entry_id,
        'dateAbs': entry.date.abs,
        'day': entry.night_day == NightDay.DAY,
        'ignoreForFlaggedDates': bool(entry.ignore_for_flagged_dates),
        'ignoreForKavuah': bool(entry.ignore_for_kavuah),
        'comments': entry.comments or '',
    }


def entry_from_row(row) -> Entry:
    onah = Onah(JDate(row['dateAbs']), NightDay.DAY if row['day'] else NightDay.NIGHT)
    return Entry(
        onah,
        row['entryId'],
        bool(row['ignoreForFlaggedDates']),
        bool(row['ignoreForKavuah']),
        row['comments'] or '',
    )


def kavuah_to_row(kavuah: Kavuah) -> dict:
    return {
        'kavuahId': kavuah.kavuah_id,
        'kavuahType': KAVUAH_TYPE_CODES[kavuah.kavuah_type],
        'settingEntryId': kavuah.setting_entry.entry_id,
        'specialNumber': kavuah.special_number,
        'cancelsOnahBeinunis': bool(kavuah.cancels_onah_beinunis),
        'active': bool(kavuah.active),
        'ignore': bool(kavuah.ignore),
    }


def kavuah_from_row(row, entries: Sequence[Entry]) -> Optional[Kavuah]:
    """None, wenn der Setting-Entry nicht (mehr) in entries ist oder die Zeile ungültig ist."""
    setting_entry = next((e for e in entries if e.entry_id == row['settingEntryId']), None)
    if setting_entry is None:
        logging.warning(f"Kavuah {row['kavuahId']}: Setting-Entry {row['settingEntryId']} nicht gefunden")
        return None
    kavuah_type = KAVUAH_TYPES_BY_CODE.get(row['kavuahType'])
    if kavuah_type is None:
        logging.warning(f"Kavuah {row['kavuahId']}: unbekannter Typ {row['kavuahType']}")
        return None
    try:
        return Kavuah(
            kavuah_type,
            setting_entry,
            row['specialNumber'],
            bool(row['cancelsOnahBeinunis']),
            bool(row['active']),
            bool(row['ignore']),
            row['kavuahId'],
        )
    except InvalidArgument as e:
        logging.warning(f"Kavuah {row['kavuahId']} übersprungen: {e}")
        return None


def tahara_event_to_row(event: TaharaEvent) -> dict:
    return {
        'taharaEventId': event.tahara_event_id,
        'dateAbs': event.jdate.abs,
        'taharaEventType': int(event.tahara_event_type),
    }


def tahara_event_from_row(row) -> Optional[TaharaEvent]:
    try:
        return TaharaEvent(JDate(row['dateAbs']), row['taharaEventType'], row['taharaEventId'])
    except InvalidArgument as e:
        logging.warning(f"TaharaEvent {row['taharaEventId']} übersprungen: {e}")
        return None


class Database:
    def __init__(self, db_path: str = None):
        try:
            self.db_path = db_path or os.path.join(os.path.expanduser("~"), ".chashavshavon", "chashavshavon.db")
            if self.db_path != ':memory:':
                os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
            self.conn = sqlite3.connect(self.db_path)
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA foreign_keys = ON;")
            self._ensure_tables()
        except sqlite3.Error as e:
            logging.error(f"Database connection error: {e}")
            raise

    def _ensure_tables(self):
        cur = self.conn.cursor()
        cur.execute("""
        CREATE TABLE IF NOT EXISTS entries (
          entryId INTEGER PRIMARY KEY AUTOINCREMENT,
          dateAbs INTEGER NOT NULL,
          day INTEGER NOT NULL,
          ignoreForFlaggedDates INTEGER NOT NULL DEFAULT 0
        )""")
        # Spalten, die erst später dazukamen
        cur.execute("PRAGMA table_info(entries)")
        cols = [row['name'] for row in cur.fetchall()]
        if 'ignoreForKavuah' not in cols:
            cur.execute("ALTER TABLE entries ADD COLUMN ignoreForKavuah INTEGER NOT NULL DEFAULT 0")
        if 'comments' not in cols:
            cur.execute("ALTER TABLE entries ADD COLUMN comments TEXT")

        cur.execute("""
        CREATE TABLE IF NOT EXISTS kavuahs (
          kavuahId INTEGER PRIMARY KEY AUTOINCREMENT,
          kavuahType INTEGER NOT NULL,
          settingEntryId INTEGER NOT NULL,
          specialNumber INTEGER NOT NULL,
          cancelsOnahBeinunis INTEGER NOT NULL,
          active INTEGER NOT NULL,
          [ignore] INTEGER NOT NULL,
          FOREIGN KEY(settingEntryId) REFERENCES entries(entryId) ON DELETE CASCADE
        )""")

        cur.execute("""
        CREATE TABLE IF NOT EXISTS taharaEvents (
          taharaEventId INTEGER PRIMARY KEY AUTOINCREMENT,
          dateAbs INTEGER NOT NULL,
          taharaEventType INTEGER NOT NULL
        )""")

        self.conn.commit()

    # Export/Import
    def export_to_sql(self, filename: str):
        """Dump aller Tabellen als SQL-Statements"""
        with open(filename, 'w', encoding='utf-8') as f:
            for line in self.conn.iterdump():
                f.write(f"{line}\n")

    def import_from_sql(self, filename: str):
        """Vorhandene Tabellen löschen, Dump einlesen und ausführen"""
        cur = self.conn.cursor()
        for tbl in ('kavuahs', 'entries', 'taharaEvents'):
            cur.execute(f"DROP TABLE IF EXISTS {tbl}")
        self.conn.commit()

        with open(filename, 'r', encoding='utf-8') as f:
            script = f.read()
        self.conn.executescript(script)
        self.conn.commit()
        self._ensure_tables()

    # Entry-Methoden
    def load_entry_list(self) -> EntryList:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM entries ORDER BY dateAbs, day")
        entry_list = EntryList()
        for row in cur.fetchall():
            entry_list.add(entry_from_row(row))
        cur.close()
        entry_list.calculate_haflagas()
        return entry_list

    def save_entry(self, entry: Entry) -> Entry:
        row = entry_to_row(entry)
        params = (row['dateAbs'], int(row['day']), int(row['ignoreForFlaggedDates']),
                  int(row['ignoreForKavuah']), row['comments'])
        try:
            cur = self.conn.cursor()
            if entry.has_id:
                cur.execute(
                    "UPDATE entries SET dateAbs=?, day=?, ignoreForFlaggedDates=?, ignoreForKavuah=?, comments=? "
                    "WHERE entryId=?",
                    params + (entry.entry_id,)
                )
                logging.info(f"Updated Entry id={entry.entry_id}")
            else:
                cur.execute(
                    "INSERT INTO entries (dateAbs, day, ignoreForFlaggedDates, ignoreForKavuah, comments) "
                    "VALUES (?,?,?,?,?)",
                    params
                )
                entry.entry_id = cur.lastrowid
                logging.info(f"Inserted new Entry with id={entry.entry_id}")
            self.conn.commit()
        except sqlite3.Error as e:
            logging.error(f"Error saving entry: {e}")
            raise
        return entry

    def delete_entry(self, entry: Entry):
        if not entry.has_id:
            raise PreconditionViolation("Entries can only be deleted from the database if they have an id")
        cur = self.conn.cursor()
        cur.execute("DELETE FROM entries WHERE entryId=?", (entry.entry_id,))
        self.conn.commit()

    # Kavuah-Methoden
    def load_kavuahs(self, entries) -> List[Kavuah]:
        entries = list(entries)
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM kavuahs")
        out = []
        for row in cur.fetchall():
            kavuah = kavuah_from_row(row, entries)
            if kavuah is not None:
                out.append(kavuah)
        cur.close()
        return out

    def save_kavuah(self, kavuah: Kavuah) -> Kavuah:
        if not kavuah.setting_entry.has_id:
            raise PreconditionViolation(
                "A kavuah can not be saved to the database unless it's setting entry is already in the database."
            )
        row = kavuah_to_row(kavuah)
        params = (row['kavuahType'], row['settingEntryId'], row['specialNumber'],
                  int(row['cancelsOnahBeinunis']), int(row['active']), int(row['ignore']))
        try:
            cur = self.conn.cursor()
            if kavuah.has_id:
                cur.execute(
                    "UPDATE kavuahs SET kavuahType=?, settingEntryId=?, specialNumber=?, "
                    "cancelsOnahBeinunis=?, active=?, [ignore]=? WHERE kavuahId=?",
                    params + (kavuah.kavuah_id,)
                )
                logging.info(f"Updated Kavuah id={kavuah.kavuah_id}")
            else:
                cur.execute(
                    "INSERT INTO kavuahs (kavuahType, settingEntryId, specialNumber, cancelsOnahBeinunis, active, "
                    "[ignore]) VALUES (?,?,?,?,?,?)",
                    params
                )
                kavuah.kavuah_id = cur.lastrowid
                logging.info(f"Inserted new Kavuah with id={kavuah.kavuah_id}")
            self.conn.commit()
        except sqlite3.Error as e:
            logging.error(f"Error saving kavuah: {e}")
            raise
        return kavuah

    def delete_kavuah(self, kavuah: Kavuah):
        if not kavuah.has_id:
            raise PreconditionViolation("Kavuahs can only be deleted from the database if they have an id")
        cur = self.conn.cursor()
        cur.execute("DELETE FROM kavuahs WHERE kavuahId=?", (kavuah.kavuah_id,))
        self.conn.commit()

    # TaharaEvent-Methoden
    def load_tahara_events(self) -> List[TaharaEvent]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM taharaEvents ORDER BY dateAbs")
        out = [te for te in (tahara_event_from_row(row) for row in cur.fetchall()) if te is not None]
        cur.close()
        return out

    def save_tahara_event(self, event: TaharaEvent) -> TaharaEvent:
        row = tahara_event_to_row(event)
        try:
            cur = self.conn.cursor()
            if event.has_id:
                cur.execute(
                    "UPDATE taharaEvents SET dateAbs=?, taharaEventType=? WHERE taharaEventId=?",
                    (row['dateAbs'], row['taharaEventType'], event.tahara_event_id)
                )
                logging.info(f"Updated TaharaEvent id={event.tahara_event_id}")
            else:
                cur.execute(
                    "INSERT INTO taharaEvents (dateAbs, taharaEventType) VALUES (?,?)",
                    (row['dateAbs'], row['taharaEventType'])
                )
                event.tahara_event_id = cur.lastrowid
                logging.info(f"Inserted new TaharaEvent with id={event.tahara_event_id}")
            self.conn.commit()
        except sqlite3.Error as e:
            logging.error(f"Error saving tahara event: {e}")
            raise
        return event

    def delete_tahara_event(self, event: TaharaEvent):
        if not event.has_id:
            raise PreconditionViolation("TaharaEvents can only be deleted from the database if they have an id")
        cur = self.conn.cursor()
        cur.execute("DELETE FROM taharaEvents WHERE taharaEventId=?", (event.tahara_event_id,))
        self.conn.commit()

    def close(self):
        """Schließe die Datenbankverbindung sauber"""
        if self.conn:
            self.conn.close()
            self.conn = None
