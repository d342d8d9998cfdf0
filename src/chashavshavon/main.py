# src/chashavshavon/main.py

import logging
from datetime import date
from typing import List

from dateutil import parser as date_parser

from .app_data import AppData
from .charts import create_haflaga_chart
from .config import load_settings
from .data import Database
from .export_utils import export_problem_onahs_pdf, format_problem_onahs
from .jcal import JDate
from .kavuah import Kavuah
from .kavuah_logic import check_new_entry
from .models import Entry, NightDay, Onah, TaharaEvent, TaharaEventType


def entry_from_gregorian(day: date, after_sunset: bool, comments: str = "") -> Entry:
    """Nach Sonnenuntergang gehört die Nacht schon zum nächsten jüdischen Tag."""
    if after_sunset:
        onah = Onah(JDate.from_pydate(day).add_days(1), NightDay.NIGHT)
    else:
        onah = Onah(JDate.from_pydate(day), NightDay.DAY)
    return Entry(onah, comments=comments)


def input_entry() -> Entry:
    print("\n✏️  Neuer Entry:")
    date_str = input("  Datum (z.B. 2025-04-25) [leer=heute]: ").strip()
    day = date.today() if not date_str else date_parser.parse(date_str).date()
    after_sunset = input("  Nach Sonnenuntergang? (j/n) ").lower() == "j"
    comments = input("  Kommentar [leer=keiner]: ").strip()
    return entry_from_gregorian(day, after_sunset, comments)


def input_tahara_event() -> TaharaEvent:
    print("\n🛁 Neues Tahara-Event:")
    types = list(TaharaEventType)
    for i, tt in enumerate(types, 1):
        print(f"  {i}) {TaharaEvent.to_tahara_event_type_string(tt)}")
    choice = ""
    while not (choice.isdigit() and 1 <= int(choice) <= len(types)):
        choice = input("  Auswahl: ").strip()
    tahara_event_type = types[int(choice) - 1]
    date_str = input("  Datum (z.B. 2025-04-25) [leer=heute]: ").strip()
    day = date.today() if not date_str else date_parser.parse(date_str).date()
    return TaharaEvent(JDate.from_pydate(day), tahara_event_type)


def handle_new_tahara_event(db: Database, app_data: AppData, event: TaharaEvent):
    db.save_tahara_event(event)
    app_data.add_or_remove_item(event)
    print(f"  ✅ {event}")


def visible_kavuahs(app_data: AppData) -> List[Kavuah]:
    return [k for k in app_data.kavuah_list if app_data.settings.show_ignored_kavuahs or not k.ignore]


def ask(question: str) -> bool:
    return input(f"{question} (j/n) ").lower() == "j"


def handle_new_entry(db: Database, app_data: AppData, entry: Entry):
    if app_data.entry_list.contains(entry):
        print("  Diesen Entry gibt es schon.")
        return
    db.save_entry(entry)
    app_data.add_or_remove_item(entry)
    print(f"  ✅ {entry}")

    if not app_data.settings.calc_kavuahs_on_new_entry:
        return
    result = check_new_entry(entry, app_data.entry_list, app_data.kavuah_list, app_data.settings)

    for suggestion in result.possible_new:
        print(f"\n🔎 Möglicher Kavuah: {suggestion.kavuah}")
        for e in suggestion.entries:
            print("    ", e)
        if ask("  Kavuah speichern?"):
            db.save_kavuah(suggestion.kavuah)
            app_data.add_or_remove_item(suggestion.kavuah)

    for kavuah in result.broken:
        print(f"\n⚠️  Kavuah scheint gebrochen: {kavuah}")
        if ask("  Kavuah deaktivieren?"):
            kavuah.active = False
            db.save_kavuah(kavuah)
    for kavuah in result.out_of_pattern:
        print(f"\n⚠️  Entry passt nicht zum Kavuah: {kavuah}")
    for kavuah in result.reawakened:
        print(f"\n🔁 Entry passt zum inaktiven Kavuah: {kavuah}")
        if ask("  Kavuah wieder aktivieren?"):
            kavuah.active = True
            db.save_kavuah(kavuah)
    app_data.update_probs()


def run_wizard():
    logging.basicConfig(level=logging.INFO)
    print("🎯 Willkommen zum Chashavshavon Wizard 🎯")
    settings = load_settings()
    db = Database()
    try:
        app_data = AppData.from_database(db, settings)
        for k in visible_kavuahs(app_data):
            print(f"📌 {Kavuah.get_kavuah_type_text(k.kavuah_type)}: {k}")

        # 1) Entries erfassen
        while ask("Neuen Entry hinzufügen?"):
            handle_new_entry(db, app_data, input_entry())
        while ask("Neues Tahara-Event hinzufügen?"):
            handle_new_tahara_event(db, app_data, input_tahara_event())

        # 2) Ausgabe
        print("\n📅 Kommende Flagged Dates:")
        print(format_problem_onahs(app_data.problem_onahs, date.today()))

        if ask("\nAls PDF exportieren?"):
            fn = input("  Dateiname [flagged_dates.pdf]: ").strip() or "flagged_dates.pdf"
            export_problem_onahs_pdf(app_data.problem_onahs, fn, from_date=date.today())
            print(f"PDF gespeichert: {fn}")

        if ask("Haflaga-Diagramm speichern?"):
            fn = input("  Dateiname [haflagas.png]: ").strip() or "haflagas.png"
            create_haflaga_chart(app_data.entry_list.real_entry_list, fn)
            print(f"Diagramm gespeichert: {fn}")
    finally:
        db.close()


if __name__ == "__main__":
    run_wizard()
