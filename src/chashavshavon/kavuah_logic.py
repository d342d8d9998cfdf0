# src/chashavshavon/kavuah_logic.py
import logging
from typing import List, NamedTuple, Optional, Sequence

from .jcal import JDate
from .kavuah import Kavuah, KavuahType, get_independent_iterations
from .models import Entry


class KavuahSuggestion(NamedTuple):
    """Ein gefundener Kavuah zusammen mit den 3 oder 4 Entries, die ihn ergeben haben."""
    kavuah: Kavuah
    entries: List[Entry]


class EntryCheckResult(NamedTuple):
    possible_new: List[KavuahSuggestion]
    broken: List[Kavuah]
    out_of_pattern: List[Kavuah]
    reawakened: List[Kavuah]


def _same_onah_allowed(settings, a: Entry, b: Entry) -> bool:
    return bool(settings and settings.kavuah_diff_onahs) or a.night_day == b.night_day


def _index_of(entry: Entry, entries: Sequence[Entry]) -> int:
    for i, e in enumerate(entries):
        if e is entry or e.is_same_entry(entry):
            return i
    return -1


def get_possible_new_kavuahs(real_entry_list: Sequence[Entry], kavuah_list: Sequence[Kavuah],
                             settings) -> List[KavuahSuggestion]:
    """
    Alle Kavuah-Vorschläge ohne die, die schon als aktiver Kavuah existieren.
    Ignorierte Kavuahs werden nicht ausgefiltert und können wieder vorgeschlagen werden.
    """
    active = [k for k in kavuah_list if k.active and not k.ignore]
    return [
        pk for pk in get_kavuah_suggestion_list(real_entry_list, kavuah_list, settings)
        if not any(k.is_matching_kavuah(pk.kavuah) for k in active)
    ]


def get_kavuah_suggestion_list(real_entry_list: Sequence[Entry], previous_kavuahs: Optional[Sequence[Kavuah]],
                               settings) -> List[KavuahSuggestion]:
    """
    Ein Durchlauf über die chronologischen echten Entries.
    Unabhängige Muster (Yom Hachodesh, Wochentag, Dilug Yom Hachodesh) werden pro Entry gesucht,
    alle anderen über ein Fenster der letzten 3 bzw. 4 Entries.
    """
    found: List[KavuahSuggestion] = []
    queue: List[Entry] = []
    non_ignored = [e for e in real_entry_list if not e.ignore_for_kavuah]
    diff_onahs = bool(settings and settings.kavuah_diff_onahs)

    for entry in non_ignored:
        found += get_day_of_month_kavuah(entry, non_ignored, settings)
        found += get_day_of_week_kavuahs(entry, non_ignored, settings)

        # Ohne aktiven Yom-Hachodesh-Kavuah auf diesem Tag reicht für Dilug Yom Hachodesh
        # schon eine Folge von drei Entries [Sha"ch yr"d 189, 7]
        if not any(
            k.active and k.kavuah_type == KavuahType.DAY_OF_MONTH and k.special_number == entry.day
            for k in previous_kavuahs or []
        ):
            found += get_dilug_day_of_month_kavuah(entry, non_ignored, settings)

        queue.append(entry)
        if len(queue) > 4:
            queue.pop(0)

        last3 = queue[-3:]
        if len(queue) >= 3 and (diff_onahs or last3[0].night_day == last3[1].night_day == last3[2].night_day):
            found += get_sirug_kavuah(last3)

        if len(queue) == 4:
            # Der erste der vier muss nicht dieselbe Onah haben [Nodah Biyehuda (2, 83)]
            if diff_onahs or queue[1].night_day == queue[2].night_day == queue[3].night_day:
                found += get_haflagah_kavuah(queue)
                found += get_dilug_haflagah_kavuah(queue)
            # Haflaga der Onahs (Shulchan Aruch Harav). Bei gleichen Onahs gibt es schon einen Haflagah-Kavuah.
            if settings and settings.haflaga_of_onahs and queue[1].night_day != queue[2].night_day:
                found += get_haflaga_onahs_kavuah(queue)

    for s in found:
        logging.debug(f"Kavuah gefunden: {s.kavuah}")
    return found


def get_day_of_month_kavuah(entry: Entry, entry_list: Sequence[Entry], settings) -> List[KavuahSuggestion]:
    """Entries genau einen und zwei jüdische Monate später; Entries dazwischen spielen keine Rolle."""
    next_month = entry.date.add_months(1)
    third_month = next_month.add_months(1)
    second_find = next(
        (en for en in entry_list if _same_onah_allowed(settings, en, entry) and en.date == next_month), None
    )
    if second_find is None:
        return []
    third_find = next(
        (en for en in entry_list if _same_onah_allowed(settings, en, entry) and en.date == third_month), None
    )
    if third_find is None:
        return []
    return [KavuahSuggestion(
        Kavuah(KavuahType.DAY_OF_MONTH, third_find, third_month.day),
        [entry, second_find, third_find],
    )]


def get_dilug_day_of_month_kavuah(entry: Entry, entry_list: Sequence[Entry], settings) -> List[KavuahSuggestion]:
    # Im Folgemonat, aber nicht am selben Tag (das wäre ein normaler Yom Hachodesh)
    next_month = entry.date.add_months(1)
    second_find = next(
        (en for en in entry_list
         if _same_onah_allowed(settings, en, entry)
         and next_month.day != en.day
         and next_month.month == en.month
         and next_month.year == en.year),
        None,
    )
    if second_find is None:
        return []
    third_month = entry.date.add_months(2)
    dilug_days = second_find.day - entry.day
    if dilug_days == 0:
        return []
    final_find = next(
        (en for en in entry_list
         if _same_onah_allowed(settings, en, entry)
         and en.day - second_find.day == dilug_days
         and third_month.month == en.month
         and third_month.year == en.year),
        None,
    )
    if final_find is None:
        return []
    return [KavuahSuggestion(
        Kavuah(KavuahType.DILUG_DAY_OF_MONTH, final_find, dilug_days),
        [entry, second_find, final_find],
    )]


def get_day_of_week_kavuahs(entry: Entry, entry_list: Sequence[Entry], settings) -> List[KavuahSuggestion]:
    found: List[KavuahSuggestion] = []
    later_same_dow = [
        e for e in entry_list
        if _same_onah_allowed(settings, e, entry)
        and e.date.abs > entry.date.abs
        and e.day_of_week == entry.day_of_week
    ]
    for first_find in later_same_dow:
        interval = entry.date.diff_days(first_find.date)
        next_date = first_find.date.add_days(interval)
        if next_date.day_of_week != entry.day_of_week:
            continue
        second_find = next(
            (en for en in entry_list if _same_onah_allowed(settings, en, entry) and en.date == next_date), None
        )
        if second_find is not None:
            found.append(KavuahSuggestion(
                Kavuah(KavuahType.DAY_OF_WEEK, second_find, interval),
                [entry, first_find, second_find],
            ))
    return found


def get_haflagah_kavuah(four_entries: Sequence[Entry]) -> List[KavuahSuggestion]:
    h1, h2, h3 = (e.haflaga for e in four_entries[1:4])
    if h1 is not None and h1 == h2 == h3:
        return [KavuahSuggestion(Kavuah(KavuahType.HAFLAGAH, four_entries[3], h3), list(four_entries))]
    return []


def get_haflaga_onahs_kavuah(four_entries: Sequence[Entry]) -> List[KavuahSuggestion]:
    onahs = four_entries[0].get_onah_differential(four_entries[1])
    if (four_entries[1].get_onah_differential(four_entries[2]) == onahs
            and four_entries[2].get_onah_differential(four_entries[3]) == onahs):
        return [KavuahSuggestion(Kavuah(KavuahType.HAFLAGA_ONAHS, four_entries[3], onahs), list(four_entries))]
    return []


def get_sirug_kavuah(three_entries: Sequence[Entry]) -> List[KavuahSuggestion]:
    """Drei Entries hintereinander, gleicher Monatstag, gleicher Monatsabstand > 1."""
    first, second, third = three_entries
    month_diff = first.date.diff_months(second.date)
    # Abstand 1 ist Yom Hachodesh, kein Sirug
    if (month_diff > 1
            and first.day == second.day == third.day
            and second.date.diff_months(third.date) == month_diff):
        return [KavuahSuggestion(Kavuah(KavuahType.SIRUG, third, month_diff), list(three_entries))]
    return []


def get_dilug_haflagah_kavuah(four_entries: Sequence[Entry]) -> List[KavuahSuggestion]:
    h1, h2, h3 = (e.haflaga for e in four_entries[1:4])
    if h1 is None or h2 is None or h3 is None:
        return []
    diff1 = h3 - h2
    diff2 = h2 - h1
    # Dilug 0 wäre ein normaler Haflagah-Kavuah
    if diff1 != 0 and diff1 == diff2:
        return [KavuahSuggestion(Kavuah(KavuahType.DILUG_HAFLAGA, four_entries[3], diff1), list(four_entries))]
    return []


def find_broken_kavuahs(entry: Entry, kavuah_list: Sequence[Kavuah], entries: Sequence[Entry],
                        settings) -> List[Kavuah]:
    return (find_independent_brokens(entry.date, kavuah_list, entries, settings)
            + find_non_independent_brokens(entry, kavuah_list, entries, settings))


def find_independent_brokens(jdate: JDate, kavuah_list: Sequence[Kavuah], entries: Sequence[Entry],
                             settings) -> List[Kavuah]:
    """Unabhängige Kavuahs, bei denen auf keine der letzten drei theoretischen Onahs ein Entry fiel."""
    broken: List[Kavuah] = []
    past_ends = settings.dilug_chodesh_past_ends if settings is not None else True
    for kavuah in kavuah_list:
        if not (kavuah.active and not kavuah.ignore and kavuah.is_independent
                and kavuah.setting_entry.date.abs < jdate.abs):
            continue
        last3 = get_independent_iterations(kavuah, jdate, past_ends)[-3:]
        if len(last3) == 3 and not any(e.onah.is_same_onah(o) for o in last3 for e in entries):
            logging.debug(f"Kavuah gebrochen (unabhängig): {kavuah}")
            broken.append(kavuah)
    return broken


def find_non_independent_brokens(entry: Entry, kavuah_list: Sequence[Kavuah], entries: Sequence[Entry],
                                 settings) -> List[Kavuah]:
    """
    Nicht-unabhängige Kavuahs, die vor den letzten drei Entries gesetzt wurden und
    zu keinem der drei passen. entries ist chronologisch sortiert.
    """
    broken: List[Kavuah] = []
    index = _index_of(entry, entries)
    # Ohne mindestens 2 vorherige Entries kann nichts gebrochen sein
    if index < 2:
        return broken
    last_three = [(entries[i], entries[i - 1] if i > 0 else None) for i in range(index - 2, index + 1)]
    for kavuah in kavuah_list:
        if not (kavuah.active and not kavuah.ignore and not kavuah.is_independent):
            continue
        if not all(e.date.abs > kavuah.setting_entry.date.abs for e, _ in last_three):
            continue
        if not any(kavuah.is_entry_in_pattern(e, entries, settings, previous=prev) for e, prev in last_three):
            logging.debug(f"Kavuah gebrochen: {kavuah}")
            broken.append(kavuah)
    return broken


def find_out_of_pattern(entry: Entry, kavuah_list: Sequence[Kavuah], entries: Sequence[Entry],
                        settings) -> List[Kavuah]:
    """Aktive, Onah Beinonis aufhebende, nicht-unabhängige Kavuahs, zu denen der Entry nicht passt."""
    return [
        k for k in kavuah_list
        if k.cancels_onah_beinunis and k.active and not k.ignore
        # Unabhängige Kavuahs stört ein Entry dazwischen nicht
        and not k.is_independent
        and k.setting_entry.date.abs < entry.date.abs
        and not k.is_entry_in_pattern(entry, entries, settings)
    ]


def find_reawakened_kavuahs(entry: Entry, kavuah_list: Sequence[Kavuah], entries: Sequence[Entry],
                            settings) -> List[Kavuah]:
    return [
        k for k in kavuah_list
        if not k.active and not k.ignore
        and k.setting_entry.date.abs < entry.date.abs
        and k.is_entry_in_pattern(entry, entries, settings)
    ]


def check_new_entry(entry: Entry, entry_list, kavuah_list: Sequence[Kavuah], settings) -> EntryCheckResult:
    """
    Was nach einem neuen Entry zu prüfen ist: neue Kavuahs, gebrochene, nicht passende und wieder aktive.
    Die Haflagas der entry_list müssen schon berechnet sein.
    """
    real = entry_list.real_entry_list
    if entry.ignore_for_flagged_dates or _index_of(entry, real) < 0:
        return EntryCheckResult([], [], [], [])
    result = EntryCheckResult(
        possible_new=get_possible_new_kavuahs(real, kavuah_list, settings),
        broken=find_broken_kavuahs(entry, kavuah_list, real, settings),
        out_of_pattern=find_out_of_pattern(entry, kavuah_list, real, settings),
        reawakened=find_reawakened_kavuahs(entry, kavuah_list, real, settings),
    )
    logging.info(
        f"Neuer Entry {entry}: {len(result.possible_new)} mögliche Kavuahs, "
        f"{len(result.broken)} gebrochen, {len(result.reawakened)} wieder aktiv"
    )
    return result
