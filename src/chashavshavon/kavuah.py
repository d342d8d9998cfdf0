# src/chashavshavon/kavuah.py
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from .exceptions import InvalidArgument
from .jcal import JDate, DOW_ENG
from .models import Entry, NightDay, Onah


class KavuahType(Enum):
    HAFLAGAH = "haflagah"
    DAY_OF_MONTH = "day_of_month"
    DAY_OF_WEEK = "day_of_week"
    SIRUG = "sirug"
    DILUG_HAFLAGA = "dilug_haflaga"
    DILUG_DAY_OF_MONTH = "dilug_day_of_month"
    HAFLAGA_MAAYAN_PASUACH = "haflaga_maayan_pasuach"
    DAY_OF_MONTH_MAAYAN_PASUACH = "day_of_month_maayan_pasuach"
    HAFLAGA_ONAHS = "haflaga_onahs"


# Diese Typen hängen nicht davon ab, dass die Entries direkt aufeinander folgen
INDEPENDENT_TYPES = (
    KavuahType.DAY_OF_MONTH,
    KavuahType.DAY_OF_MONTH_MAAYAN_PASUACH,
    KavuahType.DAY_OF_WEEK,
    KavuahType.DILUG_DAY_OF_MONTH,
    KavuahType.SIRUG,
)

_NUMBER_DEFINITIONS = {
    KavuahType.DAY_OF_MONTH: "Day of each Jewish Month",
    KavuahType.DAY_OF_MONTH_MAAYAN_PASUACH: "Day of each Jewish Month",
    KavuahType.DAY_OF_WEEK: "Number of days between entries (Haflaga)",
    KavuahType.HAFLAGAH: "Number of days between entries (Haflaga)",
    KavuahType.HAFLAGA_MAAYAN_PASUACH: "Number of days between entries (Haflaga)",
    KavuahType.DILUG_DAY_OF_MONTH: "Number of days to add/subtract each month",
    KavuahType.DILUG_HAFLAGA: "Number of days to add/subtract to Haflaga each Entry",
    KavuahType.HAFLAGA_ONAHS: "Number of Onahs between entries (Haflaga of Shulchan Aruch Harav)",
    KavuahType.SIRUG: "Number of months separating the Entries",
}

_TYPE_TEXTS = {
    KavuahType.DAY_OF_MONTH: "Day of Month",
    KavuahType.DAY_OF_MONTH_MAAYAN_PASUACH: "Day Of Month with Ma'ayan Pasuach",
    KavuahType.DAY_OF_WEEK: "Day of week",
    KavuahType.DILUG_DAY_OF_MONTH: '"Dilug" of Day Of Month',
    KavuahType.DILUG_HAFLAGA: '"Dilug" of Haflaga',
    KavuahType.HAFLAGA_ONAHS: "Haflaga of Onahs",
    KavuahType.HAFLAGAH: "Haflaga",
    KavuahType.HAFLAGA_MAAYAN_PASUACH: "Haflaga with Ma'ayan Pasuach",
    KavuahType.SIRUG: "Sirug",
}


def to_suffixed(num: int) -> str:
    if 10 <= num % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(num % 10, "th")
    return f"{num}{suffix}"


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


@dataclass(eq=False)
class Kavuah:
    """
    Ein festgestelltes Muster. special_number hat je nach Typ eine eigene Bedeutung:
      HAFLAGAH / HAFLAGA_MAAYAN_PASUACH       - Anzahl Tage zwischen den Entries
      DAY_OF_MONTH / DAY_OF_MONTH_MAAYAN_PASUACH - Tag des jüdischen Monats
      DAY_OF_WEEK                             - Anzahl Tage zwischen den Entries (Vielfaches von 7)
      SIRUG                                   - Anzahl Monate zwischen den Entries
      DILUG_HAFLAGA / DILUG_DAY_OF_MONTH      - Tage, die jedes Mal dazukommen (auch negativ)
      HAFLAGA_ONAHS                           - Anzahl Onahs zwischen den Entries
    """
    kavuah_type: KavuahType
    setting_entry: Entry          # der Entry, mit dem das Muster feststand
    special_number: int
    cancels_onah_beinunis: bool = True
    active: bool = True
    ignore: bool = False
    kavuah_id: Optional[int] = None    # db-Primärschlüssel

    def __post_init__(self):
        if not isinstance(self.kavuah_type, KavuahType):
            raise InvalidArgument("kavuah_type must be supplied.")
        if not isinstance(self.setting_entry, Entry):
            raise InvalidArgument("setting_entry must be supplied.")
        if self.kavuah_type in (KavuahType.DILUG_HAFLAGA, KavuahType.DILUG_DAY_OF_MONTH) and not self.special_number:
            raise InvalidArgument("A Dilug Kavuah needs a non-zero number of days.")

    @property
    def is_independent(self) -> bool:
        return self.kavuah_type in INDEPENDENT_TYPES

    @property
    def has_id(self) -> bool:
        return bool(self.kavuah_id)

    @property
    def night_day(self) -> NightDay:
        return self.setting_entry.night_day

    def is_matching_kavuah(self, other: "Kavuah") -> bool:
        return (
            self.kavuah_type == other.kavuah_type
            and self.setting_entry.onah.is_same_onah(other.setting_entry.onah)
            and self.special_number == other.special_number
        )

    def is_entry_in_pattern(self, entry: Entry, entries: Sequence[Entry], settings=None,
                            previous: Optional[Entry] = None) -> bool:
        """
        Passt der Entry in dieses Muster?
        entries ist die chronologische Liste der echten Entries. Für Sirug und Dilug Haflaga wird
        der vorherige Entry gebraucht; wird er nicht mitgegeben, kommt er aus seiner Position in entries.
        """
        if entry.night_day != self.setting_entry.night_day:
            return False
        kt = self.kavuah_type
        if kt in (KavuahType.HAFLAGAH, KavuahType.HAFLAGA_MAAYAN_PASUACH):
            return entry.haflaga == self.special_number
        if kt in (KavuahType.DAY_OF_MONTH, KavuahType.DAY_OF_MONTH_MAAYAN_PASUACH):
            return entry.day == self.special_number
        if kt in (KavuahType.SIRUG, KavuahType.DILUG_HAFLAGA):
            if previous is None:
                previous = previous_entry(entry, entries)
            if previous is None:
                return False
            if kt == KavuahType.SIRUG:
                return (
                    entry.day == self.setting_entry.day
                    and previous.date.diff_months(entry.date) == self.special_number
                )
            return (
                entry.haflaga is not None
                and previous.haflaga is not None
                and entry.haflaga == previous.haflaga + self.special_number
            )
        if kt in (KavuahType.DAY_OF_WEEK, KavuahType.DILUG_DAY_OF_MONTH):
            past_ends = settings.dilug_chodesh_past_ends if settings is not None else True
            iterations = get_independent_iterations(self, entry.date, past_ends)
            return any(entry.onah.is_same_onah(o) for o in iterations)
        return False

    @property
    def special_number_matches_entry(self) -> bool:
        """Prüft grob, ob special_number zum Setting-Entry passt."""
        if not self.special_number:
            return False
        kt = self.kavuah_type
        if kt in (KavuahType.HAFLAGAH, KavuahType.HAFLAGA_MAAYAN_PASUACH):
            return self.special_number > 0 and (
                not self.setting_entry.haflaga or self.special_number == self.setting_entry.haflaga
            )
        if kt in (KavuahType.DAY_OF_MONTH, KavuahType.DAY_OF_MONTH_MAAYAN_PASUACH):
            return 0 < self.special_number <= 30 and self.special_number == self.setting_entry.day
        if kt == KavuahType.HAFLAGA_ONAHS:
            return self.special_number > 0
        return True

    def __str__(self):
        return self.to_string()

    def to_string(self, hide_active: bool = False) -> str:
        txt = ""
        if not hide_active and not self.active:
            txt = "[INACTIVE] "
        if self.ignore:
            txt = "[IGNORED] "
        txt += "Night-time " if self.night_day == NightDay.NIGHT else "Day-time "
        num = self.special_number
        kt = self.kavuah_type
        if kt == KavuahType.HAFLAGAH:
            txt += f"every {num} days"
        elif kt == KavuahType.DAY_OF_MONTH:
            txt += f"on every {to_suffixed(num)} day of the Jewish Month"
        elif kt == KavuahType.DAY_OF_WEEK:
            txt += (f"on the {DOW_ENG[self.setting_entry.day_of_week]} "
                    f"of every {to_suffixed(num // 7)} week")
        elif kt == KavuahType.SIRUG:
            txt += f"on the {to_suffixed(self.setting_entry.day)} day of every {to_suffixed(num)} month"
        elif kt == KavuahType.HAFLAGA_MAAYAN_PASUACH:
            txt += f"on every {num} days (through Ma'ayan Pasuach)"
        elif kt == KavuahType.DAY_OF_MONTH_MAAYAN_PASUACH:
            txt += f"on the {to_suffixed(num)} day of the Jewish Month (through Ma'ayan Pasuach)"
        elif kt == KavuahType.DILUG_HAFLAGA:
            txt += (f'of "Dilug Haflaga" in the interval pattern of '
                    f'"{"subtract" if num < 0 else "add"} {abs(num)} days"')
        elif kt == KavuahType.DILUG_DAY_OF_MONTH:
            txt += (f'of "Dilug Yom Hachodesh" in the interval pattern of '
                    f'"{"subtract" if num < 0 else "add"} {abs(num)} days"')
        elif kt == KavuahType.HAFLAGA_ONAHS:
            txt += f"every {num} Onahs"
        return f"{txt}."

    def to_long_string(self) -> str:
        txt = self.to_string()
        txt += f"\nSetting Entry: {self.setting_entry.to_long_string()}"
        if self.cancels_onah_beinunis:
            txt += '\nThis Kavuah cancels the "Onah Beinonis" Flagged Dates.'
        return txt

    @staticmethod
    def get_default_special_number(setting_entry: Entry, kavuah_type: KavuahType,
                                   entries: Sequence[Entry]) -> int:
        """entries muss chronologisch sortiert sein."""
        if setting_entry.haflaga and kavuah_type in (KavuahType.HAFLAGAH, KavuahType.HAFLAGA_MAAYAN_PASUACH):
            return setting_entry.haflaga
        if kavuah_type in (KavuahType.DAY_OF_MONTH, KavuahType.DAY_OF_MONTH_MAAYAN_PASUACH):
            return setting_entry.day
        if kavuah_type == KavuahType.HAFLAGA_ONAHS:
            previous = previous_entry(setting_entry, entries)
            if previous is not None:
                return previous.get_onah_differential(setting_entry)
        return 0

    @staticmethod
    def get_number_definition(kavuah_type: KavuahType) -> str:
        return _NUMBER_DEFINITIONS.get(kavuah_type, "Kavuah Defining Number")

    @staticmethod
    def get_kavuah_type_text(kavuah_type: KavuahType) -> Optional[str]:
        return _TYPE_TEXTS.get(kavuah_type)


def previous_entry(entry: Entry, entries: Sequence[Entry]) -> Optional[Entry]:
    for i, e in enumerate(entries):
        if e is entry or e.is_same_entry(entry):
            return entries[i - 1] if i > 0 else None
    return None


def get_independent_iterations(kavuah: Kavuah, jdate: JDate, dilug_chodesh_past_ends: bool = True) -> List[Onah]:
    """
    Die Onahs, auf die nach dem Muster eines unabhängigen Kavuah ein Entry fallen sollte,
    nach dem Setting-Entry bis jdate. Bei Yom Hachodesh, Sirug und Wochentag zählt auch
    die erste Iteration an oder nach jdate noch mit.
    """
    if not kavuah.is_independent:
        return []
    if kavuah.kavuah_type == KavuahType.DAY_OF_WEEK:
        return get_day_of_week_iterations(kavuah, jdate)
    if kavuah.kavuah_type == KavuahType.DILUG_DAY_OF_MONTH:
        return get_dilug_day_of_month_iterations(kavuah, jdate, dilug_chodesh_past_ends)

    # Sirug springt mehrere Monate, Yom Hachodesh jeweils einen
    step = kavuah.special_number if kavuah.kavuah_type == KavuahType.SIRUG else 1
    iterations: List[Onah] = []
    if step <= 0:
        return iterations
    setting_date = kavuah.setting_entry.date
    next_iteration = setting_date
    i = 0
    while next_iteration.abs < jdate.abs:
        i += 1
        next_iteration = setting_date.add_months(step * i)
        iterations.append(Onah(next_iteration, kavuah.night_day))
    return iterations


def get_day_of_week_iterations(kavuah: Kavuah, jdate: JDate) -> List[Onah]:
    iterations: List[Onah] = []
    if kavuah.kavuah_type != KavuahType.DAY_OF_WEEK or kavuah.special_number <= 0:
        return iterations
    next_iteration = kavuah.setting_entry.date
    while next_iteration.abs < jdate.abs:
        next_iteration = next_iteration.add_days(kavuah.special_number)
        iterations.append(Onah(next_iteration, kavuah.night_day))
    return iterations


def get_dilug_day_of_month_iterations(kavuah: Kavuah, jdate: JDate,
                                      dilug_chodesh_past_ends: bool = True) -> List[Onah]:
    iterations: List[Onah] = []
    if kavuah.kavuah_type != KavuahType.DILUG_DAY_OF_MONTH:
        return iterations
    setting_date = kavuah.setting_entry.date
    i = 1
    while True:
        next_iteration = setting_date.add_months(i).add_days(kavuah.special_number * i)
        if next_iteration.abs > jdate.abs or next_iteration.abs <= setting_date.abs:
            break
        # Ohne dilug_chodesh_past_ends darf die Dilug nicht in einen anderen Monat rutschen:
        # positive Dilug und kleinerer Tag (bzw. umgekehrt) heißt, der Monat ist schon vorbei.
        if not dilug_chodesh_past_ends and \
                _sign(kavuah.setting_entry.day - next_iteration.day) == _sign(kavuah.special_number):
            break
        iterations.append(Onah(next_iteration, kavuah.night_day))
        i += 1
    return iterations
