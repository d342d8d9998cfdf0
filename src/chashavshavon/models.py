# src/chashavshavon/models.py
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Tuple

from .exceptions import InvalidArgument
from .jcal import JDate


class NightDay(IntEnum):
    """Nacht kommt im jüdischen Tag zuerst, daher sortiert NIGHT (-1) vor DAY (1)."""
    NIGHT = -1
    DAY = 1


def sort_key(item) -> Tuple[int, int]:
    """Chronologischer Sortierschlüssel für alles, was jdate und night_day hat."""
    return item.jdate.abs, int(item.night_day)


@dataclass(frozen=True)
class Onah:
    """Die Nacht- oder Tageshälfte eines jüdischen Datums."""
    jdate: JDate
    night_day: NightDay

    def __post_init__(self):
        if not isinstance(self.jdate, JDate):
            raise InvalidArgument("jdate must be supplied.")
        if self.night_day not in (NightDay.NIGHT, NightDay.DAY):
            raise InvalidArgument("night_day must be supplied.")
        # -1/1 als int werden zum Enum normalisiert
        object.__setattr__(self, "night_day", NightDay(self.night_day))

    def is_same_onah(self, other: "Onah") -> bool:
        return self.jdate == other.jdate and self.night_day == other.night_day

    @property
    def previous(self) -> "Onah":
        if self.night_day == NightDay.DAY:
            return Onah(self.jdate, NightDay.NIGHT)
        return Onah(self.jdate.add_days(-1), NightDay.DAY)

    @property
    def next(self) -> "Onah":
        if self.night_day == NightDay.DAY:
            return Onah(self.jdate.add_days(1), NightDay.NIGHT)
        return Onah(self.jdate, NightDay.DAY)

    def add_onahs(self, number: int) -> "Onah":
        """Erst ganze Tage (2 Onahs pro Tag), dann höchstens ein halber Schritt vor oder zurück."""
        if not number:
            return self
        full_days = int(number / 2)
        onah = Onah(self.jdate.add_days(full_days), self.night_day)
        rest = number - full_days * 2
        if rest > 0:
            onah = onah.next
        elif rest < 0:
            onah = onah.previous
        return onah

    @property
    def index(self) -> int:
        # fortlaufende Onah-Nummer, Nacht vor Tag
        return self.jdate.abs * 2 + (0 if self.night_day == NightDay.NIGHT else 1)

    def __str__(self):
        return f"{'Night' if self.night_day == NightDay.NIGHT else 'Day'} of {self.jdate}"


@dataclass(eq=False)
class Entry:
    """Eine Beobachtung (Periode) auf einer bestimmten Onah."""
    onah: Onah
    entry_id: Optional[int] = None                 # db-Primärschlüssel
    ignore_for_flagged_dates: bool = False
    ignore_for_kavuah: bool = False
    comments: str = ""
    haflaga: Optional[int] = field(default=None, init=False)   # wird von EntryList berechnet

    def __post_init__(self):
        if not isinstance(self.onah, Onah):
            raise InvalidArgument("onah must be supplied.")

    @property
    def date(self) -> JDate:
        return self.onah.jdate

    @property
    def night_day(self) -> NightDay:
        return self.onah.night_day

    @property
    def day(self) -> int:
        return self.date.day

    @property
    def month(self) -> int:
        return self.date.month

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def day_of_week(self) -> int:
        return self.date.day_of_week

    @property
    def jdate(self) -> JDate:
        return self.onah.jdate

    @property
    def has_id(self) -> bool:
        return bool(self.entry_id)

    def set_haflaga(self, previous: Optional["Entry"]):
        """Haflaga = Anzahl Tage seit dem vorherigen echten Entry."""
        if previous is None:
            self.haflaga = None
            return
        self.haflaga = previous.date.diff_days(self.date)

    def is_same_entry(self, other: "Entry") -> bool:
        return self.onah.is_same_onah(other.onah)

    def get_onah_differential(self, other: "Entry") -> int:
        """Anzahl Onahs von diesem Entry bis zum anderen (negativ, wenn der andere früher ist)."""
        return other.onah.index - self.onah.index

    def __str__(self):
        txt = f"{'Night' if self.night_day == NightDay.NIGHT else 'Day'}-time entry on {self.date}"
        if self.haflaga:
            txt += f" [Haflaga of {self.haflaga}]"
        return txt

    def to_long_string(self) -> str:
        txt = str(self)
        if self.ignore_for_flagged_dates:
            txt += "\nNOTE: This Entry is not considered for flagged dates."
        if self.ignore_for_kavuah:
            txt += "\nNOTE: This Entry is ignored when calculating Kavuahs."
        if self.comments:
            txt += f"\nComments: {self.comments}"
        return txt


@dataclass(frozen=True)
class ProblemFlag:
    """Ein einzelner Grund, warum eine Onah beachtet werden muss."""
    jdate: JDate
    night_day: NightDay
    description: str

    def __post_init__(self):
        if not isinstance(self.jdate, JDate):
            raise InvalidArgument("jdate must be supplied.")
        if self.night_day not in (NightDay.NIGHT, NightDay.DAY):
            raise InvalidArgument("night_day must be supplied.")
        if not self.description:
            raise InvalidArgument("description must be supplied.")
        object.__setattr__(self, "night_day", NightDay(self.night_day))

    @property
    def onah(self) -> Onah:
        return Onah(self.jdate, self.night_day)

    def is_same_prob(self, other: "ProblemFlag") -> bool:
        return (
            self.jdate == other.jdate
            and self.night_day == other.night_day
            and self.description == other.description
        )

    def __str__(self):
        return self.description


@dataclass
class ProblemOnah:
    """Alle Flags einer einzigen Onah."""
    jdate: JDate
    night_day: NightDay
    flags: List[ProblemFlag] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.jdate, JDate):
            raise InvalidArgument("jdate must be supplied.")
        if self.night_day not in (NightDay.NIGHT, NightDay.DAY):
            raise InvalidArgument("night_day must be supplied.")
        self.night_day = NightDay(self.night_day)

    @property
    def onah(self) -> Onah:
        return Onah(self.jdate, self.night_day)

    def is_same_onah(self, other) -> bool:
        return self.jdate == other.jdate and self.night_day == other.night_day

    def add_flag(self, flag: ProblemFlag) -> bool:
        if any(f.is_same_prob(flag) for f in self.flags):
            return False
        self.flags.append(flag)
        return True

    def is_same_prob(self, other: "ProblemOnah") -> bool:
        """Gleiche Onah und alle eigenen Flags sind auch im anderen enthalten."""
        return self.is_same_onah(other) and all(
            any(f.is_same_prob(of) for of in other.flags) for f in self.flags
        )

    def __str__(self):
        # Die Nacht gehört zum bürgerlichen Vortag
        goy_date = self.jdate.add_days(-1).to_pydate() if self.night_day == NightDay.NIGHT else self.jdate.to_pydate()
        period = "night" if self.night_day == NightDay.NIGHT else "day"
        lines = "".join(f"\n  ►  {f}" for f in self.flags)
        return f"The {period} of {self.jdate} ({goy_date.isoformat()}) is the:{lines}"

    @staticmethod
    def sort_prob_list(probs: List["ProblemOnah"]) -> List["ProblemOnah"]:
        probs.sort(key=sort_key)
        return probs

    @staticmethod
    def get_probs_for_date(jdate: JDate, probs: List["ProblemOnah"]) -> List["ProblemOnah"]:
        return [po for po in probs or [] if po.jdate == jdate]


class TaharaEventType(IntEnum):
    """Die Zahlen werden so in der Datenbank gespeichert."""
    HEFSEK = 1
    BEDIKA = 2
    SHAILAH = 4
    MIKVAH = 8


_TAHARA_EVENT_TEXTS = {
    TaharaEventType.HEFSEK: "Hefsek Tahara",
    TaharaEventType.BEDIKA: "Bedika",
    TaharaEventType.SHAILAH: "Shailah",
    TaharaEventType.MIKVAH: "Mikvah",
}


@dataclass(eq=False)
class TaharaEvent:
    """Hefsek Tahara, Bedika, Shailah oder Mikvah an einem Tag. Für die Flagged Dates ohne Bedeutung."""
    jdate: JDate
    tahara_event_type: TaharaEventType
    tahara_event_id: Optional[int] = None     # db-Primärschlüssel

    def __post_init__(self):
        if not isinstance(self.jdate, JDate):
            raise InvalidArgument("jdate must be supplied.")
        if self.tahara_event_type not in _TAHARA_EVENT_TEXTS:
            raise InvalidArgument("tahara_event_type must be supplied.")
        self.tahara_event_type = TaharaEventType(self.tahara_event_type)

    @property
    def has_id(self) -> bool:
        return bool(self.tahara_event_id)

    def to_type_string(self) -> str:
        return TaharaEvent.to_tahara_event_type_string(self.tahara_event_type)

    def __str__(self):
        return f"{self.to_type_string()} on {self.jdate}"

    @staticmethod
    def sort_list(events: List["TaharaEvent"]) -> List["TaharaEvent"]:
        events.sort(key=lambda te: te.jdate.abs)
        return events

    @staticmethod
    def to_tahara_event_type_string(tahara_event_type) -> Optional[str]:
        return _TAHARA_EVENT_TEXTS.get(tahara_event_type)
