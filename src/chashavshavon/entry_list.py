# src/chashavshavon/entry_list.py
from typing import Iterator, List, Optional, Union

from .exceptions import InvalidArgument
from .flagged_dates import get_problem_onahs
from .jcal import JDate
from .models import Entry, NightDay, Onah, sort_key


class EntryList:
    """
    Geordnete Sammlung von Entries ohne Duplikate (gleiche Onah = gleicher Entry).
    Nach jeder Änderung muss der Aufrufer calculate_haflagas() aufrufen.
    """

    def __init__(self, entries: Optional[List[Entry]] = None):
        self._entries: List[Entry] = []
        for entry in entries or []:
            self.add(entry)

    def add(self, entry: Entry) -> int:
        """Hängt den Entry an und gibt seinen Index zurück, -1 wenn er schon vorhanden ist."""
        if not isinstance(entry, Entry):
            raise InvalidArgument("Only objects of type Entry can be added to the EntryList")
        if self.contains(entry):
            return -1
        self._entries.append(entry)
        return len(self._entries) - 1

    def remove(self, arg: Union[int, Entry]) -> Optional[Entry]:
        """Entfernt per Index oder den ersten gleichen Entry. Nicht gefunden -> None."""
        if isinstance(arg, Entry):
            for i, e in enumerate(self._entries):
                if e is arg or e.is_same_entry(arg):
                    return self._entries.pop(i)
            return None
        if isinstance(arg, int) and not isinstance(arg, bool):
            if 0 <= arg < len(self._entries):
                return self._entries.pop(arg)
            return None
        raise InvalidArgument("EntryList.remove accepts either an Entry or the index of the Entry to remove")

    def contains(self, entry: Entry) -> bool:
        return any(e is entry or e.is_same_entry(entry) for e in self._entries)

    def __contains__(self, entry) -> bool:
        return isinstance(entry, Entry) and self.contains(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> Entry:
        return self._entries[index]

    @property
    def descending(self) -> List[Entry]:
        """Neueste zuerst, als Kopie."""
        return list(reversed(EntryList.sort_entries(list(self._entries))))

    @property
    def real_entry_list(self) -> List[Entry]:
        """Chronologisch sortiert, nur Entries die für Flagged Dates zählen."""
        return EntryList.sort_entries([e for e in self._entries if not e.ignore_for_flagged_dates])

    def last_entry(self) -> Optional[Entry]:
        latest = None
        for entry in self._entries:
            if latest is None or entry.date.abs > latest.date.abs:
                latest = entry
        return latest

    def last_regular_entry(self) -> Optional[Entry]:
        real = self.real_entry_list
        return real[-1] if real else None

    def calculate_haflagas(self):
        real = self.real_entry_list
        for entry in self._entries:
            if entry.ignore_for_flagged_dates:
                entry.haflaga = None
        previous = None
        for entry in real:
            entry.set_haflaga(previous)
            previous = entry

    def get_problem_onahs(self, kavuah_list, settings):
        return get_problem_onahs(self.real_entry_list, kavuah_list, settings)

    @staticmethod
    def sort_entries(entries: List[Entry]) -> List[Entry]:
        entries.sort(key=sort_key)
        return entries

    @staticmethod
    def get_sample_entry_list() -> List[Entry]:
        today = JDate.today().abs
        return [
            Entry(Onah(JDate(today - 90), NightDay.NIGHT), 1),
            Entry(Onah(JDate(today - 60), NightDay.NIGHT), 2),
            Entry(Onah(JDate(today - 30), NightDay.NIGHT), 3),
        ]
