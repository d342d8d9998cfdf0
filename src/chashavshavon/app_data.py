# src/chashavshavon/app_data.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .config import Settings
from .data import Database
from .entry_list import EntryList
from .kavuah import Kavuah
from .models import Entry, ProblemOnah, TaharaEvent


@dataclass
class AppData:
    """
    Alle Daten eines Benutzers. Wird explizit an die Aufrufer weitergereicht;
    nach jeder Änderung ruft man update_probs() auf.
    """
    settings: Settings = field(default_factory=Settings)
    entry_list: EntryList = field(default_factory=EntryList)
    kavuah_list: List[Kavuah] = field(default_factory=list)
    problem_onahs: List[ProblemOnah] = field(default_factory=list)
    tahara_events: List[TaharaEvent] = field(default_factory=list)

    def update_probs(self) -> List[ProblemOnah]:
        """Haflagas und Flagged Dates neu berechnen."""
        self.entry_list.calculate_haflagas()
        if len(self.entry_list) > 0:
            self.problem_onahs = self.entry_list.get_problem_onahs(self.kavuah_list, self.settings)
        else:
            self.problem_onahs = []
        return self.problem_onahs

    def add_or_remove_item(self, item: Optional[Union[Entry, Kavuah, TaharaEvent]], remove: bool = False):
        if isinstance(item, Entry):
            if remove:
                self.entry_list.remove(item)
            else:
                self.entry_list.add(item)
        elif isinstance(item, Kavuah):
            if remove:
                if item in self.kavuah_list:
                    self.kavuah_list.remove(item)
            elif item not in self.kavuah_list:
                self.kavuah_list.append(item)
        elif isinstance(item, TaharaEvent):
            if remove:
                if item in self.tahara_events:
                    self.tahara_events.remove(item)
            elif item not in self.tahara_events:
                self.tahara_events.append(item)
                TaharaEvent.sort_list(self.tahara_events)
        self.update_probs()

    @classmethod
    def from_database(cls, db: Database, settings: Optional[Settings] = None) -> "AppData":
        entry_list = db.load_entry_list()
        kavuah_list = db.load_kavuahs(entry_list)
        app_data = cls(settings or Settings(), entry_list, kavuah_list, tahara_events=db.load_tahara_events())
        app_data.update_probs()
        logging.info(
            f"AppData geladen: {len(entry_list)} Entries, {len(kavuah_list)} Kavuahs, "
            f"{len(app_data.problem_onahs)} Problem-Onahs, {len(app_data.tahara_events)} Tahara-Events"
        )
        return app_data
