# src/chashavshavon/flagged_dates.py
import logging
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .config import Settings
from .kavuah import Kavuah, KavuahType, get_independent_iterations
from .models import Entry, NightDay, Onah, ProblemFlag, ProblemOnah, sort_key


class _Candidate(NamedTuple):
    onah: Onah
    description: str
    generic: bool                 # Onah Beinonis (kein Kavuah)
    source: Optional[int]         # Index des Entries in der echten Liste, None bei unabhängigen Kavuahs
    cancels_beinunis: bool = False
    ohr_zarua: bool = True        # bekommt auch ein Ohr-Zarua-Flag


def _other_onah(onah: Onah) -> Onah:
    other = NightDay.DAY if onah.night_day == NightDay.NIGHT else NightDay.NIGHT
    return Onah(onah.jdate, other)


def _onah_beinonis(entry: Entry, index: int, settings: Settings) -> List[_Candidate]:
    """Yom Hachodesh, Tag 30 (und 31) und Yom Haflagah eines Entries."""
    nd = entry.night_day
    found = [_Candidate(Onah(entry.date.add_months(1), nd), "Yom Hachodesh", True, index)]

    thirtieth = Onah(entry.date.add_days(29), nd)
    found.append(_Candidate(thirtieth, "Thirtieth Day (Onah Beinonis)", True, index))
    if settings.onah_beinunis_24_hours:
        found.append(_Candidate(_other_onah(thirtieth), "24 Hour Onah Beinonis of the Thirtieth Day", True, index,
                                ohr_zarua=False))
    if settings.keep_thirty_one:
        thirty_first = Onah(entry.date.add_days(30), nd)
        found.append(_Candidate(thirty_first, "Thirty First Day (Onah Beinonis)", True, index))
        if settings.onah_beinunis_24_hours:
            found.append(_Candidate(_other_onah(thirty_first), "24 Hour Onah Beinonis of the Thirty First Day",
                                    True, index, ohr_zarua=False))

    if entry.haflaga:
        found.append(_Candidate(Onah(entry.date.add_days(entry.haflaga), nd),
                                f"Yom Haflagah (of {entry.haflaga} days)", True, index))
    return found


def _longer_haflagas(real: Sequence[Entry]) -> List[_Candidate]:
    """Ta"z: jede frühere längere Haflaga, die später nie übertroffen wurde, gilt vom letzten Entry an weiter."""
    found: List[_Candidate] = []
    if len(real) < 2:
        return found
    last_index = len(real) - 1
    last = real[last_index]
    seen = set()
    for j in range(last_index):
        haflaga = real[j].haflaga
        if not haflaga or haflaga in seen or haflaga == last.haflaga:
            continue
        later = [e.haflaga for e in real[j + 1:] if e.haflaga]
        if all(h < haflaga for h in later):
            seen.add(haflaga)
            found.append(_Candidate(Onah(last.date.add_days(haflaga), last.night_day),
                                    f"Yom Haflagah (of {haflaga} days) which has not been overridden",
                                    True, last_index))
    return found


def _kavuah_flags(kavuah: Kavuah, real: Sequence[Entry], settings: Settings) -> List[_Candidate]:
    description = f"Kavuah {kavuah.to_string(hide_active=True)}"
    cancels = kavuah.cancels_onah_beinunis
    found: List[_Candidate] = []
    if not real:
        return found

    if kavuah.is_independent:
        last = real[-1]
        cutoff = last.date.add_months(settings.number_months_ahead_to_warn)
        for onah in get_independent_iterations(kavuah, cutoff, settings.dilug_chodesh_past_ends):
            found.append(_Candidate(onah, description, False, None, cancels))
        return found

    setting_abs = kavuah.setting_entry.date.abs
    for i, entry in enumerate(real):
        if entry.date.abs < setting_abs:
            continue
        onah = None
        if kavuah.kavuah_type in (KavuahType.HAFLAGAH, KavuahType.HAFLAGA_MAAYAN_PASUACH):
            onah = Onah(entry.date.add_days(kavuah.special_number), kavuah.night_day)
        elif kavuah.kavuah_type == KavuahType.DILUG_HAFLAGA:
            if entry.haflaga and entry.haflaga + kavuah.special_number > 0:
                onah = Onah(entry.date.add_days(entry.haflaga + kavuah.special_number), kavuah.night_day)
        elif kavuah.kavuah_type == KavuahType.HAFLAGA_ONAHS:
            onah = entry.onah.add_onahs(kavuah.special_number)
        if onah is not None:
            found.append(_Candidate(onah, description, False, i, cancels))
    return found


def _with_ohr_zarua(candidates: List[_Candidate]) -> List[_Candidate]:
    out: List[_Candidate] = []
    for c in candidates:
        out.append(c)
        if c.ohr_zarua:
            out.append(c._replace(onah=c.onah.previous, description=f"Ohr Zarua of the {c.description}",
                                  ohr_zarua=False))
    return out


def _superseded(c: _Candidate, real: Sequence[Entry], settings: Settings) -> bool:
    """Liegt zwischen dem Entry, aus dem das Flag stammt, und dem Flag schon ein neuerer Entry?"""
    if c.source is None:
        return c.onah.index <= real[-1].onah.index
    if c.generic and settings.keep_longer_haflagah:
        return False
    next_index = c.source + 1
    return next_index < len(real) and real[next_index].onah.index <= c.onah.index


def get_problem_onahs(real_entries: Sequence[Entry], kavuahs: Sequence[Kavuah],
                      settings: Optional[Settings] = None) -> List[ProblemOnah]:
    """
    Erzeugt die sortierte Liste aller Problem-Onahs aus den echten Entries und den Kavuahs.
    Mehrere Flags auf derselben Onah werden zu einer ProblemOnah zusammengefasst.
    """
    settings = settings or Settings()
    real = sorted(real_entries, key=sort_key)
    active = [k for k in kavuahs or [] if k.active and not k.ignore]

    generic: List[_Candidate] = []
    for i, entry in enumerate(real):
        generic += _onah_beinonis(entry, i, settings)
    if settings.keep_longer_haflagah:
        generic += _longer_haflagas(real)

    kavuah_based: List[_Candidate] = []
    for kavuah in active:
        kavuah_based += _kavuah_flags(kavuah, real, settings)

    candidates = generic + kavuah_based
    if settings.show_ohr_zeruah:
        candidates = _with_ohr_zarua(candidates)

    if settings.no_probs_after_entry:
        candidates = [c for c in candidates if not _superseded(c, real, settings)]

    # nur Kavuah-Flags, die selbst noch gelten, heben Onah Beinonis auf
    cancelled = {c.onah for c in candidates if not c.generic and c.cancels_beinunis}

    by_onah: Dict[Tuple[int, int], ProblemOnah] = {}
    for c in candidates:
        if c.generic and c.onah in cancelled:
            continue
        key = (c.onah.jdate.abs, int(c.onah.night_day))
        po = by_onah.get(key)
        if po is None:
            po = by_onah[key] = ProblemOnah(c.onah.jdate, c.onah.night_day)
        po.add_flag(ProblemFlag(c.onah.jdate, c.onah.night_day, c.description))

    probs = ProblemOnah.sort_prob_list(list(by_onah.values()))
    logging.debug(f"{len(probs)} Problem-Onahs aus {len(real)} Entries und {len(active)} Kavuahs")
    return probs
