import json
import logging
import os
from dataclasses import dataclass, asdict, fields


@dataclass
class Settings:
    """Halachische Einstellungen, die die Kavuah-Erkennung und die Flagged Dates steuern."""
    show_ohr_zeruah: bool = True
    keep_thirty_one: bool = True
    onah_beinunis_24_hours: bool = True
    number_months_ahead_to_warn: int = 12
    # Ta"z: Tag 30, 31 und Haflaga auch bei einem Entry dazwischen,
    # dazu jede nicht übertroffene längere Haflaga
    keep_longer_haflagah: bool = False
    dilug_chodesh_past_ends: bool = True
    haflaga_of_onahs: bool = False
    kavuah_diff_onahs: bool = False
    calc_kavuahs_on_new_entry: bool = True
    no_probs_after_entry: bool = True
    show_ignored_kavuahs: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})

    def to_dict(self) -> dict:
        return asdict(self)

    def is_same_settings(self, other: "Settings") -> bool:
        return other is not None and self.to_dict() == other.to_dict()


def _config_path():
    base = os.path.join(os.path.expanduser('~'), '.chashavshavon')
    os.makedirs(base, exist_ok=True)
    return os.path.join(base, 'chashavshavon_config.json')


def _defaults() -> dict:
    return {'settings': Settings().to_dict()}


def load_config(path: str = None) -> dict:
    path = path or _config_path()
    if not os.path.exists(path):
        # sensible defaults
        return _defaults()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logging.warning(f"Konfiguration {path} nicht lesbar, verwende Standardwerte: {e}")
        return _defaults()


def save_config(cfg: dict, path: str = None):
    path = path or _config_path()
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(cfg, f, ensure_ascii=False, indent=2)


def load_settings(path: str = None) -> Settings:
    return Settings.from_dict(load_config(path).get('settings'))


def save_settings(settings: Settings, path: str = None):
    cfg = load_config(path)
    cfg['settings'] = settings.to_dict()
    save_config(cfg, path)
