from __future__ import annotations
import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from errors import AgeStatsError

# Top-level keys we expect to exist after merging with the defaults
REQUIRED_TOP = ["data", "display", "logging"]

DEFAULT_CONFIG: Dict[str, Any] = {
    "data": {
        # only the first sheet of a workbook is ever read
        "sheet_index": 0,
        # column D
        "column_index": 3,
        "min_age": 1,
        "max_age": 150,
    },
    "display": {
        "label_format": "{age} år",
        "people_unit": "personer",
        "mean_decimals": 2,
        "timestamp_format": "%d.%m.%Y %H:%M:%S",
        "title": "Aldersfordeling i Datasettet",
        "total_caption": "Total: {total} {unit}",
        "mean_caption": "Gjennomsnittsalder: {mean} år",
        "reference_caption": "Gjennomsnitt: {mean} år",
        "footnote": "Den røde stiplete linjen viser gjennomsnittsalderen ({mean} år)",
        "default_source_caption": "Viser eksempeldata",
        "upload_source_caption": "Data fra: {file_name} (lastet opp {loaded_at})",
        "no_valid_data_notice": "Ingen gyldige aldersdata funnet i filen. Sjekk at alderen står i kolonne D.",
        "decode_error_notice": "Kunne ikke lese filen. Sørg for at det er en gyldig Excel-fil.",
    },
    "logging": {
        "level": "INFO",
        "log_file": None,
        "format_style": "detailed",
        "verbosity": 1,
    },
}


class ConfigError(AgeStatsError):
    pass


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base or {})
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class Config:
    """
    Merges a raw YAML mapping over DEFAULT_CONFIG, validates, and exposes:
      • data: which column to read and the accepted age range
      • display: label formats, captions and notice texts
      • logging: level / file / format for utils.logger.setup_logging
    """

    def __init__(self, raw: Optional[Dict[str, Any]] = None):
        self._raw = raw or {}
        self._merged = _deep_merge(DEFAULT_CONFIG, self._raw)
        self._validate()

        self.data: Dict[str, Any] = self._merged["data"]
        self.display: Dict[str, Any] = self._merged["display"]
        self.logging: Dict[str, Any] = self._merged["logging"]

    # -----------------------------
    # internal helpers
    # -----------------------------
    def _validate(self) -> None:
        for key in REQUIRED_TOP:
            if not isinstance(self._merged.get(key), dict):
                raise ConfigError(f"Missing top-level key: {key}")

        data = self._merged["data"]
        if data.get("sheet_index") != 0:
            raise ConfigError("data.sheet_index must be 0; only the first sheet is read.")
        if not _is_int(data.get("column_index")) or data["column_index"] < 0:
            raise ConfigError("data.column_index must be a non-negative integer.")
        min_age, max_age = data.get("min_age"), data.get("max_age")
        if not (_is_int(min_age) and _is_int(max_age)) or not (1 <= min_age <= max_age):
            raise ConfigError("data.min_age and data.max_age must be integers with 1 <= min_age <= max_age.")

        display = self._merged["display"]
        if "{age}" not in str(display.get("label_format", "")):
            raise ConfigError("display.label_format must contain '{age}'.")
        if not _is_int(display.get("mean_decimals")) or display["mean_decimals"] < 0:
            raise ConfigError("display.mean_decimals must be a non-negative integer.")

    # -----------------------------
    # public API
    # -----------------------------
    def dump_effective(self) -> str:
        """Pretty JSON of effective config (handy for logs)."""
        return json.dumps(self._merged, indent=2, ensure_ascii=False)

    @property
    def raw(self) -> Dict[str, Any]:
        return self._raw


def load_config(path: str | Path | None = None) -> Config:
    if path is None:
        return Config()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(raw).__name__}.")
    return Config(raw)
