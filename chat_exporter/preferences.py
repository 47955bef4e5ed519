"""Persisted user preferences (a small YAML key/value file)."""

from pathlib import Path
from typing import Optional

import yaml

from .config import get_config_dir, normalize_bools
from .log import log_warn

CONVERT_LATEX = "convert_latex_delimiters"

DEFAULTS = {CONVERT_LATEX: True}


class PreferenceStore:
    """Key/value preferences backed by ``preferences.yaml``.

    Values are re-read on every ``get`` so a toggle from another process
    is seen by the next export.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else get_config_dir() / "preferences.yaml"

    def _read(self) -> dict:
        if not self.path.exists(): return {}
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            log_warn(f"Failed to read preferences {self.path}: {e}")
            return {}
        return normalize_bools(data) if isinstance(data, dict) else {}

    def get(self, key: str, default=None):
        if default is None:
            default = DEFAULTS.get(key)
        return self._read().get(key, default)

    def set(self, key: str, value) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)

    @property
    def convert_latex(self) -> bool:
        return bool(self.get(CONVERT_LATEX))

    def toggle_convert_latex(self) -> bool:
        value = not self.convert_latex
        self.set(CONVERT_LATEX, value)
        return value
