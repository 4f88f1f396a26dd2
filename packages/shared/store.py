from __future__ import annotations

import json
import logging
from typing import Any, Optional

from packages.shared.config import AppConfig
from packages.shared.paths import config_path, ensure_app_dirs

log = logging.getLogger(__name__)

# Keys exposed through the key-value facade (get/set).
STORE_KEYS = ("work_limit_minutes", "break_limit_minutes", "api_token", "stimulus_mode")


class ConfigStore:
    def __init__(self) -> None:
        ensure_app_dirs()
        self._path = config_path()

    def load(self) -> AppConfig:
        if not self._path.exists():
            cfg = AppConfig()
            self.save(cfg)
            return cfg

        try:
            raw = self._path.read_text(encoding="utf-8")
            data: Any = json.loads(raw)
            return AppConfig.model_validate(data)
        except Exception:
            log.exception("Config at %s is unreadable, restoring defaults", self._path)
            cfg = AppConfig()
            self.save(cfg)
            return cfg

    def save(self, cfg: AppConfig) -> None:
        self._path.write_text(cfg.model_dump_json(indent=2), encoding="utf-8")

    def path(self) -> str:
        return str(self._path)

    def get(self, key: str) -> Optional[str]:
        if key not in STORE_KEYS:
            raise KeyError(key)
        value = getattr(self.load(), key)
        if value in (None, ""):
            return None
        return str(value)

    def set(self, key: str, value: object) -> AppConfig:
        """Validate and persist a single setting; returns the stored config."""
        if key not in STORE_KEYS:
            raise KeyError(key)
        data = self.load().model_dump()
        data[key] = value
        cfg = AppConfig.model_validate(data)
        self.save(cfg)
        return cfg
