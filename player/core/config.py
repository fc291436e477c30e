# player/core/config.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings

from player.core.validate_cfg import _as_bool, validate_cfg

DEFAULT_COMMAND = "app::noop"


class Settings(BaseSettings):
    # путь к основному YAML (можно переопределить переменной окружения CONFIG_FILE)
    config_file: str = Field(default="config.yaml", validation_alias="CONFIG_FILE")

    # документ вопроса (можно переопределить переменной окружения QUESTION_FILE)
    question_file: str = Field(default="data/question.yaml", validation_alias="QUESTION_FILE")

    # внутреннее хранилище загруженного YAML
    _cfg: Dict[str, Any] = PrivateAttr(default_factory=dict)
    _config_path: Path | None = PrivateAttr(default=None)

    # ───────── пути ─────────
    @property
    def config_path(self) -> Path:
        if self._config_path is None:
            p = Path(self.config_file)
            if not p.is_absolute():
                p = Path.cwd() / p
            self._config_path = p
        return self._config_path

    @property
    def question_path(self) -> Path:
        p = Path(self.question_file)
        if not p.is_absolute():
            p = Path.cwd() / p
        return p

    # ───────── YAML cfg ─────────
    @property
    def cfg(self) -> Dict[str, Any]:
        return self._cfg

    def load_yaml_config(self) -> None:
        p = self.config_path
        if p.exists():
            with open(p, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            validate_cfg(data)  # выбросит ValueError, если что-то не так
            self._cfg = data
        else:
            self._cfg = {}

    # ───────── удобные секции ─────────
    @property
    def defaults(self) -> Dict[str, Any]:
        return self._cfg.get("defaults", {})

    @property
    def default_command(self) -> Dict[str, Any]:
        """Дескриптор команды по умолчанию: {command: 'ns::name'}."""
        return {"command": self.defaults.get("command", DEFAULT_COMMAND)}

    @property
    def journal_max_entries(self) -> int:
        return int(self._cfg.get("journal", {}).get("max_entries", 1000))

    @property
    def debug(self) -> Dict[str, Any]:
        return self._cfg.get("debug", {})

    @property
    def debug_trace(self) -> bool:
        # 'false' и 0 из yaml - это False
        return _as_bool(self.debug.get("trace", False), "debug.trace")


settings = Settings()
