# player/core/validate_cfg.py
from __future__ import annotations
from typing import Any, Dict, Optional

COMMAND_DELIMITER = "::"


def _as_int(v, name, min_: Optional[int] = None, max_: Optional[int] = None) -> int:
    if isinstance(v, bool):
        raise ValueError(f"{name}: ожидается целое, получено {v!r}")
    try:
        iv = int(v)
    except Exception:
        raise ValueError(f"{name}: ожидается целое, получено {v!r}")
    if min_ is not None and iv < min_:
        raise ValueError(f"{name}: должно быть ≥ {min_} (получено {iv})")
    if max_ is not None and iv > max_:
        raise ValueError(f"{name}: должно быть ≤ {max_} (получено {iv})")
    return iv


def _as_bool(v, name) -> bool:
    if isinstance(v, bool):
        return v
    # допускаем 'true'/'false'/1/0 из yaml
    if isinstance(v, (int, float)) and v in (0, 1):
        return bool(v)
    if isinstance(v, str) and v.lower() in ("true", "false"):
        return v.lower() == "true"
    raise ValueError(f"{name}: должен быть true/false")


def validate_cfg(cfg: Dict[str, Any]) -> None:
    """Бросает ValueError с понятным текстом, если конфиг некорректен."""
    if not isinstance(cfg, dict):
        raise ValueError("корневой YAML должен быть объектом")

    # ─── defaults ───
    defaults = cfg.get("defaults", {})
    if not isinstance(defaults, dict):
        raise ValueError("defaults: должен быть объектом")
    if "command" in defaults:
        cmd = defaults["command"]
        if not isinstance(cmd, str) or not cmd.strip():
            raise ValueError("defaults.command: не должна быть пустой")
        if COMMAND_DELIMITER not in cmd:
            raise ValueError(f"defaults.command: ожидается вид 'ns::name', получено {cmd!r}")

    # ─── journal ───
    journal = cfg.get("journal", {})
    if not isinstance(journal, dict):
        raise ValueError("journal: должен быть объектом")
    if "max_entries" in journal:
        _as_int(journal["max_entries"], "journal.max_entries", 1)

    # ─── debug ───
    debug = cfg.get("debug", {})
    if debug and not isinstance(debug, dict):
        raise ValueError("debug: должен быть объектом")
    if "trace" in (debug or {}):
        _as_bool(debug["trace"], "debug.trace")
