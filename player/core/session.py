# player/core/session.py
"""
Хранилище данных сессии (ответы, счётчики, флаги вопроса).

Это и есть интерфейс «достать значение по пути или литерал»:
    session.get(scope, "score")            → значение из scope/сессии или сам литерал
    session.get(scope, "score", True)      → строго путь, нет значения → None
"""
from __future__ import annotations

import copy
import re
from typing import Any, Dict, Optional, Tuple

_MISSING = object()
_PLACEHOLDER = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")


# ───────── пути вида a.b.0.c ─────────

def lookup_path(data: Any, path: str) -> Tuple[bool, Any]:
    """
    Ищем значение по точечному пути в dict/list.
    Возвращает (нашли?, значение) - чтобы отличать «нет ключа» от None.
    """
    if not path:
        return False, None
    current = data
    for part in path.split("."):
        if isinstance(current, dict):
            if part not in current:
                return False, None
            current = current[part]
        elif isinstance(current, list):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return False, None
        else:
            return False, None
    return True, current


def assign_path(data: Dict[str, Any], path: str, value: Any) -> None:
    """Пишем значение по точечному пути, промежуточные dict создаём."""
    parts = path.split(".")
    current = data
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value


def render_value(value: Any) -> str:
    """Как значение подставляется в текст при интерполяции."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Session:
    """
    Данные сессии + точка восстановления (для «сброса» вопроса).
    Поиск значения: сначала цепочка scope (снизу вверх), потом данные сессии.
    """

    def __init__(self) -> None:
        self.data: Dict[str, Any] = {}
        self._restore_point: Optional[Dict[str, Any]] = None

    # --- чтение -----------------------------------------------------------

    def find(self, scope: Any, path: str) -> Tuple[bool, Any]:
        if scope is not None and hasattr(scope, "lookup"):
            found, value = scope.lookup(path)
            if found:
                return True, value
        return lookup_path(self.data, path)

    def get(self, scope: Any, key: Any, literal: bool = False) -> Any:
        """
        key не строка → возвращаем как есть (70, True, список ...).
        {{ path }} внутри строки → подставляем значения.
        literal=True  → строка - это путь, отдаём значение (или None).
        literal=False → если такой путь есть - значение, иначе сама строка.
        """
        if not isinstance(key, str):
            return key

        text = self.interpolate(scope, key) if "{{" in key else key
        found, value = self.find(scope, text)
        if literal:
            return value if found else None
        return value if found else text

    def interpolate(self, scope: Any, template: str) -> str:
        def _sub(m: "re.Match[str]") -> str:
            found, value = self.find(scope, m.group(1))
            return render_value(value) if found else ""

        return _PLACEHOLDER.sub(_sub, template)

    # --- запись -----------------------------------------------------------

    def set(self, path: str, value: Any) -> None:
        assign_path(self.data, path, value)

    def clear(self) -> None:
        self.data = {}
        self._restore_point = None

    # --- точка восстановления --------------------------------------------

    def create_restore_point(self) -> None:
        self._restore_point = copy.deepcopy(self.data)

    def restore(self) -> bool:
        """Вернуть данные к точке восстановления. Нет точки → False."""
        if self._restore_point is None:
            return False
        self.data = copy.deepcopy(self._restore_point)
        return True


session = Session()
