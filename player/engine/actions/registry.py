# player/engine/actions/registry.py
from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional

# сигнатура обработчика действия: handler(scope, descriptor, root_scope)
ActionHandler = Callable[[Any, Any, Any], None]


class RegistryFrozenError(RuntimeError):
    """Попытка зарегистрировать обработчик после старта."""


class HandlerRegistry:
    """
    Простой in-memory реестр «ключ → обработчик».

    Используем для:
    - реестра действий (type → handler);
    - таблицы команд exec (ns::name → handler).

    После freeze() реестр только читается - блокировки на чтении не нужны,
    но регистрация до старта может идти из разных мест, поэтому lock оставляем.
    """

    def __init__(self, label: str = "actions") -> None:
        self.label = label
        self._handlers: Dict[str, ActionHandler] = {}
        self._lock = threading.Lock()
        self._frozen = False

    # --- регистрация ------------------------------------------------------

    def register(self, key: str, handler: ActionHandler) -> None:
        """Зарегистрировать (или переопределить) обработчик."""
        if not key:
            raise ValueError(f"{self.label}: пустой ключ обработчика")
        if not callable(handler):
            raise TypeError(f"{self.label}.{key}: обработчик должен быть callable")
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(f"{self.label}: реестр заморожен, '{key}' не добавить")
            self._handlers[key] = handler

    def handler(self, key: str) -> Callable[[ActionHandler], ActionHandler]:
        """Декоратор: @registry.handler("exec")."""
        def _wrap(fn: ActionHandler) -> ActionHandler:
            self.register(key, fn)
            return fn
        return _wrap

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # --- чтение -----------------------------------------------------------

    def has(self, key: Any) -> bool:
        return isinstance(key, str) and key in self._handlers

    def get(self, key: Any) -> Optional[ActionHandler]:
        if not isinstance(key, str):
            return None
        return self._handlers.get(key)

    def keys(self) -> List[str]:
        return list(self._handlers.keys())

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return len(self._handlers)


class ActionRegistry(HandlerRegistry):
    """Реестр действий: type → handler(scope, descriptor, root_scope)."""

    def __init__(self) -> None:
        super().__init__("actions")


class CommandTable(HandlerRegistry):
    """Команды для exec: 'ns::name' → handler(scope, descriptor, root_scope)."""

    def __init__(self) -> None:
        super().__init__("commands")
