# player/engine/actions/bridge.py
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional

from .types import field_of

log = logging.getLogger("player.actions")

DISPATCH_EVENT = "dispatch"

Listener = Callable[..., None]


class EventBus:
    """
    Шина событий внутри плеера.
    on(event, handler) → функция отписки; emit(event, *args) - синхронно, по порядку подписки.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}
        self._lock = threading.Lock()

    def on(self, event: str, handler: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.setdefault(event, []).append(handler)

        def _off() -> None:
            with self._lock:
                handlers = self._listeners.get(event) or []
                if handler in handlers:
                    handlers.remove(handler)

        return _off

    def emit(self, event: str, *args: Any) -> int:
        """Вернёт, сколько подписчиков получило событие."""
        with self._lock:
            handlers = list(self._listeners.get(event) or [])
        for handler in handlers:
            handler(*args)
        return len(handlers)

    def listeners(self, event: str) -> int:
        with self._lock:
            return len(self._listeners.get(event) or [])


class DispatchBridge:
    """
    Любой виджет может поднять сигнал dispatch(scope, event_type, widget).
    Ищем обработчик в widget[event_type], потом в widget.events[event_type]
    и отдаём найденное имя резолверу.
    """

    def __init__(self, resolve: Callable[[Any, Any], None]) -> None:
        self._resolve = resolve

    def attach(self, bus: EventBus) -> Callable[[], None]:
        return bus.on(DISPATCH_EVENT, self.on_dispatch)

    def on_dispatch(self, scope: Any, event_type: str, widget: Optional[Mapping[str, Any]]) -> bool:
        name = self.handler_for(event_type, widget)
        if not name:
            return False
        self._resolve(scope, name)
        return True

    @staticmethod
    def handler_for(event_type: str, widget: Any) -> Any:
        if not widget:
            return None
        direct = field_of(widget, event_type)
        if direct:
            return direct
        events = field_of(widget, "events") or {}
        return field_of(events, event_type)
