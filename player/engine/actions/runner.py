# player/engine/actions/runner.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional

from .registry import HandlerRegistry
from .types import (
    ActionDescriptor,
    ActionLogEntry,
    ActionResult,
    ActionStatus,
    payload_actions,
)

log = logging.getLogger("player.actions")

# Запись в журнал: ActionLogEntry
ActionLogWriter = Callable[[ActionLogEntry], None]


class ActionRunner:
    """
    Исполняет payload: каждый дескриптор из payload.action по очереди
    отдаётся обработчику из реестра действий.

    Своего состояния у раннера нет, всё делают обработчики.
    Неизвестный тип → дескриптор тихо пропускается, остальные идут дальше.
    Упавший обработчик → FAILED в результате и в журнале, остальные идут дальше.
    """

    def __init__(
        self,
        *,
        registry: HandlerRegistry,
        root: Any = None,
        write_action_log: Optional[ActionLogWriter] = None,
    ) -> None:
        self._registry = registry
        self._root = root
        self._write_action_log = write_action_log

    @property
    def root(self) -> Any:
        return self._root

    # --------------------------------------------------------------------- #
    # ПУБЛИЧНЫЙ МЕТОД: выполнить ОДИН дескриптор
    # --------------------------------------------------------------------- #
    def execute_action(self, scope: Any, raw: Any) -> ActionResult:
        started_at = datetime.now(timezone.utc)
        descriptor = ActionDescriptor.from_raw(raw)

        if descriptor is None:
            result = ActionResult(action_type="", status=ActionStatus.SKIPPED, ts=started_at)
            log.debug("skip empty action descriptor %r", raw)
            return result

        handler = self._registry.get(descriptor.type)
        if handler is None:
            log.debug("skip action with unknown type %r", descriptor.type)
            result = ActionResult(
                action_type=descriptor.type,
                status=ActionStatus.SKIPPED,
                ts=started_at,
                name=descriptor.name,
            )
        else:
            try:
                handler(scope, descriptor, self._root)
                result = ActionResult(
                    action_type=descriptor.type,
                    status=ActionStatus.SUCCESS,
                    ts=started_at,
                    name=descriptor.name,
                )
            except Exception as exc:  # noqa: BLE001
                # не падаем, а фиксируем FAILED
                log.exception("action %r failed in %r", descriptor.type, scope)
                result = ActionResult(
                    action_type=descriptor.type,
                    status=ActionStatus.FAILED,
                    ts=started_at,
                    name=descriptor.name,
                    error=str(exc) or type(exc).__name__,
                )

        if self._write_action_log is not None:
            self._write_action_log(
                ActionLogEntry(
                    ts=result.ts,
                    scope_id=getattr(scope, "id", None),
                    action_type=descriptor.type,
                    status=result.status,
                    error=result.error,
                    payload_preview=self._build_payload_preview(descriptor),
                )
            )
        return result

    # --------------------------------------------------------------------- #
    # ПУБЛИЧНЫЙ МЕТОД: выполнить НЕСКОЛЬКО дескрипторов (строго по порядку)
    # --------------------------------------------------------------------- #
    def execute_actions(self, scope: Any, items: Iterable[Any]) -> List[ActionResult]:
        return [self.execute_action(scope, item) for item in items]

    def run(self, scope: Any, payload: Any) -> List[ActionResult]:
        """Нет payload или payload.action → ничего не делаем."""
        items = payload_actions(payload)
        if not items:
            return []
        return self.execute_actions(scope, items)

    # --------------------------------------------------------------------- #
    @staticmethod
    def _build_payload_preview(descriptor: ActionDescriptor) -> str:
        """Короткое представление для журнала."""
        if descriptor.type == "exec":
            return f"exec {descriptor.get('command')}"
        if descriptor.type == "dispatch":
            return f"dispatch {descriptor.name}"
        if descriptor.name:
            return f"{descriptor.type} {descriptor.name}"
        return descriptor.type or "<no type>"
