# player/engine/actions/handlers.py
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .bridge import DISPATCH_EVENT, EventBus
from .registry import ActionRegistry, CommandTable
from .types import ActionDescriptor

log = logging.getLogger("player.actions")

# ---- типы коллбеков, которые передаются снаружи ------------------------------

# Разрешить имя функции: scope, name
ResolveFunc = Callable[[Any, Any], None]

# Прогнать условия: scope, conditions → bool
RunConditionFunc = Callable[[Any, Any], bool]


class BuiltinHandlers:
    """
    Встроенные действия и команды плеера.

    Конкретный резолвер/оценщик условий сюда не шьём - передаются коллбеками
    (они создаются позже реестра, поэтому можно «дозалить» через атрибуты).
    """

    def __init__(
        self,
        *,
        session: Any,
        bus: EventBus,
        commands: CommandTable,
        resolve: Optional[ResolveFunc] = None,
        run_condition: Optional[RunConditionFunc] = None,
    ) -> None:
        self._session = session
        self._bus = bus
        self._commands = commands
        self.resolve = resolve
        self.run_condition = run_condition

    def register(self, registry: ActionRegistry) -> None:
        registry.register("exec", self.do_exec)
        registry.register("dispatch", self.do_dispatch)
        registry.register("set", self.do_set)
        registry.register("invoke", self.do_invoke)
        registry.register("condition", self.do_condition)
        registry.register("log", self.do_log)

    def register_commands(self) -> None:
        self._commands.register("app::noop", self.cmd_noop)
        self._commands.register("app::reset", self.cmd_reset)
        self._commands.register("app::clear", self.cmd_clear)

    # --------------------------------------------------------------------- #
    # ДЕЙСТВИЯ
    # --------------------------------------------------------------------- #
    def do_exec(self, scope: Any, action: ActionDescriptor, root: Any) -> None:
        command = action.get("command")
        handler = self._commands.get(command)
        if handler is None:
            log.warning("exec: unknown command %r", command)
            return
        handler(scope, action, root)

    def do_dispatch(self, scope: Any, action: ActionDescriptor, root: Any) -> None:
        if not action.name:
            raise ValueError("dispatch: не задано имя события")
        if action.name == DISPATCH_EVENT:
            # это канал сигналов от виджетов, у него другая сигнатура
            raise ValueError("dispatch: имя события 'dispatch' зарезервировано")
        count = self._bus.emit(action.name, scope, action)
        log.debug("dispatch %s → %d listener(s)", action.name, count)

    def do_set(self, scope: Any, action: ActionDescriptor, root: Any) -> None:
        """
        {type: set, property: answers.q1, value: "{{ choice }}", local: false}
        local=true → пишем в state текущего scope, иначе в сессию.
        """
        prop = action.get("property")
        if not prop:
            raise ValueError("set: не задан property")
        value = self._session.get(scope, action.get("value"))
        if action.get("local") and hasattr(scope, "set"):
            scope.set(str(prop), value)
        else:
            self._session.set(str(prop), value)

    def do_invoke(self, scope: Any, action: ActionDescriptor, root: Any) -> None:
        if self.resolve is None:
            raise RuntimeError("invoke: resolver is not provided")
        self.resolve(scope, action.name or action.get("function"))

    def do_condition(self, scope: Any, action: ActionDescriptor, root: Any) -> None:
        """Условия внутри условий: {type: condition, conditions: [...]}."""
        if self.run_condition is None:
            raise RuntimeError("condition: evaluator is not provided")
        self.run_condition(scope, action.get("conditions"))

    def do_log(self, scope: Any, action: ActionDescriptor, root: Any) -> None:
        level = logging.getLevelName(str(action.get("level", "INFO")).upper())
        if not isinstance(level, int):
            level = logging.INFO
        message = self._session.interpolate(scope, str(action.get("message", "")))
        log.log(level, "%s", message)

    # --------------------------------------------------------------------- #
    # КОМАНДЫ exec
    # --------------------------------------------------------------------- #
    def cmd_noop(self, scope: Any, action: ActionDescriptor, root: Any) -> None:
        log.debug("noop command %s", action.get("command"))

    def cmd_reset(self, scope: Any, action: ActionDescriptor, root: Any) -> None:
        if not self._session.restore():
            log.warning("reset: restore point is not created yet")

    def cmd_clear(self, scope: Any, action: ActionDescriptor, root: Any) -> None:
        self._session.clear()
