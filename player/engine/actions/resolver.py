# player/engine/actions/resolver.py
from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

from .runner import ActionRunner
from .types import ActionDescriptor

log = logging.getLogger("player.actions")

COMMAND_DELIMITER = "::"
DEFAULT_FUNCTION = "default"

# dispatch('eventName') - ровно один аргумент в кавычках, больше ничего
_DISPATCH_GUARD = re.compile(r"^\s*dispatch\s*\(")
_DISPATCH_CALL = re.compile(r"""^\s*dispatch\(\s*(['"])(\w+)\1\s*\)\s*;?\s*$""")


class CommandResolver:
    """
    Превращает имя функции, вызванное из произвольного scope, в исполнение.

    Порядок стратегий (первая сработавшая - последняя):
      1. 'ns::cmd'            → exec-команда напрямую
      2. "dispatch('evt')"    → действие dispatch с именем evt
      3. scope.functions[имя] → запуск payload
      4. не корень            → то же самое у родителя
      5. корень               → команда по умолчанию (если имя не "default")

    Пока имя не пустое и не "default", что-то обязательно выполнится.
    """

    def __init__(
        self,
        *,
        runner: ActionRunner,
        root: Any,
        default_command: Mapping[str, Any],
    ) -> None:
        self._runner = runner
        self._root = root
        self._default_command = dict(default_command)

    @property
    def root(self) -> Any:
        return self._root

    @property
    def default_command(self) -> Mapping[str, Any]:
        return dict(self._default_command)

    # ------------------------------------------------------------------
    def resolve(self, scope: Any, name: Any) -> None:
        if not name:
            return
        name = str(name)

        if self._invoke_command(name):
            return
        if self._invoke_dispatch(scope, name):
            return

        # 3-4: идём вверх по цепочке, пока не найдём функцию или не дойдём до корня
        seen = set()
        node: Optional[Any] = scope
        while node is not None and id(node) not in seen:
            seen.add(id(node))
            if self._invoke_function(node, name):
                return
            if node is self._root:
                break
            node = self._parent_of(node)

        self._invoke_default_command(name)

    # ------------------------------------------------------------------
    # СТРАТЕГИИ
    # ------------------------------------------------------------------
    def _invoke_command(self, name: str) -> bool:
        if COMMAND_DELIMITER not in name:
            return False
        log.debug("fn %s (command)", name)
        self._exec({"command": name})
        return True

    def _invoke_dispatch(self, scope: Any, name: str) -> bool:
        if not _DISPATCH_GUARD.match(name):
            return False
        m = _DISPATCH_CALL.match(name)
        if m is None:
            # несколько аргументов, вложенные вызовы и т.п. - не угадываем
            log.warning("rejected dispatch call %r: expected dispatch('eventName')", name)
            return True
        event_name = m.group(2)
        log.debug("fn %s (dispatch %s)", name, event_name)
        self._runner.run(scope, {"action": {"type": "dispatch", "name": event_name}})
        return True

    def _invoke_function(self, scope: Any, name: str) -> bool:
        if getattr(scope, "destroyed", False):
            return False
        lookup = getattr(scope, "lookup_local", None)
        payload = lookup(name) if lookup is not None else None
        if not payload:
            return False
        log.debug("fn %s %r in %r", name, payload, scope)
        self._runner.run(scope, payload)
        return True

    def _invoke_default_command(self, name: str) -> None:
        if name == DEFAULT_FUNCTION:
            return
        log.debug("fn %s not found, default command %s", name, self._default_command.get("command"))
        self._exec(self._default_command)

    # ------------------------------------------------------------------
    def _exec(self, fields: Mapping[str, Any]) -> None:
        """exec-команда всегда уходит от имени корня."""
        descriptor = ActionDescriptor.from_raw({"type": "exec", **fields})
        self._runner.execute_action(self._root, descriptor)

    @staticmethod
    def _parent_of(scope: Any) -> Optional[Any]:
        if getattr(scope, "destroyed", False):
            return None
        return getattr(scope, "parent", None)
