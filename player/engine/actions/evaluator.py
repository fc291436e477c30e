# player/engine/actions/evaluator.py
from __future__ import annotations

import logging
from typing import Any, Mapping

from .expressions import ExpressionError, ExpressionEvaluator, Interpolator
from .operators import OPERATORS, Predicate
from .runner import ActionRunner
from .types import (
    ExpressionCondition,
    PropertyCondition,
    parse_condition,
    to_list,
)

log = logging.getLogger("player.actions")


class ConditionEvaluator:
    """
    Проверяет список условий и запускает action ПЕРВОГО сработавшего.

    Получает:
      - scope, по состоянию которого считаем
      - одно условие или список условий
    Возвращает: bool (сработало ли хоть одно)

    Условия после победителя не проверяются вообще.
    """

    def __init__(
        self,
        *,
        runner: ActionRunner,
        session: Any,
        operators: Mapping[str, Predicate] = OPERATORS,
        interpolator: Interpolator | None = None,
        expressions: ExpressionEvaluator | None = None,
    ) -> None:
        self._runner = runner
        self._session = session
        self._operators = operators
        self._interpolator = interpolator or Interpolator(session)
        self._expressions = expressions or ExpressionEvaluator(
            lambda scope, path: session.get(scope, path, True)
        )

    # ------------------------------------------------------------------
    def evaluate(self, scope: Any, conditions: Any) -> bool:
        if not conditions:
            return False

        for raw in to_list(conditions):
            cond = parse_condition(raw)
            if cond is None:
                log.debug("skip condition without expression/property: %r", raw)
                continue

            if isinstance(cond, ExpressionCondition):
                fired = self._check_expression(scope, cond)
            else:
                fired = self._check_property(scope, cond)

            if fired:
                self._runner.run(scope, cond)
                return True

        return False

    # ------------------------------------------------------------------
    def _check_expression(self, scope: Any, cond: ExpressionCondition) -> bool:
        """
        Сначала подставляем {{ ... }}, потом считаем выражение.
        Битое выражение → warning и считаем, что условие ложно.
        """
        text = self._interpolator.compile(cond.expression)(scope)
        try:
            return bool(self._expressions.evaluate(scope, text))
        except ExpressionError as exc:
            log.warning(
                "Malformed expression in condition: %s. Check for literals that should be strings. (%s)",
                cond.expression,
                exc,
            )
            return False

    def _check_property(self, scope: Any, cond: PropertyCondition) -> bool:
        """
        Перебираем операторы в порядке таблицы; первый объявленный в условии
        и давший True - победил.
        """
        actual = None
        resolved = False
        for name, predicate in self._operators.items():
            if name not in cond.operands:
                continue
            if not resolved:
                actual = self._session.get(scope, cond.property, True)
                resolved = True
            expected = self._session.get(scope, cond.operands[name])
            if predicate(actual, expected):
                log.debug("condition %s %s %r fired (value=%r)", cond.property, name, expected, actual)
                return True
        return False
