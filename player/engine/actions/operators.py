# player/engine/actions/operators.py
"""
Таблица операторов сравнения для условий вида {property: ..., <op>: ...}.

Предикат получает (значение property, операнд) и отвечает bool.
Порядок в таблице важен: условие перебирает операторы именно в нём.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

Predicate = Callable[[Any, Any], bool]


def _to_number(v: Any) -> Any:
    """'80' → 80.0, ' 3,5 ' → 3.5; всё остальное как есть."""
    if isinstance(v, bool) or v is None:
        return v
    if isinstance(v, (int, float)):
        return v
    if isinstance(v, str):
        s = v.strip().replace(",", ".")
        try:
            return float(s)
        except ValueError:
            return v
    return v


def _coerce_pair(actual: Any, expected: Any) -> Tuple[Any, Any]:
    """Если обе стороны похожи на числа - сравниваем как числа."""
    a, e = _to_number(actual), _to_number(expected)
    numeric = (int, float)
    if isinstance(a, numeric) and isinstance(e, numeric) \
            and not isinstance(a, bool) and not isinstance(e, bool):
        return a, e
    return actual, expected


def _eq(actual: Any, expected: Any) -> bool:
    a, e = _coerce_pair(actual, expected)
    return a == e


def _ne(actual: Any, expected: Any) -> bool:
    return not _eq(actual, expected)


def _ordered(cmp: Callable[[Any, Any], bool]) -> Predicate:
    def _pred(actual: Any, expected: Any) -> bool:
        if actual is None or expected is None:
            return False
        a, e = _coerce_pair(actual, expected)
        try:
            return bool(cmp(a, e))
        except TypeError:
            return False
    return _pred


def _in(actual: Any, expected: Any) -> bool:
    if isinstance(expected, (list, tuple, set)):
        return any(_eq(actual, item) for item in expected)
    return False


def _not_in(actual: Any, expected: Any) -> bool:
    return not _in(actual, expected)


def _contains(actual: Any, expected: Any) -> bool:
    if actual is None:
        return False
    if isinstance(actual, (list, tuple, set)):
        return any(_eq(item, expected) for item in actual)
    return str(expected) in str(actual)


def _exists(actual: Any, expected: Any) -> bool:
    # exists: true → значение есть; exists: false → значения нет
    present = actual is not None and actual != ""
    return present if expected not in (False, "false", 0) else not present


DEFAULT_OPERATORS: Dict[str, Predicate] = {
    "eq": _eq,
    "ne": _ne,
    "gt": _ordered(lambda a, e: a > e),
    "gte": _ordered(lambda a, e: a >= e),
    "lt": _ordered(lambda a, e: a < e),
    "lte": _ordered(lambda a, e: a <= e),
    "in": _in,
    "not_in": _not_in,
    "contains": _contains,
    "exists": _exists,
}


def build_operator_table(extra: Optional[Mapping[str, Predicate]] = None) -> Mapping[str, Predicate]:
    """
    Таблица операторов только для чтения.
    extra дописываются в конец (или переопределяют встроенные на их месте).
    """
    table: Dict[str, Predicate] = dict(DEFAULT_OPERATORS)
    for name, pred in (extra or {}).items():
        if not callable(pred):
            raise TypeError(f"operator '{name}': предикат должен быть callable")
        table[name] = pred
    return MappingProxyType(table)


OPERATORS = build_operator_table()
