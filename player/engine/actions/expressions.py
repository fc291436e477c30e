# player/engine/actions/expressions.py
"""
Ограниченный язык выражений для условий {expression: "..."}.

Что умеем:
  - литералы: числа, строки, true/false/null (и True/False/None), списки
  - имена и пути: score, answers.q1  → значение из scope/сессии
  - and / or / not, а также &&, ||, !
  - сравнения: == != < <= > >= in, not in (=== и !== приводятся к == и !=)
  - арифметика: + - * / %

Всё остальное (вызовы, лямбды, атрибуты от выражений ...) - ExpressionError.
"""
from __future__ import annotations

import ast
import operator
import re
from typing import Any, Callable, List

ValueResolver = Callable[[Any, str], Any]
Template = Callable[[Any], str]

_QUOTED = re.compile(r"""('(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")""")
_REPLACEMENTS = (
    (re.compile(r"!=="), "!="),
    (re.compile(r"==="), "=="),
    (re.compile(r"&&"), " and "),
    (re.compile(r"\|\|"), " or "),
    (re.compile(r"!(?!=)"), " not "),
    (re.compile(r"\btrue\b"), "True"),
    (re.compile(r"\bfalse\b"), "False"),
    (re.compile(r"\b(?:null|undefined)\b"), "None"),
)

_BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
}

_UNARY_OPS = {
    ast.Not: operator.not_,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

# длинные выражения и огромные строки/списки в условиях не нужны
MAX_EXPRESSION_LENGTH = 2000
MAX_SEQUENCE_LENGTH = 100_000

_CMP_OPS = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
}


class ExpressionError(ValueError):
    """Выражение не разобрать или не посчитать."""


def transform(expression: str) -> str:
    """
    JS-подобная запись из разметки → синтаксис Python.
    Внутри строковых литералов ничего не трогаем.
    """
    parts: List[str] = _QUOTED.split(expression)
    for i in range(0, len(parts), 2):  # чётные куски - вне кавычек
        chunk = parts[i]
        for rx, repl in _REPLACEMENTS:
            chunk = rx.sub(repl, chunk)
        parts[i] = chunk
    return "".join(parts).strip()


class Interpolator:
    """compile("{{ a }} > 3") → fn(scope) -> "5 > 3"."""

    def __init__(self, session: Any) -> None:
        self._session = session

    def compile(self, template: str) -> Template:
        text = str(template)
        if "{{" not in text:
            return lambda scope: text
        return lambda scope: self._session.interpolate(scope, text)


class ExpressionEvaluator:
    """
    Считает выражение по живому состоянию scope.
    Имена резолвит переданный resolver(scope, path).
    """

    def __init__(self, resolver: ValueResolver) -> None:
        self._resolve = resolver

    def parse(self, expression: str) -> ast.Expression:
        text = transform(str(expression))
        if not text:
            raise ExpressionError("пустое выражение")
        if len(text) > MAX_EXPRESSION_LENGTH:
            raise ExpressionError(f"выражение длиннее {MAX_EXPRESSION_LENGTH} символов")
        try:
            return ast.parse(text, mode="eval")
        except SyntaxError as exc:
            raise ExpressionError(f"синтаксическая ошибка в '{expression}': {exc.msg}") from exc
        except (ValueError, RecursionError, MemoryError) as exc:
            raise ExpressionError(f"не удалось разобрать '{expression}': {type(exc).__name__}") from exc

    def evaluate(self, scope: Any, expression: str) -> Any:
        tree = self.parse(expression)
        try:
            return self._eval(tree.body, scope)
        except ExpressionError:
            raise
        except Exception as exc:
            # ArithmeticError, RecursionError, TypeError ... - всё это битое условие
            raise ExpressionError(f"ошибка вычисления '{expression}': {type(exc).__name__}: {exc}") from exc

    # ------------------------------------------------------------------
    def _eval(self, node: ast.AST, scope: Any) -> Any:
        if isinstance(node, ast.Constant):
            return node.value

        if isinstance(node, (ast.Name, ast.Attribute)):
            return self._resolve(scope, self._dotted(node))

        if isinstance(node, ast.BoolOp):
            is_and = isinstance(node.op, ast.And)
            value: Any = None
            for sub in node.values:
                value = self._eval(sub, scope)
                if is_and and not value:
                    return value
                if not is_and and value:
                    return value
            return value

        if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
            return _UNARY_OPS[type(node.op)](self._eval(node.operand, scope))

        if isinstance(node, ast.BinOp) and type(node.op) in _BIN_OPS:
            left = self._eval(node.left, scope)
            right = self._eval(node.right, scope)
            if isinstance(node.op, ast.Mult):
                _check_repeat(left, right)
            return _BIN_OPS[type(node.op)](left, right)

        if isinstance(node, ast.Compare):
            left = self._eval(node.left, scope)
            for op, comparator in zip(node.ops, node.comparators):
                fn = _CMP_OPS.get(type(op))
                if fn is None:
                    raise ExpressionError(f"оператор {type(op).__name__} не поддерживается")
                right = self._eval(comparator, scope)
                if not fn(left, right):
                    return False
                left = right
            return True

        if isinstance(node, (ast.List, ast.Tuple)):
            return [self._eval(elt, scope) for elt in node.elts]

        if isinstance(node, ast.Subscript):
            base = self._eval(node.value, scope)
            index = self._eval(node.slice, scope)
            return base[index]

        raise ExpressionError(f"конструкция {type(node).__name__} не поддерживается")

    @staticmethod
    def _dotted(node: ast.AST) -> str:
        parts: List[str] = []
        while isinstance(node, ast.Attribute):
            parts.append(node.attr)
            node = node.value
        if not isinstance(node, ast.Name):
            raise ExpressionError("атрибут можно брать только от имени")
        parts.append(node.id)
        return ".".join(reversed(parts))


def _check_repeat(left: Any, right: Any) -> None:
    """'ab' * n и [x] * n: не даём раздуть результат."""
    for seq, count in ((left, right), (right, left)):
        if isinstance(seq, (str, list)) and isinstance(count, int) and not isinstance(count, bool):
            if len(seq) * count > MAX_SEQUENCE_LENGTH:
                raise ExpressionError(f"результат длиннее {MAX_SEQUENCE_LENGTH} элементов")
