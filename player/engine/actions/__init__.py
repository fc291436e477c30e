# player/engine/actions/__init__.py
"""
Движок действий плеера.

Состав:
  - types.py       → дескрипторы действий, payload'ы, условия, результаты
  - scope.py       → дерево scope'ов
  - registry.py    → реестр действий и таблица exec-команд
  - operators.py   → таблица операторов сравнения
  - expressions.py → интерполяция и ограниченный язык выражений
  - runner.py      → исполнение payload'ов
  - evaluator.py   → проверка условий
  - resolver.py    → разрешение имени функции по цепочке scope'ов
  - bridge.py      → шина событий и мост dispatch от виджетов
  - handlers.py    → встроенные действия и команды
  - journal.py     → журнал исполненных действий
  - startup.py     → последовательный запуск
"""
from .bridge import DispatchBridge, EventBus
from .evaluator import ConditionEvaluator
from .expressions import ExpressionError, ExpressionEvaluator, Interpolator
from .handlers import BuiltinHandlers
from .journal import InMemoryActionJournal
from .operators import OPERATORS, build_operator_table
from .registry import ActionRegistry, CommandTable, RegistryFrozenError
from .resolver import CommandResolver
from .runner import ActionRunner
from .scope import Scope
from .startup import StartupError, StartupPipeline

__all__ = [
    "ActionRegistry",
    "ActionRunner",
    "BuiltinHandlers",
    "CommandResolver",
    "CommandTable",
    "ConditionEvaluator",
    "DispatchBridge",
    "EventBus",
    "ExpressionError",
    "ExpressionEvaluator",
    "InMemoryActionJournal",
    "Interpolator",
    "OPERATORS",
    "RegistryFrozenError",
    "Scope",
    "StartupError",
    "StartupPipeline",
    "build_operator_table",
]
