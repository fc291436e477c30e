# player/engine/actions/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


# === 1. БАЗОВЫЕ ENUM'Ы =======================================================

class ActionStatus(Enum):
    """Результат исполнения одного дескриптора."""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"   # тип не зарегистрирован / дескриптор пустой


# === 2. НОРМАЛИЗАЦИЯ =========================================================

def to_list(value: Any) -> List[Any]:
    """
    Один элемент → список из одного элемента, список → копия, None → [].
    Порядок сохраняется.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def field_of(obj: Any, key: str, default: Any = None) -> Any:
    """Достаём поле и из dict (разметка документа), и из dataclass."""
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)


def has_field(obj: Any, key: str) -> bool:
    if isinstance(obj, Mapping):
        return key in obj
    return hasattr(obj, key)


# === 3. ДЕЙСТВИЯ =============================================================

@dataclass
class ActionDescriptor:
    """
    Один дескриптор действия: {type, name?, ...поля конкретного типа}.
    Всё, кроме type/name, лежит в params как есть.
    """
    type: str
    name: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        if key == "type":
            return self.type
        if key == "name":
            return self.name if self.name is not None else default
        return self.params.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type}
        if self.name is not None:
            out["name"] = self.name
        out.update(self.params)
        return out

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["ActionDescriptor"]:
        """
        dict из разметки → дескриптор.
        Пустое значение или не-объект → None (такой элемент будет пропущен).
        """
        if isinstance(raw, ActionDescriptor):
            return raw
        if not raw or not isinstance(raw, Mapping):
            return None
        params = {k: v for k, v in raw.items() if k not in ("type", "name")}
        name = raw.get("name")
        return cls(
            type=str(raw.get("type") or ""),
            name=str(name) if name is not None else None,
            params=params,
        )


# Payload - это всё, у чего есть поле action: функция из scope.functions,
# условие, или просто {"action": [...]}.
ActionPayload = Union[Mapping[str, Any], Any]


def payload_actions(payload: Any) -> List[Any]:
    """Вынимаем payload.action и приводим к списку (без потери порядка)."""
    if not payload:
        return []
    return to_list(field_of(payload, "action"))


# === 4. УСЛОВИЯ ==============================================================

@dataclass
class ExpressionCondition:
    """{expression: "...", action: ...} - выражение считается по состоянию scope."""
    expression: str
    action: Any = None


@dataclass
class PropertyCondition:
    """
    {property: "score", gte: 70, action: ...}
    operands - все остальные ключи; какие из них операторы, решает таблица операторов.
    """
    property: str
    operands: Dict[str, Any] = field(default_factory=dict)
    action: Any = None


ConditionSpec = Union[ExpressionCondition, PropertyCondition]


def parse_condition(raw: Any) -> Optional[ConditionSpec]:
    """
    dict → ExpressionCondition / PropertyCondition.
    Если есть и expression, и property - побеждает expression.
    Ни того, ни другого → None.
    """
    if isinstance(raw, (ExpressionCondition, PropertyCondition)):
        return raw
    if not isinstance(raw, Mapping):
        return None
    if "expression" in raw:
        return ExpressionCondition(expression=str(raw["expression"]), action=raw.get("action"))
    if "property" in raw:
        operands = {k: v for k, v in raw.items() if k not in ("property", "action")}
        return PropertyCondition(
            property=str(raw["property"]),
            operands=operands,
            action=raw.get("action"),
        )
    return None


# === 5. РЕЗУЛЬТАТЫ И ЖУРНАЛ ==================================================

@dataclass
class ActionResult:
    """Результат исполнения одного дескриптора."""
    action_type: str
    status: ActionStatus
    ts: datetime
    name: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ActionLogEntry:
    """
    Запись журнала: в каком scope, что запускали и чем закончилось.
    """
    ts: datetime
    scope_id: Optional[str]
    action_type: str
    status: ActionStatus
    error: Optional[str] = None
    payload_preview: Optional[str] = None  # короткий текст для UI
