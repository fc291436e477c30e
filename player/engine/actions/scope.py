# player/engine/actions/scope.py
from __future__ import annotations

import itertools
import weakref
from typing import Any, Dict, Iterator, List, Optional, Tuple

from player.core.session import assign_path, lookup_path

_ids = itertools.count(1)


class Scope:
    """
    Узел дерева контекстов исполнения.

    - parent хранится слабой ссылкой: родитель держит детей, а не наоборот;
    - functions - локальные функции (имя → payload с action);
    - state - произвольное состояние, которое читают условия и интерполяция.

    Корень (parent=None) - это scope приложения, на нём заканчивается поиск.
    """

    def __init__(
        self,
        parent: Optional["Scope"] = None,
        *,
        scope_id: Optional[str] = None,
        functions: Optional[Dict[str, Any]] = None,
        state: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.id = scope_id or f"scope-{next(_ids)}"
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self.functions: Dict[str, Any] = dict(functions or {})
        self.state: Dict[str, Any] = dict(state or {})
        self._children: List[Scope] = []
        self._destroyed = False

        if parent is not None:
            parent._children.append(self)

    def __repr__(self) -> str:
        return f"<Scope {self.id}{' destroyed' if self._destroyed else ''}>"

    # --- дерево -----------------------------------------------------------

    @property
    def parent(self) -> Optional["Scope"]:
        """Живой родитель или None (корень / родитель уже разрушен)."""
        if self._parent_ref is None:
            return None
        p = self._parent_ref()
        if p is None or p.destroyed:
            return None
        return p

    @property
    def is_root(self) -> bool:
        return self._parent_ref is None

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def children(self) -> List["Scope"]:
        return list(self._children)

    def new(self, **kwargs: Any) -> "Scope":
        """Создать дочерний scope."""
        return Scope(self, **kwargs)

    def destroy(self) -> None:
        """Разрушить scope вместе с поддеревом."""
        if self._destroyed:
            return
        for child in list(self._children):
            child.destroy()
        self._destroyed = True
        self._children = []
        p = self._parent_ref() if self._parent_ref is not None else None
        if p is not None and self in p._children:
            p._children.remove(self)

    def ancestors(self) -> Iterator["Scope"]:
        """
        self, родитель, дед ... до корня.
        На повторно встреченном узле останавливаемся (битое дерево).
        """
        seen = set()
        node: Optional[Scope] = self
        while node is not None and id(node) not in seen:
            seen.add(id(node))
            yield node
            node = node.parent

    def walk(self) -> Iterator["Scope"]:
        """self и все потомки (в глубину)."""
        yield self
        for child in list(self._children):
            yield from child.walk()

    # --- функции ----------------------------------------------------------

    def lookup_local(self, name: str) -> Optional[Any]:
        """Локальная функция по имени; разрушенный scope ничего не отдаёт."""
        if self._destroyed or not self.functions:
            return None
        payload = self.functions.get(name)
        return payload or None

    # --- состояние --------------------------------------------------------

    def lookup(self, path: str) -> Tuple[bool, Any]:
        """Ищем path в state по цепочке вверх (как прототипное наследование)."""
        for node in self.ancestors():
            if node.destroyed:
                continue
            found, value = lookup_path(node.state, path)
            if found:
                return True, value
        return False, None

    def get(self, path: str, default: Any = None) -> Any:
        found, value = self.lookup(path)
        return value if found else default

    def set(self, path: str, value: Any) -> None:
        assign_path(self.state, path, value)
