# player/engine/actions/journal.py
from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter, deque
from threading import RLock
from typing import Deque, Dict, List, Optional, Union

from .types import ActionLogEntry, ActionStatus


class ActionLogStorage(ABC):
    """
    Абстрактный журнал исполненных действий.
    Движок просто складывает туда записи, а API/тесты - читают.
    """

    @abstractmethod
    def append(self, entry: ActionLogEntry) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_recent(
        self,
        limit: int = 100,
        scope_id: Optional[str] = None,
        action_type: Optional[str] = None,
        status: Union[ActionStatus, str, None] = None,
    ) -> List[ActionLogEntry]:
        """Последние записи; фильтры по scope, типу действия и статусу складываются через И."""
        raise NotImplementedError


class InMemoryActionJournal(ActionLogStorage):
    """
    Журнал в памяти: последние N записей в deque, новые в начале.
    Старые записи вытесняются молча.
    """

    def __init__(self, max_entries: int = 1000) -> None:
        self._entries: Deque[ActionLogEntry] = deque(maxlen=max_entries)
        self._lock = RLock()

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen or 0

    def append(self, entry: ActionLogEntry) -> None:
        with self._lock:
            self._entries.appendleft(entry)

    def list_recent(
        self,
        limit: int = 100,
        scope_id: Optional[str] = None,
        action_type: Optional[str] = None,
        status: Union[ActionStatus, str, None] = None,
    ) -> List[ActionLogEntry]:
        if limit <= 0:
            return []
        wanted = ActionStatus(status) if status is not None else None

        out: List[ActionLogEntry] = []
        with self._lock:
            for e in self._entries:
                if scope_id is not None and e.scope_id != scope_id:
                    continue
                if action_type is not None and e.action_type != action_type:
                    continue
                if wanted is not None and e.status != wanted:
                    continue
                out.append(e)
                if len(out) >= limit:
                    break
        return out

    def status_counts(self) -> Dict[str, int]:
        """Сколько записей в каждом статусе: {"success": 3, "failed": 1, ...}."""
        with self._lock:
            counts = Counter(e.status.value for e in self._entries)
        return {s.value: counts.get(s.value, 0) for s in ActionStatus}

    def __len__(self) -> int:
        return len(self._entries)
