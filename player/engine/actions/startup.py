# player/engine/actions/startup.py
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

log = logging.getLogger("player.actions")

# шаг запуска: вернул False или бросил исключение → дальше не идём
Step = Callable[[], Optional[bool]]
Teardown = Callable[[Optional[BaseException]], None]


class StartupError(RuntimeError):
    """Шаг запуска сообщил об ошибке."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step}: {message}")
        self.step = step


class StartupPipeline:
    """
    Строго последовательный запуск: каждый шаг начинается только после
    успешного завершения предыдущего. Первая ошибка обрывает цепочку,
    и в любом случае в конце вызывается ровно один teardown(err).
    """

    def __init__(self, steps: Sequence[Tuple[str, Step]], teardown: Teardown) -> None:
        self._steps: List[Tuple[str, Step]] = list(steps)
        self._teardown = teardown
        self.completed: List[str] = []

    def run(self) -> bool:
        err: Optional[BaseException] = None
        self.completed = []

        for name, step in self._steps:
            try:
                ok = step()
            except Exception as exc:  # noqa: BLE001
                err = StartupError(name, str(exc) or type(exc).__name__)
                err.__cause__ = exc
                break
            if ok is False:
                err = StartupError(name, "step reported failure")
                break
            self.completed.append(name)
            log.debug("startup step %s done", name)

        self._teardown(err)
        return err is None
