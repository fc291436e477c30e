# player/engine/__init__.py
from __future__ import annotations

import logging
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field

from player.core.config import DEFAULT_COMMAND, Settings, settings as default_settings
from player.core.session import Session
from player.engine.actions.bridge import DISPATCH_EVENT, DispatchBridge, EventBus
from player.engine.actions.evaluator import ConditionEvaluator
from player.engine.actions.handlers import BuiltinHandlers
from player.engine.actions.journal import InMemoryActionJournal
from player.engine.actions.operators import OPERATORS, Predicate
from player.engine.actions.registry import ActionRegistry, CommandTable
from player.engine.actions.resolver import CommandResolver
from player.engine.actions.runner import ActionRunner
from player.engine.actions.scope import Scope
from player.engine.actions.startup import StartupPipeline
from player.engine.actions.types import ActionResult, to_list

log = logging.getLogger("player.actions")

ROOT_SCOPE_ID = "app"

# сюда потом положим живую ссылку
_player: "PlayerContext | None" = None


# -----------------------------------------------------------------------------
# Документ вопроса
# -----------------------------------------------------------------------------
class QuestionDocument(BaseModel):
    """
    То, что плееру нужно от документа вопроса:
      - functions → функции корневого scope
      - state     → начальные данные сессии
      - init      → действия при загрузке: {тип: дескриптор | [дескрипторы]}
    """
    id: str = "question"
    weight: float = 1.0
    functions: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    state: Dict[str, Any] = Field(default_factory=dict)
    init: Dict[str, Any] = Field(default_factory=dict)


def load_question_from_file(path: str | Path) -> QuestionDocument:
    fp = Path(path)
    if not fp.exists():
        raise FileNotFoundError(f"Question file not found: {fp}")
    data = yaml.safe_load(fp.read_text("utf-8")) or {}
    return question_from_dict(data)


def question_from_dict(data: Mapping[str, Any]) -> QuestionDocument:
    if not isinstance(data, Mapping):
        raise ValueError("документ вопроса должен быть объектом")
    # допускаем и {question: {...}}, и сам вопрос в корне
    if isinstance(data.get("question"), Mapping):
        data = data["question"]
    return QuestionDocument.model_validate(dict(data or {}))


# -----------------------------------------------------------------------------
# Контекст плеера
# -----------------------------------------------------------------------------
class PlayerContext:
    """
    Держим всё в одном месте:
    - сессию, корневой scope и дерево под ним
    - реестр действий, таблицу команд, таблицу операторов
    - раннер, оценщик условий, резолвер, мост dispatch
    - журнал исполненных действий
    """

    def __init__(
        self,
        *,
        default_command: Optional[Mapping[str, Any]] = None,
        session: Optional[Session] = None,
        operators: Optional[Mapping[str, Predicate]] = None,
        journal_max_entries: int = 1000,
    ) -> None:
        # 1) хранилища
        self.session = session or Session()
        self.journal = InMemoryActionJournal(max_entries=journal_max_entries)
        self.actions = ActionRegistry()
        self.commands = CommandTable()
        self.bus = EventBus()

        # 2) корневой scope = scope приложения
        self.root = Scope(scope_id=ROOT_SCOPE_ID)

        # 3) исполнители
        self.runner = ActionRunner(
            registry=self.actions,
            root=self.root,
            write_action_log=self.journal.append,
        )
        self.evaluator = ConditionEvaluator(
            runner=self.runner,
            session=self.session,
            operators=operators if operators is not None else OPERATORS,
        )
        self.resolver = CommandResolver(
            runner=self.runner,
            root=self.root,
            default_command=default_command or {"command": DEFAULT_COMMAND},
        )

        # 4) мост dispatch от виджетов и встроенные действия
        self.bridge = DispatchBridge(self.resolver.resolve)
        self.bridge.attach(self.bus)
        self.builtins = BuiltinHandlers(
            session=self.session,
            bus=self.bus,
            commands=self.commands,
            resolve=self.resolver.resolve,
            run_condition=self.evaluator.evaluate,
        )
        self.builtins.register(self.actions)
        self.builtins.register_commands()

        self.question: Optional[QuestionDocument] = None
        self.ready = False
        self.last_error: Optional[BaseException] = None
        self._lock = RLock()

    # ------------------------------------------------------------------ #
    # ЗАПУСК
    # ------------------------------------------------------------------ #
    def start(
        self,
        question: Optional[QuestionDocument] = None,
        *,
        question_path: Optional[str | Path] = None,
    ) -> bool:
        """
        Сессия → вопрос → init-действия → точка восстановления → заморозка реестров.
        Ошибка любого шага обрывает остальные и уходит в _teardown.
        """
        def _load_question() -> None:
            if question is not None:
                self.question = question
            elif question_path is not None:
                self.question = load_question_from_file(question_path)
            else:
                self.question = QuestionDocument()
            self.root.functions = dict(self.question.functions)
            for key, value in self.question.state.items():
                self.session.set(key, value)

        steps = [
            ("session", self.session.clear),
            ("question", _load_question),
            ("init", self._run_init_actions),
            ("restore_point", self.session.create_restore_point),
            ("freeze", self._freeze_registries),
        ]
        with self._lock:
            self.ready = False
            return StartupPipeline(steps, self._teardown).run()

    def _run_init_actions(self) -> None:
        """
        init: {тип: дескриптор | [дескрипторы]}.
        Тип без обработчика пропускаем целиком, пустые дескрипторы - по одному.
        """
        if self.question is None:
            return
        for action_type, items in self.question.init.items():
            if not self.actions.has(action_type):
                log.debug("init: skip unregistered action type %r", action_type)
                continue
            for item in to_list(items):
                if not isinstance(item, Mapping) or not item:
                    log.debug("init: skip malformed %s action %r", action_type, item)
                    continue
                self.runner.execute_action(self.root, {**item, "type": action_type})

    def _freeze_registries(self) -> None:
        self.actions.freeze()
        self.commands.freeze()

    def _teardown(self, err: Optional[BaseException]) -> None:
        self.last_error = err
        if err is not None:
            log.error("player startup failed: %s", err)
            return
        self.ready = True
        log.info("player ready (question=%s)", self.question.id if self.question else None)

    # ------------------------------------------------------------------ #
    # ПУБЛИЧНЫЙ API
    # ------------------------------------------------------------------ #
    def invoke(self, scope: Scope, name: Any) -> None:
        with self._lock:
            self.resolver.resolve(scope, name)

    def run_condition(self, scope: Scope, conditions: Any) -> bool:
        with self._lock:
            return self.evaluator.evaluate(scope, conditions)

    def run(self, scope: Scope, payload: Any) -> List[ActionResult]:
        with self._lock:
            return self.runner.run(scope, payload)

    def call_action(self, name: Any) -> None:
        """Кнопки в шапке: имя ищется от корня."""
        self.invoke(self.root, name)

    def dispatch(self, scope: Scope, event_type: str, widget: Optional[Mapping[str, Any]]) -> None:
        """Сигнал от виджета → мост dispatch → резолвер."""
        with self._lock:
            self.bus.emit(DISPATCH_EVENT, scope, event_type, widget)

    def reset(self) -> bool:
        with self._lock:
            return self.session.restore()

    # --- дерево scope'ов ----------------------------------------------------

    def scope(self, scope_id: str) -> Optional[Scope]:
        for node in self.root.walk():
            if node.id == scope_id:
                return node
        return None

    def new_scope(
        self,
        parent_id: str = ROOT_SCOPE_ID,
        *,
        scope_id: Optional[str] = None,
        functions: Optional[Dict[str, Any]] = None,
        state: Optional[Dict[str, Any]] = None,
    ) -> Scope:
        parent = self.scope(parent_id)
        if parent is None:
            raise KeyError(f"scope '{parent_id}' not found")
        if scope_id is not None and self.scope(scope_id) is not None:
            raise ValueError(f"scope '{scope_id}' already exists")
        return parent.new(scope_id=scope_id, functions=functions, state=state)


def init_player(cfg: Settings = default_settings) -> PlayerContext:
    """
    Вызываем ОДИН раз при старте приложения.
    """
    global _player

    cfg.load_yaml_config()
    if cfg.debug_trace:
        logging.getLogger("player.actions").setLevel(logging.DEBUG)

    ctx = PlayerContext(
        default_command=cfg.default_command,
        journal_max_entries=cfg.journal_max_entries,
    )
    qp = cfg.question_path
    ctx.start(question_path=qp if qp.exists() else None)
    _player = ctx
    return ctx


def set_player(ctx: Optional[PlayerContext]) -> None:
    global _player
    _player = ctx


def get_player() -> PlayerContext:
    if _player is None:
        raise RuntimeError("PlayerContext is not initialized")
    return _player
