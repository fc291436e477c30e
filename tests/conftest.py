"""Pytest fixtures for the player test suite."""

from typing import Any, List, Tuple

import pytest

from player.core.session import Session
from player.engine import PlayerContext
from player.engine.actions import (
    ActionRegistry,
    ActionRunner,
    CommandResolver,
    ConditionEvaluator,
    Scope,
)


class Recorder:
    """Collects (action type, scope id, descriptor dict) for every handled action."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Any, dict]] = []

    def handler(self, action_type: str):
        def _handle(scope, action, root):
            self.calls.append((action_type, getattr(scope, "id", None), action.to_dict()))
        return _handle

    def of_type(self, action_type: str) -> List[dict]:
        return [d for t, _, d in self.calls if t == action_type]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def registry(recorder: Recorder) -> ActionRegistry:
    reg = ActionRegistry()
    for action_type in ("exec", "dispatch", "set"):
        reg.register(action_type, recorder.handler(action_type))
    return reg


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def root() -> Scope:
    return Scope(scope_id="app")


@pytest.fixture
def runner(registry: ActionRegistry, root: Scope) -> ActionRunner:
    return ActionRunner(registry=registry, root=root)


@pytest.fixture
def resolver(runner: ActionRunner, root: Scope) -> CommandResolver:
    return CommandResolver(runner=runner, root=root, default_command={"command": "slide::default"})


@pytest.fixture
def evaluator(runner: ActionRunner, session: Session) -> ConditionEvaluator:
    return ConditionEvaluator(runner=runner, session=session)


@pytest.fixture
def player() -> PlayerContext:
    """Started player with an empty question."""
    ctx = PlayerContext(default_command={"command": "app::noop"})
    assert ctx.start()
    return ctx
