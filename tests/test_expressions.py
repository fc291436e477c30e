"""Tests for the restricted expression language."""

import pytest

from player.core.session import Session
from player.engine.actions import ExpressionError, ExpressionEvaluator, Interpolator, Scope
from player.engine.actions.expressions import transform


@pytest.fixture
def state_session() -> Session:
    s = Session()
    s.set("score", 80)
    s.set("answer", "b")
    s.set("answers", {"q1": "a", "list": [1, 2, 3]})
    return s


@pytest.fixture
def expr(state_session: Session) -> ExpressionEvaluator:
    return ExpressionEvaluator(lambda scope, path: state_session.get(scope, path, True))


class TestTransform:
    def test_js_operators(self):
        assert transform("a === 1 && !b || c !== 2") == "a == 1  and   not b  or  c != 2"

    def test_literals(self):
        assert transform("x == true || y == null") == "x == True  or  y == None"

    def test_strings_untouched(self):
        assert transform("a == 'true && !x'") == "a == 'true && !x'"


class TestEvaluate:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("score > 70", True),
            ("score >= 70 && score < 80", False),
            ("answer == 'b'", True),
            ("answers.q1 === 'a'", True),
            ("2 in answers.list", True),
            ("'z' not in ['a', 'b']", True),
            ("score + 20 == 100", True),
            ("score % 7", 3),
            ("!missing", True),
            ("missing || 'fallback'", "fallback"),
            ("answers.list[0]", 1),
            ("1 < 2 < 3", True),
            ("-score", -80),
        ],
    )
    def test_values(self, expr, text, expected):
        assert expr.evaluate(None, text) == expected

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "score >",
            "__import__('os').system('x')",
            "(lambda: 1)()",
            "score.__class__()",
            "[x for x in answers.list]",
            "score / 0",
            "score < 'abc'",
            "answers.list[10]",
        ],
    )
    def test_errors(self, expr, text):
        with pytest.raises(ExpressionError):
            expr.evaluate(None, text)

    def test_scope_state_is_visible(self, state_session):
        root = Scope(state={"local": 5})
        evaluator = ExpressionEvaluator(lambda scope, path: state_session.get(scope, path, True))
        assert evaluator.evaluate(root.new(), "local * 2 == 10") is True


class TestInterpolator:
    def test_compile(self, state_session):
        fn = Interpolator(state_session).compile("{{score}} > 70")
        assert fn(None) == "80 > 70"

    def test_plain_text(self, state_session):
        assert Interpolator(state_session).compile("a == 1")(None) == "a == 1"
