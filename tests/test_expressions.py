"""Tests for the simpleeval-backed expression evaluator."""

import pytest
from conftest import FakeActor

from alerts.engine import ExpressionEvaluationError, ExpressionParseError, SimpleEvalEvaluator


@pytest.fixture
def evaluator() -> SimpleEvalEvaluator:
    return SimpleEvalEvaluator()


class TestSimpleEvalEvaluator:
    def test_attribute_access_and_comparison(self, evaluator):
        names = {"player": FakeActor(), "args": ["x", "y"]}

        assert evaluator.evaluate("player.ping > 10 and len(args) == 2", names) is True

    def test_expected_bool_coerces(self, evaluator):
        assert evaluator.evaluate("len(args)", {"args": []}, bool) is False
        assert evaluator.evaluate("'text'", {}, bool) is True

    def test_none_is_passed_through(self, evaluator):
        assert evaluator.evaluate("None", {}, bool) is None

    def test_expected_str(self, evaluator):
        assert evaluator.evaluate("1 + 2", {}, str) == "3"

    def test_type_mismatch(self, evaluator):
        with pytest.raises(ExpressionEvaluationError):
            evaluator.evaluate("'a'", {}, int)

    def test_helper_functions(self, evaluator):
        assert evaluator.evaluate("lower('ABC') + upper('d')", {}) == "abcD"

    def test_parse_error(self, evaluator):
        with pytest.raises(ExpressionParseError) as exc_info:
            evaluator.evaluate("player.name ==", {"player": FakeActor()})

        assert exc_info.value.expression == "player.name =="

    def test_unknown_name_is_evaluation_error(self, evaluator):
        with pytest.raises(ExpressionEvaluationError):
            evaluator.evaluate("missing == 1", {})

    def test_private_attributes_rejected(self, evaluator):
        with pytest.raises(ExpressionEvaluationError):
            evaluator.evaluate("player.__class__", {"player": FakeActor()})
