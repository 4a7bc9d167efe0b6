"""Alert engine: rule store, interception, rendering and dispatch."""

from .dispatcher import AlertDispatcher, normalize_command
from .expressions import (
    DEFAULT_EXPRESSION_FUNCTIONS,
    ExpressionError,
    ExpressionEvaluationError,
    ExpressionParseError,
    SimpleEvalEvaluator,
)
from .interceptor import EventInterceptor
from .manager import AlertManager, build_manager
from .message_format import message_format_from_config
from .rendering import EvaluationContext, Renderer
from .store import AlertRuleStore, RuleSnapshot, parse_rule

__all__ = [
    # Rules
    "AlertRuleStore",
    "RuleSnapshot",
    "parse_rule",
    "message_format_from_config",
    # Event bus
    "EventInterceptor",
    # Dispatch
    "AlertDispatcher",
    "normalize_command",
    "EvaluationContext",
    "Renderer",
    # Expressions
    "DEFAULT_EXPRESSION_FUNCTIONS",
    "ExpressionError",
    "ExpressionEvaluationError",
    "ExpressionParseError",
    "SimpleEvalEvaluator",
    # Facade
    "AlertManager",
    "build_manager",
]
