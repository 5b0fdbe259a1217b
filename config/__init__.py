"""Configuration package for the interview simulator."""
from .routes import EVALUATOR_ROUTE, FOLLOWUP_ROUTE, QUESTION_ROUTE, LlmRoute, RetryPolicy, route_for
from .settings import Settings, settings

__all__ = [
    "EVALUATOR_ROUTE",
    "FOLLOWUP_ROUTE",
    "QUESTION_ROUTE",
    "LlmRoute",
    "RetryPolicy",
    "route_for",
    "Settings",
    "settings",
]
