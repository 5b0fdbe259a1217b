"""Interview state machine: session state, events and the pure transition function.

The async orchestrator lives in ``graph.machine`` and its wiring in ``graph.build``.
"""
from .state import Session
from .events import (
    AnswerSubmitted,
    Continue,
    LoadSession,
    QuestionSet,
    Restart,
    StartInterview,
    TimerExpired,
    TimerTick,
)
from .transitions import InvalidTransition, ValidationFailed, transition

__all__ = [
    "AnswerSubmitted",
    "Continue",
    "InvalidTransition",
    "LoadSession",
    "QuestionSet",
    "Restart",
    "Session",
    "StartInterview",
    "TimerExpired",
    "TimerTick",
    "ValidationFailed",
    "transition",
]
