"""Events accepted by the interview state machine."""
from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from agents.types import Evaluation, Question
from graph.state import Session


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class StartInterview(_Event):
    type: Literal["start_interview"] = "start_interview"
    candidate_name: str
    role: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=1)


class QuestionSet(_Event):
    type: Literal["question_set"] = "question_set"
    question: Question


class AnswerSubmitted(_Event):
    """An evaluated answer; ``follow_up_prompt`` overrides the canned follow-up on escalation."""

    type: Literal["answer_submitted"] = "answer_submitted"
    question_id: str
    answer: str
    evaluation: Evaluation
    is_follow_up: bool = False
    follow_up_prompt: Optional[str] = None


class TimerTick(_Event):
    type: Literal["timer_tick"] = "timer_tick"
    remaining_seconds: int = Field(ge=0)


class TimerExpired(_Event):
    type: Literal["timer_expired"] = "timer_expired"
    timer: Literal["interview", "follow_up"] = "interview"


class Continue(_Event):
    type: Literal["continue"] = "continue"
    next_question: Optional[Question] = None


class Restart(_Event):
    type: Literal["restart"] = "restart"


class LoadSession(_Event):
    type: Literal["load_session"] = "load_session"
    snapshot: Session


Event = Annotated[
    Union[
        StartInterview,
        QuestionSet,
        AnswerSubmitted,
        TimerTick,
        TimerExpired,
        Continue,
        Restart,
        LoadSession,
    ],
    Field(discriminator="type"),
]


__all__ = [
    "AnswerSubmitted",
    "Continue",
    "Event",
    "LoadSession",
    "QuestionSet",
    "Restart",
    "StartInterview",
    "TimerExpired",
    "TimerTick",
]
