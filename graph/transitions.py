"""Pure transition function for the interview state machine.

``transition`` never mutates its input: it works on a deep copy and returns the
new session, so a rejected event leaves the caller's session untouched.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, FrozenSet, Optional, Type

from agents.types import FOLLOWUP_SUFFIX, Question, Response
from config.settings import settings
from graph.events import (
    AnswerSubmitted,
    Continue,
    LoadSession,
    QuestionSet,
    Restart,
    StartInterview,
    TimerExpired,
    TimerTick,
)
from graph.state import PHASE_ORDER, InterviewPhase, Session
from services.countdown import utcnow


class TransitionError(Exception):
    """Base class for rejected events."""


class InvalidTransition(TransitionError):
    def __init__(self, state: str, event: str, detail: str = ""):
        self.state = state
        self.event = event
        message = f"event {event!r} not allowed in state {state!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ValidationFailed(TransitionError, ValueError):
    """Event payload rejected (e.g. blank candidate name)."""


_ALLOWED: Dict[str, FrozenSet[str]] = {
    "landing": frozenset({"start_interview", "load_session"}),
    "active": frozenset({"question_set", "answer_submitted", "timer_tick", "timer_expired"}),
    "pressure": frozenset({"answer_submitted", "timer_expired"}),
    "ai-assist": frozenset({"continue"}),
    "summary": frozenset(),
}


def allowed_events(state: str) -> FrozenSet[str]:
    """Event types accepted in ``state``; ``restart`` is accepted everywhere."""

    return _ALLOWED.get(state, frozenset()) | {"restart"}


def fresh_session(session_id: Optional[str] = None) -> Session:
    session = Session()
    session.time_remaining_seconds = session.duration_seconds
    if session_id:
        session.session_id = session_id
    return session


def phase_for(response_count: int, current: InterviewPhase) -> InterviewPhase:
    """Phase implied by the response count; never moves backwards."""

    target: InterviewPhase = current
    if response_count >= 3:
        target = "deep-dive"
    elif response_count >= 1:
        target = "technical"
    if PHASE_ORDER.index(target) < PHASE_ORDER.index(current):
        return current
    return target


def _present(session: Session, question: Question) -> None:
    session.current_question = question
    session.follow_up_prompt = None
    session.follow_up_started_at = None
    if question.id not in session.used_question_ids:
        session.used_question_ids.append(question.id)
    if session.question_by_id(question.id) is None:
        session.asked_questions.append(question)
    if question.style_tag and question.style_tag not in session.used_question_types:
        session.used_question_types.append(question.style_tag)


def _start(session: Session, event: StartInterview, now: datetime) -> Session:
    name = event.candidate_name.strip()
    if not name:
        raise ValidationFailed("candidate name is required")
    session.candidate_name = name
    if event.role and event.role.strip():
        session.role = event.role.strip()
    if event.duration_minutes:
        session.duration_minutes = event.duration_minutes
    session.current_state = "active"
    session.start_time = now
    session.time_remaining_seconds = session.duration_seconds
    return session


def _question_set(session: Session, event: QuestionSet, now: datetime) -> Session:
    _present(session, event.question)
    return session


def _answer(session: Session, event: AnswerSubmitted, now: datetime) -> Session:
    question = session.current_question
    if question is None:
        raise InvalidTransition(session.current_state, event.type, "no question is being asked")
    if not event.answer.strip():
        raise ValidationFailed("answer must not be blank")

    in_pressure = session.current_state == "pressure"
    expected_id = question.id + FOLLOWUP_SUFFIX if in_pressure else question.id
    if event.question_id != expected_id or event.is_follow_up != in_pressure:
        raise InvalidTransition(
            session.current_state,
            event.type,
            f"answer for {event.question_id!r} does not match {expected_id!r}",
        )

    session.responses.append(
        Response(
            question_id=event.question_id,
            answer=event.answer.strip(),
            timestamp=now,
            evaluation=event.evaluation,
        )
    )
    if event.evaluation.is_weak:
        session.weak_areas.append(event.question_id)
    session.interview_phase = phase_for(len(session.responses), session.interview_phase)

    if not in_pressure and event.evaluation.is_genuinely_weak and question.follow_up:
        session.current_state = "pressure"
        session.follow_up_prompt = (event.follow_up_prompt or "").strip() or question.follow_up
        session.follow_up_started_at = now
    else:
        session.current_state = "ai-assist"
        session.follow_up_started_at = None
    return session


def _tick(session: Session, event: TimerTick, now: datetime) -> Session:
    session.time_remaining_seconds = min(event.remaining_seconds, session.duration_seconds)
    return session


def _expired(session: Session, event: TimerExpired, now: datetime) -> Session:
    if event.timer == "interview":
        if session.current_state != "active":
            raise InvalidTransition(session.current_state, event.type, "interview timer only runs while active")
        session.time_remaining_seconds = 0
        session.current_question = None
        session.current_state = "summary"
        return session
    if session.current_state != "pressure":
        raise InvalidTransition(session.current_state, event.type, "follow-up timer only runs under pressure")
    session.follow_up_started_at = None
    session.current_state = "ai-assist"
    return session


def _continue(session: Session, event: Continue, now: datetime) -> Session:
    room_left = (
        len(session.responses) < settings.MAX_QUESTIONS
        and len(session.used_question_ids) < settings.MAX_QUESTIONS
    )
    if room_left and event.next_question is not None:
        _present(session, event.next_question)
        session.current_state = "active"
    else:
        session.current_state = "summary"
    return session


def _load(session: Session, event: LoadSession, now: datetime) -> Session:
    return event.snapshot.model_copy(deep=True)


_HANDLERS: Dict[Type, Callable[[Session, object, datetime], Session]] = {
    StartInterview: _start,
    QuestionSet: _question_set,
    AnswerSubmitted: _answer,
    TimerTick: _tick,
    TimerExpired: _expired,
    Continue: _continue,
    LoadSession: _load,
}


def transition(session: Session, event, now: Optional[datetime] = None) -> Session:
    """Apply ``event`` to ``session`` and return the resulting session.

    Raises ``InvalidTransition`` for events the current state does not accept
    and ``ValidationFailed`` for malformed payloads. The input is never mutated.
    """

    now = now or utcnow()
    if isinstance(event, Restart):
        return fresh_session(session.session_id)
    if event.type not in allowed_events(session.current_state):
        raise InvalidTransition(session.current_state, event.type)
    handler = _HANDLERS[type(event)]
    return handler(session.model_copy(deep=True), event, now)


__all__ = [
    "InvalidTransition",
    "TransitionError",
    "ValidationFailed",
    "allowed_events",
    "fresh_session",
    "phase_for",
    "transition",
]
