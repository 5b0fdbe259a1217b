"""Async orchestrator driving the pure transition function.

The machine owns the canonical ``Session``. Service calls (evaluation,
question generation, follow-up generation) run between events; their results
are applied only if the session still looks the way it did when the call was
issued, otherwise they are logged and dropped.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from agents.followup import FollowUpGenerator
from agents.qg.selector import QuestionSelector
from agents.response_evaluator import ResponseEvaluator, ServiceStatus
from agents.types import FOLLOWUP_SUFFIX, Difficulty, Question
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
from graph.state import Session
from graph.transitions import InvalidTransition, ValidationFailed, transition
from observability.logger import log_event
from observability.tracing import PerformanceMonitor, span
from services.autosave import Autosaver
from services.countdown import follow_up_remaining, time_remaining, utcnow
from storage.session_store import SessionStore

_STATUS_RANK = {"ok": 0, "degraded": 1, "busy": 2, "unavailable": 3}
_TIMED_STATES = ("active", "pressure", "ai-assist")


@dataclass(frozen=True)
class _Token:
    """What a pending service call assumed about the session when it was issued."""

    start_time: Optional[datetime]
    state: str
    question_id: Optional[str]
    responses: int


class InterviewMachine:
    def __init__(
        self,
        *,
        evaluator: Optional[ResponseEvaluator] = None,
        selector: Optional[QuestionSelector] = None,
        followups: Optional[FollowUpGenerator] = None,
        store: Optional[SessionStore] = None,
        autosaver: Optional[Autosaver] = None,
        clock: Optional[Callable[[], datetime]] = None,
        session: Optional[Session] = None,
        monitor: Optional[PerformanceMonitor] = None,
        tick_interval_s: Optional[float] = None,
    ):
        self.evaluator = evaluator or ResponseEvaluator()
        self.selector = selector or QuestionSelector()
        self.followups = followups
        self.store = store
        self.autosaver = autosaver or (Autosaver(store) if store is not None else None)
        self.clock = clock or utcnow
        self.session = session or Session()
        self.monitor = monitor
        self.tick_interval_s = settings.TICK_INTERVAL_S if tick_interval_s is None else tick_interval_s
        self.stale_results = 0
        self._ticker: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Event application
    # ------------------------------------------------------------------
    def apply(self, event) -> Session:
        before = self.session
        after = transition(before, event, self.clock())
        self.session = after
        log_event(
            "transition",
            after.session_id,
            level=logging.DEBUG if event.type == "timer_tick" else logging.INFO,
            event=event.type,
            from_state=before.current_state,
            to_state=after.current_state,
            question_id=after.current_question.id if after.current_question else None,
        )
        if after.current_state != "landing" and self.autosaver is not None:
            self.autosaver.request(after)
        return after

    def _token(self) -> _Token:
        s = self.session
        return _Token(
            start_time=s.start_time,
            state=s.current_state,
            question_id=s.current_question.id if s.current_question else None,
            responses=len(s.responses),
        )

    def _is_stale(self, token: _Token, what: str) -> bool:
        if self._token() == token:
            return False
        self.stale_results += 1
        log_event(
            "result.stale",
            self.session.session_id,
            level=logging.WARNING,
            event=what,
            question_id=token.question_id,
            to_state=self.session.current_state,
        )
        return True

    @property
    def service_status(self) -> ServiceStatus:
        statuses = [self.evaluator.last_status, self.selector.last_status]
        if self.followups is not None:
            statuses.append(self.followups.last_status)
        return max(statuses, key=lambda status: _STATUS_RANK[status])

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------
    async def start(
        self,
        candidate_name: str,
        role: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ) -> Session:
        self.apply(StartInterview(candidate_name=candidate_name, role=role, duration_minutes=duration_minutes))
        self._run_background()
        await self.ensure_question()
        return self.session

    async def ensure_question(self) -> Optional[Question]:
        """Select the opening question when the active screen has none."""

        s = self.session
        if s.current_state != "active" or s.current_question is not None:
            return s.current_question
        token = self._token()
        question = await self.selector.next_question(
            "intermediate",
            s.used_question_ids,
            s.responses,
            s.used_question_types,
            s.asked_questions,
        )
        if self._is_stale(token, "question_set"):
            return self.session.current_question
        self.apply(QuestionSet(question=question))
        return question

    async def submit_answer(self, answer: str) -> Session:
        """Evaluate ``answer`` for the current (or follow-up) question and apply it.

        Returns the resulting session. If the session moved on while the
        evaluation was pending, the result is discarded and the session is
        returned unchanged.
        """

        s = self.session
        question = s.current_question
        if s.current_state not in ("active", "pressure") or question is None:
            raise InvalidTransition(s.current_state, "answer_submitted", "no question is awaiting an answer")
        if not (answer or "").strip():
            raise ValidationFailed("answer must not be blank")

        in_pressure = s.current_state == "pressure"
        question_text = question.text
        question_id = question.id
        if in_pressure:
            question_text = s.follow_up_prompt or question.follow_up or question.text
            question_id = question.id + FOLLOWUP_SUFFIX

        token = self._token()
        with span(self.monitor, "submit_answer"):
            evaluation = await self.evaluator.evaluate(
                answer,
                question.difficulty,
                question_text,
                question.expected_answer_elements,
                question.weak_answer_indicators,
                s.responses,
            )
        log_event(
            "answer.evaluated",
            s.session_id,
            question_id=question_id,
            source=evaluation.source,
            outcome="weak" if evaluation.is_weak else "ok",
        )

        follow_up_prompt = None
        if not in_pressure and evaluation.is_genuinely_weak and question.follow_up and self.followups is not None:
            generated = await self.followups.generate(question, answer, evaluation)
            if generated is not None:
                follow_up_prompt = generated.follow_up_question

        if self._is_stale(token, "answer_submitted"):
            return self.session
        self.apply(
            AnswerSubmitted(
                question_id=question_id,
                answer=answer,
                evaluation=evaluation,
                is_follow_up=in_pressure,
                follow_up_prompt=follow_up_prompt,
            )
        )
        return self.session

    async def continue_interview(self) -> Session:
        s = self.session
        if s.current_state != "ai-assist":
            raise InvalidTransition(s.current_state, "continue")
        next_question = None
        if len(s.responses) < settings.MAX_QUESTIONS and len(s.used_question_ids) < settings.MAX_QUESTIONS:
            difficulty: Difficulty = "senior" if len(s.responses) >= 3 else "intermediate"
            token = self._token()
            next_question = await self.selector.next_question(
                difficulty,
                s.used_question_ids,
                s.responses,
                s.used_question_types,
                s.asked_questions,
            )
            if self._is_stale(token, "continue"):
                return self.session
        self.apply(Continue(next_question=next_question))
        if self.session.current_state == "active":
            self._run_background()
        return self.session

    def tick(self) -> Session:
        """Recompute the countdowns from the clock and fire any expiry."""

        s = self.session
        now = self.clock()
        if s.current_state == "active":
            remaining = time_remaining(s.start_time, s.duration_seconds, now)
            if remaining <= 0:
                self.apply(TimerExpired(timer="interview"))
            elif remaining != s.time_remaining_seconds:
                self.apply(TimerTick(remaining_seconds=remaining))
        elif s.current_state == "pressure":
            if follow_up_remaining(s.follow_up_started_at, now) <= 0:
                self.apply(TimerExpired(timer="follow_up"))
        return self.session

    @property
    def seconds_remaining(self) -> int:
        s = self.session
        if s.start_time is None:
            return s.duration_seconds
        return time_remaining(s.start_time, s.duration_seconds, self.clock())

    @property
    def follow_up_seconds_remaining(self) -> Optional[int]:
        if self.session.current_state != "pressure":
            return None
        return follow_up_remaining(self.session.follow_up_started_at, self.clock())

    def restart(self) -> Session:
        self.apply(Restart())
        if self.autosaver is not None:
            self.autosaver.forget()
        if self.store is not None:
            self.store.clear_all()
        return self.session

    async def resume(self) -> Optional[Session]:
        """Replace a landing session with the stored snapshot, if there is one."""

        if self.store is None:
            return None
        snapshot = self.store.load()
        if snapshot is None:
            return None
        self.apply(LoadSession(snapshot=snapshot))
        log_event("session.resumed", self.session.session_id, to_state=self.session.current_state)
        self._run_background()
        await self.ensure_question()
        return self.session

    def discard(self) -> None:
        if self.autosaver is not None:
            self.autosaver.forget()
        if self.store is not None:
            self.store.clear_all()
        log_event("session.discarded", self.session.session_id)

    # ------------------------------------------------------------------
    # Periodic ticker
    # ------------------------------------------------------------------
    async def run_ticker(self, interval_s: Optional[float] = None) -> None:
        """Tick until the interview leaves its timed states."""

        interval_s = self.tick_interval_s if interval_s is None else interval_s
        while self.session.current_state in _TIMED_STATES:
            await asyncio.sleep(interval_s)
            self.tick()

    def start_ticker(self, interval_s: Optional[float] = None) -> asyncio.Task:
        if self._ticker is None or self._ticker.done():
            self._ticker = asyncio.get_running_loop().create_task(self.run_ticker(interval_s))
        return self._ticker

    def _run_background(self) -> None:
        """Ensure the countdown ticker and periodic autosave run while the interview is live."""

        if self.session.current_state not in _TIMED_STATES:
            return
        self.start_ticker()
        if self.autosaver is not None:
            self.autosaver.start()

    async def close(self) -> None:
        if self._ticker is not None and not self._ticker.done():
            self._ticker.cancel()
            try:
                await self._ticker
            except asyncio.CancelledError:
                pass
        self._ticker = None
        if self.autosaver is not None:
            self.autosaver.flush()
            await self.autosaver.stop()


__all__ = ["InterviewMachine"]
