"""Canonical interview session state."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from agents.types import CamelModel, Question, Response
from config.settings import settings

InterviewState = Literal["landing", "active", "pressure", "ai-assist", "summary"]
InterviewPhase = Literal["warmup", "technical", "deep-dive", "wrap-up"]

PHASE_ORDER: List[InterviewPhase] = ["warmup", "technical", "deep-dive", "wrap-up"]

DEFAULT_TOPICS = [
    "React Hooks",
    "Component Architecture",
    "State Management",
    "Performance Optimization",
]


class Session(CamelModel):
    """Serializable state of one interview run; the machine's single source of truth."""

    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: str = Field(default_factory=lambda: settings.ROLE_DEFAULT)
    candidate_name: str = ""
    duration_minutes: int = Field(default_factory=lambda: settings.DURATION_MINUTES, ge=1)
    time_remaining_seconds: Optional[int] = None
    start_time: Optional[datetime] = None

    current_state: InterviewState = "landing"
    current_question: Optional[Question] = None
    follow_up_prompt: Optional[str] = None
    follow_up_started_at: Optional[datetime] = None

    used_question_ids: List[str] = Field(default_factory=list)
    used_question_types: List[str] = Field(default_factory=list)
    asked_questions: List[Question] = Field(default_factory=list)
    responses: List[Response] = Field(default_factory=list)
    weak_areas: List[str] = Field(default_factory=list)
    interview_phase: InterviewPhase = "warmup"
    topics: List[str] = Field(default_factory=lambda: list(DEFAULT_TOPICS))

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60

    def question_by_id(self, question_id: str) -> Optional[Question]:
        for question in self.asked_questions:
            if question.id == question_id:
                return question
        return None


__all__ = ["DEFAULT_TOPICS", "InterviewPhase", "InterviewState", "PHASE_ORDER", "Session"]
