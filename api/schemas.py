"""Pydantic schemas for the interview API."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from agents.types import Question
from graph.state import Session
from services.report import SummaryReport


class StartReq(BaseModel):
    candidate_name: str
    role: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=1, le=180)


class AnswerReq(BaseModel):
    answer: str


class UIMessage(BaseModel):
    role: Literal["assistant", "system"] = "assistant"
    text: str


class ApiResp(BaseModel):
    session_id: str
    state: str
    question: Optional[Question] = None
    follow_up_prompt: Optional[str] = None
    time_remaining_seconds: int
    follow_up_seconds_remaining: Optional[int] = None
    ui_messages: List[UIMessage] = Field(default_factory=list)
    service_status: str = "ok"
    has_stored_session: bool = False
    session: Session


class SummaryResp(BaseModel):
    state: str
    report: SummaryReport


__all__ = ["AnswerReq", "ApiResp", "StartReq", "SummaryResp", "UIMessage"]
