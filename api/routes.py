"""FastAPI routes forwarding user actions to the interview machine."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from api.schemas import AnswerReq, ApiResp, StartReq, SummaryResp, UIMessage
from graph.build import build_machine
from graph.machine import InterviewMachine
from graph.transitions import InvalidTransition, ValidationFailed
from services.report import build_report, insight_message


router = APIRouter(prefix="/api/interview")

_machine: Optional[InterviewMachine] = None


def get_machine() -> InterviewMachine:
    """Process-wide machine; tests swap it through ``app.dependency_overrides``."""

    global _machine
    if _machine is None:
        _machine = build_machine()
    return _machine


def _messages(machine: InterviewMachine) -> List[UIMessage]:
    session = machine.session
    messages: List[UIMessage] = []
    if session.current_state == "ai-assist" and session.responses:
        messages.append(UIMessage(text=insight_message(session.responses[-1])))
    if session.current_state == "pressure" and session.follow_up_prompt:
        messages.append(UIMessage(text=session.follow_up_prompt))
    status = machine.service_status
    if status == "unavailable":
        messages.append(UIMessage(role="system", text="AI evaluation service unavailable; using offline evaluation."))
    elif status == "busy":
        messages.append(UIMessage(role="system", text="AI service is busy; using offline evaluation for now."))
    return messages


def _resp(machine: InterviewMachine) -> ApiResp:
    session = machine.session
    return ApiResp(
        session_id=session.session_id,
        state=session.current_state,
        question=session.current_question,
        follow_up_prompt=session.follow_up_prompt,
        time_remaining_seconds=machine.seconds_remaining,
        follow_up_seconds_remaining=machine.follow_up_seconds_remaining,
        ui_messages=_messages(machine),
        service_status=machine.service_status,
        has_stored_session=machine.store.has_stored() if machine.store is not None else False,
        session=session,
    )


def _reject(exc: Exception) -> HTTPException:
    if isinstance(exc, ValidationFailed):
        return HTTPException(status_code=422, detail=str(exc))
    return HTTPException(status_code=409, detail=str(exc))


@router.post("/start", response_model=ApiResp)
async def start(req: StartReq, machine: InterviewMachine = Depends(get_machine)) -> ApiResp:
    try:
        await machine.start(req.candidate_name, role=req.role, duration_minutes=req.duration_minutes)
    except (InvalidTransition, ValidationFailed) as exc:
        raise _reject(exc) from exc
    return _resp(machine)


@router.post("/question", response_model=ApiResp)
async def question(machine: InterviewMachine = Depends(get_machine)) -> ApiResp:
    await machine.ensure_question()
    return _resp(machine)


@router.post("/answer", response_model=ApiResp)
async def answer(req: AnswerReq, machine: InterviewMachine = Depends(get_machine)) -> ApiResp:
    try:
        await machine.submit_answer(req.answer)
    except (InvalidTransition, ValidationFailed) as exc:
        raise _reject(exc) from exc
    return _resp(machine)


@router.post("/continue", response_model=ApiResp)
async def continue_interview(machine: InterviewMachine = Depends(get_machine)) -> ApiResp:
    try:
        await machine.continue_interview()
    except InvalidTransition as exc:
        raise _reject(exc) from exc
    return _resp(machine)


@router.post("/tick", response_model=ApiResp)
async def tick(machine: InterviewMachine = Depends(get_machine)) -> ApiResp:
    machine.tick()
    return _resp(machine)


@router.post("/restart", response_model=ApiResp)
async def restart(machine: InterviewMachine = Depends(get_machine)) -> ApiResp:
    machine.restart()
    return _resp(machine)


@router.post("/resume", response_model=ApiResp)
async def resume(machine: InterviewMachine = Depends(get_machine)) -> ApiResp:
    try:
        restored = await machine.resume()
    except InvalidTransition as exc:
        raise _reject(exc) from exc
    if restored is None:
        raise HTTPException(status_code=404, detail="no stored session")
    return _resp(machine)


@router.post("/discard", response_model=ApiResp)
async def discard(machine: InterviewMachine = Depends(get_machine)) -> ApiResp:
    machine.discard()
    return _resp(machine)


@router.get("/state", response_model=ApiResp)
async def state(machine: InterviewMachine = Depends(get_machine)) -> ApiResp:
    return _resp(machine)


@router.get("/summary", response_model=SummaryResp)
async def summary(machine: InterviewMachine = Depends(get_machine)) -> SummaryResp:
    return SummaryResp(state=machine.session.current_state, report=build_report(machine.session))
