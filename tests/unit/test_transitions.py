from datetime import datetime, timedelta, timezone

import pytest

from agents.qg.pool import POOL_BY_ID
from agents.types import Evaluation, Question
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
from graph.transitions import (
    InvalidTransition,
    ValidationFailed,
    allowed_events,
    fresh_session,
    phase_for,
    transition,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

GENUINELY_WEAK = Evaluation(is_weak=True, has_specifics=False, has_real_example=False, covers_core_points=False)
WEAK_WITH_CREDIT = Evaluation(is_weak=True, has_specifics=True, has_real_example=False, covers_core_points=False)
STRONG = Evaluation(is_weak=False, has_specifics=True, has_real_example=True, covers_core_points=True)

HOOKS = POOL_BY_ID["react-hooks-1"]
NO_FOLLOW_UP = Question(id="plain-1", text="What is JSX?", follow_up=None)


def _active(question=HOOKS) -> Session:
    s = transition(Session(), StartInterview(candidate_name="Ada"), NOW)
    return transition(s, QuestionSet(question=question), NOW)


def _answer(session, evaluation, question_id=None, is_follow_up=False, **kwargs):
    qid = question_id or session.current_question.id
    event = AnswerSubmitted(question_id=qid, answer="some answer", evaluation=evaluation, is_follow_up=is_follow_up, **kwargs)
    return transition(session, event, NOW)


def test_start_requires_a_name():
    with pytest.raises(ValidationFailed):
        transition(Session(), StartInterview(candidate_name="   "), NOW)


def test_start_sets_clock_and_budget():
    s = transition(Session(), StartInterview(candidate_name=" Ada ", duration_minutes=15), NOW)
    assert s.current_state == "active"
    assert s.candidate_name == "Ada"
    assert s.start_time == NOW
    assert s.time_remaining_seconds == 15 * 60


def test_transition_does_not_mutate_input():
    before = Session()
    snapshot = before.model_dump()
    transition(before, StartInterview(candidate_name="Ada"), NOW)
    assert before.model_dump() == snapshot


def test_question_set_records_id_once():
    s = _active()
    s = transition(s, QuestionSet(question=HOOKS), NOW)
    assert s.used_question_ids == ["react-hooks-1"]
    assert [q.id for q in s.asked_questions] == ["react-hooks-1"]


def test_style_tag_is_recorded():
    tagged = Question(id="gen-1", text="t", follow_up="f", style_tag="debugging")
    assert _active(tagged).used_question_types == ["debugging"]


def test_genuinely_weak_with_follow_up_escalates():
    s = _answer(_active(), GENUINELY_WEAK)
    assert s.current_state == "pressure"
    assert s.follow_up_prompt == HOOKS.follow_up
    assert s.follow_up_started_at == NOW
    assert s.weak_areas == ["react-hooks-1"]


def test_targeted_follow_up_overrides_canned_text():
    s = _answer(_active(), GENUINELY_WEAK, follow_up_prompt="Which dependency broke it?")
    assert s.follow_up_prompt == "Which dependency broke it?"


def test_weak_with_partial_credit_does_not_escalate():
    s = _answer(_active(), WEAK_WITH_CREDIT)
    assert s.current_state == "ai-assist"
    assert s.weak_areas == ["react-hooks-1"]


def test_genuinely_weak_without_follow_up_goes_to_assist():
    assert _answer(_active(NO_FOLLOW_UP), GENUINELY_WEAK).current_state == "ai-assist"


def test_pressure_answer_uses_followup_id():
    s = _answer(_active(), GENUINELY_WEAK)
    with pytest.raises(InvalidTransition):
        _answer(s, STRONG)
    s = _answer(s, STRONG, question_id="react-hooks-1-followup", is_follow_up=True)
    assert s.current_state == "ai-assist"
    assert [r.question_id for r in s.responses] == ["react-hooks-1", "react-hooks-1-followup"]
    assert s.follow_up_started_at is None


def test_mismatched_question_id_is_rejected():
    with pytest.raises(InvalidTransition):
        _answer(_active(), STRONG, question_id="someone-else")


def test_blank_answer_is_rejected():
    s = _active()
    with pytest.raises(ValidationFailed):
        transition(s, AnswerSubmitted(question_id=HOOKS.id, answer=" ", evaluation=STRONG), NOW)


def test_phase_progression_is_monotonic():
    assert phase_for(0, "warmup") == "warmup"
    assert phase_for(1, "warmup") == "technical"
    assert phase_for(2, "technical") == "technical"
    assert phase_for(3, "technical") == "deep-dive"
    assert phase_for(1, "deep-dive") == "deep-dive"
    assert phase_for(4, "wrap-up") == "wrap-up"


def test_interview_timer_expiry_discards_question():
    s = transition(_active(), TimerExpired(timer="interview"), NOW)
    assert s.current_state == "summary"
    assert s.current_question is None
    assert s.time_remaining_seconds == 0
    assert s.responses == []


def test_follow_up_timer_expiry_moves_to_assist():
    s = _answer(_active(), GENUINELY_WEAK)
    s = transition(s, TimerExpired(timer="follow_up"), NOW)
    assert s.current_state == "ai-assist"


def test_follow_up_timer_outside_pressure_is_invalid():
    with pytest.raises(InvalidTransition):
        transition(_active(), TimerExpired(timer="follow_up"), NOW)


def test_tick_updates_remaining_only_while_active():
    s = transition(_active(), TimerTick(remaining_seconds=900), NOW)
    assert s.time_remaining_seconds == 900
    s = _answer(s, STRONG)
    with pytest.raises(InvalidTransition):
        transition(s, TimerTick(remaining_seconds=10), NOW)


def test_continue_presents_next_question():
    s = _answer(_active(), STRONG)
    nxt = POOL_BY_ID["testing-1"]
    s = transition(s, Continue(next_question=nxt), NOW)
    assert s.current_state == "active"
    assert s.current_question.id == "testing-1"
    assert s.used_question_ids == ["react-hooks-1", "testing-1"]


def test_continue_without_question_ends_interview():
    s = _answer(_active(), STRONG)
    assert transition(s, Continue(next_question=None), NOW).current_state == "summary"


def test_continue_after_five_answers_ends_interview():
    ids = ["react-hooks-1", "testing-1", "performance-1", "architecture-1", "state-management-1"]
    s = _active(POOL_BY_ID[ids[0]])
    for i, qid in enumerate(ids):
        s = _answer(s, STRONG)
        nxt = POOL_BY_ID[ids[i + 1]] if i + 1 < len(ids) else POOL_BY_ID["testing-1"]
        s = transition(s, Continue(next_question=nxt), NOW)
    assert len(s.responses) == 5
    assert s.current_state == "summary"
    assert len(s.used_question_ids) == len(set(s.used_question_ids)) == 5
    assert s.interview_phase == "deep-dive"


def test_events_outside_their_state_are_rejected():
    with pytest.raises(InvalidTransition):
        transition(Session(), Continue(), NOW)
    with pytest.raises(InvalidTransition):
        transition(_active(), StartInterview(candidate_name="Ada"), NOW)
    assert "restart" in allowed_events("summary")


def test_restart_is_idempotent_across_histories():
    busy = _answer(_answer(_active(), GENUINELY_WEAK), STRONG, question_id="react-hooks-1-followup", is_follow_up=True)
    busy = transition(busy, Continue(next_question=None), NOW)
    assert busy.current_state == "summary"

    first = transition(busy, Restart(), NOW)
    second = transition(transition(Session(candidate_name="Bob", role="Other"), Restart(), NOW), Restart(), NOW)
    exclude = {"session_id"}
    assert first.model_dump(exclude=exclude) == second.model_dump(exclude=exclude)
    assert first.current_state == "landing"
    assert first.responses == [] and first.used_question_ids == [] and first.weak_areas == []
    assert first.interview_phase == "warmup"
    assert first.time_remaining_seconds == first.duration_seconds
    assert first.session_id == busy.session_id


def test_fresh_session_defaults_role():
    assert fresh_session().role == Session().role


def test_load_session_replaces_landing_state():
    stored = _answer(_active(), STRONG)
    s = transition(Session(), LoadSession(snapshot=stored), NOW + timedelta(minutes=1))
    assert s.current_state == "ai-assist"
    assert s.responses == stored.responses
