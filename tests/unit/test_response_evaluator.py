import asyncio

import httpx

from agents.response_evaluator import ResponseEvaluator, classify_failure, recent_summary
from agents.types import Evaluation, Response
from conftest import FakeService, make_gateway
from llm_gateway import (
    LlmConfigError,
    LlmGateway,
    LlmTransportError,
    RateLimitedError,
    ResponseCache,
    ServiceBusyError,
)

ANSWER = "I would reach for useMemo when a derived list is expensive to compute on every render."

SERVICE_VERDICT = {
    "isWeak": False,
    "hasSpecifics": True,
    "hasRealExample": False,
    "coversCorePoints": True,
    "reasoning": "Clear explanation of memoisation",
}


def _evaluate(evaluator, answer=ANSWER, **kwargs):
    return asyncio.run(
        evaluator.evaluate(answer, kwargs.pop("difficulty", "intermediate"), "When do you use useMemo?", **kwargs)
    )


def _resp(qid, weak):
    return Response(
        question_id=qid,
        answer="a",
        evaluation=Evaluation(is_weak=weak, has_specifics=not weak, has_real_example=False, covers_core_points=not weak),
    )


def test_service_verdict_is_used():
    service = FakeService(SERVICE_VERDICT)
    evaluator = ResponseEvaluator(make_gateway(service))
    result = _evaluate(evaluator, expected_elements=["memoisation"], weak_indicators=["vague"])
    assert result.source == "service"
    assert result.covers_core_points is True
    assert result.reasoning == "Clear explanation of memoisation"
    assert evaluator.last_status == "ok"
    prompt = service.requests[0]["messages"][-1]["content"]
    assert "EXPECTED ANSWER ELEMENTS: memoisation" in prompt
    assert "This is their first question." in prompt


def test_previous_responses_feed_performance_context():
    service = FakeService(SERVICE_VERDICT)
    evaluator = ResponseEvaluator(make_gateway(service))
    history = [_resp("a", False), _resp("b", False), _resp("c", True), _resp("d", False)]
    _evaluate(evaluator, recent_responses=history)
    prompt = service.requests[0]["messages"][-1]["content"]
    assert "Candidate has answered 2/3 questions well so far." in prompt
    assert len(recent_summary(history)) == 3


def test_very_short_answer_skips_service():
    service = FakeService(SERVICE_VERDICT)
    evaluator = ResponseEvaluator(make_gateway(service))
    result = _evaluate(evaluator, answer="idk")
    assert result.is_weak and result.source == "heuristic"
    assert service.calls == 0


def test_transport_failure_falls_back_to_heuristics():
    service = FakeService(httpx.ConnectError("down"))
    evaluator = ResponseEvaluator(make_gateway(service))
    result = _evaluate(evaluator)
    assert result.source == "heuristic"
    assert evaluator.last_status == "degraded"


def test_malformed_reply_falls_back_to_heuristics():
    evaluator = ResponseEvaluator(make_gateway(FakeService("not json at all")))
    assert _evaluate(evaluator).source == "heuristic"


def test_missing_key_marks_service_unavailable():
    evaluator = ResponseEvaluator(LlmGateway())
    result = _evaluate(evaluator)
    assert result.source == "heuristic"
    assert evaluator.last_status == "unavailable"


def test_no_gateway_means_offline_evaluation():
    result = _evaluate(ResponseEvaluator())
    assert result.source == "heuristic"


def test_identical_inputs_hit_the_cache():
    service = FakeService(SERVICE_VERDICT)
    evaluator = ResponseEvaluator(make_gateway(service), cache=ResponseCache())
    first = _evaluate(evaluator)
    second = _evaluate(evaluator)
    assert first == second
    assert service.calls == 1


def test_classify_failure():
    assert classify_failure(LlmConfigError("x")) == "unavailable"
    assert classify_failure(RateLimitedError()) == "busy"
    assert classify_failure(ServiceBusyError()) == "busy"
    assert classify_failure(LlmTransportError("x")) == "degraded"
