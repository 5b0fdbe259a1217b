"""Two-tier answer evaluator: LLM service first, offline heuristics as fallback."""
from __future__ import annotations

import logging
from typing import Literal, Optional, Sequence

from agents import prompts
from agents.heuristics import HeuristicEvaluator, heuristic_evaluator
from agents.types import Difficulty, Evaluation, EvaluationOut, PreviousResponse, Response
from config import EVALUATOR_ROUTE, LlmRoute, route_for
from llm_gateway import (
    LlmAuthError,
    LlmConfigError,
    LlmGateway,
    LlmGatewayError,
    RateLimitedError,
    ResponseCache,
    ServiceBusyError,
)
from observability.tracing import PerformanceMonitor, span

logger = logging.getLogger(__name__)

ServiceStatus = Literal["ok", "unavailable", "busy", "degraded"]

QUICK_REJECT_CHARS = 10
RECENT_WINDOW = 3


def classify_failure(exc: BaseException) -> ServiceStatus:
    """Map a gateway failure onto the status a caller can surface."""

    if isinstance(exc, (LlmConfigError, LlmAuthError)):
        return "unavailable"
    if isinstance(exc, (RateLimitedError, ServiceBusyError)):
        return "busy"
    return "degraded"


def recent_summary(responses: Sequence[Response]) -> list[PreviousResponse]:
    return [
        PreviousResponse(
            is_weak=r.evaluation.is_weak,
            has_specifics=r.evaluation.has_specifics,
            covers_core_points=r.evaluation.covers_core_points,
        )
        for r in list(responses)[-RECENT_WINDOW:]
    ]


class ResponseEvaluator:
    def __init__(
        self,
        gateway: Optional[LlmGateway] = None,
        *,
        heuristic: Optional[HeuristicEvaluator] = None,
        route: Optional[LlmRoute] = None,
        monitor: Optional[PerformanceMonitor] = None,
        cache: Optional[ResponseCache] = None,
    ):
        self.gateway = gateway
        self.cache = cache
        self.heuristic = heuristic or heuristic_evaluator()
        self.route = route or route_for(EVALUATOR_ROUTE)
        self.monitor = monitor
        self.last_status: ServiceStatus = "ok"

    async def evaluate(
        self,
        answer: str,
        difficulty: Difficulty,
        question_text: str,
        expected_elements: Optional[Sequence[str]] = None,
        weak_indicators: Optional[Sequence[str]] = None,
        recent_responses: Sequence[Response] = (),
    ) -> Evaluation:
        """Evaluate an answer; never raises past this boundary."""

        trimmed = (answer or "").strip()
        if len(trimmed) < QUICK_REJECT_CHARS or self.gateway is None:
            return self.heuristic.evaluate(trimmed, difficulty)

        previous = recent_summary(recent_responses)
        task = prompts.evaluation_prompt(
            answer=trimmed,
            difficulty=difficulty,
            question_text=question_text,
            expected_elements=expected_elements,
            weak_indicators=weak_indicators,
            previous=previous,
        )
        key = ResponseCache.make_key(
            trimmed,
            difficulty,
            question_text,
            list(expected_elements or []),
            list(weak_indicators or []),
            [p.model_dump_json() for p in previous],
        )
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        try:
            with span(self.monitor, "evaluate_answer"):
                out = await self.gateway.call(
                    task,
                    EvaluationOut,
                    cfg=self.route,
                    system=prompts.EVALUATOR_SYSTEM,
                )
        except LlmGatewayError as exc:
            self.last_status = classify_failure(exc)
            logger.warning("Answer evaluation fell back to heuristics: %s", exc)
            return self.heuristic.evaluate(trimmed, difficulty)
        except Exception:  # noqa: BLE001
            self.last_status = "degraded"
            logger.exception("Unexpected evaluator failure; using heuristics")
            return self.heuristic.evaluate(trimmed, difficulty)

        self.last_status = "ok"
        evaluation = Evaluation(
            is_weak=out.is_weak,
            has_specifics=out.has_specifics,
            has_real_example=out.has_real_example,
            covers_core_points=out.covers_core_points,
            reasoning=out.reasoning[:500],
            source="service",
        )
        if self.cache is not None:
            self.cache.set(key, evaluation)
        return evaluation


__all__ = ["ResponseEvaluator", "ServiceStatus", "classify_failure", "recent_summary"]
