"""Targeted follow-up generation for escalated (pressure) questions."""
from __future__ import annotations

import logging
from typing import Optional

from agents import prompts
from agents.response_evaluator import ServiceStatus, classify_failure
from agents.types import Evaluation, FollowUpOut, Question
from config import FOLLOWUP_ROUTE, LlmRoute, route_for
from llm_gateway import LlmGateway, LlmGatewayError
from observability.tracing import PerformanceMonitor, span

logger = logging.getLogger(__name__)


class FollowUpGenerator:
    def __init__(
        self,
        gateway: Optional[LlmGateway] = None,
        *,
        route: Optional[LlmRoute] = None,
        monitor: Optional[PerformanceMonitor] = None,
    ):
        self.gateway = gateway
        self.route = route or route_for(FOLLOWUP_ROUTE)
        self.monitor = monitor
        self.last_status: ServiceStatus = "ok"

    async def generate(self, question: Question, answer: str, evaluation: Evaluation) -> Optional[FollowUpOut]:
        """Ask the service for a follow-up aimed at the detected gaps; None on any failure."""

        if self.gateway is None:
            return None
        task = prompts.followup_prompt(
            original_question=question.text,
            original_answer=answer,
            evaluation=evaluation,
            difficulty=question.difficulty,
        )
        try:
            with span(self.monitor, "generate_followup"):
                out = await self.gateway.call(task, FollowUpOut, cfg=self.route, system=prompts.FOLLOWUP_SYSTEM)
        except LlmGatewayError as exc:
            self.last_status = classify_failure(exc)
            logger.warning("Follow-up generation failed; keeping canned follow-up: %s", exc)
            return None
        except Exception:  # noqa: BLE001
            self.last_status = "degraded"
            logger.exception("Unexpected follow-up failure; keeping canned follow-up")
            return None
        self.last_status = "ok"
        if not out.follow_up_question.strip():
            return None
        return out


__all__ = ["FollowUpGenerator"]
