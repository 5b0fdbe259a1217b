"""Adaptive question selection over the built-in pool and the generation service."""
from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from agents import prompts
from agents.qg.pool import POOL
from agents.qg.variety import QUESTION_TYPES, pick_style, style_instruction
from agents.response_evaluator import ServiceStatus, classify_failure
from agents.types import Difficulty, GeneratedQuestionOut, PerformanceLevel, Question, Response
from config import QUESTION_ROUTE, LlmRoute, route_for
from config.settings import settings
from llm_gateway import LlmGateway, LlmGatewayError
from observability.tracing import PerformanceMonitor, span

logger = logging.getLogger(__name__)

PERFORMANCE_WINDOW = 3
MAX_WEAK_AREAS = 2


@dataclass(frozen=True)
class SelectionContext:
    """Inputs derived from the response history before a question is picked."""

    target_difficulty: Difficulty
    performance_level: PerformanceLevel
    weak_areas: List[str]


def performance_window(requested: Difficulty, responses: Sequence[Response]) -> Tuple[Difficulty, PerformanceLevel]:
    recent = list(responses)[-PERFORMANCE_WINDOW:]
    weak = sum(1 for r in recent if r.evaluation.is_weak)
    strong = sum(1 for r in recent if r.evaluation.is_strong)
    if strong >= 2 and weak == 0:
        return "senior", "strong"
    if weak >= 2:
        return "intermediate", "struggling"
    return requested, "neutral"


def weak_area_categories(responses: Sequence[Response], known: Dict[str, Question]) -> List[str]:
    """Categories of weak answers, deduplicated, most recent two kept."""

    categories: List[str] = []
    for response in responses:
        if not response.evaluation.is_weak:
            continue
        question = known.get(response.base_question_id)
        if question and question.category and question.category not in categories:
            categories.append(question.category)
    return categories[-MAX_WEAK_AREAS:]


class QuestionSelector:
    def __init__(
        self,
        gateway: Optional[LlmGateway] = None,
        *,
        route: Optional[LlmRoute] = None,
        rng: Optional[random.Random] = None,
        pool: Optional[Sequence[Question]] = None,
        dynamic_probability: Optional[float] = None,
        monitor: Optional[PerformanceMonitor] = None,
    ):
        self.gateway = gateway
        self.route = route or route_for(QUESTION_ROUTE)
        self.rng = rng or random.Random()
        self.pool: List[Question] = list(pool if pool is not None else POOL)
        self.dynamic_probability = (
            settings.DYNAMIC_QUESTION_PROBABILITY if dynamic_probability is None else dynamic_probability
        )
        self.monitor = monitor
        self.last_status: ServiceStatus = "ok"

    def context(
        self,
        requested: Difficulty,
        responses: Sequence[Response],
        known_questions: Iterable[Question] = (),
    ) -> SelectionContext:
        known = {q.id: q for q in self.pool}
        known.update({q.id: q for q in known_questions})
        difficulty, level = performance_window(requested, responses)
        return SelectionContext(
            target_difficulty=difficulty,
            performance_level=level,
            weak_areas=weak_area_categories(responses, known),
        )

    def should_generate(self, responses: Sequence[Response], weak_areas: Sequence[str]) -> bool:
        if self.gateway is None:
            return False
        if responses or weak_areas:
            return True
        return self.rng.random() < self.dynamic_probability

    async def next_question(
        self,
        target_difficulty: Difficulty,
        used_ids: Sequence[str],
        responses: Sequence[Response],
        used_question_types: Sequence[str] = (),
        known_questions: Iterable[Question] = (),
    ) -> Question:
        """Return the next question; degrades to a reused pool question rather than failing."""

        known_questions = list(known_questions)
        ctx = self.context(target_difficulty, responses, known_questions)
        known = {q.id: q for q in self.pool}
        known.update({q.id: q for q in known_questions})
        previous_texts = [known[qid].text if qid in known else qid for qid in used_ids]
        used = set(used_ids)

        if self.should_generate(responses, ctx.weak_areas):
            generated = await self._generate(ctx, previous_texts, used_question_types, used)
            if generated is not None:
                return generated

        candidates = [q for q in self.pool if q.difficulty == ctx.target_difficulty and q.id not in used]
        if not candidates:
            candidates = [q for q in self.pool if q.id not in used]

        if not candidates:
            logger.info("Question pool exhausted; retrying generation")
            generated = await self._generate(ctx, previous_texts, (), used)
            if generated is not None:
                return generated
            logger.warning("Generation unavailable and pool exhausted; reusing first pool question")
            return self.pool[0]

        if ctx.weak_areas:
            for question in candidates:
                category = question.category.lower()
                if any(area.lower() in category for area in ctx.weak_areas):
                    return question

        return self.rng.choice(candidates)

    async def _generate(
        self,
        ctx: SelectionContext,
        previous_texts: Sequence[str],
        used_question_types: Sequence[str],
        used_ids: set,
    ) -> Optional[Question]:
        if self.gateway is None:
            return None
        tag, exhausted = pick_style(used_question_types, self.rng)
        task = prompts.question_prompt(
            difficulty=ctx.target_difficulty,
            previous_questions=previous_texts,
            weak_areas=ctx.weak_areas,
            performance_level=ctx.performance_level,
            variety_instruction=style_instruction(tag, exhausted),
            style_tag=tag,
        )
        try:
            with span(self.monitor, "generate_question"):
                out = await self.gateway.call(
                    task,
                    GeneratedQuestionOut,
                    cfg=self.route,
                    system=prompts.QUESTION_SYSTEM,
                )
        except LlmGatewayError as exc:
            self.last_status = classify_failure(exc)
            logger.warning("Question generation failed, falling back to pool: %s", exc)
            return None
        except Exception:  # noqa: BLE001
            self.last_status = "degraded"
            logger.exception("Unexpected question generation failure; falling back to pool")
            return None
        self.last_status = "ok"
        return _as_question(out, tag, used_ids)


def _as_question(out: GeneratedQuestionOut, tag: str, used_ids: set) -> Question:
    question_id = out.id.strip() or f"generated-{uuid.uuid4().hex[:8]}"
    if question_id in used_ids:
        question_id = f"{question_id}-{uuid.uuid4().hex[:6]}"
    style = out.question_type if out.question_type in QUESTION_TYPES else tag
    return Question(
        id=question_id,
        text=out.text,
        follow_up=out.follow_up or None,
        category=out.category,
        difficulty=out.difficulty,
        expected_answer_elements=out.expected_answer_elements,
        weak_answer_indicators=out.weak_answer_indicators,
        is_externally_generated=True,
        style_tag=style,
    )


__all__ = [
    "QuestionSelector",
    "SelectionContext",
    "performance_window",
    "weak_area_categories",
]
