"""Wiring for a fully configured interview machine."""
from __future__ import annotations

import random
from typing import Optional

from agents.followup import FollowUpGenerator
from agents.heuristics import HeuristicEvaluator, load_policy
from agents.qg.selector import QuestionSelector
from agents.response_evaluator import ResponseEvaluator
from config import EVALUATOR_ROUTE, FOLLOWUP_ROUTE, QUESTION_ROUTE, route_for
from config.settings import Settings, settings as default_settings
from llm_gateway import LlmGateway, RateLimiter, ResponseCache
from observability.tracing import PerformanceMonitor
from services.autosave import Autosaver
from storage.session_store import SessionStore

from .machine import InterviewMachine


def build_machine(
    cfg: Optional[Settings] = None,
    *,
    gateway: Optional[LlmGateway] = None,
    store: Optional[SessionStore] = None,
    rng: Optional[random.Random] = None,
    monitor: Optional[PerformanceMonitor] = None,
    offline: bool = False,
) -> InterviewMachine:
    """Assemble evaluator, selector, follow-ups and storage around one shared gateway.

    ``offline=True`` skips the external service entirely: evaluation uses the
    heuristics and questions come from the built-in pool.
    """

    cfg = cfg or default_settings
    monitor = monitor or PerformanceMonitor()
    if offline:
        gateway = None
    elif gateway is None:
        gateway = LlmGateway(limiter=RateLimiter(max_calls=cfg.RATE_LIMIT_PER_MINUTE))

    store = store or SessionStore(cfg.STORAGE_DIR, cfg.STORAGE_KEY, cfg.BACKUP_KEY)
    heuristic = HeuristicEvaluator(load_policy(cfg.HEURISTICS_CONFIG))
    evaluator = ResponseEvaluator(
        gateway,
        heuristic=heuristic,
        route=route_for(EVALUATOR_ROUTE, cfg),
        monitor=monitor,
        cache=ResponseCache(),
    )
    selector = QuestionSelector(
        gateway,
        route=route_for(QUESTION_ROUTE, cfg),
        rng=rng,
        dynamic_probability=cfg.DYNAMIC_QUESTION_PROBABILITY,
        monitor=monitor,
    )
    followups = FollowUpGenerator(gateway, route=route_for(FOLLOWUP_ROUTE, cfg), monitor=monitor)
    autosaver = Autosaver(store, debounce_s=cfg.AUTOSAVE_DEBOUNCE_S, interval_s=cfg.AUTOSAVE_INTERVAL_S)
    machine = InterviewMachine(
        evaluator=evaluator,
        selector=selector,
        followups=followups,
        store=store,
        autosaver=autosaver,
        monitor=monitor,
        tick_interval_s=cfg.TICK_INTERVAL_S,
    )
    return machine


__all__ = ["build_machine"]
