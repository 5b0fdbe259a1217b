"""Offline answer-quality heuristics with a YAML-replaceable keyword policy."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

import yaml

from agents.types import Difficulty, Evaluation
from config.settings import settings

logger = logging.getLogger(__name__)

MIN_ANSWER_CHARS = 25
SUBSTANCE_CHARS = 80
MIN_TECHNICAL_TERMS = 2
MIN_EXPERIENCE_REFERENCES = 1
MAX_BUZZWORDS = 3

DEFAULT_INABILITY = [
    r"\b(can't|cannot|can not)\b.*\b(answer|elaborate|explain|help|say|tell)\b",
    r"\b(don't know|dont know|no idea|no clue|not sure|unsure)\b",
    r"\b(haven't|havent|never)\b.*\b(done|worked|used|tried|experienced)\b",
    r"\b(no experience|not familiar)\b",
    r"^\s*(pass|skip)\b",
]

DEFAULT_HEDGES = [
    r"^(yes|no|maybe|i think|probably|i guess|well|um|uh|hmm)\.?$",
]

DEFAULT_HYPOTHETICALS = [
    r"\b(would|could|might|should)\b.*\b(probably|maybe|possibly|theoretically)\b",
]

DEFAULT_TECHNICAL = [
    "usememo", "usecallback", "useeffect", "usestate", "usecontext", "usereducer",
    r"react\.memo", "memo", "lazy", "suspense", "portal", "fragment", "strictmode",
    "jsx", "tsx", "component", "props", "state", "hook", "lifecycle", "render",
    "reconciliation", "virtual dom", "fiber", "ssr", "csr", "hydration",
    "code splitting", "tree shaking", "webpack", "vite", "rollup", "babel",
    "typescript", "jest", "cypress", "testing library", "enzyme", "storybook",
    "redux", "zustand", "mobx", "context api", "custom hook",
    "higher order component", "hoc", "compound component", "render prop",
    "children", "ref", "useref", "useimperativehandle", "forwardref", "api",
    "rest", "graphql", "fetch", "axios", "async", "await", "promise", "callback",
    "event handler", "onclick", "onchange", "onsubmit", "performance",
    "optimization", "bundle", "lazy loading", "memoization", "debounce",
    "throttle", "lighthouse", "devtools", "eslint", "prettier", "git", "github",
    "deployment", "ci cd", "docker", "kubernetes",
]

DEFAULT_EXPERIENCE = [
    r"at (my )?(previous|last|current|former) (job|company|role|position|workplace)",
    r"at [a-z]+ (company|corp|inc|llc|startup|agency)",
    r"we (built|developed|implemented|deployed|shipped|created|designed)",
    r"our (team|client|project|application|system|product|website|platform)",
    r"production (environment|deployment|issue|bug|system|application)",
    r"i (built|developed|implemented|fixed|debugged|optimized|refactored|designed|architected|created|shipped)",
    r"real (project|application|system|world|client)",
    r"work(ed|ing) (on|with|for|at)",
    r"client (project|requirement|feedback|request)",
    r"user (feedback|complaints|issues|testing|research)",
    "launched", "released", "delivered", "maintained",
]

DEFAULT_METRICS = [
    r"\d+(\.\d+)?%",
    r"\d+x (faster|slower|better|worse)",
    r"\d+ (ms|milliseconds?|seconds?|minutes?|hours?|days?|weeks?|months?|users?|customers?|requests?|calls?|mb|kb|gb|tb)",
    r"(improved|reduced|increased|decreased|boosted|enhanced|optimized) by \d+",
    r"(from|before) \d+ (to|after) \d+",
    r"(before|after): ?\d+",
    r"up to \d+", r"over \d+", r"under \d+",
    r"\d+ (times|fold)",
]

DEFAULT_BUZZWORDS = [
    "leverage", "utilize", "implement", "optimize", "enhance", "streamline",
    "robust", "scalable", "efficient", "effective", "powerful", "flexible",
    "innovative", "cutting edge", "state of the art", "best practices",
    "industry standards", "enterprise grade", "mission critical",
    "game changing", "revolutionary", "disruptive", "synergistic", "holistic",
    "comprehensive", "strategic", "tactical", "dynamic", "agile", "lean",
    "seamless", "intuitive",
]


@dataclass(frozen=True)
class HeuristicPolicy:
    """Keyword and phrase lists driving the offline evaluator.

    Every list holds regular-expression fragments. Term categories are
    joined into one case-insensitive alternation so matches are counted
    without overlap.
    """

    inability: List[str] = field(default_factory=lambda: list(DEFAULT_INABILITY))
    hedges: List[str] = field(default_factory=lambda: list(DEFAULT_HEDGES))
    hypotheticals: List[str] = field(default_factory=lambda: list(DEFAULT_HYPOTHETICALS))
    technical_terms: List[str] = field(default_factory=lambda: list(DEFAULT_TECHNICAL))
    experience_phrases: List[str] = field(default_factory=lambda: list(DEFAULT_EXPERIENCE))
    metrics: List[str] = field(default_factory=lambda: list(DEFAULT_METRICS))
    buzzwords: List[str] = field(default_factory=lambda: list(DEFAULT_BUZZWORDS))

    @classmethod
    def from_mapping(cls, data: Dict[str, List[str]]) -> "HeuristicPolicy":
        base = cls()
        overrides = {
            name: list(values)
            for name, values in (data or {}).items()
            if name in cls.__dataclass_fields__ and values
        }
        return replace(base, **overrides)


def _load_yaml(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_policy(path: Optional[str] = None) -> HeuristicPolicy:
    """Load the policy from YAML, falling back to the built-in lists."""

    path = path or os.environ.get("HEURISTICS_CONFIG", settings.HEURISTICS_CONFIG)
    try:
        cfg = _load_yaml(path)
    except FileNotFoundError:
        return HeuristicPolicy()
    logger.info("Loaded heuristic policy from %s", path)
    return HeuristicPolicy.from_mapping(cfg.get("patterns", cfg))


def _alternation(fragments: List[str]) -> re.Pattern[str]:
    body = "|".join(f"(?:{fragment})" for fragment in fragments)
    return re.compile(rf"(?<!\w)(?:{body})(?!\w)", re.IGNORECASE)


@dataclass(frozen=True)
class SignalCounts:
    technical: int
    experience: int
    metrics: int
    buzzwords: int


class HeuristicEvaluator:
    """Deterministic, network-free answer evaluator."""

    def __init__(self, policy: Optional[HeuristicPolicy] = None):
        self.policy = policy or HeuristicPolicy()
        self._inability = [re.compile(p, re.IGNORECASE) for p in self.policy.inability]
        self._hedges = [re.compile(p, re.IGNORECASE) for p in self.policy.hedges]
        self._hypotheticals = [re.compile(p, re.IGNORECASE) for p in self.policy.hypotheticals]
        self._technical = _alternation(self.policy.technical_terms)
        self._experience = _alternation(self.policy.experience_phrases)
        self._metrics = _alternation(self.policy.metrics)
        self._buzzwords = _alternation(self.policy.buzzwords)

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------
    def counts(self, answer: str) -> SignalCounts:
        return SignalCounts(
            technical=sum(1 for _ in self._technical.finditer(answer)),
            experience=sum(1 for _ in self._experience.finditer(answer)),
            metrics=sum(1 for _ in self._metrics.finditer(answer)),
            buzzwords=sum(1 for _ in self._buzzwords.finditer(answer)),
        )

    def trivial_reject(self, answer: str) -> Optional[str]:
        """Return the reason a trivially inadequate answer is rejected."""

        trimmed = answer.strip()
        lowered = trimmed.lower()
        if any(p.search(answer) for p in self._inability):
            return "Explicit statement of inability to answer"
        if len(trimmed) < MIN_ANSWER_CHARS:
            return "Response too brief to demonstrate knowledge"
        if any(p.search(lowered) for p in self._hedges):
            return "Avoidance or purely hypothetical response"
        if len(trimmed) < SUBSTANCE_CHARS and any(p.search(answer) for p in self._hypotheticals):
            return "Avoidance or purely hypothetical response"
        return None

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def evaluate(self, answer: str, difficulty: Difficulty) -> Evaluation:
        answer = answer or ""
        reason = self.trivial_reject(answer)
        if reason:
            return Evaluation(
                is_weak=True,
                has_specifics=False,
                has_real_example=False,
                covers_core_points=False,
                reasoning=reason,
                source="heuristic",
            )

        length = len(answer.strip())
        counts = self.counts(answer)
        has_specifics = counts.technical >= MIN_TECHNICAL_TERMS
        has_real_example = counts.experience >= MIN_EXPERIENCE_REFERENCES
        has_metrics = counts.metrics >= 1
        has_substance = length >= SUBSTANCE_CHARS

        is_weak = False
        reasoning = ""
        if difficulty == "senior":
            missing: List[str] = []
            if not has_specifics:
                missing.append(f"technical specifics (found {counts.technical}, need {MIN_TECHNICAL_TERMS}+)")
            if not has_real_example:
                missing.append(
                    f"real work experience (found {counts.experience}, need {MIN_EXPERIENCE_REFERENCES}+)"
                )
            if not has_substance:
                missing.append(f"sufficient detail (found {length} chars, need {SUBSTANCE_CHARS}+)")
            if missing:
                is_weak = True
                reasoning = "Senior-level answer missing: " + ", ".join(missing)
        elif not has_substance:
            is_weak = True
            reasoning = f"Answer too brief ({length} chars) - needs detailed explanation"
        elif not has_specifics and not has_real_example:
            is_weak = True
            reasoning = (
                f"Lacks both technical depth ({counts.technical} terms) "
                f"and work experience ({counts.experience} references)"
            )
        elif counts.buzzwords > MAX_BUZZWORDS and counts.technical == 0 and counts.experience == 0:
            is_weak = True
            reasoning = "Generic buzzwords without concrete technical details or experience"

        if not is_weak:
            strengths: List[str] = []
            if has_specifics:
                strengths.append(f"technical depth ({counts.technical} terms)")
            if has_real_example:
                strengths.append(f"work experience ({counts.experience} references)")
            if has_metrics:
                strengths.append(f"measurable outcomes ({counts.metrics} metrics)")
            reasoning = (
                "Strong answer with " + " and ".join(strengths)
                if strengths
                else "Answer demonstrates good understanding with sufficient detail"
            )

        return Evaluation(
            is_weak=is_weak,
            has_specifics=has_specifics,
            has_real_example=has_real_example,
            covers_core_points=has_specifics and has_real_example,
            reasoning=reasoning,
            source="heuristic",
        )


_evaluator: Optional[HeuristicEvaluator] = None


def heuristic_evaluator() -> HeuristicEvaluator:
    global _evaluator
    if _evaluator is None:
        _evaluator = HeuristicEvaluator(load_policy())
    return _evaluator


def evaluate_offline(answer: str, difficulty: Difficulty) -> Evaluation:
    """Convenience wrapper around the process-wide heuristic evaluator."""

    return heuristic_evaluator().evaluate(answer, difficulty)


__all__ = [
    "HeuristicEvaluator",
    "HeuristicPolicy",
    "SignalCounts",
    "evaluate_offline",
    "heuristic_evaluator",
    "load_policy",
]
