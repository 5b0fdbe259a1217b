"""Question style tags used to force variety in generated questions."""
from __future__ import annotations

import random
from typing import Dict, Iterable, List, Optional, Tuple

QUESTION_TYPES: List[str] = [
    "scenario-based",
    "debugging",
    "architecture",
    "optimization",
    "best-practices",
    "code-review",
    "comparison",
    "troubleshooting",
    "scaling",
    "trade-offs",
]

TYPE_INSTRUCTIONS: Dict[str, str] = {
    "scenario-based": "Create a realistic workplace scenario where they need to make technical decisions",
    "debugging": "Present a specific error or bug that requires systematic troubleshooting",
    "architecture": "Ask them to design or structure a complex system or component",
    "optimization": "Give them a performance problem that needs improvement",
    "best-practices": "Question their knowledge of industry standards and best approaches",
    "code-review": "Show problematic code and ask for their review feedback",
    "comparison": "Ask them to compare different approaches or technologies",
    "troubleshooting": "Present a user-facing issue that needs investigation",
    "scaling": "Challenge them with scale and performance considerations",
    "trade-offs": "Explore their understanding of technical decision-making",
}


def unused_types(used: Iterable[str]) -> List[str]:
    seen = set(used)
    return [tag for tag in QUESTION_TYPES if tag not in seen]


def pick_style(used: Iterable[str], rng: Optional[random.Random] = None) -> Tuple[str, bool]:
    """Pick a style tag, preferring unused ones.

    Returns the tag and whether the closed set was already exhausted.
    """

    rng = rng or random.Random()
    available = unused_types(used)
    if not available:
        return rng.choice(QUESTION_TYPES), True
    return rng.choice(available), False


def style_instruction(tag: str, exhausted: bool) -> str:
    if exhausted:
        return f"Vary your approach - try a completely different style: {tag}"
    return f"Use a {tag} approach: {TYPE_INSTRUCTIONS[tag]}"


__all__ = ["QUESTION_TYPES", "TYPE_INSTRUCTIONS", "pick_style", "style_instruction", "unused_types"]
