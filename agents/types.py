"""Shared type definitions for agents."""
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Difficulty = Literal["entry", "intermediate", "senior"]
PerformanceLevel = Literal["strong", "struggling", "neutral"]
EvaluationSource = Literal["service", "heuristic"]

FOLLOWUP_SUFFIX = "-followup"


class CamelModel(BaseModel):
    """Base model serialising to the camelCase wire/storage layout."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Question(CamelModel):
    id: str
    text: str
    follow_up: Optional[str] = None
    category: str = "General"
    difficulty: Difficulty = "intermediate"
    expected_answer_elements: List[str] = Field(default_factory=list)
    weak_answer_indicators: List[str] = Field(default_factory=list)
    is_externally_generated: bool = False
    style_tag: Optional[str] = None


class Evaluation(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    is_weak: bool
    has_specifics: bool
    has_real_example: bool
    covers_core_points: bool
    reasoning: str = ""
    source: EvaluationSource = "service"

    @property
    def is_genuinely_weak(self) -> bool:
        """Weak with no partial credit at all; the escalation predicate."""

        return self.is_weak and not (self.has_specifics or self.has_real_example or self.covers_core_points)

    @property
    def is_strong(self) -> bool:
        return not self.is_weak and self.has_specifics and self.covers_core_points


class Response(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    question_id: str
    answer: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    evaluation: Evaluation

    @property
    def is_follow_up(self) -> bool:
        return self.question_id.endswith(FOLLOWUP_SUFFIX)

    @property
    def base_question_id(self) -> str:
        if self.is_follow_up:
            return self.question_id[: -len(FOLLOWUP_SUFFIX)]
        return self.question_id


# ----------------------------------------------------------------------
# External service payloads
# ----------------------------------------------------------------------
class EvaluationOut(CamelModel):
    """Strict evaluator reply: four booleans plus reasoning."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, strict=True)

    is_weak: bool
    has_specifics: bool
    has_real_example: bool
    covers_core_points: bool
    reasoning: str


class GeneratedQuestionOut(CamelModel):
    id: str
    text: str
    follow_up: Optional[str] = None
    category: str
    difficulty: Difficulty
    expected_answer_elements: List[str] = Field(default_factory=list)
    weak_answer_indicators: List[str] = Field(default_factory=list)
    question_type: Optional[str] = None


class FollowUpOut(CamelModel):
    follow_up_question: str
    focus_area: str
    expected_improvement: str


class PreviousResponse(CamelModel):
    is_weak: bool
    has_specifics: bool
    covers_core_points: bool
