"""Summary report and per-answer insight messages."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from agents.types import CamelModel, Response
from graph.state import Session


class ResponseInsight(CamelModel):
    question_id: str
    base_question_id: str
    question_text: Optional[str] = None
    is_follow_up: bool
    is_weak: bool
    strengths: List[str] = Field(default_factory=list)
    reasoning: str = ""


class ExampleAnswer(BaseModel):  # STAR-style template shown on the summary screen
    question_type: str
    context: str
    challenge: str
    solution: str
    result: str


class SummaryReport(CamelModel):
    session_id: str
    candidate_name: str
    role: str
    total_answered: int
    strong_count: int
    weak_count: int
    follow_up_count: int
    strong_rate: int
    weak_question_ids: List[str] = Field(default_factory=list)
    insights: List[ResponseInsight] = Field(default_factory=list)
    example_answer: ExampleAnswer


_EXAMPLES = {
    "hooks": ExampleAnswer(
        question_type="React Hooks challenge",
        context="At my previous company, we had a user profile component that was causing performance issues",
        challenge=(
            "The component was making unnecessary API calls on every render due to poorly placed "
            "useEffect dependencies"
        ),
        solution=(
            "I refactored the useEffect to depend only on user ID, implemented useCallback for the fetch "
            "function, and added useMemo for derived state"
        ),
        result="API calls dropped from 50+ per page load to just 1, and the page load time improved from 3s to 800ms",
    ),
    "performance": ExampleAnswer(
        question_type="performance optimization",
        context="Working on an e-commerce platform, our product listing page was struggling with large datasets",
        challenge="The page would freeze when displaying 1000+ products, especially on mobile devices",
        solution=(
            "I implemented React.lazy for code splitting, added virtualization for the product list, and "
            "optimized images"
        ),
        result="Time to interactive improved from 8 seconds to 2 seconds, and mobile performance scores increased by 60%",
    ),
    "state": ExampleAnswer(
        question_type="state management decision",
        context="Our team was building a multi-step checkout flow with complex form validation",
        challenge="Local state was becoming unwieldy with 15+ form fields and cross-step validation requirements",
        solution=(
            "I migrated from useState to a small store per checkout step and implemented persistence for "
            "form recovery"
        ),
        result="Bugs decreased by 70%, and form recovery reduced cart abandonment by 15%",
    ),
    "architecture": ExampleAnswer(
        question_type="architecture challenge",
        context="Leading frontend development for a SaaS dashboard with 8 developers",
        challenge=(
            "Components were tightly coupled, making features difficult to test and causing frequent "
            "merge conflicts"
        ),
        solution=(
            "I established a design system, implemented a feature-based folder structure, and added strict "
            "TypeScript interfaces"
        ),
        result="Development conflicts dropped 80% and new feature delivery time halved",
    ),
    "generic": ExampleAnswer(
        question_type="technical challenge",
        context="In my last project, we had a React dashboard with performance issues",
        challenge="The component tree was re-rendering on every user action, causing 2-3 second delays",
        solution=(
            "I implemented React.memo for expensive components, used useMemo for calculations, and added "
            "useCallback for event handlers"
        ),
        result="This reduced render time from 2000ms to under 100ms",
    ),
}


def strengths(response: Response) -> List[str]:
    ev = response.evaluation
    found = []
    if ev.has_specifics:
        found.append("technical depth")
    if ev.has_real_example:
        found.append("practical experience")
    if ev.covers_core_points:
        found.append("core concepts")
    return found


def insight_message(response: Optional[Response]) -> str:
    """One-line verdict for the most recent answer, as shown after each evaluation."""

    if response is None:
        return "Response evaluation complete."
    reasoning = response.evaluation.reasoning
    if response.is_follow_up:
        return f"Follow-up evaluation: {reasoning or 'Response assessed for depth and specifics.'}"
    if response.evaluation.is_weak:
        return f"Initial response flagged: {reasoning}"
    found = strengths(response)
    suffix = f" Strengths: {', '.join(found)}." if found else ""
    return f"Response accepted: {reasoning}{suffix}"


def example_answer(responses: List[Response]) -> ExampleAnswer:
    weak = next((r for r in responses if r.evaluation.is_weak), None)
    if weak is None:
        return _EXAMPLES["generic"]
    question_id = weak.base_question_id
    for marker in ("hooks", "performance", "state"):
        if marker in question_id:
            return _EXAMPLES[marker]
    return _EXAMPLES["architecture"]


def build_report(session: Session) -> SummaryReport:
    responses = list(session.responses)
    weak = [r for r in responses if r.evaluation.is_weak]
    total = len(responses)
    strong_count = total - len(weak)

    weak_ids: List[str] = []
    for response in weak:
        if response.base_question_id not in weak_ids:
            weak_ids.append(response.base_question_id)

    insights = []
    for response in responses:
        question = session.question_by_id(response.base_question_id)
        insights.append(
            ResponseInsight(
                question_id=response.question_id,
                base_question_id=response.base_question_id,
                question_text=question.text if question else None,
                is_follow_up=response.is_follow_up,
                is_weak=response.evaluation.is_weak,
                strengths=strengths(response),
                reasoning=response.evaluation.reasoning,
            )
        )

    return SummaryReport(
        session_id=session.session_id,
        candidate_name=session.candidate_name,
        role=session.role,
        total_answered=total,
        strong_count=strong_count,
        weak_count=len(weak),
        follow_up_count=sum(1 for r in responses if r.is_follow_up),
        strong_rate=round(strong_count * 100 / total) if total else 0,
        weak_question_ids=weak_ids,
        insights=insights,
        example_answer=example_answer(responses),
    )


__all__ = [
    "ExampleAnswer",
    "ResponseInsight",
    "SummaryReport",
    "build_report",
    "example_answer",
    "insight_message",
    "strengths",
]
