"""Prompt builders for the evaluation, question and follow-up services."""
from __future__ import annotations

from textwrap import dedent
from typing import Iterable, Sequence

from agents.types import Difficulty, Evaluation, PerformanceLevel, PreviousResponse

EVALUATOR_SYSTEM = "You are an expert technical interviewer. Always respond with valid JSON only."
QUESTION_SYSTEM = (
    "You are a senior technical interviewer who creates challenging but fair interview questions. "
    "Always respond with valid JSON only."
)
FOLLOWUP_SYSTEM = (
    "You are a senior technical interviewer who creates targeted follow-up questions. "
    "Always respond with valid JSON only."
)

CATEGORIES = (
    "React Hooks, State Management, Performance, Architecture, Testing, TypeScript, "
    "API Integration, Error Handling, Security, Build Tools"
)

# Templates are dedented before formatting so multi-line answers keep their layout.
_EVALUATION_TEMPLATE = dedent(
    """\
    You are an expert technical interviewer evaluating a candidate's response to a technical interview question.

    QUESTION ({difficulty} level): {question_text}

    CANDIDATE ANSWER: {answer}

    PERFORMANCE CONTEXT: {summary}

    EXPECTED ANSWER ELEMENTS: {expected}

    WEAK ANSWER INDICATORS: {indicators}

    Evaluate this answer like a senior developer would in a real interview. Consider:
    1. Does the answer address the core question with technical accuracy?
    2. Does it demonstrate real-world experience vs just theoretical knowledge?
    3. Are specific examples, tools, or concrete details mentioned?
    4. Does it show depth appropriate for a {difficulty} developer?
    5. Does it avoid the weak answer patterns listed above?

    CONTEXT CONSIDERATION: {leniency}

    Respond with valid JSON in this exact format:
    {{
      "isWeak": boolean,
      "hasSpecifics": boolean,
      "hasRealExample": boolean,
      "coversCorePoints": boolean,
      "reasoning": "specific explanation of the evaluation"
    }}

    Mark as weak only if genuinely inadequate. Adequate answers with room for improvement should not be marked weak."""
)

_QUESTION_TEMPLATE = dedent(
    """\
    Generate a realistic technical interview question for a {difficulty} developer.

    Previous questions already asked: {previous}

    VARIETY REQUIREMENT: {variety}

    FOCUS STRATEGY: {focus}

    PERFORMANCE CONTEXT: {adjustment}

    Requirements:
    - Make it COMPLETELY DIFFERENT from previous questions in style and approach
    - {target}
    - Include a challenging follow-up that requires concrete experience

    Categories to choose from: {categories}

    Respond with valid JSON in this exact format:
    {{
      "id": "unique-id",
      "text": "main question text",
      "followUp": "specific follow-up requiring real experience",
      "category": "category name",
      "difficulty": "{difficulty}",
      "expectedAnswerElements": ["key point 1", "key point 2", "key point 3"],
      "weakAnswerIndicators": ["red flag 1", "red flag 2", "red flag 3"],
      "questionType": "{style_tag}"
    }}"""
)

_FOLLOWUP_TEMPLATE = dedent(
    """\
    You are a senior technical interviewer who needs to create a targeted follow-up question based on a candidate's weak initial response.

    ORIGINAL QUESTION ({difficulty}): {question}

    CANDIDATE'S ANSWER: {answer}

    AI EVALUATION: {reasoning}

    DETECTED ISSUES:
    - Missing specifics: {missing_specifics}
    - No real examples: {missing_example}
    - Missed core points: {missing_core}

    Create a targeted follow-up question that addresses the specific weaknesses identified,
    is more specific and concrete than the original question, and pushes for details.

    Respond with valid JSON in this exact format:
    {{
      "followUpQuestion": "the targeted follow-up question text",
      "focusArea": "what specific area this targets",
      "expectedImprovement": "what the candidate should demonstrate in their response"
    }}"""
)


def _joined(items: Iterable[str] | None, default: str) -> str:
    values = [item for item in (items or []) if item]
    return ", ".join(values) if values else default


def performance_context(previous: Sequence[PreviousResponse]) -> tuple[str, str]:
    """Summarise recent answers so the evaluator can calibrate leniency."""

    strong = sum(1 for r in previous if not r.is_weak)
    total = len(previous)
    summary = (
        f"Candidate has answered {strong}/{total} questions well so far."
        if total
        else "This is their first question."
    )
    if strong >= 2:
        leniency = "Candidate has shown competence previously - give benefit of doubt on borderline responses"
    elif strong == 0 and total > 0:
        leniency = "Candidate struggling - be encouraging but maintain standards"
    else:
        leniency = "First impression - evaluate fairly without bias"
    return summary, leniency


def evaluation_prompt(
    *,
    answer: str,
    difficulty: Difficulty,
    question_text: str,
    expected_elements: Sequence[str] | None,
    weak_indicators: Sequence[str] | None,
    previous: Sequence[PreviousResponse],
) -> str:
    summary, leniency = performance_context(previous)
    return _EVALUATION_TEMPLATE.format(
        difficulty=difficulty,
        question_text=question_text,
        answer=answer,
        summary=summary,
        expected=_joined(expected_elements, "Not specified"),
        indicators=_joined(weak_indicators, "Generic weak responses"),
        leniency=leniency,
    )


def performance_adjustment(level: PerformanceLevel) -> str:
    if level == "struggling":
        return "Keep questions accessible but probing. Build confidence while maintaining standards."
    if level == "strong":
        return "Escalate to architecture and design challenges. Test senior-level thinking."
    return "Standard intermediate to senior progression"


def question_prompt(
    *,
    difficulty: Difficulty,
    previous_questions: Sequence[str],
    weak_areas: Sequence[str],
    performance_level: PerformanceLevel,
    variety_instruction: str,
    style_tag: str,
) -> str:
    if weak_areas:
        focus = f"Focus on strengthening: {', '.join(weak_areas)}"
        target = f"Target weak areas: {', '.join(weak_areas)} with questions that probe deeper understanding"
    else:
        focus = "Choose any relevant technical area"
        target = f"Focus on real-world scenarios that {difficulty} developers actually encounter"
    return _QUESTION_TEMPLATE.format(
        difficulty=difficulty,
        previous=_joined(previous_questions, "none"),
        variety=variety_instruction,
        focus=focus,
        adjustment=performance_adjustment(performance_level),
        target=target,
        categories=CATEGORIES,
        style_tag=style_tag,
    )


def followup_prompt(*, original_question: str, original_answer: str, evaluation: Evaluation, difficulty: Difficulty) -> str:
    return _FOLLOWUP_TEMPLATE.format(
        difficulty=difficulty,
        question=original_question,
        answer=original_answer,
        reasoning=evaluation.reasoning,
        missing_specifics=str(not evaluation.has_specifics).lower(),
        missing_example=str(not evaluation.has_real_example).lower(),
        missing_core=str(not evaluation.covers_core_points).lower(),
    )


__all__ = [
    "EVALUATOR_SYSTEM",
    "FOLLOWUP_SYSTEM",
    "QUESTION_SYSTEM",
    "evaluation_prompt",
    "followup_prompt",
    "performance_adjustment",
    "performance_context",
    "question_prompt",
]
