"""Built-in question pool used when generation is skipped or fails."""
from __future__ import annotations

from typing import Dict, List, Optional

from agents.types import Question

POOL: List[Question] = [
    Question(
        id="react-hooks-1",
        text="Explain the difference between useState and useEffect. When would you use each?",
        follow_up=(
            "I need a specific example. Walk me through a real component where you had performance issues "
            "due to improper useEffect usage. What was the bug and how did you fix it?"
        ),
        category="React Hooks",
        difficulty="intermediate",
    ),
    Question(
        id="state-management-1",
        text="How do you decide between local component state versus global state management?",
        follow_up=(
            "Give me a concrete example from a project. What was the specific point where local state became "
            "insufficient? What metrics or pain points drove that decision?"
        ),
        category="State Management",
        difficulty="senior",
    ),
    Question(
        id="performance-1",
        text="What are some techniques you use to optimize React component performance?",
        follow_up=(
            "Tell me about the worst performance problem you ever debugged in React. What tools did you use? "
            "How did you isolate the issue? What was the root cause?"
        ),
        category="Performance Optimization",
        difficulty="senior",
    ),
    Question(
        id="architecture-1",
        text="How do you structure a large React application?",
        follow_up=(
            "Describe the folder structure and component hierarchy for the most complex React app you built. "
            "How many developers worked on it? How did you prevent conflicts?"
        ),
        category="Component Architecture",
        difficulty="senior",
    ),
    Question(
        id="testing-1",
        text="What is your approach to testing React components?",
        follow_up=(
            "Walk me through testing a component with async operations, user interactions, and external API "
            "calls. Show me the actual test code structure."
        ),
        category="Testing",
        difficulty="intermediate",
    ),
    Question(
        id="hooks-advanced-1",
        text="When would you create a custom hook versus just using built-in hooks?",
        follow_up=(
            "Show me a custom hook you wrote. What problem did it solve? How did you handle edge cases and testing?"
        ),
        category="React Hooks",
        difficulty="senior",
    ),
    Question(
        id="error-boundaries-1",
        text="How do you handle errors in React applications?",
        follow_up=(
            "Describe a production error you had to debug. How did you track it down? What monitoring did you "
            "put in place to prevent it happening again?"
        ),
        category="Error Handling",
        difficulty="senior",
    ),
    Question(
        id="bundle-optimization-1",
        text="How do you optimize bundle size in a React application?",
        follow_up=(
            "Tell me about a time you had to reduce bundle size on a production app. What was the size before "
            "and after? Which techniques had the biggest impact?"
        ),
        category="Performance Optimization",
        difficulty="senior",
    ),
]

POOL_BY_ID: Dict[str, Question] = {question.id: question for question in POOL}


def pool_question(question_id: str) -> Optional[Question]:
    return POOL_BY_ID.get(question_id)


__all__ = ["POOL", "POOL_BY_ID", "pool_question"]
