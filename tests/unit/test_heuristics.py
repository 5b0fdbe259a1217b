from pathlib import Path

import pytest

from agents.heuristics import (
    DEFAULT_TECHNICAL,
    HeuristicEvaluator,
    HeuristicPolicy,
    load_policy,
)

ROOT = Path(__file__).resolve().parents[2]

STRONG_SENIOR = (
    "At my previous company I optimized a React dashboard: we wrapped an expensive component in React.memo "
    "and used useMemo and useCallback so the list stopped re-rendering. I profiled it with React DevTools "
    "and it cut render time by 60%."
)

NO_EXPERIENCE = (
    "useMemo and useCallback memoize values and functions so a component does not re-render "
    "needlessly when its props are unchanged."
)


@pytest.fixture()
def evaluator():
    return HeuristicEvaluator()


@pytest.mark.parametrize(
    "answer, reason",
    [
        ("I dunno.", "Response too brief to demonstrate knowledge"),
        ("I don't know, sorry about that one", "Explicit statement of inability to answer"),
        ("pass", "Explicit statement of inability to answer"),
        ("I have never used that hook in any project", "Explicit statement of inability to answer"),
        ("It would probably depend on the situation.", "Avoidance or purely hypothetical response"),
    ],
)
def test_trivial_rejects_are_weak_with_rule_reason(evaluator, answer, reason):
    result = evaluator.evaluate(answer, "intermediate")
    assert result.is_weak is True
    assert result.reasoning == reason
    assert result.is_genuinely_weak
    assert result.source == "heuristic"


def test_pass_inside_a_sentence_is_not_inability(evaluator):
    assert evaluator.trivial_reject("I would pass the props down through context to avoid drilling") is None


def test_strong_senior_answer(evaluator):
    result = evaluator.evaluate(STRONG_SENIOR, "senior")
    assert result.is_weak is False
    assert result.has_specifics and result.has_real_example
    assert result.covers_core_points is True
    assert result.reasoning.startswith("Strong answer with technical depth (")
    assert "work experience (" in result.reasoning
    assert "measurable outcomes (" in result.reasoning
    assert result.is_strong


def test_senior_missing_experience_names_shortfall(evaluator):
    result = evaluator.evaluate(NO_EXPERIENCE, "senior")
    assert result.is_weak is True
    assert result.has_specifics is True
    assert result.has_real_example is False
    assert result.reasoning == "Senior-level answer missing: real work experience (found 0, need 1+)"
    assert not result.is_genuinely_weak


def test_senior_missing_everything_lists_each_gap(evaluator):
    answer = "Testing matters a lot to me and I care about quality"
    result = evaluator.evaluate(answer, "senior")
    assert result.is_weak
    assert result.reasoning.startswith("Senior-level answer missing: technical specifics (found 0, need 2+)")
    assert "real work experience (found 0, need 1+)" in result.reasoning
    assert f"sufficient detail (found {len(answer)} chars, need 80+)" in result.reasoning


def test_intermediate_accepts_specifics_without_example(evaluator):
    result = evaluator.evaluate(NO_EXPERIENCE, "intermediate")
    assert result.is_weak is False
    assert result.covers_core_points is False
    assert result.reasoning.startswith("Strong answer with technical depth")


def test_intermediate_short_answer_is_too_brief(evaluator):
    answer = "You should write unit tests for components and hooks."
    result = evaluator.evaluate(answer, "intermediate")
    assert result.is_weak
    assert result.reasoning == f"Answer too brief ({len(answer)} chars) - needs detailed explanation"


def test_intermediate_without_depth_or_experience(evaluator):
    answer = "Testing is important and I always try to make sure everything is covered well before each release."
    result = evaluator.evaluate(answer, "intermediate")
    assert result.is_weak
    assert result.reasoning == "Lacks both technical depth (0 terms) and work experience (0 references)"


def test_evaluation_is_deterministic(evaluator):
    assert evaluator.evaluate(STRONG_SENIOR, "senior") == evaluator.evaluate(STRONG_SENIOR, "senior")


def test_terms_match_on_word_boundaries(evaluator):
    counts = evaluator.counts("memoize the memo")
    assert counts.technical == 1


def test_policy_from_yaml_overrides_only_given_lists(tmp_path):
    path = tmp_path / "heuristics.yaml"
    path.write_text("patterns:\n  experience_phrases:\n    - shipped it\n", encoding="utf-8")
    policy = load_policy(str(path))
    assert policy.experience_phrases == ["shipped it"]
    assert policy.technical_terms == DEFAULT_TECHNICAL
    evaluator = HeuristicEvaluator(policy)
    assert evaluator.counts("we shipped it last week").experience == 1


def test_missing_policy_file_uses_defaults(tmp_path):
    assert load_policy(str(tmp_path / "nope.yaml")) == HeuristicPolicy()


def test_example_policy_file_loads():
    policy = load_policy(str(ROOT / "config" / "heuristics.example.yaml"))
    assert "leverage" in policy.buzzwords
    assert policy.technical_terms == DEFAULT_TECHNICAL
