"""IntentClassifier unit tests."""

import pytest

from src.domain.entities.skill import Category, WorkflowStage
from src.domain.services.intent_classifier import (
    IntentClassifier,
    build_skill_context,
    classify,
    determine_stage,
    extract_entities,
)


def test_prefix_override_wins_with_full_confidence():
    """Explicit category prefixes bypass pattern scoring."""
    cases = {
        "brainstorm: caching ideas": Category.EXPLORE,
        "explore: state libraries": Category.EXPLORE,
        "plan: migrate the auth module": Category.PLAN,
        "code: fix the bug": Category.CODE,
        "debug: write a component": Category.DEBUG,
        "review: the new handler": Category.REVIEW,
        "search: pydantic validators": Category.SEARCH,
    }
    for text, expected in cases.items():
        match = classify(text)
        assert match.category == expected
        assert match.confidence == 1.0


def test_prefix_is_case_insensitive_after_trimming():
    match = classify("   PLAN: rework the settings page")
    assert match.category == Category.PLAN
    assert match.confidence == 1.0


def test_detect_code():
    """Leading verbs route to code with top confidence."""
    for msg in ("write a function to parse dates", "create a component for the navbar", "add a feature flag"):
        match = classify(msg)
        assert match.category == Category.CODE
        assert match.confidence == 0.95
        assert match.matched_pattern is not None


def test_detect_debug():
    match = classify("fix the login bug")
    assert match.category == Category.DEBUG
    assert match.confidence == 0.95


def test_detect_plan():
    match = classify("create a plan for the billing service")
    # plan patterns are scanned before code patterns and ties keep the first found
    assert match.category == Category.PLAN
    assert match.matched_pattern == "create a plan"
    match = classify("break down the billing migration")
    assert match.category == Category.PLAN


def test_detect_search():
    match = classify("look up the latest release of httpx")
    assert match.category == Category.SEARCH


def test_non_word_start_scores_plain_content_match():
    """Input that does not begin with a word scores 0.7 for an unanchored match."""
    match = classify("?? something is broken")
    assert match.category == Category.DEBUG
    assert match.confidence == 0.7


def test_unmatched_input_falls_back_to_general():
    match = classify("hello there")
    assert match.category == Category.GENERAL
    assert match.confidence == 0.5
    assert match.matched_pattern is None


def test_empty_input_is_general():
    for text in ("", "   ", "\n\t"):
        match = classify(text)
        assert match.category == Category.GENERAL
        assert match.confidence == 0.5


def test_long_input_boost():
    """More than ten words below 0.8 confidence gets +0.1."""
    text = "tell me a story about a small dog who lived near the sea"
    assert len(text.split()) > 10
    match = classify(text)
    assert match.category == Category.GENERAL
    assert match.confidence == 0.6


def test_long_input_boost_not_applied_to_high_confidence():
    text = "write a function that takes a list of numbers and returns the sum"
    match = classify(text)
    assert match.category == Category.CODE
    assert match.confidence == 0.95


def test_classify_is_deterministic():
    first = classify("refactor the cache layer")
    second = classify("refactor the cache layer")
    assert first == second


def test_confidence_always_in_range():
    for text in ("", "x", "fix", "explore alternatives to redux and mobx please", "google it"):
        match = classify(text)
        assert 0.0 <= match.confidence <= 1.0


def test_custom_default_confidence():
    classifier = IntentClassifier(default_confidence=0.3)
    match = classifier.classify("hello there")
    assert match.category == Category.GENERAL
    assert match.confidence == 0.3


def test_invalid_default_confidence_rejected():
    with pytest.raises(ValueError):
        IntentClassifier(default_confidence=1.5)


def test_cache_info_and_clear():
    classifier = IntentClassifier()
    classifier.clear_cache()
    classifier.classify("write a parser")
    classifier.classify("write a parser")
    info = classifier.cache_info()
    assert info["hits"] >= 1
    assert info["size"] >= 1
    classifier.clear_cache()
    assert classifier.cache_info()["size"] == 0


def test_extract_entities():
    entities = extract_entities("Write a function named parse_date in Python")
    assert entities.action == "write"
    assert entities.target is not None
    assert "parse_date" in entities.target
    assert entities.language == "python"


def test_extract_entities_empty():
    entities = extract_entities("")
    assert entities.action is None
    assert entities.target is None
    assert entities.language is None


def test_determine_stage():
    assert determine_stage(Category.EXPLORE) == WorkflowStage.THINKING
    assert determine_stage(Category.PLAN) == WorkflowStage.PLANNING
    assert determine_stage(Category.CODE) == WorkflowStage.CODING
    assert determine_stage(Category.DEBUG) == WorkflowStage.CODING
    assert determine_stage(Category.REVIEW) == WorkflowStage.REVIEWING
    assert determine_stage(Category.GENERAL) == WorkflowStage.IDLE


def test_build_skill_context():
    context = build_skill_context("fix the crash in typescript")
    assert context.category == Category.DEBUG
    assert context.stage == WorkflowStage.CODING
    assert context.requires_files is True
    assert context.entities.language == "typescript"
    assert context.timestamp > 0


def test_build_skill_context_with_forced_category():
    context = build_skill_context("hello", Category.REVIEW)
    assert context.category == Category.REVIEW
    assert context.stage == WorkflowStage.REVIEWING
