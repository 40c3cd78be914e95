"""Intent classifier - scored pattern matching over the category table, with LRU cache."""

import re
import time
from functools import lru_cache

from src.domain.entities.skill import Category, Entities, IntentMatch, SkillContext, WorkflowStage
from src.domain.services.categories import CATEGORY_CONFIGS

DEFAULT_CONFIDENCE = 0.5
LONG_INPUT_WORDS = 10
LONG_INPUT_BOOST = 0.1
BOOST_CEILING = 0.8

# Explicit "<category>:" prefixes override pattern scoring
PREFIX_OVERRIDES: dict[str, Category] = {
    "brainstorm:": Category.EXPLORE,
    "explore:": Category.EXPLORE,
    "plan:": Category.PLAN,
    "code:": Category.CODE,
    "debug:": Category.DEBUG,
    "review:": Category.REVIEW,
    "search:": Category.SEARCH,
}

_LEADING_WORD_RE = re.compile(r"^[\s\"']*\w")
_ACTION_RE = re.compile(r"^(write|create|build|add|fix|update|modify|refactor|search)", re.IGNORECASE)
_TARGET_RE = re.compile(
    r"(?:a|an|the)?\s*(?:file|component|function|hook|class|page|button|modal|form|input)"
    r"\s*(?:named|called|for|to)?\s*[\"']?([^\"'\n,]+)",
    re.IGNORECASE,
)
_LANGUAGE_RE = re.compile(
    r"\b(typescript|javascript|python|react|html|css|json|rust|golang|java|sql|bash)\b",
    re.IGNORECASE,
)

_STAGES: dict[Category, WorkflowStage] = {
    Category.EXPLORE: WorkflowStage.THINKING,
    Category.PLAN: WorkflowStage.PLANNING,
    Category.CODE: WorkflowStage.CODING,
    Category.DEBUG: WorkflowStage.CODING,
    Category.REVIEW: WorkflowStage.REVIEWING,
    Category.SEARCH: WorkflowStage.THINKING,
    Category.GENERAL: WorkflowStage.IDLE,
}


def _score(text: str, pattern: re.Pattern) -> float:
    """Confidence contributed by one pattern (0 when it does not match)."""
    if not pattern.search(text):
        return 0.0
    if _LEADING_WORD_RE.match(text):
        return 0.95
    if pattern.pattern.startswith("^"):
        return 0.9
    return 0.7


@lru_cache(maxsize=256)
def _classify_impl(text: str, default_confidence: float) -> IntentMatch:
    """Run scoring on trimmed input (cached at module level)."""
    normalized = text.lower()
    if not normalized:
        return IntentMatch(category=Category.GENERAL, confidence=default_confidence)

    for prefix, category in PREFIX_OVERRIDES.items():
        if normalized.startswith(prefix):
            return IntentMatch(category=category, confidence=1.0, matched_pattern=prefix)

    best_category = Category.GENERAL
    best_confidence = 0.0
    best_pattern: str | None = None
    for category, config in CATEGORY_CONFIGS.items():
        for pattern in config.trigger_patterns:
            confidence = _score(text, pattern)
            if confidence > best_confidence:
                best_category = category
                best_confidence = confidence
                best_pattern = pattern.pattern

    if best_pattern is None:
        best_confidence = default_confidence

    if len(normalized.split()) > LONG_INPUT_WORDS and best_confidence < BOOST_CEILING:
        best_confidence = min(1.0, round(best_confidence + LONG_INPUT_BOOST, 2))

    return IntentMatch(
        category=best_category,
        confidence=best_confidence,
        matched_pattern=best_pattern,
    )


def classify(text: str, default_confidence: float = DEFAULT_CONFIDENCE) -> IntentMatch:
    """Classify text into a category. Never raises; unmatched input resolves to GENERAL."""
    return _classify_impl((text or "").strip(), default_confidence)


def extract_entities(text: str) -> Entities:
    """Best-effort action / target / language extraction."""
    text = (text or "").strip()
    action = target = language = None
    if match := _ACTION_RE.match(text):
        action = match.group(1).lower()
    if match := _TARGET_RE.search(text):
        target = match.group(1).strip() or None
    if match := _LANGUAGE_RE.search(text):
        language = match.group(1).lower()
    return Entities(action=action, target=target, language=language)


def determine_stage(category: Category) -> WorkflowStage:
    """Workflow stage a category starts in."""
    return _STAGES[category]


def build_skill_context(text: str, category: Category | None = None) -> SkillContext:
    """Bundle routing metadata for the dispatch collaborator."""
    match = classify(text)
    category = category or match.category
    return SkillContext(
        category=category,
        confidence=match.confidence,
        stage=determine_stage(category),
        entities=extract_entities(text),
        requires_files=CATEGORY_CONFIGS[category].requires_file_context,
        timestamp=int(time.time() * 1000),
    )


class IntentClassifier:
    """Scored heuristic classifier with a configurable fallback confidence."""

    def __init__(self, default_confidence: float = DEFAULT_CONFIDENCE):
        """Initialize with the confidence reported for unmatched input."""
        if not 0.0 <= default_confidence <= 1.0:
            raise ValueError(f"default_confidence must be within [0, 1], got {default_confidence}")
        self._default_confidence = default_confidence

    @property
    def default_confidence(self) -> float:
        return self._default_confidence

    def classify(self, message: str) -> IntentMatch:
        """Classify message (cached)."""
        return classify(message, self._default_confidence)

    def cache_info(self) -> dict:
        """Get cache statistics."""
        info = _classify_impl.cache_info()
        return {
            "hits": info.hits,
            "misses": info.misses,
            "size": info.currsize,
            "maxsize": info.maxsize,
        }

    def clear_cache(self) -> None:
        """Clear the classification cache."""
        _classify_impl.cache_clear()
