"""Category registry - category metadata and category -> handler lookup."""

import logging
from dataclasses import dataclass
from functools import lru_cache

from src.application.skills.handlers import (
    BrainstormHandler,
    CodeHandler,
    DebugHandler,
    GeneralHandler,
    PlanHandler,
    ReviewHandler,
    SearchHandler,
    SkillHandler,
)
from src.domain.entities.skill import Category, CategoryConfig, IntentMatch
from src.domain.services.categories import CATEGORY_CONFIGS
from src.domain.services.intent_classifier import IntentClassifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteResult:
    """Handler picked for an input together with the classification behind it."""

    handler: SkillHandler
    match: IntentMatch


def _as_category(value: Category | str) -> Category | None:
    if isinstance(value, Category):
        return value
    try:
        return Category(str(value).lower())
    except ValueError:
        return None


class SkillRegistry:
    """Registry of skill handlers keyed by category."""

    def __init__(self, classifier: IntentClassifier | None = None) -> None:
        """Create empty registry."""
        self._handlers: dict[Category, SkillHandler] = {}
        self._classifier = classifier or IntentClassifier()

    @property
    def classifier(self) -> IntentClassifier:
        return self._classifier

    def register(self, handler: SkillHandler) -> None:
        """Register a handler (replaces any handler for the same category)."""
        self._handlers[handler.category] = handler

    def get_config(self, category: Category | str) -> CategoryConfig | None:
        """Static metadata for a category; None for values outside the enum."""
        resolved = _as_category(category)
        if resolved is None:
            logger.warning("Unknown category requested: %r", category)
            return None
        return CATEGORY_CONFIGS[resolved]

    def get_handler(self, category: Category | str) -> SkillHandler | None:
        """Handler for a category, or None."""
        resolved = _as_category(category)
        if resolved is None:
            return None
        return self._handlers.get(resolved)

    def has(self, category: Category | str) -> bool:
        return self.get_handler(category) is not None

    def route_for_input(self, text: str) -> RouteResult | None:
        """Classify the input and look up its handler in one call."""
        match = self._classifier.classify(text)
        handler = self.get_handler(match.category)
        if handler is None:
            logger.warning("No handler registered for category %s", match.category.value)
            return None
        return RouteResult(handler=handler, match=match)

    def list_configs(self) -> list[CategoryConfig]:
        """All category configs in declaration order."""
        return list(CATEGORY_CONFIGS.values())

    def list_categories(self) -> list[Category]:
        """Categories that have a registered handler."""
        return list(self._handlers.keys())


def create_default_registry(classifier: IntentClassifier | None = None) -> SkillRegistry:
    """Create registry with one handler per category."""
    registry = SkillRegistry(classifier)
    registry.register(BrainstormHandler())
    registry.register(PlanHandler())
    registry.register(CodeHandler())
    registry.register(DebugHandler())
    registry.register(ReviewHandler())
    registry.register(SearchHandler())
    registry.register(GeneralHandler())

    missing = set(Category) - set(registry.list_categories())
    if missing:
        raise RuntimeError(f"No handler for categories: {sorted(c.value for c in missing)}")
    return registry


@lru_cache
def get_default_registry() -> SkillRegistry:
    """Process-wide default registry."""
    return create_default_registry()


def get_config(category: Category | str) -> CategoryConfig | None:
    return get_default_registry().get_config(category)


def get_handler(category: Category | str) -> SkillHandler | None:
    return get_default_registry().get_handler(category)


def route_for_input(text: str) -> RouteResult | None:
    return get_default_registry().route_for_input(text)
