"""Skill routing: category registry and per-category handlers."""

from src.application.skills.registry import (
    RouteResult,
    SkillRegistry,
    create_default_registry,
    get_config,
    get_default_registry,
    get_handler,
    route_for_input,
)

__all__ = [
    "RouteResult",
    "SkillRegistry",
    "create_default_registry",
    "get_config",
    "get_default_registry",
    "get_handler",
    "route_for_input",
]
