"""Skill handlers package."""

from src.application.skills.handlers.base import FileContext, HandlerContext, SkillHandler
from src.application.skills.handlers.coding import CodeHandler, DebugHandler
from src.application.skills.handlers.general import GeneralHandler
from src.application.skills.handlers.planning import PlanHandler
from src.application.skills.handlers.review import ReviewHandler
from src.application.skills.handlers.thinking import BrainstormHandler, SearchHandler

__all__ = [
    "SkillHandler",
    "FileContext",
    "HandlerContext",
    "BrainstormHandler",
    "PlanHandler",
    "CodeHandler",
    "DebugHandler",
    "ReviewHandler",
    "SearchHandler",
    "GeneralHandler",
]
