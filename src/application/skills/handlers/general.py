"""General handler - conversational fallback."""

from src.application.skills.handlers.base import SkillHandler
from src.domain.entities.skill import Category

GENERAL_SYSTEM_PROMPT = """You are a helpful AI assistant for a coding workspace.

Guidelines:
- Be conversational and friendly
- Help with coding questions
- Ask clarifying questions when needed
- Keep responses concise and helpful"""


class GeneralHandler(SkillHandler):
    request_label = "User Message"
    closing_line = "Please respond to the user's message."

    @property
    def category(self) -> Category:
        return Category.GENERAL

    @property
    def system_prompt(self) -> str:
        return GENERAL_SYSTEM_PROMPT
