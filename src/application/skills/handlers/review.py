"""Review handler."""

from src.application.skills.handlers.base import SkillHandler
from src.domain.entities.skill import Category

REVIEW_SYSTEM_PROMPT = """You are a code review expert. Your role is to provide constructive feedback on code quality.

Guidelines:
- Be specific and actionable
- Suggest improvements with rationale
- Flag potential bugs or security issues
- Check types and error handling

Response format:
1. Summary - Overall assessment
2. Strengths - What's done well
3. Issues - Problems found (severity: high/medium/low)
4. Suggestions - Specific improvements
5. Rating - Code quality score (1-10)"""


class ReviewHandler(SkillHandler):
    """Review the attached files."""

    request_label = "Review Request"
    closing_line = "Please provide a thorough code review."

    @property
    def category(self) -> Category:
        return Category.REVIEW

    @property
    def system_prompt(self) -> str:
        return REVIEW_SYSTEM_PROMPT
