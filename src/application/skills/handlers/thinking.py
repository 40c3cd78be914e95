"""Handlers for the thinking-stage categories: brainstorm and search."""

import re

from src.application.skills.handlers.base import HandlerContext, SkillHandler
from src.domain.entities.skill import Category

BRAINSTORM_SYSTEM_PROMPT = """You are a helpful design thinking assistant. Your role is to help users explore requirements, consider alternatives, and brainstorm creative solutions.

Guidelines:
- Ask clarifying questions to understand the problem deeply
- Present multiple approaches/alternatives with pros and cons
- Consider edge cases and potential issues early
- Don't write code yet - focus on thinking and planning
- Structure your response with clear sections

Response format:
1. Understanding - Restate the problem in your own words
2. Considerations - Key factors to keep in mind
3. Approaches - 2-3 different ways to solve this
4. Questions - Any clarifying questions for the user
5. Recommendation - Your top choice with reasoning"""

SEARCH_SYSTEM_PROMPT = """You are a research assistant. Your role is to find relevant information and documentation.

Guidelines:
- Provide accurate, up-to-date information
- Include links to official documentation
- Give practical examples
- Note any version-specific considerations"""

_QUERY_PATTERNS = (
    re.compile(r"^search (?:for )?(.+)$", re.IGNORECASE),
    re.compile(r"^look up (.+)$", re.IGNORECASE),
    re.compile(r"^find (?:information |documentation |examples for )(.+)$", re.IGNORECASE),
    re.compile(r"^what is (.+)$", re.IGNORECASE),
    re.compile(r"^how to use (.+)$", re.IGNORECASE),
)
_LEAD_RE = re.compile(r"^(search|look up|find|what is|how to|check the docs)", re.IGNORECASE)
_PREPOSITION_RE = re.compile(r"^(for|about|on) ", re.IGNORECASE)


def extract_search_query(user_input: str) -> str:
    """Strip the request phrasing and keep the thing to search for."""
    text = user_input.strip()
    if text.lower().startswith("search:"):
        text = text[len("search:"):].strip()
    for pattern in _QUERY_PATTERNS:
        if match := pattern.match(text):
            return match.group(1).strip()
    return _PREPOSITION_RE.sub("", _LEAD_RE.sub("", text).strip()).strip()


class BrainstormHandler(SkillHandler):
    """Explore options before committing to an implementation."""

    closing_line = "Please help brainstorm solutions for the user's request."

    @property
    def category(self) -> Category:
        return Category.EXPLORE

    @property
    def system_prompt(self) -> str:
        return BRAINSTORM_SYSTEM_PROMPT


class SearchHandler(SkillHandler):
    """Answer from documentation and web results."""

    request_label = "User Question"
    closing_line = "Please provide a helpful answer based on the search results. Include relevant links and examples."

    @property
    def category(self) -> Category:
        return Category.SEARCH

    @property
    def system_prompt(self) -> str:
        return SEARCH_SYSTEM_PROMPT

    def build_prompt(self, user_input: str, context: HandlerContext | None = None) -> str:
        prompt = super().build_prompt(user_input, context)
        return f"{prompt}\n\nSearch query: {extract_search_query(user_input)}"
