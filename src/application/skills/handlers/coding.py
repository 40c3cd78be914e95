"""Handlers for the coding-stage categories: code and debug."""

from src.application.skills.handlers.base import HandlerContext, SkillHandler
from src.domain.entities.skill import Category

CODE_SYSTEM_PROMPT = """You are an expert code generation assistant. Your role is to write clean, modern, well-typed code.

Guidelines:
- Follow the project's existing patterns and conventions
- Write self-documenting code with clear naming
- Handle errors explicitly
- Consider accessibility and performance

Response format:
- Return code in fenced code blocks with the language
- Explain key decisions briefly
- Mention any files that need to be created/modified
- Suggest tests if applicable"""

DEBUG_SYSTEM_PROMPT = """You are a debugging expert. Your role is to identify root causes of bugs and fix them effectively.

Guidelines:
- Understand what is happening before changing anything
- Identify the root cause, not just symptoms
- Consider the surrounding code
- Explain the bug and your fix clearly

Response format:
1. Problem Summary - What is happening
2. Root Cause - Why it's happening
3. Fix - Your solution with code
4. Prevention - How to avoid this in the future"""

TDD_INSTRUCTIONS = """IMPORTANT: This request should follow TDD (Test-Driven Development):
1. First, describe the test cases needed
2. Then write the minimal code to pass those tests
3. Finally, refactor for clarity and performance"""


class CodeHandler(SkillHandler):
    """Write or modify code."""

    closing_line = "Please write the code to fulfill this request."

    def __init__(self, tdd: bool = False) -> None:
        self._tdd = tdd

    @property
    def category(self) -> Category:
        return Category.CODE

    @property
    def system_prompt(self) -> str:
        return CODE_SYSTEM_PROMPT

    def build_prompt(self, user_input: str, context: HandlerContext | None = None) -> str:
        prompt = super().build_prompt(user_input, context)
        if self._tdd:
            prompt = f"{prompt}\n\n{TDD_INSTRUCTIONS}"
        return prompt


class DebugHandler(SkillHandler):
    """Find and fix a bug in the attached files."""

    request_label = "Bug Report"
    closing_line = "Please debug this issue and provide a fix."

    @property
    def category(self) -> Category:
        return Category.DEBUG

    @property
    def system_prompt(self) -> str:
        return DEBUG_SYSTEM_PROMPT
