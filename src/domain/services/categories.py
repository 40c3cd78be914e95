"""Static category table: metadata and trigger patterns for every Category."""

import re

from src.domain.entities.skill import Category, CategoryConfig, WorkflowStage


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


CATEGORY_CONFIGS: dict[Category, CategoryConfig] = {
    Category.EXPLORE: CategoryConfig(
        category=Category.EXPLORE,
        name="Brainstorm",
        description="Explores requirements, design options, and creative solutions before implementation",
        trigger_patterns=_compile(
            r"how (should|can|could|would)",
            r"what('s| is) the best (way|approach|pattern)",
            r"ideas (for|to)",
            r"design (a|an|the)",
            r"thinking about",
            r"explore",
            r"considering",
            r"alternatives to",
            r"^brainstorm",
            r"let's think about",
            r"should i use",
            r"which (approach|pattern|library)",
        ),
        stage=WorkflowStage.THINKING,
    ),
    Category.PLAN: CategoryConfig(
        category=Category.PLAN,
        name="Plan",
        description="Creates detailed implementation plans with step-by-step breakdown",
        trigger_patterns=_compile(
            r"create a plan",
            r"break down",
            r"steps to",
            r"roadmap",
            r"implementation plan",
            r"how to implement",
            r"plan out",
            r"list the steps",
            r"^plan",
            r"task breakdown",
            r"first,? second,? third",
            r"sequence of",
        ),
        stage=WorkflowStage.PLANNING,
    ),
    Category.CODE: CategoryConfig(
        category=Category.CODE,
        name="Code",
        description="Writes, edits, or modifies code in the workspace",
        trigger_patterns=_compile(
            r"^(write|create|build|add|make)",
            r"implement",
            r"generate (code|the|a)",
            r"write a (component|function|hook|class)",
            r"create a (file|component|page)",
            r"build (a|an|the)",
            r"add (a|an|the|feature)",
            r"update (the|a)",
            r"modify",
            r"change",
            r"refactor",
            r"convert (the|a)",
            r"rewrite",
            r"make it so",
        ),
        stage=WorkflowStage.CODING,
    ),
    Category.DEBUG: CategoryConfig(
        category=Category.DEBUG,
        name="Debug",
        description="Identifies and fixes bugs, errors, or unexpected behavior",
        trigger_patterns=_compile(
            r"fix (the|a|this|my)",
            r"bug",
            r"error",
            r"not working",
            r"broken",
            r"issue with",
            r"problem with",
            r"debug",
            r"what's wrong",
            r"something's wrong",
            r"doesn't work",
            r"failing",
            r"crash",
            r"exception",
            r"throw",
        ),
        stage=WorkflowStage.CODING,
        requires_file_context=True,
    ),
    Category.REVIEW: CategoryConfig(
        category=Category.REVIEW,
        name="Review",
        description="Reviews code quality, suggests improvements, and ensures best practices",
        trigger_patterns=_compile(
            r"review (the|this|my|code)",
            r"check (the|code|quality)",
            r"improve (the|this|code)",
            r"refactor (the|this)",
            r"optimize",
            r"clean up",
            r"best practices",
            r"suggestions for",
            r"what do you think of",
            r"feedback on",
        ),
        stage=WorkflowStage.REVIEWING,
        requires_file_context=True,
    ),
    Category.SEARCH: CategoryConfig(
        category=Category.SEARCH,
        name="Search",
        description="Searches the web for documentation, examples, or current information",
        trigger_patterns=_compile(
            r"^search",
            r"look up",
            r"find (information|documentation|examples)",
            r"latest (news|version|release)",
            r"how to use (react|typescript|tailwind|next)",
            r"documentation for",
            r"what is (react|typescript|next|node)",
            r"check the docs",
            r"google",
            r"browse the web",
        ),
        stage=WorkflowStage.THINKING,
    ),
    Category.GENERAL: CategoryConfig(
        category=Category.GENERAL,
        name="General",
        description="Handles conversational messages and general questions",
        trigger_patterns=(),
        stage=WorkflowStage.IDLE,
    ),
}

_missing = set(Category) - set(CATEGORY_CONFIGS)
if _missing:
    raise RuntimeError(f"Category table is missing entries: {sorted(c.value for c in _missing)}")
