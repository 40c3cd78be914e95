"""Plan parser - extracts plans, steps and clarifying questions from tagged model output.

Expected markup:
    <question required="true" id="q1" options="A,B">Question text?</question>
    <plan title="Add login">
    <step id="1" complexity="low" files="app/auth.py" depends="">Title
    Description</step>
    </plan>
"""

import re

from src.domain.entities.plan_build import (
    ClarifyingQuestion,
    ExecutionPlan,
    PlanStatus,
    PlanStep,
    create_empty_plan,
    now_ms,
)

_ATTR_RE = re.compile(r'(\w+)\s*=\s*"([^"]*)"')
_QUESTION_RE = re.compile(r"<question\b([^>]*)>([^<]+)</question>", re.IGNORECASE)
_STEP_RE = re.compile(r"<step\b([^>]*)>([\s\S]*?)</step>", re.IGNORECASE)
_PLAN_BLOCK_RE = re.compile(r"<plan\b([^>]*)>([\s\S]*?)</plan>", re.IGNORECASE)

DEFAULT_PLAN_TITLE = "Implementation Plan"
_COMPLEXITIES = ("low", "medium", "high")


def _attrs(raw: str) -> dict[str, str]:
    return {k.lower(): v for k, v in _ATTR_RE.findall(raw)}


def _split_list(value: str | None) -> tuple[str, ...] | None:
    if not value:
        return None
    items = tuple(v.strip() for v in value.split(",") if v.strip())
    return items or None


def parse_question(raw_attrs: str, text: str, position: int = 1) -> ClarifyingQuestion | None:
    """Build a question from a <question> tag's attributes and body."""
    question = text.strip()
    if not question:
        return None
    attrs = _attrs(raw_attrs)
    return ClarifyingQuestion(
        id=attrs.get("id") or f"q{position}",
        question=question,
        required=attrs.get("required", "true").lower() != "false",
        options=_split_list(attrs.get("options")),
    )


def parse_step(raw_attrs: str, body: str, order: int) -> PlanStep | None:
    """Build a step from a <step> tag: first body line is the title, the rest the description."""
    lines = body.strip().splitlines()
    if not lines:
        return None
    attrs = _attrs(raw_attrs)
    complexity = attrs.get("complexity", "medium").lower()
    return PlanStep(
        id=attrs.get("id") or f"step_{order}",
        order=order,
        title=lines[0].strip() or "Untitled Step",
        description="\n".join(lines[1:]).strip(),
        files_to_modify=_split_list(attrs.get("files")),
        estimated_complexity=complexity if complexity in _COMPLEXITIES else "medium",
        dependencies=_split_list(attrs.get("depends")),
    )


def extract_questions(content: str) -> list[ClarifyingQuestion]:
    """All well-formed questions in order of appearance."""
    questions: list[ClarifyingQuestion] = []
    for match in _QUESTION_RE.finditer(content):
        question = parse_question(match.group(1), match.group(2), position=len(questions) + 1)
        if question is not None:
            questions.append(question)
    return questions


def parse_plan_block(content: str) -> tuple[str, tuple[PlanStep, ...]] | None:
    """Title and steps of the first <plan> block, or None when there is none."""
    block = _PLAN_BLOCK_RE.search(content)
    if block is None:
        return None
    title = _attrs(block.group(1)).get("title") or DEFAULT_PLAN_TITLE
    steps: list[PlanStep] = []
    for match in _STEP_RE.finditer(block.group(2)):
        step = parse_step(match.group(1), match.group(2), order=len(steps) + 1)
        if step is not None:
            steps.append(step)
    return title, tuple(steps)


def contains_plan_elements(content: str) -> bool:
    """Quick check before running the full parser."""
    return "<plan" in content or "<question" in content or "<step" in content


def parse_plan_response(
    content: str,
    existing: ExecutionPlan | None = None,
    timestamp: int | None = None,
) -> ExecutionPlan:
    """Merge questions and plan steps from a model response into a plan.

    Questions move the plan to QUESTIONING. A <plan> block sets title and steps and moves
    the plan to READY, unless a required question is still unanswered.
    """
    ts = now_ms() if timestamp is None else timestamp
    plan = existing or create_empty_plan("New Plan", timestamp=ts)
    updates: dict = {"updated_at": ts}

    questions = plan.clarifying_questions
    new_questions = extract_questions(content)
    if new_questions:
        known = {q.id for q in questions}
        questions = questions + tuple(q for q in new_questions if q.id not in known)
        updates["clarifying_questions"] = questions
        updates["status"] = PlanStatus.QUESTIONING

    parsed = parse_plan_block(content)
    if parsed is not None:
        title, steps = parsed
        updates["title"] = title
        updates["steps"] = steps
        updates["current_step_index"] = 0
        updates["progress"] = 0
        unanswered = any(q.required and not q.answer for q in questions)
        updates["status"] = PlanStatus.QUESTIONING if unanswered else PlanStatus.READY

    return plan.model_copy(update=updates)
