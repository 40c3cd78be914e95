"""Plan handler - asks the model for a tagged, step-by-step plan."""

from src.application.skills.handlers.base import SkillHandler
from src.domain.entities.skill import Category

PLAN_SYSTEM_PROMPT = """You are a technical project planner. Your role is to create detailed, actionable implementation plans.

Guidelines:
- Break down complex tasks into manageable steps
- Order steps logically (prerequisites first)
- Estimate complexity and identify potential blockers
- Include testing and review steps
- Keep each step focused and actionable

Ask anything you need to know first with
<question required="true" id="q1" options="A,B">Question text?</question>

Then write the plan as
<plan title="Short title">
<step id="1" complexity="low|medium|high" files="path/a.py,path/b.py" depends="">Step title
Step description</step>
</plan>"""


class PlanHandler(SkillHandler):
    """Produce an execution plan the workflow can parse and track."""

    closing_line = "Please create a detailed implementation plan."

    @property
    def category(self) -> Category:
        return Category.PLAN

    @property
    def system_prompt(self) -> str:
        return PLAN_SYSTEM_PROMPT
