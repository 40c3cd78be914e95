"""Workflow DTOs."""

from pydantic import BaseModel

from src.application.workflow.store import PlanBuildStore
from src.domain.entities.plan_build import PlanBuildState, PlanStep


class WorkflowSnapshot(BaseModel):
    """Workflow state plus derived selectors, for a presentation layer."""

    state: PlanBuildState
    can_start_build: bool
    is_building: bool
    is_paused: bool
    current_step: PlanStep | None = None
    progress: int
    has_unanswered_questions: bool
    status_label: str

    @classmethod
    def from_store(cls, store: PlanBuildStore) -> "WorkflowSnapshot":
        return cls(
            state=store.state,
            can_start_build=store.can_start_build,
            is_building=store.is_building,
            is_paused=store.is_paused,
            current_step=store.current_step,
            progress=store.progress,
            has_unanswered_questions=store.has_unanswered_questions,
            status_label=store.status_label,
        )


class ActionResult(BaseModel):
    """Result of dispatching one action."""

    applied: bool
    snapshot: WorkflowSnapshot
