"""Plan/Build reducer - pure state transitions over a tagged action union.

Guard failures are no-ops: the reducer returns the very same state object and never
raises. Callers consult the selectors (can_start_build, ...) before dispatching.
"""

from collections.abc import Callable
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities.plan_build import (
    HISTORY_LIMIT,
    INITIAL_STATE,
    BuildStatus,
    ExecutionPlan,
    InteractionMode,
    PlanBuildState,
    PlanStatus,
    PlanStep,
    PlanStepPatch,
    calculate_plan_progress,
    create_empty_plan,
    now_ms,
    truncate_title,
)


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class StartPlanning(_Action):
    type: Literal["START_PLANNING"] = "START_PLANNING"
    message: str


class UpdatePlanStatus(_Action):
    type: Literal["UPDATE_PLAN_STATUS"] = "UPDATE_PLAN_STATUS"
    status: PlanStatus


class SetPlan(_Action):
    type: Literal["SET_PLAN"] = "SET_PLAN"
    plan: ExecutionPlan


class UpdateStep(_Action):
    type: Literal["UPDATE_STEP"] = "UPDATE_STEP"
    step_id: str
    updates: PlanStepPatch


class AnswerQuestion(_Action):
    type: Literal["ANSWER_QUESTION"] = "ANSWER_QUESTION"
    question_id: str
    answer: str


class ApprovePlan(_Action):
    type: Literal["APPROVE_PLAN"] = "APPROVE_PLAN"


class EditPlan(_Action):
    type: Literal["EDIT_PLAN"] = "EDIT_PLAN"
    plan: ExecutionPlan


class StartBuild(_Action):
    type: Literal["START_BUILD"] = "START_BUILD"


class PauseBuild(_Action):
    type: Literal["PAUSE_BUILD"] = "PAUSE_BUILD"


class ResumeBuild(_Action):
    type: Literal["RESUME_BUILD"] = "RESUME_BUILD"


class CancelBuild(_Action):
    type: Literal["CANCEL_BUILD"] = "CANCEL_BUILD"


class SwitchMode(_Action):
    type: Literal["SWITCH_MODE"] = "SWITCH_MODE"
    mode: InteractionMode


class Reset(_Action):
    type: Literal["RESET"] = "RESET"


PlanBuildAction = Annotated[
    Union[
        StartPlanning,
        UpdatePlanStatus,
        SetPlan,
        UpdateStep,
        AnswerQuestion,
        ApprovePlan,
        EditPlan,
        StartBuild,
        PauseBuild,
        ResumeBuild,
        CancelBuild,
        SwitchMode,
        Reset,
    ],
    Field(discriminator="type"),
]

Clock = Callable[[], int]


def _normalize(plan: ExecutionPlan, **updates) -> ExecutionPlan:
    """Apply updates, then re-derive progress and clamp the step cursor."""
    plan = plan.model_copy(update=updates)
    index = plan.current_step_index
    if plan.steps:
        index = min(max(index, 0), len(plan.steps) - 1)
    else:
        index = 0
    return plan.model_copy(
        update={
            "progress": calculate_plan_progress(plan.steps),
            "current_step_index": index,
        }
    )


def _archive(state: PlanBuildState) -> tuple[ExecutionPlan, ...]:
    if state.current_plan is None:
        return state.plan_history
    return ((state.current_plan,) + state.plan_history)[:HISTORY_LIMIT]


def _start_planning(state: PlanBuildState, action: StartPlanning, clock: Clock) -> PlanBuildState:
    ts = clock()
    plan = create_empty_plan(truncate_title(action.message), timestamp=ts)
    return state.model_copy(
        update={
            "mode": "plan",
            "current_plan": plan.model_copy(update={"status": PlanStatus.RESEARCHING}),
            "is_plan_editable": False,
        }
    )


def _update_plan_status(state: PlanBuildState, action: UpdatePlanStatus, clock: Clock) -> PlanBuildState:
    if state.current_plan is None:
        return state
    return state.model_copy(
        update={
            "current_plan": state.current_plan.model_copy(
                update={"status": action.status, "updated_at": clock()}
            ),
            "is_plan_editable": action.status == PlanStatus.READY,
        }
    )


def _set_plan(state: PlanBuildState, action: SetPlan, clock: Clock) -> PlanBuildState:
    return state.model_copy(
        update={
            "current_plan": _normalize(action.plan),
            "is_plan_editable": action.plan.status == PlanStatus.READY,
        }
    )


def _update_step(state: PlanBuildState, action: UpdateStep, clock: Clock) -> PlanBuildState:
    plan = state.current_plan
    if plan is None:
        return state
    patch = action.updates.model_dump(exclude_unset=True)
    steps: tuple[PlanStep, ...] = tuple(
        step.model_copy(update=patch) if step.id == action.step_id else step for step in plan.steps
    )
    return state.model_copy(
        update={"current_plan": _normalize(plan, steps=steps, updated_at=clock())}
    )


def _answer_question(state: PlanBuildState, action: AnswerQuestion, clock: Clock) -> PlanBuildState:
    plan = state.current_plan
    if plan is None:
        return state
    questions = tuple(
        q.model_copy(update={"answer": action.answer}) if q.id == action.question_id else q
        for q in plan.clarifying_questions
    )
    return state.model_copy(
        update={
            "current_plan": plan.model_copy(
                update={"clarifying_questions": questions, "updated_at": clock()}
            )
        }
    )


def _approve_plan(state: PlanBuildState, action: ApprovePlan, clock: Clock) -> PlanBuildState:
    if state.current_plan is None:
        return state
    return state.model_copy(
        update={
            "current_plan": state.current_plan.model_copy(
                update={
                    "status": PlanStatus.APPROVED,
                    "user_approved": True,
                    "updated_at": clock(),
                }
            ),
            "is_plan_editable": False,
        }
    )


def _edit_plan(state: PlanBuildState, action: EditPlan, clock: Clock) -> PlanBuildState:
    return state.model_copy(
        update={"current_plan": _normalize(action.plan, user_modified=True, updated_at=clock())}
    )


def _start_build(state: PlanBuildState, action: StartBuild, clock: Clock) -> PlanBuildState:
    plan = state.current_plan
    if plan is None or not plan.user_approved:
        return state
    return state.model_copy(
        update={
            "mode": "build",
            "current_plan": _normalize(
                plan,
                build_status=BuildStatus.PREPARING,
                current_step_index=0,
                updated_at=clock(),
            ),
            "is_plan_editable": False,
        }
    )


def _set_build_status(state: PlanBuildState, status: BuildStatus, clock: Clock) -> PlanBuildState:
    if state.current_plan is None:
        return state
    return state.model_copy(
        update={
            "current_plan": state.current_plan.model_copy(
                update={"build_status": status, "updated_at": clock()}
            )
        }
    )


def _pause_build(state: PlanBuildState, action: PauseBuild, clock: Clock) -> PlanBuildState:
    return _set_build_status(state, BuildStatus.PAUSED, clock)


def _resume_build(state: PlanBuildState, action: ResumeBuild, clock: Clock) -> PlanBuildState:
    return _set_build_status(state, BuildStatus.EXECUTING, clock)


def _cancel_build(state: PlanBuildState, action: CancelBuild, clock: Clock) -> PlanBuildState:
    if state.current_plan is None:
        return state
    return state.model_copy(
        update={
            "mode": "plan",
            "plan_history": _archive(state),
            "current_plan": None,
            "is_plan_editable": True,
        }
    )


def _switch_mode(state: PlanBuildState, action: SwitchMode, clock: Clock) -> PlanBuildState:
    return state.model_copy(update={"mode": action.mode})


def _reset(state: PlanBuildState, action: Reset, clock: Clock) -> PlanBuildState:
    return INITIAL_STATE.model_copy(update={"plan_history": _archive(state)})


_REDUCERS: dict[str, Callable[[PlanBuildState, object, Clock], PlanBuildState]] = {
    "START_PLANNING": _start_planning,
    "UPDATE_PLAN_STATUS": _update_plan_status,
    "SET_PLAN": _set_plan,
    "UPDATE_STEP": _update_step,
    "ANSWER_QUESTION": _answer_question,
    "APPROVE_PLAN": _approve_plan,
    "EDIT_PLAN": _edit_plan,
    "START_BUILD": _start_build,
    "PAUSE_BUILD": _pause_build,
    "RESUME_BUILD": _resume_build,
    "CANCEL_BUILD": _cancel_build,
    "SWITCH_MODE": _switch_mode,
    "RESET": _reset,
}

_ACTION_TYPES = {cls.model_fields["type"].default for cls in _Action.__subclasses__()}
if _ACTION_TYPES != set(_REDUCERS):
    raise RuntimeError(f"Reducer table out of sync with actions: {sorted(_ACTION_TYPES ^ set(_REDUCERS))}")


def reduce(state: PlanBuildState, action: PlanBuildAction, *, clock: Clock = now_ms) -> PlanBuildState:
    """Apply one action. Unknown or guarded-out actions return `state` unchanged."""
    handler = _REDUCERS.get(getattr(action, "type", None))
    if handler is None:
        return state
    return handler(state, action, clock)


# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------


def has_unanswered_questions(state: PlanBuildState) -> bool:
    """True when a required clarifying question has no answer yet."""
    plan = state.current_plan
    if plan is None:
        return False
    return any(q.required and not q.answer for q in plan.clarifying_questions)


def can_start_build(state: PlanBuildState) -> bool:
    plan = state.current_plan
    if plan is None or not plan.user_approved or not plan.steps:
        return False
    return not has_unanswered_questions(state)


def is_building(state: PlanBuildState) -> bool:
    plan = state.current_plan
    return state.mode == "build" and plan is not None and plan.build_status == BuildStatus.EXECUTING


def is_paused(state: PlanBuildState) -> bool:
    plan = state.current_plan
    return plan is not None and plan.build_status == BuildStatus.PAUSED


def current_step(state: PlanBuildState) -> PlanStep | None:
    plan = state.current_plan
    if plan is None or not plan.steps:
        return None
    if 0 <= plan.current_step_index < len(plan.steps):
        return plan.steps[plan.current_step_index]
    return None


def progress(state: PlanBuildState) -> int:
    """Build progress derived from step statuses (0 without a plan)."""
    if state.current_plan is None:
        return 0
    return calculate_plan_progress(state.current_plan.steps)


_PLAN_LABELS = {
    PlanStatus.RESEARCHING: "Researching codebase...",
    PlanStatus.ANALYZING: "Analyzing requirements...",
    PlanStatus.QUESTIONING: "Awaiting your input...",
    PlanStatus.DRAFTING: "Creating plan...",
    PlanStatus.READY: "Plan ready for review",
    PlanStatus.APPROVED: "Plan approved",
}

_BUILD_LABELS = {
    BuildStatus.PREPARING: "Preparing build...",
    BuildStatus.PAUSED: "Build paused",
    BuildStatus.VERIFYING: "Verifying changes...",
    BuildStatus.COMPLETED: "Build complete!",
    BuildStatus.FAILED: "Build failed",
}


def status_label(state: PlanBuildState) -> str:
    """Human-readable label for the current phase."""
    plan = state.current_plan
    if plan is None:
        return "Ready to plan" if state.mode == "plan" else "Ready to build"
    if state.mode == "plan":
        return _PLAN_LABELS.get(plan.status, "Planning...")
    if plan.build_status == BuildStatus.EXECUTING:
        return f"Building: Step {plan.current_step_index + 1}/{len(plan.steps)}"
    return _BUILD_LABELS.get(plan.build_status, "Building...")
