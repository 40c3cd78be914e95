"""Plan/Build store - owns the current workflow state and applies actions through the reducer."""

import logging
import threading

from src.domain.entities.plan_build import (
    INITIAL_STATE,
    ExecutionPlan,
    InteractionMode,
    PlanBuildState,
    PlanStatus,
    PlanStep,
    PlanStepPatch,
    now_ms,
)
from src.domain.services import plan_build
from src.domain.services.plan_build import (
    AnswerQuestion,
    ApprovePlan,
    CancelBuild,
    Clock,
    EditPlan,
    PauseBuild,
    PlanBuildAction,
    Reset,
    ResumeBuild,
    SetPlan,
    StartBuild,
    StartPlanning,
    SwitchMode,
    UpdatePlanStatus,
    UpdateStep,
)
from src.infrastructure.services.plan_parser import contains_plan_elements, parse_plan_response

logger = logging.getLogger(__name__)


class PlanBuildStore:
    """Holds one PlanBuildState; every dispatch swaps in the reducer's result."""

    def __init__(self, state: PlanBuildState | None = None, clock: Clock = now_ms) -> None:
        """Initialize with an optional starting state."""
        self._state = state or INITIAL_STATE
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def state(self) -> PlanBuildState:
        return self._state

    def dispatch(self, action: PlanBuildAction) -> bool:
        """Apply an action. Returns False when a guard turned it into a no-op."""
        with self._lock:
            before = self._state
            self._state = plan_build.reduce(before, action, clock=self._clock)
            changed = self._state is not before
        if changed:
            logger.debug("Applied %s", action.type)
        else:
            logger.debug("Ignored %s: guard not satisfied", action.type)
        return changed

    # -- actions ------------------------------------------------------------

    def start_planning(self, message: str) -> bool:
        return self.dispatch(StartPlanning(message=message))

    def update_plan_status(self, status: PlanStatus) -> bool:
        return self.dispatch(UpdatePlanStatus(status=status))

    def set_plan(self, plan: ExecutionPlan) -> bool:
        return self.dispatch(SetPlan(plan=plan))

    def update_step(self, step_id: str, **updates) -> bool:
        return self.dispatch(UpdateStep(step_id=step_id, updates=PlanStepPatch(**updates)))

    def answer_question(self, question_id: str, answer: str) -> bool:
        return self.dispatch(AnswerQuestion(question_id=question_id, answer=answer))

    def approve_plan(self) -> bool:
        return self.dispatch(ApprovePlan())

    def edit_plan(self, plan: ExecutionPlan) -> bool:
        return self.dispatch(EditPlan(plan=plan))

    def start_build(self) -> bool:
        return self.dispatch(StartBuild())

    def pause_build(self) -> bool:
        return self.dispatch(PauseBuild())

    def resume_build(self) -> bool:
        return self.dispatch(ResumeBuild())

    def cancel_build(self) -> bool:
        return self.dispatch(CancelBuild())

    def switch_mode(self, mode: InteractionMode) -> bool:
        return self.dispatch(SwitchMode(mode=mode))

    def reset(self) -> bool:
        return self.dispatch(Reset())

    def apply_model_output(self, content: str) -> bool:
        """Parse a planning reply and install the resulting plan (SET_PLAN)."""
        if not contains_plan_elements(content):
            return False
        plan = parse_plan_response(content, self._state.current_plan, timestamp=self._clock())
        return self.set_plan(plan)

    # -- selectors ------------------------------------------------------------

    @property
    def can_start_build(self) -> bool:
        return plan_build.can_start_build(self._state)

    @property
    def is_building(self) -> bool:
        return plan_build.is_building(self._state)

    @property
    def is_paused(self) -> bool:
        return plan_build.is_paused(self._state)

    @property
    def current_step(self) -> PlanStep | None:
        return plan_build.current_step(self._state)

    @property
    def progress(self) -> int:
        return plan_build.progress(self._state)

    @property
    def has_unanswered_questions(self) -> bool:
        return plan_build.has_unanswered_questions(self._state)

    @property
    def status_label(self) -> str:
        return plan_build.status_label(self._state)
