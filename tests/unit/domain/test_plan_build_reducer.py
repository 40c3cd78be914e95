"""Plan/Build reducer and selector unit tests."""

import pytest
from pydantic import TypeAdapter

from src.domain.entities.plan_build import (
    INITIAL_STATE,
    BuildStatus,
    ClarifyingQuestion,
    ExecutionPlan,
    PlanBuildState,
    PlanStatus,
    PlanStep,
    PlanStepPatch,
    calculate_plan_progress,
    truncate_title,
)
from src.domain.services.plan_build import (
    AnswerQuestion,
    ApprovePlan,
    CancelBuild,
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
    can_start_build,
    current_step,
    has_unanswered_questions,
    is_building,
    is_paused,
    progress,
    reduce,
    status_label,
)


def clock():
    return 1_700_000_000_000


def make_plan(n_steps=3, **overrides) -> ExecutionPlan:
    steps = tuple(PlanStep(id=f"s{i}", order=i, title=f"Step {i}") for i in range(1, n_steps + 1))
    fields = {"id": "plan_1", "title": "Add caching", "steps": steps, "status": PlanStatus.READY}
    fields.update(overrides)
    return ExecutionPlan(**fields)


def state_with(plan: ExecutionPlan, **overrides) -> PlanBuildState:
    return INITIAL_STATE.model_copy(update={"current_plan": plan, **overrides})


def approved_state(n_steps=3) -> PlanBuildState:
    return reduce(state_with(make_plan(n_steps)), ApprovePlan(), clock=clock)


class TestHelpers:
    """Tests for progress and title helpers."""

    @pytest.mark.parametrize(
        "statuses,expected",
        [
            ((), 0),
            (("completed", "pending", "pending"), 33),
            (("completed", "skipped", "pending"), 67),
            (("completed", "pending"), 50),
            (("failed", "in_progress"), 0),
            (("completed", "skipped"), 100),
        ],
    )
    def test_progress_rounds_half_up(self, statuses, expected):
        steps = tuple(PlanStep(id=str(i), title="t", status=s) for i, s in enumerate(statuses))
        assert calculate_plan_progress(steps) == expected

    def test_truncate_title_short(self):
        assert truncate_title("Add dark mode") == "Add dark mode"

    def test_truncate_title_exactly_fifty(self):
        text = "x" * 50
        assert truncate_title(text) == text

    def test_truncate_title_long(self):
        text = "y" * 60
        assert truncate_title(text) == "y" * 50 + "…"


class TestStartPlanning:
    """Tests for START_PLANNING."""

    def test_creates_researching_plan(self):
        state = reduce(INITIAL_STATE, StartPlanning(message="Add dark mode"), clock=clock)
        plan = state.current_plan
        assert state.mode == "plan"
        assert state.is_plan_editable is False
        assert plan.title == "Add dark mode"
        assert plan.status == PlanStatus.RESEARCHING
        assert plan.build_status == BuildStatus.IDLE
        assert plan.steps == ()
        assert plan.progress == 0
        assert plan.created_at == plan.updated_at == clock()
        assert plan.id.startswith("plan_")

    def test_long_message_title_is_truncated(self):
        message = "Refactor the payment module so that every provider shares one retry policy"
        state = reduce(INITIAL_STATE, StartPlanning(message=message), clock=clock)
        assert state.current_plan.title == message[:50] + "…"

    def test_replaces_existing_plan_without_archiving(self):
        state = state_with(make_plan())
        state = reduce(state, StartPlanning(message="Another task"), clock=clock)
        assert state.current_plan.title == "Another task"
        assert state.plan_history == ()


class TestPlanEditing:
    """Tests for status, set, edit, step and question actions."""

    def test_update_status_ready_makes_plan_editable(self):
        state = reduce(INITIAL_STATE, StartPlanning(message="x"), clock=clock)
        state = reduce(state, UpdatePlanStatus(status=PlanStatus.READY), clock=clock)
        assert state.current_plan.status == PlanStatus.READY
        assert state.is_plan_editable is True
        state = reduce(state, UpdatePlanStatus(status=PlanStatus.DRAFTING), clock=clock)
        assert state.is_plan_editable is False

    def test_update_status_without_plan_is_noop(self):
        state = reduce(INITIAL_STATE, UpdatePlanStatus(status=PlanStatus.READY), clock=clock)
        assert state is INITIAL_STATE

    def test_set_plan_recomputes_progress(self):
        plan = make_plan(2, progress=90)
        plan = plan.model_copy(
            update={"steps": (plan.steps[0].model_copy(update={"status": "completed"}), plan.steps[1])}
        )
        state = reduce(INITIAL_STATE, SetPlan(plan=plan), clock=clock)
        assert state.current_plan.progress == 50
        assert state.is_plan_editable is True

    def test_set_plan_clamps_step_index(self):
        plan = make_plan(2, current_step_index=7)
        state = reduce(INITIAL_STATE, SetPlan(plan=plan), clock=clock)
        assert state.current_plan.current_step_index == 1

    def test_edit_plan_marks_user_modified(self):
        state = state_with(make_plan())
        edited = make_plan(4, title="Edited")
        state = reduce(state, EditPlan(plan=edited), clock=clock)
        assert state.current_plan.user_modified is True
        assert state.current_plan.title == "Edited"
        assert state.current_plan.updated_at == clock()

    def test_update_step_merges_only_given_fields(self):
        state = state_with(make_plan())
        action = UpdateStep(step_id="s2", updates=PlanStepPatch(status="completed", output="done"))
        state = reduce(state, action, clock=clock)
        step = state.current_plan.steps[1]
        assert step.status == "completed"
        assert step.output == "done"
        assert step.title == "Step 2"
        assert state.current_plan.progress == 33

    def test_update_unknown_step_keeps_steps(self):
        state = state_with(make_plan())
        new = reduce(state, UpdateStep(step_id="nope", updates=PlanStepPatch(status="completed")), clock=clock)
        assert new.current_plan.steps == state.current_plan.steps
        assert new.current_plan.progress == 0

    def test_update_step_never_reorders(self):
        state = state_with(make_plan(4))
        state = reduce(state, UpdateStep(step_id="s3", updates=PlanStepPatch(title="Renamed")), clock=clock)
        assert [s.id for s in state.current_plan.steps] == ["s1", "s2", "s3", "s4"]

    def test_answer_question(self):
        questions = (ClarifyingQuestion(id="q1", question="Which DB?"),)
        state = state_with(make_plan(clarifying_questions=questions, status=PlanStatus.QUESTIONING))
        assert has_unanswered_questions(state)
        state = reduce(state, AnswerQuestion(question_id="q1", answer="Postgres"), clock=clock)
        assert state.current_plan.clarifying_questions[0].answer == "Postgres"
        assert not has_unanswered_questions(state)
        # Answering does not change the planning status
        assert state.current_plan.status == PlanStatus.QUESTIONING

    def test_optional_question_does_not_block(self):
        questions = (ClarifyingQuestion(id="q1", question="Any naming preference?", required=False),)
        state = state_with(make_plan(clarifying_questions=questions))
        assert not has_unanswered_questions(state)


class TestBuildLifecycle:
    """Tests for approve, start, pause, resume and cancel."""

    def test_approve(self):
        state = approved_state()
        assert state.current_plan.status == PlanStatus.APPROVED
        assert state.current_plan.user_approved is True
        assert state.is_plan_editable is False
        assert can_start_build(state)

    def test_start_build_requires_approval(self):
        state = state_with(make_plan())
        assert reduce(state, StartBuild(), clock=clock) is state

    def test_start_build_without_plan_is_noop(self):
        assert reduce(INITIAL_STATE, StartBuild(), clock=clock) is INITIAL_STATE

    def test_start_build(self):
        state = reduce(approved_state(), StartBuild(), clock=clock)
        assert state.mode == "build"
        assert state.current_plan.build_status == BuildStatus.PREPARING
        assert state.current_plan.current_step_index == 0
        assert state.current_plan.progress == 0
        assert not is_building(state)
        assert current_step(state).id == "s1"

    def test_pause_and_resume(self):
        state = reduce(approved_state(), StartBuild(), clock=clock)
        state = reduce(state, ResumeBuild(), clock=clock)
        assert is_building(state)
        state = reduce(state, PauseBuild(), clock=clock)
        assert is_paused(state)
        assert not is_building(state)
        state = reduce(state, ResumeBuild(), clock=clock)
        assert state.current_plan.build_status == BuildStatus.EXECUTING

    def test_pause_without_plan_is_noop(self):
        assert reduce(INITIAL_STATE, PauseBuild(), clock=clock) is INITIAL_STATE

    def test_cancel_archives_plan(self):
        state = reduce(approved_state(), StartBuild(), clock=clock)
        plan = state.current_plan
        state = reduce(state, CancelBuild(), clock=clock)
        assert state.current_plan is None
        assert state.mode == "plan"
        assert state.is_plan_editable is True
        assert state.plan_history[0] == plan

    def test_cancel_without_plan_is_noop(self):
        assert reduce(INITIAL_STATE, CancelBuild(), clock=clock) is INITIAL_STATE

    def test_history_is_capped_at_ten_newest_first(self):
        state = INITIAL_STATE
        for i in range(12):
            state = reduce(state, StartPlanning(message=f"task {i}"), clock=clock)
            state = reduce(state, CancelBuild(), clock=clock)
        assert len(state.plan_history) == 10
        assert state.plan_history[0].title == "task 11"
        assert state.plan_history[-1].title == "task 2"

    def test_can_start_build_needs_steps(self):
        state = reduce(state_with(make_plan(0)), ApprovePlan(), clock=clock)
        assert not can_start_build(state)

    def test_can_start_build_blocked_by_required_question(self):
        questions = (ClarifyingQuestion(id="q1", question="Which DB?"),)
        state = reduce(state_with(make_plan(clarifying_questions=questions)), ApprovePlan(), clock=clock)
        assert not can_start_build(state)


class TestModeAndReset:
    """Tests for SWITCH_MODE and RESET."""

    def test_switch_mode_keeps_plan(self):
        state = state_with(make_plan())
        new = reduce(state, SwitchMode(mode="build"), clock=clock)
        assert new.mode == "build"
        assert new.current_plan == state.current_plan

    def test_reset_archives_current_plan(self):
        state = state_with(make_plan(), mode="build", is_plan_editable=False)
        state = reduce(state, Reset(), clock=clock)
        assert state.current_plan is None
        assert state.mode == "plan"
        assert state.is_plan_editable is True
        assert state.plan_history[0].id == "plan_1"

    def test_reset_keeps_history(self):
        state = reduce(state_with(make_plan()), CancelBuild(), clock=clock)
        state = reduce(state, Reset(), clock=clock)
        assert len(state.plan_history) == 1


class TestSelectors:
    """Tests for derived values."""

    def test_progress_without_plan(self):
        assert progress(INITIAL_STATE) == 0

    def test_progress_from_steps(self):
        state = state_with(make_plan(4))
        for step_id in ("s1", "s2", "s3"):
            state = reduce(state, UpdateStep(step_id=step_id, updates=PlanStepPatch(status="completed")), clock=clock)
        assert progress(state) == 75

    def test_current_step_none_without_steps(self):
        assert current_step(state_with(make_plan(0))) is None
        assert current_step(INITIAL_STATE) is None

    def test_status_labels(self):
        assert status_label(INITIAL_STATE) == "Ready to plan"
        assert status_label(INITIAL_STATE.model_copy(update={"mode": "build"})) == "Ready to build"
        state = reduce(INITIAL_STATE, StartPlanning(message="x"), clock=clock)
        assert status_label(state) == "Researching codebase..."
        state = reduce(approved_state(), StartBuild(), clock=clock)
        assert status_label(state) == "Preparing build..."
        state = reduce(state, ResumeBuild(), clock=clock)
        assert status_label(state) == "Building: Step 1/3"


class TestActionParsing:
    """Actions parse from JSON through the discriminated union."""

    def test_parse_tagged_action(self):
        adapter = TypeAdapter(PlanBuildAction)
        action = adapter.validate_python({"type": "UPDATE_STEP", "step_id": "s1", "updates": {"status": "completed"}})
        assert isinstance(action, UpdateStep)
        assert action.updates.model_dump(exclude_unset=True) == {"status": "completed"}

    def test_unknown_tag_rejected(self):
        adapter = TypeAdapter(PlanBuildAction)
        with pytest.raises(ValueError):
            adapter.validate_python({"type": "LAUNCH_ROCKET"})

    def test_unknown_object_is_noop(self):
        assert reduce(INITIAL_STATE, object(), clock=clock) is INITIAL_STATE
