"""Tests for PlanBuildStore."""

from src.application.workflow.dto import WorkflowSnapshot
from src.application.workflow.store import PlanBuildStore
from src.domain.entities.plan_build import BuildStatus, PlanStatus
from src.domain.services.plan_build import StartBuild

PLAN_REPLY = """<plan title="Add caching">
<step id="1">Add cache module</step>
<step id="2">Use it in the service</step>
</plan>"""


def make_store():
    return PlanBuildStore(clock=lambda: 42)


def test_initial_state():
    store = make_store()
    assert store.state.current_plan is None
    assert store.status_label == "Ready to plan"
    assert store.progress == 0


def test_guarded_action_reports_not_applied():
    store = make_store()
    before = store.state
    assert store.dispatch(StartBuild()) is False
    assert store.state is before


def test_full_plan_build_cycle():
    store = make_store()
    assert store.start_planning("Add caching to the service")
    assert store.state.current_plan.status == PlanStatus.RESEARCHING

    assert store.apply_model_output(PLAN_REPLY)
    plan = store.state.current_plan
    assert plan.status == PlanStatus.READY
    assert [s.title for s in plan.steps] == ["Add cache module", "Use it in the service"]
    assert store.state.is_plan_editable

    assert store.approve_plan()
    assert store.can_start_build
    assert store.start_build()
    assert store.resume_build()
    assert store.is_building
    assert store.current_step.id == "1"

    assert store.update_step("1", status="completed", output="done")
    assert store.progress == 50
    assert store.pause_build()
    assert store.is_paused

    assert store.cancel_build()
    assert store.state.current_plan is None
    assert store.state.plan_history[0].title == "Add caching"


def test_apply_model_output_without_markup():
    store = make_store()
    store.start_planning("x")
    assert store.apply_model_output("Just some prose.") is False


def test_questions_then_answers():
    store = make_store()
    store.start_planning("x")
    store.apply_model_output('<question id="q1">Redis or memcached?</question>')
    assert store.has_unanswered_questions
    assert store.state.current_plan.status == PlanStatus.QUESTIONING
    assert store.answer_question("q1", "Redis")
    assert not store.has_unanswered_questions


def test_switch_mode_and_reset():
    store = make_store()
    store.start_planning("x")
    store.switch_mode("build")
    assert store.state.mode == "build"
    store.reset()
    assert store.state.mode == "plan"
    assert store.state.current_plan is None
    assert len(store.state.plan_history) == 1


def test_snapshot():
    store = make_store()
    store.start_planning("x")
    snapshot = WorkflowSnapshot.from_store(store)
    assert snapshot.status_label == "Researching codebase..."
    assert snapshot.state.current_plan.build_status == BuildStatus.IDLE
    data = snapshot.model_dump(mode="json")
    assert data["state"]["current_plan"]["status"] == "researching"
