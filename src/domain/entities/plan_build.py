"""Plan/Build workflow entities: execution plan, steps, questions and reducer state."""

import time
import uuid
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

InteractionMode = Literal["plan", "build"]
StepStatus = Literal["pending", "in_progress", "completed", "failed", "skipped"]
StepComplexity = Literal["low", "medium", "high"]
FileRelevance = Literal["high", "medium", "low"]

HISTORY_LIMIT = 10
TITLE_MAX_LENGTH = 50


class PlanStatus(str, Enum):
    """Planning-phase state."""

    IDLE = "idle"
    RESEARCHING = "researching"
    ANALYZING = "analyzing"
    QUESTIONING = "questioning"
    DRAFTING = "drafting"
    READY = "ready"
    APPROVED = "approved"


class BuildStatus(str, Enum):
    """Build-phase state."""

    IDLE = "idle"
    PREPARING = "preparing"
    EXECUTING = "executing"
    PAUSED = "paused"
    VERIFYING = "verifying"
    COMPLETED = "completed"
    FAILED = "failed"


class PlanStep(BaseModel):
    """One step of an execution plan. Status changes during build; never reordered."""

    model_config = ConfigDict(frozen=True)

    id: str
    order: int = 0
    title: str
    description: str = ""
    status: StepStatus = "pending"
    files_to_create: tuple[str, ...] | None = None
    files_to_modify: tuple[str, ...] | None = None
    estimated_complexity: StepComplexity | None = None
    dependencies: tuple[str, ...] | None = None
    output: str | None = None


class PlanStepPatch(BaseModel):
    """Partial update merged into a PlanStep. Only explicitly set fields are applied."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    status: StepStatus | None = None
    files_to_create: tuple[str, ...] | None = None
    files_to_modify: tuple[str, ...] | None = None
    estimated_complexity: StepComplexity | None = None
    dependencies: tuple[str, ...] | None = None
    output: str | None = None


class ClarifyingQuestion(BaseModel):
    """A question raised while planning. Only `answer` is ever set afterwards."""

    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    required: bool = True
    options: tuple[str, ...] | None = None
    answer: str | None = None


class AnalyzedFile(BaseModel):
    """A file looked at during planning."""

    model_config = ConfigDict(frozen=True)

    path: str
    relevance: FileRelevance = "medium"
    reason: str = ""
    will_modify: bool = False


class ExecutionPlan(BaseModel):
    """Structured plan tracked through the planning and build phases."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    status: PlanStatus = PlanStatus.IDLE
    steps: tuple[PlanStep, ...] = ()
    clarifying_questions: tuple[ClarifyingQuestion, ...] = ()
    analyzed_files: tuple[AnalyzedFile, ...] = ()
    codebase_context: str = ""
    build_status: BuildStatus = BuildStatus.IDLE
    current_step_index: int = Field(default=0, ge=0)
    progress: int = Field(default=0, ge=0, le=100)
    estimated_duration: str | None = None
    user_approved: bool = False
    user_modified: bool = False
    created_at: int = 0  # epoch milliseconds
    updated_at: int = 0


class PlanBuildState(BaseModel):
    """Whole reducer state. Replaced, never mutated."""

    model_config = ConfigDict(frozen=True)

    mode: InteractionMode = "plan"
    current_plan: ExecutionPlan | None = None
    plan_history: tuple[ExecutionPlan, ...] = ()
    is_plan_editable: bool = True


INITIAL_STATE = PlanBuildState()


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_plan_id() -> str:
    return f"plan_{uuid.uuid4().hex[:12]}"


def create_empty_plan(title: str, timestamp: int | None = None) -> ExecutionPlan:
    """Create a blank plan in IDLE status."""
    ts = now_ms() if timestamp is None else timestamp
    return ExecutionPlan(id=new_plan_id(), title=title, created_at=ts, updated_at=ts)


def truncate_title(message: str, limit: int = TITLE_MAX_LENGTH) -> str:
    """Plan title from the request text: first `limit` characters plus an ellipsis."""
    if len(message) > limit:
        return message[:limit] + "…"
    return message


def calculate_plan_progress(steps: tuple[PlanStep, ...]) -> int:
    """Percentage of steps completed or skipped, rounded half up."""
    if not steps:
        return 0
    done = sum(1 for s in steps if s.status in ("completed", "skipped"))
    return int(done * 100 / len(steps) + 0.5)
