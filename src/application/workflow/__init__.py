"""Plan/Build workflow application layer."""

from src.application.workflow.dto import ActionResult, WorkflowSnapshot
from src.application.workflow.store import PlanBuildStore

__all__ = ["ActionResult", "PlanBuildStore", "WorkflowSnapshot"]
