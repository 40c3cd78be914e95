"""Plan/Build workflow API routes."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from pydantic import TypeAdapter, ValidationError

from src.api.dependencies import get_sessions, limiter
from src.api.store import SessionStore
from src.application.workflow.dto import ActionResult, WorkflowSnapshot
from src.domain.services.plan_build import PlanBuildAction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflow", tags=["workflow"])

_action_adapter: TypeAdapter[PlanBuildAction] = TypeAdapter(PlanBuildAction)


@router.get("/{session_id}", response_model=WorkflowSnapshot)
async def get_workflow(
    session_id: str,
    sessions: SessionStore = Depends(get_sessions),
) -> WorkflowSnapshot:
    """Current Plan/Build state and derived selectors for a session."""
    session = sessions.get_or_create(session_id)
    return WorkflowSnapshot.from_store(session.plan_store)


@router.post("/{session_id}/actions", response_model=ActionResult)
@limiter.limit("120/minute")
async def dispatch_action(
    request: Request,
    session_id: str,
    payload: dict[str, Any] = Body(...),
    sessions: SessionStore = Depends(get_sessions),
) -> ActionResult:
    """Dispatch one `{"type": ...}` action. Guarded actions that do not apply leave the state unchanged."""
    try:
        action = _action_adapter.validate_python(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    store = sessions.get_or_create(session_id).plan_store
    applied = store.dispatch(action)
    if not applied:
        logger.info("Action %s ignored for session=%s", action.type, session_id)
    return ActionResult(applied=applied, snapshot=WorkflowSnapshot.from_store(store))
