"""Chat API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from src.api.dependencies import get_registry, get_sessions, limiter
from src.api.store import SessionStore
from src.application.chat.dto import ChatRequest, ChatTurnResponse, TranscriptSnapshot
from src.application.chat.session import ChatSession, stream_turn
from src.application.skills.handlers import FileContext
from src.application.skills.registry import SkillRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def _prepare(
    session_id: str,
    chat_request: ChatRequest,
    sessions: SessionStore,
    registry: SkillRegistry,
) -> tuple[ChatSession, list[FileContext]]:
    """Resolve the session and reject requests that cannot start a turn."""
    session = sessions.get_or_create(session_id)
    if session.is_busy:
        raise HTTPException(status_code=409, detail="A turn is already in progress for this session")
    files = [FileContext(path=f.path, content=f.content, language=f.language) for f in chat_request.files]
    match = registry.classifier.classify(chat_request.message)
    config = registry.get_config(match.category)
    if config is not None and config.requires_file_context and not files:
        raise HTTPException(
            status_code=400,
            detail=f"{config.name} requests need the current file contents attached",
        )
    return session, files


@router.post("/{session_id}", response_model=ChatTurnResponse)
@limiter.limit("60/minute")
async def chat(
    request: Request,
    session_id: str,
    chat_request: ChatRequest,
    sessions: SessionStore = Depends(get_sessions),
    registry: SkillRegistry = Depends(get_registry),
) -> ChatTurnResponse:
    """Run one turn and return the assembled transcript."""
    session, files = _prepare(session_id, chat_request, sessions, registry)
    try:
        return await session.send(chat_request.message, files=files)
    except Exception:
        logger.exception("Chat turn failed for session=%s", session_id)
        raise HTTPException(status_code=500, detail="Chat request failed")


@router.post("/{session_id}/stream")
@limiter.limit("60/minute")
async def chat_stream(
    request: Request,
    session_id: str,
    chat_request: ChatRequest,
    sessions: SessionStore = Depends(get_sessions),
    registry: SkillRegistry = Depends(get_registry),
) -> EventSourceResponse:
    """Run one turn, streaming transcript snapshots via SSE."""
    session, files = _prepare(session_id, chat_request, sessions, registry)

    async def event_generator():
        try:
            async for kind, data in stream_turn(session, chat_request.message, files):
                yield {"event": kind, "data": data}
        except Exception:
            logger.exception("Chat stream failed for session=%s", session_id)
            yield {"event": "error", "data": "Stream failed"}

    return EventSourceResponse(event_generator())


@router.post("/{session_id}/abort")
async def abort(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> dict:
    """Request cancellation of the in-flight turn (takes effect at the next chunk)."""
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    was_busy = session.is_busy
    session.abort()
    return {"session_id": session_id, "aborted": was_busy}


@router.get("/{session_id}", response_model=TranscriptSnapshot)
async def get_transcript(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> TranscriptSnapshot:
    """Current transcript for a session."""
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session.snapshot()


@router.delete("/{session_id}")
async def clear_transcript(session_id: str, sessions: SessionStore = Depends(get_sessions)) -> dict:
    """Clear a session's transcript."""
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    if session.is_busy:
        raise HTTPException(status_code=409, detail="A turn is in progress for this session")
    session.assembler.clear()
    return {"session_id": session_id, "cleared": True}
