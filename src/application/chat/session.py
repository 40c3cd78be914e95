"""Chat session - routes each message, dispatches it and assembles the streamed reply."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from typing import Protocol

from src.application.chat.assembler import TranscriptAssembler, TurnOutcome
from src.application.chat.dto import ChatTurnResponse, TranscriptSnapshot
from src.application.skills.handlers import FileContext, HandlerContext
from src.application.skills.registry import RouteResult, SkillRegistry
from src.application.workflow.store import PlanBuildStore
from src.domain.entities.skill import Category
from src.domain.errors import StreamTurnError
from src.domain.services.intent_classifier import build_skill_context

logger = logging.getLogger(__name__)

HISTORY_MESSAGES = 20


class ChatBackend(Protocol):
    """Anything that streams the backend reply for one message (see HttpChatTransport)."""

    def stream(self, message: str, **body_extra) -> AsyncIterator[bytes]:
        ...


class ChatSession:
    """One conversation: transcript, Plan/Build workflow and routing for each turn."""

    def __init__(
        self,
        session_id: str,
        backend: ChatBackend,
        registry: SkillRegistry,
        plan_store: PlanBuildStore | None = None,
        auto_parse_plans: bool = True,
    ) -> None:
        """Initialize with the backend transport and the category registry."""
        self.session_id = session_id
        self.plan_store = plan_store or PlanBuildStore()
        self._backend = backend
        self._registry = registry
        self._auto_parse_plans = auto_parse_plans
        self._files: list[FileContext] = []
        self._listener: Callable[[TranscriptSnapshot], None] | None = None
        self.last_route: RouteResult | None = None
        self.last_error: StreamTurnError | None = None
        self.assembler = TranscriptAssembler(
            self._dispatch,
            on_error=self._record_error,
            on_update=self._forward_update,
        )

    @property
    def is_busy(self) -> bool:
        return self.assembler.is_busy

    def snapshot(self) -> TranscriptSnapshot:
        return TranscriptSnapshot.from_assembler(self.assembler)

    def abort(self) -> None:
        self.assembler.abort()

    async def send(
        self,
        message: str,
        files: list[FileContext] | None = None,
        listener: Callable[[TranscriptSnapshot], None] | None = None,
    ) -> ChatTurnResponse:
        """Run one turn and report how it ended."""
        self._files = list(files or [])
        self._listener = listener
        self.last_error = None
        self.last_route = None
        try:
            outcome = await self.assembler.send(message)
        finally:
            self._listener = None
            self._files = []

        if outcome == TurnOutcome.COMPLETED:
            self._after_turn()

        match = self.last_route.match if self.last_route else None
        return ChatTurnResponse(
            session_id=self.session_id,
            outcome=outcome,
            category=match.category if match else None,
            confidence=match.confidence if match else None,
            error=str(self.last_error) if self.last_error else None,
            transcript=self.snapshot(),
        )

    def _dispatch(self, text: str) -> AsyncIterator[bytes]:
        """Dispatch function handed to the assembler: classify, build the prompt, open the stream."""
        route = self._registry.route_for_input(text)
        if route is None:
            raise StreamTurnError("No handler available for this message")
        self.last_route = route
        handler = route.handler
        logger.info(
            "Routing turn session=%s category=%s confidence=%.2f",
            self.session_id,
            route.match.category.value,
            route.match.confidence,
        )

        if route.match.category == Category.PLAN and self.plan_store.state.current_plan is None:
            self.plan_store.start_planning(text)

        history = [
            {"role": m.role, "content": m.content}
            for m in self.assembler.messages[:-2][-HISTORY_MESSAGES:]
            if m.content
        ]
        prompt = handler.build_prompt(text, HandlerContext(files=self._files, history=history))
        context = build_skill_context(text, route.match.category)
        return self._backend.stream(
            text,
            prompt=prompt,
            system_prompt=handler.system_prompt,
            history=history,
            mode=self.plan_store.state.mode,
            skill=context.model_dump(mode="json"),
        )

    def _after_turn(self) -> None:
        if not self._auto_parse_plans or self.plan_store.state.mode != "plan":
            return
        reply = self.assembler.messages[-1] if self.assembler.messages else None
        if reply is None or reply.role != "assistant" or not reply.content:
            return
        if self.plan_store.apply_model_output(reply.content):
            logger.info("Plan updated from reply session=%s", self.session_id)

    def _record_error(self, error: StreamTurnError) -> None:
        self.last_error = error

    def _forward_update(self, assembler: TranscriptAssembler) -> None:
        if self._listener is not None:
            self._listener(TranscriptSnapshot.from_assembler(assembler))


async def stream_turn(
    session: ChatSession,
    message: str,
    files: list[FileContext] | None = None,
) -> AsyncIterator[tuple[str, str]]:
    """Run a turn and yield (event, json) pairs: transcript snapshots, then the final result."""
    queue: asyncio.Queue[tuple[str, str]] = asyncio.Queue()

    def on_update(snapshot: TranscriptSnapshot) -> None:
        queue.put_nowait(("transcript", snapshot.model_dump_json()))

    async def run_turn() -> None:
        try:
            result = await session.send(message, files=files, listener=on_update)
            queue.put_nowait(("done", result.model_dump_json()))
        except Exception as e:
            logger.exception("Streaming turn crashed session=%s", session.session_id)
            queue.put_nowait(("error", str(e)))

    task = asyncio.create_task(run_turn())
    try:
        while True:
            event = await queue.get()
            yield event
            if event[0] in ("done", "error"):
                break
    finally:
        if not task.done():
            session.abort()
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
