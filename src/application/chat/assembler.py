"""Streaming transcript assembler - drives one assistant turn from a frame stream.

The assembler owns the transcript. Every update replaces the message tuple (and the
message being built) instead of mutating it, so observers can hold on to snapshots.
"""

import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from enum import Enum
from typing import Any, Union

from pydantic import ValidationError

from src.domain.entities.transcript import (
    CategoryTag,
    ProgressSignal,
    ThinkingSegment,
    ToolRecord,
    TranscriptMessage,
)
from src.domain.errors import StreamTurnError
from src.infrastructure.streaming.frame_decoder import Frame, FrameDecoder

logger = logging.getLogger(__name__)

ChunkStream = AsyncIterator[Union[str, bytes]]
SendMessage = Callable[[str], Union[ChunkStream, Awaitable[ChunkStream]]]
ErrorHandler = Callable[[StreamTurnError], None]

_TOOL_STATUS_ALIASES = {"started": "starting"}


class TurnOutcome(str, Enum):
    """How a call to `send` ended."""

    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"
    REJECTED = "rejected"  # empty input or a turn already in flight


def _field(data: dict[str, Any], *names: str, default: Any = None) -> Any:
    """First present key among camelCase / snake_case spellings."""
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return default


class TranscriptAssembler:
    """Builds the conversation transcript from streamed frames, one turn at a time."""

    def __init__(
        self,
        send_message: SendMessage,
        on_error: ErrorHandler | None = None,
        on_update: Callable[["TranscriptAssembler"], None] | None = None,
    ) -> None:
        """Initialize with the dispatch function and optional observers."""
        self._send_message = send_message
        self._error_handler = on_error
        self._update_handler = on_update
        self._messages: tuple[TranscriptMessage, ...] = ()
        self._is_loading = False
        self._aborted = False
        self._active_category: CategoryTag | None = None
        self._progress: ProgressSignal | None = None
        self._placeholder: int | None = None
        self._open_thinking: ThinkingSegment | None = None
        self._text = ""
        self._frame_handlers: dict[str, Callable[[dict[str, Any]], None]] = {
            "skill": self._apply_skill,
            "progress": self._apply_progress,
            "thinking": self._apply_thinking,
            "tool": self._apply_tool,
            "text": self._apply_text,
            "done": self._apply_done,
            "error": self._apply_error,
        }

    # -- observable state -------------------------------------------------

    @property
    def messages(self) -> tuple[TranscriptMessage, ...]:
        return self._messages

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_busy(self) -> bool:
        """True until the current turn's read loop has returned; gate new turns on this."""
        return self._is_loading or self._placeholder is not None

    @property
    def active_category(self) -> CategoryTag | None:
        return self._active_category

    @property
    def progress(self) -> ProgressSignal | None:
        return self._progress

    def clear(self) -> bool:
        """Drop the transcript and signals. Refused while a turn is in flight."""
        if self.is_busy:
            return False
        self._messages = ()
        self._active_category = None
        self._progress = None
        self._notify()
        return True

    # -- turn lifecycle ---------------------------------------------------

    def abort(self) -> None:
        """Stop the current turn at the next chunk boundary. Keeps the partial reply."""
        if not self.is_busy:
            return
        logger.info("Turn aborted by caller")
        self._aborted = True
        self._is_loading = False
        self._progress = None
        self._notify()

    async def send(self, text: str) -> TurnOutcome:
        """Commit the user message and stream the assistant reply into the transcript."""
        if not text or not text.strip():
            return TurnOutcome.REJECTED
        if self.is_busy:
            logger.warning("Turn rejected: another turn is still in flight")
            return TurnOutcome.REJECTED

        self._messages = self._messages + (
            TranscriptMessage(role="user", content=text),
            TranscriptMessage(role="assistant"),
        )
        self._placeholder = len(self._messages) - 1
        self._is_loading = True
        self._aborted = False
        self._active_category = None
        self._progress = None
        self._open_thinking = None
        self._text = ""
        self._notify()

        stream: ChunkStream | None = None
        try:
            stream = self._send_message(text)
            if inspect.isawaitable(stream):
                stream = await stream
            outcome = await self._consume(stream)
        except Exception as e:  # noqa: BLE001
            self._fail(e)
            return TurnOutcome.FAILED
        finally:
            if stream is not None and hasattr(stream, "aclose"):
                try:
                    await stream.aclose()
                except Exception:  # noqa: BLE001
                    logger.debug("Stream close failed", exc_info=True)
            self._placeholder = None
            self._is_loading = False

        self._notify()
        return outcome

    async def _consume(self, stream: ChunkStream) -> TurnOutcome:
        decoder = FrameDecoder()
        async for chunk in stream:
            if self._aborted:
                return TurnOutcome.ABORTED
            for frame in decoder.feed(chunk):
                self._apply(frame)
        if self._aborted:
            return TurnOutcome.ABORTED
        for frame in decoder.flush():
            self._apply(frame)
        return TurnOutcome.COMPLETED

    def _fail(self, error: Exception) -> None:
        if isinstance(error, StreamTurnError):
            turn_error = error
        else:
            turn_error = StreamTurnError(str(error) or type(error).__name__)
            turn_error.__cause__ = error
        logger.error("Turn failed: %s", turn_error)

        if self._placeholder is not None and self._placeholder < len(self._messages):
            self._messages = self._messages[: self._placeholder] + self._messages[self._placeholder + 1 :]
        self._placeholder = None
        self._is_loading = False
        self._progress = None
        self._notify()
        if self._error_handler is not None:
            self._error_handler(turn_error)

    # -- frame application ------------------------------------------------

    def _apply(self, frame: Frame) -> None:
        handler = self._frame_handlers.get(frame.event)
        if handler is None:
            logger.debug("Ignoring unknown frame type: %s", frame.event)
            return
        try:
            handler(frame.data)
        except ValidationError as e:
            logger.warning("Dropping invalid '%s' frame: %s", frame.event, e)
            return
        self._notify()

    def _current(self) -> TranscriptMessage:
        return self._messages[self._placeholder]

    def _replace_current(self, **updates: Any) -> None:
        index = self._placeholder
        message = self._messages[index].model_copy(update=updates)
        self._messages = self._messages[:index] + (message,) + self._messages[index + 1 :]

    def _apply_skill(self, data: dict[str, Any]) -> None:
        tag = CategoryTag(
            category=_field(data, "category", "type", default="general"),
            stage=_field(data, "stage", default="idle"),
            confidence=_field(data, "confidence"),
        )
        self._active_category = tag
        self._replace_current(category_tag=tag)

    def _apply_progress(self, data: dict[str, Any]) -> None:
        self._progress = ProgressSignal(
            stage=_field(data, "stage", default=""),
            message=_field(data, "message", default=""),
            percent=_field(data, "percent"),
        )

    def _apply_thinking(self, data: dict[str, Any]) -> None:
        kind = str(_field(data, "thinkingType", "thinking_type", "kind", default="thinking"))
        delta = ThinkingSegment(kind=kind, content=_field(data, "content", default=""))
        content = delta.content
        segments = list(self._current().thinking_segments)

        if _field(data, "isComplete", "is_complete", default=False):
            for i, segment in enumerate(segments):
                if segment.kind == kind:
                    segments[i] = segment.model_copy(update={"is_complete": True})
                    break
            else:
                segments.append(ThinkingSegment(kind=kind, content=content, is_complete=True))
            if self._open_thinking is not None and self._open_thinking.kind == kind:
                self._open_thinking = None
            self._replace_current(thinking_segments=tuple(segments))
            return

        open_segment = self._open_thinking
        if open_segment is None or open_segment.kind != kind:
            if open_segment is not None:
                segments = [
                    s.model_copy(update={"is_complete": True}) if s.kind == open_segment.kind else s
                    for s in segments
                ]
            open_segment = delta
        else:
            open_segment = open_segment.model_copy(update={"content": open_segment.content + content})
        self._open_thinking = open_segment

        for i, segment in enumerate(segments):
            if segment.kind == kind:
                segments[i] = open_segment
                break
        else:
            segments.append(open_segment)
        self._replace_current(thinking_segments=tuple(segments))

    def _apply_tool(self, data: dict[str, Any]) -> None:
        status = _field(data, "status", default="running")
        record = ToolRecord(
            name=_field(data, "toolName", "tool_name", "name", default="tool"),
            status=_TOOL_STATUS_ALIASES.get(status, status),
            message=_field(data, "message"),
        )
        records = list(self._current().tool_records)
        for i in range(len(records) - 1, -1, -1):
            if records[i].name == record.name and records[i].status != "complete":
                records[i] = record
                break
        else:
            records.append(record)
        self._replace_current(tool_records=tuple(records))

    def _apply_text(self, data: dict[str, Any]) -> None:
        self._text += str(_field(data, "content", default=""))
        self._replace_current(content=self._text)

    def _apply_done(self, data: dict[str, Any]) -> None:
        self._progress = None
        self._is_loading = False

    def _apply_error(self, data: dict[str, Any]) -> None:
        raise StreamTurnError(str(_field(data, "error", "message", default="Stream error")), payload=data)

    def _notify(self) -> None:
        if self._update_handler is not None:
            self._update_handler(self)
