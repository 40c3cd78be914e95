"""Transcript entities built by the streaming assembler."""

from typing import Literal

from pydantic import BaseModel, ConfigDict

Role = Literal["user", "assistant"]
ToolStatus = Literal["starting", "running", "complete", "error"]


class ThinkingSegment(BaseModel):
    """Contiguous block of reasoning content of one kind."""

    model_config = ConfigDict(frozen=True)

    kind: str
    content: str = ""
    is_complete: bool = False


class ToolRecord(BaseModel):
    """Status of one tool invocation reported by the backend."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: ToolStatus
    message: str | None = None


class CategoryTag(BaseModel):
    """Category the backend reported for a turn (also the `active_category` signal)."""

    model_config = ConfigDict(frozen=True)

    category: str
    stage: str
    confidence: float | None = None


class ProgressSignal(BaseModel):
    """Ephemeral progress indicator; never written into a message."""

    model_config = ConfigDict(frozen=True)

    stage: str
    message: str = ""
    percent: float | None = None


class TranscriptMessage(BaseModel):
    """One user or assistant turn in the transcript."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = ""
    thinking_segments: tuple[ThinkingSegment, ...] = ()
    tool_records: tuple[ToolRecord, ...] = ()
    category_tag: CategoryTag | None = None
