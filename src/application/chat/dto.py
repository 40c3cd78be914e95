"""Chat DTOs."""

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from src.application.chat.assembler import TurnOutcome
from src.domain.entities.skill import Category
from src.domain.entities.transcript import CategoryTag, ProgressSignal, TranscriptMessage

if TYPE_CHECKING:
    from src.application.chat.assembler import TranscriptAssembler


class FileContextDTO(BaseModel):
    """File contents attached by the caller (required for debug/review)."""

    path: str = Field(..., min_length=1, max_length=1000)
    content: str = Field(..., max_length=500_000)
    language: str = ""


class ChatRequest(BaseModel):
    """Request to run one chat turn."""

    message: str = Field(..., min_length=1, max_length=50_000)
    files: list[FileContextDTO] = Field(default_factory=list, max_length=50)


class TranscriptSnapshot(BaseModel):
    """Read-only view of the transcript and the ephemeral signals."""

    messages: list[TranscriptMessage]
    is_loading: bool
    is_busy: bool = False
    active_category: CategoryTag | None = None
    progress: ProgressSignal | None = None

    @classmethod
    def from_assembler(cls, assembler: "TranscriptAssembler") -> "TranscriptSnapshot":
        return cls(
            messages=list(assembler.messages),
            is_loading=assembler.is_loading,
            is_busy=assembler.is_busy,
            active_category=assembler.active_category,
            progress=assembler.progress,
        )


class ChatTurnResponse(BaseModel):
    """Result of one turn."""

    session_id: str
    outcome: TurnOutcome
    category: Category | None = None
    confidence: float | None = None
    error: str | None = None
    transcript: TranscriptSnapshot
