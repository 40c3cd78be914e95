"""Skill categories, workflow stages and intent match types."""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Closed set of work categories a user utterance can be routed to."""

    EXPLORE = "brainstorm"
    PLAN = "plan"
    CODE = "code"
    DEBUG = "debug"
    REVIEW = "review"
    SEARCH = "search"
    GENERAL = "general"


class WorkflowStage(str, Enum):
    """Workflow phase associated with a category."""

    IDLE = "idle"
    THINKING = "thinking"
    PLANNING = "planning"
    CODING = "coding"
    TESTING = "testing"
    REVIEWING = "reviewing"
    DONE = "done"


class IntentMatch(BaseModel):
    """Classification result. Produced fresh per call, never persisted."""

    model_config = ConfigDict(frozen=True)

    category: Category
    confidence: float = Field(ge=0.0, le=1.0)
    matched_pattern: str | None = None


class Entities(BaseModel):
    """Advisory metadata extracted from the input; not used for routing."""

    model_config = ConfigDict(frozen=True)

    action: str | None = None
    target: str | None = None
    language: str | None = None


class CategoryConfig(BaseModel):
    """Static metadata for one category."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    category: Category
    name: str
    description: str
    trigger_patterns: tuple[re.Pattern, ...] = ()
    stage: WorkflowStage
    requires_file_context: bool = False
    supports_streaming: bool = True

    def pattern_sources(self) -> list[str]:
        """Return trigger patterns as plain strings (for JSON output)."""
        return [p.pattern for p in self.trigger_patterns]


class SkillContext(BaseModel):
    """Routing context handed to the dispatch collaborator alongside the prompt."""

    category: Category
    confidence: float
    stage: WorkflowStage
    entities: Entities
    requires_files: bool
    timestamp: int  # epoch milliseconds
