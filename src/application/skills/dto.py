"""Classification DTOs."""

from pydantic import BaseModel, Field

from src.domain.entities.skill import Category, CategoryConfig, Entities, IntentMatch, WorkflowStage


class ClassifyRequest(BaseModel):
    """Text to classify."""

    message: str = Field(..., max_length=50_000)


class CategoryInfo(BaseModel):
    """JSON view of a category config."""

    category: Category
    name: str
    description: str
    trigger_patterns: list[str]
    stage: WorkflowStage
    requires_file_context: bool
    supports_streaming: bool

    @classmethod
    def from_config(cls, config: CategoryConfig) -> "CategoryInfo":
        return cls(
            category=config.category,
            name=config.name,
            description=config.description,
            trigger_patterns=config.pattern_sources(),
            stage=config.stage,
            requires_file_context=config.requires_file_context,
            supports_streaming=config.supports_streaming,
        )


class ClassifyResponse(BaseModel):
    """Classification result with advisory metadata."""

    match: IntentMatch
    entities: Entities
    stage: WorkflowStage
    config: CategoryInfo | None = None
