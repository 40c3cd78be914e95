"""Classification API routes."""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_registry, limiter
from src.application.skills.dto import CategoryInfo, ClassifyRequest, ClassifyResponse
from src.application.skills.registry import SkillRegistry
from src.domain.services.intent_classifier import determine_stage, extract_entities

router = APIRouter(tags=["classify"])


@router.post("/classify", response_model=ClassifyResponse)
@limiter.limit("120/minute")
async def classify(
    request: Request,
    body: ClassifyRequest,
    registry: SkillRegistry = Depends(get_registry),
) -> ClassifyResponse:
    """Classify a message into a category."""
    match = registry.classifier.classify(body.message)
    config = registry.get_config(match.category)
    return ClassifyResponse(
        match=match,
        entities=extract_entities(body.message),
        stage=determine_stage(match.category),
        config=CategoryInfo.from_config(config) if config else None,
    )


@router.get("/categories", response_model=list[CategoryInfo])
async def list_categories(registry: SkillRegistry = Depends(get_registry)) -> list[CategoryInfo]:
    """List all category configs."""
    return [CategoryInfo.from_config(c) for c in registry.list_configs()]
