"""ASGI entry point: builds the FastAPI app around the DI container."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.container import Container, get_container
from src.api.dependencies import limiter
from src.api.routes.chat import router as chat_router
from src.api.routes.classify import router as classify_router
from src.api.routes.workflow import router as workflow_router
from src.shared.logging import setup_logging

log = structlog.get_logger()

ROUTERS = (classify_router, workflow_router, chat_router)


def _configure_logging(container: Container) -> None:
    cfg = container.config
    setup_logging(
        level=cfg.log_level,
        file_path=cfg.log_file,
        rotation_max_mb=cfg.log_rotation_max_mb,
        rotation_backups=cfg.log_rotation_backups,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and build the registry up front; release the backend client on exit."""
    container = get_container()
    _configure_logging(container)
    log.info(
        "startup",
        backend_url=container.config.backend.url,
        default_confidence=container.config.classifier.default_confidence,
        categories=[c.value for c in container.registry.list_categories()],
    )
    try:
        yield
    finally:
        await container.transport.close()
        log.info("shutdown", sessions=len(container.sessions.list_ids()))


def create_app(container: Container | None = None) -> FastAPI:
    """Assemble middleware and routers."""
    container = container or get_container()
    application = FastAPI(
        title="Assistant Core",
        version="0.1.0",
        description="Intent routing, Plan/Build workflow and streaming transcript assembly",
        lifespan=lifespan,
    )
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=container.config.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    for router in ROUTERS:
        application.include_router(router)
    return application


app = create_app()


@app.get("/health")
@limiter.limit("100/minute")
async def health(request: Request) -> dict:
    """Liveness plus registry and session counts."""
    container = get_container()
    return {
        "status": "ok",
        "service": "assistant-core",
        "categories": [c.value for c in container.registry.list_categories()],
        "sessions": len(container.sessions.list_ids()),
    }
