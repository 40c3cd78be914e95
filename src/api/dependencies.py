"""FastAPI dependencies."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from src.api.container import get_container
from src.api.store import SessionStore
from src.application.skills.registry import SkillRegistry
from src.domain.ports.config import AppConfig

limiter = Limiter(key_func=get_remote_address)


def get_config() -> AppConfig:
    """Configuration from the container."""
    return get_container().config


def get_registry() -> SkillRegistry:
    """Category registry."""
    return get_container().registry


def get_sessions() -> SessionStore:
    """Chat session store."""
    return get_container().sessions
