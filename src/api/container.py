"""Service container: builds each collaborator once, on first use."""

from functools import cached_property

from src.api.store import SessionStore
from src.application.chat.session import ChatSession
from src.application.skills.registry import SkillRegistry, create_default_registry
from src.domain.ports.config import AppConfig
from src.domain.services.intent_classifier import IntentClassifier
from src.infrastructure.config import load_config
from src.infrastructure.transport.http_chat import HttpChatTransport


class Container:
    """Lazily wired services for the API layer.

    Every property is a cached_property, so tests can pre-seed one by writing
    to the instance __dict__ (e.g. a fake transport) before first access.
    """

    def __init__(self, config: AppConfig | None = None):
        """Optionally pin the config instead of loading it from disk."""
        self._pinned_config = config

    @cached_property
    def config(self) -> AppConfig:
        return self._pinned_config or load_config()

    @cached_property
    def classifier(self) -> IntentClassifier:
        return IntentClassifier(default_confidence=self.config.classifier.default_confidence)

    @cached_property
    def registry(self) -> SkillRegistry:
        return create_default_registry(self.classifier)

    @cached_property
    def transport(self) -> HttpChatTransport:
        return HttpChatTransport(self.config.backend)

    @cached_property
    def sessions(self) -> SessionStore:
        return SessionStore(self.new_session)

    def new_session(self, session_id: str) -> ChatSession:
        """Factory handed to the session store."""
        return ChatSession(
            session_id=session_id,
            backend=self.transport,
            registry=self.registry,
            auto_parse_plans=self.config.workflow.auto_parse_plans,
        )

    def reset(self) -> None:
        """Forget every built service."""
        for name in [n for n in vars(self) if not n.startswith("_")]:
            delattr(self, name)


_container: Container | None = None


def get_container() -> Container:
    """Process-wide container, created on first call."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def set_container(container: Container) -> None:
    """Install a prebuilt container (tests, embedding)."""
    global _container
    _container = container


def reset_container() -> None:
    """Drop the process-wide container."""
    global _container
    if _container is not None:
        _container.reset()
    _container = None
