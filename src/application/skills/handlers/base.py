"""Base skill handler interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from src.domain.entities.skill import Category, CategoryConfig
from src.domain.errors import MissingFileContextError
from src.domain.services.categories import CATEGORY_CONFIGS


@dataclass
class FileContext:
    """Current contents of a workspace file attached to a request."""

    path: str
    content: str
    language: str = ""


@dataclass
class HandlerContext:
    """Context the caller supplies when dispatching a category."""

    files: list[FileContext] = field(default_factory=list)
    history: list[dict[str, str]] = field(default_factory=list)  # [{"role", "content"}]


class SkillHandler(ABC):
    """Base class for per-category prompt builders."""

    request_label = "User Request"
    closing_line = "Please respond to the user's request."

    @property
    @abstractmethod
    def category(self) -> Category:
        """Return the category this handler serves."""
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """System prompt sent ahead of the user's request."""
        ...

    @property
    def config(self) -> CategoryConfig:
        return CATEGORY_CONFIGS[self.category]

    def build_prompt(self, user_input: str, context: HandlerContext | None = None) -> str:
        """Assemble the full prompt for the dispatch collaborator.

        Raises:
            MissingFileContextError: category requires file context and none was attached.
        """
        context = context or HandlerContext()
        if self.config.requires_file_context and not context.files:
            raise MissingFileContextError(
                f"{self.config.name} requests need the current file contents attached"
            )
        parts = [self.system_prompt, f"{self.request_label}: {user_input}"]
        if context.files:
            parts.append(self._format_files(context.files))
        parts.append(self.closing_line)
        return "\n\n".join(parts)

    def _format_files(self, files: list[FileContext]) -> str:
        blocks = [f"### {f.path}\n```{f.language}\n{f.content}\n```" for f in files]
        return "Current files:\n\n" + "\n\n".join(blocks)
