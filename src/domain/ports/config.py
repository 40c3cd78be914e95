"""Config Port - interface for configuration access."""

from typing import Protocol

from pydantic import BaseModel, Field


class BackendConfig(BaseModel):
    """Chat backend the dispatch function streams from."""

    url: str = "http://localhost:3000/api/chat"
    api_key: str = ""
    timeout: int = 120
    connect_timeout: int = 10
    max_retries: int = 3  # Connection attempts before the turn fails


class ClassifierConfig(BaseModel):
    """Intent classifier tuning."""

    # Confidence reported for input that matched no trigger pattern
    default_confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class WorkflowConfig(BaseModel):
    """Plan/Build workflow settings."""

    # Parse planning replies into the session's plan automatically
    auto_parse_plans: bool = True


class SecurityConfig(BaseModel):
    """Security settings."""

    rate_limit_requests_per_minute: int = 100
    cors_origins: list[str] = ["http://localhost:5173"]


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Full application configuration."""

    server: ServerConfig = ServerConfig()
    backend: BackendConfig = BackendConfig()
    classifier: ClassifierConfig = ClassifierConfig()
    workflow: WorkflowConfig = WorkflowConfig()
    security: SecurityConfig = SecurityConfig()
    log_level: str = "INFO"
    # Log file: path relative to cwd or absolute. Empty = only stdout. Rotation when file exceeds max_mb.
    log_file: str = ""
    log_rotation_max_mb: int = 5
    log_rotation_backups: int = 3


class ConfigPort(Protocol):
    """Interface for configuration providers."""

    def get_config(self) -> AppConfig:
        """Get the full application configuration."""
        ...
