"""Config loader: layered TOML files, then environment variables."""

import logging
import os
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

from src.domain.ports.config import (
    AppConfig,
    BackendConfig,
    ClassifierConfig,
    SecurityConfig,
    ServerConfig,
    WorkflowConfig,
)

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"
BASE_FILE = "default.toml"
OVERLAY_FILE = "development.toml"


def _confidence(raw: str) -> float:
    value = float(raw)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{value} is outside [0, 1]")
    return value


def _origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


# env var -> (section, key, parser)
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "PORT": ("server", "port", int),
    "LOG_LEVEL": ("logging", "level", str.upper),
    "LOG_FILE": ("logging", "file", str.strip),
    "CHAT_BACKEND_URL": ("backend", "url", str.strip),
    "CHAT_BACKEND_API_KEY": ("backend", "api_key", str.strip),
    "CHAT_BACKEND_TIMEOUT": ("backend", "timeout", int),
    "CORS_ORIGINS": ("security", "cors_origins", _origins),
    "RATE_LIMIT_PER_MINUTE": ("security", "rate_limit_requests_per_minute", int),
    "CLASSIFIER_DEFAULT_CONFIDENCE": ("classifier", "default_confidence", _confidence),
}


def _read(path: Path) -> dict:
    if not path.exists():
        return {}
    with path.open("rb") as fh:
        return tomllib.load(fh)


def _merge(base: dict, overlay: dict) -> dict:
    """Section-wise merge: overlay tables update base tables, scalars replace."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = {**current, **value}
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(config: dict) -> dict:
    """Apply environment variable overrides in place; unparseable values are logged and skipped."""
    for env_name, (section, key, parse) in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if not raw:
            continue
        try:
            value = parse(raw)
        except ValueError as e:
            logger.warning("Ignoring %s=%r: %s", env_name, raw, e)
            continue
        config.setdefault(section, {})[key] = value
    return config


def load_config(config_dir: Path | None = None) -> AppConfig:
    """Build AppConfig from default.toml, development.toml (if present) and the environment."""
    config_dir = config_dir or CONFIG_DIR
    raw = _merge(_read(config_dir / BASE_FILE), _read(config_dir / OVERLAY_FILE))
    raw = _apply_env_overrides(raw)

    log_section = raw.get("logging") or {}
    return AppConfig(
        server=ServerConfig(**raw.get("server", {})),
        backend=BackendConfig(**raw.get("backend", {})),
        classifier=ClassifierConfig(**raw.get("classifier", {})),
        workflow=WorkflowConfig(**raw.get("workflow", {})),
        security=SecurityConfig(**raw.get("security", {})),
        log_level=str(log_section.get("level", "INFO")).upper(),
        log_file=str(log_section.get("file", "")).strip(),
        log_rotation_max_mb=int(log_section.get("log_rotation_max_mb", 5)),
        log_rotation_backups=int(log_section.get("log_rotation_backups", 3)),
    )
