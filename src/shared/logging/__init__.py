"""Structured logging: structlog rendering for both structlog and stdlib loggers."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog

# Per-request chatter from the HTTP stack; kept at WARNING unless we run at DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore", "sse_starlette", "uvicorn.access")

_PRE_CHAIN = (
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
)


def _formatter(json_output: bool) -> logging.Formatter:
    """One formatter shared by every handler so both logger kinds render alike."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_PRE_CHAIN,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    final = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=list(_PRE_CHAIN),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, final],
    )


def _rotating_file(file_path: str, max_mb: int, backups: int) -> logging.Handler | None:
    target = Path(file_path).expanduser().resolve()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(target, maxBytes=max_mb * 1024 * 1024, backupCount=backups, encoding="utf-8")
    except OSError as e:
        sys.stderr.write(f"File logging disabled ({target}): {e}\n")
        return None


def setup_logging(
    level: str = "INFO",
    file_path: str = "",
    rotation_max_mb: int = 5,
    rotation_backups: int = 3,
    json_output: bool | None = None,
) -> None:
    """Route all logging through structlog's formatter.

    Output goes to stdout, plus a size-rotated file when file_path is set.
    Rendering is JSON except at DEBUG, which uses the console renderer;
    json_output forces one or the other.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    if json_output is None:
        json_output = numeric_level != logging.DEBUG
    formatter = _formatter(json_output)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if file_path.strip():
        file_handler = _rotating_file(file_path.strip(), rotation_max_mb, rotation_backups)
        if file_handler is not None:
            handlers.append(file_handler)

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.setLevel(numeric_level)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        root.addHandler(handler)

    quiet = logging.DEBUG if numeric_level == logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)
