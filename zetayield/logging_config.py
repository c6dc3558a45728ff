"""
Structured logging configuration using structlog.

Every module logs through ``logging.getLogger(__name__)``; records are rendered
by structlog with the execution context merged in. The orchestrator binds
``run_id``, ``tx_hash`` and ``chain_id`` and the CCTX tracker binds
``cctx_hash`` while they work, so each line names the run and transaction it
belongs to.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import settings


def build_renderer(log_format: str, level: int) -> structlog.types.Processor:
    """Renderer for ``log_format`` (``json``, ``console`` or ``auto``)."""
    fmt = log_format.lower()
    if fmt == "auto":
        fmt = "console" if level == logging.DEBUG else "json"
    if fmt == "console":
        return structlog.dev.ConsoleRenderer()
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    raise ValueError(f"Unknown log format: {log_format}")


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install the structlog formatter on the root logger.

    Args:
        log_level: Override log level (default: from settings.log_level)
        log_format: Override renderer (default: from settings.log_format)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    renderer = build_renderer(log_format or settings.log_format, level)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if isinstance(renderer, structlog.processors.JSONRenderer):
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Stdlib records pick up run/tx context through the pre-chain
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)
