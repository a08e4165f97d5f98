"""Structured logging setup.

Call :func:`configure_logging` once at startup (``main.py`` does this).
Other modules just use ``structlog.get_logger(__name__)``.
"""

from __future__ import annotations

import logging

import structlog

_configured = False


def configure_logging(level: str = "INFO", pretty: bool = False, force: bool = False) -> None:
    """Configure structlog and bridge stdlib logging through the same renderer.

    Args:
        level: Root log level name.
        pretty: Use the console renderer instead of JSON.
        force: Reconfigure even if already configured (tests/scripts).
    """
    global _configured
    if _configured and not force:
        return

    renderer = structlog.dev.ConsoleRenderer() if pretty else structlog.processors.JSONRenderer()

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.contextvars.merge_contextvars],
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    root_logger = logging.getLogger()
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    structlog.configure(
        processors=shared_processors + [renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True


def bind_request_context(**values: str) -> None:
    """Bind per-request ids (e.g. request_id) into structlog contextvars."""
    structlog.contextvars.clear_contextvars()
    payload = {k: v for k, v in values.items() if v}
    if payload:
        structlog.contextvars.bind_contextvars(**payload)
