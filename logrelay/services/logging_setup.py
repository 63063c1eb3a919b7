"""Logging configuration for the server and the CLI.

Modules keep using ``logging.getLogger(__name__)``; records are rendered by
structlog, either as JSON lines or for a console.
"""

import logging
import sys

import structlog

SHARED_PROCESSORS = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
]


def build_formatter(fmt: str = "json") -> structlog.stdlib.ProcessorFormatter:
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer(default=str)
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install a single root handler, JSON lines or console output."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(build_formatter(fmt))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper())


__all__ = ["build_formatter", "configure_logging"]
