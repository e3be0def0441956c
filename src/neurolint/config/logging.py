"""structlog configuration for neurolint.

Two output modes:
- Human (default): console renderer to stderr, colored on a TTY
- JSON (``log_json``): structured JSON lines to stderr

The pipeline binds ``run_id`` through structlog contextvars, so every
line logged during one run (including stdlib ``logging`` records from
the validator and cache) carries it.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from neurolint.config.settings import NeuroLintSettings

PACKAGE_LOGGER = "neurolint"


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog processors and route all records to one handler.

    Args:
        verbose: DEBUG for the ``neurolint`` logger; otherwise WARNING+.
        log_json: Use the JSON renderer instead of the console renderer.
        stream: Destination (default: ``sys.stderr``).
    """
    out = stream or sys.stderr
    level = logging.DEBUG if verbose else logging.WARNING

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def configure_from_settings(settings: NeuroLintSettings) -> None:
    """Apply logging and telemetry flags from resolved settings."""
    configure_logging(verbose=settings.verbose, log_json=settings.log_json)
    if settings.verbose:
        from neurolint.services.telemetry import enable_telemetry

        enable_telemetry()
