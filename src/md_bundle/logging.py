from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False


def setup_logging(
    filename: str | Path | None = None,
    level: str | int = logging.INFO,
    *,
    force: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Set up structured logging for the md_bundle module.

    The first call wins unless `force` is set, so importing modules can grab a
    logger while the CLI later redirects it to a file or changes the level.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        level: Minimum level, as a logging constant or a name such as "DEBUG".
        force: Replace an existing configuration.

    Returns:
        A structlog logger instance configured for the md_bundle module.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if force or not _LOGGING_CONFIGURED:
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        if isinstance(level, str):
            level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            handlers=handlers,
            format="%(message)s",
            force=True,
        )
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True

    return structlog.get_logger("md_bundle")


logger = setup_logging()
