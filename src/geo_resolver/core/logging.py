"""Loguru structured logging configuration.

Every record carries the resolver stage that emitted it (``extra["stage"]``,
``-`` outside a stage) so a resolution can be followed through the country,
city, cache and provider stages. Stages log through ``logger.bind(stage=...)``.
An opt-in JSON sink and an optional rotating log file are also installed.
"""

import sys
from pathlib import Path

from loguru import logger

_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {extra[stage]:<8} | {name}:{function}:{line} | {message}"
)
NO_STAGE = "-"


def setup_logging(log_level: str = "INFO", log_dir: str | None = None, stage: str | None = None) -> None:
    """Configure Loguru sinks for the resolver.

    Args:
        log_level: Minimum log level to emit.
        log_dir: Optional directory for log files.  When set, a rotating
            file sink is added (rotated every 24 hours, retained 7 days).
        stage: Only emit records from this resolver stage (e.g. ``cache``)
            on stderr. All stages go to the file sink.
    """
    level = log_level.upper()
    logger.remove()
    logger.configure(extra={"stage": NO_STAGE})
    logger.add(
        sys.stderr,
        level=level,
        format=_LOG_FORMAT,
        filter=(lambda record: record["extra"]["stage"] == stage) if stage else None,
    )
    logger.add(
        sys.stderr,
        level=level,
        serialize=True,
        filter=lambda record: record["extra"].get("json_output", False),
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "geo-resolver.log",
            level=level,
            format=_LOG_FORMAT,
            rotation="24h",
            retention="7 days",
        )
