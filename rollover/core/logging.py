# rollover/core/logging.py
import logging
import sys

import structlog

from rollover.core.config import LOG_LEVELS, settings

def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure stdlib logging and structlog once for the process."""
    level_name = (level or settings.LOG_LEVEL).strip().upper()
    if level_name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}")
    level_no = getattr(logging, level_name)
    as_json = settings.LOG_JSON if json_logs is None else json_logs

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level_no)

    renderer = structlog.processors.JSONRenderer() if as_json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        cache_logger_on_first_use=True,
    )

log = structlog.get_logger("rollover")
