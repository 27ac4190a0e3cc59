"""structlog setup for processes embedding the settlement core."""

import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Console logging with ISO timestamps, filtered at the given level name.

    Raises:
        ValueError: If level is not a known logging level name
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
