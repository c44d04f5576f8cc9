import logging
import sys

import structlog

processors = [
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="%H:%M:%S"),
    structlog.dev.ConsoleRenderer(colors=True),
]


def stderr_logger_factory(*args):
    # sys.stderr is looked up per logger so swapped streams are honoured
    return structlog.WriteLogger(sys.stderr)


def configure_logging(level: str = "WARNING"):
    # stderr only: stdout carries the resume prompt and the MCP stdio stream
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        logger_factory=stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None):
    return structlog.get_logger(name or "contextresume")


configure_logging()
