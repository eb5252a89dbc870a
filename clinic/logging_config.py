"""
Structured logging for the carebook backend.

structlog is configured to hand its events to the standard library so
that Django's own loggers and ours share one set of handlers.  The
returned dict is plugged into ``settings.LOGGING``.
"""
from __future__ import annotations

import uuid

import structlog

SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


def configure_structlog() -> None:
    structlog.configure(
        processors=SHARED_PROCESSORS + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_logging_config(log_level: str = "INFO", *, json_output: bool = False) -> dict:
    """Configure structlog and return a ``dictConfig`` for Django.

    Args:
        log_level: Level for the ``clinic`` and root loggers.
        json_output: Render one JSON object per line instead of the
            coloured console format.
    """
    configure_structlog()
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    renderer,
                ],
                "foreign_pre_chain": SHARED_PROCESSORS,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
            },
        },
        "root": {"handlers": ["console"], "level": "WARNING"},
        "loggers": {
            "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
            "django.request": {"handlers": ["console"], "level": "ERROR", "propagate": False},
            "clinic": {"handlers": ["console"], "level": log_level, "propagate": False},
        },
    }


def generate_request_id() -> str:
    return f"req-{uuid.uuid4().hex[:12]}"
