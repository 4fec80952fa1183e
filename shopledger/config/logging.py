"""
structlog setup.

Ledger events are key/value pairs (``invoice_reconciled``, ``sale_created``,
...). Development gets a colored console; other environments get one JSON
object per line.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from shopledger.config.settings import get_settings

# Keys whose values identify a customer
MASKED_KEYS = frozenset({"customer_phone", "phone"})

QUIET_LOGGERS = ("aiosqlite", "uvicorn.access")


def add_service_fields(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("env", settings.environment)
    return event_dict


def mask_customer_contact(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Keep only the last two digits of phone numbers."""
    for key in MASKED_KEYS & event_dict.keys():
        value = event_dict[key]
        if isinstance(value, str) and len(value) > 2:
            event_dict[key] = "*" * (len(value) - 2) + value[-2:]
    return event_dict


def _processors(json_output: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_service_fields,
        mask_customer_contact,
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def configure_logging() -> None:
    """Configure structlog and the stdlib root logger from settings."""
    settings = get_settings()

    structlog.configure(
        processors=_processors(settings.json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
