# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Editor event logging.

Every component logs through get_service_logger(); structured events
(node_added, pipeline_saved, session_transition, ...) carry their fields
as record attributes so both formatters can print them.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Attributes every LogRecord has; anything else was passed as an event field
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def event_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields attached to a record through log_event"""
    return {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, then event fields"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(event_fields(record))
        # Sets, enums and models fall back to str()
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with event fields appended as key=value"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = event_fields(record)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


def get_logger(name: str, log_level: str = "INFO", log_format: str = "json") -> logging.Logger:
    """
    Logger writing to stdout in the requested format ("json" or "text").

    Calling it again for the same name replaces the handler, so a config
    reload changes format and level in place.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper()))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if log_format == "json" else TextFormatter())
    logger.handlers = [handler]

    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    level: str = "INFO",
    **fields: Any
) -> None:
    """Log `event` as the message with `fields` attached to the record"""
    getattr(logger, level.lower())(event, extra=fields)


def get_service_logger(component: str) -> logging.Logger:
    """Logger for one editor component (graph, catalog, session, ...)"""
    from pipeline_studio.core.config import get_config
    config = get_config()
    return get_logger(
        f"pipeline_studio.{component}",
        log_level=config.log_level,
        log_format=config.log_format
    )
