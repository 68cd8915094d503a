"""JSON log lines for the DIDI service.

Each record is written as one JSON object. Context passed with ``extra=``
(route, parsed token kind, error code and so on) is copied onto the object
when the record carries it.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, List, Optional

from app.core import config

# Record attributes copied onto the JSON line when present
LOG_EXTRA_FIELDS = (
    "request_id",
    "route",
    "remote_addr",
    "token_kind",
    "verified",
    "error_code",
)


class JsonFormatter(logging.Formatter):
    def format(self, record):
        line = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        line.update({key: getattr(record, key) for key in LOG_EXTRA_FIELDS if hasattr(record, key)})
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None) -> None:
    """Send every logger through JsonFormatter.

    Args:
        level: Level name, case-insensitive. Defaults to LOG_LEVEL; an
            unknown name falls back to INFO.
        stream: Console destination (defaults to stdout). LOG_FILE, when
            set, gets a second handler in append mode.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if config.LOG_FILE:
        handlers.append(logging.FileHandler(config.LOG_FILE, mode="a"))
    for handler in handlers:
        handler.setFormatter(JsonFormatter())

    resolved = logging.getLevelName((level or config.LOG_LEVEL).upper())
    root = logging.getLogger()
    root.setLevel(resolved if isinstance(resolved, int) else logging.INFO)
    root.handlers = handlers
