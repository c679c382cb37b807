"""Process logging setup.

Two output shapes, both on *stderr*:

* text -- ``%(asctime)s  %(levelname)-8s  %(name)s  %(message)s``
* JSON -- one object per line via :class:`JSONFormatter`, for log shippers.

Output schema per JSON line::

    {
        "timestamp": "2025-05-15T12:34:56.789012+00:00",
        "level": "ERROR",
        "logger": "fanout_engine.executor.target_executor",
        "message": "Could not execute query for db3: ...",
        "target": "db3",             // present when the record names a target
        "exc_info": "Traceback ..."  // present only on exceptions
    }
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import UTC, datetime
from typing import Any

TEXT_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

# sqlglot reports every grammar error through its own logger as well; those
# reach the operator through the validation result instead.
_QUIET_LOGGERS = ("sqlglot",)


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Render *record* as a single JSON line."""
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        target = getattr(record, "target", None)
        if target is not None:
            payload["target"] = target

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(level: str | int = logging.INFO, *, structured: bool = False) -> None:
    """Replace the root handlers with a single stderr handler.

    Safe to call more than once; the previous handlers are discarded.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if structured else logging.Formatter(TEXT_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.CRITICAL)
