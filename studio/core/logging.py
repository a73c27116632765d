"""Logging setup for the studio service.

Human-readable lines in development, one JSON object per line when
``LOG_JSON=true``. Edit workflow records carry ``gallery_id`` via ``extra=`` so
a single edit can be followed across its states.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from studio.core.config import settings

# Attributes passed through ``extra=`` that are worth keeping in output
CONTEXT_FIELDS = ("gallery_id",)

_HUMAN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s%(context)s"
_HUMAN_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _context(record: logging.LogRecord) -> dict:
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class ContextFilter(logging.Filter):
    """Renders context fields as a ``[key=value ...]`` suffix for the human format."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _context(record)
        record.context = " [" + " ".join(f"{k}={v}" for k, v in ctx.items()) + "]" if ctx else ""
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, context fields at top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **_context(record),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def build_handler(json_format: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.addFilter(ContextFilter())
        handler.setFormatter(logging.Formatter(_HUMAN_FORMAT, datefmt=_HUMAN_DATEFMT))
    return handler


def setup_logging(level: str | None = None, json_format: bool | None = None) -> None:
    """Install a single stdout handler on the root logger.

    Arguments default to ``settings.log_level`` / ``settings.log_json``.
    """
    level_no = logging.getLevelName((level or settings.log_level).upper())
    if not isinstance(level_no, int):
        level_no = logging.INFO
    json_format = settings.log_json if json_format is None else json_format

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(build_handler(json_format))
    root.setLevel(level_no)

    # Per-request HTTP lines from the gateway are logged by the transport itself
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
    # SQL echo only while debugging
    logging.getLogger("sqlalchemy.engine").setLevel(level_no if settings.app_debug else logging.WARNING)
