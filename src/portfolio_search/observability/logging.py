"""Structured JSON logging with request correlation.

Every line is one orjson-encoded object. Request-scoped fields (trace id,
span id and the active query) come from :mod:`.context`; anything passed
through ``extra=`` is appended verbatim.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
import logging
import sys
from typing import IO, Any

import orjson
from pydantic import BaseModel

from portfolio_search.observability.context import get_request_context


# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime"}

NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")
TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _clip(value: str, limit: int) -> str:
    return value if len(value) <= limit else f"{value[:limit]}..."


def _encode_extra(value: Any) -> Any:
    """orjson fallback for values logged through ``extra=``."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, carrying trace/span ids and any ``extra`` fields."""

    MAX_MESSAGE_LEN = 2000
    MAX_FIELD_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_request_context()
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": record.name.rpartition(".")[2],
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
            "trace_id": ctx.get("trace_id", ""),
            "span_id": ctx.get("span_id", ""),
        }
        query = ctx.get("query")
        if query:
            entry["query"] = _clip(query, self.MAX_FIELD_LEN)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, _clip(value, self.MAX_FIELD_LEN) if isinstance(value, str) else value)
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        )
        return orjson.dumps(entry, default=_encode_extra).decode("utf-8")


def configure_logging(
    level: str = "info",
    json_output: bool = True,
    *,
    stream: IO[str] | None = None,
    logger_levels: dict[str, str] | None = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Route all logging through a single handler on the root logger.

    Args:
        level: Root level name; unknown names fall back to INFO
        json_output: JSON lines when True, plain text otherwise
        stream: Output stream (stdout by default; the build CLI passes stderr
            so its summary line owns stdout)
        logger_levels: Per-logger overrides, e.g. ``{"portfolio_search.search": "debug"}``
        quiet: Loggers capped at WARNING
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))

    overrides = {name: "WARNING" for name in quiet}
    overrides.update(logger_levels or {})
    for name, name_level in overrides.items():
        logging.getLogger(name).setLevel(name_level.upper())
