"""Handler that stores records rendered by a JSON pattern formatter.

Instead of bsonifying the record, the handler formats it with a formatter
whose template is a JSON object, parses the text and inserts the result.
The field rendered from ``%(asctime)s`` is replaced by the native record
timestamp, so it is stored as a date rather than a string.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any

from mongologpy.adapters.logging import MongoHandler, _is_ignored
from mongologpy.core.config import MongoHandlerConfig

DEFAULT_JSON_PATTERN = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s",'
    ' "thread": "%(threadName)s", "message": "%(message)s",'
    ' "loggerName": "%(name)s", "fileName": "%(filename)s",'
    ' "method": "%(funcName)s", "lineNumber": %(lineno)d}'
)

_DATE_KEY = re.compile(r'"([^"]+)"\s*:\s*"%\(asctime\)s"')


def _json_escape(value: Any) -> Any:
    if isinstance(value, str):
        return json.dumps(value)[1:-1]
    return value


def date_key_for(pattern: str) -> str | None:
    """Return the JSON key whose value is ``%(asctime)s`` in ``pattern``."""
    match = _DATE_KEY.search(pattern)
    return match.group(1) if match else None


class JsonPatternFormatter(logging.Formatter):
    """%-style formatter that JSON-escapes every substituted string value.

    Quotes, backslashes and newlines in messages therefore cannot break the
    JSON template. Exception text is not appended.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt or DEFAULT_JSON_PATTERN, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)
        escaped = logging.makeLogRecord(
            {key: _json_escape(value) for key, value in record.__dict__.items()}
        )
        return self.formatMessage(escaped)


class MongoPatternLayoutHandler(MongoHandler):
    """MongoHandler that stores the parsed output of a JSON pattern formatter.

    Args:
        config: Connection settings.
        date_key: Document key to overwrite with the native timestamp.
            Defaults to the key holding ``%(asctime)s`` in the pattern.
        **kwargs: Passed to MongoHandler.
    """

    def __init__(
        self,
        config: MongoHandlerConfig | None = None,
        *,
        date_key: str | None = None,
        **kwargs: Any,
    ) -> None:
        self._date_key = date_key
        super().__init__(config, **kwargs)
        if self.formatter is None:
            self.setFormatter(JsonPatternFormatter())

    @property
    def date_key(self) -> str | None:
        if self._date_key is not None:
            return self._date_key
        fmt = getattr(self.formatter, "_fmt", None)
        return date_key_for(fmt) if fmt else None

    def emit(self, record: logging.LogRecord) -> None:
        if not self.is_ready or _is_ignored(record.name):
            return
        try:
            text = self.format(record)
            if not text.strip():
                return
            parsed = json.loads(text)
        except Exception:
            self.handleError(record)
            return
        if not isinstance(parsed, dict):
            return
        key = self.date_key
        if key is not None:
            parsed[key] = datetime.fromtimestamp(record.created, tz=timezone.utc)
        self.publish_document(parsed)
