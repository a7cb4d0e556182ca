"""Conversion of log events into store documents.

The document produced for an event looks like::

    {
        "timestamp": datetime(...),
        "level": "ERROR", "thread": "MainThread", "message": "Error entry",
        "loggerName": {
            "fullyQualifiedClassName": "a.b.C",
            "package": ["a", "b"],
            "className": "C",
        },
        "fileName": "c.py", "method": "run", "lineNumber": 42, "class": {...},
        "properties": {"uuid": "1000"},
        "throwables": [
            {"message": "outer", "stackTrace": [...]},
            {"message": "root cause"},
        ],
        "host": {"process": "4242@host01", "name": "host01", "ip": "10.0.0.5"},
    }

Keys whose values are absent or blank are left out (see ``null_safe_put``).
"""

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from mongologpy.core.document import Document, null_safe_put
from mongologpy.core.errors import ConfigurationError
from mongologpy.core.models import (
    ClassNameParts,
    HostIdentity,
    LocationInfo,
    LogEvent,
    StackFrame,
    ThrowableInfo,
)


def decompose_class_name(fqcn: str | None) -> ClassNameParts | None:
    """Split a dotted name into package and simple name.

    Returns None for a missing or blank name.
    """
    if fqcn is None:
        return None
    name = fqcn.strip()
    if not name:
        return None
    *package, class_name = name.split(".")
    return ClassNameParts(
        fully_qualified_class_name=name,
        package=tuple(package),
        class_name=class_name,
    )


def class_name_document(fqcn: str | None) -> Document | None:
    """Decompose a dotted name straight into its document form."""
    parts = decompose_class_name(fqcn)
    if parts is None:
        return None
    result: Document = {"fullyQualifiedClassName": parts.fully_qualified_class_name}
    if parts.package:
        result["package"] = list(parts.package)
    result["className"] = parts.class_name
    return result


def map_stack_frame(frame: StackFrame) -> Document:
    result: Document = {}
    null_safe_put(result, "fileName", frame.file_name)
    null_safe_put(result, "method", frame.method)
    null_safe_put(result, "lineNumber", frame.line_number)
    null_safe_put(result, "class", class_name_document(frame.class_name))
    return result


def map_throwable(throwable: ThrowableInfo) -> Document:
    """Map a single exception, ignoring its cause."""
    result: Document = {}
    null_safe_put(result, "message", throwable.message)
    if throwable.stack_trace:
        result["stackTrace"] = [map_stack_frame(f) for f in throwable.stack_trace]
    return result


def walk_throwables(throwable: ThrowableInfo | None) -> list[Document]:
    """Map an exception chain, outermost exception first and root cause last.

    Every link contributes an entry, even one with no message and no frames,
    so positions in the result match positions in the chain.
    """
    documents: list[Document] = []
    current = throwable
    while current is not None:
        documents.append(map_throwable(current))
        current = current.cause
    return documents


def _add_location(document: Document, location: LocationInfo | None) -> None:
    if location is None:
        return
    null_safe_put(document, "fileName", location.file_name)
    null_safe_put(document, "method", location.method)
    null_safe_put(document, "lineNumber", location.line_number)
    null_safe_put(document, "class", class_name_document(location.class_name))


def _add_properties(document: Document, properties: Mapping[str, Any] | None) -> None:
    if not properties:
        return
    mapped: Document = {}
    for key, value in properties.items():
        null_safe_put(mapped, str(key), None if value is None else str(value))
    document["properties"] = mapped


def host_document(host: HostIdentity) -> Document:
    result: Document = {}
    null_safe_put(result, "process", host.process)
    null_safe_put(result, "name", host.name)
    null_safe_put(result, "ip", host.ip)
    return result


@runtime_checkable
class Bsonifier(Protocol):
    """Strategy that turns a log event into a document."""

    def bsonify(self, event: LogEvent | None) -> Document | None:
        """Return the document for ``event``, or None when there is no event."""
        ...


class EventBsonifier:
    """Default bsonifier.

    Holds no mutable state: the host identity is resolved by the caller and
    injected once, so instances are safe to share between threads.
    """

    def __init__(self, host: HostIdentity | None = None) -> None:
        self._host_document = host_document(host) if host is not None else None

    def bsonify(self, event: LogEvent | None) -> Document | None:
        if event is None:
            return None

        result: Document = {"timestamp": event.timestamp}
        null_safe_put(result, "level", event.level.name)
        null_safe_put(result, "thread", event.thread_name)
        null_safe_put(result, "message", event.message)
        null_safe_put(result, "loggerName", class_name_document(event.logger_name))

        _add_location(result, event.location)
        _add_properties(result, event.properties)

        throwables = walk_throwables(event.throwable)
        if throwables:
            result["throwables"] = throwables

        if self._host_document is not None:
            # Copy so inserted documents never share a nested dict
            result["host"] = dict(self._host_document)
        return result


class BsonifierKind(str, Enum):
    """Built-in bsonifier strategies."""

    DEFAULT = "default"


BsonifierFactory = Callable[[HostIdentity | None], Bsonifier]

_BSONIFIERS: dict[str, BsonifierFactory] = {
    BsonifierKind.DEFAULT.value: EventBsonifier,
}


def register_bsonifier(name: str, factory: BsonifierFactory) -> None:
    """Register a bsonifier strategy under ``name``.

    Raises:
        TypeError: If factory is not callable.
    """
    if not callable(factory):
        raise TypeError("bsonifier factory must be callable")
    _BSONIFIERS[name.strip().lower()] = factory


def create_bsonifier(
    kind: str | BsonifierKind = BsonifierKind.DEFAULT,
    host: HostIdentity | None = None,
) -> Bsonifier:
    """Build the bsonifier strategy registered under ``kind``.

    Raises:
        ConfigurationError: If no strategy is registered under that name.
    """
    name = kind.value if isinstance(kind, BsonifierKind) else kind.strip().lower()
    try:
        factory = _BSONIFIERS[name]
    except KeyError:
        known = ", ".join(sorted(_BSONIFIERS))
        raise ConfigurationError(
            f"Unknown bsonifier {kind!r}; expected one of: {known}"
        ) from None
    return factory(host)
