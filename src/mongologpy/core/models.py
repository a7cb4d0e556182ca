"""Core domain models for log events and store topology."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from types import FrameType, TracebackType
from typing import Any


class Level(IntEnum):
    """Ordered log level as stored in documents."""

    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40
    FATAL = 50

    @classmethod
    def from_levelno(cls, levelno: int) -> "Level":
        """Map a stdlib logging level number onto the nearest level at or below it."""
        for level in sorted(cls, reverse=True):
            if levelno >= level:
                return level
        return cls.TRACE

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ClassNameParts:
    """A dotted type name split into package path and simple name.

    Attributes:
        fully_qualified_class_name: The trimmed input name.
        package: Leading segments, empty for a top-level name.
        class_name: The final segment.
    """

    fully_qualified_class_name: str
    package: tuple[str, ...]
    class_name: str


@dataclass(frozen=True)
class StackFrame:
    """A single stack frame.

    Attributes:
        file_name: Base name of the source file.
        method: Function or method name.
        line_number: Line in the file; negative values are kept as-is.
        class_name: Dotted name of the declaring type or module.
    """

    file_name: str | None
    method: str | None
    line_number: int
    class_name: str | None = None

    @classmethod
    def from_frame(cls, frame: FrameType, lineno: int | None) -> "StackFrame":
        """Build a frame from a live Python frame object.

        ``Klass.run`` defined in ``pkg.mod`` yields method ``run`` declared on
        ``pkg.mod.Klass``; a module-level ``work`` is declared on ``pkg.mod``.
        """
        code = frame.f_code
        module = frame.f_globals.get("__name__")
        qualname = getattr(code, "co_qualname", code.co_name)
        owner, _, method = qualname.rpartition(".")
        # Nested functions show up as "outer.<locals>.inner"
        owner = owner.replace(".<locals>", "")
        if module and owner:
            class_name: str | None = f"{module}.{owner}"
        else:
            class_name = module or owner or None
        return cls(
            file_name=os.path.basename(code.co_filename) or None,
            method=method or None,
            line_number=lineno if lineno is not None else -1,
            class_name=class_name,
        )


def _exception_message(exc: BaseException) -> str | None:
    try:
        return str(exc)
    except Exception:
        return f"<exception str() failed for {type(exc).__name__}>"


def _next_in_chain(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def _frames(tb: TracebackType | None) -> tuple[StackFrame, ...]:
    frames = []
    while tb is not None:
        frames.append(StackFrame.from_frame(tb.tb_frame, tb.tb_lineno))
        tb = tb.tb_next
    return tuple(frames)


@dataclass(frozen=True)
class ThrowableInfo:
    """One exception in a cause chain, linked to the exception that caused it.

    Attributes:
        message: The exception message, if any.
        stack_trace: Frames of the exception's traceback, outermost call
            first; the frame that raised is last, not at index 0.
        cause: The next exception in the chain.
    """

    message: str | None
    stack_trace: tuple[StackFrame, ...] = ()
    cause: "ThrowableInfo | None" = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ThrowableInfo":
        """Capture an exception and its causes.

        Python chains can loop back on themselves through ``__context__``,
        so the walk stops at the first exception it has already seen.
        """
        chain: list[BaseException] = []
        seen: set[int] = set()
        current: BaseException | None = exc
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            chain.append(current)
            current = _next_in_chain(current)

        info: ThrowableInfo | None = None
        for item in reversed(chain):
            info = cls(
                message=_exception_message(item),
                stack_trace=_frames(item.__traceback__),
                cause=info,
            )
        assert info is not None
        return info


@dataclass(frozen=True)
class LocationInfo:
    """Source location of the logging call."""

    file_name: str | None
    method: str | None
    line_number: int | None
    class_name: str | None


@dataclass(frozen=True)
class LogEvent:
    """A structured log event handed to the bsonifier.

    Attributes:
        timestamp: When the event was created.
        level: Severity.
        thread_name: Name of the emitting thread.
        message: Rendered message, or a mapping stored as a sub-document.
        logger_name: Dotted name of the originating logger.
        location: Where the logging call was made.
        throwable: Exception chain attached to the event.
        properties: Contextual key/value pairs.
    """

    timestamp: datetime
    level: Level
    thread_name: str | None = None
    message: Any = None
    logger_name: str | None = None
    location: LocationInfo | None = None
    throwable: ThrowableInfo | None = None
    properties: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class Endpoint:
    """A store host and port."""

    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class HostIdentity:
    """Identity of the emitting process, resolved once at startup."""

    process: str | None = None
    name: str | None = None
    ip: str | None = None


@dataclass(frozen=True)
class Credentials:
    """Username/password authenticated against ``source``."""

    user_name: str
    password: str | None = field(default=None, repr=False)
    source: str | None = None
