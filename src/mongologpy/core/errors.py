"""Error taxonomy and the error-reporting channel.

Errors raised while publishing are never propagated to the code that logged
the event. They are handed to an ``ErrorReporter`` instead; only explicit
activation may raise them.
"""

import logging
import threading
from enum import Enum
from typing import Protocol, runtime_checkable

_errors_logger = logging.getLogger("mongologpy.errors")


class ErrorCategory(str, Enum):
    """Kind of failure reported through the error channel."""

    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    CONNECTION = "connection"
    WRITE_FAILURE = "write_failure"


class MongoLogError(Exception):
    """Base class for all mongologpy errors.

    Attributes:
        category: The error's place in the taxonomy.
        message: Human readable description.
    """

    category: ErrorCategory = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.__cause__ = cause

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


class ConfigurationError(MongoLogError):
    """Malformed host/port lists, bad ports or invalid options."""

    category = ErrorCategory.CONFIGURATION


class AuthenticationError(MongoLogError):
    """Credentials were rejected while activating."""

    category = ErrorCategory.AUTHENTICATION


class StoreConnectionError(MongoLogError):
    """The configured topology could not be reached while activating."""

    category = ErrorCategory.CONNECTION


class WriteFailure(MongoLogError):
    """The store rejected an insert; the event is dropped."""

    category = ErrorCategory.WRITE_FAILURE


@runtime_checkable
class ErrorReporter(Protocol):
    """Port for the structured error channel.

    Implementations must not raise.
    """

    def report(self, error: MongoLogError) -> None:
        """Record a failure."""
        ...


class LoggingErrorReporter:
    """Reports errors to the ``mongologpy.errors`` logger at ERROR level."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _errors_logger

    def report(self, error: MongoLogError) -> None:
        cause = error.cause
        self._logger.error(
            "[%s] %s",
            error.category.value,
            error.message,
            exc_info=(type(cause), cause, cause.__traceback__) if cause else None,
        )


class CollectingErrorReporter:
    """Keeps reported errors in memory.

    Suitable for testing and for callers that want to inspect activation
    failures after the fact.
    """

    def __init__(self) -> None:
        self._errors: list[MongoLogError] = []
        self._lock = threading.Lock()

    def report(self, error: MongoLogError) -> None:
        with self._lock:
            self._errors.append(error)

    @property
    def errors(self) -> list[MongoLogError]:
        with self._lock:
            return list(self._errors)

    @property
    def categories(self) -> list[ErrorCategory]:
        return [e.category for e in self.errors]

    def clear(self) -> None:
        with self._lock:
            self._errors.clear()
