"""Shared test fixtures for all test modules."""

import logging
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from mongologpy.adapters.logging import MongoHandler
from mongologpy.adapters.logging_context import clear_log_context
from mongologpy.adapters.storage.in_memory import InMemoryClientFactory
from mongologpy.core.errors import CollectingErrorReporter
from mongologpy.core.models import HostIdentity


@pytest.fixture
def host_identity() -> HostIdentity:
    """A fixed host identity so tests never touch DNS."""
    return HostIdentity(process="4242@host01", name="host01", ip="10.0.0.5")


@pytest.fixture
def reporter() -> CollectingErrorReporter:
    """Error channel that keeps reported errors for assertions."""
    return CollectingErrorReporter()


@pytest.fixture
def client_factory() -> InMemoryClientFactory:
    """Factory producing in-memory store clients."""
    return InMemoryClientFactory()


@pytest.fixture(autouse=True)
def _clean_log_context() -> Iterator[None]:
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def make_handler(
    client_factory: InMemoryClientFactory,
    reporter: CollectingErrorReporter,
    host_identity: HostIdentity,
) -> Iterator[Callable[..., MongoHandler]]:
    """Factory fixture building handlers wired to in-memory storage.

    Keyword arguments override the defaults. Every handler built is closed
    after the test.

    Usage:
        def test_something(make_handler):
            handler = make_handler(hostname="db1 db2")
    """
    handlers: list[MongoHandler] = []

    def _make(cls: type[MongoHandler] = MongoHandler, **kwargs: Any) -> MongoHandler:
        kwargs.setdefault("client_factory", client_factory)
        kwargs.setdefault("error_reporter", reporter)
        kwargs.setdefault("host_identity", host_identity)
        handler = cls(**kwargs)
        handlers.append(handler)
        return handler

    yield _make
    for handler in handlers:
        handler.close()


@pytest.fixture
def attach() -> Iterator[Callable[[logging.Handler, str], logging.Logger]]:
    """Attach a handler to a logger; the logger is restored after the test."""
    attached: list[tuple[logging.Logger, logging.Handler, int, bool]] = []

    def _attach(handler: logging.Handler, name: str = "app.orders") -> logging.Logger:
        logger = logging.getLogger(name)
        attached.append((logger, handler, logger.level, logger.propagate))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        return logger

    yield _attach
    for logger, handler, level, propagate in reversed(attached):
        logger.removeHandler(handler)
        logger.setLevel(level)
        logger.propagate = propagate
