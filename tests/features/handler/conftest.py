"""BDD step definitions for the handler lifecycle feature."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest
from pymongo.errors import DuplicateKeyError
from pytest_bdd import given, parsers, then, when

from mongologpy.adapters.logging import MongoHandler
from mongologpy.adapters.storage.in_memory import InMemoryClientFactory
from mongologpy.core.errors import CollectingErrorReporter, ErrorCategory
from mongologpy.core.models import HostIdentity
from tests.helpers import FailingCollection, ScriptedClientFactory, unreachable

LOGGER_NAME = "bdd.handler"


@dataclass
class HandlerScenarioContext:
    """State shared between the steps of one scenario."""

    factory: InMemoryClientFactory = field(default_factory=InMemoryClientFactory)
    reporter: CollectingErrorReporter = field(default_factory=CollectingErrorReporter)
    collection: FailingCollection | None = None
    handler: MongoHandler | None = None
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger(LOGGER_NAME)
    )

    def stored(self) -> list[dict]:
        if not self.factory.clients:
            return []
        client = self.factory.last_client
        return client.get_database("mongologpy").get_collection("logevents").find()


@pytest.fixture
def ctx() -> Iterator[HandlerScenarioContext]:
    """Fresh scenario context for each test."""
    context = HandlerScenarioContext()
    context.logger.setLevel(logging.DEBUG)
    context.logger.propagate = False
    yield context
    if context.handler is not None:
        context.logger.removeHandler(context.handler)
        context.handler.close()
    context.logger.propagate = True


# === Given ===
@given("an in-memory MongoDB store")
def step_in_memory_store(ctx: HandlerScenarioContext) -> None:
    ctx.factory = InMemoryClientFactory()


@given("the store is unreachable")
def step_store_unreachable(ctx: HandlerScenarioContext) -> None:
    ctx.factory = ScriptedClientFactory(ping_error=unreachable())


@given("every insert fails with a duplicate key error")
def step_inserts_fail(ctx: HandlerScenarioContext) -> None:
    ctx.collection = FailingCollection(DuplicateKeyError("dup", 11000, {}))
    ctx.factory = ScriptedClientFactory(collection=ctx.collection)


@given(parsers.parse('a handler for hosts "{hosts}" on port "{port}"'))
def step_handler(ctx: HandlerScenarioContext, hosts: str, port: str) -> None:
    ctx.handler = MongoHandler(
        hostname=hosts,
        port=port,
        client_factory=ctx.factory,
        error_reporter=ctx.reporter,
        host_identity=HostIdentity(process="1@bdd", name="bdd", ip="127.0.0.1"),
    )
    ctx.logger.addHandler(ctx.handler)


# === When ===
@when(parsers.parse('the application logs "{message}" at level {level}'))
def step_log(ctx: HandlerScenarioContext, message: str, level: str) -> None:
    ctx.logger.log(logging.getLevelName(level), message)


@when("the handler is closed")
def step_close(ctx: HandlerScenarioContext) -> None:
    assert ctx.handler is not None
    ctx.handler.close()


# === Then ===
@then(parsers.re(r"(?P<count>\d+) documents? (is|are) stored"))
def step_stored_count(ctx: HandlerScenarioContext, count: str) -> None:
    assert len(ctx.stored()) == int(count)


@then(parsers.parse('the stored document has level "{level}" and message "{message}"'))
def step_stored_document(ctx: HandlerScenarioContext, level: str, message: str) -> None:
    document = ctx.stored()[0]
    assert document["level"] == level
    assert document["message"] == message


@then(parsers.parse('the handler state is "{state}"'))
def step_handler_state(ctx: HandlerScenarioContext, state: str) -> None:
    assert ctx.handler is not None
    assert ctx.handler.state.value == state


@then(
    parsers.re(
        r"(?P<count>\d+) (?P<kind>configuration|connection) errors? (is|are) reported"
    )
)
def step_errors_reported(ctx: HandlerScenarioContext, count: str, kind: str) -> None:
    category = ErrorCategory(kind)
    assert ctx.reporter.categories == [category] * int(count)


@then(parsers.parse("{count:d} write failures are reported"))
def step_write_failures(ctx: HandlerScenarioContext, count: int) -> None:
    assert ctx.reporter.categories == [ErrorCategory.WRITE_FAILURE] * count
    assert ctx.collection is not None
    assert ctx.collection.attempts == count


@then(parsers.parse('the client connects to "{endpoints}"'))
def step_client_endpoints(ctx: HandlerScenarioContext, endpoints: str) -> None:
    client = ctx.factory.last_client
    assert " ".join(str(e) for e in client.endpoints) == endpoints
