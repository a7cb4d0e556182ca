"""Per-context log properties.

Properties set here are attached to every event logged from the same thread
or asyncio task and stored under the document's ``properties`` key.

Example:
    ```python
    with log_context(request_id="abc123"):
        logger.info("handled")  # properties: {"request_id": "abc123"}
    ```
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[Mapping[str, Any] | None] = ContextVar(
    "mongologpy_log_context", default=None
)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current context properties."""
    return dict(_log_context.get() or {})


def set_log_context(**fields: Any) -> None:
    """Replace the current context properties."""
    _log_context.set(dict(fields))


def update_log_context(**fields: Any) -> None:
    """Merge fields into the current context properties."""
    _log_context.set({**(_log_context.get() or {}), **fields})


def clear_log_context() -> None:
    _log_context.set(None)


@contextmanager
def log_context(**fields: Any) -> Iterator[dict[str, Any]]:
    """Add fields for the duration of a ``with`` block.

    Yields:
        The merged context in effect inside the block.
    """
    merged = {**(_log_context.get() or {}), **fields}
    token = _log_context.set(merged)
    try:
        yield dict(merged)
    finally:
        _log_context.reset(token)
