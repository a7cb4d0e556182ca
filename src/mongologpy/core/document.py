"""Document value model and the null-safe put policy."""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, TypeAlias

# A document is an insertion-ordered mapping; dict keeps key order.
DocumentValue: TypeAlias = (
    str
    | int
    | float
    | bool
    | datetime
    | Mapping[str, "DocumentValue"]
    | Sequence["DocumentValue"]
)
Document: TypeAlias = dict[str, Any]


def null_safe_put(document: Document, key: str, value: Any) -> None:
    """Set ``document[key]`` unless the value is absent.

    Strings are trimmed for the emptiness check only: a string that is blank
    after trimming is skipped, any other string is stored unchanged. Values
    of other types are stored verbatim.

    Args:
        document: Document to update in place.
        key: Key to set.
        value: Value to store, may be None.
    """
    if value is None:
        return
    if isinstance(value, str):
        if value.strip():
            document[key] = value
        return
    document[key] = value
