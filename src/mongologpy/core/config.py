"""Handler configuration.

All settings have safe defaults; a handler with no configuration logs to
``mongologpy.logevents`` on ``localhost:27017``. Settings can also be read
from environment variables::

    MONGOLOGPY_HOSTNAME="db1 db2"  MONGOLOGPY_PORT="27017 27018"
    MONGOLOGPY_DATABASE_NAME=app   MONGOLOGPY_COLLECTION_NAME=events
    MONGOLOGPY_USER_NAME=...       MONGOLOGPY_PASSWORD=...
    MONGOLOGPY_WRITE_CONCERN=MAJORITY
"""

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from mongologpy.core.errors import ConfigurationError
from mongologpy.core.models import Credentials
from mongologpy.core.topology import DEFAULT_HOSTNAME, DEFAULT_PORT

DEFAULT_DATABASE_NAME = "mongologpy"
DEFAULT_COLLECTION_NAME = "logevents"

_TRUE_VALUES = ("1", "true", "on", "yes")
_PROPERTY_SEPARATOR = re.compile(r" *& *")
_KEY_VALUE_SEPARATOR = re.compile(r" *= *")


def parse_root_level_properties(text: str) -> dict[str, str]:
    """Parse ``"A = B & C=D"`` into ``{"A": "B", "C": "D"}``.

    Values may themselves contain ``=``; a key with no value maps to ``""``.
    """
    properties: dict[str, str] = {}
    for pair in _PROPERTY_SEPARATOR.split(text.strip()):
        if not pair:
            continue
        key, *value = _KEY_VALUE_SEPARATOR.split(pair, maxsplit=1)
        properties[key] = value[0] if value else ""
    return properties


@dataclass(frozen=True)
class MongoHandlerConfig:
    """Connection and behaviour settings for a MongoDB handler.

    Attributes:
        hostname: Whitespace-delimited hosts.
        port: One port for all hosts, or one per host.
        database_name: Target database; also the credential source.
        collection_name: Target collection.
        user_name: Authenticate as this user when set.
        password: Password for ``user_name``.
        write_concern: Durability override, e.g. ``"MAJORITY"``.
        bsonifier: Name of the registered bsonifier strategy.
        strict: Raise activation failures after reporting them.
        client_options: Extra keyword options for the store client.
        root_level_properties: Constant top-level fields (extended handler).
    """

    hostname: str = DEFAULT_HOSTNAME
    port: str = str(DEFAULT_PORT)
    database_name: str = DEFAULT_DATABASE_NAME
    collection_name: str = DEFAULT_COLLECTION_NAME
    user_name: str | None = None
    password: str | None = field(default=None, repr=False)
    write_concern: str | None = None
    bsonifier: str = "default"
    strict: bool = False
    client_options: Mapping[str, Any] = field(default_factory=dict)
    root_level_properties: str | Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        if isinstance(self.port, int):
            object.__setattr__(self, "port", str(self.port))
        for name in ("hostname", "port", "database_name", "collection_name"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"{name} must not be empty or blank")

    @property
    def credentials(self) -> Credentials | None:
        """Credentials to authenticate with, or None without a user name."""
        if self.user_name is None or not self.user_name.strip():
            return None
        return Credentials(
            user_name=self.user_name,
            password=self.password,
            source=self.database_name,
        )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        prefix: str = "MONGOLOGPY_",
    ) -> "MongoHandlerConfig":
        """Build a config from ``<prefix><FIELD_NAME>`` environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "client_options":
                continue
            raw = env.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            if f.name == "strict":
                values[f.name] = raw.strip().lower() in _TRUE_VALUES
            else:
                values[f.name] = raw
        return cls(**values)
