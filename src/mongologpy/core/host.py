"""Resolution of the emitting host's identity."""

import logging
import os
import socket

from mongologpy.core.models import HostIdentity

logger = logging.getLogger(__name__)


def resolve_host_identity() -> HostIdentity:
    """Look up process descriptor, host name and IP address.

    Lookup failures leave the affected fields empty; they never raise.
    Resolve once at startup and pass the result to the bsonifier.
    """
    pid = os.getpid()
    name: str | None = None
    ip: str | None = None
    try:
        name = socket.gethostname() or None
    except OSError as exc:
        logger.warning("Could not determine local host name: %s", exc)
    if name is not None:
        try:
            ip = socket.gethostbyname(name)
        except OSError as exc:
            logger.warning("Could not resolve address of %s: %s", name, exc)
    process = f"{pid}@{name}" if name else str(pid)
    return HostIdentity(process=process, name=name, ip=ip)
