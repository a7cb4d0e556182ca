"""Resolution of host and port settings into store endpoints."""

import re
from dataclasses import dataclass

from mongologpy.core.errors import ConfigurationError, ErrorReporter
from mongologpy.core.models import Endpoint

DEFAULT_HOSTNAME = "localhost"
DEFAULT_PORT = 27017
MAX_PORT = 65535

_PORT_TOKEN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class TopologyResult:
    """Outcome of resolving a host/port configuration.

    Resolution never raises. Errors are collected here (and reported) and the
    caller decides whether to proceed with whatever endpoints were resolved.

    Attributes:
        endpoints: Resolved endpoints, in host order.
        errors: Configuration errors found while resolving.
    """

    endpoints: tuple[Endpoint, ...] = ()
    errors: tuple[ConfigurationError, ...] = ()

    @property
    def ok(self) -> bool:
        return bool(self.endpoints) and not self.errors


def _parse_ports(tokens: list[str], errors: list[ConfigurationError]) -> list[int]:
    ports = []
    for token in tokens:
        # int() would also accept "27_017" and non-ASCII digits
        if not _PORT_TOKEN.fullmatch(token):
            errors.append(ConfigurationError(f"Port {token!r} is not an integer"))
            continue
        value = int(token)
        if value < 0:
            errors.append(ConfigurationError(f"Port {token!r} is negative"))
        elif value == 0 or value > MAX_PORT:
            errors.append(ConfigurationError(f"Port {token!r} is out of range"))
        else:
            ports.append(value)
    return ports


def _count_matches(port_count: int, host_count: int) -> bool:
    return port_count == 1 or port_count == host_count


def resolve_topology(
    hostname: str,
    port: str | int,
    reporter: ErrorReporter | None = None,
) -> TopologyResult:
    """Resolve whitespace-delimited hosts and ports into endpoints.

    Either one port is given and shared by every host, or one port per host
    is given and paired with hosts by position. Duplicate hosts are allowed.
    Every bad port token is reported, not only the first.

    Args:
        hostname: Whitespace-delimited host names.
        port: Whitespace-delimited ports, or a single int.
        reporter: Optional channel that receives each error as it is found.

    Returns:
        TopologyResult with the endpoints and any errors.
    """
    # @tra: Core.Topology.Resolve
    hosts = hostname.split()
    port_tokens = str(port).split()
    errors: list[ConfigurationError] = []
    endpoints: tuple[Endpoint, ...] = ()

    if not hosts:
        errors.append(ConfigurationError("Host list is empty"))
    elif not _count_matches(len(port_tokens), len(hosts)):
        errors.append(
            ConfigurationError(
                f"Port count mismatch: {len(hosts)} hosts, {len(port_tokens)} ports;"
                " expected one port or a port per host"
            )
        )
    else:
        ports = _parse_ports(port_tokens, errors)
        # Unparsable tokens reduce the count, so check it again
        if not _count_matches(len(ports), len(hosts)):
            errors.append(
                ConfigurationError(
                    f"Port count mismatch: {len(hosts)} hosts,"
                    f" {len(ports)} valid ports;"
                    " expected one valid port or a valid port per host"
                )
            )
        elif len(ports) == 1:
            endpoints = tuple(Endpoint(host, ports[0]) for host in hosts)
        else:
            endpoints = tuple(Endpoint(h, p) for h, p in zip(hosts, ports))

    if reporter is not None:
        for error in errors:
            reporter.report(error)
    return TopologyResult(endpoints=endpoints, errors=tuple(errors))
