"""
Egress policy for tool calls: literal IP destinations only.

The registry client must never resolve a hostname. A hostname that passes a
check once can later resolve somewhere else (DNS rebinding), so the check runs
inside the network backend on every connection attempt, right before dialing:

- the destination host is parsed as an IPv4/IPv6 literal with ``ipaddress``;
- anything else (DNS names, empty host) is refused with EgressBlockedError
  before any resolution, so no DNS query is ever issued for it;
- literal addresses are dialed with a bounded connect timeout and TCP keep-alive.

EgressSafeTransport plugs the backend into httpx.
"""

import ipaddress
import socket
from collections.abc import Iterable
from typing import Any

import httpcore
import httpx

from chatflow.utils.errors import EgressBlockedError
from chatflow.utils.logging import get_logger

logger = get_logger(__name__)


def split_host_port(address: str) -> tuple[str, str]:
    """
    Split "host:port" into its parts; bracketed IPv6 ("[::1]:443") is supported.

    An address that cannot be split is returned whole as the host with an
    empty port.
    """
    if address.startswith("["):
        end = address.find("]")
        if end != -1:
            rest = address[end + 1 :]
            return address[1:end], rest[1:] if rest.startswith(":") else ""
    if address.count(":") == 1:
        host, port = address.split(":")
        return host, port
    return address, ""


def is_literal_address(host: str) -> bool:
    """True when ``host`` is an IPv4 or IPv6 address literal."""
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def ensure_literal_address(address: str) -> str:
    """
    Return the host part of ``address`` if it is an IP literal.

    Raises:
        EgressBlockedError: If the host is a name (or empty)
    """
    host, _ = split_host_port(address)
    if not is_literal_address(host):
        logger.warning("Blocked egress to non-literal host", extra={"host": host})
        raise EgressBlockedError(host)
    return host


def keepalive_socket_options(keepalive: float) -> list[tuple[int, int, int]]:
    """SO_KEEPALIVE plus the idle/interval knobs the platform supports."""
    seconds = max(1, int(keepalive))
    options = [(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)]
    if hasattr(socket, "TCP_KEEPIDLE"):
        options.append((socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, seconds))
    if hasattr(socket, "TCP_KEEPINTVL"):
        options.append((socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, seconds))
    return options


class LiteralAddressBackend(httpcore.AsyncNetworkBackend):
    """
    httpcore network backend that only dials literal IP addresses.

    Wraps another backend (AnyIO by default) which performs the actual connect.
    """

    def __init__(
        self,
        connect_timeout: float = 5.0,
        keepalive: float = 5.0,
        backend: httpcore.AsyncNetworkBackend | None = None,
    ) -> None:
        self.connect_timeout = connect_timeout
        self.keepalive = keepalive
        self._backend = backend or httpcore.AnyIOBackend()

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: float | None = None,
        local_address: str | None = None,
        socket_options: Iterable[Any] | None = None,
    ) -> httpcore.AsyncNetworkStream:
        literal = ensure_literal_address(f"[{host.strip('[]')}]:{port}")

        connect_timeout = self.connect_timeout
        if timeout is not None:
            connect_timeout = min(timeout, connect_timeout)

        options = list(socket_options or [])
        options.extend(keepalive_socket_options(self.keepalive))

        logger.debug(
            "Dialing literal address",
            extra={"host": literal, "port": port, "connect_timeout": connect_timeout},
        )
        return await self._backend.connect_tcp(
            literal,
            port,
            timeout=connect_timeout,
            local_address=local_address,
            socket_options=options,
        )

    async def connect_unix_socket(
        self,
        path: str,
        timeout: float | None = None,
        socket_options: Iterable[Any] | None = None,
    ) -> httpcore.AsyncNetworkStream:
        raise EgressBlockedError(path)

    async def sleep(self, seconds: float) -> None:
        await self._backend.sleep(seconds)


class EgressSafeTransport(httpx.AsyncHTTPTransport):
    """httpx transport whose connection pool dials through LiteralAddressBackend."""

    def __init__(
        self,
        connect_timeout: float = 5.0,
        keepalive: float = 5.0,
        verify: bool = True,
        limits: httpx.Limits | None = None,
        backend: httpcore.AsyncNetworkBackend | None = None,
    ) -> None:
        limits = limits or httpx.Limits(
            max_connections=20,
            max_keepalive_connections=10,
            keepalive_expiry=keepalive,
        )
        super().__init__(verify=verify, limits=limits, trust_env=False)
        # Replace the default pool so every new connection goes through the policy
        self._pool = httpcore.AsyncConnectionPool(
            ssl_context=httpx.create_ssl_context(verify=verify, trust_env=False),
            max_connections=limits.max_connections,
            max_keepalive_connections=limits.max_keepalive_connections,
            keepalive_expiry=limits.keepalive_expiry,
            network_backend=LiteralAddressBackend(
                connect_timeout=connect_timeout,
                keepalive=keepalive,
                backend=backend,
            ),
        )
