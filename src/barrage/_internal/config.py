"""Configuration loading for barrage."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from barrage._internal.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Collection

PROTOCOLS = ("http", "https")

_MAX_PORT = 65535


@dataclass(frozen=True)
class Node:
    """One remote target under test.

    Attributes:
        host: Host name or IP address.
        port: TCP port.
    """

    host: str
    port: int

    @classmethod
    def parse(cls, address: str) -> Node:
        """Parse a ``host:port`` string.

        Args:
            address: The address to parse, e.g. ``"127.0.0.1:1337"``.

        Returns:
            The parsed Node.

        Raises:
            ConfigError: If the address does not have exactly one colon,
                the host is empty, or the port is not in 0..65535.
        """
        parts = address.split(":")
        if len(parts) != 2:  # noqa: PLR2004
            raise ConfigError(_malformed(address))

        host = parts[0].strip()
        try:
            port = int(parts[1])
        except ValueError:
            raise ConfigError(_malformed(address)) from None

        if not host or not 0 <= port <= _MAX_PORT:
            raise ConfigError(_malformed(address))
        return cls(host=host, port=port)

    def url(self, protocol: str) -> str:
        """Return the base URL of this node for the given protocol."""
        return f"{protocol}://{self.host}:{self.port}"

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def _malformed(address: str) -> str:
    return f"the address [{address}] for node is malformed"


@dataclass(frozen=True)
class Settings:
    """Environment-level defaults.

    Attributes:
        request_timeout: Timeout of a single request in seconds.
        max_connections: Upper bound of pooled HTTP connections.
    """

    request_timeout: float = 30.0
    max_connections: int = 100


def load_settings() -> Settings:
    """Load settings from environment variables with defaults.

    Environment variables:
        BARRAGE_TIMEOUT: Request timeout in seconds (default: 30.0).
        BARRAGE_MAX_CONNECTIONS: Connection pool size (default: 100).

    Returns:
        Populated Settings instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    timeout_str = os.environ.get("BARRAGE_TIMEOUT", "30.0")
    connections_str = os.environ.get("BARRAGE_MAX_CONNECTIONS", "100")

    try:
        timeout = float(timeout_str)
    except ValueError:
        msg = f"BARRAGE_TIMEOUT must be a number, got: {timeout_str!r}"
        raise ConfigError(msg) from None

    if timeout <= 0:
        msg = f"BARRAGE_TIMEOUT must be positive, got: {timeout}"
        raise ConfigError(msg)

    try:
        connections = int(connections_str)
    except ValueError:
        msg = f"BARRAGE_MAX_CONNECTIONS must be an integer, got: {connections_str!r}"
        raise ConfigError(msg) from None

    if connections < 1:
        msg = f"BARRAGE_MAX_CONNECTIONS must be >= 1, got: {connections}"
        raise ConfigError(msg)

    return Settings(request_timeout=timeout, max_connections=connections)


@dataclass(frozen=True)
class BenchConfig:
    """Validated description of one benchmark run.

    Attributes:
        nodes: Endpoints to benchmark, one captain per node.
        protocol: URL scheme used to reach the nodes.
        thread: Number of soldiers per node.
        amount: Iterations per soldier; 0 means run until cancelled.
        interval: Milliseconds to sleep between iterations; 0 means no wait.
        category: Name of the registered work unit to run.
        timeout: Timeout of a single request in seconds.
    """

    nodes: tuple[Node, ...] = field(default_factory=tuple)
    protocol: str = "http"
    thread: int = 1
    amount: int = 1
    interval: int = 1000
    category: str = "peerCount"
    timeout: float = 30.0

    def validate(self, categories: Collection[str] | None = None) -> BenchConfig:
        """Check every field and return self.

        Args:
            categories: Known work unit names. If given, ``category`` must
                be one of them.

        Returns:
            This config, for chaining.

        Raises:
            ConfigError: If any field is out of range.
        """
        if not self.nodes:
            msg = "at least one node is required"
            raise ConfigError(msg)
        if self.protocol not in PROTOCOLS:
            msg = f"protocol must be one of {', '.join(PROTOCOLS)}, got: {self.protocol!r}"
            raise ConfigError(msg)
        if self.thread < 1:
            msg = f"thread must be >= 1, got: {self.thread}"
            raise ConfigError(msg)
        if self.amount < 0:
            msg = f"amount must be >= 0, got: {self.amount}"
            raise ConfigError(msg)
        if self.interval < 0:
            msg = f"interval must be >= 0, got: {self.interval}"
            raise ConfigError(msg)
        if self.timeout <= 0:
            msg = f"timeout must be positive, got: {self.timeout}"
            raise ConfigError(msg)
        if categories is not None and self.category not in categories:
            msg = f"unknown category {self.category!r}, choose from: {', '.join(categories)}"
            raise ConfigError(msg)
        return self

    def describe(self) -> str:
        """Return a multi-line human-readable summary."""
        lines = [f"BenchConfig: node[{len(self.nodes)}]:"]
        lines.extend(f"    {node}" for node in self.nodes)
        lines.append(f"  protocol: {self.protocol}")
        lines.append(f"  thread: {self.thread}")
        lines.append(f"  amount: {self.amount}")
        lines.append(f"  interval: {self.interval}")
        lines.append(f"  category: {self.category}")
        lines.append(f"  timeout: {self.timeout}")
        return "\n".join(lines)
