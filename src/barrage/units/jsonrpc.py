"""JSON-RPC 2.0 work units sent over a shared ``httpx.Client``."""

from __future__ import annotations

import itertools
import time
from typing import TYPE_CHECKING, Any

import httpx

from barrage._internal.logging import TRACE, get_logger
from barrage.units.registry import work_unit

if TYPE_CHECKING:
    from barrage._internal.config import Node
    from barrage._internal.types import Outcome, WorkResult

logger = get_logger("units.jsonrpc")

SUCCESS: Outcome = (1, 0, 0)
FAILURE: Outcome = (0, 1, 0)

_request_ids = itertools.count(1)


class RpcData:
    """Shared payload of the JSON-RPC work units.

    Holds one ``httpx.Client``, whose connection pool is safe to use from
    every soldier thread at once. Use as a context manager so the client
    is closed when the run ends.

    Attributes:
        protocol: URL scheme used to reach the nodes.
        client: The shared HTTP client.
    """

    def __init__(
        self,
        protocol: str = "http",
        *,
        timeout: float = 30.0,
        max_connections: int = 100,
        client: httpx.Client | None = None,
    ) -> None:
        self.protocol = protocol
        self.client = client or httpx.Client(
            timeout=timeout,
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_connections,
            ),
        )

    def __enter__(self) -> RpcData:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()


def classify(response: httpx.Response) -> Outcome:
    """Classify a JSON-RPC response.

    A 2xx response whose body is an object with a ``result`` and no
    ``error`` is a success. Anything else is a failure.

    Args:
        response: The HTTP response.

    Returns:
        ``SUCCESS`` or ``FAILURE``.
    """
    if not response.is_success:
        return FAILURE
    try:
        body = response.json()
    except ValueError:
        return FAILURE
    if not isinstance(body, dict) or "error" in body or "result" not in body:
        return FAILURE
    return SUCCESS


def send_request(
    node: Node,
    data: RpcData,
    method: str,
    params: list[Any] | None = None,
) -> WorkResult:
    """Send one JSON-RPC request and classify it.

    Transport errors are counted as failures, never raised.

    Args:
        node: Target node.
        data: Shared payload holding the client.
        method: JSON-RPC method name.
        params: JSON-RPC positional params.

    Returns:
        ``(elapsed_seconds, outcome)`` where elapsed covers the request only.
    """
    payload = {
        "jsonrpc": "2.0",
        "id": next(_request_ids),
        "method": method,
        "params": params or [],
    }
    url = node.url(data.protocol)

    start = time.perf_counter()
    try:
        response = data.client.post(url, json=payload)
    except httpx.HTTPError as exc:
        elapsed = time.perf_counter() - start
        logger.log(TRACE, "%s to %s failed: %s: %s", method, node, type(exc).__name__, exc)
        return elapsed, FAILURE
    elapsed = time.perf_counter() - start

    return elapsed, classify(response)


@work_unit("peerCount", description="Ask the node for its peer count.")
def peer_count(node: Node, data: RpcData) -> WorkResult:
    return send_request(node, data, "peerCount")


@work_unit("blockNumber", description="Ask the node for its latest block number.")
def block_number(node: Node, data: RpcData) -> WorkResult:
    return send_request(node, data, "blockNumber")


@work_unit("getMetaData", description="Fetch chain metadata at the latest block.")
def get_meta_data(node: Node, data: RpcData) -> WorkResult:
    return send_request(node, data, "getMetaData", ["latest"])
