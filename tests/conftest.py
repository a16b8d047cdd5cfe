"""Shared test fixtures for the barrage test suite."""

from __future__ import annotations

import asyncio
import socket
import threading
from typing import TYPE_CHECKING

import pytest
from aiohttp import web

from barrage._internal.config import Node

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# =============================================================================
# JSON-RPC server handlers
# =============================================================================

_RESULTS = {
    "peerCount": "0x3",
    "blockNumber": "0x1a2b",
    "getMetaData": {"chainId": 1, "chainName": "test-chain"},
}


def _make_rpc_handler(mode: str) -> Callable[[web.Request], object]:
    """Build a handler answering JSON-RPC calls according to ``mode``.

    Modes:
        ok: known methods get a ``result``, unknown ones an ``error``.
        rpc_error: every call gets an ``error`` object.
        http_error: every call gets HTTP 500.
        garbage: every call gets a non-JSON body.
    """

    async def _handler(request: web.Request) -> web.StreamResponse:
        if mode == "http_error":
            return web.Response(status=500, text="internal error")
        if mode == "garbage":
            return web.Response(status=200, text="not json")

        body = await request.json()
        rpc_id = body.get("id")
        method = body.get("method")
        if mode == "rpc_error" or method not in _RESULTS:
            return web.json_response(
                {
                    "jsonrpc": "2.0",
                    "id": rpc_id,
                    "error": {"code": -32601, "message": "Method not found"},
                }
            )
        return web.json_response({"jsonrpc": "2.0", "id": rpc_id, "result": _RESULTS[method]})

    return _handler


def _create_rpc_app(mode: str) -> web.Application:
    """Build a JSON-RPC app that answers POST / according to ``mode``."""
    app = web.Application()
    app.router.add_post("/", _make_rpc_handler(mode))
    return app


# =============================================================================
# Sync fixtures: the engine blocks the main thread, so servers run in threads
# =============================================================================


def _serve_in_thread(mode: str) -> Iterator[Node]:
    """Run an aiohttp JSON-RPC server in a background thread."""
    port = _get_free_port()
    started = threading.Event()
    loop_holder: list[asyncio.AbstractEventLoop] = []

    def _thread_target() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(_create_rpc_app(mode))
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, "127.0.0.1", port)
        loop.run_until_complete(site.start())
        loop_holder.append(loop)
        started.set()
        loop.run_forever()
        loop.run_until_complete(runner.cleanup())
        loop.close()

    thread = threading.Thread(target=_thread_target, daemon=True)
    thread.start()
    started.wait(timeout=5.0)

    yield Node(host="127.0.0.1", port=port)

    if loop_holder:
        loop_holder[0].call_soon_threadsafe(loop_holder[0].stop)
    thread.join(timeout=5.0)


@pytest.fixture
def rpc_node() -> Iterator[Node]:
    """A node that answers every known method successfully."""
    yield from _serve_in_thread("ok")


@pytest.fixture
def second_rpc_node() -> Iterator[Node]:
    """Another healthy node, for multi-endpoint runs."""
    yield from _serve_in_thread("ok")


@pytest.fixture
def rpc_error_node() -> Iterator[Node]:
    """A node that answers every call with a JSON-RPC error."""
    yield from _serve_in_thread("rpc_error")


@pytest.fixture
def http_error_node() -> Iterator[Node]:
    """A node that answers every call with HTTP 500."""
    yield from _serve_in_thread("http_error")


@pytest.fixture
def closed_node() -> Node:
    """A node address nothing listens on."""
    return Node(host="127.0.0.1", port=_get_free_port())
