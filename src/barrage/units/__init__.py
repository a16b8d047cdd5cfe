"""Work units: the requests barrage repeats against each node.

Importing this package registers the built-in JSON-RPC units in
:data:`registry`.
"""

from __future__ import annotations

from barrage.units.jsonrpc import RpcData, classify, send_request
from barrage.units.registry import UnitDefinition, WorkUnitRegistry, registry, work_unit

__all__ = [
    "RpcData",
    "UnitDefinition",
    "WorkUnitRegistry",
    "classify",
    "registry",
    "send_request",
    "work_unit",
]
