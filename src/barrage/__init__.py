"""barrage: fire synchronized request volleys at a set of nodes."""

from __future__ import annotations

from barrage._internal.config import BenchConfig, Node
from barrage.engine.general import General, generate_report, interrupt_on_signals
from barrage.engine.mission import CancellationFlag, Mission, WorkUnit
from barrage.metrics.models import (
    CaptainReport,
    EndpointSummary,
    OutcomeAccumulator,
    RunReport,
    SoldierReport,
)
from barrage.units import RpcData, registry, work_unit

__version__ = "0.1.0"

__all__ = [
    "BenchConfig",
    "CancellationFlag",
    "CaptainReport",
    "EndpointSummary",
    "General",
    "Mission",
    "Node",
    "OutcomeAccumulator",
    "RpcData",
    "RunReport",
    "SoldierReport",
    "WorkUnit",
    "generate_report",
    "interrupt_on_signals",
    "registry",
    "work_unit",
]
