"""Soldier: one thread repeating the work unit against one endpoint."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from barrage._internal.logging import TRACE, get_logger
from barrage.metrics.histogram import LatencyHistogram
from barrage.metrics.models import OutcomeAccumulator, SoldierReport

if TYPE_CHECKING:
    import queue
    import threading

    from barrage.engine.mission import Mission

logger = get_logger("engine.soldier")


@dataclass(frozen=True)
class SoldierFailure:
    """Sent on the channel instead of a report when a soldier dies.

    Attributes:
        soldier_id: Index of the soldier within its captain.
        error: The exception that ended the soldier.
    """

    soldier_id: int
    error: BaseException


SoldierMessage = SoldierReport | SoldierFailure


def run_soldier(
    mission: Mission,
    channel: queue.SimpleQueue[SoldierMessage],
    captain_id: int,
    soldier_id: int,
    countdown: threading.Barrier,
) -> None:
    """Thread target of a soldier.

    Waits at the global start barrier, runs the iteration loop, and puts
    exactly one message on ``channel``: a ``SoldierReport`` on success or
    a ``SoldierFailure`` if anything raised. On failure both the barrier
    and the mission are aborted, so no other party waits for this soldier
    and no other soldier starts another iteration.

    Args:
        mission: Shared task description.
        channel: The captain's collection queue.
        captain_id: Index of the owning captain (and of its node).
        soldier_id: Index of this soldier within the captain.
        countdown: The run-wide start barrier.
    """
    logger.log(TRACE, "Soldier#%d-%d has accepted a task ...", captain_id, soldier_id)
    start = time.perf_counter()
    try:
        # Cancellation is not checked here: every soldier must arrive.
        countdown.wait()
        ready_seconds = time.perf_counter() - start
        logger.log(TRACE, "Soldier#%d-%d is doing his task ...", captain_id, soldier_id)

        outcome, latency, iterations = _carry_out(mission, captain_id)
    except BaseException as exc:
        # Anything that ends this thread, SystemExit included, must reach the captain.
        mission.aborted.cancel()
        countdown.abort()
        logger.debug("Soldier#%d-%d failed", captain_id, soldier_id, exc_info=True)
        channel.put(SoldierFailure(soldier_id=soldier_id, error=exc))
        return

    channel.put(
        SoldierReport(
            soldier_id=soldier_id,
            ready_seconds=ready_seconds,
            total_seconds=time.perf_counter() - start,
            outcome=outcome.snapshot(),
            latency=latency,
            iterations=iterations,
        )
    )
    logger.log(TRACE, "Soldier#%d-%d has finished his task.", captain_id, soldier_id)


def _carry_out(
    mission: Mission,
    captain_id: int,
) -> tuple[OutcomeAccumulator, LatencyHistogram, int]:
    """Run the iteration loop until cancelled or ``amount`` is reached.

    Args:
        mission: Shared task description.
        captain_id: Index of the node to call.

    Returns:
        Tuple of (accumulated outcome, success latency histogram,
        number of work unit calls).
    """
    outcome = OutcomeAccumulator()
    latency = LatencyHistogram()
    amount = mission.amount
    wait_seconds = mission.interval / 1000.0
    count = 0

    while True:
        if mission.halted or (amount != 0 and count == amount):
            break

        elapsed, deltas = mission.run(captain_id)
        outcome.merge(elapsed, deltas)
        if deltas[0] > 0:
            latency.record(elapsed)
        count += 1

        if mission.interval != 0:
            mission.pause(wait_seconds)

    return outcome, latency, count
