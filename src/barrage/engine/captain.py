"""Captain: the soldier pool of one endpoint and its report."""

from __future__ import annotations

import queue
import threading
import time
from typing import TYPE_CHECKING

from barrage._internal.errors import EngineError
from barrage._internal.logging import TRACE, get_logger
from barrage.engine.soldier import SoldierFailure, SoldierMessage, run_soldier
from barrage.metrics.models import CaptainReport, SoldierReport

if TYPE_CHECKING:
    from barrage.engine.general import SharedRunReport
    from barrage.engine.mission import Mission

logger = get_logger("engine.captain")


def run_captain(
    mission: Mission,
    report: SharedRunReport,
    captain_id: int,
    countdown: threading.Barrier,
) -> None:
    """Thread target of a captain.

    Spawns the soldiers, collects their reports, and pushes the merged
    report onto the shared run report. Any failure is recorded on the
    shared report instead, after aborting the barrier and the mission so
    the general is never left waiting.

    Args:
        mission: Shared task description.
        report: The general's lock-protected run report.
        captain_id: Index of the node owned by this captain.
        countdown: The run-wide start barrier, shared with every soldier.
    """
    logger.log(TRACE, "Captain#%d has accepted a task ...", captain_id)
    try:
        subreport = _command(mission, captain_id, countdown)
    except BaseException as exc:
        mission.aborted.cancel()
        countdown.abort()
        logger.debug("Captain#%d failed", captain_id, exc_info=True)
        report.fail(exc)
        return

    report.push(subreport)
    logger.log(TRACE, "Captain#%d has finished his task.", captain_id)


def _command(
    mission: Mission,
    captain_id: int,
    countdown: threading.Barrier,
) -> CaptainReport:
    """Spawn ``soldier_num`` soldiers and wait for all of their messages.

    Args:
        mission: Shared task description.
        captain_id: Index of the node owned by this captain.
        countdown: The run-wide start barrier.

    Returns:
        The captain report, soldier reports in arrival order.

    Raises:
        EngineError: If any soldier sent a failure instead of a report.
    """
    start = time.perf_counter()
    channel: queue.SimpleQueue[SoldierMessage] = queue.SimpleQueue()

    for soldier_id in range(mission.soldier_num):
        threading.Thread(
            target=run_soldier,
            args=(mission, channel, captain_id, soldier_id, countdown),
            name=f"barrage-soldier-{captain_id}-{soldier_id}",
            daemon=True,
        ).start()

    ready_seconds = time.perf_counter() - start

    received: list[SoldierReport] = []
    failures: list[SoldierFailure] = []
    # Every soldier sends exactly one message, so this never skips one.
    for _ in range(mission.soldier_num):
        message = channel.get()
        if isinstance(message, SoldierFailure):
            failures.append(message)
        else:
            received.append(message)

    total_seconds = time.perf_counter() - start

    if failures:
        first = failures[0]
        msg = f"Soldier#{captain_id}-{first.soldier_id} failed: {first.error!r}"
        raise EngineError(msg) from first.error

    return CaptainReport(
        captain_id=captain_id,
        ready_seconds=ready_seconds,
        total_seconds=total_seconds,
        soldier_reports=tuple(received),
    )
