"""General: top-level orchestrator of one benchmark run."""

from __future__ import annotations

import contextlib
import signal
import threading
import time
from typing import TYPE_CHECKING, Any

from barrage._internal.errors import EngineError
from barrage._internal.logging import TRACE, get_logger
from barrage.engine.captain import run_captain
from barrage.engine.mission import Mission
from barrage.metrics.models import RunReport

if TYPE_CHECKING:
    from collections.abc import Iterator

    from barrage._internal.config import BenchConfig, Node
    from barrage.engine.mission import CancellationFlag, WorkUnit
    from barrage.metrics.models import CaptainReport

logger = get_logger("engine.general")


class SharedRunReport:
    """The run report while captains are still pushing into it.

    Title and nodes are known up front; captain reports and captain
    failures arrive from captain threads. A single ``threading.Lock``
    guards every mutation and is only held for the append itself.
    """

    def __init__(self, title: str, nodes: tuple[Node, ...]) -> None:
        self.title = title
        self.nodes = nodes
        self.ready_seconds = 0.0
        self._captain_reports: list[CaptainReport] = []
        self._errors: list[BaseException] = []
        self._lock = threading.Lock()

    def push(self, report: CaptainReport) -> None:
        """Append a finished captain report."""
        with self._lock:
            self._captain_reports.append(report)

    def fail(self, error: BaseException) -> None:
        """Record a fatal error raised by a captain."""
        with self._lock:
            self._errors.append(error)

    @property
    def errors(self) -> list[BaseException]:
        """Return a copy of the recorded fatal errors."""
        with self._lock:
            return list(self._errors)

    def freeze(self, cost_seconds: float) -> RunReport:
        """Build the immutable run report, captain reports in node order."""
        with self._lock:
            captain_reports = sorted(self._captain_reports, key=lambda r: r.captain_id)
        return RunReport(
            title=self.title,
            ready_seconds=self.ready_seconds,
            cost_seconds=cost_seconds,
            nodes=self.nodes,
            captain_reports=tuple(captain_reports),
        )


class General:
    """Runs one mission and produces its report.

    Spawns one captain thread per node. Every soldier of every captain and
    the general itself wait on a single ``threading.Barrier`` of
    ``captain_num * soldier_num + 1`` parties, so no soldier starts before
    all of them are ready and warm-up is measured from one clock.

    Attributes:
        mission: The shared task description.
    """

    def __init__(self, mission: Mission) -> None:
        self.mission = mission

    def run(self) -> RunReport:
        """Execute the mission. Blocks until every captain has finished.

        Returns:
            The finished RunReport.

        Raises:
            EngineError: If any soldier or captain failed, or the start
                barrier broke. No partial report is returned.
        """
        mission = self.mission
        logger.debug(
            "General has accepted the mission: category=%s, captains=%d, soldiers=%d",
            mission.category,
            mission.captain_num,
            mission.soldier_num,
        )

        countdown = threading.Barrier(mission.party_count)
        start = time.perf_counter()
        report = SharedRunReport(mission.category, mission.nodes)
        captains: list[threading.Thread] = []
        own_error: BaseException | None = None

        try:
            for captain_id in range(mission.captain_num):
                captain = threading.Thread(
                    target=run_captain,
                    args=(mission, report, captain_id, countdown),
                    name=f"barrage-captain-{captain_id}",
                    daemon=True,
                )
                captain.start()
                captains.append(captain)

            logger.log(TRACE, "General is waiting for all soldiers to be ready.")
            countdown.wait()
            report.ready_seconds = time.perf_counter() - start
            logger.debug("Soldiers are ready to carry out their task.")
        except RuntimeError as exc:
            # BrokenBarrierError, or a thread that could not be started.
            own_error = exc
            mission.aborted.cancel()
            countdown.abort()

        for captain in captains:
            captain.join()

        errors = report.errors
        if own_error is not None:
            errors.append(own_error)
        if errors:
            logger.error("Benchmark aborted: %s", errors[0])
            raise EngineError("Benchmark run aborted") from errors[0]

        cost_seconds = time.perf_counter() - start - report.ready_seconds
        logger.debug("General has finished his task.")
        return report.freeze(cost_seconds)


def generate_report(
    config: BenchConfig,
    work_unit: WorkUnit,
    data: Any,
    terminate: CancellationFlag | None = None,
) -> RunReport:
    """Build a mission from ``config`` and run it.

    Args:
        config: Validated benchmark configuration.
        work_unit: The request to repeat.
        data: Shared payload handed to every work unit call.
        terminate: Optional cancellation flag owned by the caller.

    Returns:
        The finished RunReport.

    Raises:
        EngineError: If the run aborted.
    """
    logger.debug("Running for: %s", config.describe())
    mission = Mission.from_config(config, work_unit, data, terminate)
    return General(mission).run()


@contextlib.contextmanager
def interrupt_on_signals(terminate: CancellationFlag) -> Iterator[CancellationFlag]:
    """Cancel ``terminate`` on SIGINT or SIGTERM while the block runs.

    The previous handlers are restored on exit. Must be entered from the
    main thread.

    Args:
        terminate: The flag to set when a signal arrives.

    Yields:
        The same flag.
    """
    original_sigint = signal.getsignal(signal.SIGINT)
    original_sigterm = signal.getsignal(signal.SIGTERM)

    def _signal_handler(signum: int, _frame: object) -> None:
        if not terminate.cancelled:
            logger.warning("Stopping since signal %d was received ...", signum)
        terminate.cancel()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)
    try:
        yield terminate
    finally:
        signal.signal(signal.SIGINT, original_sigint)
        signal.signal(signal.SIGTERM, original_sigterm)
