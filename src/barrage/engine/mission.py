"""Task description shared read-only by every thread of a run."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from barrage._internal.config import BenchConfig, Node
    from barrage._internal.types import WorkResult


class WorkUnit(Protocol):
    """One request against one endpoint, classified.

    Implementations must be safe to call concurrently with the same
    ``data`` and should return ordinary failures as a failure delta
    instead of raising. Anything raised aborts the whole run.
    """

    def __call__(self, node: Node, data: Any) -> WorkResult:
        """Return ``(elapsed_seconds, (success, failure, missing))``."""
        ...


class CancellationFlag:
    """A flag that goes from unset to set exactly once and is never cleared.

    Soldiers poll it between iterations. The inter-iteration sleep waits on
    it, so a cancelled soldier does not finish its sleep. A flag built with
    :meth:`any_of` is set as soon as any of its sources is.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._dependents: list[CancellationFlag] = []

    @classmethod
    def any_of(cls, *sources: CancellationFlag) -> CancellationFlag:
        """Return a new flag that is set once any of ``sources`` is set."""
        combined = cls()
        for source in sources:
            source._follow(combined)
        return combined

    def _follow(self, dependent: CancellationFlag) -> None:
        with self._lock:
            already_set = self._event.is_set()
            if not already_set:
                self._dependents.append(dependent)
        if already_set:
            dependent.cancel()

    def cancel(self) -> None:
        """Request cancellation. Further calls are no-ops."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            dependents, self._dependents = self._dependents, []
        for dependent in dependents:
            dependent.cancel()

    @property
    def cancelled(self) -> bool:
        """Return True once cancellation has been requested."""
        return self._event.is_set()

    def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``, returning early if cancelled.

        Returns:
            True if the flag is set.
        """
        return self._event.wait(timeout=seconds)


@dataclass(frozen=True)
class Mission:
    """Everything a run needs, built once and shared by reference.

    Attributes:
        work_unit: The injected request to repeat.
        data: Shared read-only payload handed to every work unit call.
        category: Title of the run (the work unit's name).
        nodes: Endpoints, one captain each.
        soldier_num: Soldiers per captain.
        amount: Iterations per soldier; 0 means until cancelled.
        interval: Milliseconds to sleep between iterations; 0 means none.
        terminate: Cancellation flag polled by every soldier.
        aborted: Set by the engine itself when a fatal error ends the run,
            so the remaining soldiers stop instead of running forever.
    """

    work_unit: WorkUnit
    data: Any
    category: str
    nodes: tuple[Node, ...]
    soldier_num: int
    amount: int = 1
    interval: int = 0
    terminate: CancellationFlag = field(default_factory=CancellationFlag)
    aborted: CancellationFlag = field(default_factory=CancellationFlag)
    _halt: CancellationFlag = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_halt", CancellationFlag.any_of(self.terminate, self.aborted))

    @classmethod
    def from_config(
        cls,
        config: BenchConfig,
        work_unit: WorkUnit,
        data: Any,
        terminate: CancellationFlag | None = None,
    ) -> Mission:
        """Build a mission from a validated config."""
        return cls(
            work_unit=work_unit,
            data=data,
            category=config.category,
            nodes=tuple(config.nodes),
            soldier_num=config.thread,
            amount=config.amount,
            interval=config.interval,
            terminate=terminate if terminate is not None else CancellationFlag(),
        )

    @property
    def captain_num(self) -> int:
        """Number of captains, one per node."""
        return len(self.nodes)

    @property
    def halted(self) -> bool:
        """Return True if soldiers must not start another iteration."""
        return self._halt.cancelled

    def pause(self, seconds: float) -> None:
        """Sleep between iterations, waking early on cancellation or abort."""
        self._halt.sleep(seconds)

    @property
    def party_count(self) -> int:
        """Parties of the start barrier: every soldier plus the general."""
        return self.captain_num * self.soldier_num + 1

    def run(self, captain_id: int) -> WorkResult:
        """Call the work unit once against the captain's node."""
        return self.work_unit(self.nodes[captain_id], self.data)
