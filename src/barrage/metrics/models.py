"""Report dataclasses: accumulator, soldier, captain and run reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from barrage.metrics.histogram import LatencyHistogram

if TYPE_CHECKING:
    from barrage._internal.config import Node
    from barrage._internal.types import Outcome

__all__ = [
    "CaptainReport",
    "EndpointSummary",
    "OutcomeAccumulator",
    "RunReport",
    "SoldierReport",
]


@dataclass
class OutcomeAccumulator:
    """Running totals of work unit results.

    Attributes:
        success_count: Calls classified as successful.
        failure_count: Calls classified as failed.
        missing_count: Calls whose result is indeterminate.
        success_latency_sum: Summed elapsed seconds of successful calls.
    """

    success_count: int = 0
    failure_count: int = 0
    missing_count: int = 0
    success_latency_sum: float = 0.0

    def merge(self, elapsed: float, outcome: Outcome) -> None:
        """Add one work unit result.

        Deltas are trusted and not validated. The elapsed time only counts
        towards the latency sum when the call reports a success, so the sum
        stays zero while ``success_count`` is zero.

        Args:
            elapsed: Elapsed seconds of the call.
            outcome: ``(success, failure, missing)`` deltas.
        """
        success, failure, missing = outcome
        if success > 0:
            self.success_latency_sum += elapsed
        self.success_count += success
        self.failure_count += failure
        self.missing_count += missing

    def absorb(self, other: OutcomeAccumulator) -> None:
        """Add another accumulator's totals to this one."""
        self.success_latency_sum += other.success_latency_sum
        self.success_count += other.success_count
        self.failure_count += other.failure_count
        self.missing_count += other.missing_count

    def average_success_latency(self) -> float:
        """Mean seconds per successful call.

        Returns the latency sum itself when there are no successes, so
        callers must check ``success_count`` before trusting the value.
        """
        if self.success_count > 0:
            return self.success_latency_sum / self.success_count
        return self.success_latency_sum

    @property
    def attempted(self) -> int:
        """Total number of classified calls."""
        return self.success_count + self.failure_count + self.missing_count

    def snapshot(self) -> OutcomeAccumulator:
        """Return an independent copy."""
        return OutcomeAccumulator(
            success_count=self.success_count,
            failure_count=self.failure_count,
            missing_count=self.missing_count,
            success_latency_sum=self.success_latency_sum,
        )


@dataclass(frozen=True)
class SoldierReport:
    """Result of one soldier, sent once on its captain's channel.

    Attributes:
        soldier_id: Index of the soldier within its captain.
        ready_seconds: Time from spawn to barrier release.
        total_seconds: Time from spawn to completion, barrier wait included.
        outcome: Snapshot of the soldier's accumulator.
        latency: Distribution of the soldier's successful calls.
        iterations: Number of work unit calls made.
    """

    soldier_id: int
    ready_seconds: float
    total_seconds: float
    outcome: OutcomeAccumulator
    latency: LatencyHistogram = field(default_factory=LatencyHistogram, compare=False)
    iterations: int = 0


@dataclass(frozen=True)
class CaptainReport:
    """Merged result of every soldier of one endpoint.

    Attributes:
        captain_id: Index of the endpoint this captain owned.
        ready_seconds: Time from captain spawn until it started collecting.
        total_seconds: Time from captain spawn until the last report.
        soldier_reports: Reports in channel arrival order.
    """

    captain_id: int
    ready_seconds: float
    total_seconds: float
    soldier_reports: tuple[SoldierReport, ...] = ()

    def analyse(self) -> OutcomeAccumulator:
        """Sum every soldier's accumulator."""
        total = OutcomeAccumulator()
        for report in self.soldier_reports:
            total.absorb(report.outcome)
        return total

    def latency(self) -> LatencyHistogram:
        """Merge every soldier's latency histogram."""
        return LatencyHistogram.combine([r.latency for r in self.soldier_reports])


@dataclass(frozen=True)
class EndpointSummary:
    """Numbers rendered for one endpoint.

    Attributes:
        node: The endpoint.
        amount: Total classified calls (success + failure + missing).
        thread: Number of soldiers that reported.
        success: Successful calls.
        failure: Failed calls.
        missing: Indeterminate calls.
        avg_success_ms: Mean success latency in milliseconds.
        p50_ms: Median success latency in milliseconds.
        p95_ms: 95th percentile success latency in milliseconds.
        p99_ms: 99th percentile success latency in milliseconds.
    """

    node: Node
    amount: int
    thread: int
    success: int
    failure: int
    missing: int
    avg_success_ms: float
    p50_ms: float = 0.0
    p95_ms: float = 0.0
    p99_ms: float = 0.0


@dataclass(frozen=True)
class RunReport:
    """Complete, immutable result of one benchmark run.

    Attributes:
        title: Category of the work unit that was run.
        ready_seconds: Warm-up: time until every soldier passed the barrier.
        cost_seconds: Execution time after warm-up.
        nodes: Endpoints in configuration order.
        captain_reports: One report per endpoint, index-aligned with nodes.
    """

    title: str
    ready_seconds: float
    cost_seconds: float
    nodes: tuple[Node, ...] = ()
    captain_reports: tuple[CaptainReport, ...] = ()

    @property
    def cost_ms(self) -> float:
        """Execution time in milliseconds."""
        return self.cost_seconds * 1000.0

    def endpoint_summaries(self) -> list[EndpointSummary]:
        """Build one summary per captain report."""
        summaries: list[EndpointSummary] = []
        for report in self.captain_reports:
            outcome = report.analyse()
            latency = report.latency()
            summaries.append(
                EndpointSummary(
                    node=self.nodes[report.captain_id],
                    amount=outcome.attempted,
                    thread=len(report.soldier_reports),
                    success=outcome.success_count,
                    failure=outcome.failure_count,
                    missing=outcome.missing_count,
                    avg_success_ms=outcome.average_success_latency() * 1000.0,
                    p50_ms=latency.percentile_ms(50.0),
                    p95_ms=latency.percentile_ms(95.0),
                    p99_ms=latency.percentile_ms(99.0),
                )
            )
        return summaries

    @property
    def total_successes(self) -> int:
        """Successful calls across every endpoint."""
        return sum(r.analyse().success_count for r in self.captain_reports)

    @property
    def throughput(self) -> float:
        """Successes per second of execution time (0.0 if no time passed)."""
        if self.cost_seconds <= 0:
            return 0.0
        return self.total_successes / (self.cost_ms / 1000.0)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable view of the report."""
        endpoints: list[dict[str, Any]] = []
        for summary, report in zip(
            self.endpoint_summaries(), self.captain_reports, strict=True
        ):
            endpoints.append(
                {
                    "node": str(summary.node),
                    "amount": summary.amount,
                    "thread": summary.thread,
                    "success": summary.success,
                    "failure": summary.failure,
                    "missing": summary.missing,
                    "avg_success_ms": summary.avg_success_ms,
                    "p50_ms": summary.p50_ms,
                    "p95_ms": summary.p95_ms,
                    "p99_ms": summary.p99_ms,
                    "ready_ms": report.ready_seconds * 1000.0,
                    "total_ms": report.total_seconds * 1000.0,
                    "soldiers": [
                        {
                            "soldier_id": s.soldier_id,
                            "iterations": s.iterations,
                            "ready_ms": s.ready_seconds * 1000.0,
                            "total_ms": s.total_seconds * 1000.0,
                            "success": s.outcome.success_count,
                            "failure": s.outcome.failure_count,
                            "missing": s.outcome.missing_count,
                        }
                        for s in report.soldier_reports
                    ],
                }
            )
        return {
            "title": self.title,
            "ready_ms": self.ready_seconds * 1000.0,
            "cost_ms": self.cost_ms,
            "total_successes": self.total_successes,
            "throughput": self.throughput,
            "endpoints": endpoints,
        }
