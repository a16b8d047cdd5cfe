"""HDR histogram of success latencies.

Thin wrapper around ``hdrh.histogram.HdrHistogram`` that accepts seconds
(as returned by work units) and reports milliseconds (as rendered).
Internally values are integer microseconds.
"""

from __future__ import annotations

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

# Range: 1 microsecond to 10 minutes (in microseconds)
_LOWEST_TRACKABLE_US = 1
_HIGHEST_TRACKABLE_US = 600_000_000
_SIGNIFICANT_DIGITS = 3


class LatencyHistogram:
    """Latency distribution of one soldier, captain, or run.

    A soldier owns its histogram exclusively while running; captains and
    the final report only ever build merged copies, so no locking is
    needed.

    Attributes:
        lowest_us: Lowest trackable value in microseconds.
        highest_us: Highest trackable value in microseconds.
    """

    def __init__(
        self,
        lowest_us: int = _LOWEST_TRACKABLE_US,
        highest_us: int = _HIGHEST_TRACKABLE_US,
        significant_digits: int = _SIGNIFICANT_DIGITS,
    ) -> None:
        self.lowest_us = lowest_us
        self.highest_us = highest_us
        self._significant_digits = significant_digits
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            lowest_us, highest_us, significant_digits
        )

    def record(self, elapsed_seconds: float) -> bool:
        """Record one latency given in seconds.

        Values are clamped to the trackable range [lowest_us, highest_us].

        Args:
            elapsed_seconds: Latency in seconds.

        Returns:
            True if the value was recorded, False otherwise.
        """
        value_us = int(elapsed_seconds * 1_000_000)
        value_us = max(self.lowest_us, min(value_us, self.highest_us))
        return bool(self._histogram.record_value(value_us))

    def percentile_ms(self, percentile: float) -> float:
        """Get the latency at a given percentile.

        Args:
            percentile: Percentile to compute (0.0 to 100.0).

        Returns:
            Latency in milliseconds, or 0.0 if nothing was recorded.
        """
        if self._histogram.total_count == 0:
            return 0.0
        return float(self._histogram.get_value_at_percentile(percentile)) / 1000.0

    @property
    def total_count(self) -> int:
        """Number of recorded values."""
        return int(self._histogram.total_count)

    def merged(self, *others: LatencyHistogram) -> LatencyHistogram:
        """Return a new histogram holding this one's values plus ``others``."""
        result = LatencyHistogram(self.lowest_us, self.highest_us, self._significant_digits)
        for hist in (self, *others):
            if hist.total_count:
                result._histogram.add(hist._histogram)
        return result

    @classmethod
    def combine(cls, histograms: list[LatencyHistogram]) -> LatencyHistogram:
        """Merge a list of histograms into a new one."""
        return cls().merged(*histograms)
