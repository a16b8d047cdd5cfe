"""Shared type aliases for barrage."""

from __future__ import annotations

# (success, failure, missing) deltas returned by one work unit call.
Outcome = tuple[int, int, int]

# (elapsed_seconds, outcome) returned by one work unit call.
WorkResult = tuple[float, Outcome]
