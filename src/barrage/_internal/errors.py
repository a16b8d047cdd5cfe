"""Custom exception hierarchy for barrage."""

from __future__ import annotations


class BarrageError(Exception):
    """Base exception for all barrage errors.

    All custom exceptions in barrage inherit from this class, making it
    easy to catch any barrage-specific error with a single except clause.
    """


class ConfigError(BarrageError):
    """Raised when configuration is invalid or missing.

    Examples:
        - A node address is not of the form ``host:port``.
        - The thread count is zero.
        - An environment variable has an invalid value.
    """


class WorkUnitError(BarrageError):
    """Raised when a work unit cannot be resolved or registered.

    Examples:
        - The requested category has no registered work unit.
        - Two work units are registered under the same name.
    """


class EngineError(BarrageError):
    """Raised when a benchmark run aborts.

    Any exception escaping a work unit, a broken start barrier, or a
    captain that ends without delivering its report aborts the whole
    run. No partial report is produced.
    """
