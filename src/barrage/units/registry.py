"""Work unit definitions and the global work unit registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from barrage._internal.errors import WorkUnitError

if TYPE_CHECKING:
    from collections.abc import Callable

    from barrage.engine.mission import WorkUnit


@dataclass(frozen=True)
class UnitDefinition:
    """A named work unit.

    Attributes:
        name: Category name selected with ``--category``.
        func: The work unit callable.
        description: One-line help text.
    """

    name: str
    func: WorkUnit
    description: str = ""


class WorkUnitRegistry:
    """Registry of every available work unit.

    Work units are registered by the ``@work_unit`` decorator when their
    module is imported. The registry is a module-level singleton.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._units: dict[str, UnitDefinition] = {}

    def register(self, definition: UnitDefinition) -> None:
        """Register a work unit.

        Args:
            definition: The work unit to register.

        Raises:
            WorkUnitError: If a unit with the same name is already registered.
        """
        if definition.name in self._units:
            msg = f"Work unit {definition.name!r} is already registered"
            raise WorkUnitError(msg)
        self._units[definition.name] = definition

    def get(self, name: str) -> UnitDefinition:
        """Look up a work unit by name.

        Args:
            name: The category name.

        Returns:
            The matching UnitDefinition.

        Raises:
            WorkUnitError: If no unit has that name.
        """
        try:
            return self._units[name]
        except KeyError:
            msg = f"Unknown work unit {name!r}, choose from: {', '.join(self.names())}"
            raise WorkUnitError(msg) from None

    def names(self) -> list[str]:
        """Return every registered name in registration order."""
        return list(self._units)

    def get_all(self) -> list[UnitDefinition]:
        """Return every registered definition in registration order."""
        return list(self._units.values())

    def unregister(self, name: str) -> None:
        """Remove a work unit if present. Primarily for testing."""
        self._units.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._units

    def __len__(self) -> int:
        """Return the number of registered work units."""
        return len(self._units)


# Global singleton registry.
registry = WorkUnitRegistry()


def work_unit(name: str, *, description: str = "") -> Callable[[WorkUnit], WorkUnit]:
    """Register the decorated function as a work unit.

    Args:
        name: Category name the unit is selected by.
        description: One-line help text.

    Returns:
        A decorator that registers the function and returns it unchanged.

    Raises:
        WorkUnitError: If ``name`` is already taken.
    """

    def decorator(func: WorkUnit) -> WorkUnit:
        registry.register(UnitDefinition(name=name, func=func, description=description))
        return func

    return decorator
