"""
Mechanism contract for pluggable compartment add-ons.

A mechanism is anything a compartment steps once per timestep besides its
channels: homeostatic controllers, set-point providers, calcium buffers.
Every mechanism identifies itself by a type name (``name``) so that other
mechanisms can discover it at ``init()`` time.

Lifecycle
=========
1. Construct with a config and an optional error reporter
2. ``connect(target)`` once to wire it into a compartment
3. ``check_solvers(order)`` and ``init()`` before the first step
4. ``integrate(dt)`` once per timestep
5. ``get_state`` / ``get_full_state`` for introspection and snapshots

Errors are reported through the injected reporter (default: raise). After a
report the failing call returns without doing anything else.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

import numpy as np

from homeostat.errors import (
    ConfigurationError,
    ErrorReporter,
    HomeostatError,
    raise_error,
)

if TYPE_CHECKING:
    from homeostat.components.compartment import Compartment


class Mechanism(ABC):
    """Abstract base class for compartment mechanisms.

    Subclasses set ``name`` and implement ``connect``, ``integrate`` and
    ``get_state``.
    """

    name: str = "Mechanism"
    """Type-identifying name used for runtime discovery."""

    supported_solver_orders: Tuple[int, ...] = (0,)
    """Solver orders this mechanism can be stepped with."""

    def __init__(self, on_error: Optional[ErrorReporter] = None):
        self._on_error: ErrorReporter = on_error if on_error is not None else raise_error

    def _fail(self, error: HomeostatError) -> None:
        """Report an error through the injected reporter."""
        self._on_error(error)

    @property
    @abstractmethod
    def container(self) -> Optional["Compartment"]:
        """Compartment this mechanism lives in, or None before ``connect``."""

    @abstractmethod
    def connect(self, target: Any) -> None:
        """Wire the mechanism to its target and register with its compartment."""

    @abstractmethod
    def integrate(self, dt: float) -> None:
        """Advance the mechanism by one timestep of ``dt`` ms."""

    @abstractmethod
    def get_state(self, idx: int) -> float:
        """Return state variable ``idx``, NaN for unknown indices."""

    def init(self) -> None:
        """Resolve references to other mechanisms. Called once before stepping."""

    def check_solvers(self, order: int) -> None:
        """Verify the mechanism can be stepped with the given solver order."""
        if order not in self.supported_solver_orders:
            self._fail(ConfigurationError(
                f"[{self.name}] unsupported solver order {order}; "
                f"supported: {list(self.supported_solver_orders)}"
            ))

    def get_full_state_size(self) -> int:
        """Number of values ``get_full_state`` writes."""
        return 0

    def get_full_state(self, buffer: np.ndarray, idx: int) -> int:
        """Write the full state into ``buffer`` from ``idx``; return the next index."""
        return idx

    def get_diagnostics(self) -> Dict[str, Any]:
        """Report mechanism state for logging and monitoring."""
        return {"name": self.name}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


__all__ = ["Mechanism"]
