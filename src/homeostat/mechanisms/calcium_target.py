"""
Calcium set-point provider.

Controllers in the same compartment look this mechanism up by name during
``init()`` and read the set-point from ``get_state(0)``. Keeping the target
in its own mechanism lets one value drive every controller in a compartment.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

from homeostat.components.compartment import Compartment
from homeostat.constants import CALCIUM_TARGET_CLASS
from homeostat.errors import ComponentError, ErrorReporter
from homeostat.managers.component_registry import register_mechanism
from homeostat.mechanisms.base import Mechanism

logger = logging.getLogger(__name__)


@register_mechanism(CALCIUM_TARGET_CLASS, description="Calcium set-point provider")
class CalciumTarget(Mechanism):
    """Holds the calcium concentration controllers regulate toward.

    Args:
        target: Calcium set-point (µM). NaN disables regulation for every
            controller that reads it.
    """

    name = CALCIUM_TARGET_CLASS

    def __init__(self, target: float = math.nan, on_error: Optional[ErrorReporter] = None):
        super().__init__(on_error)
        self.target = float(target)
        self._container: Optional[Compartment] = None

    @property
    def container(self) -> Optional[Compartment]:
        return self._container

    def connect(self, target: Any) -> None:
        """Register with a compartment. Other targets are rejected."""
        if not isinstance(target, Compartment):
            self._fail(ComponentError(
                self.name, f"can only connect to a compartment, got {type(target).__name__}"
            ))
            return
        if self._container is not None and self._container is not target:
            self._fail(ComponentError(self.name, "already connected to a compartment"))
            return

        self._container = target
        target.add_mechanism(self)
        logger.debug("CalciumTarget(%s) connected", self.target)

    def integrate(self, dt: float) -> None:
        """The set-point is constant; nothing to integrate."""

    def get_state(self, idx: int) -> float:
        if idx == 0:
            return self.target
        return math.nan

    def get_diagnostics(self) -> Dict[str, Any]:
        return {"name": self.name, "target": self.target}

    def __repr__(self) -> str:
        return f"CalciumTarget(target={self.target})"


__all__ = ["CalciumTarget"]
