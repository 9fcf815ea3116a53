"""
Clamped step driver for a single compartment.

The driver stands in for the cable-equation solver when voltage and calcium
are prescribed (voltage/calcium clamp, replayed recordings, tests). It keeps
the one ordering rule mechanisms rely on: every mechanism reads ``Ca_prev``
before the calcium of the current step is published.

Per step:
    1. Publish V and Ca for the step on the compartment
    2. ``integrate(V, Ca, dt, delta_temp)`` on every conductance
    3. ``integrate(dt)`` on every mechanism (they read ``Ca_prev``)
    4. ``Ca_prev = Ca``

Usage:
    stepper = CompartmentStepper(compartment, SimulationConfig(dt_ms=0.1))
    stepper.init()
    snapshots = stepper.run(V_trace, Ca_trace)
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from homeostat.components.compartment import Compartment
from homeostat.config import SimulationConfig
from homeostat.errors import ConfigurationError, validate_positive

logger = logging.getLogger(__name__)


class CompartmentStepper:
    """Steps one compartment's channels and mechanisms under clamp.

    Args:
        compartment: Compartment to drive
        config: SimulationConfig with dt, temperature offset and solver order
    """

    def __init__(
        self,
        compartment: Compartment,
        config: Optional[SimulationConfig] = None,
    ):
        self.compartment = compartment
        self.config = config or SimulationConfig()
        validate_positive(self.config.dt_ms, "dt_ms")
        self.n_steps = 0
        self._initialized = False

    @property
    def dt(self) -> float:
        return self.config.dt_ms

    def init(self) -> None:
        """Check solver support and initialize every mechanism.

        Runs once before the first step, so that configuration errors abort
        model construction before any simulation happens.
        """
        order = self.config.solver_order
        for mechanism in self.compartment.mechanisms:
            mechanism.check_solvers(order)
        for mechanism in self.compartment.mechanisms:
            mechanism.init()

        self._initialized = True
        logger.info(
            "Initialized compartment with %d conductances and %d mechanisms (dt=%s ms)",
            len(self.compartment.conductances),
            self.compartment.n_mech,
            self.dt,
        )

    def step(self, V: float, Ca: float) -> None:
        """Advance the compartment by one step with clamped V and Ca."""
        if not self._initialized:
            self.init()

        comp = self.compartment
        comp.V = float(V)
        comp.Ca = float(Ca)

        for channel in comp.conductances:
            channel.integrate(comp.V, comp.Ca, self.dt, self.config.delta_temp)

        for mechanism in comp.mechanisms:
            mechanism.integrate(self.dt)

        comp.Ca_prev = comp.Ca
        self.n_steps += 1

    def full_state_size(self) -> int:
        """Total snapshot width over all mechanisms."""
        return sum(m.get_full_state_size() for m in self.compartment.mechanisms)

    def snapshot(self, buffer: Optional[NDArray[np.float64]] = None) -> NDArray[np.float64]:
        """Collect ``get_full_state`` from every mechanism, in registration order."""
        if buffer is None:
            buffer = np.zeros(self.full_state_size(), dtype=np.float64)
        idx = 0
        for mechanism in self.compartment.mechanisms:
            idx = mechanism.get_full_state(buffer, idx)
        return buffer

    def run(
        self,
        V_trace: Sequence[float] | NDArray[np.float64],
        Ca_trace: Sequence[float] | NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Step through clamped traces and record mechanism snapshots.

        Returns:
            Array of shape [n_steps, full_state_size]
        """
        V_arr = np.asarray(V_trace, dtype=np.float64)
        Ca_arr = np.asarray(Ca_trace, dtype=np.float64)
        if V_arr.shape != Ca_arr.shape or V_arr.ndim != 1:
            raise ConfigurationError(
                f"V and Ca traces must be 1D and equally long, "
                f"got {V_arr.shape} and {Ca_arr.shape}"
            )

        states = np.zeros((V_arr.shape[0], self.full_state_size()), dtype=np.float64)
        for t in range(V_arr.shape[0]):
            self.step(V_arr[t], Ca_arr[t])
            self.snapshot(states[t])

        logger.debug("Ran %d clamped steps", V_arr.shape[0])
        return states


__all__ = ["CompartmentStepper"]
