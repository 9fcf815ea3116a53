"""Integral Controller - Calcium-Driven Homeostatic Regulation of Conductances.

**Scope**: Slow regulation of one channel's density or one synapse's strength
**Focus**: Two-stage leaky integral control toward a calcium set-point

The controller integrates the calcium error into an mRNA-like state ``m``,
and ``m`` in turn drives the regulated conductance:

.. code-block:: none

    τ_m · dm/dt = Ca_target − Ca
    τ_g · dG/dt = m − G

where ``G = gbar · A`` for a channel (total conductance in the compartment)
and ``G = gmax · 1e-3`` for a synapse. Both ``m`` and the regulated strength
are clamped at zero. A NaN set-point disables regulation.

**Biological Basis**:
=====================
Activity-dependent transcription of channel genes through calcium-sensitive
pathways, followed by slower translation and insertion into the membrane.

**Key References**:
===================
- O'Leary, Williams, Franci & Marder (2014): "Cell types, network homeostasis,
  and pathological compensation from a biologically plausible ion channel
  expression model", Neuron 82(4):809-821

Usage:
======
    compartment = Compartment(CompartmentConfig(A=0.0628))
    kd = compartment.add_conductance(
        ComponentRegistry.create("channel", "Kd", ChannelConfig(gbar=100.0, E=-80.0))
    )
    CalciumTarget(target=7.0).connect(compartment)

    controller = IntegralController(IntegralControllerConfig(tau_m=5e3, tau_g=5e3))
    controller.connect(kd)
    controller.init()

    # Each step, after the solver has updated the channels:
    controller.integrate(dt=0.05)
"""

from __future__ import annotations

import logging
import math
from enum import IntEnum
from typing import Any, Dict, Optional, Union

import numpy as np

from homeostat.components.channels.conductance import Conductance
from homeostat.components.compartment import Compartment
from homeostat.components.synapse import Synapse
from homeostat.config import IntegralControllerConfig
from homeostat.constants import (
    CALCIUM_TARGET_CLASS,
    SYNAPSE_STRENGTH_GAIN,
    SYNAPSE_STRENGTH_SCALE,
)
from homeostat.errors import (
    ComponentError,
    ConfigurationError,
    ErrorReporter,
    validate_positive,
)
from homeostat.managers.component_registry import register_mechanism
from homeostat.mechanisms.base import Mechanism
from homeostat.units import TimeMS

logger = logging.getLogger(__name__)

ControlTarget = Union[Conductance, Synapse]
"""What a controller may regulate."""


class ControlType(IntEnum):
    """Binding state of an integral controller."""

    UNSET = 0
    CHANNEL = 1
    SYNAPSE = 2


@register_mechanism("IntegralController", description="Integral controller of conductances and synapses")
class IntegralController(Mechanism):
    """Integral homeostatic controller bound to one channel or one synapse.

    Args:
        config: IntegralControllerConfig with tau_m, tau_g and initial m
        on_error: Error reporter (default: raise)

    Attributes:
        control_type: UNSET until ``connect`` succeeds, then CHANNEL or SYNAPSE
        target: Calcium set-point resolved by ``init()``
        m: mRNA level (≥ 0)
        container_A: Membrane area of the regulated target's compartment
    """

    name = "IntegralController"

    def __init__(
        self,
        config: Optional[IntegralControllerConfig] = None,
        on_error: Optional[ErrorReporter] = None,
    ):
        super().__init__(on_error)
        self.config = config or IntegralControllerConfig()

        self.tau_m: TimeMS = TimeMS(float(self.config.tau_m))
        self.tau_g: TimeMS = TimeMS(float(self.config.tau_g))
        self.m: float = float(self.config.m0)

        self.control_type = ControlType.UNSET
        self.target: float = 0.0
        self.container_A: float = math.nan
        self.controlling_class: str = ""

        self.channel: Optional[Conductance] = None
        self.syn: Optional[Synapse] = None
        self._compartment: Optional[Compartment] = None

        try:
            validate_positive(self.tau_g, "tau_g")
            validate_positive(self.m, "m0", allow_zero=True)
        except ConfigurationError as e:
            self._fail(ConfigurationError(f"[{self.name}] {e}"))

    # =========================================================================
    # Binding
    # =========================================================================

    @property
    def container(self) -> Optional[Compartment]:
        """Compartment of the regulated target, held from ``connect`` on."""
        return self._compartment

    def connect(self, target: ControlTarget) -> None:
        """Bind to a channel or a synapse.

        Registers the controller with the target's compartment and captures
        that compartment's membrane area.

        Reports ComponentError if the target is a compartment, if the
        controller is already bound, if a channel has not been inserted in a
        compartment yet, or if the target type is unsupported.
        """
        if isinstance(target, Compartment):
            self._fail(ComponentError(
                self.name, "This mechanism cannot connect to a compartment object"
            ))
            return

        if self.control_type != ControlType.UNSET:
            self._fail(ComponentError(
                self.name,
                f"already controlling {self.controlling_class}; "
                f"a controller can only be connected once",
            ))
            return

        if isinstance(target, Conductance):
            container = target.container
            if container is None:
                self._fail(ComponentError(
                    self.name,
                    f"{target.name} must be inserted in a compartment before "
                    f"a controller can connect to it",
                ))
                return
            self.channel = target
            self.controlling_class = target.name
            self.control_type = ControlType.CHANNEL

        elif isinstance(target, Synapse):
            container = target.post_syn
            self.syn = target
            self.controlling_class = target.name
            self.control_type = ControlType.SYNAPSE

        else:
            self._fail(ComponentError(
                self.name,
                f"can only control conductances or synapses, got {type(target).__name__}",
            ))
            return

        self._compartment = container
        container.add_mechanism(self)
        self.container_A = container.A
        logger.debug(
            "IntegralController connected to %s (A=%s)", self.controlling_class, self.container_A
        )

    # =========================================================================
    # Target discovery
    # =========================================================================

    def init(self) -> None:
        """Resolve the calcium set-point.

        Looks for a CalciumTarget mechanism in the target's compartment first;
        falls back to the compartment's legacy ``Ca_target`` field.
        """
        container = self.container
        if self.control_type == ControlType.UNSET or container is None:
            self._fail(ComponentError(
                self.name, "can only control conductances or synapses; connect() was never called"
            ))
            return

        providers = container.find_mechanisms(CALCIUM_TARGET_CLASS)
        if providers:
            if len(providers) > 1:
                logger.warning(
                    "IntegralController(%s) found %d CalciumTarget mechanisms; using the last",
                    self.controlling_class,
                    len(providers),
                )
            self.target = providers[-1].get_state(0)
            logger.debug(
                "IntegralController(%s) connected to [CalciumTarget] = %s",
                self.controlling_class,
                self.target,
            )
            return

        # Legacy models store the set-point on the compartment itself
        self.target = container.Ca_target
        logger.warning(
            "IntegralController(%s) found no CalciumTarget; using compartment Ca_target = %s",
            self.controlling_class,
            self.target,
        )

    # =========================================================================
    # Dynamics
    # =========================================================================

    def _integrate_mrna(self, Ca_prev: float, dt: float) -> None:
        Ca_error = self.target - Ca_prev
        self.m += (dt / self.tau_m) * Ca_error
        # mRNA levels below zero don't make any sense
        if self.m < 0:
            self.m = 0.0

    def integrate(self, dt: float) -> None:
        """Advance mRNA and the regulated strength by one step.

        Reads the compartment's ``Ca_prev`` (calcium from the previous step),
        never the value being computed in this step.
        """
        if self.control_type == ControlType.CHANNEL:
            if math.isnan(self.target):
                return
            channel = self.channel
            self._integrate_mrna(self._compartment.Ca_prev, dt)

            gdot = (dt / self.tau_g) * (self.m - channel.gbar * self.container_A)
            if channel.gbar + gdot / self.container_A < 0:
                channel.gbar = 0.0
            else:
                channel.gbar += gdot / self.container_A

        elif self.control_type == ControlType.SYNAPSE:
            if math.isnan(self.target):
                return
            syn = self.syn
            self._integrate_mrna(self._compartment.Ca_prev, dt)

            gdot = (dt / self.tau_g) * (self.m - syn.gmax * SYNAPSE_STRENGTH_SCALE)
            if syn.gmax + gdot * SYNAPSE_STRENGTH_GAIN < 0:
                syn.gmax = 0.0
            else:
                syn.gmax += gdot * SYNAPSE_STRENGTH_GAIN

        else:
            self._fail(ComponentError(
                self.name,
                "misconfigured controller. Make sure this object is connected "
                "to a conductance or synapse object",
            ))

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def strength(self) -> float:
        """Current ``gbar`` or ``gmax`` of the regulated target (NaN if unbound)."""
        if self.control_type == ControlType.CHANNEL:
            return self.channel.gbar
        if self.control_type == ControlType.SYNAPSE:
            return self.syn.gmax
        return math.nan

    def get_state(self, idx: int) -> float:
        """``1`` → mRNA level, ``2`` → regulated strength, otherwise NaN."""
        if idx == 1:
            return self.m
        if idx == 2:
            return self.strength
        return math.nan

    def get_full_state_size(self) -> int:
        return 2

    def get_full_state(self, buffer: np.ndarray, idx: int) -> int:
        """Write ``[m, strength]`` into ``buffer`` starting at ``idx``."""
        buffer[idx] = self.m
        idx += 1
        buffer[idx] = self.strength
        idx += 1
        return idx

    def get_diagnostics(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "control_type": self.control_type.name,
            "controlling": self.controlling_class,
            "target": self.target,
            "m": self.m,
            "strength": self.strength,
        }

    def __repr__(self) -> str:
        return (
            f"IntegralController(tau_m={self.tau_m}, tau_g={self.tau_g}, "
            f"m={self.m}, control_type={self.control_type.name})"
        )


__all__ = ["ControlType", "ControlTarget", "IntegralController"]
