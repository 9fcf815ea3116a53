"""Gated Conductance - Generic Hodgkin-Huxley Style Channel.

This module implements one conductance type that integrates any channel
variant described by a :class:`GatingKinetics` value.

**Gating Dynamics**:
====================
Each gating variable relaxes toward its steady state:

.. math::

    \\frac{dx}{dt} = \\frac{x_\\infty(V, Ca) - x}{\\tau_x(V)}

With ``x_inf`` and ``tau_x`` frozen at the current voltage for the step, the
exact update is

.. math::

    x(t + dt) = x_\\infty + (x(t) - x_\\infty) e^{-dt / \\tau_x}

which is unconditionally stable and exact as dt → 0.

**Conductance**:
================
.. math::

    g = Q_g^{\\Delta T} \\cdot \\bar{g} \\cdot m^p h^q

Temperature-sensitive channels also speed up their gates by
``Q_tau_x ** delta_temp``. The temperature offset is supplied by the caller
at every step.

**Ownership**:
==============
A compartment owns its conductances (``nn.ModuleList``). The conductance
keeps only a weak reference back to its compartment, so the module tree stays
acyclic.
"""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Optional

import torch
import torch.nn as nn

from homeostat.components.channels.kinetics import GatingKinetics, exponential_relaxation
from homeostat.config import ChannelConfig
from homeostat.errors import ComponentError, validate_finite, validate_positive
from homeostat.units import (
    ConductanceDensity,
    CurrentTensor,
    VoltageTensor,
    conductance_to_current,
)

if TYPE_CHECKING:
    from homeostat.components.compartment import Compartment

logger = logging.getLogger(__name__)


class Conductance(nn.Module):
    """Voltage- (and optionally calcium-) gated conductance.

    Args:
        kinetics: Channel variant to integrate
        config: ChannelConfig with gbar, E, initial gates and Q factors

    Attributes:
        gbar: Maximal conductance density. Plain float, written by at most
            one integral controller.
        E: Reversal potential (mV)
        m, h: Gating buffers
        g: Instantaneous conductance buffer
    """

    def __init__(
        self,
        kinetics: GatingKinetics,
        config: Optional[ChannelConfig] = None,
    ):
        super().__init__()
        self.kinetics = kinetics
        self.config = config or ChannelConfig()

        validate_positive(self.config.gbar, f"{kinetics.name}.gbar", allow_zero=True)
        validate_finite(self.config.E, f"{kinetics.name}.E")

        self.gbar: ConductanceDensity = ConductanceDensity(float(self.config.gbar))
        self.E: float = float(self.config.E)

        self.Q_g = self.config.Q_g
        self.Q_tau_m = self.config.Q_tau_m
        self.Q_tau_h = self.config.Q_tau_h

        device = self.config.get_torch_device()
        dtype = self.config.get_torch_dtype()
        h0 = self.config.h0 if kinetics.inactivates else 1.0

        self.register_buffer("m", torch.tensor(self.config.m0, dtype=dtype, device=device))
        self.register_buffer("h", torch.tensor(h0, dtype=dtype, device=device))
        self.register_buffer("g", torch.tensor(0.0, dtype=dtype, device=device))
        self.m: torch.Tensor  # Type annotations for mypy
        self.h: torch.Tensor
        self.g: torch.Tensor
        self._update_g(delta_temp=0.0)

        self._container_ref: Optional[weakref.ReferenceType[Compartment]] = None

    @property
    def name(self) -> str:
        """Channel name (from kinetics)."""
        return self.kinetics.name

    @property
    def container(self) -> Optional["Compartment"]:
        """Compartment this channel is inserted in, or None."""
        if self._container_ref is None:
            return None
        return self._container_ref()

    def connect(self, compartment: "Compartment") -> None:
        """Bind the owning compartment.

        Idempotent for the same compartment.

        Raises:
            ComponentError: If already bound to a different compartment
        """
        current = self.container
        if current is compartment:
            return
        if current is not None:
            raise ComponentError(
                self.name, "already inserted in another compartment"
            )
        self._container_ref = weakref.ref(compartment)
        logger.debug("%s connected to compartment", self.name)

    def _as_tensor(self, value: float | torch.Tensor) -> torch.Tensor:
        return torch.as_tensor(value, dtype=self.m.dtype, device=self.m.device)

    def _update_g(self, delta_temp: float) -> None:
        k = self.kinetics
        g = self.gbar * self.m.pow(k.p)
        if k.inactivates:
            g = g * self.h.pow(k.q)
        if k.temperature_sensitive:
            g = g * self.Q_g ** delta_temp
        self.g = g

    @torch.no_grad()
    def integrate(
        self,
        V: float | torch.Tensor,
        Ca: Optional[float | torch.Tensor],
        dt: float,
        delta_temp: float = 0.0,
    ) -> torch.Tensor:
        """Advance gating variables by one step and recompute ``g``.

        Args:
            V: Membrane potential (mV)
            Ca: Calcium concentration (µM). Read only by calcium-dependent
                kinetics; may be None for the others.
            dt: Timestep (ms, ≥ 0)
            delta_temp: Temperature offset for Q-factor scaling

        Returns:
            Instantaneous conductance g

        Raises:
            ComponentError: If the kinetics are calcium-dependent and Ca is None
        """
        k = self.kinetics
        V_t = self._as_tensor(V)
        Ca_t = None
        if k.calcium_dependent:
            if Ca is None:
                raise ComponentError(self.name, "calcium-dependent channel integrated without Ca")
            Ca_t = self._as_tensor(Ca)

        m_inf, h_inf = k.steady_state(V_t, Ca_t)
        tau_m, tau_h = k.time_constants(V_t)

        dt_m = dt
        dt_h = dt
        if k.temperature_sensitive:
            dt_m = dt * self.Q_tau_m ** delta_temp
            dt_h = dt * self.Q_tau_h ** delta_temp

        self.m = exponential_relaxation(self.m, m_inf, tau_m, dt_m)
        if h_inf is not None and tau_h is not None:
            self.h = exponential_relaxation(self.h, h_inf, tau_h, dt_h)

        self._update_g(delta_temp)
        return self.g

    def current(self, V: float | VoltageTensor) -> CurrentTensor:
        """Ohmic current density ``g * (E - V)`` at the present conductance."""
        return CurrentTensor(conductance_to_current(self.g, V, self.E))

    def reset_state(self) -> None:
        """Restore the initial gating state from config."""
        self.m = torch.full_like(self.m, self.config.m0)
        h0 = self.config.h0 if self.kinetics.inactivates else 1.0
        self.h = torch.full_like(self.h, h0)
        self._update_g(delta_temp=0.0)

    def extra_repr(self) -> str:
        return f"name={self.name}, gbar={self.gbar}, E={self.E}"


__all__ = ["Conductance"]
