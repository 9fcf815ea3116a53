"""Gating Kinetics - Pluggable Steady-State and Time-Constant Curves.

A channel variant is described entirely by a :class:`GatingKinetics` value:
its steady-state curves, its time-constant curves and the integer exponents
of its gating variables. One generic :class:`~homeostat.components.channels.conductance.Conductance`
integrates any of them, so adding a channel means adding a parameter set,
not a subclass.

**Curve Families**:
===================
Steady states are logistic (Boltzmann) functions of voltage:

.. math::

    x_\\infty(V) = \\frac{1}{1 + \\exp((V + V_{1/2}) / k)}

Negative ``k`` gives an activation curve (rising with V), positive ``k`` an
inactivation curve. Calcium-gated variants multiply the activation by a
saturating factor ``Ca / (Ca + K)``.

Time constants are differences of logistics:

.. math::

    \\tau_x(V) = \\tau_0 - \\frac{\\Delta\\tau}{1 + \\exp((V + V_{1/2}) / k)}

which stays strictly positive as long as ``tau_0 > delta_tau >= 0``.

All curves take and return torch tensors so that the same kinetics drive a
single compartment (0-d tensors) or a population (1-d tensors).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import torch

from homeostat.errors import ConfigurationError

SteadyStateFn = Callable[[torch.Tensor, torch.Tensor], torch.Tensor]
"""``x_inf(V, Ca)``. Voltage-only curves ignore ``Ca``."""

TimeConstantFn = Callable[[torch.Tensor], torch.Tensor]
"""``tau_x(V)`` in ms."""


# =============================================================================
# CURVE PRIMITIVES
# =============================================================================


@dataclass(frozen=True)
class Boltzmann:
    """Logistic steady-state curve ``1 / (1 + exp((V + v_half) / slope))``.

    Attributes:
        v_half: Voltage offset (mV). The curve crosses 0.5 at ``V = -v_half``.
        slope: Slope factor (mV). Negative for activation, positive for
            inactivation. Must be non-zero.
    """

    v_half: float
    slope: float

    def __post_init__(self) -> None:
        if self.slope == 0:
            raise ConfigurationError("Boltzmann slope must be non-zero")

    def __call__(self, V: torch.Tensor, Ca: Optional[torch.Tensor] = None) -> torch.Tensor:
        # sigmoid(-x) == 1 / (1 + exp(x)) without overflow for large |x|
        return torch.sigmoid(-(V + self.v_half) / self.slope)


@dataclass(frozen=True)
class TauCurve:
    """Difference-of-logistics time constant.

    ``offset - amplitude / (1 + exp((V + v_half) / slope))``
    """

    offset: float
    amplitude: float
    v_half: float
    slope: float

    def __post_init__(self) -> None:
        if self.slope == 0:
            raise ConfigurationError("TauCurve slope must be non-zero")
        if self.offset <= self.amplitude or self.amplitude < 0:
            raise ConfigurationError(
                f"TauCurve must stay positive: need offset > amplitude >= 0, "
                f"got offset={self.offset}, amplitude={self.amplitude}"
            )

    def __call__(self, V: torch.Tensor) -> torch.Tensor:
        return self.offset - self.amplitude * torch.sigmoid(-(V + self.v_half) / self.slope)


@dataclass(frozen=True)
class CalciumGated:
    """Voltage activation scaled by calcium saturation ``Ca / (Ca + k_half)``."""

    activation: Boltzmann
    k_half: float

    def __post_init__(self) -> None:
        if self.k_half <= 0:
            raise ConfigurationError(f"k_half must be positive, got {self.k_half}")

    def __call__(self, V: torch.Tensor, Ca: Optional[torch.Tensor] = None) -> torch.Tensor:
        if Ca is None:
            raise ConfigurationError("CalciumGated steady state needs a calcium concentration")
        return (Ca / (Ca + self.k_half)) * self.activation(V)


@dataclass(frozen=True)
class ConstantCurve:
    """Voltage-independent curve, usable as a steady state or time constant."""

    value: float

    def __call__(self, V: torch.Tensor, Ca: Optional[torch.Tensor] = None) -> torch.Tensor:
        return torch.full_like(V, self.value)


# =============================================================================
# KINETICS CAPABILITY VALUE
# =============================================================================


@dataclass(frozen=True)
class GatingKinetics:
    """Complete kinetic description of a channel variant.

    Attributes:
        name: Channel name, used by the registry and by controllers that log
            what they regulate.
        m_inf: Activation steady state ``m_inf(V, Ca)``
        tau_m: Activation time constant ``tau_m(V)`` (ms)
        p: Activation exponent in ``g = gbar * m**p * h**q``
        h_inf: Inactivation steady state, or None for non-inactivating
            channels (h is then fixed at 1)
        tau_h: Inactivation time constant, required iff ``h_inf`` is given
        q: Inactivation exponent (0 for non-inactivating channels)
        calcium_dependent: Whether any steady state reads calcium. Conductances
            hand calcium to the curves only when this is set.
        temperature_sensitive: Whether the channel applies Q factors. Channels
            that are not ignore ``delta_temp``.
    """

    name: str
    m_inf: SteadyStateFn
    tau_m: TimeConstantFn
    p: int
    h_inf: Optional[SteadyStateFn] = None
    tau_h: Optional[TimeConstantFn] = None
    q: int = 0
    calcium_dependent: bool = False
    temperature_sensitive: bool = False

    def __post_init__(self) -> None:
        if self.p < 0 or self.q < 0:
            raise ConfigurationError(
                f"{self.name}: gating exponents must be non-negative, got p={self.p}, q={self.q}"
            )
        if (self.h_inf is None) != (self.tau_h is None):
            raise ConfigurationError(
                f"{self.name}: h_inf and tau_h must be given together"
            )
        if self.h_inf is None and self.q != 0:
            raise ConfigurationError(
                f"{self.name}: q={self.q} given for a channel without inactivation"
            )

    @property
    def inactivates(self) -> bool:
        """Whether the channel has an inactivation gate."""
        return self.h_inf is not None

    def steady_state(
        self, V: torch.Tensor, Ca: Optional[torch.Tensor] = None
    ) -> tuple[torch.Tensor, Optional[torch.Tensor]]:
        """Return ``(m_inf, h_inf)``; ``h_inf`` is None without inactivation."""
        h_inf = self.h_inf(V, Ca) if self.h_inf is not None else None
        return self.m_inf(V, Ca), h_inf

    def time_constants(
        self, V: torch.Tensor
    ) -> tuple[torch.Tensor, Optional[torch.Tensor]]:
        """Return ``(tau_m, tau_h)``; ``tau_h`` is None without inactivation."""
        tau_h = self.tau_h(V) if self.tau_h is not None else None
        return self.tau_m(V), tau_h


def exponential_relaxation(
    x0: torch.Tensor,
    x_inf: torch.Tensor,
    tau: torch.Tensor,
    dt: float,
) -> torch.Tensor:
    """Advance ``dx/dt = (x_inf - x) / tau`` exactly over ``dt``.

    ``x_inf`` and ``tau`` are frozen at their current values for the step, so
    the multiplier ``exp(-dt / tau)`` lies in (0, 1] for any ``dt >= 0``.
    """
    return x_inf + (x0 - x_inf) * torch.exp(-dt / tau)


__all__ = [
    "SteadyStateFn",
    "TimeConstantFn",
    "Boltzmann",
    "TauCurve",
    "CalciumGated",
    "ConstantCurve",
    "GatingKinetics",
    "exponential_relaxation",
]
