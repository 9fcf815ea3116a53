"""
Configuration dataclasses for channels, compartments, mechanisms and the
step driver.

These hold the numeric construction-time parameters a model-description
loader supplies. Range checks happen in the components themselves so that
they go through each component's error reporter.
"""

from __future__ import annotations

from dataclasses import dataclass

from homeostat.config.base import BaseConfig
from homeostat.constants import (
    DEFAULT_AREA_MM2,
    DEFAULT_CA_UM,
    DEFAULT_DT_MS,
    DEFAULT_SOLVER_ORDER,
    DEFAULT_TAU_G,
    DEFAULT_TAU_M,
    DEFAULT_V_MV,
    DISABLED_TARGET,
)


@dataclass
class ChannelConfig(BaseConfig):
    """Configuration for a gated conductance.

    Attributes:
        gbar: Maximal conductance density (µS/mm², ≥ 0)
        E: Reversal potential (mV)
        m0: Initial activation
        h0: Initial inactivation. Ignored (fixed at 1) for channels
            without inactivation.

        Q_g: Q10-style factor applied to gbar as ``Q_g ** delta_temp``
        Q_tau_m: Factor speeding up activation as ``Q_tau_m ** delta_temp``
        Q_tau_h: Factor speeding up inactivation as ``Q_tau_h ** delta_temp``
            All three default to 1.0, i.e. temperature-independent.
    """

    gbar: float = 0.0
    E: float = 0.0
    m0: float = 0.0
    h0: float = 1.0

    # Temperature scaling
    Q_g: float = 1.0
    Q_tau_m: float = 1.0
    Q_tau_h: float = 1.0


@dataclass
class CompartmentConfig(BaseConfig):
    """Configuration for a single compartment.

    Attributes:
        A: Membrane area (mm², > 0)
        V0: Initial membrane potential (mV)
        Ca0: Initial calcium concentration (µM). Also the initial ``Ca_prev``.
        Ca_target: Legacy calcium set-point read by controllers when no
            CalciumTarget mechanism is present. NaN disables regulation.
    """

    A: float = DEFAULT_AREA_MM2
    V0: float = DEFAULT_V_MV
    Ca0: float = DEFAULT_CA_UM
    Ca_target: float = DISABLED_TARGET


@dataclass
class IntegralControllerConfig:
    """Configuration for the integral homeostatic controller.

    Attributes:
        tau_m: mRNA integration time constant (ms). ``inf`` turns
            regulation off since the error is scaled by dt / tau_m.
        tau_g: Translation time constant from mRNA to conductance (ms, > 0)
        m0: Initial mRNA level (≥ 0)
    """

    tau_m: float = DEFAULT_TAU_M
    tau_g: float = DEFAULT_TAU_G
    m0: float = 0.0


@dataclass
class SimulationConfig:
    """Configuration for the clamped step driver.

    Attributes:
        dt_ms: Timestep (ms)
        delta_temp: Temperature offset passed to every channel
        solver_order: Solver order every mechanism must support
    """

    dt_ms: float = DEFAULT_DT_MS
    delta_temp: float = 0.0
    solver_order: int = DEFAULT_SOLVER_ORDER
