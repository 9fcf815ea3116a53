"""Unit types for dimensional analysis in channel and controller computations.

Prevents mixing incompatible quantities (currents vs conductances vs voltages).
Uses Python's NewType for zero-runtime-cost type checking with mypy/pyright.

Example usage:
    from homeostat.units import ConductanceDensity, Voltage

    def ohmic(g: ConductanceDensity, v_mem: Voltage, e_rev: Voltage) -> CurrentDensity:
        return g * (e_rev - v_mem)
"""

from typing import NewType
import torch

# =============================================================================
# ELECTRICAL UNITS
# =============================================================================

Voltage = NewType("Voltage", float)
"""Membrane potential or reversal potential (mV)."""

ConductanceDensity = NewType("ConductanceDensity", float)
"""Channel conductance per unit membrane area (µS/mm²). Always ≥ 0."""

SynapticStrength = NewType("SynapticStrength", float)
"""Synaptic maximal conductance ``gmax`` (nS). Always ≥ 0."""

CurrentDensity = NewType("CurrentDensity", float)
"""Membrane current per unit area (nA/mm²).

Positive = depolarizing (inward for cations), derived as I = g × (E - V).
"""

# =============================================================================
# CHEMICAL AND GEOMETRIC UNITS
# =============================================================================

Concentration = NewType("Concentration", float)
"""Intracellular calcium concentration (µM)."""

Area = NewType("Area", float)
"""Membrane area (mm²)."""

# =============================================================================
# TENSOR TYPES
# =============================================================================

VoltageTensor = NewType("VoltageTensor", torch.Tensor)
"""Tensor of voltages."""

ConductanceTensor = NewType("ConductanceTensor", torch.Tensor)
"""Tensor of conductance densities."""

CurrentTensor = NewType("CurrentTensor", torch.Tensor)
"""Tensor of current densities."""

# =============================================================================
# TEMPORAL UNITS
# =============================================================================

TimeMS = NewType("TimeMS", float)
"""Time in milliseconds."""

# =============================================================================
# CONVERSION FUNCTIONS
# =============================================================================

def conductance_to_current(
    g: ConductanceDensity | ConductanceTensor,
    v_mem: Voltage | VoltageTensor,
    e_reversal: Voltage,
) -> CurrentDensity | CurrentTensor:
    """Convert conductance to current using Ohm's law.

    I = g × (E - V)

    Args:
        g: Conductance density
        v_mem: Membrane potential
        e_reversal: Reversal potential for this conductance

    Returns:
        Current density (type-checked)
    """
    if isinstance(g, torch.Tensor) or isinstance(v_mem, torch.Tensor):
        return CurrentTensor(g * (e_reversal - v_mem))
    return CurrentDensity(g * (e_reversal - v_mem))


# =============================================================================
# TYPE GUARDS
# =============================================================================

def is_conductance(value: float | torch.Tensor) -> bool:
    """Check if value is in valid conductance range (g ≥ 0)."""
    if isinstance(value, torch.Tensor):
        return bool((value >= 0).all())
    return value >= 0.0


def is_gating_variable(value: float | torch.Tensor) -> bool:
    """Check if value lies in the [0, 1] range of a gating variable."""
    if isinstance(value, torch.Tensor):
        return bool(((value >= 0) & (value <= 1)).all())
    return 0.0 <= value <= 1.0


__all__ = [
    # Basic units
    "Voltage",
    "ConductanceDensity",
    "SynapticStrength",
    "CurrentDensity",
    "Concentration",
    "Area",
    "TimeMS",
    # Tensor types
    "VoltageTensor",
    "ConductanceTensor",
    "CurrentTensor",
    # Conversions
    "conductance_to_current",
    # Guards
    "is_conductance",
    "is_gating_variable",
]
