"""
Simulation and regulation constants for homeostat.

Time is in milliseconds, voltage in mV, calcium in µM and membrane area in
mm² throughout the package.
"""

from __future__ import annotations

# ============================================================================
# SIMULATION DEFAULTS
# ============================================================================

DEFAULT_DT_MS = 0.05
"""Default timestep in milliseconds (0.05 ms)."""

DEFAULT_SOLVER_ORDER = 0
"""Single explicit exponential step. The only order mechanisms support."""

# ============================================================================
# INTEGRAL CONTROL
# ============================================================================

DISABLED_TARGET = float("nan")
"""Calcium set-point sentinel meaning "regulation disabled"."""

DEFAULT_TAU_M = float("inf")
"""Default mRNA integration time constant (ms). Infinite = no regulation."""

DEFAULT_TAU_G = 5e3
"""Default conductance translation time constant (ms)."""

SYNAPSE_STRENGTH_SCALE = 1e-3
"""Scale from synaptic ``gmax`` to the controller's mRNA units.

Synaptic strengths are expressed in different units from channel densities,
so the synapse branch compares ``m`` against ``gmax * SYNAPSE_STRENGTH_SCALE``
and applies ``gdot * SYNAPSE_STRENGTH_GAIN`` back to ``gmax``.
"""

SYNAPSE_STRENGTH_GAIN = 1e3
"""Inverse of ``SYNAPSE_STRENGTH_SCALE``, applied to synaptic ``gdot``."""

CALCIUM_TARGET_CLASS = "CalciumTarget"
"""Mechanism name that identifies a calcium set-point provider."""

# ============================================================================
# COMPARTMENT DEFAULTS
# ============================================================================

DEFAULT_AREA_MM2 = 0.0628
"""Membrane area of a 0.1 mm long, 0.1 mm radius cylinder (mm²)."""

DEFAULT_V_MV = -60.0
"""Initial membrane potential (mV)."""

DEFAULT_CA_UM = 0.05
"""Initial intracellular calcium concentration (µM)."""
