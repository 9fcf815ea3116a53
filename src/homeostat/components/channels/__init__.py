"""
Gated conductances, kinetics primitives and the standard channel library.
"""

from homeostat.components.channels.kinetics import (
    Boltzmann,
    CalciumGated,
    ConstantCurve,
    GatingKinetics,
    TauCurve,
    exponential_relaxation,
)
from homeostat.components.channels.conductance import Conductance
from homeostat.components.channels.channel_library import (
    ACURRENT,
    KCAAB,
    KD,
    KSLOW,
)

__all__ = [
    # Kinetics
    "Boltzmann",
    "CalciumGated",
    "ConstantCurve",
    "GatingKinetics",
    "TauCurve",
    "exponential_relaxation",
    # Conductance
    "Conductance",
    # Library
    "ACURRENT",
    "KCAAB",
    "KD",
    "KSLOW",
]
