"""
Model components: channels, compartments and synapses.
"""

from homeostat.components.channels import (
    ACURRENT,
    KCAAB,
    KD,
    KSLOW,
    Boltzmann,
    CalciumGated,
    ConstantCurve,
    Conductance,
    GatingKinetics,
    TauCurve,
)
from homeostat.components.compartment import Compartment
from homeostat.components.synapse import Synapse

__all__ = [
    "ACURRENT",
    "KCAAB",
    "KD",
    "KSLOW",
    "Boltzmann",
    "CalciumGated",
    "ConstantCurve",
    "Conductance",
    "GatingKinetics",
    "TauCurve",
    "Compartment",
    "Synapse",
]
