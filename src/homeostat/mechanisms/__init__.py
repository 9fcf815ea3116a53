"""
Compartment mechanisms: the mechanism contract, calcium set-point providers
and integral homeostatic controllers.
"""

from homeostat.mechanisms.base import Mechanism
from homeostat.mechanisms.calcium_target import CalciumTarget
from homeostat.mechanisms.integral_controller import (
    ControlTarget,
    ControlType,
    IntegralController,
)

__all__ = [
    "Mechanism",
    "CalciumTarget",
    "ControlTarget",
    "ControlType",
    "IntegralController",
]
