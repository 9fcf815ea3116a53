"""
Step drivers for compartments.
"""

from homeostat.dynamics.stepping import CompartmentStepper

__all__ = ["CompartmentStepper"]
