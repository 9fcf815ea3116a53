"""
Component registry and factories.
"""

from homeostat.managers.component_registry import (
    ComponentRegistry,
    register_kinetics,
    register_mechanism,
)

__all__ = [
    "ComponentRegistry",
    "register_kinetics",
    "register_mechanism",
]
