"""
Configuration dataclasses for homeostat components.
"""

from homeostat.config.base import BaseConfig
from homeostat.config.component_configs import (
    ChannelConfig,
    CompartmentConfig,
    IntegralControllerConfig,
    SimulationConfig,
)

__all__ = [
    "BaseConfig",
    "ChannelConfig",
    "CompartmentConfig",
    "IntegralControllerConfig",
    "SimulationConfig",
]
