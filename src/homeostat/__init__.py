"""
HOMEOSTAT - Gated Conductances and Integral Homeostatic Control

Integrates the gating dynamics of ion-channel conductances in a compartmental
neuron model and slowly regulates channel densities (or synaptic strengths)
toward a calcium set-point.

Quick Start:
============

    from homeostat import (
        ChannelConfig, Compartment, CompartmentConfig, ComponentRegistry,
        CalciumTarget, IntegralController, IntegralControllerConfig,
        CompartmentStepper,
    )

    comp = Compartment(CompartmentConfig(A=0.0628))
    kd = comp.add_conductance(
        ComponentRegistry.create("channel", "Kd", ChannelConfig(gbar=100.0, E=-80.0))
    )
    CalciumTarget(target=7.0).connect(comp)

    ctrl = IntegralController(IntegralControllerConfig(tau_m=5e3, tau_g=5e3))
    ctrl.connect(kd)

    stepper = CompartmentStepper(comp)
    stepper.init()
    stepper.step(V=-50.0, Ca=3.0)
"""

__version__ = "0.1.0"

# Configuration
from homeostat.config import (
    BaseConfig,
    ChannelConfig,
    CompartmentConfig,
    IntegralControllerConfig,
    SimulationConfig,
)

# Components
from homeostat.components import (
    ACURRENT,
    KCAAB,
    KD,
    KSLOW,
    Boltzmann,
    CalciumGated,
    Compartment,
    ConstantCurve,
    Conductance,
    GatingKinetics,
    Synapse,
    TauCurve,
)

# Mechanisms
from homeostat.mechanisms import (
    CalciumTarget,
    ControlType,
    IntegralController,
    Mechanism,
)

# Registry and driver
from homeostat.managers import ComponentRegistry, register_kinetics, register_mechanism
from homeostat.dynamics import CompartmentStepper

# Errors
from homeostat.errors import (
    ComponentError,
    ConfigurationError,
    ErrorCollector,
    HomeostatError,
    log_error,
    raise_error,
)

__all__ = [
    "__version__",
    # Configuration
    "BaseConfig",
    "ChannelConfig",
    "CompartmentConfig",
    "IntegralControllerConfig",
    "SimulationConfig",
    # Components
    "ACURRENT",
    "KCAAB",
    "KD",
    "KSLOW",
    "Boltzmann",
    "CalciumGated",
    "Compartment",
    "ConstantCurve",
    "Conductance",
    "GatingKinetics",
    "Synapse",
    "TauCurve",
    # Mechanisms
    "CalciumTarget",
    "ControlType",
    "IntegralController",
    "Mechanism",
    # Registry and driver
    "ComponentRegistry",
    "register_kinetics",
    "register_mechanism",
    "CompartmentStepper",
    # Errors
    "ComponentError",
    "ConfigurationError",
    "ErrorCollector",
    "HomeostatError",
    "log_error",
    "raise_error",
]
