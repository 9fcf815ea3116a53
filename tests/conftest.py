"""Shared test fixtures and configuration."""

import pytest
import torch
import numpy as np

from homeostat import (
    ChannelConfig,
    Compartment,
    CompartmentConfig,
    ComponentRegistry,
    ErrorCollector,
)


@pytest.fixture(autouse=True)
def set_random_seed():
    """Ensure reproducible tests by setting all random seeds.

    This fixture runs automatically for every test to ensure deterministic behavior.
    """
    torch.manual_seed(42)
    np.random.seed(42)


@pytest.fixture
def dt():
    """Standard timestep (ms)."""
    return 0.05


@pytest.fixture
def voltages():
    """Voltage grid covering the modeled range (mV)."""
    return torch.linspace(-100.0, 60.0, 321, dtype=torch.float64)


@pytest.fixture
def compartment():
    """Unit-area compartment with calcium at rest."""
    return Compartment(CompartmentConfig(A=1.0, V0=-60.0, Ca0=0.0))


@pytest.fixture
def kd_channel(compartment):
    """Delayed rectifier inserted in the unit compartment."""
    channel = ComponentRegistry.create(
        "channel", "Kd", ChannelConfig(gbar=0.1, E=-80.0, m0=0.0)
    )
    return compartment.add_conductance(channel)


@pytest.fixture
def collector():
    """Error reporter that records instead of raising."""
    return ErrorCollector()
