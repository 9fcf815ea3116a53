"""Single Compartment - Container for Channels and Mechanisms.

The compartment is the collaborator both channels and mechanisms talk to. It
owns its conductances (as an ``nn.ModuleList``, so gating state shows up in
``state_dict``) and an ordered list of mechanisms, and exposes the membrane
area ``A`` and the previous step's calcium ``Ca_prev``.

Advancing V and Ca is the job of an external solver. The compartment only
stores the values the solver publishes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

import torch
import torch.nn as nn

from homeostat.components.channels.conductance import Conductance
from homeostat.config import CompartmentConfig
from homeostat.errors import ComponentError, validate_finite, validate_positive
from homeostat.units import Area, Concentration, CurrentTensor, Voltage

if TYPE_CHECKING:
    from homeostat.mechanisms.base import Mechanism

logger = logging.getLogger(__name__)


class Compartment(nn.Module):
    """Isopotential compartment holding channels and mechanisms.

    Args:
        config: CompartmentConfig with area, initial V/Ca and legacy Ca target

    Attributes:
        A: Membrane area (mm²)
        V: Membrane potential published by the solver (mV)
        Ca: Calcium concentration for the step being computed (µM)
        Ca_prev: Calcium concentration at the end of the previous step (µM)
        Ca_target: Legacy calcium set-point (NaN if unset)
        conductances: Owned channels, in insertion order
        mechanisms: Owned mechanisms, in registration order
    """

    def __init__(self, config: Optional[CompartmentConfig] = None):
        super().__init__()
        self.config = config or CompartmentConfig()

        validate_positive(self.config.A, "A")
        validate_finite(self.config.V0, "V0")
        validate_finite(self.config.Ca0, "Ca0")

        self.A: Area = Area(float(self.config.A))
        self.V: Voltage = Voltage(float(self.config.V0))
        self.Ca: Concentration = Concentration(float(self.config.Ca0))
        self.Ca_prev: Concentration = Concentration(float(self.config.Ca0))
        self.Ca_target: Concentration = Concentration(float(self.config.Ca_target))

        self.conductances = nn.ModuleList()
        self.mechanisms: List[Mechanism] = []

    # =========================================================================
    # Channels
    # =========================================================================

    def add_conductance(self, channel: Conductance) -> Conductance:
        """Insert a channel into this compartment and return it."""
        channel.connect(self)
        if not any(c is channel for c in self.conductances):
            self.conductances.append(channel)
        return channel

    def get_conductance(self, name: str) -> Conductance:
        """Look up a channel by name.

        Raises:
            ComponentError: If no channel with that name is inserted
        """
        for channel in self.conductances:
            if channel.name == name:
                return channel
        raise ComponentError("Compartment", f"no conductance named '{name}'")

    def _zero(self) -> torch.Tensor:
        return torch.tensor(
            0.0,
            dtype=self.config.get_torch_dtype(),
            device=self.config.get_torch_device(),
        )

    def total_conductance(self) -> torch.Tensor:
        """Sum of the instantaneous conductances of all channels."""
        if len(self.conductances) == 0:
            return self._zero()
        return torch.stack([c.g for c in self.conductances]).sum(dim=0)

    def membrane_current(self, V: Optional[float] = None) -> CurrentTensor:
        """Total ionic current density ``sum(g_i * (E_i - V))``."""
        V = self.V if V is None else V
        if len(self.conductances) == 0:
            return CurrentTensor(self._zero())
        return CurrentTensor(
            torch.stack([c.current(V) for c in self.conductances]).sum(dim=0)
        )

    # =========================================================================
    # Mechanisms
    # =========================================================================

    def add_mechanism(self, mechanism: "Mechanism") -> None:
        """Register a mechanism with this compartment.

        Registering the same instance twice is a no-op.
        """
        if any(m is mechanism for m in self.mechanisms):
            return
        self.mechanisms.append(mechanism)
        logger.debug("Compartment registered mechanism %s", mechanism.name)

    @property
    def n_mech(self) -> int:
        """Number of registered mechanisms."""
        return len(self.mechanisms)

    def get_mechanism(self, idx: int) -> "Mechanism":
        """Mechanism at registration index ``idx``."""
        return self.mechanisms[idx]

    def find_mechanisms(self, name: str) -> List["Mechanism"]:
        """All mechanisms whose type name is ``name``, in registration order."""
        return [m for m in self.mechanisms if m.name == name]

    def extra_repr(self) -> str:
        return f"A={self.A}, n_mech={self.n_mech}"


__all__ = ["Compartment"]
