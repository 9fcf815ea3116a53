"""Synapse - Minimal Strength Carrier for Homeostatic Control.

Only the maximal conductance ``gmax`` and the post-synaptic compartment are
modelled here. Synaptic kinetics belong to the host simulator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from homeostat.errors import validate_positive
from homeostat.units import SynapticStrength

if TYPE_CHECKING:
    from homeostat.components.compartment import Compartment


class Synapse:
    """Synapse onto a post-synaptic compartment.

    Args:
        gmax: Maximal synaptic conductance (nS, ≥ 0)
        post_syn: Post-synaptic compartment
        pre_syn: Pre-synaptic compartment, if any
    """

    name = "Synapse"

    def __init__(
        self,
        gmax: float,
        post_syn: "Compartment",
        pre_syn: Optional["Compartment"] = None,
    ):
        validate_positive(gmax, "gmax", allow_zero=True)
        self.gmax: SynapticStrength = SynapticStrength(float(gmax))
        self.post_syn = post_syn
        self.pre_syn = pre_syn

    @property
    def container(self) -> "Compartment":
        """The compartment whose calcium a controller on this synapse reads."""
        return self.post_syn

    def __repr__(self) -> str:
        return f"Synapse(gmax={self.gmax})"


__all__ = ["Synapse"]
