"""
Standard channel kinetics used in stomatogastric and crab neuron models.

Each preset is a :class:`GatingKinetics` value registered under its channel
name, so models can build channels by name:

    channel = ComponentRegistry.create("channel", "ACurrent", ChannelConfig(gbar=1.0, E=-80.0))

Sources:
========
- ACurrent: Liu et al. (1998), J Neurosci 18(7):2309
- KCaAB, Kd: Soto-Treviño et al. (2005), J Neurophysiol 94(1):590
- Kslow: Lin et al. (2012), J Neurosci 32(21):7267
"""

from __future__ import annotations

from homeostat.components.channels.kinetics import (
    Boltzmann,
    CalciumGated,
    GatingKinetics,
    TauCurve,
)
from homeostat.managers.component_registry import register_kinetics

# =============================================================================
# POTASSIUM CURRENTS
# =============================================================================

ACURRENT = register_kinetics(
    GatingKinetics(
        name="ACurrent",
        m_inf=Boltzmann(v_half=27.2, slope=-8.7),
        tau_m=TauCurve(offset=11.6, amplitude=10.4, v_half=32.9, slope=-15.2),
        p=3,
        h_inf=Boltzmann(v_half=56.9, slope=4.9),
        tau_h=TauCurve(offset=38.6, amplitude=29.2, v_half=38.9, slope=-26.5),
        q=1,
    ),
    aliases=["A", "Ka"],
    description="Transient A-type potassium current",
)
"""Transient potassium current, m³h."""

KCAAB = register_kinetics(
    GatingKinetics(
        name="KCaAB",
        m_inf=CalciumGated(activation=Boltzmann(v_half=51.0, slope=-4.0), k_half=30.0),
        tau_m=TauCurve(offset=90.3, amplitude=75.09, v_half=46.0, slope=-22.7),
        p=4,
        calcium_dependent=True,
    ),
    description="Calcium-dependent potassium current (AB/PD)",
)
"""Calcium-activated potassium current, m⁴."""

KD = register_kinetics(
    GatingKinetics(
        name="Kd",
        m_inf=Boltzmann(v_half=14.2, slope=-11.8),
        tau_m=TauCurve(offset=7.2, amplitude=6.4, v_half=28.3, slope=-19.2),
        p=4,
        temperature_sensitive=True,
    ),
    aliases=["DelayedRectifier"],
    description="Delayed rectifier potassium current with Q10 scaling",
)
"""Delayed rectifier potassium current, m⁴, temperature-sensitive."""

KSLOW = register_kinetics(
    GatingKinetics(
        name="Kslow",
        m_inf=Boltzmann(v_half=12.85, slope=-19.91),
        tau_m=TauCurve(offset=2.03, amplitude=1.96, v_half=-29.83, slope=3.32),
        p=4,
    ),
    description="Slow potassium current",
)
"""Slow potassium current, m⁴."""


__all__ = ["ACURRENT", "KCAAB", "KD", "KSLOW"]
