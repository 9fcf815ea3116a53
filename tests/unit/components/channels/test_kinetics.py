"""Tests for steady-state and time-constant curves and the exponential update."""

import math

import pytest
import torch

from homeostat import ConfigurationError
from homeostat.components.channels import (
    ACURRENT,
    KCAAB,
    KD,
    KSLOW,
    Boltzmann,
    CalciumGated,
    ConstantCurve,
    GatingKinetics,
    TauCurve,
    exponential_relaxation,
)

LIBRARY = [ACURRENT, KCAAB, KD, KSLOW]


@pytest.mark.unit
class TestCurvePrimitives:
    """Boltzmann, TauCurve and CalciumGated shapes."""

    def test_boltzmann_half_point(self):
        """Curve crosses 0.5 at V = -v_half."""
        curve = Boltzmann(v_half=27.2, slope=-8.7)
        assert curve(torch.tensor(-27.2, dtype=torch.float64)).item() == pytest.approx(0.5)

    def test_boltzmann_matches_closed_form(self):
        curve = Boltzmann(v_half=56.9, slope=4.9)
        V = -40.0
        expected = 1.0 / (1.0 + math.exp((V + 56.9) / 4.9))
        assert curve(torch.tensor(V, dtype=torch.float64)).item() == pytest.approx(expected)

    def test_activation_rises_inactivation_falls(self, voltages):
        act = Boltzmann(v_half=14.2, slope=-11.8)(voltages)
        inact = Boltzmann(v_half=56.9, slope=4.9)(voltages)
        assert (act[1:] > act[:-1]).all()
        assert (inact[1:] < inact[:-1]).all()

    def test_boltzmann_does_not_overflow(self):
        curve = Boltzmann(v_half=0.0, slope=-1.0)
        out = curve(torch.tensor([-1e4, 1e4], dtype=torch.float64))
        assert torch.isfinite(out).all()

    def test_tau_curve_matches_closed_form(self):
        curve = TauCurve(offset=7.2, amplitude=6.4, v_half=28.3, slope=-19.2)
        V = -10.0
        expected = 7.2 - 6.4 / (1.0 + math.exp(-(V + 28.3) / 19.2))
        assert curve(torch.tensor(V, dtype=torch.float64)).item() == pytest.approx(expected)

    def test_tau_curve_rejects_non_positive_shape(self):
        with pytest.raises(ConfigurationError):
            TauCurve(offset=1.0, amplitude=2.0, v_half=0.0, slope=1.0)

    def test_zero_slope_rejected(self):
        with pytest.raises(ConfigurationError):
            Boltzmann(v_half=0.0, slope=0.0)

    def test_calcium_gating_saturates(self):
        gate = CalciumGated(activation=Boltzmann(v_half=51.0, slope=-4.0), k_half=30.0)
        V = torch.tensor(0.0, dtype=torch.float64)
        low = gate(V, torch.tensor(1.0, dtype=torch.float64))
        half = gate(V, torch.tensor(30.0, dtype=torch.float64))
        high = gate(V, torch.tensor(1e6, dtype=torch.float64))
        assert low < half < high
        assert half.item() == pytest.approx(0.5 * gate.activation(V).item())

    def test_calcium_gating_requires_calcium(self):
        gate = CalciumGated(activation=Boltzmann(v_half=51.0, slope=-4.0), k_half=30.0)
        with pytest.raises(ConfigurationError):
            gate(torch.tensor(0.0))


@pytest.mark.unit
class TestLibraryRanges:
    """Every preset stays inside its physical range over the modeled domain."""

    @pytest.mark.parametrize("kinetics", LIBRARY, ids=lambda k: k.name)
    def test_steady_states_strictly_inside_unit_interval(self, kinetics, voltages):
        Ca = torch.full_like(voltages, 5.0)
        m_inf, h_inf = kinetics.steady_state(voltages, Ca)
        assert ((m_inf > 0) & (m_inf < 1)).all()
        if h_inf is not None:
            assert ((h_inf > 0) & (h_inf < 1)).all()

    @pytest.mark.parametrize("kinetics", LIBRARY, ids=lambda k: k.name)
    def test_time_constants_positive(self, kinetics, voltages):
        tau_m, tau_h = kinetics.time_constants(voltages)
        assert (tau_m > 0).all()
        if tau_h is not None:
            assert (tau_h > 0).all()

    def test_exponents(self):
        assert (ACURRENT.p, ACURRENT.q) == (3, 1)
        assert (KD.p, KD.q) == (4, 0)
        assert not KD.inactivates
        assert ACURRENT.inactivates


@pytest.mark.unit
class TestGatingKineticsValidation:

    def test_h_inf_without_tau_h_rejected(self):
        with pytest.raises(ConfigurationError):
            GatingKinetics(
                name="Broken",
                m_inf=ConstantCurve(0.5),
                tau_m=ConstantCurve(1.0),
                p=1,
                h_inf=ConstantCurve(0.5),
                q=1,
            )

    def test_q_without_inactivation_rejected(self):
        with pytest.raises(ConfigurationError):
            GatingKinetics(
                name="Broken",
                m_inf=ConstantCurve(0.5),
                tau_m=ConstantCurve(1.0),
                p=1,
                q=2,
            )


@pytest.mark.unit
class TestExponentialRelaxation:
    """Exactness, fixed point and convergence of the update law."""

    def test_worked_example(self):
        """m_inf=0.5, tau=10, m0=0, dt=10 gives 0.5 * (1 - e^-1)."""
        m = exponential_relaxation(
            torch.tensor(0.0, dtype=torch.float64),
            torch.tensor(0.5, dtype=torch.float64),
            torch.tensor(10.0, dtype=torch.float64),
            dt=10.0,
        )
        assert m.item() == pytest.approx(0.3161, abs=1e-4)

    @pytest.mark.parametrize("dt", [0.0, 0.01, 1.0, 1e3])
    def test_fixed_point(self, dt):
        x_inf = torch.tensor(0.37, dtype=torch.float64)
        tau = torch.tensor(4.0, dtype=torch.float64)
        assert exponential_relaxation(x_inf, x_inf, tau, dt).item() == pytest.approx(0.37)

    def test_huge_step_lands_on_steady_state(self):
        out = exponential_relaxation(
            torch.tensor(1.0, dtype=torch.float64),
            torch.tensor(0.2, dtype=torch.float64),
            torch.tensor(3.0, dtype=torch.float64),
            dt=1e9,
        )
        assert out.item() == pytest.approx(0.2)

    def test_matches_small_step_euler(self):
        """Exact update agrees with forward Euler to first order in dt."""
        x0 = torch.tensor(0.1, dtype=torch.float64)
        x_inf = torch.tensor(0.9, dtype=torch.float64)
        tau = torch.tensor(5.0, dtype=torch.float64)
        dt = 1e-4
        exact = exponential_relaxation(x0, x_inf, tau, dt)
        euler = x0 + dt * (x_inf - x0) / tau
        torch.testing.assert_close(exact, euler, rtol=0.0, atol=1e-9)
