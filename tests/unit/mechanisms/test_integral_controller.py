"""Tests for the integral homeostatic controller."""

import gc
import inspect
import logging
import math
import typing

import numpy as np
import pytest

from homeostat import (
    CalciumTarget,
    ChannelConfig,
    Compartment,
    CompartmentConfig,
    ComponentError,
    ComponentRegistry,
    ConfigurationError,
    Conductance,
    ControlType,
    ErrorCollector,
    IntegralController,
    IntegralControllerConfig,
    Synapse,
)


def make_channel(comp, gbar=0.1):
    channel = ComponentRegistry.create("channel", "Kd", ChannelConfig(gbar=gbar, E=-80.0))
    return comp.add_conductance(channel)


@pytest.mark.unit
class TestConstruction:

    def test_defaults(self):
        ctrl = IntegralController()
        assert ctrl.tau_m == math.inf
        assert ctrl.tau_g == 5e3
        assert ctrl.m == 0.0
        assert ctrl.control_type == ControlType.UNSET
        assert ctrl.name == "IntegralController"

    @pytest.mark.parametrize("tau_g", [0.0, -1.0])
    def test_non_positive_tau_g_rejected(self, tau_g):
        with pytest.raises(ConfigurationError, match="tau_g"):
            IntegralController(IntegralControllerConfig(tau_g=tau_g))

    def test_non_positive_tau_g_reported_to_hook(self, collector):
        IntegralController(IntegralControllerConfig(tau_g=0.0), on_error=collector)
        assert len(collector) == 1
        assert isinstance(collector.errors[0], ConfigurationError)

    def test_negative_initial_m_rejected(self):
        with pytest.raises(ConfigurationError, match="m0"):
            IntegralController(IntegralControllerConfig(tau_g=1.0, m0=-0.5))

    def test_infinite_tau_m_allowed(self):
        ctrl = IntegralController(IntegralControllerConfig(tau_m=math.inf, tau_g=10.0))
        assert ctrl.tau_m == math.inf

    def test_registry_creates_controller(self):
        ctrl = ComponentRegistry.create(
            "mechanism", "IntegralController", IntegralControllerConfig(tau_g=100.0)
        )
        assert isinstance(ctrl, IntegralController)
        assert ctrl.tau_g == 100.0

    def test_empty_collector_is_used_as_reporter(self, compartment):
        """A collector with no errors yet still receives reports."""
        collector = ErrorCollector()
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0), on_error=collector)
        ctrl.connect(compartment)
        ctrl.init()
        ctrl.integrate(dt=1.0)
        ctrl.check_solvers(1)
        assert len(collector) == 4
        assert isinstance(collector.errors[-1], ConfigurationError)


@pytest.mark.unit
class TestBinding:
    """State machine UNSET → {CHANNEL, SYNAPSE}, exactly once."""

    def test_connect_to_channel(self, compartment, kd_channel):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(kd_channel)

        assert ctrl.control_type == ControlType.CHANNEL
        assert ctrl.container is compartment
        assert ctrl.container_A == compartment.A
        assert ctrl.controlling_class == "Kd"
        assert compartment.mechanisms == [ctrl]

    def test_connect_to_synapse(self):
        post = Compartment(CompartmentConfig(A=0.5))
        syn = Synapse(gmax=10.0, post_syn=post)
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(syn)

        assert ctrl.control_type == ControlType.SYNAPSE
        assert ctrl.container is post
        assert ctrl.container_A == 0.5
        assert post.get_mechanism(0) is ctrl

    def test_connect_to_compartment_rejected(self, compartment):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        with pytest.raises(ComponentError, match="compartment"):
            ctrl.connect(compartment)
        assert ctrl.control_type == ControlType.UNSET
        assert compartment.n_mech == 0

    def test_channel_bound_controller_rejects_synapse(self, compartment, kd_channel):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(kd_channel)
        syn = Synapse(gmax=1.0, post_syn=compartment)
        with pytest.raises(ComponentError):
            ctrl.connect(syn)
        assert ctrl.control_type == ControlType.CHANNEL
        assert ctrl.syn is None

    def test_channel_bound_controller_rejects_compartment(self, compartment, kd_channel):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(kd_channel)
        with pytest.raises(ComponentError):
            ctrl.connect(compartment)
        assert ctrl.control_type == ControlType.CHANNEL

    def test_rebinding_reported_to_hook(self, compartment, kd_channel, collector):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0), on_error=collector)
        ctrl.connect(kd_channel)
        ctrl.connect(make_channel(compartment))
        assert len(collector) == 1
        assert ctrl.channel is kd_channel
        assert compartment.n_mech == 1

    def test_uninserted_channel_rejected(self):
        channel = ComponentRegistry.create("channel", "Kd", ChannelConfig(gbar=1.0))
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        with pytest.raises(ComponentError, match="inserted"):
            ctrl.connect(channel)

    def test_unsupported_target_rejected(self):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        with pytest.raises(ComponentError):
            ctrl.connect("Kd")

    def test_connect_accepts_control_targets(self):
        from homeostat.mechanisms import ControlTarget

        assert set(typing.get_args(ControlTarget)) == {Conductance, Synapse}
        annotation = inspect.signature(IntegralController.connect).parameters["target"].annotation
        assert annotation in ("ControlTarget", ControlTarget)

    def test_controller_keeps_compartment_alive(self):
        """Dropping every outside reference to the compartment leaves the controller working."""

        def build():
            comp = Compartment(CompartmentConfig(A=1.0, Ca0=0.0))
            comp.Ca_target = 10.0
            kd = make_channel(comp, gbar=0.1)
            ctrl = IntegralController(IntegralControllerConfig(tau_m=100.0, tau_g=1000.0))
            ctrl.connect(kd)
            return kd, ctrl

        kd, ctrl = build()
        gc.collect()

        assert ctrl.container is not None
        assert kd.container is ctrl.container
        ctrl.init()
        ctrl.integrate(dt=1.0)
        assert ctrl.target == 10.0
        assert ctrl.m == pytest.approx(0.1)


@pytest.mark.unit
class TestTargetDiscovery:
    """CalciumTarget mechanism first, legacy compartment field second."""

    def test_reads_calcium_target_mechanism(self, compartment, kd_channel):
        CalciumTarget(target=7.5).connect(compartment)
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(kd_channel)
        ctrl.init()
        assert ctrl.target == 7.5

    def test_mechanism_takes_precedence_over_legacy_field(self, kd_channel, compartment):
        compartment.Ca_target = 3.0
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(kd_channel)
        CalciumTarget(target=9.0).connect(compartment)
        ctrl.init()
        assert ctrl.target == 9.0

    def test_falls_back_to_legacy_field(self, compartment, kd_channel):
        compartment.Ca_target = 4.0
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(kd_channel)
        ctrl.init()
        assert ctrl.target == 4.0

    def test_no_target_anywhere_disables(self, compartment, kd_channel):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(kd_channel)
        ctrl.init()
        assert math.isnan(ctrl.target)

    def test_last_provider_wins(self, compartment, kd_channel, caplog):
        CalciumTarget(target=1.0).connect(compartment)
        CalciumTarget(target=2.0).connect(compartment)
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(kd_channel)
        with caplog.at_level(logging.WARNING):
            ctrl.init()
        assert ctrl.target == 2.0
        assert "2 CalciumTarget" in caplog.text

    def test_synapse_reads_post_synaptic_target(self):
        post = Compartment(CompartmentConfig(A=1.0))
        CalciumTarget(target=6.0).connect(post)
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(Synapse(gmax=1.0, post_syn=post))
        ctrl.init()
        assert ctrl.target == 6.0

    def test_init_unbound_fails(self):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        with pytest.raises(ComponentError):
            ctrl.init()


@pytest.mark.unit
class TestChannelRegulation:

    def test_end_to_end_single_step(self):
        """tau_m=100, tau_g=1000, gbar=0.1, A=1, target 10, Ca_prev 0, dt=1."""
        comp = Compartment(CompartmentConfig(A=1.0, Ca0=0.0))
        channel = make_channel(comp, gbar=0.1)
        CalciumTarget(target=10.0).connect(comp)
        ctrl = IntegralController(IntegralControllerConfig(tau_m=100.0, tau_g=1000.0, m0=0.0))
        ctrl.connect(channel)
        ctrl.init()

        ctrl.integrate(dt=1.0)

        assert ctrl.m == pytest.approx(0.1)
        assert channel.gbar == pytest.approx(0.1)

    def test_low_calcium_increases_gbar(self, compartment, kd_channel):
        compartment.Ca_target = 10.0
        ctrl = IntegralController(IntegralControllerConfig(tau_m=10.0, tau_g=10.0, m0=0.0))
        ctrl.connect(kd_channel)
        ctrl.init()
        for _ in range(100):
            ctrl.integrate(dt=1.0)
        assert kd_channel.gbar > 0.1

    def test_gdot_scaled_by_area(self):
        comp = Compartment(CompartmentConfig(A=2.0, Ca0=5.0))
        channel = make_channel(comp, gbar=1.0)
        comp.Ca_target = 5.0
        ctrl = IntegralController(IntegralControllerConfig(tau_m=100.0, tau_g=10.0, m0=4.0))
        ctrl.connect(channel)
        ctrl.init()
        ctrl.integrate(dt=1.0)
        # zero error: m stays 4; gdot = 0.1 * (4 - 1 * 2) = 0.2; gbar += 0.2 / 2
        assert ctrl.m == pytest.approx(4.0)
        assert channel.gbar == pytest.approx(1.1)

    def test_uses_previous_calcium(self, compartment, kd_channel):
        compartment.Ca_target = 10.0
        compartment.Ca_prev = 4.0
        compartment.Ca = 100.0
        ctrl = IntegralController(IntegralControllerConfig(tau_m=1.0, tau_g=1e9, m0=0.0))
        ctrl.connect(kd_channel)
        ctrl.init()
        ctrl.integrate(dt=0.5)
        assert ctrl.m == pytest.approx(0.5 * 6.0)

    def test_nan_target_leaves_everything_unchanged(self, compartment, kd_channel):
        ctrl = IntegralController(IntegralControllerConfig(tau_m=1.0, tau_g=1.0, m0=0.3))
        ctrl.connect(kd_channel)
        ctrl.init()
        assert math.isnan(ctrl.target)
        for Ca_prev in (0.0, 5.0, 1e3):
            compartment.Ca_prev = Ca_prev
            ctrl.integrate(dt=1.0)
        assert ctrl.m == 0.3
        assert kd_channel.gbar == 0.1

    def test_m_never_negative(self, compartment, kd_channel):
        compartment.Ca_target = 1.0
        compartment.Ca_prev = 50.0
        ctrl = IntegralController(IntegralControllerConfig(tau_m=1.0, tau_g=100.0, m0=0.0))
        ctrl.connect(kd_channel)
        ctrl.init()
        for _ in range(50):
            ctrl.integrate(dt=1.0)
            assert ctrl.m == 0.0

    def test_gbar_clamped_at_zero(self, compartment, kd_channel):
        """A step that would overshoot below zero lands exactly on zero."""
        compartment.Ca_target = 1.0
        compartment.Ca_prev = 50.0
        ctrl = IntegralController(IntegralControllerConfig(tau_m=1.0, tau_g=0.5, m0=0.0))
        ctrl.connect(kd_channel)
        ctrl.init()
        ctrl.integrate(dt=1.0)
        assert kd_channel.gbar == 0.0
        ctrl.integrate(dt=1.0)
        assert kd_channel.gbar == 0.0

    def test_infinite_tau_m_is_inert_for_mrna(self, compartment, kd_channel):
        compartment.Ca_target = 100.0
        ctrl = IntegralController(IntegralControllerConfig(tau_m=math.inf, tau_g=1e3, m0=0.0))
        ctrl.connect(kd_channel)
        ctrl.init()
        for _ in range(10):
            ctrl.integrate(dt=1.0)
        assert ctrl.m == 0.0

    def test_unbound_integrate_fails(self):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        with pytest.raises(ComponentError, match="misconfigured"):
            ctrl.integrate(dt=0.05)

    def test_unbound_integrate_short_circuits_with_hook(self, collector):
        ctrl = IntegralController(IntegralControllerConfig(tau_m=1.0, tau_g=100.0), on_error=collector)
        ctrl.integrate(dt=0.05)
        assert len(collector) == 1
        assert ctrl.m == 0.0


@pytest.mark.unit
class TestSynapseRegulation:

    def test_synapse_update_uses_unit_scaling(self):
        post = Compartment(CompartmentConfig(A=1.0, Ca0=0.0))
        post.Ca_target = 10.0
        syn = Synapse(gmax=100.0, post_syn=post)
        ctrl = IntegralController(IntegralControllerConfig(tau_m=100.0, tau_g=10.0, m0=0.0))
        ctrl.connect(syn)
        ctrl.init()
        ctrl.integrate(dt=1.0)
        # m = 0.1; gdot = 0.1 * (0.1 - 100e-3) = 0; gmax unchanged
        assert ctrl.m == pytest.approx(0.1)
        assert syn.gmax == pytest.approx(100.0)

        ctrl.integrate(dt=1.0)
        # m = 0.2; gdot = 0.1 * (0.2 - 0.1) = 0.01; gmax += 10
        assert ctrl.m == pytest.approx(0.2)
        assert syn.gmax == pytest.approx(110.0)

    def test_gmax_clamped_at_zero(self):
        post = Compartment(CompartmentConfig(A=1.0, Ca0=50.0))
        post.Ca_target = 1.0
        syn = Synapse(gmax=1.0, post_syn=post)
        ctrl = IntegralController(IntegralControllerConfig(tau_m=1.0, tau_g=0.5))
        ctrl.connect(syn)
        ctrl.init()
        ctrl.integrate(dt=1.0)
        assert syn.gmax == 0.0

    def test_synapse_nan_target_disabled(self):
        post = Compartment(CompartmentConfig(A=1.0))
        syn = Synapse(gmax=3.0, post_syn=post)
        ctrl = IntegralController(IntegralControllerConfig(tau_m=1.0, tau_g=1.0, m0=0.2))
        ctrl.connect(syn)
        ctrl.init()
        ctrl.integrate(dt=1.0)
        assert syn.gmax == 3.0
        assert ctrl.m == 0.2

    def test_synapse_increment_scaled_by_gain(self):
        """gmax moves by exactly gdot * 1e3."""
        post = Compartment(CompartmentConfig(A=1.0, Ca0=0.0))
        post.Ca_target = 0.123456789
        syn = Synapse(gmax=0.0, post_syn=post)
        ctrl = IntegralController(IntegralControllerConfig(tau_m=1.0, tau_g=10.0))
        ctrl.connect(syn)
        ctrl.init()
        ctrl.integrate(dt=1.0)

        m = (1.0 / 1.0) * (0.123456789 - 0.0)
        gdot = (1.0 / 10.0) * (m - 0.0 * 1e-3)
        assert syn.gmax == 0.0 + gdot * 1e3


@pytest.mark.unit
class TestIntrospection:

    def test_get_state(self, kd_channel):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0, m0=0.25))
        ctrl.connect(kd_channel)
        assert ctrl.get_state(1) == 0.25
        assert ctrl.get_state(2) == kd_channel.gbar
        assert math.isnan(ctrl.get_state(0))
        assert math.isnan(ctrl.get_state(3))

    def test_get_state_synapse_reports_gmax(self):
        post = Compartment(CompartmentConfig(A=1.0))
        syn = Synapse(gmax=12.0, post_syn=post)
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(syn)
        assert ctrl.get_state(2) == 12.0

    def test_full_state_layout(self, kd_channel):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0, m0=0.5))
        ctrl.connect(kd_channel)
        buffer = np.full(5, -1.0)
        next_idx = ctrl.get_full_state(buffer, 2)
        assert ctrl.get_full_state_size() == 2
        assert next_idx == 4
        np.testing.assert_allclose(buffer, [-1.0, -1.0, 0.5, 0.1, -1.0])

    def test_check_solvers(self):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.check_solvers(0)
        with pytest.raises(ConfigurationError, match="solver order"):
            ctrl.check_solvers(2)

    def test_check_solvers_reported_to_hook(self):
        collector = ErrorCollector()
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0), on_error=collector)
        ctrl.check_solvers(4)
        with pytest.raises(ConfigurationError):
            collector.raise_first()

    def test_diagnostics(self, kd_channel):
        ctrl = IntegralController(IntegralControllerConfig(tau_g=100.0))
        ctrl.connect(kd_channel)
        diag = ctrl.get_diagnostics()
        assert diag["control_type"] == "CHANNEL"
        assert diag["controlling"] == "Kd"
        assert diag["strength"] == kd_channel.gbar
