import math

import numpy as np
import pytest

from chatterfree.friction import (
    ChatterFreeFriction,
    ChatterFreeFrictionBank,
    Regime,
    StictionParams,
    ViscousCoulombFriction,
    build_table,
    dry_friction_curve,
)
from chatterfree.friction import chatter_free
from chatterfree.special import SpecialFunctionDomainError


@pytest.fixture(scope="module")
def params():
    return StictionParams()


@pytest.fixture(scope="module")
def table(params):
    return build_table(params)


@pytest.fixture
def model(params, table):
    return ChatterFreeFriction(params, table=table)


def test_derived_constants(params):
    assert params.z == pytest.approx(1.0 / 55.0)
    assert params.den == pytest.approx(1.0 + 4.5 / 55.0)
    assert params.tsc == pytest.approx(2.3)
    assert params.table_min == pytest.approx(2.5 / 55.0)
    expected_max = params.z * params.tc - params.wbrk * params.den * math.log(
        params.wbrk / params.z * params.den / params.tsc * 0.001
    )
    assert params.table_max == pytest.approx(expected_max)
    assert params.table_max > params.table_min


@pytest.mark.parametrize(
    "kwargs",
    [
        {"dt": 0.0},
        {"wbrk": -0.04},
        {"lut_step": 0.0},
        {"ts": 0.2, "tc": 0.2},
        {"kf": -1.0},
    ],
)
def test_invalid_params(kwargs):
    with pytest.raises(ValueError):
        StictionParams(**kwargs)


def test_table_domain(params, table):
    assert table.min == params.table_min
    assert table.max == params.table_max
    assert len(table) == math.floor((params.table_max - params.table_min) / params.lut_step) + 1


def test_dry_curve_starts_at_static_excess(params):
    dry = dry_friction_curve(params)
    # At w = Z*Ts the Lambert W argument is -a*exp(-a) with a < 1, so W0 = -a.
    assert dry(params.table_min) == pytest.approx(params.tsc / params.den, rel=1e-9)
    # The curve decays towards zero at the upper end of the table.
    assert abs(dry(params.table_max)) < 0.01 * abs(dry(params.table_min))


def test_table_is_lazy(params):
    model = ChatterFreeFriction(params)
    assert model._table is None
    model.step(0.0)
    assert model._table is not None
    assert not model.table.empty()


def test_lambert_failure_aborts_table_build(params, monkeypatch):
    def broken(x):
        raise SpecialFunctionDomainError("bad argument")

    monkeypatch.setattr(chatter_free, "lambert_w0", broken)
    with pytest.raises(SpecialFunctionDomainError):
        build_table(params)


def test_regime_selection(model, params):
    w_stick = 0.5 * params.table_min
    tf, regime = model.friction_torque(w_stick)
    assert regime is Regime.STICK
    assert tf == pytest.approx(w_stick / params.z)

    _, regime = model.friction_torque(2.0 * params.table_min)
    assert regime is Regime.POSITIVE
    _, regime = model.friction_torque(-2.0 * params.table_min)
    assert regime is Regime.NEGATIVE


@pytest.mark.parametrize("sign", [1.0, -1.0])
def test_torque_continuous_at_breakaway(model, params, sign):
    w_th = sign * params.ts * params.z
    delta = 1e-7
    inner, inner_regime = model.friction_torque(w_th - sign * delta)
    outer, outer_regime = model.friction_torque(w_th + sign * delta)
    assert inner_regime is Regime.STICK
    assert outer_regime is not Regime.STICK
    assert inner == pytest.approx(sign * params.ts, abs=1e-4)
    assert abs(outer - inner) < 1e-3


def test_torque_sweep_has_no_large_jumps(model, params):
    w_th = params.ts * params.z
    for sign in (1.0, -1.0):
        ws = sign * np.linspace(0.99 * w_th, 1.01 * w_th, 401)
        tfs = np.array([model.friction_torque(w)[0] for w in ws])
        # largest local slope of the curve is about 1.5e3 N*m per rad/s
        dw = abs(ws[1] - ws[0])
        assert np.max(np.abs(np.diff(tfs))) < 2e3 * dw


def test_odd_symmetry(model, params):
    for w in np.linspace(1.1 * params.table_min, 1.2 * params.table_max, 25):
        pos, _ = model.friction_torque(w)
        neg, _ = model.friction_torque(-w)
        assert neg == pytest.approx(-pos)


def test_saturated_curve_beyond_table(model, params):
    w = 2.0 * params.table_max
    tf, regime = model.friction_torque(w)
    assert regime is Regime.POSITIVE
    assert tf == pytest.approx((params.tc + params.tv * w) / params.den)


def test_first_step_has_no_velocity(model):
    out = model.step(5.0, torque=1.5)
    s = model.state
    assert s.w_ast == 0.0
    assert s.regime is Regime.STICK
    assert s.e == 0.0
    assert s.p_prev == 5.0
    assert not s.first_time
    assert out == 1.5


def test_torque_accumulates_without_command(model, params):
    model.step(0.0, torque=0.0)
    first = model.step(1e-5)
    tf = model.state.tf
    assert tf > 0.0
    second = model.step(2e-5)
    assert first == pytest.approx(-tf)
    assert second == pytest.approx(first - model.state.tf)


def test_error_state_tracks_displacement_while_stuck(model, params):
    for k in range(11):
        model.step(1e-5 * k, torque=0.0)
    assert model.state.regime is Regime.STICK
    assert model.state.e == pytest.approx(1e-4, rel=1e-9)


def test_reset_rearms_first_step(model):
    for k in range(5):
        model.step(1e-5 * k)
    table = model.table
    model.reset()
    assert model.state.first_time
    assert model.state.e == 0.0
    assert model.table is table
    model.step(3.0)
    assert model.state.w_ast == 0.0


def test_held_joint_reaches_fixed_point(params, table):
    model = ChatterFreeFriction(params, table=table)
    # slow ramp (0.01 rad/s) for 20 steps loads the spring, then hold still
    for k in range(21):
        model.step(1e-5 * k, torque=0.0)
    hold = 1e-5 * 20
    e_start = None
    torques = []
    for _ in range(1000):
        torques.append(model.step(hold, torque=0.0))
        s = model.state
        assert abs(s.t_ast) <= params.ts
        assert s.regime is Regime.STICK
        if e_start is None:
            e_start = s.e

    s = model.state
    assert s.e == pytest.approx(e_start, rel=1e-9)
    assert s.e * (1.0 - params.z * params.bf) == pytest.approx(params.z * s.tf * params.dt, rel=1e-6)
    assert torques[-1] == pytest.approx(torques[-2], rel=1e-9)
    assert torques[-1] == pytest.approx(-params.kf * s.e, rel=1e-6)


def test_bank_steps_each_joint(params):
    other = StictionParams(ts=2.0, tc=0.5, tv=2.0)
    bank = ChatterFreeFrictionBank([params, other])
    bank.build_tables()
    assert bank.joints[0].table is not bank.joints[1].table
    assert bank.joints[1].table.min == other.table_min

    out = bank.step(np.zeros(2), np.array([1.0, -2.0]))
    np.testing.assert_allclose(out, [1.0, -2.0])
    fric = bank.friction(np.array([1e-5, -1e-5]))
    assert fric[0] < 0.0 < fric[1]
    assert bank.regimes == [Regime.STICK, Regime.STICK]

    with pytest.raises(ValueError):
        bank.step(np.zeros(3))
    bank.reset()
    assert all(joint.state.first_time for joint in bank.joints)


def test_bank_requires_joints():
    with pytest.raises(ValueError):
        ChatterFreeFrictionBank([])


def test_viscous_coulomb_baseline(params):
    vc = ViscousCoulombFriction(params)
    assert vc.friction_torque(1.0) == (params.tc + params.tv, Regime.POSITIVE)
    assert vc.friction_torque(-1.0) == (-params.tc - params.tv, Regime.NEGATIVE)
    tf, regime = vc.friction_torque(0.0)
    assert tf == 0.0 and regime is Regime.STICK

    assert vc.step(0.0, torque=2.0) == 2.0
    out = vc.step(1e-3, torque=2.0)
    assert vc.state.w_ast == pytest.approx(1.0)
    assert out == pytest.approx(2.0 - (params.tc + params.tv * vc.state.w_ast))
    vc.reset()
    assert vc.state.first_time
    with pytest.raises(ValueError):
        ViscousCoulombFriction(params, v_eps=-1.0)
