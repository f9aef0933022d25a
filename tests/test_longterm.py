import math

import numpy as np

from eclipsesim import Body, SimState, get_integrator, system_energy
from eclipsesim.physics import total_momentum

SUN_GM = 132712440041.93938
EARTH_GM = 398600.435436


def _init_orbit_state():
    r = 1.496e8
    v = math.sqrt(SUN_GM / r)
    sun = Body("Sun", SUN_GM, [0.0, 0.0, 0.0], [0.0, -(EARTH_GM / SUN_GM) * v, 0.0], 696000.0)
    earth = Body("Earth", EARTH_GM, [r, 0.0, 0.0], [0.0, v, 0.0], 6371.0)
    return SimState([sun, earth])


def _run(name, years, dt=86400.0):
    state = _init_orbit_state()
    e0 = system_energy(state)[2]
    p0 = total_momentum(state)
    integrator = get_integrator(name, dt)
    for _ in range(int(365 * years)):
        integrator.propagate(state)
    return state, e0, system_energy(state)[2], p0, total_momentum(state)


def test_multi_year_rk4_stability():
    _, e0, e1, p0, p1 = _run("rk4", 10)
    assert math.isclose(e0, e1, rel_tol=2e-2)
    assert np.allclose(p0, p1, atol=1e-3)


def test_multi_year_suzuki_stability():
    _, e0, e1, p0, p1 = _run("suzuki", 10)
    assert math.isclose(e0, e1, rel_tol=1e-6)
    assert np.allclose(p0, p1, atol=1e-3)


def test_multi_year_forest_ruth_stability():
    _, e0, e1, p0, p1 = _run("forest-ruth", 10)
    assert math.isclose(e0, e1, rel_tol=1e-6)
    assert np.allclose(p0, p1, atol=1e-3)


def test_leapfrog_returns_after_one_year():
    state, e0, e1, _, _ = _run("leapfrog", 1)
    assert math.isclose(e0, e1, rel_tol=1e-6)
    # 365 days is a little short of one sidereal year
    earth = state.body_by_name("Earth")
    angle = math.atan2(earth.pos[1], earth.pos[0])
    assert -0.03 < angle < 0.0
