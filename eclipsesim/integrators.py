"""Integrators for split position/momentum states.

The integrators never look inside the state they advance. Anything that
provides the :class:`Integrable` capabilities can be propagated, which keeps
the schemes usable for test systems as well as for :class:`~eclipsesim.physics.SimState`.
"""
import math
from typing import Protocol

import numpy as np

from . import constants as C


class Integrable(Protocol):
    """Capabilities an object needs in order to be integrated."""

    def derivative_position(self): ...

    def derivative_momentum(self): ...

    def shift_position(self, derivative, amount: float) -> None: ...

    def shift_momentum(self, derivative, amount: float) -> None: ...


def compute_accelerations(positions: np.ndarray, gms: np.ndarray) -> np.ndarray:
    """Return the Newtonian acceleration of every body.

    Parameters
    ----------
    positions : ndarray, shape (n, 3)
        Body positions in km.
    gms : ndarray, shape (n,)
        Standard gravitational parameters in km^3/s^2.

    Bodies must not coincide; the self-interaction term is masked out.
    """
    n = len(gms)
    if n == 0:
        return np.zeros((0, 3), dtype=np.float64)

    # r_vec[i, j] points from body i towards body j
    r_vec = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
    dist_sq = np.einsum("ijk,ijk->ij", r_vec, r_vec)
    np.fill_diagonal(dist_sq, np.inf)
    inv_dist3 = dist_sq ** -1.5
    return np.einsum("ij,ijk->ik", inv_dist3 * gms[np.newaxis, :], r_vec)


class Integrator:
    """Base class holding the configured default step."""

    name = "integrator"
    reversible = False

    def __init__(self, step: float = C.COARSE_STEP):
        self.step = float(step)

    def propagate(self, state: Integrable, step: float | None = None) -> None:
        """Advance ``state`` in place by one application of the scheme.

        ``step=None`` uses the configured default; a negative step integrates
        backwards.
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(step={self.step})"


def _compose(weights) -> tuple[tuple[str, float], ...]:
    """Expand leapfrog stages into a fused kick/drift sequence."""
    sequence: list[tuple[str, float]] = []
    for w in weights:
        for kind, coeff in (("kick", 0.5 * w), ("drift", w), ("kick", 0.5 * w)):
            if sequence and sequence[-1][0] == kind:
                sequence[-1] = (kind, sequence[-1][1] + coeff)
            else:
                sequence.append((kind, coeff))
    return tuple(sequence)


_CBRT2 = 2.0 ** (1.0 / 3.0)
_SUZUKI_P = 1.0 / (4.0 - 4.0 ** (1.0 / 3.0))

LEAPFROG_WEIGHTS = (1.0,)
FOREST_RUTH_WEIGHTS = (
    1.0 / (2.0 - _CBRT2),
    -_CBRT2 / (2.0 - _CBRT2),
    1.0 / (2.0 - _CBRT2),
)
SUZUKI_WEIGHTS = (
    _SUZUKI_P,
    _SUZUKI_P,
    1.0 - 4.0 * _SUZUKI_P,
    _SUZUKI_P,
    _SUZUKI_P,
)


class SymplecticIntegrator(Integrator):
    """Symmetric composition of kick-drift-kick leapfrog stages.

    The weights are palindromic, so the fused sub-shift sequence is too and
    ``propagate(s, -h)`` undoes ``propagate(s, h)`` up to rounding error.
    """

    reversible = True

    def __init__(self, weights=SUZUKI_WEIGHTS, step: float = C.COARSE_STEP, name: str = "symplectic"):
        super().__init__(step)
        weights = tuple(float(w) for w in weights)
        if weights != weights[::-1]:
            raise ValueError(f"Composition weights must be palindromic, got {weights}")
        if not math.isclose(sum(weights), 1.0, rel_tol=1e-12):
            raise ValueError(f"Composition weights must sum to 1, got {sum(weights)}")
        self.weights = weights
        self.name = name
        self.sequence = _compose(weights)

    def propagate(self, state: Integrable, step: float | None = None) -> None:
        h = self.step if step is None else step
        for kind, coeff in self.sequence:
            if kind == "drift":
                state.shift_position(state.derivative_position(), coeff * h)
            else:
                state.shift_momentum(state.derivative_momentum(), coeff * h)


class RK4Integrator(Integrator):
    """Classic fourth order Runge-Kutta.

    Intermediate stages are applied to the state and undone again, so only
    the shift capabilities are needed. Not time-reversible.
    """

    name = "rk4"

    def propagate(self, state: Integrable, step: float | None = None) -> None:
        h = self.step if step is None else step

        def stage(dp, dv, amount):
            state.shift_position(dp, amount)
            state.shift_momentum(dv, amount)
            dp_new = state.derivative_position()
            dv_new = state.derivative_momentum()
            state.shift_position(dp, -amount)
            state.shift_momentum(dv, -amount)
            return dp_new, dv_new

        k1_p = state.derivative_position()
        k1_v = state.derivative_momentum()
        k2_p, k2_v = stage(k1_p, k1_v, 0.5 * h)
        k3_p, k3_v = stage(k2_p, k2_v, 0.5 * h)
        k4_p, k4_v = stage(k3_p, k3_v, h)

        state.shift_position((k1_p + 2 * k2_p + 2 * k3_p + k4_p) / 6.0, h)
        state.shift_momentum((k1_v + 2 * k2_v + 2 * k3_v + k4_v) / 6.0, h)


INTEGRATORS = {
    "suzuki": lambda step: SymplecticIntegrator(SUZUKI_WEIGHTS, step, name="suzuki"),
    "forest-ruth": lambda step: SymplecticIntegrator(FOREST_RUTH_WEIGHTS, step, name="forest-ruth"),
    "leapfrog": lambda step: SymplecticIntegrator(LEAPFROG_WEIGHTS, step, name="leapfrog"),
    "rk4": RK4Integrator,
}


def get_integrator(name: str = C.DEFAULT_INTEGRATOR, step: float = C.COARSE_STEP) -> Integrator:
    """Create an integrator by name."""
    try:
        factory = INTEGRATORS[name]
    except KeyError:
        raise ValueError(
            f"Unknown integrator '{name}', choose one of {sorted(INTEGRATORS)}"
        ) from None
    return factory(step)


def propagate_to(state, integrator: Integrator, target_ns: int, max_step: float | None = None) -> None:
    """Integrate ``state`` forwards or backwards until it sits at ``target_ns``.

    Steps never exceed ``max_step`` (default: the integrator's step). The
    state ends within the snapping tolerance of the target.
    """
    max_step = integrator.step if max_step is None else abs(max_step)
    while abs(target_ns - state.time_ns) >= C.TIME_SNAP_NS:
        remaining = (target_ns - state.time_ns) / C.NS_PER_SECOND
        integrator.propagate(state, math.copysign(min(max_step, abs(remaining)), remaining))
