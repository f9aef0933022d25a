"""Bodies and the split position/momentum simulation state.

:class:`SimState` exposes the four capabilities the integrators rely on
(``derivative_position``, ``derivative_momentum``, ``shift_position`` and
``shift_momentum``) and keeps its clock in integer nanoseconds so that long
runs do not accumulate floating point drift in the timestamps.
"""
from datetime import datetime

import numpy as np

from . import constants as C
from .integrators import compute_accelerations
from .timescales import from_ns, to_ns


class BodyNotFoundError(KeyError):
    """Raised when a body name is not part of the simulated set."""

    def __str__(self):
        return f"No body named '{self.args[0]}' in the simulation"


def _vec3(values) -> np.ndarray:
    v = np.asarray(values, dtype=float).reshape(-1)
    if v.size < 3:
        v = np.pad(v, (0, 3 - v.size))
    return v[:3].copy()


class Body:
    """A celestial body with fixed physical constants and a kinematic state."""

    def __init__(self, name: str, gm: float, pos, vel, radius: float):
        """Create a body.

        Parameters
        ----------
        name : str
            Unique identifier within a simulation.
        gm : float
            Standard gravitational parameter in km^3/s^2.
        pos, vel : array-like
            Position (km) and velocity (km/s). Values with fewer than three
            components are padded with zeros.
        radius : float
            Mean radius in km.
        """
        if not gm > 0:
            raise ValueError(f"Body '{name}': gm must be positive, got {gm}")
        if not radius > 0:
            raise ValueError(f"Body '{name}': radius must be positive, got {radius}")
        self.name = str(name)
        self.gm = float(gm)
        self.radius = float(radius)
        self.pos = _vec3(pos)
        self.vel = _vec3(vel)

    def distance_from(self, other: "Body") -> float:
        return float(np.linalg.norm(self.pos - other.pos))

    def copy(self) -> "Body":
        return Body(self.name, self.gm, self.pos, self.vel, self.radius)

    def __repr__(self):
        return (
            f"Body(name={self.name!r}, gm={self.gm}, pos={self.pos.tolist()}, "
            f"vel={self.vel.tolist()}, radius={self.radius})"
        )


class Derivative:
    """Flat per-body, per-axis rate vector supporting linear combinations."""

    __slots__ = ("values",)

    def __init__(self, values):
        self.values = np.asarray(values, dtype=np.float64).reshape(-1)

    def __add__(self, other):
        return Derivative(self.values + other.values)

    def __sub__(self, other):
        return Derivative(self.values - other.values)

    def __mul__(self, scalar):
        return Derivative(self.values * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar):
        return Derivative(self.values / scalar)

    def __neg__(self):
        return Derivative(-self.values)

    def __len__(self):
        return self.values.size

    def __repr__(self):
        return f"Derivative({self.values.tolist()})"


class SimState:
    """Positions, velocities and time of the whole body ensemble."""

    def __init__(self, bodies, time_ns: int = 0, *, use_jit: bool = False):
        self.bodies = list(bodies)
        self.time_ns = int(time_ns)
        self.use_jit = use_jit

    @classmethod
    def at(cls, bodies, when: datetime, *, use_jit: bool = False) -> "SimState":
        """Create a state whose clock reads ``when``."""
        return cls(bodies, to_ns(when), use_jit=use_jit)

    # ------------------------------------------------------------------
    @property
    def time(self) -> float:
        """Simulation time in seconds since the Unix epoch."""
        return self.time_ns / C.NS_PER_SECOND

    @property
    def datetime(self) -> datetime:
        return from_ns(self.time_ns)

    @property
    def names(self) -> list[str]:
        return [b.name for b in self.bodies]

    @property
    def positions(self) -> np.ndarray:
        return np.array([b.pos for b in self.bodies], dtype=np.float64).reshape(-1, 3)

    @property
    def velocities(self) -> np.ndarray:
        return np.array([b.vel for b in self.bodies], dtype=np.float64).reshape(-1, 3)

    @property
    def gms(self) -> np.ndarray:
        return np.array([b.gm for b in self.bodies], dtype=np.float64)

    # ------------------------------------------------------------------
    def body_by_name(self, name: str) -> Body:
        for body in self.bodies:
            if body.name == name:
                return body
        raise BodyNotFoundError(name)

    def distance(self, a: str, b: str) -> float:
        return self.body_by_name(a).distance_from(self.body_by_name(b))

    def clone(self) -> "SimState":
        return SimState([b.copy() for b in self.bodies], self.time_ns, use_jit=self.use_jit)

    # ------------------------------------------------------------------
    def derivative_position(self) -> Derivative:
        """Rate of change of the positions, i.e. the velocities."""
        return Derivative(self.velocities)

    def derivative_momentum(self) -> Derivative:
        """Rate of change of the velocities, i.e. the accelerations."""
        if self.use_jit:
            from .jit import accelerations_jit

            acc = accelerations_jit(self.positions, self.gms)
        else:
            acc = compute_accelerations(self.positions, self.gms)
        return Derivative(acc)

    def shift_position(self, derivative: Derivative, amount: float) -> None:
        """Move every body along ``derivative`` and advance the clock by ``amount`` s."""
        deltas = derivative.values.reshape(-1, 3) * amount
        for body, delta in zip(self.bodies, deltas):
            body.pos = body.pos + delta
        self.time_ns += int(round(amount * C.NS_PER_SECOND))
        self._snap_time()

    def shift_momentum(self, derivative: Derivative, amount: float) -> None:
        deltas = derivative.values.reshape(-1, 3) * amount
        for body, delta in zip(self.bodies, deltas):
            body.vel = body.vel + delta

    def _snap_time(self) -> None:
        subsec = self.time_ns % C.NS_PER_SECOND
        if subsec > C.NS_PER_SECOND - C.TIME_SNAP_NS:
            self.time_ns += C.NS_PER_SECOND - subsec
        elif subsec < C.TIME_SNAP_NS:
            self.time_ns -= subsec

    def __repr__(self):
        return f"SimState(time={self.datetime.isoformat()}, bodies={self.names})"


def system_energy(state: SimState) -> tuple[float, float, float]:
    """Return kinetic, potential and total energy per unit G.

    Masses are represented by ``gm``, so the values are G times the
    physical energies (km^5/s^4).
    """
    kinetic = 0.0
    potential = 0.0
    for b in state.bodies:
        kinetic += 0.5 * b.gm * np.dot(b.vel, b.vel)
    for i, bi in enumerate(state.bodies):
        for bj in state.bodies[i + 1:]:
            potential -= bi.gm * bj.gm / bi.distance_from(bj)
    return kinetic, potential, kinetic + potential


def total_momentum(state: SimState) -> np.ndarray:
    """Total momentum per unit G."""
    return np.sum(state.gms[:, np.newaxis] * state.velocities, axis=0)
