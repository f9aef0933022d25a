"""Geometric event predicates evaluated against a :class:`SimState`.

Two detector families are provided: eclipse classification, which uses a
short history of Sun-to-body directions to account for light-travel delay,
and visibility of a target body from a geostationary-like observer.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import math

import numpy as np

from . import constants as C
from .timescales import format_utc, to_ns


@dataclass(frozen=True)
class Event:
    """A refined change of a predicate value, stamped in civil time."""

    time: datetime
    before: Enum
    after: Enum


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    cos = np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b))
    return float(np.arccos(np.clip(cos, -1.0, 1.0)))


def axis_offsets(origin: np.ndarray, point: np.ndarray, axis: np.ndarray) -> tuple[float, float]:
    """Depth of ``point`` along the unit ``axis`` from ``origin`` and its lateral distance."""
    rel = point - origin
    h = float(np.dot(rel, axis))
    d = float(np.linalg.norm(rel - axis * h))
    return h, d


class LightDirectionBuffer:
    """Fixed-capacity ring of time-stamped direction vectors.

    Samples must be appended in increasing time order. Once full, each
    append overwrites the oldest slot.
    """

    def __init__(self, retention: float, step: float):
        self.capacity = int(math.ceil(retention / abs(step))) + 2
        self._times = np.zeros(self.capacity, dtype=np.float64)
        self._dirs = np.zeros((self.capacity, 3), dtype=np.float64)
        self._next = 0
        self._count = 0

    def __len__(self):
        return self._count

    def clear(self) -> None:
        self._next = 0
        self._count = 0

    def _order(self) -> np.ndarray:
        return (np.arange(self._count) + (self._next - self._count)) % self.capacity

    @property
    def times(self) -> np.ndarray:
        return self._times[self._order()]

    @property
    def latest_time(self) -> float | None:
        if self._count == 0:
            return None
        return float(self._times[(self._next - 1) % self.capacity])

    def append(self, time: float, direction) -> None:
        latest = self.latest_time
        if latest is not None and time <= latest:
            raise ValueError(
                f"Light direction samples must increase in time: {time} after {latest}"
            )
        self._times[self._next] = time
        self._dirs[self._next] = direction
        self._next = (self._next + 1) % self.capacity
        self._count = min(self._count + 1, self.capacity)

    def direction_at(self, time: float) -> np.ndarray | None:
        """Linearly interpolate the stored direction at ``time``.

        Returns None when the buffer does not bracket ``time``.
        """
        if self._count == 0:
            return None
        order = self._order()
        times = self._times[order]
        i = int(np.searchsorted(times, time))
        if i < self._count and times[i] == time:
            return self._dirs[order[i]].copy()
        if i == 0 or i == self._count:
            return None
        t1, t2 = times[i - 1], times[i]
        v1, v2 = self._dirs[order[i - 1]], self._dirs[order[i]]
        return v1 + (v2 - v1) / (t2 - t1) * (time - t1)


class Detector:
    """Common interface of the event detectors."""

    #: Seconds of history the detector needs before it can classify.
    history: float = 0.0

    def observe(self, state) -> None:
        """Record whatever the detector needs from a live coarse step."""

    def reset(self) -> None:
        """Forget recorded history."""

    def classify(self, state) -> Enum:
        raise NotImplementedError

    def format_event(self, event: Event) -> str:
        raise NotImplementedError


# ----------------------------------------------------------------------
# Eclipses

class Eclipse(Enum):
    NONE = "None"
    PENUMBRAL_LUNAR = "PenumbralLunar"
    PARTIAL_LUNAR = "PartialLunar"
    TOTAL_LUNAR = "TotalLunar"
    PARTIAL_SOLAR = "PartialSolar"
    ANNULAR_SOLAR = "AnnularSolar"
    TOTAL_SOLAR = "TotalSolar"


def lunar_eclipse(depth: float, offset: float, sun_radius: float, earth_radius: float,
                  moon_radius: float, sun_distance: float, penumbral: bool = False) -> Eclipse:
    """Classify the Moon against Earth's shadow.

    ``depth`` and ``offset`` locate the Moon's centre along and across the
    shadow axis measured from Earth's centre. ``earth_radius`` should already
    include the atmospheric enlargement.
    """
    if depth <= 0.0:
        return Eclipse.NONE
    umbra_height = earth_radius * sun_distance / (sun_radius - earth_radius)
    umbra_radius = earth_radius * (1.0 - depth / umbra_height)
    if offset + moon_radius < umbra_radius:
        return Eclipse.TOTAL_LUNAR
    if offset - moon_radius < umbra_radius:
        return Eclipse.PARTIAL_LUNAR
    if penumbral:
        penumbra_height = earth_radius * sun_distance / (sun_radius + earth_radius)
        penumbra_radius = earth_radius * (1.0 + depth / penumbra_height)
        if offset - moon_radius < penumbra_radius:
            return Eclipse.PENUMBRAL_LUNAR
    return Eclipse.NONE


def solar_eclipse(depth: float, offset: float, sun_radius: float, moon_radius: float,
                  earth_radius: float, sun_distance: float) -> Eclipse:
    """Classify Earth against the Moon's shadow.

    ``depth`` and ``offset`` locate Earth's centre relative to the Moon along
    and across the Sun-Moon axis. A negative umbra radius means Earth lies
    beyond the umbra apex, in the antumbra.
    """
    if depth <= 0.0:
        return Eclipse.NONE
    umbra_height = moon_radius * sun_distance / (sun_radius - moon_radius)
    umbra_radius = moon_radius * (1.0 - depth / umbra_height)
    if offset < earth_radius + abs(umbra_radius):
        return Eclipse.TOTAL_SOLAR if umbra_radius > 0.0 else Eclipse.ANNULAR_SOLAR
    penumbra_height = moon_radius * sun_distance / (sun_radius + moon_radius)
    penumbra_radius = moon_radius * (1.0 + depth / penumbra_height)
    if offset < earth_radius + penumbra_radius:
        return Eclipse.PARTIAL_SOLAR
    return Eclipse.NONE


class EclipseDetector(Detector):
    """Lunar and solar eclipse classification with light-travel delay.

    The shadow axis is the Sun-to-body direction as it was one light-travel
    time earlier, interpolated from directions recorded by :meth:`observe`.
    """

    def __init__(self, step: float = C.COARSE_STEP, *, delay_margin: float = C.LIGHT_DELAY_MARGIN,
                 penumbral: bool = False, solar: bool = True,
                 sun: str = "Sun", earth: str = "Earth", moon: str = "Moon"):
        self.history = delay_margin + abs(step)
        self.penumbral = penumbral
        self.solar = solar
        self.sun, self.earth, self.moon = sun, earth, moon
        self.earth_light = LightDirectionBuffer(self.history, step)
        self.moon_light = LightDirectionBuffer(self.history, step)

    def reset(self) -> None:
        self.earth_light.clear()
        self.moon_light.clear()

    def observe(self, state) -> None:
        sun = state.body_by_name(self.sun)
        self.earth_light.append(state.time, state.body_by_name(self.earth).pos - sun.pos)
        self.moon_light.append(state.time, state.body_by_name(self.moon).pos - sun.pos)

    @staticmethod
    def _delayed_axis(buffer: LightDirectionBuffer, time: float, distance: float):
        direction = buffer.direction_at(time - distance / C.C_LIGHT)
        if direction is None:
            return None
        return direction / np.linalg.norm(direction)

    def classify(self, state) -> Eclipse:
        sun = state.body_by_name(self.sun)
        earth = state.body_by_name(self.earth)
        moon = state.body_by_name(self.moon)

        dist = earth.distance_from(sun)
        axis = self._delayed_axis(self.earth_light, state.time, dist)
        if axis is None:
            return Eclipse.NONE

        depth, offset = axis_offsets(earth.pos, moon.pos, axis)
        eclipse = lunar_eclipse(
            depth,
            offset,
            sun.radius,
            earth.radius * C.SHADOW_ENLARGEMENT,
            moon.radius,
            dist,
            self.penumbral,
        )
        if eclipse is not Eclipse.NONE or not self.solar:
            return eclipse

        moon_dist = moon.distance_from(sun)
        moon_axis = self._delayed_axis(self.moon_light, state.time, moon_dist)
        if moon_axis is None:
            return Eclipse.NONE
        depth, offset = axis_offsets(moon.pos, earth.pos, moon_axis)
        return solar_eclipse(depth, offset, sun.radius, moon.radius, earth.radius, moon_dist)

    def format_event(self, event: Event) -> str:
        date = format_utc(event.time)
        if event.after is Eclipse.NONE:
            return f"Eclipse ends: date = {date}\n"
        return f"{event.after.value}: date = {date}"


# ----------------------------------------------------------------------
# Visibility

class Visibility(Enum):
    VISIBLE = "Visible"
    OBSCURED = "Obscured"
    OUT_OF_FRAME = "OutOfFrame"


_J2000_NS = to_ns(C.J2000)


def gmst(time_ns: int) -> float:
    """Greenwich mean sidereal angle in radians."""
    seconds = (time_ns - _J2000_NS) / C.NS_PER_SECOND
    return (C.GMST_J2000 + C.SIDEREAL_RATE * seconds) % (2.0 * math.pi)


class Observer:
    """Observer on a circular equatorial orbit co-rotating with Earth.

    Positions are in the ecliptic frame of the bodies; the equatorial plane
    is tilted by Earth's obliquity about the x axis.
    """

    def __init__(self, longitude: float = 0.0, radius: float = C.GEOSTATIONARY_RADIUS,
                 obliquity: float = C.EARTH_OBLIQUITY):
        self.longitude = longitude
        self.radius = radius
        self.obliquity = obliquity

    def direction(self, time_ns: int) -> np.ndarray:
        """Unit vector from Earth's centre to the observer."""
        theta = gmst(time_ns) + self.longitude
        x, y = math.cos(theta), math.sin(theta)
        return np.array([
            x,
            y * math.cos(self.obliquity),
            -y * math.sin(self.obliquity),
        ])

    def position(self, time_ns: int, earth_pos: np.ndarray) -> np.ndarray:
        return earth_pos + self.radius * self.direction(time_ns)


def classify_visibility(angle: float, fov_half_angle: float, obscuration_angle: float,
                        behind: bool) -> Visibility:
    """Classify a target seen ``angle`` radians away from the boresight.

    The frame edge is exclusive: a target exactly at ``fov_half_angle`` is
    out of frame. ``behind`` tells whether the target is farther away than
    the imaged disk.
    """
    if not angle < fov_half_angle:
        return Visibility.OUT_OF_FRAME
    if behind and angle < obscuration_angle:
        return Visibility.OBSCURED
    return Visibility.VISIBLE


class VisibilityDetector(Detector):
    """Whether a target body is in the frame of an Earth-imaging observer."""

    def __init__(self, observer: Observer | None = None, *,
                 fov_half_angle: float = math.radians(C.FOV_HALF_ANGLE_DEG),
                 obscuration_angle: float = math.radians(C.OBSCURATION_ANGLE_DEG),
                 target: str = "Moon", earth: str = "Earth"):
        self.observer = observer or Observer()
        self.fov_half_angle = fov_half_angle
        self.obscuration_angle = obscuration_angle
        self.target = target
        self.earth = earth

    def classify(self, state) -> Visibility:
        earth = state.body_by_name(self.earth)
        target = state.body_by_name(self.target)
        obs = self.observer.position(state.time_ns, earth.pos)
        boresight = earth.pos - obs
        to_target = target.pos - obs
        behind = np.linalg.norm(to_target) > np.linalg.norm(boresight)
        return classify_visibility(
            angle_between(boresight, to_target),
            self.fov_half_angle,
            self.obscuration_angle,
            bool(behind),
        )

    def format_event(self, event: Event) -> str:
        date = format_utc(event.time)
        if event.after is Visibility.OUT_OF_FRAME:
            return f"Leaving frame: date = {date}\n"
        return f"{event.after.value}: date = {date}"
