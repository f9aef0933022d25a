"""Event scan driver.

The driver owns the canonical :class:`SimState`. It advances the state in
fixed coarse steps, asks the detector for the current value after each step
and, when the value changes, refines the transition on a disposable clone.
"""
import logging
import math

from . import constants as C
from .analysis import EnergyMonitor
from .config import SimulationConfig
from .events import Event
from .integrators import propagate_to
from .physics import SimState
from .presets import create_bodies
from .refine import refine_transition
from .snapshots import SnapshotCache, nearest_month_boundary
from .timescales import format_utc, to_ns, tt_to_utc
from .utils import drift_to_display, time_to_display

logger = logging.getLogger(__name__)


class Simulation:
    """Scan a time window for detector transitions."""

    def __init__(self, config: SimulationConfig, initial: SimState | None = None):
        self.config = config
        self.integrator = config.make_integrator()
        self.detector = config.make_detector()
        self.cache = SnapshotCache(config.snapshot_dir) if config.use_snapshots else None
        self.energy_monitor = EnergyMonitor()
        self.events: list[Event] = []
        self.state: SimState | None = None
        self._initial = initial

    # ------------------------------------------------------------------
    def seed(self) -> SimState:
        """Build the state at the configured start time.

        An explicit initial state wins; otherwise the closest snapshot is
        used and, with an empty cache, the preset bodies at their epoch.
        Month boundaries crossed on the way are written to the cache.

        Raises
        ------
        ValueError
            If the closest snapshot holds a different body set than the
            configured preset.
        """
        if self.cache is not None:
            self.cache.load()

        if self._initial is not None:
            state = self._initial.clone()
            origin = "initial state"
        elif self.cache is not None and len(self.cache):
            state = self.cache.get_closest(self.config.start)
            origin = "snapshot"
            expected = [b.name for b in create_bodies(self.config.preset)]
            if state.names != expected:
                raise ValueError(
                    f"Snapshots in {self.cache.directory} hold bodies {state.names}, "
                    f"but preset '{self.config.preset}' has {expected}; "
                    "use a separate snapshot directory per preset"
                )
        else:
            state = SimState.at(create_bodies(self.config.preset), C.PRESET_EPOCH)
            origin = f"preset '{self.config.preset}'"
        state.use_jit = self.config.use_jit
        self.state = state

        start_ns = to_ns(self.config.start)
        gap = abs(start_ns - state.time_ns) / C.NS_PER_SECOND
        logger.info(
            "Seeding from %s at %s, integrating %s to %s",
            origin,
            format_utc(state.datetime),
            time_to_display(gap),
            format_utc(self.config.start),
        )
        step = math.copysign(self.config.step, start_ns - state.time_ns)
        step_ns = int(round(self.config.step * C.NS_PER_SECOND))
        while abs(start_ns - state.time_ns) >= step_ns:
            self.integrator.propagate(state, step)
            self._maybe_snapshot()
        propagate_to(state, self.integrator, start_ns)
        return state

    def prime_history(self) -> None:
        """Feed the detector the history it needs before the first step."""
        self.detector.reset()
        if self.detector.history <= 0:
            self.detector.observe(self.state)
            return
        scratch = self.state.clone()
        past = []
        elapsed = 0.0
        while elapsed < self.detector.history:
            self.integrator.propagate(scratch, -self.config.step)
            past.append(scratch.clone())
            elapsed += self.config.step
        for state in reversed(past):
            self.detector.observe(state)
        self.detector.observe(self.state)

    def _maybe_snapshot(self) -> None:
        if self.cache is None:
            return
        now = self.state.datetime
        boundary = nearest_month_boundary(now)
        if abs((now - boundary).total_seconds()) > self.config.step / 2:
            return
        boundary_ns = to_ns(boundary)
        if boundary_ns in self.cache:
            return
        scratch = self.state.clone()
        propagate_to(scratch, self.integrator, boundary_ns)
        self.cache.insert(scratch)

    # ------------------------------------------------------------------
    def run(self, emit=print) -> list[Event]:
        """Scan from ``config.start`` to ``config.end``.

        Every event is passed to ``emit`` as a formatted line and collected
        in the returned list.
        """
        if self.state is None:
            self.seed()
        state = self.state
        end_ns = to_ns(self.config.end)

        self.prime_history()
        self._maybe_snapshot()
        self.energy_monitor.set_initial_energy(state)
        previous = self.detector.classify(state)
        next_report = state.time + C.YEAR

        while state.time_ns < end_ns:
            self.integrator.propagate(state)
            self.detector.observe(state)
            self._maybe_snapshot()

            current = self.detector.classify(state)
            if current != previous:
                transition = refine_transition(
                    state,
                    self.integrator,
                    self.detector.classify,
                    previous,
                    self.config.step,
                    self.config.refine_step,
                )
                event = Event(tt_to_utc(transition.datetime), transition.before, transition.after)
                self.events.append(event)
                emit(self.detector.format_event(event))
            previous = current

            if state.time >= next_report:
                drift = self.energy_monitor.update(state)
                logger.info(
                    "Reached %s, %d events so far, energy drift %s",
                    format_utc(state.datetime),
                    len(self.events),
                    drift_to_display(drift or 0.0),
                )
                next_report += C.YEAR

        drift = self.energy_monitor.update(state)
        logger.info(
            "Finished at %s with %d events, energy drift %s",
            format_utc(state.datetime),
            len(self.events),
            drift_to_display(drift or 0.0),
        )
        return self.events


def run_simulation(config: SimulationConfig, emit=print) -> list[Event]:
    """Convenience wrapper: build a :class:`Simulation` and run it."""
    return Simulation(config).run(emit)
