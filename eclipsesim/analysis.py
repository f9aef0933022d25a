from collections import deque
import csv
from pathlib import Path

from .physics import system_energy
from .timescales import format_utc, from_ns


class EnergyMonitor:
    """Track the relative drift of the total energy of a state."""

    def __init__(self, max_points=500):
        self.history = deque(maxlen=max_points)
        self.initial_energy = None

    def set_initial_energy(self, state):
        _, _, self.initial_energy = system_energy(state)
        self.history.clear()

    def update(self, state):
        """Record the drift in percent at the state's time and return it."""
        if self.initial_energy is None or self.initial_energy == 0:
            return None
        _, _, current_energy = system_energy(state)
        drift = ((current_energy - self.initial_energy) / abs(self.initial_energy)) * 100
        self.history.append((state.time_ns, drift))
        return drift

    @property
    def max_drift(self) -> float:
        if not self.history:
            return 0.0
        return max(abs(d) for _, d in self.history)

    def export_csv(self, path) -> Path:
        """Write the recorded drift as ``time,energy_drift_percent`` rows.

        Times are UTC timestamps of the simulation clock.
        """
        path = Path(path)
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(["time", "energy_drift_percent"])
            for time_ns, drift in self.history:
                writer.writerow([format_utc(from_ns(time_ns)), f"{drift:.6e}"])
        return path
