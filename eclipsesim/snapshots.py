"""Cache of persisted simulation states keyed by time.

Snapshots let a run start near any requested date instead of integrating
from the preset epoch. The directory is append-only from this module's
point of view; nothing here deletes files.
"""
import bisect
from datetime import datetime
import logging
from pathlib import Path

from . import constants as C
from .physics import SimState
from .state_io import load_state, parse_snapshot_filename, save_state, snapshot_filename
from .timescales import to_ns

logger = logging.getLogger(__name__)


def month_start(dt: datetime) -> datetime:
    return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def next_month_start(dt: datetime) -> datetime:
    start = month_start(dt)
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


def nearest_month_boundary(dt: datetime) -> datetime:
    """Return whichever calendar-month start lies closest to ``dt``."""
    before = month_start(dt)
    after = next_month_start(dt)
    return before if dt - before <= after - dt else after


class SnapshotCache:
    """Sorted collection of snapshot states backed by a directory."""

    def __init__(self, directory=C.SNAPSHOT_DIR):
        self.directory = Path(directory)
        self._times: list[int] = []
        self._states: list[SimState] = []

    def load(self) -> "SnapshotCache":
        """Read every ``*.state`` file of the directory.

        A malformed file aborts the whole load with
        :class:`~eclipsesim.state_io.SnapshotFormatError`.
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        entries = []
        for path in self.directory.iterdir():
            if not path.name.endswith(C.SNAPSHOT_SUFFIX):
                continue
            time_ns = parse_snapshot_filename(path.name)
            entries.append((time_ns, load_state(path, time_ns)))
        entries.sort(key=lambda e: e[0])
        self._times = [t for t, _ in entries]
        self._states = [s for _, s in entries]
        logger.info("Loaded %d snapshots from %s", len(self._times), self.directory)
        return self

    def __len__(self):
        return len(self._times)

    def __iter__(self):
        return (s.clone() for s in self._states)

    def __contains__(self, time_ns) -> bool:
        i = bisect.bisect_left(self._times, time_ns)
        return i < len(self._times) and self._times[i] == time_ns

    @property
    def times(self) -> list[int]:
        return list(self._times)

    def get_closest(self, target) -> SimState:
        """Return a copy of the snapshot nearest to ``target``.

        ``target`` is a datetime or nanoseconds since the Unix epoch. When the
        target lies exactly between two snapshots the later one wins.
        """
        if not self._times:
            raise LookupError(f"No snapshots available in {self.directory}")
        target_ns = to_ns(target) if isinstance(target, datetime) else int(target)
        i = bisect.bisect_left(self._times, target_ns)
        if i < len(self._times) and self._times[i] == target_ns:
            return self._states[i].clone()
        if i == 0:
            return self._states[0].clone()
        if i == len(self._times):
            return self._states[-1].clone()
        t1 = self._times[i - 1]
        t2 = self._times[i]
        if t2 - target_ns > target_ns - t1:
            return self._states[i - 1].clone()
        return self._states[i].clone()

    def insert(self, state: SimState) -> bool:
        """Persist ``state`` unless a snapshot already exists at its time.

        Returns True when a new snapshot was written.
        """
        if state.time_ns in self:
            return False
        i = bisect.bisect_left(self._times, state.time_ns)
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / snapshot_filename(state.time_ns)
        save_state(path, state)
        self._times.insert(i, state.time_ns)
        self._states.insert(i, state.clone())
        logger.info("Saved snapshot %s", path)
        return True
