from datetime import datetime, timezone

import numpy as np
import pytest

from eclipsesim import SimState, SnapshotCache, SnapshotFormatError
from eclipsesim.presets import create_bodies
from eclipsesim.snapshots import month_start, nearest_month_boundary, next_month_start
from eclipsesim.timescales import to_ns

JAN = datetime(2000, 1, 1, tzinfo=timezone.utc)
FEB = datetime(2000, 2, 1, tzinfo=timezone.utc)
MAR = datetime(2000, 3, 1, tzinfo=timezone.utc)


def _state(when, x=0.0):
    state = SimState.at(create_bodies("Sun, Earth & Moon"), when)
    state.bodies[0].pos = np.array([x, 0.0, 0.0])
    return state


def _filled_cache(directory):
    cache = SnapshotCache(directory).load()
    for i, when in enumerate([MAR, JAN, FEB]):
        cache.insert(_state(when, x=float(i)))
    return cache


def test_load_empty_directory_creates_it(tmp_path):
    cache = SnapshotCache(tmp_path / "snaps").load()
    assert (tmp_path / "snaps").is_dir()
    assert len(cache) == 0
    with pytest.raises(LookupError):
        cache.get_closest(JAN)


def test_insert_persists_and_sorts(tmp_path):
    cache = _filled_cache(tmp_path)
    assert cache.times == [to_ns(JAN), to_ns(FEB), to_ns(MAR)]
    assert sorted(p.name for p in tmp_path.iterdir()) == [
        "2000-01-01T00:00:00Z.state",
        "2000-02-01T00:00:00Z.state",
        "2000-03-01T00:00:00Z.state",
    ]

    reloaded = SnapshotCache(tmp_path).load()
    assert reloaded.times == cache.times
    assert reloaded.get_closest(FEB).bodies[0].pos[0] == 2.0


def test_insert_duplicate_is_noop(tmp_path):
    cache = _filled_cache(tmp_path)
    path = tmp_path / "2000-02-01T00:00:00Z.state"
    before = path.read_text()
    assert cache.insert(_state(FEB, x=99.0)) is False
    assert path.read_text() == before
    assert len(cache) == 3
    assert cache.get_closest(FEB).bodies[0].pos[0] == 2.0


@pytest.mark.parametrize(
    "target, expected",
    [
        (JAN, JAN),
        (FEB, FEB),
        (datetime(2000, 1, 10, tzinfo=timezone.utc), JAN),
        (datetime(2000, 1, 25, tzinfo=timezone.utc), FEB),
        # exactly between January and February: the later snapshot wins
        (datetime(2000, 1, 16, 12, tzinfo=timezone.utc), FEB),
        (datetime(1999, 6, 1, tzinfo=timezone.utc), JAN),
        (datetime(2003, 1, 1, tzinfo=timezone.utc), MAR),
    ],
)
def test_get_closest(tmp_path, target, expected):
    cache = _filled_cache(tmp_path)
    assert cache.get_closest(target).time_ns == to_ns(expected)
    assert cache.get_closest(to_ns(target)).time_ns == to_ns(expected)


def test_get_closest_returns_copy(tmp_path):
    cache = _filled_cache(tmp_path)
    state = cache.get_closest(JAN)
    state.bodies[0].pos[0] = 1e9
    assert cache.get_closest(JAN).bodies[0].pos[0] == 1.0


def test_contains_and_iter(tmp_path):
    cache = _filled_cache(tmp_path)
    assert to_ns(FEB) in cache
    assert to_ns(FEB) + 1 not in cache
    assert [s.time_ns for s in cache] == cache.times


def test_other_files_ignored(tmp_path):
    _filled_cache(tmp_path)
    (tmp_path / "README.txt").write_text("notes")
    assert len(SnapshotCache(tmp_path).load()) == 3


def test_malformed_snapshot_fails_load(tmp_path):
    _filled_cache(tmp_path)
    (tmp_path / "2000-04-01T00:00:00Z.state").write_text('{"bodies": [{"name": "Sun"}]}')
    with pytest.raises(SnapshotFormatError, match="2000-04-01"):
        SnapshotCache(tmp_path).load()


def test_badly_named_snapshot_fails_load(tmp_path):
    (tmp_path / "yesterday.state").write_text('{"bodies": []}')
    with pytest.raises(SnapshotFormatError, match="yesterday"):
        SnapshotCache(tmp_path).load()


def test_month_helpers():
    when = datetime(2000, 12, 17, 5, 30, tzinfo=timezone.utc)
    assert month_start(when) == datetime(2000, 12, 1, tzinfo=timezone.utc)
    assert next_month_start(when) == datetime(2001, 1, 1, tzinfo=timezone.utc)
    assert nearest_month_boundary(when) == datetime(2001, 1, 1, tzinfo=timezone.utc)
    assert nearest_month_boundary(datetime(2000, 2, 1, 0, 2, tzinfo=timezone.utc)) == FEB
    assert nearest_month_boundary(datetime(2000, 1, 31, 23, 58, tzinfo=timezone.utc)) == FEB


def test_undecodable_snapshot_fails_load(tmp_path):
    (tmp_path / "2000-05-01T00:00:00Z.state").write_bytes(b"\xff\xfe{")
    with pytest.raises(SnapshotFormatError, match="2000-05-01"):
        SnapshotCache(tmp_path).load()
