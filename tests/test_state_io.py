from datetime import datetime, timezone
import json

import numpy as np
import pytest

from eclipsesim import SimState, SnapshotFormatError, load_state, save_state
from eclipsesim.presets import create_bodies
from eclipsesim.state_io import parse_snapshot_filename, snapshot_filename
from eclipsesim.timescales import to_ns


def _valid_body(**overrides):
    body = {
        "name": "Moon",
        "gm": 4902.800066,
        "radius": 1737.0,
        "position": [1.0, 2.0, 3.0],
        "velocity": [0.1, 0.2, 0.3],
    }
    body.update(overrides)
    return body


def _write(path, bodies):
    path.write_text(json.dumps({"bodies": bodies}))
    return path


def test_round_trip_is_exact(tmp_path):
    state = SimState(create_bodies())
    # awkward floats must survive bit for bit
    state.bodies[0].pos = np.array([0.1, 1 / 3, -2.5e-300])
    path = tmp_path / "x.state"
    save_state(path, state)
    loaded = load_state(path, 123)

    assert loaded.time_ns == 123
    assert loaded.names == state.names
    for a, b in zip(state.bodies, loaded.bodies):
        assert a.gm == b.gm
        assert a.radius == b.radius
        assert np.array_equal(a.pos, b.pos)
        assert np.array_equal(a.vel, b.vel)


def test_file_is_human_readable(tmp_path):
    path = tmp_path / "x.state"
    save_state(path, SimState(create_bodies("Sun, Earth & Moon")))
    data = json.loads(path.read_text())
    assert [b["name"] for b in data["bodies"]] == ["Sun", "Earth", "Moon"]
    assert set(data["bodies"][0]) == {"name", "gm", "radius", "position", "velocity"}


def test_integer_fields_are_accepted(tmp_path):
    path = _write(tmp_path / "x.state", [_valid_body(radius=1737, position=[1, 2, 3])])
    body = load_state(path).bodies[0]
    assert body.radius == 1737.0
    assert np.allclose(body.pos, [1.0, 2.0, 3.0])


@pytest.mark.parametrize("field", ["name", "gm", "radius", "position", "velocity"])
def test_missing_field_rejected(tmp_path, field):
    body = _valid_body()
    del body[field]
    path = _write(tmp_path / "x.state", [body])
    with pytest.raises(SnapshotFormatError, match=field) as info:
        load_state(path)
    assert str(path) in str(info.value)


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"position": [1.0, 2.0]}, "position"),
        ({"velocity": [1.0, 2.0, 3.0, 4.0]}, "velocity"),
        ({"velocity": "fast"}, "velocity"),
        ({"position": [1.0, "x", 3.0]}, "position"),
        ({"gm": "heavy"}, "gm"),
        ({"radius": True}, "radius"),
        ({"name": 42}, "name"),
    ],
)
def test_wrong_shape_rejected(tmp_path, overrides, field):
    path = _write(tmp_path / "x.state", [_valid_body(**overrides)])
    with pytest.raises(SnapshotFormatError, match=field):
        load_state(path)


def test_non_positive_constants_rejected(tmp_path):
    path = _write(tmp_path / "x.state", [_valid_body(gm=-1.0)])
    with pytest.raises(SnapshotFormatError, match="gm"):
        load_state(path)


def test_invalid_document_rejected(tmp_path):
    bad_json = tmp_path / "a.state"
    bad_json.write_text("{not json")
    with pytest.raises(SnapshotFormatError, match="JSON"):
        load_state(bad_json)

    no_bodies = tmp_path / "b.state"
    no_bodies.write_text(json.dumps({"planets": []}))
    with pytest.raises(SnapshotFormatError, match="bodies"):
        load_state(no_bodies)

    not_table = _write(tmp_path / "c.state", [[1, 2, 3]])
    with pytest.raises(SnapshotFormatError, match="table"):
        load_state(not_table)


def test_snapshot_filename_round_trip():
    when = datetime(2001, 2, 1, tzinfo=timezone.utc)
    name = snapshot_filename(to_ns(when))
    assert name == "2001-02-01T00:00:00Z.state"
    assert parse_snapshot_filename(name) == to_ns(when)


def test_bad_snapshot_filename():
    with pytest.raises(SnapshotFormatError, match="notes.state"):
        parse_snapshot_filename("notes.state")


def test_undecodable_file_rejected(tmp_path):
    path = tmp_path / "x.state"
    path.write_bytes(b"\xff\xfe{")
    with pytest.raises(SnapshotFormatError, match="UTF-8") as info:
        load_state(path)
    assert str(path) in str(info.value)
