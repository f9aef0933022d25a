"""Reading and writing snapshot files.

A snapshot is a JSON document holding the body list::

    {"bodies": [{"name": "Sun", "gm": 132712440041.9, "radius": 696000.0,
                 "position": [x, y, z], "velocity": [vx, vy, vz]}, ...]}

The snapshot time is not stored in the document; it is encoded in the file
name (see :func:`snapshot_filename`).
"""
from datetime import datetime, timezone
import json
from pathlib import Path

from . import constants as C
from .physics import Body, SimState
from .timescales import format_utc, from_ns, to_ns


class SnapshotFormatError(ValueError):
    """A snapshot file is missing a field or has a field of the wrong shape."""


def _body_to_dict(body: Body) -> dict:
    return {
        "name": body.name,
        "gm": body.gm,
        "radius": body.radius,
        "position": body.pos.tolist(),
        "velocity": body.vel.tolist(),
    }


def _require(item: dict, key: str, path, index: int):
    if key not in item:
        raise SnapshotFormatError(f"{path}: body #{index} is missing '{key}'")
    return item[key]


def _float(value, key: str, path, index: int) -> float:
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotFormatError(
            f"{path}: body #{index} field '{key}' should be a number, got {value!r}"
        )
    return float(value)


def _vector(value, key: str, path, index: int) -> list[float]:
    if not isinstance(value, list) or len(value) != 3:
        raise SnapshotFormatError(
            f"{path}: body #{index} field '{key}' should be a list of 3 numbers, got {value!r}"
        )
    return [_float(v, key, path, index) for v in value]


def _body_from_dict(item, path, index: int) -> Body:
    if not isinstance(item, dict):
        raise SnapshotFormatError(f"{path}: body #{index} should be a table, got {item!r}")
    name = _require(item, "name", path, index)
    if not isinstance(name, str):
        raise SnapshotFormatError(f"{path}: body #{index} field 'name' should be a string")
    gm = _float(_require(item, "gm", path, index), "gm", path, index)
    radius = _float(_require(item, "radius", path, index), "radius", path, index)
    pos = _vector(_require(item, "position", path, index), "position", path, index)
    vel = _vector(_require(item, "velocity", path, index), "velocity", path, index)
    try:
        return Body(name, gm, pos, vel, radius)
    except ValueError as exc:
        raise SnapshotFormatError(f"{path}: {exc}") from exc


def save_state(filepath, state: SimState) -> None:
    """Serialize the body list of ``state`` to a JSON file."""
    data = {"bodies": [_body_to_dict(b) for b in state.bodies]}
    Path(filepath).write_text(json.dumps(data, indent=2), encoding="utf-8")


def load_state(filepath, time_ns: int = 0) -> SimState:
    """Load a state from a JSON file, stamping it with ``time_ns``.

    Raises
    ------
    SnapshotFormatError
        If the document is not UTF-8 JSON or any body is malformed.
    """
    path = Path(filepath)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SnapshotFormatError(f"{path}: not valid JSON ({exc})") from exc
    except UnicodeDecodeError as exc:
        raise SnapshotFormatError(f"{path}: not UTF-8 text ({exc.reason})") from exc
    if not isinstance(data, dict) or not isinstance(data.get("bodies"), list):
        raise SnapshotFormatError(f"{path}: expected a table with a 'bodies' list")
    bodies = [_body_from_dict(item, path, i) for i, item in enumerate(data["bodies"])]
    return SimState(bodies, time_ns)


def snapshot_filename(time_ns: int) -> str:
    """File name of the snapshot taken at ``time_ns`` (whole seconds)."""
    return format_utc(from_ns(time_ns)) + C.SNAPSHOT_SUFFIX


def parse_snapshot_filename(name: str) -> int:
    """Return the snapshot time encoded in a file name."""
    stem = name[: -len(C.SNAPSHOT_SUFFIX)] if name.endswith(C.SNAPSHOT_SUFFIX) else name
    try:
        when = datetime.strptime(stem, C.SNAPSHOT_TIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError as exc:
        raise SnapshotFormatError(f"{name}: cannot parse snapshot time ({exc})") from exc
    return to_ns(when)
