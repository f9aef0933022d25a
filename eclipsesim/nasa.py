"""NASA JPL ephemeris helpers for seeding bodies."""

from datetime import datetime
import logging
from pathlib import Path
from urllib.request import urlopen
import shutil

import numpy as np
from jplephem.spk import SPK

from .constants import DAY, EARTH_OBLIQUITY
from .physics import Body, SimState
from .timescales import as_utc

logger = logging.getLogger(__name__)

# Earth and Moon are stored relative to the Earth-Moon barycentre (3).
SEGMENT_CHAINS = {
    399: [(0, 3), (3, 399)],
    301: [(0, 3), (3, 301)],
}

NAIF_IDS = {
    "Sun": 10,
    "Mercury": 1,
    "Venus": 2,
    "Earth": 399,
    "Moon": 301,
    "Mars": 4,
    "Jupiter": 5,
    "Saturn": 6,
    "Uranus": 7,
    "Neptune": 8,
}


def load_ephemeris(path: str) -> SPK:
    """Load a JPL SPK ephemeris file."""
    return SPK.open(path)


def equatorial_to_ecliptic(vec: np.ndarray, obliquity: float = EARTH_OBLIQUITY) -> np.ndarray:
    """Rotate an ICRF (equatorial) vector into the J2000 ecliptic frame."""
    c, s = np.cos(obliquity), np.sin(obliquity)
    x, y, z = vec
    return np.array([x, c * y + s * z, -s * y + c * z])


def julian_date(epoch: datetime) -> float:
    return as_utc(epoch).timestamp() / DAY + 2440587.5


def body_state(ephem: SPK, target: int, epoch: datetime) -> tuple[np.ndarray, np.ndarray]:
    """Return the barycentric ecliptic position (km) and velocity (km/s) of ``target``."""
    jd = julian_date(epoch)
    pos = np.zeros(3)
    vel = np.zeros(3)
    for center, body in SEGMENT_CHAINS.get(target, [(0, target)]):
        p, v = ephem[center, body].compute_and_differentiate(jd)
        pos += p
        vel += v
    # jplephem differentiates per day
    return equatorial_to_ecliptic(pos), equatorial_to_ecliptic(vel / DAY)


def create_body(
    ephem: SPK,
    target: int,
    epoch: datetime,
    gm: float,
    radius: float,
    *,
    name: str | None = None,
) -> Body:
    """Create a :class:`Body` instance from ephemeris data."""
    pos, vel = body_state(ephem, target, epoch)
    return Body(name or str(target), gm, pos, vel, radius)


def create_state(ephem: SPK, epoch: datetime, template: SimState) -> SimState:
    """Re-seed every body of ``template`` from the ephemeris at ``epoch``."""
    bodies = [
        create_body(ephem, NAIF_IDS[b.name], epoch, b.gm, b.radius, name=b.name)
        for b in template.bodies
    ]
    return SimState.at(bodies, epoch, use_jit=template.use_jit)


def download_ephemeris(url: str, dest: str | Path, *, overwrite: bool = False) -> Path:
    """Fetch a JPL SPK kernel unless it is already on disk.

    ``dest`` is a directory (the file name is taken from ``url``) or a full
    file path. The body is streamed to a ``.part`` file that is renamed once
    complete. An existing kernel is reused unless ``overwrite`` is set.
    """
    dest_path = Path(dest)
    if dest_path.is_dir():
        dest_path = dest_path / Path(url).name
    if dest_path.exists() and not overwrite:
        logger.info("Using existing kernel %s", dest_path)
        return dest_path.resolve()

    partial = dest_path.with_name(dest_path.name + ".part")
    logger.info("Downloading %s to %s", url, dest_path)
    with urlopen(url) as resp, open(partial, "wb") as f:
        shutil.copyfileobj(resp, f)
    partial.replace(dest_path)
    return dest_path.resolve()
