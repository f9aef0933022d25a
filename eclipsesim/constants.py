"""Physical constants and default settings.

Distances are in kilometres, velocities in km/s and times in seconds.
"""

from datetime import datetime, timezone
import math

# --- Physical constants ---
C_LIGHT = 299792.458  # km/s
SHADOW_ENLARGEMENT = 1.011  # atmospheric enlargement of Earth's shadow
EARTH_OBLIQUITY = math.radians(23.4392911)  # J2000
SIDEREAL_RATE = math.radians(360.98564736629) / 86400.0  # rad/s
GMST_J2000 = math.radians(280.46061837)
GEOSTATIONARY_RADIUS = 42164.0  # km

# --- Time ---
DAY = 86400.0
YEAR = 365.25 * DAY
J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
PRESET_EPOCH = datetime(2000, 1, 1, tzinfo=timezone.utc)
NS_PER_SECOND = 1_000_000_000
# Sub-second drift closer than this to a whole second is snapped onto it.
TIME_SNAP_NS = 1_000

# --- Integration defaults ---
COARSE_STEP = 300.0
REFINE_STEP = 1.0
DEFAULT_INTEGRATOR = "suzuki"

# --- Event detection defaults ---
LIGHT_DELAY_MARGIN = 600.0  # longest light delay kept in the history buffer
FOV_HALF_ANGLE_DEG = 10.0
OBSCURATION_ANGLE_DEG = 8.7

# --- Snapshots ---
SNAPSHOT_DIR = "snapshots"
SNAPSHOT_SUFFIX = ".state"
SNAPSHOT_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
