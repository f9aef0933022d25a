"""
Run configuration
=================

Every tunable used by the driver and its components is passed in through a
:class:`SimulationConfig`; defaults come from :mod:`eclipsesim.constants`.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
import math

from . import constants as C
from .events import Detector, EclipseDetector, Observer, VisibilityDetector
from .integrators import INTEGRATORS, get_integrator
from .timescales import as_utc

DETECTORS = ("eclipse", "visibility")


@dataclass
class ObserverConfig:
    """
    Geometry of the Earth-imaging observer used by the visibility detector.

    Attributes
    ----------
    longitude_deg : float
        Sub-observer longitude, degrees east.
    radius_km : float
        Orbit radius measured from Earth's centre.
    fov_half_angle_deg : float
        Half-angle of the field of view around the boresight.
    obscuration_angle_deg : float
        Targets closer than this to the boresight, and behind Earth, are
        hidden by the imaged disk.
    target : str
        Name of the body to watch.
    """

    longitude_deg: float = 0.0
    radius_km: float = C.GEOSTATIONARY_RADIUS
    fov_half_angle_deg: float = C.FOV_HALF_ANGLE_DEG
    obscuration_angle_deg: float = C.OBSCURATION_ANGLE_DEG
    target: str = "Moon"


@dataclass
class SimulationConfig:
    """
    Parameters of one simulation run.

    Attributes
    ----------
    start, end : datetime
        Scan window on the simulation (TT) time scale. Naive datetimes are
        taken as UTC-aligned.
    step : float
        Coarse integration step in seconds.
    refine_step : float
        Reverse step used to localise transitions.
    integrator : str
        One of :data:`eclipsesim.integrators.INTEGRATORS`.
    detector : str
        ``"eclipse"`` or ``"visibility"``.
    snapshot_dir : Path
        Directory of the snapshot cache.
    use_snapshots : bool
        Seed from and write to the snapshot cache.
    light_delay_margin : float
        Longest light delay the eclipse detector keeps history for.
    penumbral : bool
        Report penumbral lunar eclipses.
    solar : bool
        Report solar eclipses.
    use_jit : bool
        Use the numba acceleration kernel.
    preset : str
        Initial body set when no snapshot is available.
    observer : ObserverConfig
        Visibility detector geometry.
    """

    start: datetime
    end: datetime
    step: float = C.COARSE_STEP
    refine_step: float = C.REFINE_STEP
    integrator: str = C.DEFAULT_INTEGRATOR
    detector: str = "eclipse"
    snapshot_dir: Path = Path(C.SNAPSHOT_DIR)
    use_snapshots: bool = True
    light_delay_margin: float = C.LIGHT_DELAY_MARGIN
    penumbral: bool = False
    solar: bool = True
    use_jit: bool = False
    preset: str = "Solar System"
    observer: ObserverConfig = field(default_factory=ObserverConfig)

    def __post_init__(self):
        self.start = as_utc(self.start)
        self.end = as_utc(self.end)
        self.snapshot_dir = Path(self.snapshot_dir)
        if self.end <= self.start:
            raise ValueError(f"end ({self.end}) must be after start ({self.start})")
        if not self.step > 0:
            raise ValueError(f"step must be positive, got {self.step}")
        if not 0 < self.refine_step <= self.step:
            raise ValueError(
                f"refine_step must be in (0, step], got {self.refine_step} with step {self.step}"
            )
        if self.integrator not in INTEGRATORS:
            raise ValueError(
                f"Unknown integrator '{self.integrator}', choose one of {sorted(INTEGRATORS)}"
            )
        if self.detector not in DETECTORS:
            raise ValueError(f"Unknown detector '{self.detector}', choose one of {DETECTORS}")

    def make_integrator(self):
        return get_integrator(self.integrator, self.step)

    def make_detector(self) -> Detector:
        if self.detector == "visibility":
            obs = self.observer
            return VisibilityDetector(
                Observer(math.radians(obs.longitude_deg), obs.radius_km),
                fov_half_angle=math.radians(obs.fov_half_angle_deg),
                obscuration_angle=math.radians(obs.obscuration_angle_deg),
                target=obs.target,
            )
        return EclipseDetector(
            self.step,
            delay_margin=self.light_delay_margin,
            penumbral=self.penumbral,
            solar=self.solar,
        )
