"""N-body solar system integration with eclipse and visibility detection."""

from importlib.metadata import PackageNotFoundError, version

from .physics import Body, BodyNotFoundError, Derivative, SimState, system_energy
from .integrators import (
    RK4Integrator,
    SymplecticIntegrator,
    compute_accelerations,
    get_integrator,
    propagate_to,
)
from .constants import C_LIGHT, COARSE_STEP, REFINE_STEP
from .state_io import SnapshotFormatError, save_state, load_state
from .snapshots import SnapshotCache
from .events import (
    Eclipse,
    EclipseDetector,
    Event,
    Visibility,
    VisibilityDetector,
)
from .refine import RefinementError, Transition, refine_transition
from .config import ObserverConfig, SimulationConfig
from .simulation import Simulation, run_simulation

try:
    __version__ = version("eclipsesim")
except PackageNotFoundError:
    # Fallback when package metadata is unavailable (e.g. running from source)
    __version__ = "0.0.0"

__all__ = [
    "Body",
    "BodyNotFoundError",
    "Derivative",
    "SimState",
    "system_energy",
    "RK4Integrator",
    "SymplecticIntegrator",
    "compute_accelerations",
    "get_integrator",
    "propagate_to",
    "C_LIGHT",
    "COARSE_STEP",
    "REFINE_STEP",
    "SnapshotFormatError",
    "save_state",
    "load_state",
    "SnapshotCache",
    "Eclipse",
    "EclipseDetector",
    "Event",
    "Visibility",
    "VisibilityDetector",
    "RefinementError",
    "Transition",
    "refine_transition",
    "ObserverConfig",
    "SimulationConfig",
    "Simulation",
    "run_simulation",
    "__version__",
]
