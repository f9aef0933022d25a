"""Command line entry point."""

import argparse
import logging

from . import constants as C
from .config import DETECTORS, ObserverConfig, SimulationConfig
from .integrators import INTEGRATORS
from .physics import SimState
from .presets import PRESETS, create_bodies
from .simulation import Simulation
from .timescales import parse_utc

log = logging.getLogger("eclipsesim")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Integrate the solar system and report eclipses or Moon visibility"
    )
    parser.add_argument("--start", default="2000-01-01T00:00:00Z", help="Start time (ISO-8601, TT)")
    parser.add_argument("--end", default="2023-01-01T00:00:00Z", help="End time (ISO-8601, TT)")
    parser.add_argument("--step", type=float, default=C.COARSE_STEP, help="Coarse step in seconds")
    parser.add_argument(
        "--refine-step", type=float, default=C.REFINE_STEP, help="Refinement step in seconds"
    )
    parser.add_argument("--integrator", choices=sorted(INTEGRATORS), default=C.DEFAULT_INTEGRATOR)
    parser.add_argument("--detector", choices=DETECTORS, default="eclipse")
    parser.add_argument("--preset", choices=sorted(PRESETS), default="Solar System")
    parser.add_argument("--snapshot-dir", default=C.SNAPSHOT_DIR, help="Snapshot cache directory")
    parser.add_argument("--no-snapshots", action="store_true", help="Do not read or write snapshots")
    parser.add_argument("--penumbral", action="store_true", help="Report penumbral lunar eclipses")
    parser.add_argument("--no-solar", action="store_true", help="Do not report solar eclipses")
    parser.add_argument("--jit", action="store_true", help="Use the numba acceleration kernel")
    parser.add_argument("--longitude", type=float, default=0.0, help="Observer longitude in degrees")
    parser.add_argument(
        "--fov", type=float, default=C.FOV_HALF_ANGLE_DEG, help="Observer field of view half-angle"
    )
    parser.add_argument("--nasa-kernel", help="Seed bodies at the start time from an SPK kernel")
    parser.add_argument(
        "--download-kernel",
        metavar="URL",
        help="Fetch an SPK kernel (into --nasa-kernel if given) and seed from it",
    )
    parser.add_argument("--energy-csv", metavar="PATH", help="Write the energy drift history as CSV")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    return SimulationConfig(
        start=parse_utc(args.start),
        end=parse_utc(args.end),
        step=args.step,
        refine_step=args.refine_step,
        integrator=args.integrator,
        detector=args.detector,
        snapshot_dir=args.snapshot_dir,
        use_snapshots=not args.no_snapshots,
        penumbral=args.penumbral,
        solar=not args.no_solar,
        use_jit=args.jit,
        preset=args.preset,
        observer=ObserverConfig(longitude_deg=args.longitude, fov_half_angle_deg=args.fov),
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s  %(levelname)-7s  %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = config_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    initial = None
    if args.download_kernel:
        from .nasa import download_ephemeris

        args.nasa_kernel = str(download_ephemeris(args.download_kernel, args.nasa_kernel or "."))
    if args.nasa_kernel:
        from .nasa import create_state, load_ephemeris

        log.info("Seeding bodies from %s", args.nasa_kernel)
        ephem = load_ephemeris(args.nasa_kernel)
        template = SimState(create_bodies(config.preset))
        initial = create_state(ephem, config.start, template)

    sim = Simulation(config, initial)
    try:
        sim.seed()
    except ValueError as exc:
        parser.error(str(exc))
    sim.run()

    if args.energy_csv:
        sim.energy_monitor.export_csv(args.energy_csv)
        log.info("Energy drift history written to %s", args.energy_csv)
    return 0
