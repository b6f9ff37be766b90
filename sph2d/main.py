#!/usr/bin/env python3
"""
Command-line entry point for the 2D SPH solvers.

Usage:
    sph2d run --frames 500 --output trace.csv          # advance and record
    sph2d run --solver viscoelastic --particles 2500   # benchmark
    sph2d verify trace.csv --particles 500             # replay a recorded trace
    sph2d render --solver viscoelastic                 # open the viewer
"""

import argparse
import dataclasses
import logging
import sys
import time
from typing import List, Optional

from .config import SimulationConfig, load_config
from .errors import SPHError
from .regression import DEFAULT_TOLERANCE, compare_to_trace
from .solver import SphSolver, ViscoelasticSolver

logger = logging.getLogger("sph2d")

DEFAULT_PARTICLES = {"standard": 500, "viscoelastic": 2500}


def configure_logging(log_level: str = "INFO"):
    """Send sph2d log records to stderr as bare messages."""
    logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sph2d", description="2D SPH fluid simulation")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)"
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--solver",
        choices=["standard", "viscoelastic"],
        default="standard",
        help="Solver variant (default: standard)"
    )
    common.add_argument(
        "--particles",
        type=int,
        default=None,
        help="Number of particles (default: 500 standard, 2500 viscoelastic)"
    )
    common.add_argument(
        "--backend",
        choices=["cpu", "numba", "auto"],
        default=None,
        help="Computation backend (default: from config, else auto)"
    )
    common.add_argument("--seed", type=int, default=None, help="Seeding jitter seed")
    common.add_argument("--config", default=None, help="JSON configuration file")
    common.add_argument(
        "--check-finite",
        action="store_true",
        help="Abort as soon as any particle state becomes NaN or inf"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", parents=[common], help="Advance the solver and report timing")
    run.add_argument("--frames", type=int, default=100, help="Frames to simulate (default: 100)")
    run.add_argument("--output", default=None, help="Trace file to write, one line per frame")

    verify = sub.add_parser("verify", parents=[common], help="Replay a recorded trace")
    verify.add_argument("trace", help="Trace file recorded with 'run --output'")
    verify.add_argument(
        "--tolerance",
        type=float,
        default=DEFAULT_TOLERANCE,
        help=f"Maximum Euclidean distance per particle (default: {DEFAULT_TOLERANCE:g})"
    )

    render = sub.add_parser("render", parents=[common], help="Open the interactive viewer")
    render.add_argument("--fps", type=int, default=60, help="Target FPS (default: 60)")
    render.add_argument("--max-frames", type=int, default=None, help="Close after this many updates")

    return parser


def create_solver(args: argparse.Namespace, output: Optional[str] = None):
    """Build the solver described by the command-line options."""
    config = load_config(args.config) if args.config else SimulationConfig()

    settings = config.settings
    overrides = {}
    if args.backend is not None:
        overrides["backend"] = args.backend
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.check_finite:
        overrides["check_finite"] = True
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    n = args.particles if args.particles is not None else DEFAULT_PARTICLES[args.solver]
    if args.solver == "viscoelastic":
        return ViscoelasticSolver(n, output, parameters=config.viscoelastic, settings=settings)
    return SphSolver(n, output, parameters=config.standard, settings=settings)


def cmd_run(args: argparse.Namespace) -> int:
    solver = create_solver(args, args.output)
    start = time.perf_counter()
    for _ in range(args.frames):
        solver.update()
    elapsed = time.perf_counter() - start

    per_frame = elapsed / max(args.frames, 1) * 1000.0
    logger.info("%d frames of %d particles in %.2f s (%.2f ms/frame, backend %s)",
                args.frames, solver.number_of_particles, elapsed, per_frame, solver.backend.value)
    if args.output:
        logger.info("Trace written to %s", args.output)
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    solver = create_solver(args)
    result = compare_to_trace(solver, args.trace, args.tolerance)
    print(result.summary())
    return 0 if result.passed else 1


def cmd_render(args: argparse.Namespace) -> int:
    from .visualizer import SPHVisualizer

    solver = create_solver(args)
    viz = SPHVisualizer(solver, target_fps=args.fps)
    logger.info("SPACE pauses, I toggles info, ESC exits")
    viz.run(max_frames=args.max_frames)
    return 0


COMMANDS = {"run": cmd_run, "verify": cmd_verify, "render": cmd_render}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return COMMANDS[args.command](args)
    except SPHError as e:
        logger.error("Error: %s", e)
        return 2
    except FileNotFoundError as e:
        logger.error("Error: %s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
