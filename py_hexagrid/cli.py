"""Command line entry point: build a grid, relax it and report quality."""

import argparse
import json
import logging
import sys
from typing import List, Optional

import matplotlib
import structlog

matplotlib.use("Agg")

from .config import settings
from .core.errors import SideCountTooLowError
from .core.grid import RELAX_MODES, GridConfig, generate_grid, relax_grid
from .core.mesh_quality import analyze_grid
from .render import GridPlotter


def configure_logging(level: str = "INFO", fmt: str = "plain") -> None:
    """Route structlog through the stdlib logger with a JSON or console renderer."""
    logging.basicConfig(format="%(message)s", stream=sys.stderr,
                        level=getattr(logging, level.upper(), logging.INFO))

    renderer = (structlog.processors.JSONRenderer() if fmt == "json"
                else structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hexagrid",
        description="Generate and relax a quad grid over a hexagon",
    )
    parser.add_argument("--size", type=int, default=settings.grid_size,
                        help="Lattice points per hexagon side (>= 2)")
    parser.add_argument("--seed", type=int, default=settings.seed,
                        help="Seed for reproducible generation")
    parser.add_argument("--max-iterations", type=int, default=settings.max_iteration_count,
                        help="Consecutive misses that end triangle pairing")
    parser.add_argument("--circle", action=argparse.BooleanOptionalAction, default=settings.force_circle_shape,
                        help="Project the boundary onto the unit circle")
    parser.add_argument("--relax-iterations", type=int, default=settings.relax_iterations)
    parser.add_argument("--mode", choices=sorted(RELAX_MODES), default=settings.relax_mode)
    parser.add_argument("--relax-side", action="store_true",
                        help="Also pull boundary points toward the unit circle")
    parser.add_argument("--output", help="Write a PNG of the relaxed grid")
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--log-format", choices=["plain", "json"], default=settings.log_format)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_format)
    logger = structlog.get_logger()

    config = GridConfig(args.size, args.max_iterations, args.circle)
    try:
        grid = generate_grid(config, args.seed)
    except SideCountTooLowError as e:
        logger.error("Grid generation failed", size=args.size, error=str(e))
        print(f"error: {e} (size must be at least 2, got {args.size})", file=sys.stderr)
        return 2

    relax_grid(grid, args.relax_iterations, args.mode, args.relax_side)

    if args.output:
        plotter = GridPlotter(grid)
        plotter.save(args.output)
        plotter.close()

    print(json.dumps(analyze_grid(grid), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
