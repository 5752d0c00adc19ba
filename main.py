"""
tspsom - Training Pipeline and CLI

Primary entry point.  Reads a tour instance, trains a growing ring
self-organising map on it, renders snapshots along the way, and reports
the resulting tour.

  Step 1: Read samples (count line + coordinate pairs)
  Step 2: Seed a one-neuron ring at the centre of the bounding box
  Step 3: Train for the iteration budget with a decaying time progress,
          rendering every ``print_every`` steps
  Step 4: Optionally prune neighbouring neurons that collapsed together
  Step 5: Report ring size, tour length and timing

Usage:
    tspsom cities.tsp -l 20000 -p 2000 --seed 7
    python main.py cities.tsp --json --no-render

# ---- Changelog ----
# [2026-10-02] Initial creation.
#   What: TspSomPipeline class running the training loop, TrainingReport
#         for JSON output, CLI entry point using Rich for the table.
#   Settings: Reads config.yaml for all settings; command-line options
#         override it.  Defaults: 10000 iterations, snapshot every 1000.
#   How:  time_progress = (T - t + 1) / T for t = 1..T stays in (0, 1].
# [2026-10-17] Validate command-line overrides.
#   What: The merged config is re-validated so "-p -3" or "--seed -1"
#         exits with code 1.  Logging is configured before the config
#         is read, then raised to DEBUG by debug_level.
# -------------------
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from som_core.drawer import Projection, TourDrawer
from som_core.map_reader import SampleFormatError, read_sample_map
from som_core.samples import SampleMap
from som_core.som import RingSOM, grow_threshold, learn_after

logger = logging.getLogger("tspsom")


@dataclass
class TrainingReport:
    """Outcome of one training run.

    Attributes:
        file_path: Where the samples came from.
        sample_count: Number of samples.
        bounds: Bounding box of the samples (left/right/top/bottom).
        iterations: Learning steps performed.
        seed: Seed of the random generator, None if drawn from the OS.
        ring_size: Neurons in the ring after training (before pruning).
        tour_length: Ring perimeter after training (before pruning).
        pruned: Whether prune() ran.
        pruned_size: Ring size after pruning (equals ring_size if not pruned).
        pruned_length: Ring perimeter after pruning.
        snapshots: Paths of the rendered images.
        tour: Final neuron positions in ring order.
        stats: RingSOM telemetry at the end of the run.
        total_time_ms: Wall-clock time for the run.
    """
    file_path: str = ""
    sample_count: int = 0
    bounds: Dict[str, float] = field(default_factory=dict)
    iterations: int = 0
    seed: Optional[int] = None
    ring_size: int = 0
    tour_length: float = 0.0
    pruned: bool = False
    pruned_size: int = 0
    pruned_length: float = 0.0
    snapshots: List[str] = field(default_factory=list)
    tour: List[Tuple[float, float]] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)
    total_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "file_path": self.file_path,
            "sample_count": self.sample_count,
            "bounds": self.bounds,
            "iterations": self.iterations,
            "seed": self.seed,
            "ring_size": self.ring_size,
            "tour_length": round(self.tour_length, 6),
            "pruned": self.pruned,
            "pruned_size": self.pruned_size,
            "pruned_length": round(self.pruned_length, 6),
            "snapshots": self.snapshots,
            "tour": [[round(x, 6), round(y, 6)] for x, y in self.tour],
            "stats": self.stats,
            "total_time_ms": round(self.total_time_ms, 2),
        }


class TspSomPipeline:
    """Runs a full training session from a validated config dict.

    Usage:
        pipeline = TspSomPipeline(config)
        report = pipeline.run("cities.tsp")
        print(json.dumps(report.to_dict(), indent=2))
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.som: Optional[RingSOM] = None

    def run(self, file_path: str) -> TrainingReport:
        """Read samples from ``file_path`` and train on them.

        Raises:
            FileNotFoundError: If the file does not exist.
            SampleFormatError: If the file is malformed.
        """
        samples = read_sample_map(file_path)
        report = self.run_samples(samples)
        report.file_path = str(Path(file_path).resolve())
        return report

    def run_samples(self, samples: SampleMap) -> TrainingReport:
        """Train a fresh RingSOM on ``samples``."""
        start = time.time()

        training = self.config.get("training", {})
        ring_config = self.config.get("ring", {})
        render = self.config.get("render", {})

        iterations = training.get("iterations", 10000)
        print_every = training.get("print_every", 1000)
        seed = training.get("seed")

        if iterations < 1:
            raise ValueError(f"iterations must be positive, got {iterations}")

        som = RingSOM(samples, config={
            "spread": ring_config.get("spread", 3),
            "remove_distance": ring_config.get("remove_distance", 1.0),
            "seed": seed,
        })
        self.som = som

        bounds = som.bounds
        logger.info(
            "Bounds are :: left %f, right %f, top %f, bottom %f",
            bounds.top_left.x, bounds.bottom_right.x,
            bounds.top_left.y, bounds.bottom_right.y,
        )
        n = samples.items
        logger.info("Growing every %d learning steps", learn_after(n))
        if n >= 2:
            logger.info("Grow threshold is %f", grow_threshold(n))

        report = TrainingReport(
            sample_count=n,
            bounds=bounds.to_dict(),
            iterations=iterations,
            seed=seed,
        )

        drawer = None
        output_dir = Path(render.get("output_dir", "img"))
        if render.get("enabled", True):
            projection = Projection.from_bounds(
                bounds,
                width=render.get("width", 1024),
                height=render.get("height", 768),
                radius_ratio=render.get("radius_ratio", 0.005),
            )
            drawer = TourDrawer(samples, projection)
            path = drawer.draw(som.positions(), output_dir / "0.png")
            report.snapshots.append(str(path))

        for t in range(1, iterations + 1):
            som.train((iterations - t + 1) / iterations)

            if drawer is not None and print_every and t % print_every == 0:
                path = drawer.draw(som.positions(), output_dir / f"{t}.png")
                report.snapshots.append(str(path))
                logger.debug(
                    "cycle %d of %d :: %.2f%% done, ring size %d",
                    t, iterations, 100.0 * t / iterations, som.ring.size,
                )

        report.ring_size = som.ring.size
        report.tour_length = som.length()
        logger.info("Length of tour : %f (%d neurons)", report.tour_length, report.ring_size)

        if training.get("prune", False):
            som.prune()
            report.pruned = True
            logger.info("Length of pruned tour : %f", som.length())

        report.pruned_size = som.ring.size
        report.pruned_length = som.length()
        report.tour = [p.as_tuple() for p in som.positions()]
        report.stats = som.get_stats()
        report.total_time_ms = (time.time() - start) * 1000.0

        return report


# ---------------------------------------------------------------------------
# CLI Entry Point
# ---------------------------------------------------------------------------

def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Load tspsom configuration from YAML with Pydantic validation."""
    from config_schema import load_and_validate
    return load_and_validate(config_path)


def apply_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Overlay command-line options on the loaded config."""
    training = config.setdefault("training", {})
    render = config.setdefault("render", {})

    if args.iterations is not None:
        training["iterations"] = args.iterations
    if args.print_every is not None:
        training["print_every"] = args.print_every
    if args.debug is not None:
        training["debug_level"] = args.debug
    if args.seed is not None:
        training["seed"] = args.seed
    if args.prune:
        training["prune"] = True
    if args.output_dir is not None:
        render["output_dir"] = args.output_dir
    if args.no_render:
        render["enabled"] = False

    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tspsom",
        description=(
            "tspsom, approximate solutions to instances of the travelling "
            "salesman problem in 2D Euclidean space."
        ),
    )
    parser.add_argument(
        "tsp_file",
        help="File that contains the tsp instance",
    )
    parser.add_argument(
        "-l", "--iterations",
        type=int,
        help="Number of learning cycles (default: 10000)",
    )
    parser.add_argument(
        "-p", "--print-every",
        type=int,
        help="Render an image after this many iterations, 0 to disable (default: 1000)",
    )
    parser.add_argument(
        "-d", "--debug",
        type=int,
        help="Debug level, 0 = INFO, 1+ = DEBUG (default: 0)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the random generator",
    )
    parser.add_argument(
        "--prune",
        action="store_true",
        help="Merge neighbouring neurons closer than remove_distance after training",
    )
    parser.add_argument(
        "--output-dir", "-o",
        help="Directory for rendered images (default: img)",
    )
    parser.add_argument(
        "--no-render",
        action="store_true",
        help="Do not render any images",
    )
    parser.add_argument(
        "--config", "-c",
        default="config.yaml",
        help="Path to config.yaml",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output raw JSON instead of Rich formatted output",
    )
    parser.add_argument(
        "--describe",
        action="store_true",
        help="Print every neuron of the final ring",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    from pydantic import ValidationError

    from config_schema import validate_config

    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging before the config is read; debug_level may raise it.
    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s: %(message)s",
    )

    config = apply_overrides(load_config(args.config), args)
    try:
        config = validate_config(config).model_dump()
    except ValidationError as e:
        logger.error("Invalid command-line options: %s", e)
        return 1

    if config["training"]["debug_level"] >= 1:
        logging.getLogger().setLevel(logging.DEBUG)

    pipeline = TspSomPipeline(config)

    try:
        report = pipeline.run(args.tsp_file)
    except (OSError, SampleFormatError) as e:
        logger.error("Cannot read samples from %s: %s", args.tsp_file, e)
        return 1
    except ValueError as e:
        logger.error("Invalid training setup: %s", e)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        _rich_print_report(report)

    if args.describe and pipeline.som is not None:
        print(pipeline.som.describe())

    return 0


def _rich_print_report(report: TrainingReport) -> None:
    """Pretty-print a training report using Rich."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table

    console = Console()

    console.print(Panel(
        f"[bold green]{report.pruned_length:.4f}[/]",
        title="tspsom Tour Length",
        subtitle=report.file_path,
    ))

    table = Table(title="Training Run")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Samples", str(report.sample_count))
    table.add_row("Iterations", str(report.iterations))
    table.add_row("Seed", "-" if report.seed is None else str(report.seed))
    table.add_row("Ring size", str(report.ring_size))
    table.add_row("Tour length", f"{report.tour_length:.4f}")
    if report.pruned:
        table.add_row("Pruned size", str(report.pruned_size))
        table.add_row("Pruned length", f"{report.pruned_length:.4f}")
    table.add_row("Growth events", str(report.stats.get("growth_events", 0)))
    table.add_row("Snapshots", str(len(report.snapshots)))
    table.add_row("Time (ms)", f"{report.total_time_ms:.1f}")

    console.print(table)


if __name__ == "__main__":
    sys.exit(main())
