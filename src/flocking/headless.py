from __future__ import annotations

import argparse
import csv
import json
import logging
from dataclasses import replace
from pathlib import Path
from time import perf_counter
from typing import List, Optional

from .config import FlockConfig
from .flock import Flock
from .metrics import FrameMetrics, collect_metrics

logger = logging.getLogger(__name__)

_HEADER = [
    "frame",
    "active_count",
    "avg_speed",
    "max_speed",
    "neighbor_links",
    "step_ms",
]


def _format_row(metrics: FrameMetrics, step_ms: float) -> list[object]:
    return [
        metrics.frame,
        metrics.active_count,
        f"{metrics.average_speed:.4f}",
        f"{metrics.max_speed:.4f}",
        metrics.neighbor_links,
        f"{step_ms:.3f}",
    ]


def _summarize(history: List[FrameMetrics], steps: int, seed: Optional[int], width: int, height: int) -> dict:
    step_ms = [m.step_duration_ms for m in history]
    return {
        "steps": steps,
        "seed": seed,
        "viewport": {"width": width, "height": height},
        "active_count": history[-1].active_count if history else 0,
        "step_ms": {
            "mean": sum(step_ms) / len(step_ms) if step_ms else 0.0,
            "max": max(step_ms, default=0.0),
        },
        "avg_speed": history[-1].average_speed if history else 0.0,
        "neighbor_links": {
            "mean": sum(m.neighbor_links for m in history) / len(history) if history else 0.0,
            "max": max((m.neighbor_links for m in history), default=0),
        },
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    width: int = 1280,
    height: int = 720,
    deterministic_log: bool = False,
    config: Optional[FlockConfig] = None,
    summary_path: Optional[Path] = None,
) -> List[FrameMetrics]:
    config = config or FlockConfig()
    if seed is not None:
        config = replace(config, seed=seed)
    flock = Flock(width, height, config)
    logger.info("running %d frames on a %dx%d viewport (seed=%s)", steps, width, height, config.seed)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    history: List[FrameMetrics] = []
    try:
        for frame in range(steps):
            start = perf_counter()
            flock.step(width, height)
            elapsed_ms = (perf_counter() - start) * 1000.0
            metrics = collect_metrics(flock, frame, elapsed_ms)
            history.append(metrics)
            if writer:
                step_ms = 0.0 if deterministic_log else metrics.step_duration_ms
                writer.writerow(_format_row(metrics, step_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        summary = _summarize(history, steps, config.seed, width, height)
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    logger.info("finished %d frames", steps)
    return history


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless flocking simulation")
    parser.add_argument("--steps", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--width", type=int, default=1280)
    parser.add_argument("--height", type=int, default=720)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with flock parameters")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-frame metrics")
    parser.add_argument("--summary", type=Path, default=None, help="JSON file to write a run summary")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (step_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = FlockConfig.from_yaml(args.config) if args.config else None
    run_headless(
        args.steps,
        args.seed,
        args.log,
        width=args.width,
        height=args.height,
        deterministic_log=args.deterministic_log,
        config=config,
        summary_path=args.summary,
    )


if __name__ == "__main__":
    main()
