from __future__ import annotations

from dataclasses import dataclass

from .flock import Flock


@dataclass(slots=True)
class FrameMetrics:
    frame: int
    active_count: int
    average_speed: float
    max_speed: float
    neighbor_links: int
    step_duration_ms: float = 0.0


def collect_metrics(flock: Flock, frame: int, step_duration_ms: float = 0.0) -> FrameMetrics:
    active = flock.active_count
    speeds = [boid.velocity.length() for boid in flock.boids[:active]]
    return FrameMetrics(
        frame=frame,
        active_count=active,
        average_speed=sum(speeds) / active if active else 0.0,
        max_speed=max(speeds, default=0.0),
        neighbor_links=flock.neighbor_links,
        step_duration_ms=step_duration_ms,
    )
