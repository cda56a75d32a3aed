from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class FlockConfig:
    max_boids: int = 150
    density: float = 0.00015
    radius: float = 80.0
    separation_factor: float = 30.0
    alignment_factor: float = 0.02
    cohesion_factor: float = 0.0035
    max_speed: float = 4.0
    wall_radius: float = 100.0
    wall_factor: float = 100.0
    # Wall distances below this are clamped to avoid the 1/d^2 singularity
    min_wall_distance: float = 1.0
    min_start_speed: float = 1.0
    max_start_speed: float = 2.0
    front_offset: float = 10.0
    side_offset: float = 5.0
    back_offset: float = 2.0
    # Separation divisor floor; coincident boids contribute nothing
    min_separation_distance: float = 1e-6
    # Velocities shorter than this keep the previous heading
    heading_epsilon: float = 1e-6
    seed: Optional[int] = None

    def validate(self) -> "FlockConfig":
        if self.max_boids <= 0:
            raise ValueError(f"max_boids must be positive, got {self.max_boids}")
        for name in ("density", "radius", "max_speed", "wall_radius", "wall_factor"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        for name in ("min_wall_distance", "min_separation_distance", "heading_epsilon"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if not 0 < self.min_start_speed <= self.max_start_speed:
            raise ValueError(
                f"start speed range must satisfy 0 < min <= max, got "
                f"[{self.min_start_speed}, {self.max_start_speed})"
            )
        return self

    @staticmethod
    def from_yaml(path: Path) -> "FlockConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    flock: FlockConfig = field(default_factory=FlockConfig)
    frame_interval: float = 1.0 / 60.0
    broadcast_interval: int = 1
    # Unacknowledged frames kept for slow clients; oldest are dropped first
    max_queued_frames: int = 120
    width: int = 800
    height: int = 600

    @staticmethod
    def from_yaml(path: Path) -> "AppConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_app_config(data)


def _check_keys(cls: type, raw: dict) -> None:
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {', '.join(unknown)}")


def load_config(raw: dict) -> FlockConfig:
    flock_raw = raw.get("flock", raw)
    _check_keys(FlockConfig, flock_raw)
    return FlockConfig(**flock_raw).validate()


def load_app_config(raw: dict) -> AppConfig:
    flock = load_config(raw.get("flock", {}))
    app_values = {k: v for k, v in raw.items() if k != "flock"}
    _check_keys(AppConfig, app_values)
    return AppConfig(flock=flock, **app_values)
