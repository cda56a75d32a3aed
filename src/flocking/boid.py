from __future__ import annotations

from dataclasses import dataclass, field
from itertools import chain
from typing import Iterable, NamedTuple, Optional, Sequence

from pygame.math import Vector2

from .config import FlockConfig
from .vector import clamp_length, safe_normalize


class SocialForces(NamedTuple):
    separation: Vector2
    alignment: Vector2
    cohesion: Vector2
    neighbors: int


@dataclass(slots=True)
class Boid:
    position: Vector2
    velocity: Vector2
    heading: Vector2 = field(default_factory=lambda: Vector2(1.0, 0.0))

    @classmethod
    def zero(cls) -> "Boid":
        return cls(position=Vector2(), velocity=Vector2())

    @classmethod
    def moving(cls, position: Vector2, velocity: Vector2, config: FlockConfig) -> "Boid":
        heading = safe_normalize(velocity, Vector2(1.0, 0.0), config.heading_epsilon)
        return cls(position=Vector2(position), velocity=Vector2(velocity), heading=heading)

    def forces(self, others: Iterable["Boid"], config: FlockConfig) -> Optional[SocialForces]:
        """Accumulate separation, alignment and cohesion over boids within ``config.radius``.

        Returns ``None`` when nothing is in range so a solitary boid keeps its velocity.
        """
        neighbors = 0
        sep_x = sep_y = 0.0
        vel_x = vel_y = 0.0
        pos_x = pos_y = 0.0
        self_x = self.position.x
        self_y = self.position.y
        radius = config.radius
        min_distance = config.min_separation_distance

        for other in others:
            delta_x = self_x - other.position.x
            delta_y = self_y - other.position.y
            distance = (delta_x * delta_x + delta_y * delta_y) ** 0.5
            if distance < radius:
                divisor = max(distance, min_distance)
                divisor = divisor * divisor * divisor
                sep_x += delta_x / divisor
                sep_y += delta_y / divisor
                vel_x += other.velocity.x
                vel_y += other.velocity.y
                pos_x += other.position.x
                pos_y += other.position.y
                neighbors += 1

        if neighbors == 0:
            return None
        alignment = Vector2(vel_x / neighbors, vel_y / neighbors)
        cohesion = Vector2(pos_x / neighbors - self_x, pos_y / neighbors - self_y)
        return SocialForces(Vector2(sep_x, sep_y), alignment, cohesion, neighbors)

    def steer(self, others: Iterable["Boid"], config: FlockConfig) -> tuple[Vector2, int]:
        """Velocity after social forces and the speed clamp, before wall avoidance."""
        velocity = Vector2(self.velocity)
        social = self.forces(others, config)
        neighbors = 0
        if social is not None:
            velocity += config.separation_factor * social.separation
            velocity += config.alignment_factor * social.alignment
            velocity += config.cohesion_factor * social.cohesion
            neighbors = social.neighbors
        return clamp_length(velocity, config.max_speed), neighbors

    def step(
        self,
        lhs: Sequence["Boid"],
        rhs: Sequence["Boid"],
        width: float,
        height: float,
        config: FlockConfig,
    ) -> "Boid":
        return self.step_counted(lhs, rhs, width, height, config)[0]

    def step_counted(
        self,
        lhs: Sequence["Boid"],
        rhs: Sequence["Boid"],
        width: float,
        height: float,
        config: FlockConfig,
    ) -> tuple["Boid", int]:
        velocity, neighbors = self.steer(chain(lhs, rhs), config)
        velocity = add_wall_force(velocity, self.position, width, height, config)
        position = self.position + velocity
        heading = safe_normalize(velocity, self.heading, config.heading_epsilon)
        return Boid(position=position, velocity=velocity, heading=heading), neighbors


def wall_force(position: Vector2, width: float, height: float, config: FlockConfig) -> Vector2:
    force = Vector2()
    force.x = _axis_force(position.x, width, config)
    force.y = _axis_force(position.y, height, config)
    return force


def add_wall_force(
    velocity: Vector2, position: Vector2, width: float, height: float, config: FlockConfig
) -> Vector2:
    return velocity + wall_force(position, width, height, config)


def _axis_force(coordinate: float, extent: float, config: FlockConfig) -> float:
    if coordinate < config.wall_radius:
        distance = max(coordinate, config.min_wall_distance)
        return config.wall_factor / (distance * distance)
    if coordinate > extent - config.wall_radius:
        distance = max(extent - coordinate, config.min_wall_distance)
        return -config.wall_factor / (distance * distance)
    return 0.0
