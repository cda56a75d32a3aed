from __future__ import annotations

import logging
from typing import List, Optional

from pygame.math import Vector2

from .boid import Boid
from .config import FlockConfig
from .rng import FlockRng
from .vector import Vertex, orthogonal, pack_vertices, to_clip

logger = logging.getLogger(__name__)

_ZERO_VERTEX = Vertex(0.0, 0.0)


def population_for_viewport(width: int, height: int, config: FlockConfig) -> int:
    """Active boid count for a viewport: ``min(max_boids, floor(density * area))``."""
    _check_viewport(width, height)
    count = int(config.density * float(width * height))
    return min(config.max_boids, count)


def _check_viewport(width: int, height: int) -> None:
    if width < 0 or height < 0:
        raise ValueError(f"viewport dimensions must be non-negative, got {width}x{height}")


class Flock:
    """Fixed-capacity boid population with a double-buffered step.

    Two equally sized boid lists are owned; ``_live`` indexes the one holding
    the current frame. A step reads only the live list, writes the scratch
    list and flips the index, so no boid ever sees a sibling's updated state.
    """

    def __init__(
        self,
        width: int,
        height: int,
        config: Optional[FlockConfig] = None,
        rng: Optional[FlockRng] = None,
    ):
        _check_viewport(width, height)
        self._config = (config or FlockConfig()).validate()
        self._rng = rng if rng is not None else FlockRng(self._config.seed)
        capacity = self._config.max_boids
        self._buffers: List[List[Boid]] = [
            self._spawn_population(width, height),
            [Boid.zero() for _ in range(capacity)],
        ]
        self._live = 0
        self._vertices: List[Vertex] = [_ZERO_VERTEX] * (3 * capacity)
        self._active_count = 0
        self._neighbor_links = 0

    @property
    def config(self) -> FlockConfig:
        return self._config

    @property
    def capacity(self) -> int:
        return self._config.max_boids

    @property
    def boids(self) -> List[Boid]:
        return self._buffers[self._live]

    @property
    def active_count(self) -> int:
        return self._active_count

    @property
    def neighbor_links(self) -> int:
        return self._neighbor_links

    def reset(self, width: int, height: int) -> None:
        _check_viewport(width, height)
        self._rng.reset()
        self._buffers[self._live] = self._spawn_population(width, height)
        self._vertices = [_ZERO_VERTEX] * (3 * self.capacity)
        self._active_count = 0
        self._neighbor_links = 0
        logger.debug("flock reset for %dx%d viewport", width, height)

    def _spawn_population(self, width: int, height: int) -> List[Boid]:
        config = self._config
        population = []
        for _ in range(config.max_boids):
            speed = self._rng.next_range(config.min_start_speed, config.max_start_speed)
            velocity = speed * self._rng.next_unit_circle()
            position = Vector2(float(self._rng.next_int(width)), float(self._rng.next_int(height)))
            population.append(Boid.moving(position, velocity, config))
        return population

    def step(self, width: int, height: int) -> int:
        active = population_for_viewport(width, height, self._config)
        if active != self._active_count:
            logger.debug("active boids %d -> %d (%dx%d)", self._active_count, active, width, height)

        live = self._buffers[self._live]
        scratch = self._buffers[1 - self._live]
        links = 0
        for i in range(active):
            updated, neighbors = live[i].step_counted(
                live[:i], live[i + 1:active], float(width), float(height), self._config
            )
            scratch[i] = updated
            links += neighbors
        self._live = 1 - self._live

        self._active_count = active
        self._neighbor_links = links
        self.update_vertices(width, height, active)
        return active

    def update_vertices(self, width: int, height: int, active_count: int) -> None:
        config = self._config
        w = float(width)
        h = float(height)
        vertices = self._vertices
        for i, boid in enumerate(self.boids[:active_count]):
            heading = boid.heading
            side = orthogonal(heading)
            back = boid.position - config.back_offset * heading

            front = boid.position + config.front_offset * heading
            left = back + config.side_offset * side
            right = back - config.side_offset * side

            # Winding is front, right, left
            vertices[3 * i] = to_clip(front, w, h)
            vertices[3 * i + 1] = to_clip(right, w, h)
            vertices[3 * i + 2] = to_clip(left, w, h)

    def vertices(self, active_count: int) -> List[Vertex]:
        if not 0 <= active_count <= self.capacity:
            raise ValueError(f"active_count must be in [0, {self.capacity}], got {active_count}")
        return self._vertices[: 3 * active_count]

    def vertex_bytes(self, active_count: int) -> bytes:
        return pack_vertices(self.vertices(active_count))
