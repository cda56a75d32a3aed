from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Iterable

from pygame.math import Vector2


@dataclass(frozen=True, slots=True)
class Vertex:
    x: float
    y: float


def from_angle(theta: float) -> Vector2:
    return Vector2(math.cos(theta), math.sin(theta))


def orthogonal(vector: Vector2) -> Vector2:
    return Vector2(-vector.y, vector.x)


def safe_normalize(vector: Vector2, fallback: Vector2, epsilon: float) -> Vector2:
    magnitude_sq = vector.x * vector.x + vector.y * vector.y
    if magnitude_sq <= epsilon * epsilon:
        return Vector2(fallback)
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector2(vector.x * inv, vector.y * inv)


def clamp_length(vector: Vector2, max_length: float) -> Vector2:
    magnitude = vector.length()
    if magnitude > max_length:
        return vector * (max_length / magnitude)
    return Vector2(vector)


def to_clip(vector: Vector2, width: float, height: float) -> Vertex:
    """Map a pixel-space point (top-left origin) into clip space."""
    return Vertex(2.0 * vector.x / width - 1.0, -2.0 * vector.y / height + 1.0)


def pack_vertices(vertices: Iterable[Vertex]) -> bytes:
    flat: list[float] = []
    for vertex in vertices:
        flat.append(vertex.x)
        flat.append(vertex.y)
    return struct.pack(f"<{len(flat)}f", *flat)
