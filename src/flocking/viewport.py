from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional, Tuple

Point = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class Viewport:
    """Per-frame viewport snapshot handed to the simulation."""

    width: int
    height: int
    scale_factor: float = 1.0
    mouse: Optional[Point] = None
    prev_mouse: Optional[Point] = None

    @property
    def area(self) -> int:
        return self.width * self.height


class ScreenState:
    """Thread-safe viewport and cursor state written by event handlers.

    Drivers call :meth:`snapshot` once per frame and pass the result to the
    flock, so a resize mid-step cannot tear a frame.
    """

    def __init__(self, width: int, height: int, scale_factor: float = 1.0):
        self._lock = threading.Lock()
        self._width = _checked_dimension("width", width)
        self._height = _checked_dimension("height", height)
        self._scale_factor = scale_factor
        self._mouse: Optional[Point] = None
        self._prev_mouse: Optional[Point] = None

    def set_size(self, width: int, height: int) -> None:
        width = _checked_dimension("width", width)
        height = _checked_dimension("height", height)
        with self._lock:
            self._width = width
            self._height = height

    def set_scale_factor(self, scale_factor: float) -> None:
        if scale_factor <= 0:
            raise ValueError(f"scale_factor must be positive, got {scale_factor}")
        with self._lock:
            self._scale_factor = scale_factor

    def set_mouse(self, x: float, y: float) -> None:
        with self._lock:
            factor = self._scale_factor
            self._prev_mouse = self._mouse
            self._mouse = (int(x / factor), int(y / factor))

    def cursor_left(self) -> None:
        with self._lock:
            self._prev_mouse = None
            self._mouse = None

    def snapshot(self) -> Viewport:
        with self._lock:
            return Viewport(
                width=self._width,
                height=self._height,
                scale_factor=self._scale_factor,
                mouse=self._mouse,
                prev_mouse=self._prev_mouse,
            )


def _checked_dimension(name: str, value: int) -> int:
    value = int(value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value
