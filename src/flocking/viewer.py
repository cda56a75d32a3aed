from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pygame

from .config import FlockConfig
from .flock import Flock
from .vector import Vertex
from .viewport import ScreenState

logger = logging.getLogger(__name__)

BACKGROUND = (10, 10, 20)
BOID_COLOR = (232, 232, 240)


def clip_to_screen(vertex: Vertex, width: int, height: int) -> Tuple[float, float]:
    return ((vertex.x + 1.0) * 0.5 * width, (1.0 - vertex.y) * 0.5 * height)


def triangles(vertices: Sequence[Vertex], width: int, height: int) -> List[List[Tuple[float, float]]]:
    points = [clip_to_screen(vertex, width, height) for vertex in vertices]
    return [points[i : i + 3] for i in range(0, len(points) - len(points) % 3, 3)]


def run_viewer(width: int, height: int, config: Optional[FlockConfig] = None, max_frames: Optional[int] = None) -> int:
    """Open a resizable window and animate the flock until closed; returns frames drawn."""
    pygame.init()
    try:
        surface = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        pygame.display.set_caption("Flocking")
        clock = pygame.time.Clock()
        screen = ScreenState(width, height)
        flock = Flock(width, height, config)
        frames = 0
        running = True
        while running and (max_frames is None or frames < max_frames):
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    screen.set_size(event.w, event.h)
                elif event.type == pygame.MOUSEMOTION:
                    screen.set_mouse(*event.pos)
                elif event.type == pygame.WINDOWLEAVE:
                    screen.cursor_left()

            viewport = screen.snapshot()
            active = flock.step(viewport.width, viewport.height)
            surface.fill(BACKGROUND)
            for triangle in triangles(flock.vertices(active), viewport.width, viewport.height):
                pygame.draw.polygon(surface, BOID_COLOR, triangle)
            pygame.display.flip()
            clock.tick(60)
            frames += 1
        logger.info("viewer closed after %d frames", frames)
        return frames
    finally:
        pygame.quit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Flocking simulation viewer")
    parser.add_argument("--width", type=int, default=1024)
    parser.add_argument("--height", type=int, default=768)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with flock parameters")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = FlockConfig.from_yaml(args.config) if args.config else FlockConfig()
    if args.seed is not None:
        config.seed = args.seed
    run_viewer(args.width, args.height, config)


if __name__ == "__main__":
    main()
