from .boid import Boid, SocialForces
from .config import AppConfig, FlockConfig
from .flock import Flock, population_for_viewport
from .rng import FlockRng
from .vector import Vertex
from .viewport import ScreenState, Viewport

__all__ = [
    "AppConfig",
    "Boid",
    "Flock",
    "FlockConfig",
    "FlockRng",
    "ScreenState",
    "SocialForces",
    "Vertex",
    "Viewport",
    "population_for_viewport",
]
