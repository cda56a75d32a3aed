from __future__ import annotations

import math

from pygame.math import Vector2
from pytest import approx

from flocking.boid import Boid, add_wall_force, wall_force
from flocking.config import FlockConfig

CONFIG = FlockConfig()


def _boid(x: float, y: float, vx: float = 0.0, vy: float = 0.0) -> Boid:
    return Boid.moving(Vector2(x, y), Vector2(vx, vy), CONFIG)


def test_forces_ignore_boids_outside_radius():
    boid = _boid(500.0, 500.0, 1.0, 0.0)
    far = _boid(600.0, 500.0)
    on_edge = _boid(500.0, 580.0)

    assert boid.forces([], CONFIG) is None
    assert boid.forces([far, on_edge], CONFIG) is None


def test_forces_accumulate_separation_alignment_cohesion():
    boid = _boid(200.0, 200.0)
    other = _boid(210.0, 200.0, 1.0, 0.0)

    social = boid.forces([other], CONFIG)

    assert social is not None
    assert social.neighbors == 1
    # delta / distance^3 with delta = (-10, 0)
    assert (social.separation.x, social.separation.y) == approx((-0.01, 0.0))
    assert (social.alignment.x, social.alignment.y) == approx((1.0, 0.0))
    assert (social.cohesion.x, social.cohesion.y) == approx((10.0, 0.0))


def test_forces_average_over_all_neighbors():
    boid = _boid(300.0, 300.0)
    others = [_boid(310.0, 300.0, 2.0, 0.0), _boid(300.0, 320.0, 0.0, 4.0)]

    social = boid.forces(others, CONFIG)

    assert social.neighbors == 2
    assert (social.alignment.x, social.alignment.y) == approx((1.0, 2.0))
    assert (social.cohesion.x, social.cohesion.y) == approx((5.0, 10.0))
    assert (social.separation.x, social.separation.y) == approx((-0.01, -0.0025))


def test_coincident_neighbor_contributes_no_separation():
    boid = _boid(300.0, 300.0, 1.0, 0.0)
    twin = _boid(300.0, 300.0, 0.0, 1.0)

    social = boid.forces([twin], CONFIG)

    assert social.neighbors == 1
    assert social.separation == Vector2()
    assert math.isfinite(social.alignment.x) and math.isfinite(social.alignment.y)


def test_steer_leaves_solitary_velocity_untouched():
    boid = _boid(500.0, 500.0, 1.0, 2.0)
    velocity, neighbors = boid.steer([], CONFIG)
    assert neighbors == 0
    assert (velocity.x, velocity.y) == approx((1.0, 2.0))


def test_steer_clamps_speed_before_wall_force():
    boid = _boid(500.0, 500.0, 3.0, 0.0)
    racer = _boid(520.0, 500.0, 1000.0, 0.0)

    velocity, _ = boid.steer([racer], CONFIG)

    assert velocity.length() <= CONFIG.max_speed + 1e-9
    assert velocity.length() == approx(CONFIG.max_speed)


def test_solitary_boid_moves_by_its_velocity():
    boid = _boid(500.0, 500.0, 1.5, -0.5)
    moved = boid.step([], [], 1000.0, 1000.0, CONFIG)
    assert (moved.velocity.x, moved.velocity.y) == approx((1.5, -0.5))
    assert (moved.position.x, moved.position.y) == approx((501.5, 499.5))


def test_wall_force_pushes_inward():
    near_left = _boid(1.0, 500.0).step([], [], 1000.0, 1000.0, CONFIG)
    near_right = _boid(999.0, 500.0).step([], [], 1000.0, 1000.0, CONFIG)
    near_top = _boid(500.0, 1.0).step([], [], 1000.0, 1000.0, CONFIG)
    near_bottom = _boid(500.0, 999.0).step([], [], 1000.0, 1000.0, CONFIG)

    assert near_left.velocity.x > 0
    assert near_right.velocity.x < 0
    assert near_top.velocity.y > 0
    assert near_bottom.velocity.y < 0
    assert near_left.velocity.y == 0.0
    assert near_top.velocity.x == 0.0


def test_wall_force_magnitude_and_distance_floor():
    assert wall_force(Vector2(50.0, 500.0), 1000.0, 1000.0, CONFIG).x == approx(100.0 / 2500.0)
    assert wall_force(Vector2(0.5, 500.0), 1000.0, 1000.0, CONFIG).x == approx(100.0)
    assert wall_force(Vector2(-20.0, 500.0), 1000.0, 1000.0, CONFIG).x == approx(100.0)
    assert wall_force(Vector2(500.0, 500.0), 1000.0, 1000.0, CONFIG) == Vector2()


def test_wall_force_may_exceed_max_speed():
    velocity = add_wall_force(Vector2(4.0, 0.0), Vector2(1.0, 500.0), 1000.0, 1000.0, CONFIG)
    assert velocity.x == approx(104.0)
    assert velocity.length() > CONFIG.max_speed


def test_step_is_pure():
    boid = _boid(200.0, 200.0, 1.0, 0.0)
    other = _boid(220.0, 210.0, 0.0, 1.0)
    before = [(Vector2(b.position), Vector2(b.velocity), Vector2(b.heading)) for b in (boid, other)]

    result = boid.step([other], [], 1000.0, 1000.0, CONFIG)

    after = [(b.position, b.velocity, b.heading) for b in (boid, other)]
    assert after == before
    assert result is not boid
    assert result.position != boid.position


def test_split_of_neighbors_does_not_matter():
    boid = _boid(400.0, 400.0, 1.0, 0.0)
    a = _boid(420.0, 400.0, 0.0, 2.0)
    b = _boid(400.0, 430.0, -1.0, 0.0)

    split = boid.step([a], [b], 1000.0, 1000.0, CONFIG)
    joined = boid.step([], [a, b], 1000.0, 1000.0, CONFIG)

    assert (split.position.x, split.position.y) == approx((joined.position.x, joined.position.y))
    assert (split.velocity.x, split.velocity.y) == approx((joined.velocity.x, joined.velocity.y))


def test_heading_follows_velocity_and_holds_when_still():
    moving = _boid(500.0, 500.0, 0.0, 3.0).step([], [], 1000.0, 1000.0, CONFIG)
    assert (moving.heading.x, moving.heading.y) == approx((0.0, 1.0))

    still = Boid(position=Vector2(500.0, 500.0), velocity=Vector2(), heading=Vector2(0.0, -1.0))
    stepped = still.step([], [], 1000.0, 1000.0, CONFIG)
    assert stepped.velocity == Vector2()
    assert stepped.heading == Vector2(0.0, -1.0)
