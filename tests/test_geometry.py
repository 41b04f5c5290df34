"""Tests for the vector helpers in tagverse.geometry."""

import math
import random

import pytest

from tagverse.geometry import (
    Vector3,
    clamp,
    direction_to,
    distance,
    escape_direction,
    planar_distance,
    random_point_in_range,
    step_along,
)


def test_distance_uses_all_axes():
    a = Vector3(x=0.0, y=0.0, z=0.0)
    b = Vector3(x=3.0, y=4.0, z=0.0)

    assert distance(a, b) == pytest.approx(5.0)
    assert planar_distance(a, b) == pytest.approx(3.0)
    assert a.distance_to(b) == pytest.approx(5.0)


def test_direction_to_is_planar_unit_vector():
    origin = Vector3(x=1.0, y=5.0, z=1.0)
    target = Vector3(x=4.0, y=-2.0, z=5.0)

    direction = direction_to(origin, target)

    assert direction.y == 0.0
    assert direction.x == pytest.approx(0.6)
    assert direction.z == pytest.approx(0.8)


def test_direction_to_coincident_points_is_zero():
    point = Vector3(x=2.0, y=0.0, z=-3.0)

    assert direction_to(point, point) == Vector3.zero()


def test_escape_direction_points_away_from_threat():
    direction = escape_direction(Vector3.zero(), Vector3(x=2.0, y=0.0, z=0.0))

    assert direction.x == pytest.approx(-1.0)
    assert direction.z == pytest.approx(0.0)


def test_escape_direction_from_coincident_threat_has_unit_length():
    point = Vector3(x=1.0, y=0.0, z=1.0)

    direction = escape_direction(point, point, random.Random(4))

    assert direction.length() == pytest.approx(1.0)
    assert direction.y == 0.0


def test_normalized_keeps_zero_vector():
    assert Vector3.zero().normalized() == Vector3.zero()
    assert Vector3(x=0.0, y=0.0, z=2.0).normalized() == Vector3(x=0.0, y=0.0, z=1.0)


def test_step_along_preserves_height():
    origin = Vector3(x=0.0, y=1.5, z=0.0)
    moved = step_along(origin, Vector3(x=1.0, y=0.0, z=0.0), 2.0)

    assert moved == Vector3(x=2.0, y=1.5, z=0.0)


def test_random_point_stays_within_radius():
    rng = random.Random(11)
    center = Vector3(x=3.0, y=0.5, z=-1.0)

    for _ in range(50):
        point = random_point_in_range(center, 2.0, rng)
        assert planar_distance(point, center) <= 2.0 + 1e-9
        assert point.y == center.y


def test_vector_is_immutable():
    vector = Vector3(x=1.0, y=2.0, z=3.0)

    with pytest.raises(Exception):
        vector.x = 5.0

    assert vector.add(Vector3(x=1.0)).x == 2.0
    assert vector.sub(vector).length() == 0.0
    assert vector.scale(2.0).z == 6.0
    assert math.isclose(Vector3(x=3.0, z=4.0).length(), 5.0)


def test_clamp_bounds():
    assert clamp(1.4, 0.1, 1.0) == 1.0
    assert clamp(-0.5, 0.0, 1.0) == 0.0
    assert clamp(0.3, 0.0, 1.0) == 0.3
