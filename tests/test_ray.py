import numpy as np
import pytest

from spheretrace.ray import HitPayload, Ray, reflect
from spheretrace.scene import Scene, Sphere


def _scene(*spheres):
    return Scene(spheres=list(spheres))


def test_reflect_against_floor():
    assert np.allclose(reflect([1, -1, 0], [0, 1, 0]), [1, 1, 0])


def test_reflect_preserves_length():
    direction = np.array([0.3, -0.7, 0.2])
    normal = np.array([0.0, 0.0, 1.0])
    out = reflect(direction, normal)
    assert np.isclose(np.linalg.norm(out), np.linalg.norm(direction))
    assert np.isclose(np.dot(out, normal), -np.dot(direction, normal))


def test_trace_hits_sphere_ahead():
    ray = Ray([0, 0, 0], [0, 0, -1])
    hit = ray.trace(_scene(Sphere(position=[0, 0, -5], radius=1.0)))
    assert hit.hit_distance == pytest.approx(4.0)
    assert hit.obj_index == 0
    assert np.allclose(hit.hit_position, ray.origin + ray.direction * hit.hit_distance)
    assert np.isclose(np.linalg.norm(hit.world_normal), 1.0)
    assert np.dot(hit.world_normal, ray.direction) < 0


def test_trace_picks_nearest_sphere():
    ray = Ray([0, 0, 0], [0, 0, -1])
    scene = _scene(
        Sphere(position=[0, 0, -10], radius=1.0),
        Sphere(position=[0, 0, -4], radius=1.0),
    )
    assert ray.trace(scene).obj_index == 1


def test_trace_miss_returns_negative_distance():
    ray = Ray([0, 0, 0], [0, 1, 0])
    hit = ray.trace(_scene(Sphere(position=[0, 0, -5], radius=1.0)))
    assert hit.hit_distance == -1


def test_trace_ignores_sphere_behind():
    ray = Ray([0, 0, 0], [0, 0, 1])
    assert ray.trace(_scene(Sphere(position=[0, 0, -5], radius=1.0))).hit_distance < 0


def test_trace_from_inside_sphere_misses():
    ray = Ray([0, 0, 0], [1, 0, 0])
    assert ray.trace(_scene(Sphere(position=[0, 0, 0], radius=2.0))).hit_distance < 0


def test_trace_empty_scene_misses():
    assert Ray([0, 0, 0], [1, 0, 0]).trace(_scene()).hit_distance < 0


def test_closest_hit_builds_payload():
    scene = _scene(Sphere(position=[3, 0, 0], radius=1.0))
    ray = Ray([0, 0, 0], [1, 0, 0])
    hit = ray.closest_hit(scene, 2.0, 0)
    assert np.allclose(hit.hit_position, [2, 0, 0])
    assert np.allclose(hit.world_normal, [-1, 0, 0])
    assert hit.hit_distance == 2.0


def test_miss_payload():
    payload = Ray([0, 0, 0], [0, 0, 1]).miss()
    assert isinstance(payload, HitPayload)
    assert payload.hit_distance == -1


def test_flip_direction():
    ray = Ray([0, 0, 0], [1, -2, 3])
    ray.flip_direction()
    assert np.array_equal(ray.direction, [-1, 2, -3])


def test_change_origin_and_direction():
    ray = Ray([1, 1, 1], [0, 0, 1])
    ray.change_origin([1, 0, -1])
    ray.change_direction([0, 1, 0])
    assert np.array_equal(ray.origin, [2, 1, 0])
    assert np.array_equal(ray.direction, [0, 1, 1])


def test_ray_method_reflect_matches_function():
    ray = Ray([0, 0, 0], [0.5, -1, 0.25])
    expected = reflect(ray.direction, [0, 1, 0])
    ray.reflect([0, 1, 0])
    assert np.allclose(ray.direction, expected)


def test_reflect_with_offset_is_normalized():
    ray = Ray([0, 0, 0], [1, -1, 0])
    ray.reflect_with_offset([0, 1, 0], [0.1, 0.2, 0.3])
    assert np.isclose(np.linalg.norm(ray.direction), 1.0)


def test_is_on_hemisphere():
    ray = Ray([0, 0, 0], [0, 1, 0])
    assert ray.is_on_hemisphere([0, 1, 0]) is True
    assert ray.is_on_hemisphere([0, -1, 0]) is False
    assert ray.is_on_hemisphere([1, 0, 0]) is False