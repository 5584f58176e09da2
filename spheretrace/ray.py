"""Rays and ray-sphere intersection."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from spheretrace.scene import Scene


def _normalize(vector: np.ndarray) -> np.ndarray:
    return vector / np.linalg.norm(vector)


def reflect(direction, normal) -> np.ndarray:
    """Mirror ``direction`` about the plane with unit ``normal``."""
    direction = np.asarray(direction, dtype=np.float64)
    normal = np.asarray(normal, dtype=np.float64)
    return direction - 2.0 * float(np.dot(normal, direction)) * normal


@dataclass(eq=False)
class HitPayload:
    """Result of tracing a ray; a negative distance means nothing was hit."""

    hit_distance: float
    hit_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    world_normal: np.ndarray = field(default_factory=lambda: np.zeros(3))
    obj_index: int = 0


class Ray:
    """A half-line with an origin and a (not necessarily unit) direction."""

    __slots__ = ("origin", "direction")

    def __init__(self, origin, direction) -> None:
        self.origin = np.array(origin, dtype=np.float64)
        self.direction = np.array(direction, dtype=np.float64)

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin.tolist()}, direction={self.direction.tolist()})"

    def change_direction(self, delta) -> None:
        """Add ``delta`` to the direction."""
        self.direction = self.direction + np.asarray(delta, dtype=np.float64)

    def change_origin(self, delta) -> None:
        """Add ``delta`` to the origin."""
        self.origin = self.origin + np.asarray(delta, dtype=np.float64)

    def flip_direction(self) -> None:
        """Point the ray the opposite way."""
        self.direction = -self.direction

    def reflect(self, normal) -> None:
        """Mirror the direction about ``normal``."""
        self.direction = reflect(self.direction, normal)

    def reflect_with_offset(self, normal, offset) -> None:
        """Mirror the direction, perturb it by ``offset`` and normalize."""
        self.direction = _normalize(
            reflect(self.direction, normal) + np.asarray(offset, dtype=np.float64)
        )

    def is_on_hemisphere(self, normal) -> bool:
        """Return whether the direction points to the side ``normal`` faces."""
        return float(np.dot(self.direction, normal)) > 0.0

    def trace(self, scene: Scene) -> HitPayload:
        """Find the nearest sphere in front of the ray."""
        closest = -1
        hit_distance = math.inf
        a = float(np.dot(self.direction, self.direction))
        if a == 0.0:
            return self.miss()
        for index, sphere in enumerate(scene.spheres):
            origin = self.origin - sphere.position
            b = 2.0 * float(np.dot(origin, self.direction))
            c = float(np.dot(origin, origin)) - sphere.radius * sphere.radius
            disc = b * b - 4.0 * a * c
            if disc < 0.0:
                continue
            t = (-b - math.sqrt(disc)) / (2.0 * a)
            if 0.0 < t < hit_distance:
                hit_distance = t
                closest = index
        if closest < 0:
            return self.miss()
        return self.closest_hit(scene, hit_distance, closest)

    def closest_hit(self, scene: Scene, hit_distance: float, obj_index: int) -> HitPayload:
        """Build the payload for a hit on sphere ``obj_index`` at ``hit_distance``."""
        sphere = scene.spheres[obj_index]
        local = (self.origin - sphere.position) + self.direction * hit_distance
        return HitPayload(
            hit_distance=hit_distance,
            hit_position=local + sphere.position,
            world_normal=_normalize(local),
            obj_index=obj_index,
        )

    def miss(self) -> HitPayload:
        """Return the payload for a ray that hits nothing."""
        return HitPayload(hit_distance=-1.0)