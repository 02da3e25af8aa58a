"""Three-component vectors and simple ray tests used by the simulation."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vector3:
    """An immutable 3D vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vector3) -> Vector3:
        return add(self, other)

    def __sub__(self, other: Vector3) -> Vector3:
        return sub(self, other)

    def __mul__(self, s: float) -> Vector3:
        return scale(self, s)

    __rmul__ = __mul__


@dataclass(frozen=True, slots=True)
class Ray:
    """A ray with an origin and a (not necessarily unit) direction."""

    origin: Vector3 = Vector3()
    direction: Vector3 = Vector3()


@dataclass(frozen=True, slots=True)
class RayHit:
    """Result of a successful ray test."""

    distance: float = 0.0
    dot: float = 0.0
    target_id: str = ""


def add(a: Vector3, b: Vector3) -> Vector3:
    return Vector3(a.x + b.x, a.y + b.y, a.z + b.z)


def sub(a: Vector3, b: Vector3) -> Vector3:
    return Vector3(a.x - b.x, a.y - b.y, a.z - b.z)


def scale(v: Vector3, s: float) -> Vector3:
    return Vector3(v.x * s, v.y * s, v.z * s)


def dot(a: Vector3, b: Vector3) -> float:
    return a.x * b.x + a.y * b.y + a.z * b.z


def length(v: Vector3) -> float:
    return math.sqrt(dot(v, v))


def distance(a: Vector3, b: Vector3) -> float:
    return length(sub(a, b))


def normalize(v: Vector3) -> Vector3:
    """Return the unit vector of ``v``, or the zero vector if ``v`` is zero."""
    size = length(v)
    if size == 0:
        return Vector3()
    return scale(v, 1.0 / size)


def is_zero(v: Vector3) -> bool:
    return v.x == 0 and v.y == 0 and v.z == 0


def check_ray_against_point(
    ray: Ray, target: Vector3, max_distance: float, angle_threshold: float
) -> RayHit | None:
    """Test whether a ray points at ``target`` within a cosine threshold.

    Returns the hit (distance and cosine) or ``None`` on a miss.
    """
    direction = normalize(ray.direction)
    if is_zero(direction):
        return None
    offset = sub(target, ray.origin)
    dist = length(offset)
    if dist > max_distance or dist == 0:
        return None
    cos = dot(direction, normalize(offset))
    if cos < angle_threshold:
        return None
    return RayHit(distance=dist, dot=cos)


def check_ray_against_sphere(
    ray: Ray, center: Vector3, radius: float, max_distance: float
) -> RayHit | None:
    """Test whether a ray passes through a sphere; ``None`` on a miss."""
    direction = normalize(ray.direction)
    if is_zero(direction) or radius <= 0:
        return None

    to_center = sub(center, ray.origin)
    along = dot(to_center, direction)
    if along < 0 or along > max_distance:
        return None

    closest = add(ray.origin, scale(direction, along))
    if distance(closest, center) > radius:
        return None

    dist_to_entry = along - radius
    if dist_to_entry < 0:
        dist_to_entry = along
    return RayHit(distance=dist_to_entry, dot=1.0)