"""Immutable 3D vector and point value types for scene construction.

Kernels work on Taichi ``vec3`` values (see ``core.ray``). Python-side code
that builds scenes uses these two types instead so that positions and
directions stay distinct: subtracting two points gives a vector and adding a
vector to a point gives a point. Every operation returns a new instance.

Example:
    >>> from src.whitted.core.vector import Point, Vector3
    >>> offset = Point(1.0, 2.0, 3.0) - Point(0.0, 0.0, 0.0)
    >>> offset.length()
    3.7416573867739413
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass


def _finite_triple(values: Iterable[float], what: str) -> tuple[float, float, float]:
    items = tuple(float(v) for v in values)
    if len(items) != 3:
        raise ValueError(f"Expected 3 {what}, got {len(items)}")
    if not all(math.isfinite(v) for v in items):
        raise ValueError(f"Expected finite {what}, got {items}")
    return items


@dataclass(frozen=True)
class Vector3:
    """A direction or displacement in 3D space.

    Attributes:
        x: X component.
        y: Y component.
        z: Z component.
    """

    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> Vector3:
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def of(cls, values: Iterable[float]) -> Vector3:
        """Build a vector from any 3-element iterable.

        Raises:
            ValueError: If the iterable does not hold exactly three finite
                values.
        """
        return cls(*_finite_triple(values, "components"))

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def dot(self, other: Vector3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def squared_length(self) -> float:
        """Squared Euclidean length; avoids the square root for comparisons."""
        return self.dot(self)

    def length(self) -> float:
        return math.sqrt(self.squared_length())

    def normalize(self) -> Vector3:
        """Return the unit vector pointing in the same direction.

        Zero-length input is a caller error, not a recoverable condition.

        Raises:
            ValueError: If the vector has zero length.
        """
        length = self.length()
        if length == 0.0:
            raise ValueError("Cannot normalize a zero-length vector")
        return Vector3(self.x / length, self.y / length, self.z / length)

    def as_point(self) -> Point:
        return Point(self.x, self.y, self.z)

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Point:
    """A position in 3D space.

    Attributes:
        x: X coordinate.
        y: Y coordinate.
        z: Z coordinate.
    """

    x: float
    y: float
    z: float

    @classmethod
    def origin(cls) -> Point:
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def of(cls, values: Iterable[float]) -> Point:
        """Build a point from any 3-element iterable.

        Raises:
            ValueError: If the iterable does not hold exactly three finite
                values.
        """
        return cls(*_finite_triple(values, "coordinates"))

    def __add__(self, other: Vector3) -> Point:
        return Point(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Point | Vector3) -> Vector3 | Point:
        """Point - Point is the displacement; Point - Vector3 is a point."""
        if isinstance(other, Point):
            return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)
        if isinstance(other, Vector3):
            return Point(self.x - other.x, self.y - other.y, self.z - other.z)
        return NotImplemented

    def squared_distance(self, other: Point) -> float:
        return (self - other).squared_length()

    def distance(self, other: Point) -> float:
        return (self - other).length()

    def as_vector(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)
