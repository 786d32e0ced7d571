import math
from dataclasses import dataclass

from .errors import BoundsError


@dataclass(frozen=True, order=True)
class Vec2:
    """Signed integer displacement between two cells."""

    x: int
    y: int

    @classmethod
    def from_pos(cls, pos: "Pos2") -> "Vec2":
        return cls(pos.x, pos.y)

    def __add__(self, other: "Vec2") -> "Vec2":
        if not isinstance(other, Vec2):
            return NotImplemented
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        # Unchecked: a displacement may point anywhere.
        if not isinstance(other, Vec2):
            return NotImplemented
        return Vec2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)

    def add(self, other: "Vec2") -> "Vec2":
        return self + other

    def sub(self, other: "Vec2") -> "Vec2":
        return self - other

    def dot_product(self, other: "Vec2") -> int:
        return self.x * other.x + self.y * other.y

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    def normalize(self) -> "Vec2":
        """Scale to unit length, truncating each component toward zero.

        Only exact for axis-aligned vectors; (1, 1) normalizes to (0, 0).
        """
        length = self.length()
        if length == 0:
            return self
        return Vec2(int(self.x / length), int(self.y / length))

    def angle(self, other: "Vec2") -> float:
        """Angle between two vectors in radians."""
        denom = self.length() * other.length()
        if denom == 0:
            raise ValueError("angle is undefined for a zero-length vector")
        cos = self.dot_product(other) / denom
        return math.acos(max(-1.0, min(1.0, cos)))

    def area_rect(self) -> int:
        return self.x * self.y

    def area_tri(self) -> float:
        return self.x * self.y / 2

    def turn_clockwise(self) -> "Vec2":
        return Vec2(self.y, -self.x)

    def turn_counterclockwise(self) -> "Vec2":
        return Vec2(-self.y, self.x)

    def as_tuple(self):
        return (self.x, self.y)


@dataclass(frozen=True, order=True)
class Pos2:
    """Absolute board cell; both coordinates are non-negative."""

    x: int
    y: int

    def __post_init__(self):
        if self.x < 0 or self.y < 0:
            raise BoundsError(self.x, self.y)

    def distance(self, other: "Pos2") -> Vec2:
        return Vec2(other.x - self.x, other.y - self.y)

    def offset(self, vec: Vec2) -> "Pos2":
        return Pos2(self.x + vec.x, self.y + vec.y)

    def __add__(self, vec: Vec2) -> "Pos2":
        if not isinstance(vec, Vec2):
            return NotImplemented
        return self.offset(vec)

    def as_tuple(self):
        return (self.x, self.y)


def chebyshev(a: Pos2, b: Pos2) -> int:
    return max(abs(a.x - b.x), abs(a.y - b.y))
