from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from . import config
from .errors import ShapeError
from .geometry import Pos2, Vec2

ORIGIN = Vec2(0, 0)

OffsetLike = Union[Vec2, Tuple[int, int]]


def _as_vec(item: OffsetLike) -> Vec2:
    if isinstance(item, Vec2):
        return item
    x, y = item
    return Vec2(int(x), int(y))


def anchor_shape(offsets: Iterable[OffsetLike], strict: Optional[bool] = None) -> List[Vec2]:
    """De-duplicate offsets (first occurrence wins) and make sure the origin is present."""
    if strict is None:
        strict = config.STRICT_ANCHOR
    shape: List[Vec2] = []
    seen = set()
    for item in offsets:
        vec = _as_vec(item)
        if vec in seen:
            continue
        seen.add(vec)
        shape.append(vec)
    if ORIGIN not in seen:
        if strict:
            raise ShapeError("ship shape needs the anchor offset (0, 0)")
        shape.append(ORIGIN)
    return shape


@dataclass(eq=False)
class Ship:
    """A shape of offsets relative to an anchor cell at the origin.

    The shape is de-duplicated and always contains (0, 0). A missing anchor is
    appended unless strict anchoring is requested, in which case ShapeError is
    raised.
    Ships compare equal when they hold the same set of offsets, whatever the
    order.
    """

    shape: List[Vec2]
    strict: Optional[bool] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        self.shape = anchor_shape(self.shape, self.strict)

    @classmethod
    def line(cls, length: int) -> "Ship":
        if length <= 0:
            raise ShapeError("line ship needs a positive length")
        return cls([Vec2(i, 0) for i in range(length)])

    def __len__(self) -> int:
        return len(self.shape)

    def __eq__(self, other):
        if not isinstance(other, Ship):
            return NotImplemented
        return self.shape_key() == other.shape_key()

    __hash__ = None

    def shape_key(self) -> frozenset:
        return frozenset(self.shape)

    def rotate_clockwise(self) -> "Ship":
        return Ship([v.turn_clockwise() for v in self.shape])

    def rotate_counterclockwise(self) -> "Ship":
        return Ship([v.turn_counterclockwise() for v in self.shape])

    def rotate_clockwise_in_place(self) -> None:
        self.shape = [v.turn_clockwise() for v in self.shape]

    def rotate_counterclockwise_in_place(self) -> None:
        self.shape = [v.turn_counterclockwise() for v in self.shape]

    def rotations(self) -> Dict[int, "Ship"]:
        return generate_rotations(self.shape)

    def distinct_rotations(self) -> Dict[int, "Ship"]:
        """Rotations with equivalent shapes dropped, lowest angle kept."""
        out: Dict[int, Ship] = {}
        for angle, ship in self.rotations().items():
            if any(ship.is_equivalent(kept) for kept in out.values()):
                continue
            out[angle] = ship
        return out

    def is_equivalent(self, other: "Ship") -> bool:
        if len(self.shape) != len(other.shape):
            return False
        other_cells = set(other.shape)
        return all(v in other_cells for v in self.shape)

    def is_rotation_of(self, other: "Ship") -> bool:
        return any(ship.is_equivalent(other) for ship in self.rotations().values())

    def cells_at(self, pos: Pos2) -> List[Pos2]:
        return [pos.offset(v) for v in self.shape]

    def bounds(self) -> Tuple[Vec2, Vec2]:
        xs = [v.x for v in self.shape]
        ys = [v.y for v in self.shape]
        return Vec2(min(xs), min(ys)), Vec2(max(xs), max(ys))


def generate_rotations(shape: Iterable[OffsetLike]) -> Dict[int, Ship]:
    """Return the shape rotated counter-clockwise by 0, 90, 180 and 270 degrees."""
    base = anchor_shape(shape)
    rotations: Dict[int, Ship] = {}
    cur = base
    for angle in config.ROTATION_ANGLES:
        rotations[angle] = Ship(list(cur))
        cur = [v.turn_counterclockwise() for v in cur]
    return rotations
