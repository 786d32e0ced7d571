import hashlib
import json
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from shipgrid.domain.geometry import Pos2
from shipgrid.domain.ship import Ship, anchor_shape

from .builder import BoardBuilder

Cell = Tuple[int, int]


def normalize_shape_cells(cells: Iterable[Cell]) -> Tuple[Cell, ...]:
    """Anchor a shape, shift it so its min x/y is at (0,0) and sort it.

    Two shapes that differ only by translation normalize to the same cells.
    """
    cell_list = [v.as_tuple() for v in anchor_shape(cells, strict=False)]
    min_x = min(x for x, _ in cell_list)
    min_y = min(y for _, y in cell_list)
    return tuple(sorted((x - min_x, y - min_y) for x, y in cell_list))


@dataclass(frozen=True)
class ShipSpec:
    instance_id: str
    kind: str  # "line" or "shape"
    length: Optional[int] = None
    cells: Optional[Tuple[Cell, ...]] = None
    name: Optional[str] = None

    def to_ship(self) -> Ship:
        if self.kind == "line":
            return Ship.line(int(self.length or 0))
        return Ship(list(self.cells or ()))

    def normalized(self) -> dict:
        if self.kind == "line":
            return {
                "instance_id": self.instance_id,
                "kind": self.kind,
                "length": int(self.length or 0),
                "name": self.name or "",
            }
        return {
            "instance_id": self.instance_id,
            "kind": self.kind,
            "cells": [list(c) for c in normalize_shape_cells(self.cells or [])],
            "name": self.name or "",
        }


@dataclass(frozen=True)
class LayoutDefinition:
    layout_id: str
    name: str
    width: int
    height: int
    ships: Tuple[ShipSpec, ...]
    whitespace: int = 0
    blocked: Tuple[Cell, ...] = ()
    allow_rotations: bool = True
    layout_version: int = 1

    def normalized(self) -> dict:
        ships_sorted = sorted(self.ships, key=lambda s: s.instance_id)
        return {
            "layout_id": self.layout_id,
            "name": self.name,
            "width": int(self.width),
            "height": int(self.height),
            "whitespace": int(self.whitespace),
            "blocked": [list(c) for c in sorted(set(self.blocked))],
            "allow_rotations": bool(self.allow_rotations),
            "ships": [s.normalized() for s in ships_sorted],
        }

    @property
    def layout_hash(self) -> str:
        payload = json.dumps(self.normalized(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]

    def ship_ids(self) -> Tuple[str, ...]:
        return tuple(s.instance_id for s in self.ships)

    def board_shape(self) -> List[Pos2]:
        blocked = set(self.blocked)
        return [
            Pos2(x, y)
            for y in range(self.height)
            for x in range(self.width)
            if (x, y) not in blocked
        ]

    def to_ships(self) -> List[Ship]:
        return [spec.to_ship() for spec in self.ships]

    def to_builder(self) -> BoardBuilder:
        return (
            BoardBuilder(self.to_ships(), self.board_shape(), self.whitespace)
            .set_rotations(self.allow_rotations)
        )
