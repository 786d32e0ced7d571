from typing import Optional


class ShipGridError(ValueError):
    """Base class for geometry, placement and aggregation errors."""


class ShapeError(ShipGridError):
    pass


class BoundsError(ShipGridError):
    def __init__(self, x: int, y: int, message: Optional[str] = None):
        self.x = x
        self.y = y
        super().__init__(message or f"position ({x}, {y}) is outside the board quadrant")


class PlacementError(ShipGridError):
    """A ship that cannot be placed.

    Collected into ``BuildResult.errors`` by the board builder rather than raised.
    ship_index is None when no single ship is to blame.
    """

    def __init__(self, ship_index: Optional[int], ship, reason: str):
        self.ship_index = ship_index
        self.ship = ship
        self.reason = reason
        where = "layout" if ship_index is None else f"ship #{ship_index}"
        super().__init__(f"{where}: {reason}")


class AggregationError(ShipGridError):
    pass
