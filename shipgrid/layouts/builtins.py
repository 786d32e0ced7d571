from typing import Tuple

from shipgrid.domain.config import DEFAULT_BOARD_SIZE

from .definition import LayoutDefinition, ShipSpec


def classic_layout() -> LayoutDefinition:
    ships = (
        ShipSpec(instance_id="line5", kind="line", length=5, name="Carrier (5)"),
        ShipSpec(instance_id="line4", kind="line", length=4, name="Battleship (4)"),
        ShipSpec(instance_id="line3a", kind="line", length=3, name="Cruiser (3)"),
        ShipSpec(instance_id="line3b", kind="line", length=3, name="Submarine (3)"),
        ShipSpec(instance_id="line2", kind="line", length=2, name="Destroyer (2)"),
    )
    return LayoutDefinition(
        layout_id="classic",
        name="Classic Battleship (10x10)",
        width=DEFAULT_BOARD_SIZE,
        height=DEFAULT_BOARD_SIZE,
        ships=ships,
        whitespace=0,
        layout_version=1,
    )


def compact_layout() -> LayoutDefinition:
    ships = (
        ShipSpec(
            instance_id="plus5",
            kind="shape",
            cells=((0, 0), (1, 0), (-1, 0), (0, 1), (0, -1)),
            name="Plus (5)",
        ),
        ShipSpec(
            instance_id="L3",
            kind="shape",
            cells=((0, 0), (1, 0), (0, 1)),
            name="L-tromino",
        ),
        ShipSpec(instance_id="line3", kind="line", length=3, name="Length-3 line"),
        ShipSpec(instance_id="line2", kind="line", length=2, name="Length-2 line"),
    )
    return LayoutDefinition(
        layout_id="compact",
        name="Compact (6x6, no touching)",
        width=6,
        height=6,
        ships=ships,
        whitespace=1,
        layout_version=1,
    )


def builtin_layouts() -> Tuple[LayoutDefinition, ...]:
    return (classic_layout(), compact_layout())
