from typing import Any, Dict, List

from shipgrid.domain.board import Board
from shipgrid.domain.geometry import Pos2, Vec2
from shipgrid.domain.ship import Ship


def _pair(item: Any, what: str):
    if not isinstance(item, (list, tuple)) or len(item) != 2:
        raise ValueError(f"{what} must be an [x, y] pair, got {item!r}")
    try:
        return int(item[0]), int(item[1])
    except (TypeError, ValueError):
        raise ValueError(f"{what} must hold integers, got {item!r}") from None


def _positions(raw: Any, what: str) -> List[Pos2]:
    if not isinstance(raw, list):
        raise ValueError(f"{what} must be a list")
    return [Pos2(*_pair(item, what)) for item in raw]


def serialize_ship(ship: Ship) -> Dict[str, Any]:
    return {"shape": [list(v.as_tuple()) for v in ship.shape]}


def deserialize_ship(data: Dict[str, Any]) -> Ship:
    if not isinstance(data, dict) or not isinstance(data.get("shape"), list):
        raise ValueError("ship data needs a 'shape' list")
    return Ship([Vec2(*_pair(item, "ship offset")) for item in data["shape"]])


def serialize_board(board: Board) -> Dict[str, Any]:
    return {
        "ships": [
            {"pos": list(pos.as_tuple()), "ship": serialize_ship(ship)}
            for pos, ship in board.ships
        ],
        "shape": [list(p.as_tuple()) for p in board.shape],
        "shots": [list(p.as_tuple()) for p in board.shots],
    }


def deserialize_board(data: Dict[str, Any]) -> Board:
    if not isinstance(data, dict):
        raise ValueError("board data must be an object")
    ships_raw = data.get("ships") or []
    if not isinstance(ships_raw, list):
        raise ValueError("board 'ships' must be a list")
    ships = []
    for item in ships_raw:
        if not isinstance(item, dict):
            raise ValueError("each placed ship must be an object")
        pos = Pos2(*_pair(item.get("pos"), "ship position"))
        ships.append((pos, deserialize_ship(item.get("ship"))))
    return Board(
        ships,
        _positions(data.get("shape") or [], "board cell"),
        _positions(data.get("shots") or [], "shot"),
    )
