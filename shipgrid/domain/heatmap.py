import math
import multiprocessing as mp
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from . import config
from .board import Board
from .errors import AggregationError
from .geometry import Pos2, Vec2
from shipgrid.utils.parallel import fork_available


def count_occupancy(boards: Sequence[Board]) -> Tuple[Dict[Pos2, int], int]:
    """Per-cell number of boards occupying the cell, and the number of boards.

    Every playable cell gets an entry even when no board occupies it. Occupied
    cells outside a board's shape are not counted.
    """
    counts: Dict[Pos2, int] = {}
    for board in boards:
        shape = set(board.shape)
        for pos in shape:
            counts.setdefault(pos, 0)
        for pos in board.occupied_cells() & shape:
            counts[pos] += 1
    return counts, len(boards)


def _count_worker(boards: List[Board]) -> Tuple[Dict[Pos2, int], int]:
    return count_occupancy(boards)


class HeatMap(Mapping):
    """Fraction of candidate layouts in which each cell is occupied.

    Behaves as a read-only mapping from Pos2 to a score in [0, 1]; raw counts
    are available through count() and total. An empty heat map (no boards)
    has no cells and a total of 0.
    """

    def __init__(self, counts: Optional[Dict[Pos2, int]] = None, total: int = 0):
        self._counts: Dict[Pos2, int] = dict(counts or {})
        self.total = int(total)

    @classmethod
    def from_boards(cls, boards: Iterable[Board], workers: Optional[int] = None) -> "HeatMap":
        boards = list(boards)
        if not boards:
            return cls()

        reference = frozenset(boards[0].shape)
        for i, board in enumerate(boards[1:], start=1):
            if frozenset(board.shape) != reference:
                raise AggregationError(f"board #{i} has a different board shape than board #0")

        if workers is None:
            workers = config.DEFAULT_WORKERS
        workers = max(1, min(int(workers), config.MAX_WORKERS))

        if workers > 1 and len(boards) >= config.PARALLEL_MIN_BOARDS and fork_available("HeatMap"):
            per_worker = int(math.ceil(len(boards) / workers))
            chunks = [boards[i:i + per_worker] for i in range(0, len(boards), per_worker)]
            ctx = mp.get_context("fork")
            with ctx.Pool(processes=len(chunks)) as pool:
                parts = pool.map(_count_worker, chunks)
            heat = cls()
            for counts, total in parts:
                heat = heat.merge(cls(counts, total))
            return heat

        counts, total = count_occupancy(boards)
        return cls(counts, total)

    def __getitem__(self, pos: Pos2) -> float:
        count = self._counts[pos]
        if self.total <= 0:
            return 0.0
        return count / self.total

    def __iter__(self) -> Iterator[Pos2]:
        return iter(sorted(self._counts))

    def __len__(self) -> int:
        return len(self._counts)

    def __eq__(self, other):
        if not isinstance(other, HeatMap):
            return NotImplemented
        return self.total == other.total and self._counts == other._counts

    def __repr__(self) -> str:
        return f"HeatMap(cells={len(self._counts)}, total={self.total})"

    def count(self, pos: Pos2) -> int:
        return self._counts.get(pos, 0)

    def counts(self) -> Dict[Pos2, int]:
        return dict(self._counts)

    def merge(self, other: "HeatMap") -> "HeatMap":
        counts = dict(self._counts)
        for pos, n in other._counts.items():
            counts[pos] = counts.get(pos, 0) + n
        return HeatMap(counts, self.total + other.total)

    def size(self) -> Vec2:
        max_x = 0
        max_y = 0
        for pos in self._counts:
            max_x = max(max_x, pos.x)
            max_y = max(max_y, pos.y)
        return Vec2(max_x, max_y)

    def hottest(self, n: int = 1, exclude: Iterable[Pos2] = ()) -> List[Tuple[Pos2, float]]:
        """The n highest-scoring cells, ties broken by position."""
        skip = set(exclude)
        ranked = sorted(
            ((pos, self[pos]) for pos in self._counts if pos not in skip),
            key=lambda item: (-item[1], item[0]),
        )
        return ranked[:max(0, n)]

    def to_rows(self) -> List[List[Optional[float]]]:
        """Row-major grid of scores; None marks cells outside every board shape."""
        if not self._counts:
            return []
        size = self.size()
        rows: List[List[Optional[float]]] = []
        for y in range(size.y + 1):
            row: List[Optional[float]] = []
            for x in range(size.x + 1):
                pos = Pos2(x, y)
                row.append(self[pos] if pos in self._counts else None)
            rows.append(row)
        return rows
