import math
import multiprocessing as mp
import random
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from shipgrid.domain import config
from shipgrid.domain.board import Board
from shipgrid.domain.errors import PlacementError
from shipgrid.domain.geometry import Pos2
from shipgrid.domain.ship import Ship
from shipgrid.utils.debug import debug_event
from shipgrid.utils.parallel import fork_available

from .placements import CellIndex, LayoutPlacement, generate_board_placements

Layout = Tuple[int, ...]


@dataclass
class BuildResult:
    boards: List[Board] = field(default_factory=list)
    errors: List[PlacementError] = field(default_factory=list)
    truncated: bool = False
    sampled: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors


def enumerate_layouts(
    placements: Sequence[Sequence[LayoutPlacement]],
    order: Sequence[int],
    hit_mask: int,
    limit: int,
    first_choices: Optional[Sequence[int]] = None,
    shared_count=None,
) -> Tuple[List[Layout], int, bool]:
    """Backtracking search over one placement per ship.

    Returns the layouts found (placement indices in search order), the deepest
    number of ships placed in any branch, and whether the limit cut the search
    short.

    shared_count is an optional multiprocessing.Value holding the number of
    layouts found by every worker of a parallel search; the limit then applies
    to that total.
    """
    n = len(order)
    found: List[Layout] = []
    chosen: List[int] = []
    deepest = 0
    truncated = False

    def backtrack(depth: int, used_mask: int, blocked_mask: int) -> None:
        nonlocal deepest, truncated
        if depth > deepest:
            deepest = depth
        if depth == n:
            if (used_mask & hit_mask) != hit_mask:
                return
            if shared_count is None:
                if len(found) >= limit:
                    truncated = True
                    return
            else:
                with shared_count.get_lock():
                    if shared_count.value >= limit:
                        truncated = True
                        return
                    shared_count.value += 1
            found.append(tuple(chosen))
            return
        plist = placements[order[depth]]
        if depth == 0 and first_choices is not None:
            candidates: Iterable[int] = first_choices
        else:
            candidates = range(len(plist))
        for j in candidates:
            p = plist[j]
            # halos include the ship's own cells, so this also rules out overlap
            if p.mask & blocked_mask:
                continue
            chosen.append(j)
            backtrack(depth + 1, used_mask | p.mask, blocked_mask | p.halo_mask)
            chosen.pop()
            if truncated:
                return

    backtrack(0, 0, 0)
    return found, deepest, truncated


_shared_count = None


def _init_search_worker(counter) -> None:
    global _shared_count
    _shared_count = counter


def _search_worker(args):
    placements, order, hit_mask, limit, first_choices = args
    return enumerate_layouts(placements, order, hit_mask, limit, first_choices, _shared_count)


def random_layout(
    placements: Sequence[Sequence[LayoutPlacement]],
    order: Sequence[int],
    hit_mask: int,
    rng: random.Random,
    tries: int = config.SAMPLE_PLACEMENT_TRIES,
) -> Optional[Layout]:
    """Draw one layout at random, or None when this draw failed.

    Ships are placed in a shuffled order, each getting up to `tries` random
    placements that stay clear of the ships already placed.
    """
    chosen: List[int] = [0] * len(order)
    depths = list(range(len(order)))
    rng.shuffle(depths)
    used_mask = 0
    blocked_mask = 0
    for depth in depths:
        plist = placements[order[depth]]
        if not plist:
            return None
        placed = False
        for _ in range(tries):
            j = rng.randrange(len(plist))
            p = plist[j]
            if p.mask & blocked_mask:
                continue
            chosen[depth] = j
            used_mask |= p.mask
            blocked_mask |= p.halo_mask
            placed = True
            break
        if not placed:
            return None
    if (used_mask & hit_mask) != hit_mask:
        return None
    return tuple(chosen)


def sample_layouts(
    placements: Sequence[Sequence[LayoutPlacement]],
    order: Sequence[int],
    hit_mask: int,
    target: int,
    seed: Optional[int] = None,
    max_attempts: Optional[int] = None,
) -> List[Layout]:
    """Up to `target` distinct random layouts, drawn with a seeded generator."""
    rng = random.Random(seed)
    if max_attempts is None:
        max_attempts = target * config.SAMPLE_ATTEMPTS_FACTOR
    seen = set()
    layouts: List[Layout] = []
    attempts = 0
    while len(layouts) < target and attempts < max_attempts:
        attempts += 1
        layout = random_layout(placements, order, hit_mask, rng)
        if layout is None or layout in seen:
            continue
        seen.add(layout)
        layouts.append(layout)
    return layouts


def _sample_worker(args):
    placements, order, hit_mask, target, seed, max_attempts = args
    return sample_layouts(placements, order, hit_mask, target, seed, max_attempts)


class BoardBuilder:
    """Collects ships, a board shape and a whitespace gap, then enumerates layouts.

    Whitespace is a Chebyshev gap: for cells of two different ships,
    max(|dx|, |dy|) must exceed `whitespace`.
    With 0 ships may touch but not overlap; with 1 they may not touch, even
    diagonally.
    """

    def __init__(
        self,
        ships: Optional[Iterable[Ship]] = None,
        shape: Optional[Iterable[Pos2]] = None,
        whitespace: int = 0,
    ):
        self._ships: List[Ship] = list(ships or [])
        self._shape: List[Pos2] = list(shape or [])
        self._whitespace = 0
        self.set_whitespace(whitespace)
        self._allow_rotations = True
        self._hits: List[Pos2] = []
        self._misses: List[Pos2] = []
        self._max_boards = config.ENUMERATION_BOARD_LIMIT
        self._workers = config.DEFAULT_WORKERS
        self._seed: Optional[int] = None

    # ---- fluent setters ----

    def set_ships(self, ships: Iterable[Ship]) -> "BoardBuilder":
        self._ships = list(ships)
        return self

    def add_ship(self, ship: Ship) -> "BoardBuilder":
        self._ships.append(ship)
        return self

    def set_shape(self, shape: Iterable[Pos2]) -> "BoardBuilder":
        self._shape = list(shape)
        return self

    def set_whitespace(self, whitespace: int) -> "BoardBuilder":
        whitespace = int(whitespace)
        if whitespace < 0:
            raise ValueError("whitespace must be >= 0")
        self._whitespace = whitespace
        return self

    def set_rotations(self, allow: bool) -> "BoardBuilder":
        self._allow_rotations = bool(allow)
        return self

    def set_hits(self, hits: Iterable[Pos2]) -> "BoardBuilder":
        self._hits = list(hits)
        return self

    def set_misses(self, misses: Iterable[Pos2]) -> "BoardBuilder":
        self._misses = list(misses)
        return self

    def set_max_boards(self, max_boards: int) -> "BoardBuilder":
        max_boards = int(max_boards)
        if max_boards <= 0:
            raise ValueError("max_boards must be positive")
        self._max_boards = max_boards
        return self

    def set_workers(self, workers: int) -> "BoardBuilder":
        self._workers = max(1, int(workers))
        return self

    def set_seed(self, seed: Optional[int]) -> "BoardBuilder":
        self._seed = seed
        return self

    # ---- getters ----
    # ships/shape hand back the underlying lists so callers may edit them in place.

    @property
    def ships(self) -> List[Ship]:
        return self._ships

    @property
    def shape(self) -> List[Pos2]:
        return self._shape

    @property
    def whitespace(self) -> int:
        return self._whitespace

    @property
    def allow_rotations(self) -> bool:
        return self._allow_rotations

    @property
    def hits(self) -> List[Pos2]:
        return self._hits

    @property
    def misses(self) -> List[Pos2]:
        return self._misses

    @property
    def max_boards(self) -> int:
        return self._max_boards

    @property
    def workers(self) -> int:
        return self._workers

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    # ---- build ----

    def build(self) -> BuildResult:
        """Enumerate every valid layout, up to max_boards.

        When there are more than max_boards layouts the result is flagged
        truncated and holds max_boards distinct layouts drawn at random
        (seeded by set_seed) instead of the first ones found.

        Produced boards list ships in builder order and carry hits + misses as
        their shots. Boards share the shape list and rotated Ship objects, so
        treat them as read-only.
        """
        index = CellIndex(self._shape)
        for pos in self._hits:
            if pos not in index:
                raise ValueError(f"hit ({pos.x}, {pos.y}) lies outside the board shape")
        hit_mask = index.mask(self._hits)
        miss_mask = index.mask(self._misses)
        if hit_mask & miss_mask:
            raise ValueError("a cell cannot be both a hit and a miss")
        shots = list(self._hits) + list(self._misses)

        placements = generate_board_placements(
            self._ships,
            index,
            whitespace=self._whitespace,
            allow_rotations=self._allow_rotations,
            forbidden_mask=miss_mask,
        )

        reason = "no placement fits the board shape"
        if miss_mask:
            reason += " without covering a miss"
        errors = [
            PlacementError(i, self._ships[i], reason)
            for i, plist in enumerate(placements)
            if not plist
        ]
        if errors:
            debug_event(
                "BoardBuilder",
                f"{len(errors)} ship(s) cannot be placed",
                "\n".join(str(e) for e in errors),
                level="warning",
            )
            return BuildResult([], errors)

        # Most constrained ship first.
        order = sorted(range(len(placements)), key=lambda i: (len(placements[i]), i))
        layouts, deepest, truncated = self._search(placements, order, hit_mask)

        sampled = False
        if truncated:
            # The enumeration prefix is skewed toward the first placements
            # tried, so replace it with a random sample of the same size.
            drawn = self._sample(placements, order, hit_mask)
            if drawn:
                layouts = drawn
                sampled = True
                debug_event(
                    "BoardBuilder",
                    f"more than {self._max_boards} boards; sampled {len(drawn)} at random",
                    f"seed={self._seed}",
                    level="warning",
                )
            else:
                debug_event(
                    "BoardBuilder",
                    f"enumeration stopped at {self._max_boards} boards",
                    "random sampling found no layout; keeping the enumeration prefix",
                    level="warning",
                )

        if not layouts:
            if deepest < len(order):
                i = order[deepest]
                error = PlacementError(i, self._ships[i], "no placement compatible with the other ships")
            else:
                error = PlacementError(None, None, "no layout covers every known hit")
            debug_event("BoardBuilder", "no valid layout", str(error), level="warning")
            return BuildResult([], [error])

        shape = list(self._shape)
        boards = [self._to_board(layout, placements, order, shape, shots) for layout in layouts]
        return BuildResult(boards, [], truncated, sampled)

    def _search(self, placements, order, hit_mask) -> Tuple[List[Layout], int, bool]:
        limit = self._max_boards
        workers = max(1, min(self._workers, config.MAX_WORKERS))
        first = len(placements[order[0]]) if order else 0
        if workers <= 1 or first < config.PARALLEL_MIN_PLACEMENTS or not fork_available("BoardBuilder"):
            return enumerate_layouts(placements, order, hit_mask, limit)

        per_worker = int(math.ceil(first / workers))
        chunks = [list(range(i, min(i + per_worker, first))) for i in range(0, first, per_worker)]
        args_list = [(placements, order, hit_mask, limit, chunk) for chunk in chunks]
        ctx = mp.get_context("fork")
        # Workers share one layout counter so together they keep at most `limit`.
        counter = ctx.Value("i", 0)
        with ctx.Pool(
            processes=len(chunks),
            initializer=_init_search_worker,
            initargs=(counter,),
        ) as pool:
            parts = pool.map(_search_worker, args_list)

        layouts: List[Layout] = []
        deepest = 0
        truncated = False
        for found, part_deepest, part_truncated in parts:
            deepest = max(deepest, part_deepest)
            truncated = truncated or part_truncated
            for layout in found:
                if len(layouts) >= limit:
                    truncated = True
                    break
                layouts.append(layout)
        return layouts, deepest, truncated

    def _sample(self, placements, order, hit_mask) -> List[Layout]:
        target = self._max_boards
        max_attempts = target * config.SAMPLE_ATTEMPTS_FACTOR
        workers = max(1, min(self._workers, config.MAX_WORKERS))
        if workers <= 1 or target < config.PARALLEL_MIN_BOARDS or not fork_available("BoardBuilder"):
            return sample_layouts(placements, order, hit_mask, target, self._seed, max_attempts)

        rng = random.Random(self._seed)
        per_worker = int(math.ceil(target / workers))
        per_attempts = int(math.ceil(max_attempts / workers))
        args_list = [
            (placements, order, hit_mask, per_worker, rng.randint(0, 2**31 - 1), per_attempts)
            for _ in range(workers)
        ]
        ctx = mp.get_context("fork")
        with ctx.Pool(processes=workers) as pool:
            parts = pool.map(_sample_worker, args_list)

        seen = set()
        layouts: List[Layout] = []
        for part in parts:
            for layout in part:
                if len(layouts) >= target:
                    return layouts
                if layout in seen:
                    continue
                seen.add(layout)
                layouts.append(layout)
        return layouts

    def _to_board(self, layout: Layout, placements, order, shape, shots) -> Board:
        ships: List[Optional[Tuple[Pos2, Ship]]] = [None] * len(order)
        for depth, j in enumerate(layout):
            p = placements[order[depth]][j]
            ships[p.ship_index] = (p.anchor, p.ship)
        return Board(ships, shape, shots)
