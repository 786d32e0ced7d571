#!/usr/bin/env python3
import argparse
import time
from typing import Iterable, List, Optional

from shipgrid.domain.geometry import Pos2
from shipgrid.domain.heatmap import HeatMap
from shipgrid.layouts.builtins import builtin_layouts, classic_layout, compact_layout
from shipgrid.persistence.layouts_store import load_custom_layouts


def _resolve_layout(name: str, custom_path: Optional[str]):
    name = (name or "compact").strip().lower()
    if name in {"classic", "10x10", "standard"}:
        return classic_layout()
    if name in {"compact", "6x6"}:
        return compact_layout()
    layouts = list(builtin_layouts())
    if custom_path:
        layouts.extend(load_custom_layouts(custom_path))
    for layout in layouts:
        if layout.layout_id == name:
            return layout
    raise ValueError(f"Unknown layout '{name}'. Use classic, compact or a custom layout id.")


def _parse_cells(raw: List[str]) -> List[Pos2]:
    cells = []
    for item in raw:
        x_str, _, y_str = item.partition(",")
        try:
            cells.append(Pos2(int(x_str), int(y_str)))
        except ValueError:
            raise ValueError(f"Bad cell '{item}', expected x,y") from None
    return cells


def render(heat: HeatMap) -> str:
    lines = []
    for row in heat.to_rows():
        lines.append(" ".join("  . " if v is None else f"{v:4.2f}" for v in row))
    return "\n".join(lines)


def main(argv: Iterable[str] = None) -> int:
    parser = argparse.ArgumentParser(description="Print the occupancy heat map of a layout.")
    parser.add_argument("--layout", default="compact", help="Layout id (classic|compact|custom id)")
    parser.add_argument("--custom", default=None, help="Custom layouts JSON file")
    parser.add_argument("--hit", action="append", default=[], help="Known hit cell x,y (repeatable)")
    parser.add_argument("--miss", action="append", default=[], help="Known miss cell x,y (repeatable)")
    parser.add_argument("--max-boards", type=int, default=None, help="Stop enumeration after this many boards")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes")
    parser.add_argument("--seed", type=int, default=None, help="Seed for sampling when the board limit is hit")
    args = parser.parse_args(list(argv) if argv is not None else None)

    layout = _resolve_layout(args.layout, args.custom)
    builder = (
        layout.to_builder()
        .set_hits(_parse_cells(args.hit))
        .set_misses(_parse_cells(args.miss))
        .set_workers(args.workers)
        .set_seed(args.seed)
    )
    if args.max_boards:
        builder.set_max_boards(args.max_boards)

    start = time.perf_counter()
    result = builder.build()
    if not result.ok:
        for err in result.errors:
            print(f"Placement error: {err}")
        return 1
    heat = HeatMap.from_boards(result.boards, workers=args.workers)
    elapsed = time.perf_counter() - start

    print(f"Layout: {layout.name} ({layout.width}x{layout.height}, whitespace {layout.whitespace})")
    suffix = ""
    if result.sampled:
        suffix = " (sampled)"
    elif result.truncated:
        suffix = " (truncated)"
    print(f"Boards: {len(result.boards)}{suffix}, Time: {elapsed:.2f}s")
    print()
    print(render(heat))
    print()
    for pos, score in heat.hottest(3, exclude=builder.hits + builder.misses):
        print(f"  ({pos.x}, {pos.y}) -> {score:.3f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
