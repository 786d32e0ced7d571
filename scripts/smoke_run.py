from shipgrid.domain.heatmap import HeatMap
from shipgrid.layouts.definition import LayoutDefinition, ShipSpec


def main() -> None:
    layout = LayoutDefinition(
        "smoke_tiny",
        "Smoke Tiny",
        4,
        4,
        (
            ShipSpec("s1", "line", length=2),
            ShipSpec("s2", "line", length=2),
        ),
        whitespace=1,
    )
    result = layout.to_builder().build()
    if not result.ok:
        for err in result.errors:
            print(f"Smoke FAILED: {err}")
        raise SystemExit(1)

    heat = HeatMap.from_boards(result.boards)
    best = heat.hottest(1)
    print(f"Smoke OK: boards={len(result.boards)} cells={len(heat)} hottest={best}")


if __name__ == "__main__":
    main()
