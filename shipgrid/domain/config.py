import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() not in {"0", "false", "no", "off"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
        return value if value > 0 else default
    except ValueError:
        return default


# Board defaults (classic layout)
DEFAULT_BOARD_SIZE = 10

# Rotation angles, counter-clockwise, in degrees.
ROTATION_ANGLES = (0, 90, 180, 270)

# Anchor policy: when True a ship shape without the (0, 0) offset is rejected
# with ShapeError instead of having the anchor inserted.
STRICT_ANCHOR = _env_flag("SHIPGRID_STRICT_ANCHOR", False)

# Enumeration: stop the layout search after this many boards.
ENUMERATION_BOARD_LIMIT = _env_int("SHIPGRID_MAX_BOARDS", 80000)

# Parallel search/aggregation
DEFAULT_WORKERS = _env_int("SHIPGRID_WORKERS", 1)
MAX_WORKERS = 4
# Below this many first-ship placements a process pool costs more than it saves.
PARALLEL_MIN_PLACEMENTS = 64
PARALLEL_MIN_BOARDS = 2000

# Sampling: when enumeration passes the board limit, layouts are drawn at
# random instead, giving up after limit * factor draws.
SAMPLE_ATTEMPTS_FACTOR = 30
SAMPLE_PLACEMENT_TRIES = 50
