import os
import sys
from datetime import datetime

# -----------------------------
# Debug helpers (enable with env SHIPGRID_DEBUG=1)
# -----------------------------
DEBUG_ENABLED = str(os.getenv("SHIPGRID_DEBUG", "")).strip().lower() in {"1", "true", "yes", "on"}
DEBUG_LOG_PATH = "shipgrid_debug.log"
DEBUG_ECHO = False


def _debug_log_line(line: str) -> None:
    try:
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        with open(DEBUG_LOG_PATH, "a", encoding="utf-8") as f:
            f.write(f"[{ts}] {line}\n")
    except OSError:
        pass
    if DEBUG_ECHO:
        print(line, file=sys.stderr)


def debug_event(
    title: str,
    message: str,
    details: str = "",
    *,
    level: str = "info",
    force: bool = False,
) -> None:
    """Log a debug event when debugging is enabled (or forced)."""
    if not (DEBUG_ENABLED or force):
        return
    _debug_log_line(f"{level.upper()} | {title} | {message}")
    if details:
        for ln in details.splitlines():
            _debug_log_line(f"    {ln}")
