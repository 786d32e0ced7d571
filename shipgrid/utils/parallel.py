import multiprocessing as mp

from shipgrid.utils.debug import debug_event


def fork_available(caller: str) -> bool:
    """True when worker processes can be forked with the parent's state."""
    try:
        start_method = mp.get_start_method()
    except RuntimeError:
        start_method = mp.get_start_method(allow_none=True) or "spawn"
    if start_method != "fork":
        debug_event(caller, f"start method is {start_method!r}, running serially")
        return False
    return True
