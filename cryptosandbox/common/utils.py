"""
Utility functions for the crypto sandbox.
"""

import time


NANOS_PER_SECOND = 1_000_000_000


def now_ns() -> int:
    """
    Get current Unix timestamp in nanoseconds.
    
    Returns:
        Current timestamp in nanoseconds
    """
    return time.time_ns()


def format_duration(nanos: int) -> str:
    """
    Render a duration in seconds with a trailing 's'.
    
    Fractional digits are printed only as far as they are significant,
    so 1.5 seconds becomes "1.5s" and exactly 3 seconds becomes "3s".
    
    Args:
        nanos: Duration in nanoseconds
    
    Returns:
        Human-readable duration string
    """
    if nanos < 0:
        raise ValueError(f"Duration must be non-negative, got {nanos}")
    
    secs, frac = divmod(nanos, NANOS_PER_SECOND)
    if frac == 0:
        return f"{secs}s"
    
    digits = f"{frac:09d}".rstrip("0")
    return f"{secs}.{digits}s"


def parse_duration(text: str) -> int:
    """
    Inverse of format_duration.
    
    Args:
        text: Duration string such as "1700000000.25s"
    
    Returns:
        Duration in nanoseconds
    """
    if not text.endswith("s"):
        raise ValueError(f"Not a duration: {text!r}")
    
    secs, _, frac = text[:-1].partition(".")
    if not secs.isdigit() or (frac and not frac.isdigit()) or len(frac) > 9:
        raise ValueError(f"Not a duration: {text!r}")
    
    return int(secs) * NANOS_PER_SECOND + int(frac.ljust(9, "0"))
