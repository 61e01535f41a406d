import time


def now_ms() -> int:
    """Server time in milliseconds since the epoch."""
    return int(time.time() * 1000)
