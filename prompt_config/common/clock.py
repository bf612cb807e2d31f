"""Wall-clock helper in epoch milliseconds."""

import time
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch"""
    return int(time.time() * 1000)
