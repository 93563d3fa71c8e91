import time
from typing import Callable

# Caches take a Clock so tests can drive time explicitly
Clock = Callable[[], int]


def now_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)
