from __future__ import annotations

import time
from typing import Callable

# Wall-clock seconds; injected so tests can move time by hand.
Clock = Callable[[], float]

system_clock: Clock = time.time


def to_millis(seconds: float) -> int:
    return int(seconds * 1000)
