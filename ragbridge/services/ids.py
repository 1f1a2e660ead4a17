# =============================================================================
# Chunk Id Generator — Time-Derived, Per-Instance Unique
# =============================================================================
#
# Ids are the current time in milliseconds ("1718000000000"). When the clock
# has not moved past the last id's millisecond (a burst in one tick, or the
# clock stepping backwards), the last base is reused with a rising suffix
# ("1718000000000-1", "1718000000000-2", ...). Bases only ever increase, so
# no id repeats for the lifetime of the generator.
#
# One generator lives on ProviderClients; nothing is kept at module level.
# =============================================================================

from __future__ import annotations

import time
from collections.abc import Callable


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ChunkIdGenerator:
    def __init__(self, clock: Callable[[], int] = _now_ms) -> None:
        self._clock = clock
        self._last_ms = -1
        self._sequence = 0

    def next_id(self) -> str:
        now = self._clock()
        if now > self._last_ms:
            self._last_ms = now
            self._sequence = 0
            return str(now)

        self._sequence += 1
        return f"{self._last_ms}-{self._sequence}"
