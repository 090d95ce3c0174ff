from __future__ import annotations

import logging
import time
from collections import deque
from contextlib import nullcontext
from typing import Callable

from blockworld.constants import ChunkKey
from blockworld.debug.profiler import RuntimeProfiler


class RebuildScheduler:
    """FIFO of chunks whose meshes are stale, drained under a per-tick time budget.

    The budget is checked only between rebuilds, so a drain overruns it by at most
    one chunk's rebuild time. A budget of zero or less drains everything.
    """

    def __init__(
        self,
        rebuild: Callable[[ChunkKey], object],
        clock: Callable[[], float] = time.perf_counter,
        profiler: RuntimeProfiler | None = None,
    ) -> None:
        self._rebuild = rebuild
        self._clock = clock
        self.profiler = profiler
        self._queue: deque[ChunkKey] = deque()
        self._queued: set[ChunkKey] = set()

    def __len__(self) -> int:
        return len(self._queue)

    def __contains__(self, chunk: ChunkKey) -> bool:
        return chunk in self._queued

    def pending(self) -> list[ChunkKey]:
        return list(self._queue)

    def _profile(self, name: str):
        if self.profiler is None:
            return nullcontext()
        return self.profiler.section(name)

    def enqueue(self, chunk: ChunkKey) -> bool:
        if chunk in self._queued:
            return False
        self._queued.add(chunk)
        self._queue.append(chunk)
        return True

    def drain(self, budget_ms: float) -> int:
        start = self._clock()
        processed = 0
        slowest_ms = 0.0
        while self._queue:
            if budget_ms > 0 and (self._clock() - start) * 1000.0 >= budget_ms:
                break
            chunk = self._queue.popleft()
            self._queued.discard(chunk)
            rebuild_start = self._clock()
            with self._profile("world.rebuild.chunk"):
                self._rebuild(chunk)
            slowest_ms = max(slowest_ms, (self._clock() - rebuild_start) * 1000.0)
            processed += 1

        elapsed_ms = (self._clock() - start) * 1000.0
        if self.profiler is not None:
            self.profiler.record_drain(processed, len(self._queue), elapsed_ms, budget_ms)
        if budget_ms > 0 and slowest_ms > budget_ms:
            logging.warning(f"Single chunk rebuild took {slowest_ms:.2f}ms, over the {budget_ms:.2f}ms budget")
        if self._queue:
            logging.debug(f"Rebuilt {processed} chunks in {elapsed_ms:.2f}ms, {len(self._queue)} still queued")
        return processed

    def flush(self) -> int:
        return self.drain(0.0)
