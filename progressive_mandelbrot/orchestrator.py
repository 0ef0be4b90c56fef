"""
Progressive render orchestration.

Every `start` opens a new generation: workers are told to drop older work,
then pass 0 is dispatched at the coarsest block size. Each pass is a
barrier: the next, finer pass goes out only after every worker has reported
for the current one. Batches stamped with an older generation are ignored.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Set, Tuple

from progressive_mandelbrot.compositor import Compositor
from progressive_mandelbrot.config import RenderConfig
from progressive_mandelbrot.model import PointBatch, RenderRequest, Task, Viewport
from progressive_mandelbrot.pool import WorkerPool

logger = logging.getLogger(__name__)


def partition_rows(height: int, parts: int) -> List[Tuple[int, int]]:
    """Split `height` rows into `parts` contiguous [start, end) ranges."""
    segment = math.ceil(height / parts)
    ranges = []
    for i in range(parts):
        start = min(height, i * segment)
        end = min(height, (i + 1) * segment)
        ranges.append((start, end))
    return ranges


@dataclass(frozen=True)
class RenderStatus:
    generation: int
    pass_index: int
    block_size: Optional[float]
    pending: int
    num_workers: int
    complete: bool


class RenderOrchestrator:
    """
    Drives the pass sequence over a worker pool for one display surface.

    `on_worker_batch` may be called from any worker thread; all shared state
    (generation, pass barrier, pixel buffer) is mutated under one lock.
    """

    def __init__(self, surface, config: Optional[RenderConfig] = None, pool=None,
                 on_accept: Optional[Callable[[RenderRequest], None]] = None) -> None:
        self.config = (config or RenderConfig()).normalized()
        self.surface = surface
        self.compositor = Compositor(surface.get_buffer())
        self.width = self.compositor.width
        self.height = self.compositor.height
        self._on_accept = on_accept

        self._lock = threading.RLock()
        self._finished = threading.Condition(self._lock)
        self._generation = 0
        self._request: Optional[RenderRequest] = None
        self._pass_index = 0
        self._block_size: Optional[float] = None
        self._pending = 0
        self._reported: Set[int] = set()
        self._complete = False

        self._pool = pool if pool is not None else WorkerPool(self.config.num_workers, self.on_worker_batch)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def request(self) -> Optional[RenderRequest]:
        return self._request

    @property
    def num_workers(self) -> int:
        return self._pool.size

    def start(self, request: RenderRequest) -> int:
        """Supersede whatever is rendering and begin `request` at the coarsest pass."""
        request = request.normalized()
        with self._lock:
            self._generation += 1
            self._request = request
            self._complete = False
            self._pool.cancel(self._generation)
            logger.debug("generation %d: center=(%r, %r) scale=%r max_iter=%d", self._generation,
                         request.center_x, request.center_y, request.scale, request.max_iter)
            self._dispatch(float(self.config.initial_step), 0)
            generation = self._generation
        if self._on_accept is not None:
            self._on_accept(request)
        return generation

    def on_worker_batch(self, batch: PointBatch) -> bool:
        """Apply one worker's batch; returns False when it was dropped."""
        with self._lock:
            if batch.generation != self._generation:
                logger.debug("dropping batch from stale generation %d (current %d)",
                             batch.generation, self._generation)
                return False
            if self._complete or batch.pass_index != self._pass_index or batch.worker_id in self._reported:
                logger.warning("ignoring duplicate report from worker %d for generation %d pass %d",
                               batch.worker_id, batch.generation, batch.pass_index)
                return False

            self._reported.add(batch.worker_id)
            self.compositor.apply(batch, self._request.max_iter)
            self.surface.present(self.compositor.buffer)
            self._pending -= 1

            if self._pending == 0:
                if batch.block_size > self.config.last_step:
                    self._dispatch(batch.block_size / 2, self._pass_index + 1)
                else:
                    self._finish()
            return True

    def _dispatch(self, block_size: float, pass_index: int) -> None:
        if block_size < self.config.last_step:
            # Only reachable when the steps are not a power of two apart
            self._finish()
            return
        viewport = Viewport.for_request(self._request, self.width, self.height)
        tasks = [Task(self._generation, pass_index, block_size, start, end, viewport, self._request.max_iter)
                 for start, end in partition_rows(self.height, self._pool.size)]
        self._pass_index = pass_index
        self._block_size = block_size
        self._pending = len(tasks)
        self._reported = set()
        logger.debug("generation %d: pass %d at block size %s", self._generation, pass_index, block_size)
        self._pool.dispatch(tasks)

    def _finish(self) -> None:
        self._complete = True
        self._pending = 0
        logger.info("generation %d complete after %d passes", self._generation, self._pass_index + 1)
        self._finished.notify_all()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current generation completes. False on timeout."""
        with self._finished:
            if self._generation == 0:
                return True
            return self._finished.wait_for(lambda: self._complete, timeout)

    def status(self) -> RenderStatus:
        with self._lock:
            return RenderStatus(self._generation, self._pass_index, self._block_size,
                                self._pending, self._pool.size, self._complete)

    def close(self) -> None:
        self._pool.close()

    def __enter__(self) -> RenderOrchestrator:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
