"""Fixed-size pool of compute workers."""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence

from progressive_mandelbrot.model import PointBatch, Task
from progressive_mandelbrot.worker import ComputeWorker

logger = logging.getLogger(__name__)


class WorkerPool:
    """Broadcasts cancellation, hands out one task per worker, relays batches."""

    def __init__(self, size: int, on_batch: Callable[[PointBatch], object]) -> None:
        if size < 1:
            raise ValueError("worker pool needs at least one worker")
        self.workers: List[ComputeWorker] = [ComputeWorker(i, on_batch) for i in range(size)]
        for worker in self.workers:
            worker.start()
        logger.info("Using %d workers", size)

    @property
    def size(self) -> int:
        return len(self.workers)

    def cancel(self, generation: int) -> None:
        for worker in self.workers:
            worker.cancel(generation)

    def dispatch(self, tasks: Sequence[Task]) -> None:
        if len(tasks) != len(self.workers):
            raise ValueError(f"expected {len(self.workers)} tasks, got {len(tasks)}")
        for worker, task in zip(self.workers, tasks):
            worker.submit(task)

    def close(self, timeout: float = 5.0) -> None:
        for worker in self.workers:
            worker.stop(timeout)
