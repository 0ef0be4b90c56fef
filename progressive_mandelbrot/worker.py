"""Long-lived compute workers that turn tasks into result batches."""

from __future__ import annotations

import logging
import math
import queue
import threading
from typing import Callable, Optional

import numpy as np

from progressive_mandelbrot.escape import compute_row
from progressive_mandelbrot.model import PointBatch, Task

logger = logging.getLogger(__name__)


def compute_task(task: Task, worker_id: int = 0,
                 should_stop: Optional[Callable[[], bool]] = None) -> Optional[PointBatch]:
    """
    Evaluate all blocks of `task`'s row range.

    The first row is aligned up to a multiple of the block size so blocks sit
    on the same grid as the coarser passes. `should_stop` is polled between
    rows; when it fires the task is abandoned and None is returned.
    """
    step = task.block_size
    vp = task.viewport
    columns = max(math.ceil(vp.width / step), 0)
    row_xs = np.empty(columns, dtype=np.float64)
    row_counts = np.empty(columns, dtype=np.int64)

    xs, ys, counts = [], [], []
    k = math.ceil(task.row_start / step)
    while True:
        y = k * step
        if y >= task.row_end:
            break
        if should_stop is not None and should_stop():
            return None
        n = compute_row(float(y), float(step), task.pass_index > 0, vp.width, vp.height,
                        vp.center_x, vp.center_y, vp.scale, task.max_iter,
                        row_xs, row_counts)
        if n:
            xs.append(row_xs[:n].copy())
            ys.append(np.full(n, y, dtype=np.float64))
            counts.append(row_counts[:n].copy())
        k += 1

    if not counts:
        return PointBatch.empty_for(task, worker_id)
    return PointBatch(task.generation, task.pass_index, task.block_size, worker_id,
                      np.concatenate(xs), np.concatenate(ys), np.concatenate(counts))


class ComputeWorker:
    """
    One worker thread with its own task inbox.

    `cancel(generation)` records the newest generation; any task stamped
    older is dropped at dequeue or abandoned between rows. Cancellation is
    fire-and-forget: nothing is acknowledged.
    """

    def __init__(self, worker_id: int, on_batch: Callable[[PointBatch], object]) -> None:
        self.worker_id = worker_id
        self._on_batch = on_batch
        self._inbox: queue.Queue = queue.Queue()
        self._latest_generation = 0
        self._thread = threading.Thread(target=self._run, name=f"mandel-worker-{worker_id}", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def cancel(self, generation: int) -> None:
        # Single writer (the orchestrator); the worker thread only reads
        if generation > self._latest_generation:
            self._latest_generation = generation

    def submit(self, task: Task) -> None:
        self._inbox.put(task)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._latest_generation = float("inf")
        self._inbox.put(None)
        if self._thread.is_alive():
            self._thread.join(timeout)

    def _is_stale(self, task: Task) -> bool:
        return task.generation < self._latest_generation

    def _run(self) -> None:
        while True:
            task = self._inbox.get()
            if task is None:
                break
            if self._is_stale(task):
                logger.debug("worker %d: dropping queued task for stale generation %d",
                             self.worker_id, task.generation)
                continue
            try:
                batch = compute_task(task, self.worker_id, lambda: self._is_stale(task))
            except Exception:
                logger.exception("worker %d: task failed (generation %d, pass %d); reporting rows %d-%d as empty",
                                 self.worker_id, task.generation, task.pass_index, task.row_start, task.row_end)
                batch = PointBatch.empty_for(task, self.worker_id)
            if batch is None:
                logger.debug("worker %d: abandoned generation %d pass %d",
                             self.worker_id, task.generation, task.pass_index)
                continue
            try:
                self._on_batch(batch)
            except Exception:
                logger.exception("worker %d: batch handler raised", self.worker_id)
