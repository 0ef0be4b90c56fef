"""Value types passed between the orchestrator, workers and collaborators."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, NamedTuple

import numpy as np

DEFAULT_CENTER_X = -0.5
DEFAULT_CENTER_Y = 0.0
DEFAULT_SCALE = 3.0
DEFAULT_MAX_ITER = 1024


def auto_iteration_cap(scale):
    """Iteration cap that grows with zoom depth: 256 plus 128 per decade."""
    scale = abs(scale)
    if scale == 0.0 or not math.isfinite(scale):
        scale = DEFAULT_SCALE
    additional = math.ceil(128 * math.log10(1 / scale))
    return 256 + max(0, additional)


@dataclass(frozen=True)
class RenderRequest:
    """Where to look and how hard to iterate."""

    center_x: float = DEFAULT_CENTER_X
    center_y: float = DEFAULT_CENTER_Y
    scale: float = DEFAULT_SCALE  # plane units across the viewport width
    max_iter: int = DEFAULT_MAX_ITER

    def normalized(self) -> RenderRequest:
        center_x = self.center_x if math.isfinite(self.center_x) else DEFAULT_CENTER_X
        center_y = self.center_y if math.isfinite(self.center_y) else DEFAULT_CENTER_Y
        scale = abs(self.scale)
        if scale == 0.0 or not math.isfinite(scale):
            scale = DEFAULT_SCALE
        return RenderRequest(float(center_x), float(center_y), float(scale),
                             max(1, int(self.max_iter)))


@dataclass(frozen=True)
class Viewport:
    """Affine mapping from viewport pixels to the complex plane."""

    width: int
    height: int
    center_x: float
    center_y: float
    scale: float

    @classmethod
    def for_request(cls, request: RenderRequest, width: int, height: int) -> Viewport:
        return cls(width, height, request.center_x, request.center_y, request.scale)

    def pixel_to_plane(self, x, y):
        # Both axes use scale/width so pixels stay square in the plane
        pixel_size = self.scale / self.width
        return (self.center_x + (x - self.width / 2) * pixel_size,
                self.center_y + (y - self.height / 2) * pixel_size)


@dataclass(frozen=True)
class Task:
    """One worker's share of one refinement pass."""

    generation: int
    pass_index: int
    block_size: float
    row_start: int
    row_end: int
    viewport: Viewport
    max_iter: int


class ResultPoint(NamedTuple):
    x: float
    y: float
    block_size: float
    count: int


@dataclass(frozen=True, eq=False)
class PointBatch:
    """Everything one worker produced for one task."""

    generation: int
    pass_index: int
    block_size: float
    worker_id: int
    xs: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.float64))
    ys: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.float64))
    counts: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.int64))

    @classmethod
    def empty_for(cls, task: Task, worker_id: int) -> PointBatch:
        return cls(task.generation, task.pass_index, task.block_size, worker_id)

    def __len__(self) -> int:
        return int(self.counts.shape[0])

    def points(self) -> Iterator[ResultPoint]:
        for x, y, n in zip(self.xs.tolist(), self.ys.tolist(), self.counts.tolist()):
            yield ResultPoint(x, y, self.block_size, n)
