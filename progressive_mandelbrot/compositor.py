"""Applies result batches to the persistent RGBA pixel buffer."""

import math
import threading

import numpy as np

from progressive_mandelbrot.palette import colorize


class Compositor:
    """
    Owns the pixel buffer and writes colored blocks into it.

    Blocks of one pixel or more overwrite their square outright. Sub-pixel
    blocks blend into each pixel they touch, weighted by the overlap area.
    Each `apply` holds the lock for its whole batch.
    """

    def __init__(self, buffer):
        if buffer.ndim != 3 or buffer.shape[2] != 4:
            raise ValueError(f"expected an (H, W, 4) buffer, got shape {buffer.shape}")
        self.buffer = buffer
        self.height, self.width = buffer.shape[:2]
        self._lock = threading.Lock()

    def apply(self, batch, max_iter):
        if len(batch) == 0:
            return
        colors = colorize(batch.counts, max_iter)
        with self._lock:
            if batch.block_size >= 1:
                self._fill(batch.xs, batch.ys, batch.block_size, colors)
            else:
                self._blend(batch.xs, batch.ys, batch.block_size, colors)

    def _fill(self, xs, ys, step, colors):
        span = math.ceil(step)
        for dy in range(span):
            py = np.floor(ys + dy).astype(np.int64)
            for dx in range(span):
                px = np.floor(xs + dx).astype(np.int64)
                inside = (px >= 0) & (px < self.width) & (py >= 0) & (py < self.height)
                self.buffer[py[inside], px[inside]] = colors[inside]

    def _blend(self, xs, ys, step, colors):
        for x, y, color in zip(xs.tolist(), ys.tolist(), colors):
            rgb = color[:3].astype(np.float64)
            for py in range(math.floor(y), math.ceil(y + step)):
                if py < 0 or py >= self.height:
                    continue
                for px in range(math.floor(x), math.ceil(x + step)):
                    if px < 0 or px >= self.width:
                        continue
                    left, right = max(x, px), min(x + step, px + 1)
                    top, bottom = max(y, py), min(y + step, py + 1)
                    if right <= left or bottom <= top:
                        continue
                    weight = (right - left) * (bottom - top)
                    pixel = self.buffer[py, px]
                    mixed = pixel[:3] * (1 - weight) + rgb * weight
                    pixel[:3] = np.clip(np.rint(mixed), 0, 255)
                    pixel[3] = 255
