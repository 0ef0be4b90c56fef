#!/usr/bin/env python3
"""
Benchmark script for progressive_mandelbrot
"""

import time

from progressive_mandelbrot import RenderConfig, RenderRequest
from progressive_mandelbrot.cli import render_progressive

resolutions = [
    (640, 480),
    (1280, 720),
    (1920, 1080),
]

iterations = [256, 1000, 4096]

print("Progressive Mandelbrot Benchmark")
print("=" * 50)

config = RenderConfig().normalized()

for w, h in resolutions:
    for max_iter in iterations:
        print(f"\n{w}x{h}, {max_iter} iterations, {config.num_workers} workers:")

        start = time.time()
        surface, render_time, finished = render_progressive(
            RenderRequest(max_iter=max_iter), width=w, height=h, config=config)
        elapsed = time.time() - start

        megapixels = (w * h) / 1_000_000
        speed = megapixels / elapsed if elapsed > 0 else 0

        print(f"  Time: {elapsed:.2f}s")
        print(f"  Speed: {speed:.2f} MP/s")
        print(f"  Frames: {surface.frames}")

print("\n" + "=" * 50)
print("Benchmark complete!")
