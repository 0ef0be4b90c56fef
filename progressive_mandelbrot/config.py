"""Render configuration and its environment overrides."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

logger = logging.getLogger(__name__)

MAX_WORKERS = 16
DEFAULT_INITIAL_STEP = 16  # should be a power of 2
DEFAULT_LAST_STEP = 1

ENV_PREFIX = "PROGRESSIVE_MANDELBROT_"


def default_worker_count() -> int:
    return min(os.cpu_count() or 4, MAX_WORKERS)


def _positive(value, default):
    if not math.isfinite(value) or value <= 0:
        return default
    return value


@dataclass(frozen=True)
class RenderConfig:
    """Pass schedule and pool size for the progressive renderer."""

    initial_step: float = DEFAULT_INITIAL_STEP
    last_step: float = DEFAULT_LAST_STEP
    num_workers: int = field(default_factory=default_worker_count)

    def normalized(self) -> RenderConfig:
        initial = _positive(float(self.initial_step), DEFAULT_INITIAL_STEP)
        last = _positive(float(self.last_step), DEFAULT_LAST_STEP)
        if last > initial:
            logger.warning("last_step %s exceeds initial_step %s; rendering a single pass", last, initial)
            last = initial
        workers = min(max(int(self.num_workers), 1), MAX_WORKERS)
        return RenderConfig(initial, last, workers)


def pass_schedule(initial_step, last_step) -> List[float]:
    """Block sizes of each pass, halving from `initial_step` while >= `last_step`."""
    steps = []
    step = float(initial_step)
    while step >= last_step:
        steps.append(step)
        if step <= last_step:
            break
        step = step / 2
    return steps


def _read(env: Mapping[str, str], name: str, cast, default):
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("ignoring %s%s=%r (not a valid %s)", ENV_PREFIX, name, raw, cast.__name__)
        return default


def load_render_config(env: Optional[Mapping[str, str]] = None) -> RenderConfig:
    """Build a normalized `RenderConfig` from environment variables."""
    env = os.environ if env is None else env
    cfg = RenderConfig(
        initial_step=_read(env, "INITIAL_STEP", float, DEFAULT_INITIAL_STEP),
        last_step=_read(env, "LAST_STEP", float, DEFAULT_LAST_STEP),
        num_workers=_read(env, "WORKERS", int, default_worker_count()),
    )
    return cfg.normalized()
