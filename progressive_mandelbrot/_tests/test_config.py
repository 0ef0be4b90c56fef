import logging

import pytest

from progressive_mandelbrot.config import (
    MAX_WORKERS,
    RenderConfig,
    default_worker_count,
    load_render_config,
    pass_schedule,
)
from progressive_mandelbrot.model import RenderRequest, auto_iteration_cap


def test_render_config_defaults():
    cfg = RenderConfig()
    assert cfg.initial_step == 16
    assert cfg.last_step == 1
    assert 1 <= cfg.num_workers == default_worker_count() <= MAX_WORKERS


def test_last_step_above_initial_collapses_to_one_pass():
    cfg = RenderConfig(initial_step=4, last_step=8, num_workers=2).normalized()
    assert cfg.last_step == cfg.initial_step == 4
    assert pass_schedule(cfg.initial_step, cfg.last_step) == [4.0]


@pytest.mark.parametrize("initial, last", [(0, 1), (-4, 1), (float("nan"), 1), (16, 0), (16, -1)])
def test_non_positive_steps_fall_back_to_defaults(initial, last):
    cfg = RenderConfig(initial, last, 2).normalized()
    assert cfg.initial_step > 0 and cfg.last_step > 0
    assert cfg.last_step <= cfg.initial_step


def test_worker_count_is_clamped():
    assert RenderConfig(16, 1, 0).normalized().num_workers == 1
    assert RenderConfig(16, 1, 500).normalized().num_workers == MAX_WORKERS


def test_pass_schedule():
    assert pass_schedule(16, 1) == [16.0, 8.0, 4.0, 2.0, 1.0]
    assert pass_schedule(4, 0.25) == [4.0, 2.0, 1.0, 0.5, 0.25]
    assert pass_schedule(12, 1) == [12.0, 6.0, 3.0, 1.5]


def test_load_render_config_from_env():
    env = {
        "PROGRESSIVE_MANDELBROT_INITIAL_STEP": "32",
        "PROGRESSIVE_MANDELBROT_LAST_STEP": "0.5",
        "PROGRESSIVE_MANDELBROT_WORKERS": "3",
    }
    cfg = load_render_config(env)
    assert cfg == RenderConfig(32.0, 0.5, 3)


def test_load_render_config_ignores_garbage(caplog):
    with caplog.at_level(logging.WARNING, logger="progressive_mandelbrot.config"):
        cfg = load_render_config({"PROGRESSIVE_MANDELBROT_WORKERS": "many"})
    assert cfg.num_workers == default_worker_count()
    assert "PROGRESSIVE_MANDELBROT_WORKERS" in caplog.text


def test_request_normalization():
    assert RenderRequest(float("nan"), float("inf"), 0.0, -5).normalized() == RenderRequest(-0.5, 0.0, 3.0, 1)
    assert RenderRequest(0.1, 0.2, -0.5, 10).normalized() == RenderRequest(0.1, 0.2, 0.5, 10)


def test_auto_iteration_cap():
    assert auto_iteration_cap(3.0) == 256
    assert auto_iteration_cap(0.01) == 512


@pytest.mark.parametrize("scale", [0.0, -0.5, float("nan"), float("inf")])
def test_auto_iteration_cap_degenerate_scale(scale):
    expected = 295 if scale == -0.5 else 256
    assert auto_iteration_cap(scale) == expected
