import numpy as np
import pytest

from progressive_mandelbrot.escape import compute_row, escape_count


@pytest.mark.parametrize("cap", [1, 2, 100, 1000])
def test_origin_is_bounded_for_any_cap(cap):
    assert escape_count(0.0, 0.0, cap) == cap


def test_escape_count_is_deterministic():
    first = escape_count(-0.7453, 0.1127, 500)
    assert all(escape_count(-0.7453, 0.1127, 500) == first for _ in range(5))


def test_escape_count_known_orbits():
    # c = 2: z goes 0 -> 2 -> 6, escaping on the second iteration
    assert escape_count(2.0, 0.0, 100) == 2
    # c = -2 settles on the fixed point z = 2 with |z|^2 == 4, never above it
    assert escape_count(-2.0, 0.0, 100) == 100
    assert escape_count(3.0, 3.0, 100) == 1


@pytest.mark.parametrize("cap", [0, -1, -50])
def test_non_positive_cap_returns_zero(cap):
    assert escape_count(0.0, 0.0, cap) == 0
    assert escape_count(5.0, 5.0, cap) == 0


def _row(y, step, skip, width=8, height=8):
    columns = int(np.ceil(width / step))
    xs = np.empty(columns, dtype=np.float64)
    counts = np.empty(columns, dtype=np.int64)
    n = compute_row(float(y), float(step), skip, width, height, -0.5, 0.0, 3.0, 50, xs, counts)
    return xs[:n].tolist(), counts[:n].tolist()


def test_compute_row_without_skip_visits_every_block():
    xs, counts = _row(0, 2, False)
    assert xs == [0.0, 2.0, 4.0, 6.0]
    assert len(counts) == 4


def test_compute_row_skips_parent_grid_on_even_rows():
    xs, _ = _row(0, 1, True)
    assert xs == [1.0, 3.0, 5.0, 7.0]
    # Odd rows hold no parent blocks
    xs, _ = _row(1, 1, True)
    assert xs == [float(x) for x in range(8)]


def test_compute_row_samples_block_centres():
    width, height, step = 8, 8, 4
    xs = np.empty(2, dtype=np.float64)
    counts = np.empty(2, dtype=np.int64)
    n = compute_row(0.0, float(step), False, width, height, -0.5, 0.0, 3.0, 200, xs, counts)
    assert n == 2
    pixel_size = 3.0 / width
    for x, count in zip(xs, counts):
        cx = -0.5 + (x + step / 2 - width / 2) * pixel_size
        cy = 0.0 + (0 + step / 2 - height / 2) * pixel_size
        assert count == escape_count(cx, cy, 200)


def test_compute_row_sub_pixel_steps():
    xs, _ = _row(0.5, 0.5, True, width=2, height=2)
    assert xs == [0.0, 0.5, 1.0, 1.5]
    xs, _ = _row(1.0, 0.5, True, width=2, height=2)
    assert xs == [0.5, 1.5]
