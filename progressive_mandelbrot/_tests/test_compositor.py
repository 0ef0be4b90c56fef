import numpy as np
import pytest

from progressive_mandelbrot.compositor import Compositor
from progressive_mandelbrot.model import PointBatch
from progressive_mandelbrot.palette import color_for

CAP = 1000
MID = 500  # colors to (143, 239, 135)


def batch(step, points, count=MID):
    xs = np.array([p[0] for p in points], dtype=np.float64)
    ys = np.array([p[1] for p in points], dtype=np.float64)
    counts = np.full(len(points), count, dtype=np.int64)
    return PointBatch(1, 0, step, 0, xs, ys, counts)


@pytest.fixture
def compositor():
    return Compositor(np.zeros((4, 4, 4), dtype=np.uint8))


def test_rejects_non_rgba_buffers():
    with pytest.raises(ValueError):
        Compositor(np.zeros((4, 4, 3), dtype=np.uint8))


def test_whole_pixel_blocks_fill_their_square(compositor):
    compositor.apply(batch(2, [(2, 2)]), CAP)
    buf = compositor.buffer
    assert (buf[2:4, 2:4] == color_for(MID, CAP)).all()
    assert not buf[:2].any()
    assert not buf[:, :2].any()


def test_blocks_overwrite_without_blending(compositor):
    compositor.apply(batch(4, [(0, 0)]), CAP)
    compositor.apply(batch(1, [(1, 1)], count=CAP), CAP)
    assert tuple(compositor.buffer[1, 1]) == (0, 0, 0, 255)
    assert tuple(compositor.buffer[0, 0]) == color_for(MID, CAP)


def test_out_of_bounds_pixels_are_ignored(compositor):
    compositor.apply(batch(2, [(3, 3), (-2, 0), (8, 8)]), CAP)
    buf = compositor.buffer
    assert tuple(buf[3, 3]) == color_for(MID, CAP)
    assert int((buf[..., 3] == 255).sum()) == 1


def test_sub_pixel_block_blends_by_area(compositor):
    compositor.apply(batch(0.5, [(0, 0)]), CAP)
    # weight 0.25 over black: 143*.25, 239*.25, 135*.25 rounded
    assert tuple(compositor.buffer[0, 0]) == (36, 60, 34, 255)
    assert not compositor.buffer[0, 1].any()


def test_sub_pixel_block_straddling_two_pixels(compositor):
    compositor.apply(batch(0.5, [(0.75, 0)]), CAP)
    # each pixel gets a 0.25 x 0.5 overlap
    assert tuple(compositor.buffer[0, 0]) == (18, 30, 17, 255)
    assert tuple(compositor.buffer[0, 1]) == (18, 30, 17, 255)


def test_sub_pixel_blocks_tile_a_pixel_to_full_color(compositor):
    points = [(0, 0), (0.5, 0), (0, 0.5), (0.5, 0.5)]
    compositor.buffer[0, 0] = (143, 239, 135, 255)
    compositor.apply(batch(0.5, points), CAP)
    assert tuple(compositor.buffer[0, 0]) == (143, 239, 135, 255)


def test_empty_batch_is_a_no_op(compositor):
    compositor.apply(batch(1, []), CAP)
    assert not compositor.buffer.any()
