import numpy as np

from progressive_mandelbrot.palette import BLACK, color_for, colorize


def test_bounded_points_are_opaque_black():
    assert color_for(1000, 1000) == BLACK == (0, 0, 0, 255)


def test_immediate_escape_is_also_black():
    assert color_for(0, 1000) == (0, 0, 0, 255)
    assert color_for(0, 1) == (0, 0, 0, 255)


def test_midpoint_gradient():
    # t = 0.5: 9*.5*.125*255 = 143.4, 15*.25*.25*255 = 239.06, 8.5*.125*.5*255 = 135.47
    assert color_for(500, 1000) == (143, 239, 135, 255)


def test_colorize_matches_scalar_mapping():
    cap = 1000
    counts = np.arange(cap + 1)
    colors = colorize(counts, cap)
    assert colors.dtype == np.uint8
    expected = np.array([color_for(int(n), cap) for n in counts], dtype=np.uint8)
    np.testing.assert_array_equal(colors, expected)


def test_colorize_empty_and_zero_cap():
    assert colorize(np.empty(0, dtype=np.int64), 10).shape == (0, 4)
    np.testing.assert_array_equal(colorize(np.array([0]), 0), [[0, 0, 0, 255]])
