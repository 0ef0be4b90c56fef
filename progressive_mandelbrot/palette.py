"""Polynomial color gradient for escape counts."""

import math

import numpy as np

BLACK = (0, 0, 0, 255)


def color_for(n, max_iter):
    """Map one escape count to an RGBA tuple. Bounded points are black."""
    if n == max_iter:
        return BLACK
    t = n / max_iter
    r = math.floor(9 * (1 - t) * t * t * t * 255)
    g = math.floor(15 * (1 - t) * (1 - t) * t * t * 255)
    b = math.floor(8.5 * (1 - t) * (1 - t) * (1 - t) * t * 255)
    return (r, g, b, 255)


def colorize(counts, max_iter):
    """
    Vectorized `color_for`.

    Parameters:
    -----------
    counts : array-like of int
        Escape counts.
    max_iter : int
        Iteration cap the counts were computed under.

    Returns:
    --------
    np.ndarray
        (N, 4) uint8 RGBA rows, bit-identical to `color_for`.
    """
    counts = np.asarray(counts)
    colors = np.zeros((counts.shape[0], 4), dtype=np.uint8)
    colors[:, 3] = 255
    if counts.shape[0] == 0 or max_iter == 0:
        return colors

    # Same operation order as color_for so the floats round identically
    t = counts.astype(np.float64) / max_iter
    r = np.floor(9 * (1 - t) * t * t * t * 255)
    g = np.floor(15 * (1 - t) * (1 - t) * t * t * 255)
    b = np.floor(8.5 * (1 - t) * (1 - t) * (1 - t) * t * 255)

    escaped = counts != max_iter
    colors[escaped, 0] = r[escaped]
    colors[escaped, 1] = g[escaped]
    colors[escaped, 2] = b[escaped]
    return colors
