"""
Escape-time kernels compiled with Numba.

`escape_count` is the per-point evaluator; `compute_row` walks one
block-aligned row of a task and fills preallocated output arrays.
"""

from numba import jit


@jit(nopython=True, nogil=True, cache=True)
def escape_count(cx, cy, max_iter):
    """
    Iterate z <- z^2 + c from z = 0.

    Returns the iteration at which |z|^2 exceeded 4, or `max_iter` if the
    orbit stayed bounded. A non-positive `max_iter` returns 0.
    """
    zr, zi = 0.0, 0.0
    n = 0
    while zr * zr + zi * zi <= 4.0 and n < max_iter:
        zr2 = zr * zr
        zi2 = zi * zi
        zi = 2.0 * zr * zi + cy
        zr = zr2 - zi2 + cx
        n += 1
    return n


@jit(nopython=True, nogil=True, cache=True)
def compute_row(y, step, skip_parents, width, height,
                center_x, center_y, scale, max_iter, xs, counts):
    """
    Evaluate every retained block of the row starting at pixel `y`.

    Blocks are sampled at their centre. When `skip_parents` is set, blocks
    sitting on the 2*step grid were already produced by the previous pass
    and are left out. Returns the number of entries written.
    """
    pixel_size = scale / width
    half = step / 2.0
    cy = center_y + (y + half - height / 2.0) * pixel_size
    skip_row = skip_parents and (y % (2.0 * step) == 0.0)

    n = 0
    i = 0
    x = 0.0
    while x < width:
        if not (skip_row and x % (2.0 * step) == 0.0):
            cx = center_x + (x + half - width / 2.0) * pixel_size
            xs[n] = x
            counts[n] = escape_count(cx, cy, max_iter)
            n += 1
        i += 1
        x = i * step
    return n
