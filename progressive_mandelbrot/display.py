"""In-memory display surface backed by a numpy RGBA buffer."""

import numpy as np
from PIL import Image


class ImageSurface:
    """
    Stand-in for an on-screen canvas.

    The buffer starts transparent black, like a fresh canvas. `present` is
    called after every applied batch; `snapshot` converts the current
    buffer to a PIL image.
    """

    def __init__(self, width, height, on_present=None):
        self.width = int(width)
        self.height = int(height)
        self._buffer = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        self._on_present = on_present
        self.frames = 0

    def get_buffer(self):
        return self._buffer

    def present(self, buffer):
        self.frames += 1
        if self._on_present is not None:
            self._on_present(buffer)

    def snapshot(self):
        return Image.fromarray(self._buffer.copy())
