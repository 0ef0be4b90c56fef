"""
Link parameters, view history and pointer-to-plane transforms.

These sit outside the renderer: they only produce and consume
`RenderRequest` values.
"""

from __future__ import annotations

import math
from typing import List, Optional, Union
from urllib.parse import parse_qs, urlencode

from progressive_mandelbrot.model import (
    DEFAULT_CENTER_X,
    DEFAULT_CENTER_Y,
    DEFAULT_MAX_ITER,
    DEFAULT_SCALE,
    RenderRequest,
    Viewport,
    auto_iteration_cap,
)

AUTO = "auto"
CLICK_ZOOM = 4.0
WHEEL_ZOOM = 1.2

CapMode = Union[int, str]


def resolve_cap(cap_mode: CapMode, scale: float) -> int:
    if cap_mode == AUTO:
        return auto_iteration_cap(scale)
    return int(cap_mode)


def _first(params, key):
    values = params.get(key)
    return values[0] if values else None


def _float_or(raw, default):
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def parse_cap_mode(raw, default: CapMode = DEFAULT_MAX_ITER) -> CapMode:
    if raw is None:
        return default
    if str(raw).strip().lower() == AUTO:
        return AUTO
    try:
        cap = int(raw)
    except ValueError:
        return default
    return cap if cap > 0 else default


def cap_mode_from_query(query: str, default: CapMode = DEFAULT_MAX_ITER) -> CapMode:
    return parse_cap_mode(_first(parse_qs(query.lstrip("?")), "maxIterations"), default)


def request_from_query(query: str, default_cap: CapMode = DEFAULT_MAX_ITER) -> RenderRequest:
    """Read `centerX`, `centerY`, `scale` and `maxIterations` from a link query."""
    params = parse_qs(query.lstrip("?"))
    center_x = _float_or(_first(params, "centerX"), DEFAULT_CENTER_X)
    center_y = _float_or(_first(params, "centerY"), DEFAULT_CENTER_Y)
    scale = _float_or(_first(params, "scale"), DEFAULT_SCALE)
    if scale <= 0:
        scale = DEFAULT_SCALE
    cap_mode = parse_cap_mode(_first(params, "maxIterations"), default_cap)
    return RenderRequest(center_x, center_y, scale, resolve_cap(cap_mode, scale))


def request_to_query(request: RenderRequest, cap_mode: Optional[CapMode] = None) -> str:
    cap = request.max_iter if cap_mode is None else cap_mode
    return urlencode([
        ("maxIterations", cap),
        ("scale", repr(request.scale)),
        ("centerX", repr(request.center_x)),
        ("centerY", repr(request.center_y)),
    ])


class NavigationHistory:
    """Back/forward stack of accepted requests."""

    def __init__(self) -> None:
        self._entries: List[RenderRequest] = []
        self._index = -1

    @property
    def current(self) -> Optional[RenderRequest]:
        return self._entries[self._index] if self._index >= 0 else None

    def push(self, request: RenderRequest) -> None:
        # A new entry drops everything ahead of the cursor
        del self._entries[self._index + 1:]
        self._entries.append(request)
        self._index = len(self._entries) - 1

    def can_go_back(self) -> bool:
        return self._index > 0

    def can_go_forward(self) -> bool:
        return self._index < len(self._entries) - 1

    def back(self) -> Optional[RenderRequest]:
        if not self.can_go_back():
            return None
        self._index -= 1
        return self._entries[self._index]

    def forward(self) -> Optional[RenderRequest]:
        if not self.can_go_forward():
            return None
        self._index += 1
        return self._entries[self._index]

    def __len__(self) -> int:
        return len(self._entries)


def zoom_at(request: RenderRequest, x, y, width, height, factor) -> RenderRequest:
    """Recenter on pixel (x, y) and divide the scale by `factor`."""
    cx, cy = Viewport.for_request(request, width, height).pixel_to_plane(x, y)
    return RenderRequest(cx, cy, request.scale / factor, request.max_iter)


def click_zoom_in(request, x, y, width, height):
    return zoom_at(request, x, y, width, height, CLICK_ZOOM)


def click_zoom_out(request, x, y, width, height):
    return zoom_at(request, x, y, width, height, 1 / CLICK_ZOOM)


def wheel_zoom(request: RenderRequest, delta_y) -> RenderRequest:
    """Scrolling down zooms out, up zooms in, around the current centre."""
    scale = request.scale * WHEEL_ZOOM if delta_y > 0 else request.scale / WHEEL_ZOOM
    return RenderRequest(request.center_x, request.center_y, scale, request.max_iter)


def drag_pan(start: RenderRequest, dx, dy, width) -> RenderRequest:
    """Move the centre so the plane follows a drag of (dx, dy) pixels."""
    pixel_size = start.scale / width
    return RenderRequest(start.center_x - dx * pixel_size, start.center_y - dy * pixel_size,
                         start.scale, start.max_iter)


def pinch_zoom(start: RenderRequest, start_distance, distance) -> RenderRequest:
    if distance <= 0 or start_distance <= 0:
        return start
    return RenderRequest(start.center_x, start.center_y,
                         start.scale * (start_distance / distance), start.max_iter)
