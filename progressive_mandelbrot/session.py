"""Interactive session: turns user gestures into render requests."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from progressive_mandelbrot import navigation
from progressive_mandelbrot.model import DEFAULT_SCALE, RenderRequest
from progressive_mandelbrot.navigation import CapMode, NavigationHistory, resolve_cap

logger = logging.getLogger(__name__)

DRAG_INTERVAL = 0.1  # seconds between drag re-renders


class ExplorerSession:
    """
    Glue between pointer input, link history and the orchestrator.

    Gestures are already in viewport pixels. Every accepted view goes
    through `orchestrator.start`; user gestures also land in the history,
    while back/forward only move the cursor.
    """

    def __init__(self, orchestrator, history: Optional[NavigationHistory] = None,
                 cap_mode: CapMode = navigation.DEFAULT_MAX_ITER,
                 time_fn: Callable[[], float] = time.monotonic) -> None:
        self.orchestrator = orchestrator
        self.history = history if history is not None else NavigationHistory()
        self.cap_mode = cap_mode
        self._time_fn = time_fn
        self._drag_origin = None
        self._drag_start_request: Optional[RenderRequest] = None
        self._last_drag_render = float("-inf")
        self.dragged = False
        self._pinch_distance = 0.0
        self._pinch_start_request: Optional[RenderRequest] = None

    @property
    def request(self) -> RenderRequest:
        return self.orchestrator.request or RenderRequest()

    def _with_cap(self, request: RenderRequest) -> RenderRequest:
        return RenderRequest(request.center_x, request.center_y, request.scale,
                             resolve_cap(self.cap_mode, request.scale))

    def show(self, request: RenderRequest, record: bool = True) -> RenderRequest:
        request = self._with_cap(request.normalized())
        if record:
            self.history.push(request)
        self.orchestrator.start(request)
        return request

    def click(self, x, y) -> Optional[RenderRequest]:
        # A click that ends a drag does not zoom
        if self.dragged:
            return None
        return self.show(navigation.click_zoom_in(self.request, x, y,
                                                  self.orchestrator.width, self.orchestrator.height))

    def right_click(self, x, y) -> RenderRequest:
        return self.show(navigation.click_zoom_out(self.request, x, y,
                                                   self.orchestrator.width, self.orchestrator.height))

    def wheel(self, delta_y) -> RenderRequest:
        return self.show(navigation.wheel_zoom(self.request, delta_y))

    def begin_drag(self, x, y) -> None:
        self._drag_origin = (x, y)
        self._drag_start_request = self.request
        self.dragged = False

    def drag_to(self, x, y) -> Optional[RenderRequest]:
        if self._drag_origin is None:
            return None
        self.dragged = True
        now = self._time_fn()
        if now - self._last_drag_render < DRAG_INTERVAL:
            return None
        self._last_drag_render = now
        dx = x - self._drag_origin[0]
        dy = y - self._drag_origin[1]
        return self.show(navigation.drag_pan(self._drag_start_request, dx, dy, self.orchestrator.width))

    def end_drag(self) -> None:
        self._drag_origin = None

    def begin_pinch(self, distance) -> None:
        self._pinch_distance = distance
        self._pinch_start_request = self.request

    def pinch_to(self, distance) -> Optional[RenderRequest]:
        if self._pinch_start_request is None:
            return None
        return self.show(navigation.pinch_zoom(self._pinch_start_request, self._pinch_distance, distance))

    def back(self) -> Optional[RenderRequest]:
        request = self.history.back()
        if request is not None:
            self.show(request, record=False)
        return request

    def forward(self) -> Optional[RenderRequest]:
        request = self.history.forward()
        if request is not None:
            self.show(request, record=False)
        return request

    def reset(self) -> RenderRequest:
        logger.info("resetting view")
        return self.show(RenderRequest())

    def status_text(self) -> str:
        request = self.request
        status = self.orchestrator.status()
        return (f"Center: ({request.center_x:.5f}, {request.center_y:.5f})\n"
                f"Scale: {round(DEFAULT_SCALE / request.scale)}x\n"
                f"Max iterations: {request.max_iter}\n"
                f"Workers: {status.pending}/{status.num_workers}")
