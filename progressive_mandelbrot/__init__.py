"""
Progressive Mandelbrot renderer.

A coarse preview appears at once and sharpens pass by pass; each new view
supersedes the one in flight.
"""

from progressive_mandelbrot.config import RenderConfig, load_render_config
from progressive_mandelbrot.display import ImageSurface
from progressive_mandelbrot.model import RenderRequest
from progressive_mandelbrot.orchestrator import RenderOrchestrator
from progressive_mandelbrot.session import ExplorerSession

__all__ = [
    "ExplorerSession",
    "ImageSurface",
    "RenderConfig",
    "RenderOrchestrator",
    "RenderRequest",
    "load_render_config",
]

__version__ = "0.1.0"
