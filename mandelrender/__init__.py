"""Public API for parallel Mandelbrot rendering."""

from .coloring import ColorMode, ColorPolicy, colorize
from .errors import RenderError, SinkError, TransportError
from .escape import BAILOUT, EscapeResult, evaluate
from .plane import ComplexPoint, Viewport, map_pixel, pixel_grid, plane_bounds
from .renderer import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_WORKERS,
    OutputImage,
    RenderedPoint,
    RenderTask,
    render_batch,
    render_image,
    render_point,
)
from .sink import save_image

__all__ = [
    "BAILOUT",
    "ColorMode",
    "ColorPolicy",
    "ComplexPoint",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_WORKERS",
    "EscapeResult",
    "OutputImage",
    "RenderError",
    "RenderTask",
    "RenderedPoint",
    "SinkError",
    "TransportError",
    "Viewport",
    "colorize",
    "evaluate",
    "map_pixel",
    "pixel_grid",
    "plane_bounds",
    "render_batch",
    "render_image",
    "render_point",
    "save_image",
]
