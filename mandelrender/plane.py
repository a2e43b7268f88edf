"""Mapping between image pixels and points of the complex plane."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np

PRECISIONS = {
    "single": np.float32,
    "double": float,
}


@dataclass(frozen=True)
class Viewport:
    """Region of the complex plane mapped onto a ``width`` x ``height`` image."""

    width: int
    height: int
    center: tuple[float, float]
    radius: float

    def validate(self) -> "Viewport":
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"image dimensions must be positive, got {self.width}x{self.height}")
        if not self.radius > 0:
            raise ValueError(f"radius must be positive, got {self.radius}")
        if len(self.center) != 2:
            raise ValueError("center must hold exactly two coordinates")
        return self

    @property
    def pixel_count(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class ComplexPoint:
    re: float
    im: float


def scalar_type(precision: str):
    try:
        return PRECISIONS[precision]
    except KeyError:
        raise ValueError(f"unknown precision '{precision}', expected one of: {', '.join(PRECISIONS)}") from None


def map_pixel(x: int, y: int, viewport: Viewport, precision: str = "single") -> ComplexPoint:
    """Return the complex point sampled by pixel ``(x, y)``.

    The vertical axis is flipped: rows grow downwards while the imaginary
    part decreases. Every intermediate value is rounded to ``precision``.
    """

    scalar = scalar_type(precision)
    radius = scalar(viewport.radius)
    half = radius / scalar(2)
    re = (scalar(x) / scalar(viewport.width)) * radius - half + scalar(viewport.center[0])
    im = -((scalar(y) / scalar(viewport.height)) * radius - half) + scalar(viewport.center[1])
    return ComplexPoint(re=re, im=im)


def pixel_grid(viewport: Viewport) -> Iterator[tuple[int, int]]:
    """Yield every ``(x, y)`` coordinate of the image in row-major order."""

    for y in range(viewport.height):
        for x in range(viewport.width):
            yield x, y


def plane_bounds(viewport: Viewport, precision: str = "single") -> tuple[float, float, float, float]:
    """Return ``(re_min, re_max, im_min, im_max)`` over the sampled pixels."""

    top_left = map_pixel(0, 0, viewport, precision)
    bottom_right = map_pixel(viewport.width - 1, viewport.height - 1, viewport, precision)
    return (
        float(top_left.re),
        float(bottom_right.re),
        float(bottom_right.im),
        float(top_left.im),
    )
