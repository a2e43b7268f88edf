"""Color policies turning escape results into RGB pixels."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

import numpy as np
from matplotlib import colormaps

from .escape import EscapeResult

INSIDE_COLOR = (0, 0, 0)
SPECTRUM_MAX = 0xFFFFFF
PALETTE_SIZE = 256


class ColorMode(enum.Enum):
    GRAYSCALE = "grayscale"
    SPECTRUM = "spectrum"
    COLORMAP = "colormap"


def get_colormap(name):
    return colormaps[name]


@dataclass(frozen=True)
class ColorPolicy:
    """How escaped points are colored; points inside the set are always black."""

    mode: ColorMode
    palette: tuple[tuple[int, int, int], ...] = ()
    name: Optional[str] = None

    @classmethod
    def grayscale(cls) -> "ColorPolicy":
        return cls(ColorMode.GRAYSCALE)

    @classmethod
    def spectrum(cls) -> "ColorPolicy":
        return cls(ColorMode.SPECTRUM)

    @classmethod
    def from_flag(cls, color: bool) -> "ColorPolicy":
        return cls.spectrum() if color else cls.grayscale()

    @classmethod
    def from_colormap(cls, name: str, size: int = PALETTE_SIZE) -> "ColorPolicy":
        """Sample the matplotlib colormap ``name`` into a fixed palette."""

        try:
            cmap = get_colormap(name)
        except KeyError:
            raise ValueError(f"unknown colormap '{name}'") from None
        rgba = cmap(np.linspace(0.0, 1.0, size), bytes=True)
        palette = tuple((int(r), int(g), int(b)) for r, g, b, _ in rgba)
        return cls(ColorMode.COLORMAP, palette=palette, name=name)

    def describe(self) -> str:
        if self.mode is ColorMode.COLORMAP:
            return f"colormap '{self.name}'"
        return self.mode.value


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def grayscale_pixel(ratio: float) -> tuple[int, int, int]:
    level = _round_half_up(ratio * 255)
    return level, level, level


def spectrum_pixel(ratio: float) -> tuple[int, int, int]:
    value = _round_half_up(ratio * SPECTRUM_MAX)
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


def palette_pixel(ratio: float, palette) -> tuple[int, int, int]:
    index = min(int(ratio * len(palette)), len(palette) - 1)
    return palette[index]


def colorize(result: EscapeResult, max_iterations: int, policy: ColorPolicy) -> tuple[int, int, int]:
    """Color a single escape result.

    The escape ratio ``iterations / max_iterations`` lies in ``[0, 1)`` for
    escaped points and is computed in double precision.
    """

    if not result.escaped:
        return INSIDE_COLOR

    ratio = float(result.iterations) / float(max_iterations)
    if policy.mode is ColorMode.GRAYSCALE:
        return grayscale_pixel(ratio)
    if policy.mode is ColorMode.SPECTRUM:
        return spectrum_pixel(ratio)
    return palette_pixel(ratio, policy.palette)
