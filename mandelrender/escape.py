"""Escape-time evaluation of single points."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .plane import ComplexPoint

BAILOUT = 4


@dataclass(frozen=True)
class EscapeResult:
    """Outcome of iterating ``z -> z**2 + c`` for one point.

    ``iterations`` is the step at which ``|z|**2`` first exceeded the bailout,
    or the full budget when the point never escaped.
    """

    escaped: bool
    iterations: int


def evaluate(c: ComplexPoint, max_iterations: int) -> EscapeResult:
    """Iterate the Mandelbrot recurrence from ``z_0 = c``.

    Arithmetic stays in the scalar type of ``c`` so single precision points
    are iterated in single precision. Overflow to infinity for far away
    points is silenced and counts as an escape.
    """

    c_re = c.re
    c_im = c.im
    re = c_re
    im = c_im
    bailout = type(re)(BAILOUT)
    two = type(re)(2)

    with np.errstate(over="ignore", invalid="ignore"):
        for i in range(max_iterations):
            re2 = re * re
            im2 = im * im
            if re2 + im2 > bailout:
                return EscapeResult(escaped=True, iterations=i)
            im = two * re * im + c_im
            re = re2 - im2 + c_re

    return EscapeResult(escaped=False, iterations=max_iterations)
