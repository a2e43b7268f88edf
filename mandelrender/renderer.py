"""Parallel rendering of Mandelbrot frames."""

from __future__ import annotations

import queue
from concurrent.futures import BrokenExecutor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

import numpy as np
import PIL.Image

from .coloring import ColorPolicy, colorize
from .errors import TransportError
from .escape import evaluate
from .plane import Viewport, map_pixel, pixel_grid, scalar_type

DEFAULT_WORKERS = 10
DEFAULT_CHUNK_SIZE = 1024

BACKENDS = {
    "thread": ThreadPoolExecutor,
    "process": ProcessPoolExecutor,
}

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class RenderTask:
    """Read-only description of a render shared by every work item."""

    viewport: Viewport
    max_iterations: int
    policy: ColorPolicy
    precision: str = "single"


@dataclass(frozen=True)
class RenderedPoint:
    x: int
    y: int
    color: tuple[int, int, int]
    inside: bool
    iterations: int


@dataclass
class OutputImage:
    """Pixel buffer filled by the collector, one write per coordinate.

    ``inside`` tags points that never escaped independently of their color,
    so an escaped point rendered black is still told apart from the set.
    """

    width: int
    height: int
    pixels: np.ndarray = field(init=False, repr=False)
    inside: np.ndarray = field(init=False, repr=False)
    iterations: np.ndarray = field(init=False, repr=False)
    written: np.ndarray = field(init=False, repr=False)
    collected: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        shape = (self.height, self.width)
        self.pixels = np.zeros(shape + (3,), dtype=np.uint8)
        self.inside = np.zeros(shape, dtype=bool)
        self.iterations = np.zeros(shape, dtype=np.int64)
        self.written = np.zeros(shape, dtype=bool)

    @classmethod
    def for_viewport(cls, viewport: Viewport) -> "OutputImage":
        return cls(width=viewport.width, height=viewport.height)

    @property
    def total(self) -> int:
        return self.width * self.height

    @property
    def complete(self) -> bool:
        return self.collected == self.total

    def put(self, point: RenderedPoint) -> None:
        if not (0 <= point.x < self.width and 0 <= point.y < self.height):
            raise TransportError(f"point ({point.x}, {point.y}) lies outside the {self.width}x{self.height} image")
        if self.written[point.y, point.x]:
            raise TransportError(f"point ({point.x}, {point.y}) was delivered twice")
        self.pixels[point.y, point.x] = point.color
        self.inside[point.y, point.x] = point.inside
        self.iterations[point.y, point.x] = point.iterations
        self.written[point.y, point.x] = True
        self.collected += 1

    def to_pil(self) -> PIL.Image.Image:
        return PIL.Image.fromarray(self.pixels)


def render_point(x: int, y: int, task: RenderTask) -> RenderedPoint:
    """Map, evaluate and color one pixel."""

    c = map_pixel(x, y, task.viewport, task.precision)
    result = evaluate(c, task.max_iterations)
    return RenderedPoint(
        x=x,
        y=y,
        color=colorize(result, task.max_iterations, task.policy),
        inside=not result.escaped,
        iterations=result.iterations,
    )


def render_batch(task: RenderTask, coords: list[tuple[int, int]]) -> list[RenderedPoint]:
    """Render independent pixels; runs on a worker thread or process."""

    return [render_point(x, y, task) for x, y in coords]


def iter_batches(viewport: Viewport, chunk_size: int) -> Iterator[list[tuple[int, int]]]:
    chunk_size = max(int(chunk_size), 1)
    batch: list[tuple[int, int]] = []
    for coord in pixel_grid(viewport):
        batch.append(coord)
        if len(batch) == chunk_size:
            yield batch
            batch = []
    if batch:
        yield batch


def _executor_class(backend: str):
    try:
        return BACKENDS[backend]
    except KeyError:
        raise ValueError(f"unknown backend '{backend}', expected one of: {', '.join(BACKENDS)}") from None


def _dispatch(executor, task: RenderTask, chunk_size: int, pending: set[Future], results: "queue.SimpleQueue[Future]") -> int:
    batches = 0
    for batch in iter_batches(task.viewport, chunk_size):
        try:
            future = executor.submit(render_batch, task, batch)
        except BrokenExecutor as exc:
            raise TransportError(f"worker pool broke while dispatching: {exc!r}") from exc
        pending.add(future)
        future.add_done_callback(results.put)
        batches += 1
    return batches


def _collect(
    image: OutputImage,
    results: "queue.SimpleQueue[Future]",
    pending: set[Future],
    batches: int,
    progress: Optional[ProgressCallback],
) -> None:
    for _ in range(batches):
        future = results.get()
        pending.discard(future)
        try:
            points = future.result()
        except Exception as exc:
            raise TransportError(f"rendered points were lost before reaching the collector: {exc!r}") from exc
        for point in points:
            image.put(point)
        # Folded points are dropped with their batch.
        del points, future
        if progress is not None:
            progress(image.collected, image.total)

    if not image.complete:
        raise TransportError(f"collected {image.collected} of {image.total} points")


def render_image(
    viewport: Viewport,
    max_iterations: int,
    policy: ColorPolicy,
    workers: int = DEFAULT_WORKERS,
    *,
    backend: str = "thread",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    precision: str = "single",
    progress: Optional[ProgressCallback] = None,
) -> OutputImage:
    """Render every pixel of ``viewport`` on a pool of ``workers`` workers.

    Batches of pixels are dispatched from the calling thread. Each finished
    batch is pushed onto a single result queue, and the calling thread is
    the only consumer of that queue and the only writer of the returned
    image. The call returns once every pixel has been collected, or raises
    :class:`TransportError` if any result was lost.
    """

    scalar_type(precision)
    executor_class = _executor_class(backend)
    task = RenderTask(viewport=viewport, max_iterations=max_iterations, policy=policy, precision=precision)
    image = OutputImage.for_viewport(viewport)
    results: "queue.SimpleQueue[Future]" = queue.SimpleQueue()

    with executor_class(max_workers=workers) as executor:
        pending: set[Future] = set()
        try:
            batches = _dispatch(executor, task, chunk_size, pending, results)
            _collect(image, results, pending, batches, progress)
        except BaseException:
            for future in list(pending):
                future.cancel()
            raise

    return image
