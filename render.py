import sys
import time
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path

from mandelrender import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_WORKERS,
    ColorPolicy,
    RenderError,
    Viewport,
    plane_bounds,
    render_image,
    save_image,
)
from mandelrender.plane import PRECISIONS
from mandelrender.renderer import BACKENDS
from mandelrender.sink import image_format_for

VERBOSE = False
PROGRESS_STEP = 10000


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


@dataclass
class RenderConfig:
    viewport: Viewport
    iterations: int
    threads: int
    policy: ColorPolicy
    output_path: Path
    image_format: str
    backend: str
    chunk_size: int
    precision: str


class ProgressPrinter:
    """Report collected points on a single status line."""

    def __init__(self, step: int = PROGRESS_STEP):
        self.step = step
        self._next = step
        self._open = False

    def __call__(self, collected: int, total: int) -> None:
        if collected >= self._next or collected == total:
            print("collected {0} out of {1} points".format(collected, total), end='\r')
            self._open = True
            while self._next <= collected:
                self._next += self.step
        if collected == total:
            self.close()

    def close(self) -> None:
        """Terminate the status line, also when the render was aborted."""

        if self._open:
            print()
            self._open = False


def parse_pair(value: str, delimiter: str, kind=float):
    """Parse two values separated by ``delimiter``, e.g. ``1000x1000``."""

    parts = value.split(delimiter)
    if len(parts) != 2:
        raise ValueError(f"expected two values separated by '{delimiter}', got '{value}'")
    return kind(parts[0].strip()), kind(parts[1].strip())


def build_parser():
    parser = ArgumentParser(description='Renders images of portions of the Mandelbrot set.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose output')

    parser.add_argument('--color', action='store_true',
                        help='Generate output image in colour')

    parser.add_argument('-s', '--size', type=str,
                        dest='size', help="Output image dimensions, separated by 'x' (default 1000x1000)",
                        metavar='SIZE', default='1000x1000')

    parser.add_argument('-c', '--center', type=str,
                        dest='center', help="Centre point of the set separated by comma (default -0.75,0.3); write --center=RE,IM when RE is negative",
                        metavar='CENTER', default='-0.75,0.3')

    parser.add_argument('-r', '--radius', type=float,
                        dest='radius', help='Radius of the set to be examined (default 0.5)',
                        metavar='RADIUS', default=0.5)

    parser.add_argument('-i', '--iterations', type=int,
                        dest='iterations', help='Number of iterations (default 250)',
                        metavar='ITERATIONS', default=250)

    parser.add_argument('-t', '--threads', type=int,
                        dest='threads', help=f'Number of workers to spawn (default {DEFAULT_WORKERS})',
                        metavar='THREADS', default=DEFAULT_WORKERS)

    parser.add_argument('-f', '--fname', type=str,
                        dest='fname', help="Output file name (default 'fractal.png')",
                        metavar='FNAME', default='fractal.png')

    parser.add_argument('--colormap', type=str,
                        dest='colormap', help='matplotlib colormap used for escaped points (e.g. "viridis", "inferno"). Overrides --color.',
                        metavar='COLORMAP', default=None)

    parser.add_argument('--backend', choices=sorted(BACKENDS), default='thread',
                        help='Worker pool kind: "thread" or "process" for CPU parallelism.')

    parser.add_argument('--chunk-size', type=int,
                        dest='chunk_size', help=f'Pixels sent to a worker per batch (default {DEFAULT_CHUNK_SIZE})',
                        metavar='CHUNK_SIZE', default=DEFAULT_CHUNK_SIZE)

    parser.add_argument('--precision', choices=sorted(PRECISIONS), default='single',
                        help='Floating point precision of the plane mapping and iteration.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format of the output image. Can be any extension supported by Pillow. Default: taken from --fname, else "png".',
                        metavar='FORMAT', default=None)

    return parser


def resolve_render_config(opt, parser: ArgumentParser) -> RenderConfig:
    try:
        width, height = parse_pair(opt.size, "x", int)
    except ValueError:
        parser.error(f"--size must look like WIDTHxHEIGHT, got '{opt.size}'.")
    try:
        center = parse_pair(opt.center, ",", float)
    except ValueError:
        parser.error(f"--center must look like RE,IM, got '{opt.center}'.")

    viewport = Viewport(width=width, height=height, center=center, radius=opt.radius)
    try:
        viewport.validate()
    except ValueError as exc:
        parser.error(str(exc))

    if opt.iterations <= 0:
        parser.error("--iterations must be positive.")
    if opt.threads <= 0:
        parser.error("--threads must be positive.")
    if opt.chunk_size <= 0:
        parser.error("--chunk-size must be positive.")
    if not opt.fname:
        parser.error("--fname must not be empty.")

    if opt.colormap:
        try:
            policy = ColorPolicy.from_colormap(opt.colormap)
        except ValueError as exc:
            parser.error(str(exc))
    else:
        policy = ColorPolicy.from_flag(opt.color)

    output_path = Path(opt.fname).expanduser()
    if output_path.exists() and output_path.is_dir():
        parser.error("--fname must point to a file, not a directory.")
    image_format = image_format_for(output_path, opt.format)
    suffix = output_path.suffix
    if opt.format:
        expected_suffix = f".{image_format}"
        if suffix:
            if suffix.lower() != expected_suffix.lower():
                parser.error(f"--fname extension {suffix} does not match --format {image_format}.")
        else:
            output_path = output_path.with_suffix(expected_suffix)

    return RenderConfig(
        viewport=viewport,
        iterations=opt.iterations,
        threads=opt.threads,
        policy=policy,
        output_path=output_path.resolve(),
        image_format=image_format,
        backend=opt.backend,
        chunk_size=opt.chunk_size,
        precision=opt.precision,
    )


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    config = resolve_render_config(opt, parser)
    viewport = config.viewport

    start = time.perf_counter()
    log(
        "=> Generating output image of size {}x{} at point ({}, {}) with radius {} and iteration depth {}...".format(
            viewport.width, viewport.height, viewport.center[0], viewport.center[1], viewport.radius, config.iterations
        )
    )
    re_min, re_max, im_min, im_max = plane_bounds(viewport, config.precision)
    log("=> Sampling re [{:.6g}, {:.6g}], im [{:.6g}, {:.6g}] in {} precision".format(
        re_min, re_max, im_min, im_max, config.precision))
    log("=> Coloring with {}, {} {} workers".format(config.policy.describe(), config.threads, config.backend))

    progress = ProgressPrinter() if VERBOSE else None
    try:
        image = render_image(
            viewport,
            config.iterations,
            config.policy,
            config.threads,
            backend=config.backend,
            chunk_size=config.chunk_size,
            precision=config.precision,
            progress=progress,
        )
        log("=> Saving output image...")
        saved = save_image(image, config.output_path, config.image_format)
    except RenderError as exc:
        if progress is not None:
            progress.close()
        print(f"error: {exc}", file=sys.stderr)
        return 1

    log("=> Output image saved as '{}'".format(saved))
    log("=> Time taken: {:.2f}s".format(time.perf_counter() - start))
    return 0


if __name__ == '__main__':
    sys.exit(main())
