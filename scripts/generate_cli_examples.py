from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--size", "160x160", "--iterations", "120"]


@dataclass
class Example:
    name: str
    args: list[str]
    output: Path

    def full_args(self) -> list[str]:
        return [sys.executable, "render.py", *self.args, "--fname", str(self.output)]


def _example(name: str, filename: str, *args: str) -> Example:
    return Example(name=name, args=[*BASE_ARGS, *args], output=EXAMPLES_ROOT / name / filename)


EXAMPLES: list[Example] = [
    _example("default", "grayscale.png"),
    _example("color", "spectrum.png", "--color"),
    _example("size", "wide.png", "--size", "240x120"),
    _example("center", "seahorse-valley.png", "--center=-0.745,0.1"),
    _example("radius", "narrow-window.png", "--radius", "0.05", "--center=-0.745,0.1"),
    _example("iterations", "high-iterations.png", "--iterations", "1000"),
    _example("threads", "single-worker.png", "--threads", "1"),
    _example("colormap", "inferno.png", "--colormap", "inferno"),
    _example("backend", "processes.png", "--backend", "process", "--threads", "4"),
    _example("chunk-size", "small-batches.png", "--chunk-size", "64"),
    _example("precision", "double.png", "--precision", "double", "--radius", "0.0005", "--center=-0.7453,0.1127"),
    _example("format", "custom.webp", "--format", "webp"),
    _example("verbose", "diagnostic.png", "--verbose"),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _verify(example: Example) -> None:
    if not example.output.is_file():
        raise RuntimeError(f"Expected file {example.output} was not created")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _ensure_clean([example.output.parent])
        example.output.parent.mkdir(parents=True, exist_ok=True)
        completed = subprocess.run(example.full_args(), check=True)
        if completed.returncode != 0:
            raise RuntimeError(f"Example {example.name} failed with {completed.returncode}")
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
