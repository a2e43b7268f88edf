"""Persisting rendered images to disk."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .errors import SinkError
from .renderer import OutputImage

DEFAULT_FORMAT = "png"


def pil_format_name(ext: str) -> str:
    upper = ext.upper().lstrip(".")
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def image_format_for(path: Path, image_format: Optional[str] = None) -> str:
    """Pick the file format from ``image_format`` or the suffix of ``path``."""

    if image_format:
        return image_format.lower().lstrip(".")
    suffix = Path(path).suffix.lower().lstrip(".")
    return suffix or DEFAULT_FORMAT


def save_image(image: OutputImage, output_path: Path, image_format: Optional[str] = None) -> Path:
    """Write the complete ``image`` to ``output_path``.

    Raises :class:`SinkError` carrying the image when it cannot be written.
    """

    if not image.complete:
        raise SinkError(f"refusing to save an incomplete image ({image.collected} of {image.total} points)", image)

    output_path = Path(output_path)
    pil_format = pil_format_name(image_format_for(output_path, image_format))
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        image.to_pil().save(str(output_path), format=pil_format)
    except (OSError, ValueError, KeyError) as exc:
        raise SinkError(f"could not save image to '{output_path}': {exc}", image) from exc
    return output_path
