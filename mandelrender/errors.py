"""Exceptions raised when a render cannot be completed."""

from __future__ import annotations


class RenderError(RuntimeError):
    """A render failed; no partial image is produced."""


class TransportError(RenderError):
    """A rendered point never reached the collector, or reached it twice."""


class SinkError(RenderError):
    """The finished image could not be persisted."""

    def __init__(self, message: str, image=None):
        super().__init__(message)
        self.image = image
