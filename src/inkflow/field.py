from __future__ import annotations
import numpy as np

from .logging import get_logger

CHANNELS = 4

logger = get_logger(__name__)


class FieldAllocationError(RuntimeError):
    """A Field could not be allocated at the requested resolution."""


def allocate_field(width: int, height: int) -> np.ndarray:
    """Zeroed ``(height, width, 4)`` float32 grid, row 0 at the bottom."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Field size must be positive, got {width}x{height}")
    try:
        return np.zeros((height, width, CHANNELS), dtype=np.float32)
    except MemoryError as e:
        raise FieldAllocationError(
            f"Could not allocate a {width}x{height} field"
        ) from e


class FieldPair:
    """
    Double-buffered Field.

    Passes read ``front`` and write ``back``; ``swap()`` hands the written
    buffer over to ``front`` by flipping an index, so the same array is never
    read and written by one pass.
    """

    def __init__(self, width: int, height: int, name: str = "field"):
        self.name = name
        self.width = int(width)
        self.height = int(height)
        self._buffers = (allocate_field(self.width, self.height),
                         allocate_field(self.width, self.height))
        self._front = 0
        logger.debug(f"Allocated {name} pair {self.width}x{self.height}")

    @property
    def front(self) -> np.ndarray:
        return self._buffers[self._front]

    @property
    def back(self) -> np.ndarray:
        return self._buffers[1 - self._front]

    @property
    def shape(self) -> tuple[int, int]:
        return (self.width, self.height)

    def swap(self):
        self._front = 1 - self._front

    def write(self, values: np.ndarray):
        """Copy ``values`` into the back buffer."""
        np.copyto(self.back, values, casting="same_kind")

    def clear(self):
        for buf in self._buffers:
            buf.fill(0.0)
