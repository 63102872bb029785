from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class PointerState:
    """Pointer sample in viewport UV space (origin bottom-left).

    ``clicked`` is 1.0 while the pointer is over the viewport and 0.0 after it
    leaves. ``strength`` is the fourth channel of the pointer vector; the host
    feed never sets it, so it stays 0.0 unless a caller supplies one.
    """

    x: float = 0.0
    y: float = 0.0
    clicked: float = 0.0
    strength: float = 0.0

    @property
    def active(self) -> bool:
        return self.clicked > 0.0

    @property
    def xy(self) -> tuple[float, float]:
        return (self.x, self.y)

    def as_vec4(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.clicked, self.strength)


class PointerTracker:
    """Keeps the current and previous pointer samples fed by window events."""

    def __init__(self):
        self.reset()

    def reset(self):
        self._current = PointerState()
        self._previous = PointerState()

    @property
    def current(self) -> PointerState:
        return self._current

    @property
    def previous(self) -> PointerState:
        return self._previous

    def on_move(self, px: float, py: float, width: int, height: int):
        """Cursor moved to window pixel ``(px, py)`` (y grows downwards).

        glfw keeps reporting positions outside the window during a drag; they
        are clamped to the viewport edge.
        """
        self._previous = self._current
        self._current = PointerState(
            x=min(max(px / float(width), 0.0), 1.0),
            y=min(max(1.0 - py / float(height), 0.0), 1.0),
            clicked=1.0,
        )

    def on_leave(self):
        # previous keeps the last inside sample until the next event
        self._previous = self._current
        self._current = PointerState()
