from __future__ import annotations
import numpy as np

from .config import AppConfig
from .field import FieldPair
from .kernels import advect_ink, composite, relax_velocity
from .logging import get_logger
from .pointer import PointerState
from .profiler import get_profiler


class FluidPipeline:
    """
    Runs the per-frame kernel cascade on numpy Fields.

    Each tick: three velocity relaxation passes (A -> B -> C, each reading the
    buffer the previous pass just wrote), one ink pass fed by C's result, one
    composite pass. All FieldPairs are owned here; kernels only ever see a
    front buffer to read and produce the array written into a back buffer.
    """

    def __init__(self, cfg: AppConfig, width: int, height: int):
        self.cfg = cfg
        self.logger = get_logger(__name__)
        self.profiler = get_profiler()
        self.last_frame: np.ndarray | None = None
        self._allocate(width, height)

    def _allocate(self, width: int, height: int):
        self.sim_w, self.sim_h = self.cfg.grid_size(width, height)
        self.velocity_a = FieldPair(self.sim_w, self.sim_h, "velocity_a")
        self.velocity_b = FieldPair(self.sim_w, self.sim_h, "velocity_b")
        self.velocity_c = FieldPair(self.sim_w, self.sim_h, "velocity_c")
        self.color = FieldPair(self.sim_w, self.sim_h, "color")
        self.last_frame = None
        self.logger.info(f"Allocated simulation fields: {self.sim_w}x{self.sim_h}")

    @property
    def stages(self) -> tuple[FieldPair, FieldPair, FieldPair]:
        return (self.velocity_a, self.velocity_b, self.velocity_c)

    @property
    def pairs(self) -> tuple[FieldPair, ...]:
        return self.stages + (self.color,)

    def resize(self, width: int, height: int):
        """Reallocate every FieldPair for a new viewport; state starts empty."""
        if self.cfg.grid_size(width, height) == (self.sim_w, self.sim_h):
            return
        self.logger.info(f"Viewport resized to {width}x{height}, resetting fields")
        self._allocate(width, height)

    def clear(self):
        for pair in self.pairs:
            pair.clear()

    def _relax(self, name: str, src: FieldPair, dst: FieldPair, pointer, prev_pointer):
        with self.profiler.record(name):
            dst.write(relax_velocity(src.front, pointer, prev_pointer, self.cfg))
            dst.swap()

    def tick(
        self,
        pointer: PointerState,
        prev_pointer: PointerState,
        elapsed: float,
    ) -> np.ndarray:
        """Advance one frame and return the composited RGBA frame."""
        a, b, c = self.stages
        self._relax("relax_a", a, a, pointer, prev_pointer)
        self._relax("relax_b", a, b, pointer, prev_pointer)
        self._relax("relax_c", b, c, pointer, prev_pointer)

        with self.profiler.record("ink"):
            self.color.write(
                advect_ink(
                    self.color.front, c.front, pointer, prev_pointer, elapsed, self.cfg
                )
            )

        with self.profiler.record("composite"):
            self.last_frame = composite(self.color.back, self.cfg)

        self.color.swap()
        return self.last_frame
