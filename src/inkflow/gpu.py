from __future__ import annotations
import numpy as np
import moderngl

from . import shaders as S
from .config import AppConfig
from .field import FieldAllocationError
from .kernels import forcing_active, splat_bloom, splat_color
from .logging import get_logger
from .pointer import PointerState
from .profiler import get_profiler


def make_tex(ctx, size, comps=4, dtype="f4"):
    tex = ctx.texture(size, comps, dtype=dtype)
    tex.filter = (moderngl.LINEAR, moderngl.LINEAR)
    tex.repeat_x = False
    tex.repeat_y = False
    return tex


def fullscreen_quad(ctx):
    v = np.array([-1, -1, 1, -1, -1, 1, 1, 1], dtype="f4")
    return ctx.buffer(v.tobytes())


def tex_to_np(tex, comps: int = 4) -> np.ndarray:
    """Read a float texture into a ``(height, width, comps)`` float32 array."""
    arr = np.frombuffer(tex.read(), dtype=np.float32)
    return arr.reshape(tex.height, tex.width, comps).copy()


class TexturePair:
    """FieldPair on the GPU: two float textures with their framebuffers."""

    def __init__(self, ctx, size, name: str):
        self.name = name
        self.size = size
        try:
            self._tex = (make_tex(ctx, size), make_tex(ctx, size))
            self._fbo = tuple(ctx.framebuffer([t]) for t in self._tex)
        except moderngl.Error as e:
            raise FieldAllocationError(
                f"Could not allocate {name} textures at {size[0]}x{size[1]}: {e}"
            ) from e
        self._front = 0
        self.clear()

    @property
    def front(self):
        return self._tex[self._front]

    @property
    def back(self):
        return self._tex[1 - self._front]

    @property
    def back_fbo(self):
        return self._fbo[1 - self._front]

    def swap(self):
        self._front = 1 - self._front

    def clear(self):
        for fbo in self._fbo:
            fbo.clear(0.0, 0.0, 0.0, 0.0)

    def release(self):
        for obj in self._fbo + self._tex:
            obj.release()


class GpuPipeline:
    """
    The same A -> B -> C -> ink -> composite cascade as ``FluidPipeline``,
    run as fragment passes over float textures.
    """

    def __init__(self, ctx: moderngl.Context, cfg: AppConfig, width: int, height: int):
        self.ctx = ctx
        self.cfg = cfg
        self.logger = get_logger(__name__)
        self.profiler = get_profiler()

        self.prog_relax = ctx.program(vertex_shader=S.VS, fragment_shader=S.FS_RELAX)
        self.prog_ink = ctx.program(vertex_shader=S.VS, fragment_shader=S.FS_INK)
        self.prog_comp = ctx.program(vertex_shader=S.VS, fragment_shader=S.FS_COMPOSITE)

        self.vbo = fullscreen_quad(ctx)
        self.vao_relax = ctx.simple_vertex_array(self.prog_relax, self.vbo, "in_vert")
        self.vao_ink = ctx.simple_vertex_array(self.prog_ink, self.vbo, "in_vert")
        self.vao_comp = ctx.simple_vertex_array(self.prog_comp, self.vbo, "in_vert")

        # static uniforms
        self.prog_relax["dt"].value = cfg.dt
        self.prog_relax["vorticity_threshold"].value = cfg.vorticity_threshold
        self.prog_relax["velocity_threshold"].value = cfg.velocity_threshold
        self.prog_relax["viscosity_threshold"].value = cfg.viscosity_threshold
        self.prog_relax["density_range"].value = (cfg.density_min, cfg.density_max)
        self.prog_relax["density_k"].value = cfg.density_invariance_k
        self.prog_relax["velocity_decay"].value = cfg.velocity_decay
        self.prog_relax["drag_scale"].value = cfg.drag_scale
        self.prog_relax["drag_limit"].value = cfg.drag_limit
        self.prog_relax["force_gain"].value = cfg.force_gain
        self.prog_relax["nudge_radius"].value = cfg.nudge_radius
        self.prog_relax["nudge_gain"].value = cfg.nudge_gain
        self.prog_ink["dt"].value = cfg.dt
        self.prog_ink["advection_scale"].value = cfg.advection_scale
        self.prog_ink["splat_gain"].value = cfg.splat_gain
        self.prog_ink["splat_falloff"].value = cfg.splat_falloff
        self.prog_ink["splat_radius"].value = cfg.splat_radius
        self.prog_ink["ink_max"].value = cfg.ink_max
        self.prog_ink["ink_decay"].value = cfg.ink_decay
        self.prog_comp["pixelated"].value = 1 if cfg.pixelated else 0
        self.prog_comp["pixel_size"].value = cfg.pixel_size
        self.prog_comp["border_thickness"].value = cfg.border_thickness
        self.prog_comp["invert_colors"].value = 1 if cfg.invert_colors else 0

        self._pairs = ()
        self.frame_tex = None
        self.frame_fbo = None
        self._allocate(width, height)

    def _allocate(self, width: int, height: int):
        self.sim_w, self.sim_h = self.cfg.grid_size(width, height)
        size = (self.sim_w, self.sim_h)
        self.velocity_a = TexturePair(self.ctx, size, "velocity_a")
        self.velocity_b = TexturePair(self.ctx, size, "velocity_b")
        self.velocity_c = TexturePair(self.ctx, size, "velocity_c")
        self.color = TexturePair(self.ctx, size, "color")
        self._pairs = (self.velocity_a, self.velocity_b, self.velocity_c, self.color)
        try:
            self.frame_tex = make_tex(self.ctx, size)
            self.frame_fbo = self.ctx.framebuffer([self.frame_tex])
        except moderngl.Error as e:
            raise FieldAllocationError(f"Could not allocate frame texture: {e}") from e

        resolution = (float(self.sim_w), float(self.sim_h))
        for prog in (self.prog_relax, self.prog_ink, self.prog_comp):
            prog["resolution"].value = resolution
        self.logger.info(f"Allocated GPU fields: {self.sim_w}x{self.sim_h}")

    def _release(self):
        for pair in self._pairs:
            pair.release()
        if self.frame_fbo is not None:
            self.frame_fbo.release()
            self.frame_tex.release()

    @property
    def stages(self):
        return (self.velocity_a, self.velocity_b, self.velocity_c)

    def resize(self, width: int, height: int):
        if self.cfg.grid_size(width, height) == (self.sim_w, self.sim_h):
            return
        self.logger.info(f"Viewport resized to {width}x{height}, resetting fields")
        self._release()
        self._allocate(width, height)

    def clear(self):
        for pair in self._pairs:
            pair.clear()
        self.frame_fbo.clear(0.0, 0.0, 0.0, 0.0)

    def _relax(self, name: str, src: TexturePair, dst: TexturePair):
        with self.profiler.record(name):
            dst.back_fbo.use()
            src.front.use(location=0)
            self.prog_relax["field"].value = 0
            self.vao_relax.render(moderngl.TRIANGLE_STRIP)
            dst.swap()

    def tick(self, pointer: PointerState, prev_pointer: PointerState, elapsed: float):
        """Advance one frame; the composited frame ends up in ``frame_tex``."""
        if forcing_active(pointer, prev_pointer):
            self.logger.debug("Pointer forcing active")
        self.prog_relax["mouse"].value = pointer.as_vec4()
        self.prog_relax["prev_mouse"].value = prev_pointer.as_vec4()

        a, b, c = self.stages
        self._relax("relax_a", a, a)
        self._relax("relax_b", a, b)
        self._relax("relax_c", b, c)

        with self.profiler.record("ink"):
            splat = pointer.active and prev_pointer.active
            self.prog_ink["mouse"].value = pointer.as_vec4()
            self.prog_ink["splat_on"].value = 1 if splat else 0
            if splat:
                self.prog_ink["splat_rgba"].value = tuple(
                    float(x) for x in splat_color(pointer, self.sim_w, elapsed)
                )
                self.prog_ink["bloom"].value = splat_bloom(pointer, prev_pointer)
            self.color.back_fbo.use()
            c.front.use(location=0)
            self.color.front.use(location=1)
            self.prog_ink["velocity"].value = 0
            self.prog_ink["color"].value = 1
            self.vao_ink.render(moderngl.TRIANGLE_STRIP)

        with self.profiler.record("composite"):
            self.frame_fbo.use()
            self.color.back.use(location=0)
            self.prog_comp["color"].value = 0
            self.vao_comp.render(moderngl.TRIANGLE_STRIP)

        self.color.swap()
        return self.frame_tex

    def read_velocity(self, stage: int = 2) -> np.ndarray:
        return tex_to_np(self.stages[stage].front)

    def read_color(self) -> np.ndarray:
        return tex_to_np(self.color.front)

    def read_frame(self) -> np.ndarray:
        return tex_to_np(self.frame_tex)
