from __future__ import annotations
import argparse
import dataclasses
import shutil
import sys
import time

import glfw, moderngl
import numpy as np

from . import shaders as S
from .config import AppConfig
from .gpu import GpuPipeline, fullscreen_quad, make_tex
from .logging import get_logger, setup_logging
from .pipeline import FluidPipeline
from .pointer import PointerTracker
from .profiler import get_profiler


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="inkflow: pointer-driven ink in a 2D fluid")
    p.add_argument(
        "--backend",
        type=str,
        choices=["gpu", "cpu"],
        default=None,
        help="Run the kernels as GLSL passes (gpu) or numpy (cpu). Default: from config.",
    )
    p.add_argument(
        "--fullscreen",
        action="store_true",
        help="Open in fullscreen on the primary monitor.",
    )
    p.add_argument(
        "--sim-scale",
        type=float,
        default=None,
        help="Grid resolution relative to the window (0.1-1.0). Default: from config.",
    )
    p.add_argument(
        "--pixelated",
        action="store_true",
        help="Quantise the display into coarse cells.",
    )
    p.add_argument(
        "--pixel-size",
        type=float,
        default=None,
        help="Cell size in pixels for --pixelated. Default: from config.",
    )
    p.add_argument(
        "--invert",
        action="store_true",
        help="Invert the displayed colours.",
    )
    p.add_argument(
        "--vorticity",
        type=float,
        default=None,
        help="Vorticity confinement strength (0-0.3, 0 disables). Default: from config.",
    )
    p.add_argument(
        "--viscosity",
        type=float,
        default=None,
        help="Viscosity threshold (0-0.8, higher is runnier). Default: from config.",
    )
    p.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Minimum log level (DEBUG, INFO, WARNING...). Default: from config.",
    )
    p.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log to a file instead of the console.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Show live stage timings in the window title.",
    )
    return p


def config_from_args(args: argparse.Namespace, base: AppConfig | None = None) -> AppConfig:
    overrides = {}
    if args.backend is not None:
        overrides["backend"] = args.backend
    if args.fullscreen:
        overrides["fullscreen"] = True
    if args.sim_scale is not None:
        overrides["sim_scale"] = max(0.1, min(1.0, args.sim_scale))
    if args.pixelated:
        overrides["pixelated"] = True
    if args.pixel_size is not None:
        overrides["pixel_size"] = args.pixel_size
    if args.invert:
        overrides["invert_colors"] = True
    if args.vorticity is not None:
        overrides["vorticity_threshold"] = args.vorticity
    if args.viscosity is not None:
        overrides["viscosity_threshold"] = args.viscosity
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    if args.log_file is not None:
        overrides["log_file"] = args.log_file
    if args.debug:
        overrides["debug"] = True
    return dataclasses.replace(base or AppConfig(), **overrides)


class FramePresenter:
    """Draws a frame texture over the whole screen; uploads numpy frames first."""

    def __init__(self, ctx):
        self.ctx = ctx
        self.prog = ctx.program(vertex_shader=S.VS, fragment_shader=S.FS_SHOW)
        self.vbo = fullscreen_quad(ctx)
        self.vao = ctx.simple_vertex_array(self.prog, self.vbo, "in_vert")
        self.tex = None

    def upload(self, frame: np.ndarray):
        h, w = frame.shape[:2]
        if self.tex is None or self.tex.size != (w, h):
            if self.tex is not None:
                self.tex.release()
            self.tex = make_tex(self.ctx, (w, h))
        self.tex.write(np.ascontiguousarray(frame, dtype=np.float32).tobytes())
        return self.tex

    def show(self, tex, viewport):
        self.ctx.screen.use()
        self.ctx.viewport = viewport
        tex.use(location=0)
        self.prog["frame"].value = 0
        self.vao.render(moderngl.TRIANGLE_STRIP)


def _linux_gl_hint():
    if sys.platform.startswith("linux"):
        if shutil.which("glxinfo") is None:
            return (
                "Linux OpenGL loaders not found.\n"
                "Install the dev libraries:\n"
                "  sudo apt install -y libgl1-mesa-dev libegl1-mesa-dev libglvnd-dev mesa-utils\n"
            )


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    # --- logging ---
    setup_logging(cfg.log_level, cfg.log_file)
    logger = get_logger(__name__)

    # --- window / context ---
    if not glfw.init():
        raise RuntimeError("GLFW init failed")
    glfw.window_hint(glfw.CONTEXT_VERSION_MAJOR, 3)
    glfw.window_hint(glfw.CONTEXT_VERSION_MINOR, 3)
    glfw.window_hint(glfw.OPENGL_PROFILE, glfw.OPENGL_CORE_PROFILE)
    glfw.window_hint(glfw.OPENGL_FORWARD_COMPAT, True)

    width, height = cfg.width, cfg.height
    monitor = None
    if cfg.fullscreen:
        monitor = glfw.get_primary_monitor()
        mode = glfw.get_video_mode(monitor)
        width, height = mode.size.width, mode.size.height

    try:
        win = glfw.create_window(width, height, "inkflow", monitor, None)
        glfw.make_context_current(win)
        glfw.swap_interval(1 if cfg.vsync else 0)

        try:
            ctx = moderngl.create_context()
        except Exception:
            logger.error(_linux_gl_hint() or "Failed to create ModernGL context.")
            raise

        fb_w, fb_h = glfw.get_framebuffer_size(win)
        if cfg.backend == "gpu":
            sim = GpuPipeline(ctx, cfg, fb_w, fb_h)
        else:
            sim = FluidPipeline(cfg, fb_w, fb_h)
        logger.info(f"Using {cfg.backend} backend")
        presenter = FramePresenter(ctx)

        # --- host input feed ---
        pointer = PointerTracker()
        pending_size = []

        def on_cursor(_win, x, y):
            w, h = glfw.get_window_size(_win)
            if w > 0 and h > 0:
                pointer.on_move(x, y, w, h)

        def on_enter(_win, entered):
            if not entered:
                pointer.on_leave()

        def on_resize(_win, w, h):
            pending_size.append((w, h))

        glfw.set_cursor_pos_callback(win, on_cursor)
        glfw.set_cursor_enter_callback(win, on_enter)
        glfw.set_framebuffer_size_callback(win, on_resize)

        logger.info("SPACE pause  C clear  ESC quit")

        profiler = get_profiler()
        running = True
        start_t = time.time()
        prev_t = start_t
        frame_count = 0
        time_since_log = 0.0
        tex = None

        while not glfw.window_should_close(win):
            with profiler.record("frame"):
                glfw.poll_events()
                if glfw.get_key(win, glfw.KEY_ESCAPE) == glfw.PRESS:
                    break
                if glfw.get_key(win, glfw.KEY_SPACE) == glfw.PRESS:
                    running = not running
                    time.sleep(0.12)
                if glfw.get_key(win, glfw.KEY_C) == glfw.PRESS:
                    sim.clear()
                    time.sleep(0.12)

                # --- viewport feed ---
                if pending_size:
                    w, h = pending_size[-1]
                    pending_size.clear()
                    if w > 0 and h > 0:
                        fb_w, fb_h = w, h
                        sim.resize(fb_w, fb_h)
                        tex = None

                now = time.time()
                actual_dt = now - prev_t
                prev_t = now

                if running:
                    with profiler.record("simulation"):
                        out = sim.tick(pointer.current, pointer.previous, now - start_t)
                    tex = out if cfg.backend == "gpu" else presenter.upload(out)

                with profiler.record("render"):
                    if tex is not None:
                        presenter.show(tex, (0, 0, fb_w, fb_h))

            # --- performance logging ---
            frame_count += 1
            time_since_log += actual_dt
            if time_since_log >= cfg.log_interval:
                fps = frame_count / time_since_log
                frame_t_ms = (time_since_log / frame_count) * 1000.0
                peak_ms = max(profiler.history("frame"), default=0.0) * 1000.0
                logger.info(
                    f"FPS: {fps:.2f} | frame_t: {frame_t_ms:.2f}ms | peak: {peak_ms:.2f}ms"
                )
                profiler.log_stats()
                profiler.check_budget("frame", cfg.frame_budget_ms)
                if cfg.debug:
                    glfw.set_window_title(
                        win, f"inkflow | {fps:.1f} fps | {profiler.summary()}"
                    )
                frame_count = 0
                time_since_log = 0.0

            glfw.swap_buffers(win)
    finally:
        glfw.terminate()
