"""
Per-cell update kernels, written as whole-grid numpy expressions.

Every kernel reads only its input arrays and returns a fresh array; a cell's
result depends on its neighbours' *input* values, never on another cell's
output from the same pass. The GLSL versions in ``shaders.py`` compute the
same thing one fragment per cell.
"""
from __future__ import annotations
import numpy as np

from .config import AppConfig
from .pointer import PointerState
from .utils import cell_uv, hash1, hsv2rgb, neighbors, sample_bilinear, smoothstep

VX, VY, DENSITY, AUX = 0, 1, 2, 3


def _step_size(field: np.ndarray) -> tuple[np.float32, np.float32]:
    h, w = field.shape[:2]
    return np.float32(1.0 / w), np.float32(1.0 / h)


def forcing_active(pointer: PointerState, prev_pointer: PointerState) -> bool:
    # Compares the strength channel against 1.0, not the click flag. Pointer
    # samples from the host feed carry strength 0, so this stays off for them.
    return pointer.strength > 1.0 and prev_pointer.clicked > 1.0


def relax_velocity(
    src: np.ndarray,
    pointer: PointerState,
    prev_pointer: PointerState,
    cfg: AppConfig,
) -> np.ndarray:
    """
    One relaxation sweep over a velocity Field ``(vx, vy, density, aux)``.

    Advects, diffuses and confines vorticity, applies pointer forcing, damps
    velocity at the border and clamps every channel to its stable range.
    ``src`` is not modified.
    """
    dt = np.float32(cfg.dt)
    sx, sy = _step_size(src)
    u, v = cell_uv(src.shape[1], src.shape[0])
    fr, fl, ft, fd = neighbors(src)
    vx, vy, dens = src[..., VX], src[..., VY], src[..., DENSITY]

    ddx = (fr[..., :3] - fl[..., :3]) * 0.5
    ddy = (ft[..., :3] - fd[..., :3]) * 0.5
    divergence = ddx[..., VX] + ddy[..., VY]
    grad_x, grad_y = ddx[..., DENSITY], ddy[..., DENSITY]

    out = np.empty_like(src)
    out[..., DENSITY] = dens - dt * (grad_x * vx + grad_y * vy + divergence * dens)

    # viscosity
    lap_x = fr[..., VX] + fl[..., VX] + ft[..., VX] + fd[..., VX] - 4.0 * vx
    lap_y = fr[..., VY] + fl[..., VY] + ft[..., VY] + fd[..., VY] - 4.0 * vy
    visc = np.float32(cfg.viscosity_threshold)

    s = np.float32(cfg.density_invariance_k) / dt

    # semi-Lagrangian back-trace; density keeps the value computed above
    hist = sample_bilinear(src, u - dt * vx * sx, v - dt * vy * sy)
    out[..., VX] = hist[..., VX]
    out[..., VY] = hist[..., VY]
    out[..., AUX] = hist[..., AUX]

    force_x = np.zeros_like(u)
    force_y = np.zeros_like(u)
    if forcing_active(pointer, prev_pointer):
        drag_x = np.clip(
            (pointer.x - prev_pointer.x) * sx * cfg.drag_scale,
            -cfg.drag_limit,
            cfg.drag_limit,
        )
        drag_y = np.clip(
            (pointer.y - prev_pointer.y) * sy * cfg.drag_scale,
            -cfg.drag_limit,
            cfg.drag_limit,
        )
        px = u - np.float32(pointer.x)
        py = v - np.float32(pointer.y)
        falloff = np.float32(cfg.force_gain) / (px * px + py * py + np.float32(1e-5))
        force_x = falloff * np.float32(drag_x)
        force_y = falloff * np.float32(drag_y)

    out[..., VX] += dt * (visc * lap_x - s * grad_x + force_x)
    out[..., VY] += dt * (visc * lap_y - s * grad_y + force_y)

    # drag: shrink |v| by a constant, never past zero
    vel = out[..., :2]
    vel[...] = np.maximum(np.abs(vel) - np.float32(cfg.velocity_decay), 0.0) * np.sign(vel)

    # vorticity confinement; curl lands in aux
    curl = fd[..., VX] - ft[..., VX] + fr[..., VY] - fl[..., VY]
    out[..., AUX] = curl
    vort_x = np.abs(ft[..., AUX]) - np.abs(fd[..., AUX])
    vort_y = np.abs(fl[..., AUX]) - np.abs(fr[..., AUX])
    scale = (
        np.float32(cfg.vorticity_threshold)
        / (np.sqrt(vort_x * vort_x + vort_y * vort_y) + np.float32(1e-5))
        * curl
    )
    out[..., VX] += vort_x * scale
    out[..., VY] += vort_y * scale

    if pointer.active:
        _nudge(out, u, v, pointer, prev_pointer, cfg)

    out[..., VY] *= smoothstep(0.8, 0.48, np.abs(v - 0.5))
    out[..., VX] *= smoothstep(0.5, 0.49, np.abs(u - 0.5))

    vmax = cfg.velocity_threshold
    np.clip(out[..., :2], -vmax, vmax, out=out[..., :2])
    np.clip(out[..., DENSITY], cfg.density_min, cfg.density_max, out=out[..., DENSITY])
    np.clip(
        out[..., AUX], -cfg.vorticity_threshold, cfg.vorticity_threshold, out=out[..., AUX]
    )
    return out


def _nudge(out, u, v, pointer, prev_pointer, cfg):
    """Push velocity along the pointer's motion inside a small disc."""
    px, py = np.float32(pointer.xy)
    dist = np.hypot(u - px, v - py)
    weight = np.where(dist < cfg.nudge_radius, 1.0 - dist / cfg.nudge_radius, 0.0)
    weight = weight.astype(np.float32) * np.float32(cfg.nudge_gain)
    dx, dy = np.subtract(pointer.xy, prev_pointer.xy)
    out[..., VX] += dx * weight
    out[..., VY] += dy * weight


def splat_color(pointer: PointerState, width: int, elapsed: float) -> np.ndarray:
    """RGBA of the splat for this frame: hashed hue, full saturation and value."""
    seed = int(pointer.clicked + width * abs(pointer.clicked) + elapsed)
    rgb = hsv2rgb(hash1(seed), 1.0, 1.0)
    return np.append(rgb, np.float32(1.0)).astype(np.float32)


def splat_bloom(pointer: PointerState, prev_pointer: PointerState) -> float:
    drag = np.hypot(*np.subtract(pointer.xy, prev_pointer.xy))
    return float(smoothstep(-0.5, 0.5, drag))


def advect_ink(
    color: np.ndarray,
    velocity: np.ndarray,
    pointer: PointerState,
    prev_pointer: PointerState,
    elapsed: float,
    cfg: AppConfig,
) -> np.ndarray:
    """
    Transport ink along ``velocity``, splat at the pointer, clamp and decay.

    ``velocity`` must be the cascade's final relaxed Field at the same
    resolution as ``color``.
    """
    if velocity.shape[:2] != color.shape[:2]:
        raise ValueError(
            f"velocity {velocity.shape[:2]} and color {color.shape[:2]} grids differ"
        )
    h, w = color.shape[:2]
    sx, sy = _step_size(color)
    u, v = cell_uv(w, h)
    trace = np.float32(cfg.dt * cfg.advection_scale)
    col = sample_bilinear(
        color,
        u - trace * velocity[..., VX] * sx,
        v - trace * velocity[..., VY] * sy,
    )

    if pointer.active and prev_pointer.active:
        rgba = splat_color(pointer, w, elapsed)
        bloom = splat_bloom(pointer, prev_pointer)
        px, py = np.float32(pointer.xy)
        dist = np.hypot(u - px, v - py)
        intensity = np.where(
            dist <= cfg.splat_radius,
            bloom * cfg.splat_gain / np.maximum(dist, 1e-6) ** cfg.splat_falloff,
            0.0,
        ).astype(np.float32)
        col += intensity[..., None] * rgba

    np.clip(col, 0.0, cfg.ink_max, out=col)
    col -= col * np.float32(cfg.ink_decay)
    np.maximum(col, 0.0, out=col)
    return col


def composite(color: np.ndarray, cfg: AppConfig) -> np.ndarray:
    """Tone-map an ink Field into display RGBA in [0, 1]."""
    h, w = color.shape[:2]
    frag_x = np.arange(w, dtype=np.float32) + 0.5
    frag_y = np.arange(h, dtype=np.float32) + 0.5
    fx, fy = np.meshgrid(frag_x, frag_y)

    if cfg.pixelated:
        size = np.float32(cfg.pixel_size)
        dx, dy = size / w, size / h
        qu = dx * np.floor(fx / w / dx) + np.float32(1.0 / w)
        qv = dy * np.floor(fy / h / dy) + np.float32(1.0 / h)
        col = sample_bilinear(color, qu, qv)
        cell_x = size * (fx / size - np.floor(fx / size) - 0.5)
        cell_y = size * (fy / size - np.floor(fy / size) - 0.5)
        inside = np.maximum(cell_x, cell_y) + cfg.border_thickness - size / 2.0 <= 0.0
        col *= inside[..., None]
        bottom = fy < size
    else:
        col = color.copy()
        bottom = fy < 1.0

    col[bottom] = 0.0

    rgb = col[..., :3]
    if cfg.invert_colors:
        rgb = 1.0 - rgb
    out = np.empty((h, w, 4), dtype=np.float32)
    out[..., :3] = np.sqrt(np.maximum(rgb, 0.0))
    out[..., 3] = 1.0
    np.clip(out, 0.0, 1.0, out=out)
    return out
