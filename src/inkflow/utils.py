"""numpy counterparts of the texture operations the shaders rely on.

Grids are ``(height, width, channels)`` arrays with row 0 at the bottom, the
same layout ``texture.read()`` produces.
"""
import numpy as np

_U32 = 0xFFFFFFFF


def cell_uv(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """UV of every cell centre, as two ``(height, width)`` float32 arrays."""
    u = (np.arange(width, dtype=np.float32) + 0.5) / np.float32(width)
    v = (np.arange(height, dtype=np.float32) + 0.5) / np.float32(height)
    uu, vv = np.meshgrid(u, v)
    return uu, vv


def neighbors(field: np.ndarray):
    """Right, left, top and bottom neighbours with clamp-to-edge addressing."""
    p = np.pad(field, ((1, 1), (1, 1), (0, 0)), mode="edge")
    fr = p[1:-1, 2:]
    fl = p[1:-1, :-2]
    ft = p[2:, 1:-1]
    fd = p[:-2, 1:-1]
    return fr, fl, ft, fd


def sample_bilinear(field: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Linear-filtered lookup at UV coordinates, clamped to the edge texels."""
    h, w = field.shape[:2]
    x = u * np.float32(w) - np.float32(0.5)
    y = v * np.float32(h) - np.float32(0.5)
    x0 = np.floor(x)
    y0 = np.floor(y)
    fx = (x - x0)[..., None]
    fy = (y - y0)[..., None]
    xi = x0.astype(np.int64)
    yi = y0.astype(np.int64)
    i0 = np.clip(xi, 0, w - 1)
    i1 = np.clip(xi + 1, 0, w - 1)
    j0 = np.clip(yi, 0, h - 1)
    j1 = np.clip(yi + 1, 0, h - 1)
    bottom = field[j0, i0] * (1 - fx) + field[j0, i1] * fx
    top = field[j1, i0] * (1 - fx) + field[j1, i1] * fx
    return (bottom * (1 - fy) + top * fy).astype(np.float32, copy=False)


def smoothstep(edge0, edge1, x):
    """GLSL smoothstep; ``edge0 > edge1`` gives a falling edge."""
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def hash1(n: int) -> float:
    """Integer hash to [0, 1], wrapping like 32-bit unsigned arithmetic."""
    n &= _U32
    n = ((n << 13) & _U32) ^ n
    n = (n * ((n * n * 15731 + 789221) & _U32) + 1376312589) & _U32
    return float(n & 0x7FFFFFFF) / float(0x7FFFFFFF)


def hsv2rgb(h: float, s: float, v: float) -> np.ndarray:
    """Smoothed HSV to RGB (cubic-eased hue ramps)."""
    rgb = np.clip(
        np.abs(np.mod(h * 6.0 + np.array([0.0, 4.0, 2.0]), 6.0) - 3.0) - 1.0,
        0.0,
        1.0,
    )
    rgb = rgb * rgb * (3.0 - 2.0 * rgb)
    return (v * (1.0 + s * (rgb - 1.0))).astype(np.float32)
