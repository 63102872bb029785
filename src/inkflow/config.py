from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    # --- Debugging ---
    debug: bool = False  # Put live profiler timings in the window title

    # --- Logging ---
    log_level: str = "INFO"  # Minimum log level to output
    log_file: str | None = None  # Redirect logs to a file instead of the console
    log_interval: float = 1.0  # Seconds between FPS / profiler log lines
    frame_budget_ms: float = 16.7  # Warn when a frame takes longer than this

    # --- Window and Rendering ---
    width: int = 1024  # Initial window width
    height: int = 576  # Initial window height
    fullscreen: bool = False  # Open on the primary monitor at its native size
    vsync: bool = True  # Pace ticks to the display refresh
    backend: str = "gpu"  # Where the kernels run ('gpu' shaders or 'cpu' numpy)
    sim_scale: float = 1.0  # Grid resolution relative to the viewport

    # --- Solver Core ---
    dt: float = 0.15  # Explicit time step used by every kernel
    vorticity_threshold: float = (
        0.25  # Vorticity confinement strength and aux clamp; 0 disables (max .3)
    )
    velocity_threshold: float = 24.0  # Velocity components are clamped to +-this
    viscosity_threshold: float = (
        0.64  # Laplacian weight; higher means lower viscosity (max .8)
    )
    density_min: float = 0.5  # Density floor after each relaxation pass
    density_max: float = 3.0  # Density ceiling after each relaxation pass
    density_invariance_k: float = 0.2  # Pressure-like push against density gradients
    velocity_decay: float = 5e-6  # Magnitude removed from |v| every pass

    # --- Pointer Forcing ---
    drag_scale: float = 600.0  # Drag vector gain (in grid steps)
    drag_limit: float = 10.0  # Drag vector components are clamped to +-this
    force_gain: float = 0.001  # Inverse-square force numerator
    nudge_radius: float = 0.05  # Radius (UV) of the direct velocity nudge
    nudge_gain: float = 0.01  # Strength of the direct velocity nudge

    # --- Ink ---
    ink_decay: float = 0.008  # Fraction of ink removed every tick
    ink_max: float = 5.0  # Ink channels are clamped to [0, this]
    advection_scale: float = 3.0  # Ink back-trace length relative to velocity
    splat_gain: float = 8e-4  # Splat intensity numerator
    splat_falloff: float = 1.6  # Splat intensity ~ 1 / distance**falloff
    splat_radius: float = 0.25  # No ink is injected further than this (UV)

    # --- Composite ---
    pixelated: bool = False  # Quantise the display to coarse cells
    pixel_size: float = 9.0  # Cell size in pixels when pixelated
    border_thickness: float = 0.51  # Dark border width between pixelated cells
    invert_colors: bool = False  # Display 1 - ink instead of ink

    def __post_init__(self):
        if not 0.0 <= self.vorticity_threshold <= 0.3:
            raise ValueError(
                f"vorticity_threshold must be in [0, 0.3], got {self.vorticity_threshold}"
            )
        if not 0.0 <= self.viscosity_threshold <= 0.8:
            raise ValueError(
                f"viscosity_threshold must be in [0, 0.8], got {self.viscosity_threshold}"
            )
        if self.dt <= 0.0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if self.velocity_threshold <= 0.0:
            raise ValueError(
                f"velocity_threshold must be positive, got {self.velocity_threshold}"
            )
        if self.density_min >= self.density_max:
            raise ValueError(
                f"density_min ({self.density_min}) must be below density_max ({self.density_max})"
            )
        if not 0.0 <= self.ink_decay < 1.0:
            raise ValueError(f"ink_decay must be in [0, 1), got {self.ink_decay}")
        if self.ink_max <= 0.0:
            raise ValueError(f"ink_max must be positive, got {self.ink_max}")
        for name in ("nudge_radius", "splat_radius", "splat_falloff"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.pixel_size < 1.0:
            raise ValueError(f"pixel_size must be at least 1, got {self.pixel_size}")
        if self.backend not in ("gpu", "cpu"):
            raise ValueError(f"Unknown backend: {self.backend}")
        if not 0.0 < self.sim_scale <= 1.0:
            raise ValueError(f"sim_scale must be in (0, 1], got {self.sim_scale}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Window size must be positive, got {self.width}x{self.height}")

    def grid_size(self, width: int, height: int) -> tuple[int, int]:
        """Simulation grid resolution for a viewport of ``width`` x ``height``."""
        return (
            max(1, int(width * self.sim_scale)),
            max(1, int(height * self.sim_scale)),
        )
