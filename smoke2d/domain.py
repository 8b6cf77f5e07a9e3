"""
Grid geometry and simulation buffers.

This module provides the periodic grid abstraction used by every other
component, together with the container that owns all field arrays of a
simulation:
- Wrap-safe 2D indexing on an N x N toroidal lattice
- Compact (N x N) and padded (N x 2(N//2+1)) buffer layouts
- Integer wavenumber grids matching the padded rfft layout
"""

import logging
import numpy as np

logger = logging.getLogger(__name__)


class AllocationError(MemoryError):
    """Raised when the simulation buffers cannot be allocated."""


class Grid:
    """
    Square toroidal lattice of side n.

    Arrays are indexed [row, col] = [y, x], so the flat address of a cell
    is row * n + col. Frequency-domain data lives in padded buffers whose
    rows hold n // 2 + 1 complex values as interleaved (real, imag) pairs.
    """

    def __init__(self, n):
        n = int(n)
        if n < 2:
            raise ValueError("Grid size n must be at least 2")
        self.n = n
        self.padded_width = 2 * (n // 2 + 1)

    def __repr__(self):
        return f"Grid(n={self.n})"

    @property
    def shape(self):
        return (self.n, self.n)

    @property
    def padded_shape(self):
        return (self.n, self.padded_width)

    @property
    def size(self):
        return self.n * self.n

    def wrap(self, i):
        """Wrap an integer index (or integer array) into [0, n)."""
        return np.mod(i, self.n)

    def index(self, row, col):
        """Flat index of (row, col) with periodic wraparound."""
        return self.wrap(row) * self.n + self.wrap(col)

    def clamp(self, i):
        """Clamp an index into [0, n-1] (no wraparound)."""
        return int(min(max(int(i), 0), self.n - 1))

    def compact(self, padded):
        """View of the real-space (n x n) region of a padded buffer."""
        return padded[:, :self.n]

    def pad(self, compact, out):
        """Copy a compact array into the real-space region of a padded buffer."""
        out[:, :self.n] = compact
        return out

    def complex_view(self, padded):
        """View of a padded buffer as (n, n//2+1, 2) interleaved (re, im) pairs."""
        return padded.reshape(self.n, self.padded_width // 2, 2)


class FluidState:
    """
    Owner of every field buffer of a simulation.

    Attributes:
        grid (Grid): Grid geometry
        vx, vy: Current velocity (n, n)
        vx0, vy0: Velocity scratch; holds the force input before a solve
            and the pre-advection snapshot during it
        vx_hat, vy_hat: Padded transform buffers (n, padded_width)
        fx, fy: Externally injected forces, decayed every tick
        rho, rho0: Current and scratch smoke density
    """

    COMPACT = ("vx", "vy", "vx0", "vy0", "fx", "fy", "rho", "rho0")
    PADDED = ("vx_hat", "vy_hat")

    def __init__(self, grid, dtype=np.float64):
        self.grid = grid
        self.dtype = np.dtype(dtype)
        try:
            for name in self.COMPACT:
                setattr(self, name, np.zeros(grid.shape, dtype=self.dtype))
            for name in self.PADDED:
                setattr(self, name, np.zeros(grid.padded_shape, dtype=self.dtype))
        except MemoryError as exc:
            raise AllocationError(
                f"Unable to allocate simulation buffers for a {grid.n}x{grid.n} grid"
            ) from exc

    @property
    def nbytes(self):
        return sum(getattr(self, name).nbytes for name in self.COMPACT + self.PADDED)

    def render_views(self):
        """
        Read-only views of the fields consumed by the render collaborator.

        Returns:
            dict: {'vx', 'vy', 'fx', 'fy', 'rho'} -> non-writeable ndarray views
        """
        views = {}
        for name in ("vx", "vy", "fx", "fy", "rho"):
            view = getattr(self, name).view()
            view.flags.writeable = False
            views[name] = view
        return views


def initialize(n, dtype=np.float64):
    """
    Allocate and zero-fill all buffers for an n x n periodic simulation.

    Args:
        n (int): Grid side length (>= 2)
        dtype: NumPy floating point type of the buffers

    Returns:
        FluidState: Freshly allocated simulation state

    Raises:
        ValueError: If n < 2
        AllocationError: If the buffers cannot be obtained
    """
    grid = Grid(n)
    state = FluidState(grid, dtype=dtype)
    logger.debug("Allocated %d buffers for %r (%.1f KiB)",
                 len(FluidState.COMPACT) + len(FluidState.PADDED), grid, state.nbytes / 1024.0)
    return state


def wavenumbers(grid):
    """
    Integer wavenumber grids for the packed rfft layout.

    Columns run over the half spectrum kx = 0..n//2; rows are folded as
    ky = j for j <= n//2 and j - n otherwise.

    Args:
        grid (Grid): Grid geometry

    Returns:
        tuple: (KX, KY, K2), each of shape (n, n//2+1)
    """
    n = grid.n
    kx = np.arange(n // 2 + 1, dtype=np.float64)
    j = np.arange(n)
    ky = np.where(j <= n // 2, j, j - n).astype(np.float64)
    KY, KX = np.meshgrid(ky, kx, indexing='ij')
    K2 = KX**2 + KY**2
    return KX, KY, K2
