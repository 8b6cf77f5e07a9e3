"""
SMOKE2D: Real-time 2D smoke on a periodic grid
==============================================

Stable-fluids solver: semi-Lagrangian advection in real space alternated
with viscous damping and divergence-free projection in Fourier space, plus
transport of a passive smoke density through the resulting flow.

Modules:
    config: Command-line arguments, validation and simulation parameters
    domain: Grid abstraction, buffer allocation and wavenumber grids
    spectral: Transform adapter, spectral viscosity + projection, spectra
    advection: Semi-Lagrangian backtrace and bilinear resampling
    forcing: Force/smoke decay and injection, input command queue
    solver: Velocity and density steps, step orchestrator
    utils: Diagnostic functions
"""

__version__ = "0.1.0"

from . import config
from . import domain
from . import spectral
from . import advection
from . import forcing
from . import solver
from . import utils

__all__ = [
    "config",
    "domain",
    "spectral",
    "advection",
    "forcing",
    "solver",
    "utils",
]
