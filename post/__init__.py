"""
SMOKE2D Post-Processing and Display
===================================

Rendering, plotting and diagnostics I/O for SMOKE2D runs.

Modules:
    io: Diagnostics file writing and loading (HDF5)
    analysis: Statistics of time series, spectral slopes
    colormaps: Colour mappings for smoke and hedgehogs
    visualisation: Batch plots (imported explicitly; selects the Agg backend)
    viewer: Interactive window (imported explicitly; needs a GUI backend)
"""

__version__ = "0.1.0"

from . import io
from . import analysis
from . import colormaps

__all__ = ["io", "analysis", "colormaps"]
