"""
Visualisation functions for SMOKE2D diagnostics.

This module provides batch plotting functions for:
- Scalar time series (energy, speed, divergence, smoke, forcing)
- The isotropic energy spectrum of the final velocity field
- A still frame of the smoke and velocity fields
"""

import pathlib
import numpy as np
import matplotlib
import matplotlib.pyplot as plt

from . import colormaps

# Use non-interactive backend by default for batch processing
matplotlib.use("Agg")


PLOT_SPECS = {
    "energy": {"ylabel": "Energy E", "title": "Kinetic Energy vs Time"},
    "u_rms": {"ylabel": "u_rms", "title": "RMS Velocity vs Time"},
    "max_speed": {"ylabel": "max|u|", "title": "Maximum Speed vs Time"},
    "divergence": {"ylabel": "max|div u|", "title": "Velocity Divergence vs Time", "log": True},
    "density": {"ylabel": "Σ ρ", "title": "Total Smoke vs Time"},
    "max_force": {"ylabel": "max|f|", "title": "Maximum Force vs Time"},
}


def plot_time_series(times, series_dict, outdir=".", dpi=300):
    """
    Plot scalar time series.

    Args:
        times (ndarray): Time values (N,)
        series_dict (dict): Dictionary of scalar arrays {name: (N,) array}
        outdir (str or Path): Output directory for figures
        dpi (int): Figure DPI

    Returns:
        list: Paths of the written figures (one per known series present)
    """
    outdir = pathlib.Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    written = []

    for key, spec in PLOT_SPECS.items():
        if key not in series_dict:
            continue

        plt.figure(figsize=(8, 4.5))
        values = np.asarray(series_dict[key])
        if spec.get("log") and np.all(values > 0):
            plt.semilogy(times, values, linewidth=1.5)
        else:
            plt.plot(times, values, linewidth=1.5)
        plt.xlabel("Time t")
        plt.ylabel(spec["ylabel"])
        plt.title(spec["title"])
        plt.grid(True, alpha=0.3, linestyle="--")
        plt.tight_layout()
        path = outdir / f"{key}.png"
        plt.savefig(path, dpi=dpi, bbox_inches="tight")
        plt.close()
        written.append(path)

    return written


def plot_spectrum(kbins, Ek, outdir=".", dpi=300, fit=None):
    """
    Plot an energy spectrum on log-log axes.

    Args:
        kbins (ndarray): Shell wavenumbers
        Ek (ndarray): Energy per shell
        outdir (str or Path): Output directory
        dpi (int): Figure DPI
        fit (dict, optional): Result of analysis.compute_spectral_slope

    Returns:
        Path: The written figure
    """
    outdir = pathlib.Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    mask = (kbins > 0) & (Ek > 0)
    plt.figure(figsize=(6, 5))
    plt.loglog(kbins[mask], Ek[mask], "o-", markersize=3, linewidth=1.5, label="E(k)")
    if fit is not None:
        plt.loglog(fit["k_fit"], fit["spectrum_fit"], "--", color="k", alpha=0.7,
                   label=f"slope {fit['slope']:.2f}")
    plt.xlabel("k")
    plt.ylabel("E(k)")
    plt.title("Energy Spectrum")
    plt.grid(True, which="both", alpha=0.3, linestyle="--")
    plt.legend()
    plt.tight_layout()
    path = outdir / "spectrum.png"
    plt.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close()
    return path


def plot_frame(views, outdir=".", dpi=150, color_mode=colormaps.COLOR_RAINBOW, stride=2, name="frame.png"):
    """
    Render a still frame: smoke image with velocity hedgehogs on top.

    Args:
        views (dict): Read-only field views from FluidState.render_views()
        outdir (str or Path): Output directory
        dpi (int): Figure DPI
        color_mode (int): Smoke colour mode (see colormaps)
        stride (int): Draw one hedgehog every `stride` cells
        name (str): Output file name

    Returns:
        Path: The written figure
    """
    outdir = pathlib.Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    rho = views["rho"]
    n = rho.shape[0]
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.imshow(rho, origin="lower", cmap=colormaps.make_colormap(color_mode),
              vmin=0.0, vmax=1.0, extent=[0, n, 0, n], interpolation="bilinear")

    rows, cols = np.mgrid[0:n:stride, 0:n:stride]
    vx = views["vx"][::stride, ::stride]
    vy = views["vy"][::stride, ::stride]
    colors = colormaps.direction_to_rgb(vx, vy).reshape(-1, 3)
    ax.quiver(cols + 0.5, rows + 0.5, vx, vy, color=colors, angles="xy")

    ax.set_xlim(0, n)
    ax.set_ylim(0, n)
    ax.set_xticks([])
    ax.set_yticks([])
    fig.tight_layout()
    path = outdir / name
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return path
