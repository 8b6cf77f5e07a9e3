#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Plot SMOKE2D diagnostics: scalar time series and the final energy spectrum.

This script visualises the diagnostics file written by a headless run
(`main.py --headless --scalars FILE`) and prints summary statistics.

Usage:
    python plot_output.py --scalars runs/stir.h5 --outdir ./figures

    python plot_output.py --scalars runs/stir.h5 --outdir ./figures \\
                          --dpi 150 --tmin 5.0 --no_spectrum

For help:
    python plot_output.py --help
"""

import argparse
import pathlib
import sys

# Add parent directory to path to import post-processing module
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from post import io, visualisation, analysis


def get_args():
    """Parse command-line arguments."""
    ap = argparse.ArgumentParser(
        description="Plot scalars and energy spectrum of a SMOKE2D headless run.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Required arguments
    ap.add_argument("--scalars", type=str, required=True,
                   help="Diagnostics HDF5 file written by main.py --headless --scalars")

    # Output
    ap.add_argument("--outdir", type=str, default="./figures",
                   help="Output directory for generated figures")
    ap.add_argument("--dpi", type=int, default=300,
                   help="Figure DPI (resolution)")

    # What to plot
    ap.add_argument("--no_spectrum", action="store_true",
                   help="Skip the energy spectrum plot")

    # Statistics window
    ap.add_argument("--tmin", type=float, default=None,
                   help="Start time for summary statistics")
    ap.add_argument("--tmax", type=float, default=None,
                   help="End time for summary statistics")

    return ap.parse_args()


def main():
    """Main execution function."""
    args = get_args()

    scalars = pathlib.Path(args.scalars).resolve()
    out_root = pathlib.Path(args.outdir).resolve()
    out_root.mkdir(parents=True, exist_ok=True)

    print("=" * 70)
    print("SMOKE2D Output Plotting")
    print("=" * 70)
    print(f"Diagnostics file: {scalars}")
    print(f"Output directory: {out_root}")
    print(f"DPI: {args.dpi}")
    for name, value in io.read_attrs(scalars).items():
        print(f"  {name} = {value}")
    print("=" * 70)

    # 1) Scalar time series
    print("\n[1/2] Plotting scalar time series...")
    times, series = io.read_scalars(scalars)
    written = visualisation.plot_time_series(times, series, outdir=out_root / "scalars", dpi=args.dpi)
    print(f"  Saved {len(written)} figures to {out_root / 'scalars'}")

    summary = analysis.compute_statistics_summary(times, series, args.tmin, args.tmax)
    print(f"  {'series':<12} {'mean':>12} {'std':>12} {'min':>12} {'max':>12}")
    for name, st in summary.items():
        print(f"  {name:<12} {st['mean']:12.4e} {st['std']:12.4e} {st['min']:12.4e} {st['max']:12.4e}")

    # 2) Energy spectrum
    if not args.no_spectrum:
        print("\n[2/2] Plotting energy spectrum...")
        spectrum = io.read_spectrum(scalars)
        if spectrum is None:
            print("  No spectrum stored in this file")
        else:
            kbins, Ek = spectrum
            try:
                fit = analysis.compute_spectral_slope(kbins, Ek)
                print(f"  Spectral slope: {fit['slope']:.3f} (R² = {fit['r_squared']:.3f})")
            except ValueError as e:
                print(f"  Warning: could not fit spectral slope: {e}")
                fit = None
            path = visualisation.plot_spectrum(kbins, Ek, outdir=out_root, dpi=args.dpi, fit=fit)
            print(f"  Saved to {path}")

    print("\n" + "=" * 70)
    print("Plotting complete!")
    print(f"All figures saved to: {out_root}")
    print("=" * 70)


if __name__ == "__main__":
    main()
