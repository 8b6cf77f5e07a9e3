#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SMOKE2D: Real-time 2D smoke simulation
======================================

Interactive or headless smoke simulation on a periodic grid.

Usage:
    # Interactive window (drag with the mouse to stir and add smoke)
    python main.py --N 50 --dt 0.04 --visc 0.001

    # Headless run with a scripted stirrer, writing diagnostics
    python main.py --headless --n_ticks 1000 --scalars runs/stir.h5 --frame runs/stir.png

For help:
    python main.py --help
"""

import logging
import pathlib
import sys
import numpy as np

from smoke2d import config, domain, forcing, solver, spectral


def run_headless(sim, args, logger):
    """Drive the simulation with the scripted stirrer and write diagnostics."""
    stirrer = forcing.orbit_stirrer(args.N, radius=args.stir_radius, period=args.stir_period)
    records = sim.run(args.n_ticks, stirrer=stirrer, log_every=args.log_every)

    if args.scalars and records:
        from post import io

        spectrum = spectral.compute_energy_spectrum(
            sim.state.grid, sim.state.vx, sim.state.vy, sim.wavenumbers)
        attrs = {"N": args.N, "dt": sim.params.dt, "visc": sim.params.viscosity,
                 "n_ticks": args.n_ticks, "stir_radius": args.stir_radius,
                 "stir_period": args.stir_period}
        io.write_scalars(args.scalars, records, spectrum=spectrum, attrs=attrs)
    elif not records:
        logger.warning("No ticks completed (simulation paused)")

    if args.frame:
        from post import visualisation

        frame = pathlib.Path(args.frame)
        path = visualisation.plot_frame(sim.state.render_views(), outdir=frame.parent, name=frame.name)
        logger.info("Wrote final frame to %s", path)


def run_interactive(sim, args):
    """Open the viewer window and animate until it is closed."""
    from post import viewer

    print("Fluid Flow Simulation and Visualization")
    print("=======================================")
    print("Click and drag the mouse to steer the flow!")
    print(viewer.__doc__.split("Key bindings:")[1])

    dims = None if args.vec_dim is None else (args.vec_dim, args.vec_dim)
    view = viewer.SmokeViewer(sim, window=args.window, interval=args.interval,
                              vec_scale=args.vec_scale, hedgehog_dims=dims)
    view.show()


def main(argv=None):
    """
    Main entry point for SMOKE2D.

    Parses command-line arguments, validates configuration, sets up logging,
    allocates the simulation and runs it interactively or headless.
    """
    # Parse arguments
    args = config.get_args(argv)

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger(__name__)

    # Validate arguments
    try:
        config.validate_args(args)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    dtype = np.float64 if args.precision == "float64" else np.float32
    params = config.SimulationParams.from_args(args)

    logger.info("=" * 70)
    logger.info("SMOKE2D: Real-time 2D smoke simulation")
    logger.info("=" * 70)
    logger.info("Grid: %dx%d periodic", args.N, args.N)
    logger.info("Physics: dt=%.3e, visc=%.2e", params.dt, params.viscosity)
    logger.info("Mode: %s", "headless" if args.headless else "interactive")
    logger.info("Precision: %s", args.precision)
    logger.info("=" * 70)

    # Allocate buffers
    try:
        sim = solver.Simulation.create(params, dtype=dtype)
    except domain.AllocationError as e:
        logger.error("Cannot start simulation: %s", e)
        return 1

    if args.headless:
        run_headless(sim, args, logger)
    else:
        run_interactive(sim, args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
