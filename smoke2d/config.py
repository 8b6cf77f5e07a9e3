"""
Configuration and command-line argument parsing for SMOKE2D simulations.

This module handles all command-line arguments and parameter validation
for the smoke solver, and defines the parameter struct that the step
orchestrator and solver receive instead of process-wide globals.
"""

import argparse
import logging

logger = logging.getLogger(__name__)


class SimulationParams:
    """
    Mutable simulation parameters.

    Args:
        n (int): Grid size (fixed after initialisation)
        dt (float): Time step; may be changed between ticks, any sign
        viscosity (float): Kinematic viscosity; may be changed between ticks
        paused (bool): Whether ticks are currently skipped
    """

    # Parameters that commands may change at runtime
    TUNABLE = ("dt", "viscosity")

    def __init__(self, n=50, dt=0.04, viscosity=0.001, paused=False):
        self.n = int(n)
        self.dt = float(dt)
        self.viscosity = float(viscosity)
        self.paused = bool(paused)

    def __repr__(self):
        return (f"SimulationParams(n={self.n}, dt={self.dt:g}, "
                f"viscosity={self.viscosity:g}, paused={self.paused})")

    @classmethod
    def from_args(cls, args):
        """Build parameters from parsed command-line arguments."""
        return cls(n=args.N, dt=args.dt, viscosity=args.visc, paused=args.paused)

    def set(self, name, value):
        """
        Set a tunable parameter.

        Raises:
            ValueError: If name is not a tunable parameter
        """
        if name not in self.TUNABLE:
            raise ValueError(f"Unknown simulation parameter '{name}' (expected one of {self.TUNABLE})")
        setattr(self, name, float(value))


def get_args(argv=None):
    """
    Parse command-line arguments for a SMOKE2D run.

    Args:
        argv (list, optional): Argument list (defaults to sys.argv[1:])

    Returns:
        argparse.Namespace: Parsed command-line arguments containing all
            simulation parameters (grid size, physics parameters, run mode,
            output and display settings)
    """
    ap = argparse.ArgumentParser(
        description="Real-time 2D smoke on a periodic grid (semi-Lagrangian advection + spectral viscosity)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Grid
    grid_group = ap.add_argument_group('Grid')
    grid_group.add_argument(
        "--N", type=int, default=50,
        help="Number of grid cells along each periodic axis"
    )
    grid_group.add_argument(
        "--precision", type=str, default="float64",
        choices=["float64", "float32"],
        help="Floating-point precision of the field buffers"
    )

    # Physics parameters
    physics_group = ap.add_argument_group('Physical Parameters')
    physics_group.add_argument(
        "--dt", type=float, default=0.04,
        help="Simulation time step (adjustable at runtime)"
    )
    physics_group.add_argument(
        "--visc", type=float, default=0.001,
        help="Fluid viscosity (adjustable at runtime)"
    )

    # Run mode
    run_group = ap.add_argument_group('Run Mode')
    run_group.add_argument(
        "--headless", action="store_true",
        help="Run without a window, driving the flow with a scripted stirrer"
    )
    run_group.add_argument(
        "--n_ticks", type=int, default=500,
        help="Number of ticks to run in headless mode"
    )
    run_group.add_argument(
        "--stir_radius", type=float, default=0.25,
        help="Radius of the scripted stirrer orbit, as a fraction of the grid"
    )
    run_group.add_argument(
        "--stir_period", type=int, default=120,
        help="Ticks per revolution of the scripted stirrer"
    )
    run_group.add_argument(
        "--paused", action="store_true",
        help="Start with the animation paused"
    )

    # Output
    output_group = ap.add_argument_group('Output Settings')
    output_group.add_argument(
        "--scalars", type=str, default=None,
        help="HDF5 file for the per-tick diagnostics time series (headless mode)"
    )
    output_group.add_argument(
        "--frame", type=str, default=None,
        help="PNG file for a still frame of the final fields (headless mode)"
    )
    output_group.add_argument(
        "--log_every", type=int, default=50,
        help="Number of ticks between progress log lines"
    )
    output_group.add_argument(
        "--log_level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity"
    )

    # Display
    display_group = ap.add_argument_group('Visualisation')
    display_group.add_argument(
        "--window", type=float, default=9.0,
        help="Window size in inches"
    )
    display_group.add_argument(
        "--interval", type=int, default=20,
        help="Milliseconds between animation frames"
    )
    display_group.add_argument(
        "--vec_scale", type=float, default=1000.0,
        help="Initial hedgehog scaling"
    )
    display_group.add_argument(
        "--vec_dim", type=int, default=None,
        help="Initial number of hedgehogs along each axis (default: N)"
    )

    return ap.parse_args(argv)


def validate_args(args):
    """
    Validate command-line arguments for consistency.

    The time step and viscosity are deliberately not checked: any value,
    including zero or negative, is accepted by the solver.

    Args:
        args: Parsed arguments from get_args()

    Raises:
        ValueError: If arguments are inconsistent or invalid
    """
    if args.N < 2:
        raise ValueError("Grid size N must be at least 2")

    if args.n_ticks <= 0:
        raise ValueError("Number of ticks n_ticks must be positive")

    if args.stir_period <= 0:
        raise ValueError("Stirrer period stir_period must be positive")

    if not 0.0 <= args.stir_radius <= 0.5:
        raise ValueError("Stirrer radius stir_radius must lie in [0, 0.5]")

    if args.log_every <= 0:
        raise ValueError("Logging interval log_every must be positive")

    if args.window <= 0 or args.interval <= 0:
        raise ValueError("Window size and frame interval must be positive")

    if args.vec_dim is not None and args.vec_dim < 1:
        raise ValueError("Hedgehog grid size vec_dim must be at least 1")

    for name in ("scalars", "frame"):
        path = getattr(args, name)
        if path is not None and not args.headless:
            logger.warning("--%s is only written in headless mode; ignoring %s", name, path)
