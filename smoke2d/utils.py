"""
Diagnostic functions for SMOKE2D simulations.

This module provides helper functions for:
- Velocity statistics (kinetic energy, RMS and maximum speed, mean flow)
- Incompressibility check (spectral divergence)
- Smoke bookkeeping (total density)
"""

import numpy as np

from . import spectral


def kinetic_energy(vx, vy):
    """Domain-averaged kinetic energy 0.5 <|u|^2>."""
    return 0.5 * float(np.mean(vx * vx + vy * vy, dtype=np.float64))


def rms_velocity(vx, vy):
    """
    Compute RMS velocity over the grid.

        u_rms = sqrt(<|u|^2>)
    """
    return float(np.sqrt(np.mean(vx * vx + vy * vy, dtype=np.float64)))


def compute_max_velocity(vx, vy):
    """
    Compute maximum velocity magnitude from grid data.

    Args:
        vx (ndarray): x-velocity
        vy (ndarray): y-velocity

    Returns:
        float: Maximum velocity magnitude |u|_max
    """
    return float(np.sqrt(np.max(vx * vx + vy * vy)))


def mean_velocity(vx, vy):
    """Spatial mean of each velocity component (the DC bin / n^2)."""
    return float(np.mean(vx)), float(np.mean(vy))


def total_density(rho):
    return float(np.sum(rho, dtype=np.float64))


def max_divergence(grid, vx, vy, wavenumbers=None):
    """Maximum absolute spectral divergence of the velocity field."""
    return float(np.max(np.abs(spectral.divergence(grid, vx, vy, wavenumbers))))


def collect_diagnostics(state, wavenumbers=None):
    """
    Gather the per-tick scalar diagnostics of a simulation state.

    Args:
        state (FluidState): Simulation buffers
        wavenumbers (tuple, optional): Cached (KX, KY, K2)

    Returns:
        dict: energy, u_rms, max_speed, mean_vx, mean_vy, divergence,
            density, max_force
    """
    mean_vx, mean_vy = mean_velocity(state.vx, state.vy)
    return {
        'energy': kinetic_energy(state.vx, state.vy),
        'u_rms': rms_velocity(state.vx, state.vy),
        'max_speed': compute_max_velocity(state.vx, state.vy),
        'mean_vx': mean_vx,
        'mean_vy': mean_vy,
        'divergence': max_divergence(state.grid, state.vx, state.vy, wavenumbers),
        'density': total_density(state.rho),
        'max_force': compute_max_velocity(state.fx, state.fy),
    }
