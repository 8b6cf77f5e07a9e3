"""
Analysis utilities for SMOKE2D diagnostics.

This module provides functions for statistical analysis of the time series
written by headless runs and for scaling analysis of energy spectra.
"""

import numpy as np
from scipy import stats


def _time_mask(times, t_start=None, t_end=None):
    t_start = times[0] if t_start is None else t_start
    t_end = times[-1] if t_end is None else t_end

    mask = (times >= t_start) & (times <= t_end)
    if not np.any(mask):
        raise ValueError(f"No data points in time range [{t_start}, {t_end}]")
    return mask


def compute_statistics_summary(times, series_dict, t_start=None, t_end=None):
    """
    Compute statistics for all scalar series.

    Args:
        times (ndarray): Time values (N,)
        series_dict (dict): Dictionary of scalar arrays
        t_start (float or None): Start time for statistics
        t_end (float or None): End time for statistics

    Returns:
        dict: {name: {"mean": ..., "std": ..., "min": ..., "max": ..., "median": ...}}
    """
    mask = _time_mask(times, t_start, t_end)
    stats_dict = {}

    for name, series in series_dict.items():
        data = series[mask]
        stats_dict[name] = {
            "mean": float(np.mean(data)),
            "std": float(np.std(data)),
            "min": float(np.min(data)),
            "max": float(np.max(data)),
            "median": float(np.median(data)),
        }

    return stats_dict


def compute_spectral_slope(kbins, spectrum, k_range=None):
    """
    Compute power-law slope of a spectrum via linear regression in log-log space.

    Args:
        kbins (ndarray): Wavenumber bins (M,)
        spectrum (ndarray): Spectrum values (M,)
        k_range (tuple or None): (k_min, k_max) for fitting range

    Returns:
        dict: {"slope", "intercept", "r_squared", "k_fit", "spectrum_fit"}

    Raises:
        ValueError: If fewer than three positive points fall in k_range
    """
    if k_range is None:
        k_range = (kbins[1], kbins[-1])  # Exclude k=0

    mask = (kbins >= k_range[0]) & (kbins <= k_range[1]) & (spectrum > 0)
    k_fit = kbins[mask]
    s_fit = spectrum[mask]

    if len(k_fit) < 3:
        raise ValueError("Insufficient data points in k_range for fitting")

    slope, intercept, r_value, _, _ = stats.linregress(np.log(k_fit), np.log(s_fit))

    return {
        "slope": slope,
        "intercept": intercept,
        "r_squared": r_value**2,
        "k_fit": k_fit,
        "spectrum_fit": np.exp(intercept) * k_fit**slope,
    }
