"""
Data writing and loading utilities for SMOKE2D diagnostics.

This module provides functions to write and read the diagnostics file of a
headless run:
- Scalar time series under scales/ and tasks/
- The isotropic energy spectrum of the final velocity field under spectrum/

Only derived scalars and spectra are stored; the field buffers themselves
are never written, so a run cannot be resumed from this file.
"""

import logging
import pathlib
import h5py
import numpy as np

logger = logging.getLogger(__name__)

# Scalars every diagnostics file must contain
REQUIRED_KEYS = ["energy", "max_speed", "density"]


def write_scalars(path, records, spectrum=None, attrs=None):
    """
    Write per-tick diagnostics to an HDF5 file.

    Args:
        path (str or Path): Output file (parent directories are created)
        records (list): Diagnostics dicts, each with 'tick' and 'sim_time'
        spectrum (tuple, optional): (k_bins, E_k) of the final velocity
        attrs (dict, optional): Run parameters stored as file attributes

    Returns:
        Path: The written file
    """
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if not records:
        raise ValueError("No diagnostics records to write")

    keys = [k for k in records[0] if k not in ("tick", "sim_time")]

    with h5py.File(path, "w") as f:
        f.create_dataset("scales/tick", data=np.array([r["tick"] for r in records], dtype=np.int64))
        f.create_dataset("scales/sim_time", data=np.array([r["sim_time"] for r in records]))
        for key in keys:
            f.create_dataset(f"tasks/{key}", data=np.array([r[key] for r in records]))

        if spectrum is not None:
            k_bins, E_k = spectrum
            f.create_dataset("spectrum/k", data=np.asarray(k_bins))
            f.create_dataset("spectrum/E", data=np.asarray(E_k))

        for name, value in (attrs or {}).items():
            f.attrs[name] = value

    logger.info("Wrote %d diagnostics records to %s", len(records), path)
    return path


def read_scalars(path):
    """
    Read the scalar time series of a diagnostics file.

    Args:
        path (str or Path): Diagnostics HDF5 file

    Returns:
        tuple: (times, series_dict)
            - times: (N,) array of simulation times
            - series_dict: Dictionary of scalar arrays {name: (N,) array}

    Raises:
        FileNotFoundError: If the file does not exist
        KeyError: If a required task is missing
    """
    path = pathlib.Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No diagnostics file at {path}")

    with h5py.File(path, "r") as f:
        times = np.array(f["scales/sim_time"])
        tasks = f["tasks"]
        for key in REQUIRED_KEYS:
            if key not in tasks:
                raise KeyError(f"Required task '{key}' not found in {path}")
        series_dict = {key: np.array(tasks[key]).squeeze() for key in tasks}

    return times, series_dict


def read_spectrum(path):
    """
    Read the final energy spectrum of a diagnostics file.

    Returns:
        tuple or None: (k_bins, E_k), or None if no spectrum was written
    """
    with h5py.File(path, "r") as f:
        if "spectrum" not in f:
            return None
        return np.array(f["spectrum/k"]), np.array(f["spectrum/E"])


def read_attrs(path):
    """Run parameters stored with a diagnostics file."""
    with h5py.File(path, "r") as f:
        return dict(f.attrs)
