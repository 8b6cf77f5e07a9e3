"""
Semi-Lagrangian advection on the periodic grid.

For each destination cell the velocity is traced backward by one time
step and the source field is resampled there with bilinear interpolation.
Tracing backward (never forward) keeps the scheme stable for any dt.
All lookups wrap around the torus.
"""

from collections import namedtuple

import numpy as np

# Wrapped base/neighbour columns (i0, i1) and rows (j0, j1), plus the
# fractional offsets s (along x) and t (along y), all of shape (n, n).
Backtrace = namedtuple("Backtrace", ["i0", "i1", "j0", "j1", "s", "t"])


def trace(grid, vx, vy, dt):
    """
    Trace every cell centre backward along (vx, vy) for a time step dt.

    The cell centre ((col + 0.5) / n, (row + 0.5) / n) moves to
    centre - dt * v; scaled by n and shifted by -0.5 onto the
    interpolation lattice this is col - dt * n * vx (likewise for rows).

    Args:
        grid (Grid): Grid geometry
        vx, vy (ndarray): Velocity used for tracing (n, n)
        dt (float): Time step (any sign)

    Returns:
        Backtrace: Sample locations shared by every field resampled with them
    """
    n = grid.n
    rows, cols = np.indices(grid.shape, dtype=np.float64)
    with np.errstate(over='ignore', invalid='ignore'):
        x0 = cols - (dt * n) * vx
        y0 = rows - (dt * n) * vy
    return locate(grid, x0, y0)


def locate(grid, x0, y0):
    """
    Interpolation corners and offsets of arbitrary lattice positions.

    Positions are in cell units (column x0, row y0) and may lie anywhere;
    they are wrapped onto the torus. Any array shape is accepted.

    Returns:
        Backtrace: Corner indices and offsets, shaped like x0
    """
    with np.errstate(invalid='ignore'):
        bx = np.floor(x0)
        by = np.floor(y0)
        s = x0 - bx
        t = y0 - by
        # Non-finite positions (from non-finite velocity) sample the origin.
        finite = np.isfinite(bx) & np.isfinite(by)
        bx = np.where(finite, bx, 0.0)
        by = np.where(finite, by, 0.0)
        i0 = grid.wrap(bx.astype(np.int64))
        j0 = grid.wrap(by.astype(np.int64))
    i1 = grid.wrap(i0 + 1)
    j1 = grid.wrap(j0 + 1)
    return Backtrace(i0, i1, j0, j1, s, t)


def resample(bt, source, out=None):
    """
    Bilinear resampling of a source field at backtraced locations.

    Weights (1-s)(1-t), s(1-t), (1-s)t and st are applied to the corners
    (base, +x, +y, +x+y). A location exactly on a grid line has a zero
    offset and reduces to a direct lookup.

    Args:
        bt (Backtrace): Locations from trace()
        source (ndarray): Field sampled on the grid (not modified)
        out (ndarray, optional): Destination array (n, n)

    Returns:
        ndarray: Resampled field (out if provided)
    """
    s, t = bt.s, bt.t
    with np.errstate(over='ignore', invalid='ignore'):
        value = ((1.0 - s) * (1.0 - t) * source[bt.j0, bt.i0]
                 + s * (1.0 - t) * source[bt.j0, bt.i1]
                 + (1.0 - s) * t * source[bt.j1, bt.i0]
                 + s * t * source[bt.j1, bt.i1])
    if out is None:
        return value
    out[...] = value
    return out


def advect(grid, vx, vy, current, previous, dt):
    """
    Carry a field backward along the velocity for one time step.

    Args:
        grid (Grid): Grid geometry
        vx, vy (ndarray): Velocity used for tracing
        current (ndarray or sequence): Destination array(s), overwritten
        previous (ndarray or sequence): Source array(s), read only
        dt (float): Time step

    Returns:
        Backtrace: The trace shared by all advected components
    """
    bt = trace(grid, vx, vy, dt)
    if isinstance(current, np.ndarray):
        resample(bt, previous, out=current)
    else:
        for dst, src in zip(current, previous):
            resample(bt, src, out=dst)
    return bt
