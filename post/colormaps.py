"""
Colour mappings for smoke and hedgehog rendering.

Scalars are expected in [0, 1] and are clamped; values above 1 (fresh
smoke is injected at 10) saturate.
"""

import numpy as np
from matplotlib.colors import ListedColormap, hsv_to_rgb

COLOR_BLACKWHITE = 0
COLOR_RAINBOW = 1
COLOR_BANDS = 2
COLOR_MODES = (COLOR_BLACKWHITE, COLOR_RAINBOW, COLOR_BANDS)
COLOR_NAMES = {COLOR_BLACKWHITE: "black-white", COLOR_RAINBOW: "rainbow", COLOR_BANDS: "bands"}

NLEVELS = 7


def rainbow(values):
    """
    Rainbow palette: map scalars in [0, 1] to RGB.

    Args:
        values (array_like): Scalar values (any shape)

    Returns:
        ndarray: RGB values with a trailing axis of length 3
    """
    dx = 0.8
    v = np.clip(np.asarray(values, dtype=np.float64), 0.0, 1.0)
    v = (6.0 - 2.0 * dx) * v + dx
    r = np.maximum(0.0, (3.0 - np.abs(v - 4.0) - np.abs(v - 5.0)) / 2.0)
    g = np.maximum(0.0, (4.0 - np.abs(v - 2.0) - np.abs(v - 4.0)) / 2.0)
    b = np.maximum(0.0, (3.0 - np.abs(v - 1.0) - np.abs(v - 2.0)) / 2.0)
    return np.stack([r, g, b], axis=-1)


def scalar_to_rgb(values, mode=COLOR_RAINBOW):
    """
    Map scalars to RGB with one of the three colour modes.

    Args:
        values (array_like): Scalar values
        mode (int): COLOR_BLACKWHITE, COLOR_RAINBOW or COLOR_BANDS

    Returns:
        ndarray: RGB values with a trailing axis of length 3
    """
    v = np.clip(np.asarray(values, dtype=np.float64), 0.0, 1.0)
    if mode == COLOR_BLACKWHITE:
        return np.stack([v, v, v], axis=-1)
    if mode == COLOR_RAINBOW:
        return rainbow(v)
    if mode == COLOR_BANDS:
        return rainbow(np.floor(v * NLEVELS) / NLEVELS)
    raise ValueError(f"Unknown colour mode {mode!r}")


def make_colormap(mode=COLOR_RAINBOW, samples=256):
    """Matplotlib colormap equivalent of scalar_to_rgb for a colour mode."""
    return ListedColormap(scalar_to_rgb(np.linspace(0.0, 1.0, samples), mode),
                          name=f"smoke_{COLOR_NAMES[mode]}")


def direction_to_rgb(vx, vy):
    """
    Colour vectors by direction: hue follows the angle atan2(vy, vx).

    Returns:
        ndarray: RGB values with a trailing axis of length 3
    """
    f = np.arctan2(np.asarray(vy, dtype=np.float64), np.asarray(vx, dtype=np.float64)) / np.pi + 1.0

    def fold(c):
        c = np.where(c > 2.0, c - 2.0, c)
        return np.where(c > 1.0, 2.0 - c, c)

    r = fold(f)
    g = fold(f + 2.0 / 3.0)
    b = fold(f + 4.0 / 3.0)
    return np.stack([r, g, b], axis=-1)


def hue_to_rgb(values):
    """Fully saturated colour whose hue is the clamped scalar value."""
    h = np.clip(np.asarray(values, dtype=np.float64), 0.0, 1.0)
    ones = np.ones_like(h)
    return hsv_to_rgb(np.stack([h, ones, ones], axis=-1))
