"""
Spectral transform adapter and the viscosity/incompressibility step.

This module provides:
- An in-place real <-> complex 2D transform pair over padded buffers,
  backed by numpy.fft (unnormalised in both directions)
- Divergence-free projection of a vector field in Fourier space
- The combined viscous damping + projection pass used by the solver

Frequency-domain data is stored as interleaved (real, imag) pairs, one
row per ky and n//2+1 complex bins per row (see domain.Grid).
"""

import numpy as np

from . import domain


def forward(grid, buf):
    """
    In-place real-to-complex 2D transform of a padded buffer.

    Args:
        grid (Grid): Grid geometry
        buf (ndarray): Padded buffer (n, padded_width) whose compact region
            holds real-space data. Overwritten with interleaved coefficients.

    Returns:
        ndarray: buf
    """
    coeffs = np.fft.rfft2(grid.compact(buf))
    pairs = grid.complex_view(buf)
    pairs[..., 0] = coeffs.real
    pairs[..., 1] = coeffs.imag
    return buf


def inverse(grid, buf):
    """
    In-place complex-to-real 2D transform of a padded buffer.

    The result is not normalised: forward followed by inverse multiplies
    the data by n**2. Padding columns are zeroed.

    Args:
        grid (Grid): Grid geometry
        buf (ndarray): Padded buffer holding interleaved coefficients

    Returns:
        ndarray: buf
    """
    pairs = grid.complex_view(buf)
    with np.errstate(over='ignore', invalid='ignore'):
        coeffs = pairs[..., 0] + 1j * pairs[..., 1]
        real = np.fft.irfft2(coeffs, s=grid.shape, norm="forward")
    buf[:, :grid.n] = real
    buf[:, grid.n:] = 0.0
    return buf


def normalize(grid, buf):
    """Divide a buffer by n**2 (restores amplitude after forward + inverse)."""
    buf *= 1.0 / grid.size
    return buf


def project_div_free(kx, ky, fx, fy):
    """
    Project a vector field onto the divergence-free (incompressible) subspace.

    Removes the compressible component: f_div = (k.f / |k|^2) k

    Args:
        kx (ndarray): x-wavenumbers (broadcastable to field shape)
        ky (ndarray): y-wavenumbers (broadcastable to field shape)
        fx (ndarray): x-component in spectral space
        fy (ndarray): y-component in spectral space

    Returns:
        tuple: (fxp, fyp) - divergence-free projections of (fx, fy).
            Bins with k = 0 are returned unchanged.
    """
    k2 = kx * kx + ky * ky
    with np.errstate(divide='ignore', invalid='ignore'):
        dot = kx * fx + ky * fy
        corr = np.where(k2 == 0.0, 0.0, dot / k2)
        fxp = fx - kx * corr
        fyp = fy - ky * corr
    return fxp, fyp


def damp_and_project(grid, vx_hat, vy_hat, viscosity, dt, wavenumbers=None):
    """
    Frequency-domain pass: project out the divergent part and apply viscosity.

    For every bin with r = kx^2 + ky^2 > 0 the velocity is projected
    orthogonally to (kx, ky) and scaled by exp(-r * dt * viscosity). Both
    members of an interleaved (real, imag) pair share the bin's wavevector.
    The DC bin is left untouched.

    Args:
        grid (Grid): Grid geometry
        vx_hat, vy_hat (ndarray): Padded buffers holding coefficients
        viscosity (float): Kinematic viscosity (any value)
        dt (float): Time step (any value)
        wavenumbers (tuple, optional): (KX, KY, K2) from domain.wavenumbers

    Returns:
        tuple: (vx_hat, vy_hat), modified in place
    """
    if wavenumbers is None:
        wavenumbers = domain.wavenumbers(grid)
    KX, KY, K2 = wavenumbers

    u = grid.complex_view(vx_hat)
    v = grid.complex_view(vy_hat)
    dc = K2 == 0.0

    with np.errstate(over='ignore', invalid='ignore'):
        damping = np.where(dc, 1.0, np.exp(-K2 * dt * viscosity))
        up, vp = project_div_free(KX[..., None], KY[..., None], u, v)
        u[...] = damping[..., None] * up
        v[...] = damping[..., None] * vp

    return vx_hat, vy_hat


def diffuse_and_project(grid, vx_hat, vy_hat, viscosity, dt, wavenumbers=None):
    """
    Viscous diffusion and incompressibility in one spectral step.

    Transforms both velocity components, applies damp_and_project, then
    transforms back and normalises. Input and output are real-space values
    in the compact region of the padded buffers.

    Args:
        grid (Grid): Grid geometry
        vx_hat, vy_hat (ndarray): Padded velocity buffers
        viscosity (float): Kinematic viscosity
        dt (float): Time step
        wavenumbers (tuple, optional): Cached (KX, KY, K2)

    Returns:
        tuple: (vx_hat, vy_hat), modified in place
    """
    forward(grid, vx_hat)
    forward(grid, vy_hat)
    damp_and_project(grid, vx_hat, vy_hat, viscosity, dt, wavenumbers)
    inverse(grid, vx_hat)
    inverse(grid, vy_hat)
    normalize(grid, vx_hat)
    normalize(grid, vy_hat)
    return vx_hat, vy_hat


def divergence(grid, vx, vy, wavenumbers=None):
    """
    Spectral divergence of a compact velocity field.

    On even grids the Nyquist row (ky = n/2) and column (kx = n/2) are
    left out: a real field cannot carry a signed derivative there, and the
    projection of those bins does not survive the inverse transform.

    Args:
        grid (Grid): Grid geometry
        vx, vy (ndarray): Velocity components (n, n)
        wavenumbers (tuple, optional): Cached (KX, KY, K2)

    Returns:
        ndarray: div(u) on the grid, in units of the integer wavenumbers
    """
    if wavenumbers is None:
        wavenumbers = domain.wavenumbers(grid)
    KX, KY, _ = wavenumbers
    div_hat = 1j * KX * np.fft.rfft2(vx) + 1j * KY * np.fft.rfft2(vy)
    if grid.n % 2 == 0:
        div_hat[grid.n // 2, :] = 0.0
        div_hat[:, -1] = 0.0
    return np.fft.irfft2(div_hat, s=grid.shape)


def compute_energy_spectrum(grid, vx, vy, wavenumbers=None):
    """
    Isotropic 1D kinetic energy spectrum of a compact velocity field.

    Modes are binned into integer shells m = floor(|k|). The spectrum is
    normalised so that its sum equals the domain-averaged kinetic energy
    0.5 <|u|^2>.

    Args:
        grid (Grid): Grid geometry
        vx, vy (ndarray): Velocity components (n, n)
        wavenumbers (tuple, optional): Cached (KX, KY, K2)

    Returns:
        tuple: (k_bins, E_k)
            - k_bins: Integer shell wavenumbers 0..max
            - E_k: Energy per shell
    """
    if wavenumbers is None:
        wavenumbers = domain.wavenumbers(grid)
    _, _, K2 = wavenumbers
    n = grid.n

    uxh = np.fft.rfft2(vx)
    uyh = np.fft.rfft2(vy)
    E_mode = 0.5 * (np.abs(uxh)**2 + np.abs(uyh)**2) / float(grid.size)**2

    # rfft symmetry weight: double interior kx>0 columns
    weight = 2.0 * np.ones_like(E_mode)
    weight[:, 0] = 1.0
    if n % 2 == 0:
        weight[:, -1] = 1.0  # Nyquist column has no mirror
    E_mode *= weight

    shell_idx = np.floor(np.sqrt(K2)).astype(int)
    mmax = shell_idx.max()
    E_k = np.bincount(shell_idx.ravel(), weights=E_mode.ravel(), minlength=mmax + 1)
    k_bins = np.arange(mmax + 1, dtype=np.float64)
    return k_bins, E_k
