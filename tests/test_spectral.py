"""
Tests for the transform adapter and the spectral viscosity + projection step.
"""

import warnings

import numpy as np
import pytest

from smoke2d import domain, spectral, utils


def padded(grid, *fields):
    out = []
    for f in fields:
        buf = np.zeros(grid.padded_shape)
        grid.pad(f, buf)
        out.append(buf)
    return out


def sine_modes(n):
    """Divergence-free field: vx varies along y only, vy along x only."""
    rows, cols = np.indices((n, n), dtype=float)
    vx = np.sin(2 * np.pi * rows / n)
    vy = np.cos(2 * np.pi * cols / n)
    return vx, vy


class TestTransformAdapter:

    @pytest.mark.parametrize("n", [16, 15])
    def test_round_trip(self, n):
        grid = domain.Grid(n)
        field = np.random.default_rng(n).standard_normal((n, n))
        (buf,) = padded(grid, field)

        spectral.forward(grid, buf)
        spectral.inverse(grid, buf)
        spectral.normalize(grid, buf)

        np.testing.assert_allclose(grid.compact(buf), field, rtol=1e-10, atol=1e-12)

    def test_inverse_is_unnormalised(self):
        grid = domain.Grid(8)
        field = np.random.default_rng(1).standard_normal((8, 8))
        (buf,) = padded(grid, field)
        spectral.forward(grid, buf)
        spectral.inverse(grid, buf)
        np.testing.assert_allclose(grid.compact(buf), 64.0 * field, rtol=1e-10, atol=1e-10)

    def test_forward_layout_matches_rfft2(self):
        grid = domain.Grid(8)
        field = np.random.default_rng(2).standard_normal((8, 8))
        (buf,) = padded(grid, field)
        spectral.forward(grid, buf)

        expected = np.fft.rfft2(field)
        pairs = grid.complex_view(buf)
        np.testing.assert_allclose(pairs[..., 0], expected.real, atol=1e-12)
        np.testing.assert_allclose(pairs[..., 1], expected.imag, atol=1e-12)

    def test_zero_viscosity_round_trip_of_divergence_free_field(self):
        grid = domain.Grid(16)
        vx, vy = sine_modes(16)
        ux, uy = padded(grid, vx, vy)
        spectral.diffuse_and_project(grid, ux, uy, 0.0, 0.04)
        np.testing.assert_allclose(grid.compact(ux), vx, atol=1e-12)
        np.testing.assert_allclose(grid.compact(uy), vy, atol=1e-12)


class TestProjection:

    def test_project_div_free_leaves_dc(self):
        fx, fy = spectral.project_div_free(np.array([0.0, 1.0]), np.array([0.0, 0.0]),
                                           np.array([2.0, 3.0]), np.array([5.0, 7.0]))
        np.testing.assert_array_equal(fx, [2.0, 0.0])
        np.testing.assert_array_equal(fy, [5.0, 7.0])

    @pytest.mark.parametrize("n", [16, 15])
    def test_orthogonal_to_wavevector(self, n):
        grid = domain.Grid(n)
        rng = np.random.default_rng(n)
        ux, uy = padded(grid, rng.standard_normal((n, n)), rng.standard_normal((n, n)))
        spectral.forward(grid, ux)
        spectral.forward(grid, uy)

        KX, KY, K2 = domain.wavenumbers(grid)
        spectral.damp_and_project(grid, ux, uy, 0.01, 0.1, (KX, KY, K2))

        u = grid.complex_view(ux)
        v = grid.complex_view(uy)
        dot = KX[..., None] * u + KY[..., None] * v
        dot[K2 == 0.0] = 0.0
        np.testing.assert_allclose(dot, 0.0, atol=1e-10)

    def test_gradient_field_removed(self):
        n = 16
        grid = domain.Grid(n)
        _, cols = np.indices((n, n), dtype=float)
        vx = 0.3 + np.cos(2 * np.pi * cols / n)  # purely compressive + mean flow
        ux, uy = padded(grid, vx, np.zeros((n, n)))
        spectral.diffuse_and_project(grid, ux, uy, 0.001, 0.04)
        np.testing.assert_allclose(grid.compact(ux), 0.3, atol=1e-12)
        np.testing.assert_allclose(grid.compact(uy), 0.0, atol=1e-12)

    def test_divergence_diagnostic_on_even_grid(self):
        n = 16
        grid = domain.Grid(n)
        rng = np.random.default_rng(5)
        ux, uy = padded(grid, rng.standard_normal((n, n)), rng.standard_normal((n, n)))
        spectral.diffuse_and_project(grid, ux, uy, 0.001, 0.04)
        assert utils.max_divergence(grid, grid.compact(ux), grid.compact(uy)) < 1e-10

    def test_divergence_of_compressive_field(self):
        n = 16
        grid = domain.Grid(n)
        _, cols = np.indices((n, n), dtype=float)
        vx = np.sin(2 * np.pi * cols / n)
        div = spectral.divergence(grid, vx, np.zeros((n, n)))
        np.testing.assert_allclose(div, np.cos(2 * np.pi * cols / n), atol=1e-12)

    def test_divergence_free_after_step_odd_grid(self):
        n = 15
        grid = domain.Grid(n)
        rng = np.random.default_rng(0)
        ux, uy = padded(grid, rng.standard_normal((n, n)), rng.standard_normal((n, n)))
        spectral.diffuse_and_project(grid, ux, uy, 0.001, 0.04)
        assert utils.max_divergence(grid, grid.compact(ux), grid.compact(uy)) < 1e-10


class TestDCPreservation:

    @pytest.mark.parametrize("visc,dt", [(0.001, 0.04), (0.5, 2.0), (0.0, 0.0)])
    def test_mean_velocity_unchanged(self, visc, dt):
        n = 16
        grid = domain.Grid(n)
        rng = np.random.default_rng(4)
        vx = 0.7 + rng.standard_normal((n, n))
        vy = -0.2 + rng.standard_normal((n, n))
        ux, uy = padded(grid, vx, vy)

        spectral.diffuse_and_project(grid, ux, uy, visc, dt)

        assert np.mean(grid.compact(ux)) == pytest.approx(np.mean(vx), abs=1e-12)
        assert np.mean(grid.compact(uy)) == pytest.approx(np.mean(vy), abs=1e-12)

    def test_dc_bin_untouched(self):
        grid = domain.Grid(8)
        ux = np.zeros(grid.padded_shape)
        uy = np.zeros(grid.padded_shape)
        grid.complex_view(ux)[0, 0] = [3.0, 0.0]
        grid.complex_view(uy)[0, 0] = [-1.5, 0.0]
        spectral.damp_and_project(grid, ux, uy, 10.0, 10.0)
        np.testing.assert_array_equal(grid.complex_view(ux)[0, 0], [3.0, 0.0])
        np.testing.assert_array_equal(grid.complex_view(uy)[0, 0], [-1.5, 0.0])


class TestDamping:

    def single_bin(self, grid):
        # Bin kx = 1, ky = 0 with velocity along y (already orthogonal)
        ux = np.zeros(grid.padded_shape)
        uy = np.zeros(grid.padded_shape)
        grid.complex_view(uy)[0, 1] = [1.0, 0.5]
        return ux, uy

    def magnitude(self, grid, buf):
        return float(np.hypot(*grid.complex_view(buf)[0, 1]))

    def test_magnitude_decreases_with_dt(self):
        grid = domain.Grid(8)
        mags = []
        for dt in (0.1, 0.5, 1.0, 2.0):
            ux, uy = self.single_bin(grid)
            spectral.damp_and_project(grid, ux, uy, 0.1, dt)
            mags.append(self.magnitude(grid, uy))
        assert all(a > b for a, b in zip(mags, mags[1:]))
        assert mags[0] == pytest.approx(np.hypot(1.0, 0.5) * np.exp(-0.1 * 0.1))

    def test_zero_viscosity_leaves_magnitude(self):
        grid = domain.Grid(8)
        for dt in (0.1, 1.0, 5.0):
            ux, uy = self.single_bin(grid)
            spectral.damp_and_project(grid, ux, uy, 0.0, dt)
            np.testing.assert_array_equal(grid.complex_view(uy)[0, 1], [1.0, 0.5])
            np.testing.assert_array_equal(ux, 0.0)

    def test_real_space_decay_rate(self):
        n = 16
        grid = domain.Grid(n)
        vx, vy = sine_modes(n)
        ux, uy = padded(grid, vx, vy)
        spectral.diffuse_and_project(grid, ux, uy, 0.01, 0.5)
        np.testing.assert_allclose(grid.compact(ux), np.exp(-0.005) * vx, atol=1e-12)


class TestDegenerateParameters:

    def test_negative_parameters_are_numerically_defined(self):
        n = 8
        grid = domain.Grid(n)
        rng = np.random.default_rng(9)
        ux, uy = padded(grid, rng.standard_normal((n, n)), rng.standard_normal((n, n)))
        spectral.diffuse_and_project(grid, ux, uy, 0.001, -0.04)
        assert np.all(np.isfinite(ux)) and np.all(np.isfinite(uy))

    def test_overflowing_damping_is_silent(self):
        n = 8
        grid = domain.Grid(n)
        rng = np.random.default_rng(9)
        ux, uy = padded(grid, rng.standard_normal((n, n)), rng.standard_normal((n, n)))
        with warnings.catch_warnings():
            warnings.simplefilter("error", RuntimeWarning)
            spectral.diffuse_and_project(grid, ux, uy, -1e6, 10.0)
        assert not np.all(np.isfinite(ux))


class TestEnergySpectrum:

    @pytest.mark.parametrize("n", [16, 15])
    def test_sum_equals_kinetic_energy(self, n):
        grid = domain.Grid(n)
        rng = np.random.default_rng(n)
        vx, vy = rng.standard_normal((n, n)), rng.standard_normal((n, n))
        k_bins, E_k = spectral.compute_energy_spectrum(grid, vx, vy)
        assert len(k_bins) == len(E_k)
        assert E_k.sum() == pytest.approx(utils.kinetic_energy(vx, vy), rel=1e-10)

    def test_single_mode_lands_in_its_shell(self):
        n = 16
        grid = domain.Grid(n)
        vx, vy = sine_modes(n)
        k_bins, E_k = spectral.compute_energy_spectrum(grid, vx, vy)
        assert E_k[1] == pytest.approx(utils.kinetic_energy(vx, vy), rel=1e-10)
        np.testing.assert_allclose(np.delete(E_k, 1), 0.0, atol=1e-14)
