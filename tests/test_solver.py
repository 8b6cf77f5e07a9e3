"""
Tests for the velocity/density steps and the per-tick orchestrator.
"""

import numpy as np
import pytest

from smoke2d import config, domain, forcing, solver, utils


def make_sim(n=8, **kwargs):
    return solver.Simulation.create(config.SimulationParams(n=n, **kwargs))


class TestConstruction:

    def test_create_allocates_matching_grid(self):
        sim = make_sim(12)
        assert sim.state.grid.n == 12
        assert sim.iteration == 0 and sim.sim_time == 0.0
        assert sim.wavenumbers[0].shape == (12, 7)

    def test_create_with_single_precision(self):
        sim = solver.Simulation.create(config.SimulationParams(n=8), dtype=np.float32)
        assert sim.state.vx.dtype == np.float32
        sim.tick()
        assert sim.state.vx.dtype == np.float32

    def test_grid_size_mismatch(self):
        with pytest.raises(ValueError):
            solver.Simulation(domain.initialize(8), config.SimulationParams(n=16))


class TestPause:

    def test_paused_tick_is_a_no_op(self):
        sim = make_sim(paused=True)
        calls = []
        sim.add_render_listener(lambda s, v: calls.append(s.iteration))
        sim.state.vx[...] = 1.0

        assert sim.tick() is False
        assert calls == []
        assert sim.iteration == 0
        np.testing.assert_array_equal(sim.state.vx, 1.0)

    def test_commands_are_applied_while_paused(self):
        sim = make_sim(paused=True)
        sim.queue.put(forcing.InjectDensity(2, 3, 10.0))
        sim.tick()
        assert len(sim.queue) == 0
        assert sim.state.rho[3, 2] == 10.0
        assert sim.state.rho0[3, 2] == 0.0

    def test_toggle_pause_command_resumes(self):
        sim = make_sim(paused=True)
        sim.queue.put(forcing.TogglePause())
        assert sim.tick() is True
        assert not sim.paused
        assert sim.iteration == 1

    def test_toggle_pause_method(self):
        sim = make_sim()
        assert sim.toggle_pause() is True
        assert sim.tick() is False


class TestTick:

    def test_stationary_smoke_decays_exactly(self):
        sim = make_sim(dt=0.0, viscosity=0.0)
        sim.queue.put(forcing.InjectDensity(3, 2, 10.0))
        sim.tick()
        assert sim.state.rho[2, 3] == 9.95
        assert np.count_nonzero(sim.state.rho) == 1
        np.testing.assert_array_equal(sim.state.vx, 0.0)

    def test_time_bookkeeping(self):
        sim = make_sim(dt=0.04)
        for _ in range(3):
            sim.tick()
        assert sim.iteration == 3
        assert sim.sim_time == pytest.approx(0.12)

    def test_runtime_parameter_change(self):
        sim = make_sim(dt=0.04)
        sim.queue.put(forcing.SetParameter("dt", 0.1))
        sim.tick()
        assert sim.sim_time == pytest.approx(0.1)

    def test_velocity_is_divergence_free(self):
        n = 15
        sim = make_sim(n, dt=0.1, viscosity=0.001)
        sim.queue.extend([forcing.InjectForce(4, 7, 0.1, 0.0),
                          forcing.InjectForce(10, 3, -0.05, 0.08),
                          forcing.InjectDensity(4, 7, 10.0)])
        for _ in range(5):
            sim.tick()
        assert utils.compute_max_velocity(sim.state.vx, sim.state.vy) > 0.0
        assert utils.max_divergence(sim.state.grid, sim.state.vx, sim.state.vy) < 1e-12

    def test_divergence_diagnostic_on_even_grid(self):
        sim = make_sim(16, dt=0.1, viscosity=0.001)
        sim.queue.extend([forcing.InjectForce(4, 7, 0.1, 0.0),
                          forcing.InjectForce(10, 3, -0.05, 0.08)])
        for _ in range(5):
            sim.tick()
        assert sim.diagnostics()["max_speed"] > 1e-3
        assert sim.diagnostics()["divergence"] < 1e-12

    def test_uniform_flow_is_preserved(self):
        sim = make_sim(16, dt=0.04, viscosity=0.01)
        sim.state.vx[...] = 0.3
        sim.state.vy[...] = -0.1
        for _ in range(3):
            sim.tick()
        np.testing.assert_allclose(sim.state.vx, 0.3, atol=1e-12)
        np.testing.assert_allclose(sim.state.vy, -0.1, atol=1e-12)

    def test_uniform_flow_carries_smoke(self):
        # 0.04 * 25 * 1.0 = one cell per tick
        sim = make_sim(25, dt=0.04, viscosity=0.0)
        sim.state.vx[...] = 1.0
        sim.state.rho[5, 5] = 1.0
        sim.tick()
        assert np.argmax(sim.state.rho) == 5 * 25 + 6
        assert sim.state.rho.sum() == pytest.approx(0.995)

    def test_negative_time_step_stays_finite(self):
        sim = make_sim(dt=-0.04)
        sim.queue.put(forcing.InjectForce(3, 3, 0.1, 0.1))
        for _ in range(10):
            sim.tick()
        assert np.all(np.isfinite(sim.state.vx))
        assert np.all(np.isfinite(sim.state.rho))

    def test_stage_order(self, monkeypatch):
        sim = make_sim()
        order = []
        monkeypatch.setattr(forcing, "apply_command", lambda *a: order.append("input"))
        monkeypatch.setattr(forcing, "prepare_tick", lambda *a: order.append("forcing"))
        monkeypatch.setattr(solver, "step_velocity", lambda *a: order.append("velocity"))
        monkeypatch.setattr(solver, "step_density", lambda *a: order.append("density"))
        sim.add_render_listener(lambda s, v: order.append("render"))

        sim.queue.put(forcing.TogglePause())
        sim.tick()
        assert order == ["input", "forcing", "velocity", "density", "render"]

    def test_listener_gets_read_only_views(self):
        sim = make_sim()
        received = {}
        sim.add_render_listener(lambda s, views: received.update(views))
        sim.tick()
        assert set(received) == {"vx", "vy", "fx", "fy", "rho"}
        with pytest.raises(ValueError):
            received["rho"][0, 0] = 1.0


class TestRun:

    def test_headless_run_with_stirrer(self):
        sim = make_sim(15)
        records = sim.run(6, stirrer=forcing.orbit_stirrer(15), log_every=2)
        assert [r["tick"] for r in records] == [1, 2, 3, 4, 5, 6]
        assert records[-1]["sim_time"] == pytest.approx(6 * 0.04)
        assert records[-1]["density"] > 0.0
        assert records[-1]["energy"] > 0.0
        assert records[-1]["divergence"] < 1e-10

    def test_paused_run_records_nothing(self):
        sim = make_sim(paused=True)
        assert sim.run(4) == []

    def test_run_reraises(self):
        def broken():
            yield []
            raise RuntimeError("stirrer failed")

        sim = make_sim()
        with pytest.raises(RuntimeError):
            sim.run(5, stirrer=broken())
        assert sim.iteration == 1
