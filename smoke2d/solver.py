"""
Velocity solver, smoke transport and the per-tick orchestration.

This module contains the core simulation logic:
- Velocity step: force integration, self-advection, spectral
  viscosity + projection
- Density step: advection of smoke through the updated velocity
- Simulation: drains input commands, sequences forcing -> velocity ->
  density once per tick unless paused, and notifies render listeners
"""

import logging

import numpy as np

from . import advection
from . import domain
from . import forcing
from . import spectral
from . import utils

logger = logging.getLogger(__name__)


def step_velocity(state, dt, viscosity, wavenumbers=None):
    """
    Advance the velocity field by one time step.

    Steps:
        1. v += dt * v0 (v0 holds the decayed forces); v0 = v
        2. Self-advect: trace along v0, resample v0 into v
        3. Copy v into the padded transform buffers
        4. Spectral viscosity + divergence-free projection
        5. Copy the normalised result back into v

    Args:
        state (FluidState): Simulation buffers (must be initialised)
        dt (float): Time step
        viscosity (float): Kinematic viscosity
        wavenumbers (tuple, optional): Cached (KX, KY, K2)
    """
    grid = state.grid

    state.vx += dt * state.vx0
    state.vy += dt * state.vy0
    state.vx0[...] = state.vx
    state.vy0[...] = state.vy

    advection.advect(grid, state.vx0, state.vy0,
                     (state.vx, state.vy), (state.vx0, state.vy0), dt)

    grid.pad(state.vx, state.vx_hat)
    grid.pad(state.vy, state.vy_hat)
    spectral.diffuse_and_project(grid, state.vx_hat, state.vy_hat, viscosity, dt, wavenumbers)

    state.vx[...] = grid.compact(state.vx_hat)
    state.vy[...] = grid.compact(state.vy_hat)


def step_density(state, dt):
    """
    Carry the smoke through the updated velocity: rho0 -> rho.

    Must run after step_velocity, since it reads the new velocity.
    """
    advection.advect(state.grid, state.vx, state.vy, state.rho, state.rho0, dt)


class Simulation:
    """
    Step orchestrator.

    Each tick drains the input command queue (always, so a pause toggle can
    resume the run), then, unless paused, runs the forcing decay, the
    velocity step and the density step, and notifies render listeners with
    read-only views of the fields.

    Args:
        state (FluidState): Simulation buffers
        params (SimulationParams): Mutable parameters
        queue (CommandQueue, optional): Input command queue
    """

    def __init__(self, state, params, queue=None):
        if params.n != state.grid.n:
            raise ValueError(
                f"Parameter grid size {params.n} does not match state grid size {state.grid.n}")
        self.state = state
        self.params = params
        self.queue = queue if queue is not None else forcing.CommandQueue()
        self.wavenumbers = domain.wavenumbers(state.grid)
        self.iteration = 0
        self.sim_time = 0.0
        self._listeners = []

    @classmethod
    def create(cls, params, dtype=np.float64):
        """
        Allocate buffers for params.n and build a simulation.

        Raises:
            AllocationError: If the buffers cannot be obtained
        """
        state = domain.initialize(params.n, dtype=dtype)
        return cls(state, params)

    @property
    def paused(self):
        return self.params.paused

    def toggle_pause(self):
        self.params.paused = not self.params.paused
        return self.params.paused

    def add_render_listener(self, callback):
        """Register callback(sim, views), called after every completed tick."""
        self._listeners.append(callback)

    def process_input(self):
        """Apply every queued command; returns how many were applied."""
        count = 0
        for cmd in self.queue.drain():
            forcing.apply_command(self.state, self.params, cmd)
            count += 1
        return count

    def tick(self):
        """
        Run one simulation tick.

        Returns:
            bool: True if the fields were advanced, False if paused
        """
        self.process_input()
        if self.params.paused:
            return False

        dt = self.params.dt
        forcing.prepare_tick(self.state)
        step_velocity(self.state, dt, self.params.viscosity, self.wavenumbers)
        step_density(self.state, dt)

        self.iteration += 1
        self.sim_time += dt

        if self._listeners:
            views = self.state.render_views()
            for callback in self._listeners:
                callback(self, views)
        return True

    def diagnostics(self):
        record = utils.collect_diagnostics(self.state, self.wavenumbers)
        record['tick'] = self.iteration
        record['sim_time'] = self.sim_time
        return record

    def run(self, n_ticks, stirrer=None, log_every=50):
        """
        Headless driver: tick n_ticks times, optionally fed by a scripted stirrer.

        Args:
            n_ticks (int): Number of ticks to attempt
            stirrer (iterator, optional): Yields a list of commands per tick
            log_every (int): Ticks between progress log lines

        Returns:
            list: Diagnostics dict of every completed tick
        """
        records = []
        try:
            logger.info("Starting %d ticks on %r with %r", n_ticks, self.state.grid, self.params)

            for _ in range(n_ticks):
                if stirrer is not None:
                    self.queue.extend(next(stirrer))

                if not self.tick():
                    continue

                record = self.diagnostics()
                records.append(record)

                if (self.iteration - 1) % log_every == 0:
                    logger.info(
                        "it=%6d t=%9.4f dt=%8.2e visc=%8.2e max|u|=%10.3e E=%10.3e div=%9.2e rho=%10.3e",
                        self.iteration, self.sim_time, self.params.dt, self.params.viscosity,
                        record['max_speed'], record['energy'], record['divergence'], record['density']
                    )

        except Exception:
            logger.exception("Exception in main loop at it=%d", self.iteration)
            raise

        logger.info("Completed %d ticks (t=%.4f)", self.iteration, self.sim_time)
        return records
