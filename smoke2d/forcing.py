"""
External forcing: decay of injected impulses and the input command queue.

This module provides:
1. The per-tick decay that hands forces over to the velocity solver
2. Direct injection of force impulses and smoke into grid cells
3. Pointer-drag decoding (window pixels -> cell + impulse)
4. A bounded command queue drained once per tick by the orchestrator
5. A scripted stirrer that replaces a dragged pointer in headless runs

Forces are decayed, never reset: a dragged impulse fades over several
ticks and tiny residual forces are never floored to zero.
"""

import logging
import math
from collections import deque, namedtuple

import numpy as np

logger = logging.getLogger(__name__)

DENSITY_DECAY = 0.995       # smoke kept per tick
FORCE_DECAY = 0.85          # force kept per tick
INJECTED_DENSITY = 10.0     # smoke value set under the pointer
DRAG_STRENGTH = 0.1         # length of the impulse of one drag event


# Input commands
InjectForce = namedtuple("InjectForce", ["x", "y", "dx", "dy"])
InjectDensity = namedtuple("InjectDensity", ["x", "y", "value"])
SetParameter = namedtuple("SetParameter", ["name", "value"])
ScaleParameter = namedtuple("ScaleParameter", ["name", "factor"])
StepParameter = namedtuple("StepParameter", ["name", "delta"])
TogglePause = namedtuple("TogglePause", [])


def prepare_tick(state):
    """
    Decay smoke and forces, and hand the forces to the velocity solver.

    rho0 = 0.995 * rho, f *= 0.85, then (vx0, vy0) = f.

    Args:
        state (FluidState): Simulation buffers (modified in place)
    """
    np.multiply(state.rho, DENSITY_DECAY, out=state.rho0)
    state.fx *= FORCE_DECAY
    state.fy *= FORCE_DECAY
    state.vx0[...] = state.fx
    state.vy0[...] = state.fy


def inject_force(state, x, y, dx, dy):
    """Add a force impulse (dx, dy) at cell (x, y), clamped to the grid."""
    grid = state.grid
    col, row = grid.clamp(x), grid.clamp(y)
    state.fx[row, col] += dx
    state.fy[row, col] += dy


def inject_density(state, x, y, value=INJECTED_DENSITY):
    """Set the smoke density at cell (x, y), clamped to the grid."""
    grid = state.grid
    state.rho[grid.clamp(y), grid.clamp(x)] = value


def pointer_to_cell(mx, my, width, height, n):
    """
    Map a window pixel position to a grid cell.

    The window origin is the top-left corner while row 0 of the grid is at
    the bottom. Positions are scaled by n + 1 and clamped to [0, n-1].

    Args:
        mx, my (float): Pointer position in pixels
        width, height (float): Window size in pixels
        n (int): Grid size

    Returns:
        tuple: (x, y) cell indices
    """
    xi = math.floor((n + 1) * (mx / width))
    yi = math.floor((n + 1) * ((height - my) / height))
    x = min(max(xi, 0), n - 1)
    y = min(max(yi, 0), n - 1)
    return x, y


def drag_impulse(dx, dy, strength=DRAG_STRENGTH):
    """Scale a pointer displacement to length `strength` (zero stays zero)."""
    length = math.hypot(dx, dy)
    if length == 0.0:
        return 0.0, 0.0
    return dx * strength / length, dy * strength / length


class PointerDrag:
    """
    Decode pointer drag events into injection commands.

    Remembers the previous pointer position (y measured upward) so that
    each drag event pushes the fluid along the direction of motion.
    """

    def __init__(self, n):
        self.n = n
        self.last = None

    def release(self):
        """Forget the previous position (the next drag starts a new stroke)."""
        self.last = None

    def drag(self, mx, my, width, height):
        """
        Commands for one drag event at pixel (mx, my).

        Returns:
            list: [InjectForce, InjectDensity] at the cell under the pointer
        """
        x, y = pointer_to_cell(mx, my, width, height, self.n)
        py = height - my
        if self.last is None:
            dx, dy = 0.0, 0.0
        else:
            dx, dy = drag_impulse(mx - self.last[0], py - self.last[1])
        self.last = (mx, py)
        return [InjectForce(x, y, dx, dy), InjectDensity(x, y, INJECTED_DENSITY)]


def orbit_stirrer(n, radius=0.25, period=120, strength=DRAG_STRENGTH, density=INJECTED_DENSITY):
    """
    Scripted pointer orbiting the grid centre.

    Yields, once per tick, the commands a user dragging the pointer around
    a circle would produce: a tangential impulse and a smoke injection.

    Args:
        n (int): Grid size
        radius (float): Orbit radius as a fraction of n
        period (int): Ticks per revolution
        strength (float): Impulse length per tick
        density (float): Injected smoke value

    Yields:
        list: Commands for one tick
    """
    k = 0
    while True:
        theta = 2.0 * np.pi * k / period
        x = int(round(0.5 * n + radius * n * np.cos(theta)))
        y = int(round(0.5 * n + radius * n * np.sin(theta)))
        dx = -strength * np.sin(theta)
        dy = strength * np.cos(theta)
        yield [InjectForce(x, y, dx, dy), InjectDensity(x, y, density)]
        k += 1


class CommandQueue:
    """
    Bounded FIFO of input commands.

    Input handlers put commands; the orchestrator drains them once per
    tick before the forcing decay. When full, the oldest command is dropped.
    """

    def __init__(self, maxlen=4096):
        if maxlen <= 0:
            raise ValueError("Command queue length must be positive")
        self._queue = deque(maxlen=maxlen)
        self.dropped = 0

    def __len__(self):
        return len(self._queue)

    @property
    def maxlen(self):
        return self._queue.maxlen

    def put(self, cmd):
        if len(self._queue) == self._queue.maxlen:
            self.dropped += 1
            if self.dropped == 1:
                logger.warning("Command queue full (%d); dropping oldest commands", self._queue.maxlen)
            else:
                logger.debug("Dropped command %r", self._queue[0])
        self._queue.append(cmd)

    def extend(self, cmds):
        for cmd in cmds:
            self.put(cmd)

    def drain(self):
        """Yield and remove queued commands in arrival order."""
        while self._queue:
            yield self._queue.popleft()


def apply_command(state, params, cmd):
    """
    Execute one input command.

    Args:
        state (FluidState): Simulation buffers
        params (SimulationParams): Mutable parameters
        cmd: One of the command tuples defined in this module

    Raises:
        ValueError: For an unknown parameter name
        TypeError: For an unknown command
    """
    if isinstance(cmd, InjectForce):
        inject_force(state, cmd.x, cmd.y, cmd.dx, cmd.dy)
    elif isinstance(cmd, InjectDensity):
        inject_density(state, cmd.x, cmd.y, cmd.value)
    elif isinstance(cmd, SetParameter):
        params.set(cmd.name, cmd.value)
    elif isinstance(cmd, ScaleParameter):
        params.set(cmd.name, getattr(params, cmd.name, 0.0) * cmd.factor)
    elif isinstance(cmd, StepParameter):
        params.set(cmd.name, getattr(params, cmd.name, 0.0) + cmd.delta)
    elif isinstance(cmd, TogglePause):
        params.paused = not params.paused
        logger.info("Simulation %s", "paused" if params.paused else "resumed")
    else:
        raise TypeError(f"Unknown command {cmd!r}")

    if isinstance(cmd, (SetParameter, ScaleParameter, StepParameter)):
        logger.info("%s set to %g", cmd.name, getattr(params, cmd.name))
