"""
Interactive matplotlib front end for a running simulation.

The viewer is both render and input collaborator of a Simulation:
- Each animation frame calls sim.tick() and redraws from the read-only
  field views handed to its render listener
- Mouse drags and key presses are turned into commands and queued; the
  simulation applies them at the start of its next tick

Key bindings:
    t/T   decrease/increase the time step by 0.001
    v/V   viscosity x0.2 / x5
    a     pause / resume the animation
    x     toggle smoke       y   toggle hedgehogs
    m     cycle the smoke colour map
    c     cycle the hedgehog colouring (white, direction, smoke hue, red)
    s/S   hedgehog scale x0.8 / x1.2
    o/O   one more / one fewer hedgehog column
    p/P   one more / one fewer hedgehog row
    G     hedgehogs show velocity / force
    q     quit
"""

import logging

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation

from smoke2d import advection, forcing

from . import colormaps

logger = logging.getLogger(__name__)

# Window size (pixels) the hedgehog scale is expressed against
REFERENCE_PIXELS = 900.0

HEDGEHOG_WHITE = 0
HEDGEHOG_DIRECTION = 1
HEDGEHOG_DENSITY = 2
HEDGEHOG_RED = 3
HEDGEHOG_COLORS = (HEDGEHOG_WHITE, HEDGEHOG_DIRECTION, HEDGEHOG_DENSITY, HEDGEHOG_RED)

KEY_COMMANDS = {
    "t": forcing.StepParameter("dt", -0.001),
    "T": forcing.StepParameter("dt", 0.001),
    "v": forcing.ScaleParameter("viscosity", 0.2),
    "V": forcing.ScaleParameter("viscosity", 5.0),
    "a": forcing.TogglePause(),
}

VIEW_KEYS = ("x", "y", "m", "c", "s", "S", "G", "o", "O", "p", "P", "q")

# Key -> (axis, step) of the hedgehog grid, axis 0 = columns, 1 = rows
DIM_KEYS = {"o": (0, 1), "O": (0, -1), "p": (1, 1), "P": (1, -1)}


def _release_default_keymaps(keys):
    """Remove our keys from matplotlib's default navigation shortcuts."""
    for name in list(plt.rcParams.keys()):
        if not name.startswith("keymap."):
            continue
        bound = plt.rcParams[name]
        kept = [k for k in bound if k not in keys]
        if len(kept) != len(bound):
            plt.rcParams[name] = kept


class SmokeViewer:
    """
    Matplotlib window showing smoke and velocity hedgehogs.

    Hedgehogs live on their own (columns x rows) glyph grid; the vector
    field is bilinearly sampled at the glyph positions.

    Args:
        sim (Simulation): Simulation to drive
        window (float): Figure size in inches
        interval (int): Milliseconds between frames
        vec_scale (float): Initial hedgehog scaling
        hedgehog_dims (tuple, optional): (columns, rows) of hedgehogs,
            one per cell by default
    """

    def __init__(self, sim, window=9.0, interval=20, vec_scale=1000.0, hedgehog_dims=None):
        self.sim = sim
        self.n = sim.state.grid.n
        self.interval = interval
        self.vec_scale = vec_scale
        if hedgehog_dims is None:
            hedgehog_dims = (self.n, self.n)
        self.hedgehog_dims = [max(1, int(d)) for d in hedgehog_dims]

        self.draw_smoke = False
        self.draw_vecs = True
        self.color_mode = colormaps.COLOR_BLACKWHITE
        self.hedgehog_color = HEDGEHOG_WHITE
        self.show_force = False

        self.pointer = forcing.PointerDrag(self.n)
        self.dragging = False
        self._views = sim.state.render_views()
        self._animation = None
        self.quiver = None

        _release_default_keymaps(set(KEY_COMMANDS) | set(VIEW_KEYS))
        self.fig, self.ax = plt.subplots(figsize=(window, window))
        self._build_artists()

        sim.add_render_listener(self._on_render)
        self.fig.canvas.mpl_connect('button_press_event', self.on_press)
        self.fig.canvas.mpl_connect('button_release_event', self.on_release)
        self.fig.canvas.mpl_connect('motion_notify_event', self.on_motion)
        self.fig.canvas.mpl_connect('key_press_event', self.on_key)

    def _build_artists(self):
        n = self.n
        ax = self.ax
        ax.set_xlim(0, n)
        ax.set_ylim(0, n)
        ax.set_aspect('equal')
        ax.set_xticks([])
        ax.set_yticks([])
        ax.set_facecolor('black')

        self.image = ax.imshow(self._views["rho"], origin="lower", extent=[0, n, 0, n],
                               cmap=colormaps.make_colormap(self.color_mode),
                               vmin=0.0, vmax=1.0, interpolation="bilinear")
        self.image.set_visible(self.draw_smoke)
        self._build_quiver()
        self._update_title()

    def _build_quiver(self):
        """(Re)create the hedgehog glyphs for the current glyph grid."""
        if self.quiver is not None:
            self.quiver.remove()

        nx, ny = self.hedgehog_dims
        xs = np.arange(nx) * (self.n / nx)
        ys = np.arange(ny) * (self.n / ny)
        X, Y = np.meshgrid(xs, ys)
        self._glyphs = advection.locate(self.sim.state.grid, X, Y)

        vx, vy = self._vectors()
        self.quiver = self.ax.quiver(X + 0.5, Y + 0.5, vx, vy, color="white",
                                     angles="xy", scale_units="xy", scale=self._quiver_scale())

    def _quiver_scale(self):
        # Arrow length in cells = vec_scale * |v| * n / REFERENCE_PIXELS
        return REFERENCE_PIXELS / (self.vec_scale * self.n)

    def _vectors(self):
        """Velocity (or force) sampled at the hedgehog positions."""
        if self.show_force:
            vx, vy = self._views["fx"], self._views["fy"]
        else:
            vx, vy = self._views["vx"], self._views["vy"]
        return advection.resample(self._glyphs, vx), advection.resample(self._glyphs, vy)

    def _hedgehog_colors(self, vx, vy):
        if self.hedgehog_color == HEDGEHOG_DIRECTION:
            return colormaps.direction_to_rgb(vx, vy).reshape(-1, 3)
        if self.hedgehog_color == HEDGEHOG_DENSITY:
            rho = advection.resample(self._glyphs, self._views["rho"])
            return colormaps.hue_to_rgb(rho).reshape(-1, 3)
        if self.hedgehog_color == HEDGEHOG_RED:
            return "red"
        return "white"

    def _update_title(self):
        params = self.sim.params
        state = "paused" if params.paused else f"t={self.sim.sim_time:.2f}"
        self.ax.set_title(f"Smoke {self.n}x{self.n}  dt={params.dt:.3f}  "
                          f"visc={params.viscosity:.2e}  {state}")

    def _on_render(self, sim, views):
        self._views = views

    def resize_hedgehogs(self, axis, step):
        """Add (step > 0) or remove hedgehog columns (axis 0) or rows (axis 1)."""
        self.hedgehog_dims[axis] = max(1, self.hedgehog_dims[axis] + step)
        logger.info("Hedgehog grid: %d x %d", *self.hedgehog_dims)
        self._build_quiver()

    def redraw(self):
        """Refresh the artists from the latest field views."""
        self.image.set_visible(self.draw_smoke)
        if self.draw_smoke:
            self.image.set_data(self._views["rho"])
            self.image.set_cmap(colormaps.make_colormap(self.color_mode))

        self.quiver.set_visible(self.draw_vecs)
        if self.draw_vecs:
            vx, vy = self._vectors()
            self.quiver.set_UVC(vx, vy)
            self.quiver.scale = self._quiver_scale()
            self.quiver.set_color(self._hedgehog_colors(vx, vy))

        self._update_title()
        return self.image, self.quiver

    def _pointer(self, event):
        # Data coordinates -> pixel-style coordinates of an (n+1)-wide window
        size = self.n + 1
        return event.xdata, size - event.ydata, size, size

    def on_press(self, event):
        if event.button != 1 or event.inaxes is not self.ax:
            return
        self.dragging = True
        self.pointer.release()
        self.sim.queue.extend(self.pointer.drag(*self._pointer(event)))

    def on_release(self, event):
        if event.button == 1:
            self.dragging = False
            self.pointer.release()

    def on_motion(self, event):
        if not self.dragging or event.inaxes is not self.ax or event.xdata is None:
            return
        self.sim.queue.extend(self.pointer.drag(*self._pointer(event)))

    def on_key(self, event):
        key = event.key
        if key in KEY_COMMANDS:
            self.sim.queue.put(KEY_COMMANDS[key])
        elif key in DIM_KEYS:
            self.resize_hedgehogs(*DIM_KEYS[key])
        elif key == "x":
            self.draw_smoke = not self.draw_smoke
            if not self.draw_smoke:
                self.draw_vecs = True
        elif key == "y":
            self.draw_vecs = not self.draw_vecs
            if not self.draw_vecs:
                self.draw_smoke = True
        elif key == "m":
            self.color_mode = (self.color_mode + 1) % len(colormaps.COLOR_MODES)
            logger.info("Smoke colour map: %s", colormaps.COLOR_NAMES[self.color_mode])
        elif key == "c":
            self.hedgehog_color = (self.hedgehog_color + 1) % len(HEDGEHOG_COLORS)
        elif key == "s":
            self.vec_scale *= 0.8
        elif key == "S":
            self.vec_scale *= 1.2
        elif key == "G":
            self.show_force = not self.show_force
            logger.info("Hedgehogs show %s", "force" if self.show_force else "velocity")
        elif key == "q":
            plt.close(self.fig)
            return
        self.redraw()

    def _frame(self, _):
        self.sim.tick()
        return self.redraw()

    def show(self):
        """Start the animation and block until the window is closed."""
        self._animation = FuncAnimation(self.fig, self._frame, interval=self.interval,
                                        blit=False, cache_frame_data=False)
        plt.show()
