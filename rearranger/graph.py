"""
Graph builder for Rearranger.

Plots each side of a single-variable equation as a line, so a student can
see that a rearranging step keeps the two lines crossing at the same x.
Anything with zero or several variables gets a text figure instead.
"""

import numpy as np
from matplotlib.figure import Figure
from sympy import Symbol, lambdify

from rearranger.model import Equation
from rearranger.symbolic import free_variables, side_to_expr

# ── palette ────────────────────────────────────────────────────────────────
C_BG    = "#0f0f0f"
C_AX    = "#181818"
C_GRID  = "#252525"
C_TICK  = "#666666"
C_SPINE = "#333333"
C_LEFT  = "#1a8cff"
C_RIGHT = "#ff8c42"
C_TEXT  = "#cccccc"

X_RANGE = (-10.0, 10.0)
SAMPLES = 200


def _style_axes(ax, fig):
    fig.patch.set_facecolor(C_BG)
    ax.set_facecolor(C_AX)
    ax.tick_params(colors=C_TICK, labelsize=9)
    ax.xaxis.label.set_color(C_TEXT)
    ax.yaxis.label.set_color(C_TEXT)
    ax.title.set_color(C_TEXT)
    for spine in ax.spines.values():
        spine.set_edgecolor(C_SPINE)
    ax.grid(True, color=C_GRID, linewidth=0.8, linestyle="--", alpha=0.7)
    ax.axhline(0, color=C_SPINE, linewidth=0.8)
    ax.axvline(0, color=C_SPINE, linewidth=0.8)


def _text_figure(title: str, message: str) -> Figure:
    fig = Figure(figsize=(6, 2.5))
    fig.patch.set_facecolor(C_BG)
    ax = fig.add_subplot(111)
    ax.set_facecolor(C_BG)
    ax.axis("off")
    ax.text(0.5, 0.65, title, ha="center", va="center",
            fontsize=13, color=C_TEXT, transform=ax.transAxes)
    ax.text(0.5, 0.35, message, ha="center", va="center",
            fontsize=10, color=C_TICK, transform=ax.transAxes)
    return fig


def _sample(expr, var, xs):
    """Evaluate *expr* over *xs*; constants broadcast to the full array."""
    ys = lambdify(var, expr, modules="numpy")(xs)
    return np.broadcast_to(np.asarray(ys, dtype=float), xs.shape)


def build_figure(equation: Equation, title: str = "") -> Figure:
    names = free_variables(equation)
    if len(names) != 1:
        reason = "no variable" if not names else f"variables {', '.join(names)}"
        return _text_figure("Graph unavailable",
                            f"Only single-variable equations can be plotted ({reason}).")

    var = Symbol(names[0])
    xs = np.linspace(*X_RANGE, SAMPLES)

    fig = Figure(figsize=(6, 4))
    ax = fig.add_subplot(111)
    _style_axes(ax, fig)
    ax.plot(xs, _sample(side_to_expr(equation.left), var, xs),
            color=C_LEFT, linewidth=2, label="left side")
    ax.plot(xs, _sample(side_to_expr(equation.right), var, xs),
            color=C_RIGHT, linewidth=2, label="right side")
    ax.set_xlabel(names[0])
    if title:
        ax.set_title(title)
    ax.legend(facecolor=C_AX, edgecolor=C_SPINE, labelcolor=C_TEXT)
    return fig
