from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple
from warnings import warn

import numpy as np

from .util import uncertainty_to_string


def plot_profile(
    interval: Any,
    name: Optional[str] = None,
    *,
    ax: Optional[Any] = None,
    x_range: Optional[Tuple[float, float]] = None,
    n_points: int = 60,
    show_limits: bool = True,
    line_kwargs: Optional[Mapping[str, Any]] = None,
    threshold_kwargs: Optional[Mapping[str, Any]] = None,
) -> Tuple[Any, Any]:
    """Plot the profiled ΔNLL of one parameter of interest.

    Parameters
    ----------
    interval : LikelihoodInterval
        Interval whose profile is drawn.
    name : str, optional
        POI to scan. Defaults to the first POI. Other POIs stay at their
        best-fit values.
    ax : matplotlib.axes.Axes, optional
        If None, a new figure/axes is created.
    x_range : (float, float), optional
        Scan range. Defaults to the interval limits widened by half their span.
    n_points : int
        Number of scan points.
    show_limits : bool
        If True, mark the limits and annotate the best fit.
    line_kwargs, threshold_kwargs : dict, optional
        Styling kwargs for the profile curve and the threshold line.
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    names = interval.parameters_of_interest
    name = names[0] if name is None else name
    if name not in names:
        raise KeyError(f"{name!r} is not a parameter of interest.")

    line_kwargs = dict(line_kwargs or {})
    threshold_kwargs = dict(threshold_kwargs or {})
    best = interval.best_fit[name]
    threshold = interval.threshold()

    lo = hi = None
    if show_limits or x_range is None:
        try:
            lo, hi = interval.limits(name)
        except (RuntimeError, ValueError) as exc:
            warn(f"plot_profile: could not compute limits: {exc}", UserWarning)

    if x_range is None:
        if lo is None or hi is None:
            raise ValueError("plot_profile needs x_range when limits are unavailable.")
        span = hi - lo
        x_range = (lo - 0.5 * span, hi + 0.5 * span)

    xs = np.linspace(float(x_range[0]), float(x_range[1]), int(n_points))
    ys = np.array([interval.profile({name: float(x)}) for x in xs], dtype=float)

    line_kwargs.setdefault("label", f"profile of {name}")
    ax.plot(xs, ys, **line_kwargs)

    threshold_kwargs.setdefault("color", "gray")
    threshold_kwargs.setdefault("linestyle", "--")
    threshold_kwargs.setdefault(
        "label", f"{100.0 * interval.confidence_level:g}% CL"
    )
    ax.axhline(threshold, **threshold_kwargs)

    if show_limits and lo is not None and hi is not None:
        ax.axvline(lo, color="gray", linestyle=":")
        ax.axvline(hi, color="gray", linestyle=":")
        if best.error is not None:
            text = f"{name}={uncertainty_to_string(best.value, best.error, precision='auto')}"
        else:
            text = f"{name}={best.value:.4g}"
        ax.text(
            0.02,
            0.98,
            f"{text}\n[{lo:.4g}, {hi:.4g}]",
            ha="left",
            va="top",
            fontsize=9,
            transform=ax.transAxes,
        )

    ax.set_xlabel(name)
    ax.set_ylabel(r"$\Delta$NLL")
    return fig, ax
