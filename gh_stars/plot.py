"""ASCII line plots for :class:`~gh_stars.render.GraphView` payloads."""

from __future__ import annotations

import math
from typing import Sequence

import asciichartpy

from .render import GraphView


def resample(data: Sequence[float], width: int) -> list[float]:
    """Stretch or squeeze ``data`` to ``width`` points by linear interpolation."""

    if not data or width <= 0 or len(data) == width:
        return list(data)
    if width == 1:
        return [data[-1]]
    if len(data) == 1:
        return [data[0]] * width

    factor = (len(data) - 1) / (width - 1)
    result = [data[0]]
    for i in range(1, width - 1):
        spring = i * factor
        before = math.floor(spring)
        after = math.ceil(spring)
        fraction = spring - before
        result.append(data[before] + (data[after] - data[before]) * fraction)
    result.append(data[-1])
    return result


def plot_graph(view: GraphView) -> str:
    """Render the series with its y-axis labels and the caption underneath."""

    cfg = {
        "height": view.height,
        "offset": view.offset + 2,
        "format": "{:>%d.%df} " % (view.offset, view.precision),
    }
    color = getattr(asciichartpy, view.color, None)
    if isinstance(color, str):
        cfg["colors"] = [color]
    chart = asciichartpy.plot(resample(view.series, view.width), cfg)
    return f"{chart}\n{' ' * (view.offset + 2)}{view.caption}"


__all__ = ["plot_graph", "resample"]
