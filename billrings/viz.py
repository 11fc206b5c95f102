"""Plotly preview of a chart descriptor for the Streamlit shell.

The descriptor targets an external polar renderer; this module draws an
approximation with Plotly polar subplots so the rings can be inspected
without that renderer. Every polar region becomes one subplot sharing the
page centre.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Mapping

import pandas as pd
import plotly.graph_objects as go

from .merge import Descriptor

BAR_FILL = 0.8


def _empty_figure(message: str) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        showarrow=False,
        x=0.5,
        y=0.5,
        xref="paper",
        yref="paper",
        font=dict(size=14, color="#6c757d"),
    )
    fig.update_layout(margin=dict(l=0, r=0, t=20, b=20))
    return fig


def _subplot_name(position: int) -> str:
    return "polar" if position == 0 else f"polar{position + 1}"


def _percent(value: str) -> float:
    return float(str(value).rstrip("%")) / 100.0


def _polar_layout(region: Mapping[str, Any]) -> dict[str, Any]:
    inner, outer = (_percent(v) for v in region["radius"])
    half = outer / 2
    return dict(
        domain=dict(x=[0.5 - half, 0.5 + half], y=[0.5 - half, 0.5 + half]),
        hole=inner / outer if outer else 0.0,
        bgcolor="rgba(0,0,0,0)",
        radialaxis=dict(visible=False),
        angularaxis=dict(visible=False, direction="clockwise", rotation=90, thetaunit="degrees"),
        barmode="stack",
    )


def _axes_by_polar(descriptor: Descriptor, key: str) -> dict[int, dict[str, Any]]:
    return {axis.get("polarIndex", 0): axis for axis in descriptor.get(key, [])}


def _series_color(series: Mapping[str, Any]) -> str | None:
    return (series.get("itemStyle") or {}).get("color")


def _bar_trace(series: Mapping[str, Any], angle: Mapping[str, Any], radius: Mapping[str, Any]) -> go.Barpolar:
    categories = radius.get("data", [])
    start, end = angle.get("startAngle", 90), angle.get("endAngle", -270)
    span = start - end
    step = span / max(len(categories), 1)
    points = series.get("data", [])
    colors = [
        (point.get("itemStyle") or {}).get("color") or _series_color(series) or "#cccccc"
        for point in points
    ]
    return go.Barpolar(
        name=series.get("name"),
        r=[point["value"] for point in points],
        theta=[(90 - start) + (i + 0.5) * step for i in range(len(points))],
        width=[step * BAR_FILL] * len(points),
        marker=dict(color=colors),
        text=categories,
        hovertemplate="%{text}<br>%{r:,.2f}<extra></extra>",
        showlegend=False,
    )


def _line_trace(series: Mapping[str, Any], angle: Mapping[str, Any], base: list[float]) -> go.Scatterpolar:
    labels = angle.get("data", [])
    positions = {label: index for index, label in enumerate(labels)}
    count = max(len(labels), 1)
    r, theta = [], []
    for i, (amount, label) in enumerate(series.get("data", [])):
        if i < len(base):
            base[i] += amount
            amount = base[i]
        r.append(amount)
        theta.append(positions.get(label, 0) / count * 360)
    return go.Scatterpolar(
        name=series.get("name"),
        r=r,
        theta=theta,
        mode="lines",
        fill="toself",
        line=dict(color=_series_color(series), shape="spline"),
        opacity=0.6,
        showlegend=False,
    )


def _scatter_trace(series: Mapping[str, Any], angle: Mapping[str, Any]) -> go.Scatterpolar:
    start = pd.Timestamp(angle["min"])
    end = pd.Timestamp(angle["max"])
    span = (end - start).total_seconds() or 1.0
    points = series.get("data", [])
    return go.Scatterpolar(
        name=series.get("name"),
        r=[point["value"][0] for point in points],
        theta=[(pd.Timestamp(point["value"][1]) - start).total_seconds() / span * 360 for point in points],
        mode="markers",
        marker=dict(
            color=_series_color(series),
            size=[point.get("symbolSize", 10) / 2 for point in points],
            opacity=0.8,
        ),
        customdata=[point["id"] for point in points],
        hovertemplate="%{r:,.2f}<extra>%{fullData.name}</extra>",
    )


def plot_descriptor_preview(descriptor: Descriptor) -> go.Figure:
    """Return a Plotly figure approximating the rings of ``descriptor``."""

    regions = descriptor.get("polar", [])
    if not regions or not descriptor.get("series"):
        return _empty_figure("No transactions in this period.")

    angles = _axes_by_polar(descriptor, "angleAxis")
    radii = _axes_by_polar(descriptor, "radiusAxis")
    stacks: dict[int, list[float]] = defaultdict(list)

    fig = go.Figure()
    layout: dict[str, Any] = {}
    for position, region in enumerate(regions):
        layout[_subplot_name(position)] = _polar_layout(region)

    for series in descriptor["series"]:
        position = series.get("polarIndex", 0)
        angle = angles.get(position, {})
        radius = radii.get(position, {})
        kind = series.get("type")
        if kind == "bar":
            trace = _bar_trace(series, angle, radius)
            bounds = [angle.get("min"), angle.get("max")]
        elif kind == "line":
            if not stacks[position]:
                stacks[position] = [0.0] * len(series.get("data", []))
            trace = _line_trace(series, angle, stacks[position])
            bounds = [radius.get("min"), radius.get("max")]
        elif kind == "scatter":
            trace = _scatter_trace(series, angle)
            bounds = [radius.get("min"), radius.get("max")]
        else:
            continue

        trace.subplot = _subplot_name(position)
        fig.add_trace(trace)
        if None not in bounds:
            layout[_subplot_name(position)]["radialaxis"]["range"] = bounds

    fig.update_layout(
        **layout,
        margin=dict(l=0, r=0, t=20, b=20),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        height=720,
    )
    return fig
