"""Plotly preview of chart descriptors."""

from __future__ import annotations

import plotly.graph_objects as go
import pytest
from billrings import aggregate, chart, synth, viz


def test_empty_descriptor_renders_placeholder() -> None:
    fig = viz.plot_descriptor_preview({})

    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 0
    assert fig.layout.annotations[0].text == "No transactions in this period."


def test_preview_draws_one_trace_per_series() -> None:
    payload = aggregate.process_bill_grid(synth.generate_bill_grid(rows=300, seed=13))
    descriptor = chart.build_chart_descriptor(payload, list(payload["periods"])[-1])

    fig = viz.plot_descriptor_preview(descriptor)

    assert len(fig.data) == len(descriptor["series"])
    kinds = {type(trace).__name__ for trace in fig.data}
    assert kinds == {"Barpolar", "Scatterpolar"}
    subplots = {trace.subplot for trace in fig.data}
    assert subplots == {"polar", "polar2", "polar3", "polar4", "polar5", "polar6"}
    assert fig.layout.polar.hole == 0
    assert fig.layout.polar6.hole == pytest.approx(75 / 90)
