"""
chart_renderer.py — Hourly demand as a filled area chart (plotly).

Pure presentation: hours go on a categorical x axis in the order given,
demand scores on a hidden y axis. No smoothing, scaling or reordering of
the data; the spline line shape is plotly's own interpolation.
"""

import json
from typing import Any

import plotly.graph_objects as go

from kenydrive.models.demand import Prediction

ACCENT = "#10b981"
AXIS_TEXT = "#94a3b8"
TOOLTIP_BG = "#1e293b"


def build_demand_chart(predictions: list[Prediction]) -> go.Figure:
    hours = [p.hour for p in predictions]
    scores = [p.demand_score for p in predictions]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=hours,
        y=scores,
        mode="lines",
        name="Demand",
        fill="tozeroy",
        fillcolor="rgba(16, 185, 129, 0.35)",
        line=dict(color=ACCENT, width=2, shape="spline"),
        hovertemplate="<b>%{x}</b><br>Demand: %{y}<extra></extra>",
    ))
    fig.update_layout(
        height=256,
        margin=dict(t=10, r=10, l=0, b=0),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        showlegend=False,
        hoverlabel=dict(bgcolor=TOOLTIP_BG, font_color="#f8fafc", bordercolor=TOOLTIP_BG),
        xaxis=dict(
            type="category",
            categoryorder="array",
            categoryarray=hours,
            showgrid=False,
            showline=False,
            ticks="",
            tickfont=dict(size=12, color=AXIS_TEXT),
        ),
        yaxis=dict(visible=False),
    )
    return fig


def chart_to_json(predictions: list[Prediction]) -> dict[str, Any]:
    """Plotly figure spec ({"data": [...], "layout": {...}}) for a JS client."""
    return json.loads(build_demand_chart(predictions).to_json())


def chart_to_html(predictions: list[Prediction]) -> str:
    """Embeddable <div> fragment; plotly.js is loaded from the CDN."""
    return build_demand_chart(predictions).to_html(full_html=False, include_plotlyjs="cdn")
