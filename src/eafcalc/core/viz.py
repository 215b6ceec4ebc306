"""Plotting helpers (pie charts for the emission and energy breakdowns)."""
from __future__ import annotations

from typing import Dict, Iterable, List

import plotly.graph_objects as go

COLORS = ["#8884d8", "#82ca9d", "#ffc658", "#ff8042", "#8dd1e1", "#d0ed57", "#a4de6c", "#d88884"]


def _top_positive(rows: Iterable[Dict[str, float]], top_n: int) -> List[Dict[str, float]]:
    # pie slices can't be negative; credits stay in the totals and tables only
    ranked = sorted(rows, key=lambda r: r["value"], reverse=True)[:top_n]
    return [r for r in ranked if r["value"] > 0]


def make_emission_pie(rows, top_n=5, title="CO₂ emissions by material", unit="t CO₂"):
    """Top-N pie of ``{name, value}`` rows as produced by ``to_chart_rows``."""
    data = _top_positive(rows, top_n)
    fig = go.Figure(data=[go.Pie(
        labels=[r["name"] for r in data],
        values=[r["value"] for r in data],
        marker=dict(colors=[COLORS[i % len(COLORS)] for i in range(len(data))]),
        texttemplate="%{label}: %{value:,.0f}",
        hovertemplate=f"%{{label}}: %{{value:,.3f}} {unit}<extra></extra>",
        sort=False,
    )])
    fig.update_layout(title_text=title, font_size=12, showlegend=True)
    return fig


def make_energy_pie(energy_result, top_n=5, title="Energy by carrier"):
    rows = [{"name": i.name, "value": i.energy_tce} for i in energy_result.items]
    return make_emission_pie(rows, top_n=top_n, title=title, unit="tce")


__all__ = [
    "COLORS",
    "make_emission_pie",
    "make_energy_pie",
]
