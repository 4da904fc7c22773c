from __future__ import annotations

from typing import Any, Dict, List

import plotly.graph_objects as go

from .config import CHART_COLOURS
from .formatting import format_number, format_percent
from .models import CapacityResult

CHART_LABELS: Dict[str, str] = {
    "framework": "Framework",
    "em": "EM",
    "un": "UN",
    "alarms_em": "Alarms EM",
    "alarms_un": "Alarms UN",
    "aoi": "AOI",
    "error_margin": "% Error",
    "spare": "Spare",
}


def chart_items(result: CapacityResult) -> List[Dict[str, Any]]:
    """Treemap tiles in breakdown order. Zero-sized components are left out."""
    pct = result.percentages()
    return [
        {
            "key": name,
            "label": CHART_LABELS[name],
            "value": value,
            "color": CHART_COLOURS[name],
            "percentage": format_percent(pct[name]),
        }
        for name, value in result.breakdown.items()
        if value > 0
    ]


def treemap_figure(result: CapacityResult) -> go.Figure:
    items = chart_items(result)
    fig = go.Figure(
        go.Treemap(
            labels=[i["label"] for i in items],
            parents=[""] * len(items),
            values=[i["value"] for i in items],
            marker=dict(colors=[i["color"] for i in items], line=dict(color="#1a1a2e", width=2)),
            customdata=[[format_number(i["value"]), i["percentage"]] for i in items],
            hovertemplate="<b>%{label}</b><br>Value: %{customdata[0]} bytes"
            "<br>Percentage: %{customdata[1]}%<extra></extra>",
            textfont=dict(color="#fff", size=12),
        )
    )
    fig.update_layout(margin=dict(t=10, l=10, r=10, b=10))
    return fig
