from __future__ import annotations

import math

from momentum.constants import (
    DAY_LABELS,
    EMPTY_CELL_COLOR,
    LEVEL_FULL,
    LEVEL_OPACITY,
    PLOT_THEME,
    WEEKDAY_NAMES,
)


def hex_to_rgba(color: str, alpha: float) -> str:
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Expected a #rrggbb color, got {color!r}")
    red, green, blue = (int(value[idx : idx + 2], 16) for idx in (0, 2, 4))
    return f"rgba({red}, {green}, {blue}, {alpha})"


def weekday_labels(week_starts_on: int) -> list[str]:
    return [DAY_LABELS[(week_starts_on + offset) % 7] for offset in range(7)]


def heatmap_matrix(grid):
    import numpy as np

    z = np.full((7, grid.week_count), np.nan)
    text = [["" for _ in range(grid.week_count)] for _ in range(7)]
    for day_index, row in enumerate(grid.rows()):
        for week_index, cell in enumerate(row):
            if not cell.in_range:
                continue
            z[day_index, week_index] = cell.level
            noun = "completion" if cell.count == 1 else "completions"
            text[day_index][week_index] = f"{cell.date.strftime('%b')} {cell.date.day}, {cell.date.year}: {cell.count} {noun}"
    return z, text


def contribution_heatmap(grid, title="", color="#10B981"):
    import plotly.graph_objects as go

    z, hover_text = heatmap_matrix(grid)
    # plain lists keep placeholders as JSON nulls instead of a typed-array blob
    z_values = [[None if math.isnan(value) else value for value in row] for row in z.tolist()]
    colorscale = [(0.0, EMPTY_CELL_COLOR)]
    for level in range(1, LEVEL_FULL + 1):
        colorscale.append((level / LEVEL_FULL, hex_to_rgba(color, LEVEL_OPACITY[level])))

    fig = go.Figure(
        data=go.Heatmap(
            z=z_values,
            text=hover_text,
            hoverinfo="text",
            colorscale=colorscale,
            showscale=False,
            zmin=0,
            zmax=LEVEL_FULL,
            xgap=3,
            ygap=3,
        )
    )
    fig.update_layout(
        title=title,
        title_font=dict(color=PLOT_THEME["text_main"], size=14),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=PLOT_THEME["text_main"]),
        margin=dict(l=30, r=10, t=40, b=10),
        xaxis=dict(showgrid=False, zeroline=False, showticklabels=False),
        yaxis=dict(
            showgrid=False,
            zeroline=False,
            tickmode="array",
            tickvals=list(range(7)),
            ticktext=weekday_labels(grid.week_starts_on),
            autorange="reversed",
            tickfont=dict(color=PLOT_THEME["text_soft"], size=10),
        ),
        meta={"year": grid.year, "week_starts_on": WEEKDAY_NAMES[grid.week_starts_on]},
    )
    return fig
