from __future__ import annotations

import math

import pytest

from momentum.constants import MONDAY
from momentum.heatmap import build_year_grid
from momentum.visualizations import contribution_heatmap, heatmap_matrix, hex_to_rgba, weekday_labels


def test_hex_to_rgba():
    assert hex_to_rgba("#10B981", 0.5) == "rgba(16, 185, 129, 0.5)"
    assert hex_to_rgba("#fff", 1.0) == "rgba(255, 255, 255, 1.0)"
    with pytest.raises(ValueError):
        hex_to_rgba("#12345", 1.0)


def test_weekday_labels_follow_week_start():
    assert weekday_labels(6) == ["S", "M", "T", "W", "T", "F", "S"]
    assert weekday_labels(MONDAY) == ["M", "T", "W", "T", "F", "S", "S"]


def test_matrix_leaves_placeholders_empty():
    grid = build_year_grid({"2024-01-01": 5}, 2024)
    z, text = heatmap_matrix(grid)

    assert z.shape == (7, grid.week_count)
    assert math.isnan(z[0, 0])  # 2023-12-31 placeholder
    assert z[1, 0] == 3
    assert text[1][0] == "Jan 1, 2024: 5 completions"
    assert text[0][0] == ""


def test_contribution_heatmap_figure():
    grid = build_year_grid({"2024-03-01": 1}, 2024)
    fig = contribution_heatmap(grid, title="Habits", color="#10B981")

    assert len(fig.data) == 1
    assert fig.layout.title.text == "Habits"
    assert tuple(fig.layout.yaxis.ticktext) == ("S", "M", "T", "W", "T", "F", "S")
    assert fig.data[0].zmax == 3
