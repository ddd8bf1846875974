# -*- coding: utf-8 -*-
import matplotlib.pyplot as plt
import pytest
from matplotlib.backend_bases import MouseEvent

from phenospatial import (
    extract_values,
    plot_categories,
    plot_comparison,
    plot_histogram,
    plot_layer,
    plot_raster_interactive,
    plot_scatter,
    reproject_raster,
)


def test_plot_layer_raster_and_vector(grid_layer, points_layer):
    raster_fig = plot_layer(grid_layer)
    assert raster_fig.axes[0].get_title() == "grid"

    overlay_fig = plot_layer(points_layer, raster_layer=grid_layer, attribute="name", title="Sites")
    assert overlay_fig.axes[0].get_title() == "Sites"
    assert "EPSG:4326" in overlay_fig.axes[0].get_xlabel()

    with pytest.raises(ValueError, match="Attribute"):
        plot_layer(points_layer, attribute="missing")


def test_plot_categories_uses_given_colors(points_layer, halves_layer):
    fig = plot_categories(points_layer, "name", class_color={"inside": "#d95f02"}, background=halves_layer)

    legend = fig.axes[0].get_legend()
    assert [text.get_text() for text in legend.get_texts()] == ["nodata", "inside", "outside"]
    with pytest.raises(ValueError):
        plot_categories(points_layer, "species")


def test_plot_comparison(grid_layer):
    fig = plot_comparison(grid_layer, reproject_raster(grid_layer, "EPSG:3857"), title="Before and after")

    titles = [ax.get_title() for ax in fig.axes if ax.get_title()]
    assert titles[0].endswith("EPSG:4326")
    assert titles[1].endswith("EPSG:3857")
    assert fig._suptitle.get_text() == "Before and after"


def test_charts(grid_layer, points_layer):
    sampled = extract_values(grid_layer, points_layer, column="predicted")
    sampled.objects["observed"] = [10.0, 60.0, 70.0]

    histogram = plot_histogram(sampled, "observed", bins=5, by_class="name")
    assert histogram.axes[0].get_xlabel() == "observed"

    scatter = plot_scatter(sampled, "predicted", "observed", color_by="name", one_to_one=True)
    assert scatter.axes[0].get_title() == "observed vs predicted"

    with pytest.raises(ValueError):
        plot_scatter(sampled, "predicted", "missing")
    plt.close("all")


def _click(fig, ax, x, y):
    fig.canvas.draw()
    px, py = ax.transData.transform((x, y))
    event = MouseEvent("button_press_event", fig.canvas, px, py, button=1)
    fig.canvas.callbacks.process("button_press_event", event)


def test_interactive_viewer_reports_clicked_cell(grid_layer, monkeypatch):
    monkeypatch.setattr("phenospatial.viz.maps.display", lambda *args, **kwargs: None)

    fig = plot_raster_interactive(grid_layer)
    ax = fig.axes[0]
    assert ax.get_title() == "grid band 1"

    _click(fig, ax, -109.45, 34.45)
    assert "row 5, col 5" in ax.get_title()
    assert "55.0" in ax.get_title()

    ax.set_xlim(-111.0, -108.5)
    _click(fig, ax, -110.5, 34.5)
    assert ax.get_title() == "Clicked outside raster bounds"
