# -*- coding: utf-8 -*-
"""Functions to create static maps and an interactive raster viewer."""

import ipywidgets as widgets
import matplotlib.patches as mpatches
import matplotlib.pyplot as plt
import numpy as np
from IPython.display import display

from ..core.palette import factor_palette
from ..core.projection import crs_equal, crs_name, to_pyproj
from ..core.raster_ops import query_pixel


def _masked_band(layer, band=1):
    data = layer.raster[band - 1].astype(float)
    if layer.nodata is not None and not np.isnan(layer.nodata):
        data = np.where(data == layer.nodata, np.nan, data)
    return np.ma.masked_invalid(data)


def _extent(layer):
    left, bottom, right, top = layer.bounds
    return (left, right, bottom, top)


def _draw_raster(ax, layer, band=1, cmap="viridis", colorbar=True, label=None):
    image = ax.imshow(_masked_band(layer, band), extent=_extent(layer), cmap=cmap, origin="upper")
    if colorbar:
        cbar = plt.colorbar(image, ax=ax, shrink=0.8)
        if label:
            cbar.set_label(label)
    return image


def _objects_in(layer, crs):
    """The layer's objects expressed in ``crs`` so they overlay a raster drawn in that CRS."""
    if crs is None or crs_equal(layer.objects.crs, crs):
        return layer.objects
    return layer.objects.to_crs(to_pyproj(crs))


def plot_layer(
    layer,
    raster_layer=None,
    attribute=None,
    title=None,
    band=1,
    figsize=(12, 10),
    cmap="viridis",
    raster_cmap="Greys",
    markersize=30,
):
    """Plot a vector layer, a raster layer, or a vector layer on top of a raster backdrop.

    Parameters:
    -----------
    layer : Layer
        Layer to draw; vector objects or raster data
    raster_layer : Layer, optional
        Raster drawn underneath a vector layer; the vector is reprojected to the raster CRS for drawing
    attribute : str, optional
        Column used to color the vector objects
    title : str, optional
        Figure title
    band : int
        Raster band to draw

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    if title:
        ax.set_title(title)
    elif attribute:
        ax.set_title(f"{attribute} ({layer.name})")
    else:
        ax.set_title(layer.name)

    target_crs = layer.crs
    if layer.objects is None and layer.raster is not None:
        _draw_raster(ax, layer, band=band, cmap=cmap, label=layer.name)
    elif raster_layer is not None:
        _draw_raster(ax, raster_layer, band=band, cmap=raster_cmap, label=raster_layer.name)
        target_crs = raster_layer.crs

    if layer.objects is not None:
        objects = _objects_in(layer, target_crs if raster_layer is not None else None)
        if attribute:
            if attribute not in objects.columns:
                raise ValueError(f"Attribute '{attribute}' not found in layer objects")
            objects.plot(column=attribute, cmap=cmap, ax=ax, legend=True, markersize=markersize, edgecolor="black", linewidth=0.5)
        else:
            objects.plot(ax=ax, markersize=markersize, **_plain_style(objects))

    ax.set_xlabel(f"X ({crs_name(target_crs)})")
    ax.set_ylabel(f"Y ({crs_name(target_crs)})")
    ax.grid(alpha=0.3)
    return fig


def _plain_style(objects):
    """Outlines for polygons, filled markers for points and lines."""
    if objects.geom_type.isin(["Polygon", "MultiPolygon"]).all():
        return {"facecolor": "none", "edgecolor": "black"}
    return {"color": "tab:red", "edgecolor": "black"}


def plot_categories(layer, class_field, class_color=None, background=None, figsize=(12, 10), legend=True, markersize=40):
    """Plot features colored by a categorical column with a legend.

    Parameters:
    -----------
    layer : Layer
        Layer with vector objects
    class_field : str
        Categorical column
    class_color : dict, optional
        Category to color; categories not in it get colors from the default palette
    background : Layer, optional
        Vector layer (e.g. a state outline) drawn underneath in grey

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    if layer.objects is None or class_field not in layer.objects.columns:
        raise ValueError(f"Class field '{class_field}' not found in layer objects")

    fig, ax = plt.subplots(figsize=figsize)

    if background is not None:
        _objects_in(background, layer.crs).plot(ax=ax, color="#f0f0f0", edgecolor="grey", linewidth=0.8)

    palette = factor_palette(layer.objects[class_field], palette=class_color or "tab10")

    for value, color in palette.items():
        subset = layer.objects[layer.objects[class_field] == value]
        subset.plot(ax=ax, color=color, edgecolor="black", linewidth=0.5, markersize=markersize)

    if legend and palette:
        patches = [mpatches.Patch(color=color, label=str(value)) for value, color in palette.items()]
        ax.legend(handles=patches, loc="upper right", title=class_field)

    ax.set_title(f"{layer.name} by {class_field}")
    ax.set_xlabel(f"X ({crs_name(layer.crs)})")
    ax.set_ylabel(f"Y ({crs_name(layer.crs)})")

    return fig


def _draw_any(ax, layer, band=1, cmap="viridis"):
    if layer.raster is not None:
        _draw_raster(ax, layer, band=band, cmap=cmap)
    if layer.objects is not None:
        layer.objects.plot(ax=ax, **_plain_style(layer.objects))
    ax.set_title(f"{layer.name}\n{crs_name(layer.crs)}")


def plot_comparison(before_layer, after_layer, title=None, band=1, figsize=(16, 8), cmap="viridis"):
    """Plot two layers side by side, each in its own CRS (e.g. before and after reprojection or cropping)."""
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    if title:
        fig.suptitle(title)

    _draw_any(ax1, before_layer, band=band, cmap=cmap)
    _draw_any(ax2, after_layer, band=band, cmap=cmap)

    return fig


def plot_raster_interactive(layer, cmap="viridis"):
    """Interactive raster viewer: pick band and colormap, click a cell to read its value."""
    num_bands = layer.raster.shape[0]

    band_widget = widgets.Dropdown(options=list(range(1, num_bands + 1)), value=1, description="Band:")
    cmap_widget = widgets.Dropdown(options=["viridis", "magma", "RdYlGn", "Spectral", "Greys"], value=cmap, description="Colormap:")
    value_widget = widgets.Text(value="Click the map to query a cell", description="Cell:", disabled=True)

    fig, ax = plt.subplots(figsize=(12, 10))
    state = {"band": 1}

    def onclick(event):
        if event.inaxes is not ax or event.xdata is None or event.ydata is None:
            return
        pixel = query_pixel(layer, event.xdata, event.ydata, band=state["band"])
        if pixel is None:
            msg = "Clicked outside raster bounds"
        else:
            msg = f"x={event.xdata:.4f}, y={event.ydata:.4f} (row {pixel['row']}, col {pixel['col']}) -> {pixel['value']}"
        value_widget.value = msg
        ax.set_title(msg)
        fig.canvas.draw_idle()

    fig.canvas.mpl_connect("button_press_event", onclick)

    def update_plot(band, cmap):
        state["band"] = band
        ax.clear()
        ax.imshow(_masked_band(layer, band), extent=_extent(layer), cmap=cmap, origin="upper")
        ax.set_title(f"{layer.name} band {band}")
        ax.grid(alpha=0.3)
        fig.canvas.draw_idle()

    ui = widgets.VBox([band_widget, cmap_widget, value_widget])
    controls = widgets.interactive_output(update_plot, {"band": band_widget, "cmap": cmap_widget})

    display(ui, controls)
    return fig
