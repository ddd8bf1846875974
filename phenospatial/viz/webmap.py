# -*- coding: utf-8 -*-
"""Interactive web maps built with folium.

The map carries tiled basemaps, circle markers colored by a category, an optional raster drawn as an image overlay,
a legend, a title, a layer switcher and a click handler that reports the raster value under the cursor. The result
is a standalone HTML page.
"""

import base64
import html
import io
import json
import logging
import os

import branca.colormap as cm
import folium
import matplotlib
import numpy as np
import pandas as pd
from branca.element import MacroElement, Template
from matplotlib.colors import to_hex
from PIL import Image

from ..core.palette import continuous_colors, factor_palette, map_colors
from ..core.projection import bounds_latlon, crs_equal, reproject_raster, to_pyproj
from ..core.raster_ops import crop_raster

logger = logging.getLogger(__name__)

MAX_QUERY_CELLS = 250_000


def raster_to_png(layer, band=1, cmap="viridis", vmin=None, vmax=None):
    """Render one band to an RGBA PNG data URL; nodata and NaN cells are transparent.

    Returns:
    --------
    url, vmin, vmax : str, float, float
        The data URL and the value range mapped onto the colormap
    """
    data = layer.raster[band - 1].astype(float)
    if layer.nodata is not None and not np.isnan(layer.nodata):
        data[data == layer.nodata] = np.nan

    valid = ~np.isnan(data)
    if not valid.any():
        raise ValueError(f"Raster '{layer.name}' has no valid cells to draw")

    vmin = float(np.nanmin(data)) if vmin is None else vmin
    vmax = float(np.nanmax(data)) if vmax is None else vmax
    scaled = np.clip((data - vmin) / ((vmax - vmin) or 1.0), 0, 1)

    rgba = matplotlib.colormaps[cmap](np.nan_to_num(scaled))
    rgba[..., 3] = np.where(valid, 1.0, 0.0)

    buffer = io.BytesIO()
    Image.fromarray((rgba * 255).astype(np.uint8)).save(buffer, format="PNG")
    url = "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")
    return url, vmin, vmax


class PixelQuery(MacroElement):
    """Click handler that shows the raster value under the clicked location in a popup."""

    _template = Template(
        """
        {% macro script(this, kwargs) %}
        (function() {
            var grid = {{ this.values_json }};
            var west = {{ this.west }}, north = {{ this.north }};
            var dx = {{ this.dx }}, dy = {{ this.dy }};
            var map = {{ this._parent.get_name() }};
            map.on('click', function(e) {
                var col = Math.floor((e.latlng.lng - west) / dx);
                var row = Math.floor((north - e.latlng.lat) / dy);
                var value = null;
                if (row >= 0 && row < grid.length && col >= 0 && col < grid[0].length) {
                    value = grid[row][col];
                }
                var text = (value === null ? 'No data' : {{ this.label_json }} + ': ' + value)
                    + '<br>' + e.latlng.lat.toFixed(4) + ', ' + e.latlng.lng.toFixed(4);
                L.popup().setLatLng(e.latlng).setContent(text).openOn(map);
            });
        })();
        {% endmacro %}
        """
    )

    def __init__(self, values, transform, label="Value", precision=2):
        super().__init__()
        self._name = "PixelQuery"
        rounded = np.round(values.astype(float), precision)
        cells = [[None if np.isnan(v) else float(v) for v in row] for row in rounded]
        self.values_json = json.dumps(cells)
        self.label_json = json.dumps(html.escape(label))
        self.west = transform.c
        self.north = transform.f
        self.dx = transform.a
        self.dy = -transform.e


def _geographic_grid(raster_layer):
    if crs_equal(raster_layer.crs, "EPSG:4326"):
        return raster_layer
    return reproject_raster(raster_layer, "EPSG:4326")


def add_pixel_query(fmap, raster_layer, band=1, label=None, precision=2):
    """Let users click the map to read raster values.

    The grid is embedded in the page, so large rasters should be cropped first.
    """
    grid = _geographic_grid(raster_layer)
    height, width = grid.shape
    if height * width > MAX_QUERY_CELLS:
        raise ValueError(f"Raster '{raster_layer.name}' has {height * width} cells, crop it below {MAX_QUERY_CELLS} for queries")

    values = grid.raster[band - 1].astype(float)
    if grid.nodata is not None and not np.isnan(grid.nodata):
        values[values == grid.nodata] = np.nan

    PixelQuery(values, grid.transform, label=label or raster_layer.name, precision=precision).add_to(fmap)
    return fmap


def _query_grid(raster_layer, extent):
    """Geographic grid around ``extent`` (a GeoDataFrame) padded by one cell, or None when they do not overlap."""
    left, bottom, right, top = extent.to_crs(to_pyproj(raster_layer.crs)).total_bounds
    dx, dy = abs(raster_layer.transform.a), abs(raster_layer.transform.e)
    left, bottom, right, top = left - dx, bottom - dy, right + dx, top + dy

    r_left, r_bottom, r_right, r_top = raster_layer.bounds
    if left >= r_right or right <= r_left or bottom >= r_top or top <= r_bottom:
        return None

    cropped = crop_raster(raster_layer, bounds=(left, bottom, right, top), layer_name=f"{raster_layer.name}_query")
    return _geographic_grid(cropped)


def _colorbar(cmap, vmin, vmax, caption):
    colormap = matplotlib.colormaps[cmap]
    return cm.LinearColormap(
        [to_hex(colormap(x)) for x in np.linspace(0, 1, 8)],
        vmin=vmin,
        vmax=vmax,
        caption=caption,
    )


def add_raster_overlay(fmap, raster_layer, band=1, cmap="viridis", opacity=0.6, name=None, caption=None):
    """Draw a raster band as an image overlay with a matching colorbar."""
    mercator = raster_layer if crs_equal(raster_layer.crs, "EPSG:3857") else reproject_raster(raster_layer, "EPSG:3857")
    url, vmin, vmax = raster_to_png(mercator, band=band, cmap=cmap)

    folium.raster_layers.ImageOverlay(
        name=name or raster_layer.name,
        image=url,
        bounds=bounds_latlon(mercator),
        opacity=opacity,
        interactive=False,
        cross_origin=False,
    ).add_to(fmap)

    _colorbar(cmap, vmin, vmax, caption or raster_layer.name).add_to(fmap)
    return fmap


def add_legend(fmap, palette, title=None):
    """Fixed legend box (bottom right) listing category colors."""
    legend_items = "".join(
        f'<div style="display:flex;align-items:center;margin:2px 0;">'
        f'<span style="display:inline-block;width:12px;height:12px;border-radius:50%;background:{color};margin-right:6px;"></span>'
        f'<span style="font-size:12px">{html.escape(str(category))}</span></div>'
        for category, color in palette.items()
    )
    heading = f'<div style="font-size:12px;font-weight:700;margin-bottom:6px;">{html.escape(title)}</div>' if title else ""
    legend_html = f"""
    <div style="
        position: fixed;
        bottom: 30px; right: 20px; z-index: 9999;
        background: rgba(255,255,255,.95);
        padding: 8px 10px; border: 1px solid rgba(0,0,0,.15);
        border-radius: 8px; box-shadow: 0 4px 14px rgba(0,0,0,.08);
    ">
        {heading}
        {legend_items}
    </div>
    """
    fmap.get_root().html.add_child(folium.Element(legend_html))
    return fmap


def add_title(fmap, title):
    """Title banner centred at the top of the map."""
    title_html = f"""
    <div style="
        position: fixed;
        top: 10px; left: 50%; transform: translateX(-50%); z-index: 9999;
        background: rgba(255,255,255,.9);
        padding: 6px 14px; border-radius: 6px;
        font-size: 18px; font-weight: 700;
    ">{html.escape(title)}</div>
    """
    fmap.get_root().html.add_child(folium.Element(title_html))
    return fmap


def _popup_html(row, columns):
    lines = []
    for column in columns:
        value = row[column]
        if isinstance(value, float):
            value = "N/A" if np.isnan(value) else f"{value:.2f}"
        lines.append(f"<b>{html.escape(str(column))}:</b> {html.escape(str(value))}")
    return '<div style="font-size:13px; line-height:1.35;">' + "<br>".join(lines) + "</div>"


def build_web_map(
    points_layer,
    color_column=None,
    palette="tab10",
    title=None,
    raster_layer=None,
    raster_cmap="viridis",
    outline_layer=None,
    popup_columns=None,
    tiles="OpenStreetMap",
    zoom_start=6,
    overlay_opacity=0.6,
    query_raster=True,
):
    """Assemble an interactive map of point observations.

    Parameters:
    -----------
    points_layer : Layer
        Point features; reprojected to WGS84 for display
    color_column : str, optional
        Column coloring the markers: categories get a legend, numeric values a colorbar
    palette : str, list or dict
        Passed to :func:`factor_palette`; for a numeric column, the name of a continuous colormap
    title : str, optional
        Title banner text
    raster_layer : Layer, optional
        Raster drawn underneath the points
    outline_layer : Layer, optional
        Polygons drawn as outlines (e.g. a state boundary)
    popup_columns : list of str, optional
        Columns listed in each marker popup
    tiles : str
        Basemap tiles; "CartoDB positron" and "OpenTopoMap" are added as alternatives in the layer control
    query_raster : bool
        Add the click-to-query handler for ``raster_layer``. Only the cells around the points are embedded; when
        those exceed ``MAX_QUERY_CELLS`` a coordinate popup is used instead.

    Returns:
    --------
    fmap : folium.Map
        The map, ready for :func:`save_web_map` or display in a notebook
    """
    if points_layer.objects is None:
        raise ValueError("Points layer must have vector objects")
    if points_layer.objects.empty:
        raise ValueError(f"Layer '{points_layer.name}' has no features to map")

    points = points_layer.objects.to_crs("EPSG:4326")
    if color_column and color_column not in points.columns:
        raise ValueError(f"Column '{color_column}' not found in layer objects")
    popup_columns = [c for c in (popup_columns or []) if c in points.columns]

    west, south, east, north = points.total_bounds
    fmap = folium.Map(location=[(south + north) / 2, (west + east) / 2], zoom_start=zoom_start, tiles=tiles)
    for extra_tiles in ("CartoDB positron", "OpenTopoMap"):
        if extra_tiles != tiles:
            folium.TileLayer(extra_tiles, name=extra_tiles).add_to(fmap)

    if raster_layer is not None:
        add_raster_overlay(fmap, raster_layer, cmap=raster_cmap, opacity=overlay_opacity)

    if outline_layer is not None:
        folium.GeoJson(
            outline_layer.objects.to_crs("EPSG:4326"),
            name=outline_layer.name,
            style_function=lambda feature: {"color": "#333333", "weight": 2, "fillOpacity": 0},
        ).add_to(fmap)

    colors_by_category = None
    if color_column and pd.api.types.is_numeric_dtype(points[color_column]):
        values = points[color_column].astype(float)
        cmap = palette if isinstance(palette, str) else "viridis"
        colors = ["#777777"] * len(points)
        if values.notna().any():
            colors = [color or "#777777" for color in continuous_colors(values, cmap=cmap)]
            _colorbar(cmap, float(values.min()), float(values.max()), color_column).add_to(fmap)
    elif color_column:
        colors_by_category = factor_palette(points[color_column], palette=palette)
        colors = map_colors(points[color_column], colors_by_category, missing_color="#777777")
    else:
        colors = ["#377eb8"] * len(points)

    group = folium.FeatureGroup(name=points_layer.name)
    for (_, row), color in zip(points.iterrows(), colors):
        popup = folium.Popup(_popup_html(row, popup_columns), max_width=280) if popup_columns else None
        folium.CircleMarker(
            location=[row.geometry.y, row.geometry.x],
            radius=6,
            color="#222222",
            weight=1,
            fill=True,
            fill_color=color,
            fill_opacity=0.85,
            popup=popup,
            tooltip=str(row[color_column]) if color_column else None,
        ).add_to(group)
    group.add_to(fmap)

    if colors_by_category:
        add_legend(fmap, colors_by_category, title=color_column)
    if title:
        add_title(fmap, title)

    query_grid = None
    if raster_layer is not None and query_raster:
        query_grid = _query_grid(raster_layer, points)
        if query_grid is None:
            logger.warning("Raster '%s' does not cover the mapped features, pixel query disabled", raster_layer.name)
        elif query_grid.shape[0] * query_grid.shape[1] > MAX_QUERY_CELLS:
            logger.warning(
                "Raster '%s' needs %d cells around the mapped features (limit %d), pixel query disabled",
                raster_layer.name,
                query_grid.shape[0] * query_grid.shape[1],
                MAX_QUERY_CELLS,
            )
            query_grid = None

    if query_grid is not None:
        add_pixel_query(fmap, query_grid, label=raster_layer.name)
    else:
        folium.LatLngPopup().add_to(fmap)

    folium.LayerControl(collapsed=False).add_to(fmap)
    fmap.fit_bounds([[south, west], [north, east]])
    return fmap


def save_web_map(fmap, output_path):
    """Write the map to a standalone HTML file."""
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fmap.save(output_path)
    return output_path
