# -*- coding: utf-8 -*-
"""Raster operations: cropping to an extent or outline, reading cell values at point locations, and single-pixel
queries for interactive maps."""

import logging

import numpy as np
from pyproj import Transformer
from rasterio import features, windows

from .layer import register
from .projection import crs_equal, crs_name, to_pyproj

logger = logging.getLogger(__name__)


def _grid_window(layer, left, bottom, right, top):
    """Window of whole cells covering the bounds, clipped to the grid."""
    height, width = layer.shape
    window = windows.from_bounds(left, bottom, right, top, transform=layer.transform)

    col_start = max(int(np.floor(window.col_off + 1e-9)), 0)
    row_start = max(int(np.floor(window.row_off + 1e-9)), 0)
    col_stop = min(int(np.ceil(window.col_off + window.width - 1e-9)), width)
    row_stop = min(int(np.ceil(window.row_off + window.height - 1e-9)), height)

    if col_stop <= col_start or row_stop <= row_start:
        raise ValueError(f"Bounds {(left, bottom, right, top)} do not overlap raster '{layer.name}' {layer.bounds}")

    return windows.Window(col_start, row_start, col_stop - col_start, row_stop - row_start)


def _nodata_fill(layer):
    if layer.nodata is not None:
        return layer.nodata
    if np.issubdtype(layer.raster.dtype, np.floating):
        return np.nan
    raise ValueError(f"Raster '{layer.name}' is an integer grid without a nodata value; set layer.nodata to mask it")


def crop_raster(source_layer, bounds=None, geometry=None, layer_manager=None, layer_name=None):
    """Crop a raster to a bounding box and optionally mask everything outside a geometry.

    Parameters:
    -----------
    source_layer : Layer
        Layer with raster data
    bounds : tuple, optional
        (left, bottom, right, top) in the raster's CRS
    geometry : Layer, optional
        Vector layer whose features outline the area to keep. It is reprojected to the raster CRS when needed,
        and its extent is used when ``bounds`` is not given.
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with the cropped raster
    """
    if source_layer.raster is None:
        raise ValueError("Source layer must have raster data")
    if bounds is None and geometry is None:
        raise ValueError("Provide bounds, a geometry layer, or both")

    shapes = None
    if geometry is not None:
        if geometry.objects is None:
            raise ValueError("Geometry layer must have vector objects")
        outline = geometry.objects
        if not crs_equal(outline.crs, source_layer.crs):
            logger.info("Reprojecting '%s' to %s for cropping", geometry.name, crs_name(source_layer.crs))
            outline = outline.to_crs(to_pyproj(source_layer.crs))
        shapes = list(outline.geometry)
        if bounds is None:
            bounds = tuple(outline.total_bounds)

    window = _grid_window(source_layer, *bounds)
    rows, cols = window.toslices()
    cropped = source_layer.raster[:, rows, cols].copy()
    transform = windows.transform(window, source_layer.transform)

    nodata = source_layer.nodata
    if shapes is not None:
        nodata = _nodata_fill(source_layer)
        outside = features.geometry_mask(shapes, out_shape=cropped.shape[-2:], transform=transform)
        cropped[:, outside] = nodata

    if not layer_name:
        layer_name = f"{source_layer.name}_cropped"

    result_layer = source_layer.derive(layer_name)
    result_layer.raster = cropped
    result_layer.transform = transform
    result_layer.nodata = nodata
    result_layer.metadata = {
        "operation": "crop",
        "bounds": tuple(float(b) for b in bounds),
        "masked": shapes is not None,
    }

    return register(result_layer, layer_manager)


def _cell_indices(layer, xs, ys):
    cols, rows = ~layer.transform * (np.asarray(xs, dtype=float), np.asarray(ys, dtype=float))
    return np.floor(rows).astype(int), np.floor(cols).astype(int)


def _valid_value(layer, value):
    if layer.nodata is not None and not np.isnan(layer.nodata) and value == layer.nodata:
        return np.nan
    return float(value)


def extract_values(raster_layer, points_layer, band=1, column="value", layer_manager=None, layer_name=None):
    """Read the raster value under every point.

    Points are reprojected to the raster CRS when the two differ. Points outside the grid and points on nodata
    cells get NaN.

    Parameters:
    -----------
    raster_layer : Layer
        Layer with raster data
    points_layer : Layer
        Layer with point objects
    band : int
        1-based band number
    column : str
        Name of the new column

    Returns:
    --------
    result_layer : Layer
        Copy of the points with the extracted values in ``column``
    """
    if raster_layer.raster is None:
        raise ValueError("Raster layer must have raster data")
    if points_layer.objects is None:
        raise ValueError("Points layer must have vector objects")
    if not 1 <= band <= raster_layer.raster.shape[0]:
        raise ValueError(f"Band {band} out of range, raster has {raster_layer.raster.shape[0]} band(s)")

    points = points_layer.objects
    if not crs_equal(points.crs, raster_layer.crs):
        logger.info("Reprojecting '%s' to %s for sampling", points_layer.name, crs_name(raster_layer.crs))
        points = points.to_crs(to_pyproj(raster_layer.crs))

    height, width = raster_layer.shape
    rows, cols = _cell_indices(raster_layer, points.geometry.x.to_numpy(), points.geometry.y.to_numpy())
    inside = (rows >= 0) & (rows < height) & (cols >= 0) & (cols < width)

    values = np.full(len(points), np.nan)
    grid = raster_layer.raster[band - 1]
    values[inside] = grid[rows[inside], cols[inside]]
    if raster_layer.nodata is not None and not np.isnan(raster_layer.nodata):
        values[values == raster_layer.nodata] = np.nan

    outside = int((~inside).sum())
    if outside:
        logger.info("%d point(s) of '%s' fall outside raster '%s'", outside, points_layer.name, raster_layer.name)

    objects = points_layer.objects.copy()
    objects[column] = values

    if not layer_name:
        layer_name = f"{points_layer.name}_{column}"

    result_layer = points_layer.derive(layer_name)
    result_layer.objects = objects
    result_layer.metadata = {"operation": "extract_values", "raster": raster_layer.name, "band": band}

    return register(result_layer, layer_manager)


def query_pixel(raster_layer, x, y, crs=None, band=1):
    """Look up the cell under one coordinate.

    Parameters:
    -----------
    raster_layer : Layer
        Layer with raster data
    x, y : float
        Coordinate, in ``crs`` when given, else in the raster's CRS
    crs : str or CRS, optional
        CRS of the coordinate (e.g. "EPSG:4326" for a web map click)

    Returns:
    --------
    pixel : dict or None
        {"row", "col", "value"} or None when the coordinate is outside the grid
    """
    if raster_layer.raster is None:
        raise ValueError("Raster layer must have raster data")

    if crs is not None and not crs_equal(crs, raster_layer.crs):
        transformer = Transformer.from_crs(to_pyproj(crs), to_pyproj(raster_layer.crs), always_xy=True)
        x, y = transformer.transform(x, y)

    height, width = raster_layer.shape
    row, col = (int(v) for v in _cell_indices(raster_layer, x, y))
    if not (0 <= row < height and 0 <= col < width):
        return None

    return {
        "row": row,
        "col": col,
        "value": _valid_value(raster_layer, raster_layer.raster[band - 1, row, col]),
    }
