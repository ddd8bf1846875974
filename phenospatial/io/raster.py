# -*- coding: utf-8 -*-
"""Handles raster input and output operations, including reading and saving single and multi-band GeoTIFFs.

Vector layers can also be burnt into a grid so that categorical polygons line up cell for cell with a raster.
"""

import logging
import os

import numpy as np
import pandas as pd
import rasterio
from rasterio import features
from rasterio.transform import from_origin

from ..core.layer import Layer

logger = logging.getLogger(__name__)


def read_raster(raster_path):
    """Read a raster file and return its data, transform, and CRS.

    Parameters:
    -----------
    raster_path : str
        Path to the raster file

    Returns:
    --------
    image_data : numpy.ndarray
        Array with raster data values (bands, height, width)
    transform : affine.Affine
        Affine transformation for the raster
    crs : rasterio.crs.CRS
        Coordinate reference system
    """
    with rasterio.open(raster_path) as src:
        image_data = src.read()
        transform = src.transform
        crs = src.crs

    return image_data, transform, crs


def read_raster_layer(raster_path, layer_name=None, layer_manager=None):
    """Read a raster file into a Layer, keeping its nodata value and band descriptions."""
    with rasterio.open(raster_path) as src:
        layer = Layer.from_raster(
            src.read(),
            src.transform,
            src.crs,
            nodata=src.nodata,
            name=layer_name or os.path.splitext(os.path.basename(raster_path))[0],
        )
        layer.metadata = {
            "source": str(raster_path),
            "descriptions": list(src.descriptions),
            "dtype": src.dtypes[0],
            "resolution": src.res,
        }

    if layer_manager:
        layer_manager.add_layer(layer)

    return layer


def write_raster(output_path, data, transform, crs, nodata=None):
    """Write raster data to a GeoTIFF file.

    Parameters:
    -----------
    output_path : str
        Path to the output raster file
    data : numpy.ndarray
        Array with raster data values, (height, width) or (bands, height, width)
    transform : affine.Affine
        Affine transformation for the raster
    crs : rasterio.crs.CRS
        Coordinate reference system
    nodata : int or float, optional
        No data value
    """
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if len(data.shape) == 2:
        data = data.reshape(1, *data.shape)

    count, height, width = data.shape

    with rasterio.open(
        output_path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=count,
        dtype=data.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata,
    ) as dst:
        dst.write(data)


def layer_to_raster(layer, output_path, column=None, nodata=0, resolution=None):
    """Save a layer to a raster file.

    Parameters:
    -----------
    layer : Layer
        Layer to save
    output_path : str
        Path to the output raster file
    column : str, optional
        Column to rasterize (if saving from vector objects)
    nodata : int or float, optional
        No data value
    resolution : float, optional
        Cell size used when a vector layer has no grid of its own

    Returns:
    --------
    value_map : dict
        Category to integer code mapping when a non-numeric column was rasterized, otherwise empty
    """
    if layer.raster is not None and column is None:
        write_raster(output_path, layer.raster, layer.transform, layer.crs, layer.nodata if layer.nodata is not None else nodata)
        return {}

    if layer.objects is None or column is None:
        raise ValueError("Layer must have either raster data or objects with a specified column")

    if column not in layer.objects.columns:
        raise ValueError(f"Column '{column}' not found in layer objects")

    objects = layer.objects
    col_values = objects[column]
    value_map = {}

    if pd.api.types.is_numeric_dtype(col_values):
        shapes = [(geom, float(val)) for geom, val in zip(objects.geometry, col_values)]
    else:
        # codes start at 1 so that 0 stays free for nodata
        value_map = {val: idx + 1 for idx, val in enumerate(col_values.dropna().unique())}
        logger.info("Mapping categorical values: %s", value_map)
        shapes = [(geom, value_map[val]) for geom, val in zip(objects.geometry, col_values) if val in value_map]

    transform = layer.transform
    if layer.raster is not None:
        out_shape = layer.shape
    else:
        left, bottom, right, top = objects.total_bounds
        if resolution is None:
            resolution = abs(transform.a) if transform is not None else (right - left) / 100
        width = max(int(np.ceil((right - left) / resolution)), 1)
        height = max(int(np.ceil((top - bottom) / resolution)), 1)
        out_shape = (height, width)
        if transform is None:
            transform = from_origin(left, top, resolution, resolution)

    output = np.full(out_shape, nodata, dtype=np.float32)
    features.rasterize(shapes, out=output, transform=transform, fill=nodata)

    write_raster(output_path, output, transform, layer.crs, nodata)
    return value_map
