# -*- coding: utf-8 -*-
"""Coordinate reference system handling for vector and raster layers.

Layers that are combined (joined, intersected, sampled) must share a CRS. Mixing, say, NAD83 GNIS points with a
WGS84 raster gives results that look plausible and are quietly wrong, so the combining operations call
:func:`check_same_crs` and fail with both CRS names in the message instead.
"""

import logging

import numpy as np
from pyproj import CRS, Transformer
from rasterio.crs import CRS as RasterioCRS
from rasterio.enums import Resampling
from rasterio.warp import calculate_default_transform, reproject

from .layer import register

logger = logging.getLogger(__name__)

RESAMPLING_METHODS = {
    "nearest": Resampling.nearest,
    "bilinear": Resampling.bilinear,
    "cubic": Resampling.cubic,
    "average": Resampling.average,
    "mode": Resampling.mode,
}


def to_pyproj(crs):
    """Normalize any CRS spelling (EPSG string, int, rasterio CRS, pyproj CRS) to a pyproj CRS."""
    if crs is None:
        return None
    if isinstance(crs, RasterioCRS):
        return CRS.from_wkt(crs.to_wkt())
    return CRS.from_user_input(crs)


def crs_equal(crs_a, crs_b):
    """Return True when two CRS definitions describe the same system."""
    a = to_pyproj(crs_a)
    b = to_pyproj(crs_b)
    if a is None or b is None:
        return a is b
    return a == b or a.equals(b, ignore_axis_order=True)


def crs_name(crs):
    pyproj_crs = to_pyproj(crs)
    if pyproj_crs is None:
        return "undefined"
    epsg = pyproj_crs.to_epsg()
    return f"EPSG:{epsg}" if epsg else pyproj_crs.name


def check_same_crs(*layers):
    """Raise ValueError if the layers do not all share one CRS."""
    for layer in layers:
        if layer.crs is None:
            raise ValueError(f"Layer '{layer.name}' has no CRS")

    first = layers[0]
    for other in layers[1:]:
        if not crs_equal(first.crs, other.crs):
            raise ValueError(
                f"CRS mismatch: '{first.name}' is {crs_name(first.crs)} but '{other.name}' is {crs_name(other.crs)}; "
                "reproject one of them first"
            )


def reproject_vector(source_layer, dst_crs, layer_manager=None, layer_name=None):
    """Reproject a vector layer to another coordinate reference system.

    Parameters:
    -----------
    source_layer : Layer
        Layer with vector objects
    dst_crs : str or CRS
        Target coordinate reference system
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with reprojected objects
    """
    if source_layer.objects is None:
        raise ValueError("Source layer must have vector objects")
    if source_layer.objects.crs is None:
        raise ValueError(f"Layer '{source_layer.name}' has no CRS, set one before reprojecting")

    if not layer_name:
        layer_name = f"{source_layer.name}_{crs_name(dst_crs).replace(':', '')}"

    result_layer = source_layer.derive(layer_name)
    result_layer.objects = source_layer.objects.to_crs(dst_crs)
    result_layer.crs = result_layer.objects.crs
    result_layer.metadata = {
        "operation": "reproject_vector",
        "src_crs": crs_name(source_layer.crs),
        "dst_crs": crs_name(dst_crs),
    }

    return register(result_layer, layer_manager)


def reproject_raster(source_layer, dst_crs, resolution=None, resampling="nearest", layer_manager=None, layer_name=None):
    """Warp a raster layer onto a grid in another coordinate reference system.

    Parameters:
    -----------
    source_layer : Layer
        Layer with raster data
    dst_crs : str or CRS
        Target coordinate reference system
    resolution : float or tuple, optional
        Output cell size in target units; derived from the source grid when omitted
    resampling : str
        One of "nearest", "bilinear", "cubic", "average", "mode". Use "nearest" for categories.
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with the warped raster
    """
    if source_layer.raster is None:
        raise ValueError("Source layer must have raster data")
    if resampling not in RESAMPLING_METHODS:
        raise ValueError(f"Unknown resampling '{resampling}', expected one of {sorted(RESAMPLING_METHODS)}")

    bands, height, width = source_layer.raster.shape
    dst_crs = RasterioCRS.from_user_input(dst_crs)

    dst_transform, dst_width, dst_height = calculate_default_transform(
        source_layer.crs,
        dst_crs,
        width,
        height,
        *source_layer.bounds,
        resolution=resolution,
    )

    nodata = source_layer.nodata
    if nodata is None and np.issubdtype(source_layer.raster.dtype, np.floating):
        nodata = np.nan

    destination = np.empty((bands, dst_height, dst_width), dtype=source_layer.raster.dtype)
    destination.fill(nodata if nodata is not None else 0)

    reproject(
        source=source_layer.raster,
        destination=destination,
        src_transform=source_layer.transform,
        src_crs=source_layer.crs,
        src_nodata=nodata,
        dst_transform=dst_transform,
        dst_crs=dst_crs,
        dst_nodata=nodata,
        resampling=RESAMPLING_METHODS[resampling],
    )

    if not layer_name:
        layer_name = f"{source_layer.name}_{crs_name(dst_crs).replace(':', '')}"

    result_layer = source_layer.derive(layer_name)
    result_layer.raster = destination
    result_layer.transform = dst_transform
    result_layer.crs = dst_crs
    result_layer.nodata = nodata
    result_layer.metadata = {
        "operation": "reproject_raster",
        "src_crs": crs_name(source_layer.crs),
        "dst_crs": crs_name(dst_crs),
        "resampling": resampling,
    }
    logger.info("Reprojected raster '%s' from %s to %s", source_layer.name, crs_name(source_layer.crs), crs_name(dst_crs))

    return register(result_layer, layer_manager)


def estimate_utm_crs(layer):
    """UTM zone CRS suited for metric work on the layer's extent."""
    if layer.objects is not None:
        return layer.objects.estimate_utm_crs()

    from pyproj.aoi import AreaOfInterest
    from pyproj.database import query_utm_crs_info

    west, south, east, north = bounds_lonlat(layer)
    utm_info = query_utm_crs_info(
        datum_name="WGS 84",
        area_of_interest=AreaOfInterest(west, south, east, north),
    )
    if not utm_info:
        raise ValueError(f"No UTM zone found for layer '{layer.name}'")
    return CRS.from_epsg(utm_info[0].code)


def bounds_lonlat(layer):
    """Layer bounds as (west, south, east, north) in geographic degrees."""
    left, bottom, right, top = layer.bounds
    transformer = Transformer.from_crs(to_pyproj(layer.crs), "EPSG:4326", always_xy=True)
    return transformer.transform_bounds(left, bottom, right, top)


def bounds_latlon(layer):
    """Layer bounds as [[south, west], [north, east]], the order folium expects."""
    west, south, east, north = bounds_lonlat(layer)
    return [[south, west], [north, east]]
