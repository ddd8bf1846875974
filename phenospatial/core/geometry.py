# -*- coding: utf-8 -*-
"""Vector geometry operations used in the vector lesson.

Buffers, point-in-polygon joins and intersections are delegated to geopandas/shapely; distances between geographic
coordinates are great-circle (haversine) distances on a spherical Earth.
"""

import logging

import geopandas as gpd
import numpy as np

from .layer import register
from .projection import check_same_crs, estimate_utm_crs, to_pyproj

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def buffer_points(source_layer, distance_m, quad_segs=16, layer_manager=None, layer_name=None):
    """Buffer every feature of a layer by a distance in metres.

    Geographic layers (degrees) are projected to their UTM zone for the buffer and projected back afterwards,
    so the buffer is round on the ground rather than in degrees.

    Parameters:
    -----------
    source_layer : Layer
        Layer with vector objects
    distance_m : float
        Buffer distance in metres
    quad_segs : int
        Number of segments used to approximate a quarter circle
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with buffer polygons and the source attributes
    """
    if source_layer.objects is None:
        raise ValueError("Source layer must have vector objects")
    if distance_m < 0:
        raise ValueError(f"Buffer distance must be positive, got {distance_m}")

    objects = source_layer.objects
    src_crs = to_pyproj(objects.crs)
    if src_crs is None:
        raise ValueError(f"Layer '{source_layer.name}' has no CRS")

    if src_crs.is_geographic:
        work_crs = estimate_utm_crs(source_layer)
        buffered = objects.to_crs(work_crs)
        buffered = buffered.set_geometry(buffered.geometry.buffer(distance_m, quad_segs=quad_segs))
        buffered = buffered.to_crs(src_crs)
    else:
        work_crs = src_crs
        buffered = objects.copy()
        buffered = buffered.set_geometry(objects.geometry.buffer(distance_m, quad_segs=quad_segs))

    if not layer_name:
        layer_name = f"{source_layer.name}_buffer_{int(distance_m)}m"

    result_layer = source_layer.derive(layer_name)
    result_layer.objects = buffered
    result_layer.metadata = {
        "operation": "buffer",
        "distance_m": distance_m,
        "work_crs": work_crs.to_string(),
    }

    return register(result_layer, layer_manager)


def points_in_polygons(points_layer, polygons_layer, how="inner", layer_manager=None, layer_name=None):
    """Attach polygon attributes to the points that fall inside them.

    Parameters:
    -----------
    points_layer : Layer
        Layer with point objects
    polygons_layer : Layer
        Layer with polygon objects
    how : str
        "inner" keeps only points inside a polygon, "left" keeps all points
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Points with the attributes of their enclosing polygon
    """
    if how not in ("inner", "left"):
        raise ValueError(f"how must be 'inner' or 'left', got '{how}'")
    check_same_crs(points_layer, polygons_layer)

    joined = gpd.sjoin(points_layer.objects, polygons_layer.objects, how=how, predicate="within")
    # a point on a shared border matches both polygons
    joined = joined[~joined.index.duplicated(keep="first")]
    matched = int(joined["index_right"].notna().sum())
    joined = joined.drop(columns=["index_right"])

    if not layer_name:
        layer_name = f"{points_layer.name}_in_{polygons_layer.name}"

    result_layer = points_layer.derive(layer_name)
    result_layer.objects = joined
    result_layer.metadata = {
        "operation": "points_in_polygons",
        "polygons": polygons_layer.name,
        "how": how,
        "matched": matched,
    }

    return register(result_layer, layer_manager)


def intersect_layers(layer_a, layer_b, keep_geom_type=True, layer_manager=None, layer_name=None):
    """Intersect the features of two layers, keeping the attributes of both."""
    if layer_a.objects is None or layer_b.objects is None:
        raise ValueError("Both layers must have vector objects")
    check_same_crs(layer_a, layer_b)

    intersection = gpd.overlay(layer_a.objects, layer_b.objects, how="intersection", keep_geom_type=keep_geom_type)

    if not layer_name:
        layer_name = f"{layer_a.name}_x_{layer_b.name}"

    result_layer = layer_a.derive(layer_name)
    result_layer.objects = intersection
    result_layer.metadata = {"operation": "intersection", "other": layer_b.name}

    return register(result_layer, layer_manager)


def great_circle_distance(lon1, lat1, lon2, lat2, radius_km=EARTH_RADIUS_KM):
    """Haversine distance in kilometres between coordinates given in degrees.

    Accepts scalars or arrays and broadcasts them with numpy rules.
    """
    lon1, lat1, lon2, lat2 = (np.radians(np.asarray(v, dtype=float)) for v in (lon1, lat1, lon2, lat2))

    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = np.sin(dlat / 2.0) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2.0) ** 2

    return 2.0 * radius_km * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def _lonlat(objects):
    geographic = objects.to_crs("EPSG:4326") if not to_pyproj(objects.crs).is_geographic else objects
    points = geographic.geometry.representative_point()
    return points.x.to_numpy(), points.y.to_numpy()


def distance_to_nearest(points_layer, features_layer, name_column=None, layer_manager=None, layer_name=None):
    """Great-circle distance from every point to its nearest feature.

    Both layers are converted to geographic coordinates for the computation, so they may come in different CRSs.

    Parameters:
    -----------
    points_layer : Layer
        Layer with the points to measure from
    features_layer : Layer
        Layer with candidate features (polygons and lines are measured at a representative point)
    name_column : str, optional
        Column of ``features_layer`` copied to ``nearest_name``

    Returns:
    --------
    result_layer : Layer
        Points with ``nearest_km`` (and ``nearest_name``) columns
    """
    if points_layer.objects is None or features_layer.objects is None:
        raise ValueError("Both layers must have vector objects")
    if len(features_layer.objects) == 0:
        raise ValueError(f"Layer '{features_layer.name}' has no features to measure to")
    if name_column and name_column not in features_layer.objects.columns:
        raise ValueError(f"Column '{name_column}' not found in layer objects")

    p_lon, p_lat = _lonlat(points_layer.objects)
    f_lon, f_lat = _lonlat(features_layer.objects)

    distances = great_circle_distance(p_lon[:, None], p_lat[:, None], f_lon[None, :], f_lat[None, :])
    nearest = distances.argmin(axis=1)

    objects = points_layer.objects.copy()
    objects["nearest_km"] = distances[np.arange(len(nearest)), nearest]
    if name_column:
        objects["nearest_name"] = features_layer.objects[name_column].to_numpy()[nearest]

    if not layer_name:
        layer_name = f"{points_layer.name}_nearest_{features_layer.name}"

    result_layer = points_layer.derive(layer_name)
    result_layer.objects = objects
    result_layer.metadata = {"operation": "distance_to_nearest", "features": features_layer.name}

    return register(result_layer, layer_manager)
