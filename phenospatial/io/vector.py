# -*- coding: utf-8 -*-
"""Manages vector data I/O, supporting Shapefile, GeoJSON and GeoPackage as well as point tables.

Point tables are plain CSV files carrying longitude/latitude columns (phenometric downloads, site lists) and the
pipe-delimited GNIS (Geographic Names Information System) national file, which is published in NAD83.
"""

import logging
import os

import geopandas as gpd
import pandas as pd

from ..core.layer import Layer

logger = logging.getLogger(__name__)

VECTOR_DRIVERS = {
    ".shp": "ESRI Shapefile",
    ".geojson": "GeoJSON",
    ".json": "GeoJSON",
    ".gpkg": "GPKG",
}

GNIS_CRS = "EPSG:4269"
GNIS_COLUMNS = ["FEATURE_ID", "FEATURE_NAME", "FEATURE_CLASS", "STATE_ALPHA", "PRIM_LAT_DEC", "PRIM_LONG_DEC"]


def read_vector(vector_path):
    """Read a vector file into a GeoDataFrame.

    Parameters:
    -----------
    vector_path : str
        Path to the vector file

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        GeoDataFrame with vector data
    """
    return gpd.read_file(vector_path)


def read_vector_layer(vector_path, layer_name=None, layer_manager=None):
    """Read a vector file straight into a Layer."""
    gdf = read_vector(vector_path)
    name = layer_name or os.path.splitext(os.path.basename(vector_path))[0]
    layer = Layer.from_objects(gdf, name=name)
    layer.metadata = {"source": str(vector_path)}

    if layer_manager:
        layer_manager.add_layer(layer)

    return layer


def write_vector(gdf, output_path):
    """Write a GeoDataFrame to a vector file.

    Parameters:
    -----------
    gdf : geopandas.GeoDataFrame
        GeoDataFrame to write
    output_path : str
        Path to the output vector file; the extension picks the format
    """
    file_extension = os.path.splitext(output_path)[1].lower()

    if file_extension not in VECTOR_DRIVERS:
        raise ValueError(f"Unsupported vector format: {file_extension}")

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    gdf.to_file(output_path, driver=VECTOR_DRIVERS[file_extension])


def layer_to_vector(layer, output_path):
    """Save a layer's objects to a vector file."""
    if layer.objects is None:
        raise ValueError("Layer has no vector objects")

    write_vector(layer.objects, output_path)


def points_from_frame(df, lon_column="longitude", lat_column="latitude", crs="EPSG:4326"):
    """Turn a DataFrame with coordinate columns into a point GeoDataFrame.

    Rows without coordinates cannot be placed on a map and are dropped.
    """
    missing = {lon_column, lat_column} - set(df.columns)
    if missing:
        raise ValueError(f"Missing coordinate columns: {sorted(missing)}")

    located = df.dropna(subset=[lon_column, lat_column])
    dropped = len(df) - len(located)
    if dropped:
        logger.info("Dropped %d rows without coordinates", dropped)

    return gpd.GeoDataFrame(
        located.reset_index(drop=True),
        geometry=gpd.points_from_xy(located[lon_column], located[lat_column]),
        crs=crs,
    )


def read_points_csv(csv_path, lon_column="longitude", lat_column="latitude", crs="EPSG:4326", **read_kwargs):
    """Read a CSV file with coordinate columns into a point GeoDataFrame.

    Parameters:
    -----------
    csv_path : str
        Path to the CSV file
    lon_column, lat_column : str
        Names of the longitude (x) and latitude (y) columns
    crs : str
        Coordinate reference system of the coordinates
    **read_kwargs : dict
        Passed on to pandas.read_csv

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        Point features, one per located row
    """
    df = pd.read_csv(csv_path, **read_kwargs)
    return points_from_frame(df, lon_column=lon_column, lat_column=lat_column, crs=crs)


def read_gnis(gnis_path, feature_class=None, state=None):
    """Read a pipe-delimited GNIS file into point features.

    Parameters:
    -----------
    gnis_path : str
        Path to the GNIS text file
    feature_class : str or list of str, optional
        Keep only these feature classes (e.g. "Summit", "Lake")
    state : str or list of str, optional
        Keep only these two-letter state codes

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        GNIS features in NAD83 (EPSG:4269)
    """
    df = pd.read_csv(gnis_path, sep="|", dtype={"FEATURE_ID": str})

    missing = set(GNIS_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Not a GNIS file, missing columns: {sorted(missing)}")

    if feature_class is not None:
        classes = [feature_class] if isinstance(feature_class, str) else list(feature_class)
        df = df[df["FEATURE_CLASS"].isin(classes)]

    if state is not None:
        states = [state] if isinstance(state, str) else list(state)
        df = df[df["STATE_ALPHA"].isin(states)]

    # GNIS records features with unknown location at 0, 0
    unlocated = (df["PRIM_LAT_DEC"] == 0) & (df["PRIM_LONG_DEC"] == 0)
    if unlocated.any():
        logger.info("Dropped %d unlocated GNIS features", int(unlocated.sum()))
        df = df[~unlocated]

    return points_from_frame(df, lon_column="PRIM_LONG_DEC", lat_column="PRIM_LAT_DEC", crs=GNIS_CRS)
